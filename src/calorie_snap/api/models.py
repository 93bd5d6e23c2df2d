"""Request models for the recognition API."""

from pydantic import AliasChoices, BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Analyze request body.

    ``image`` is canonical; ``base64Image`` is accepted for clients written
    against the older ``/api/recognize-food`` route.
    """

    image: str | None = Field(
        default=None, validation_alias=AliasChoices("image", "base64Image")
    )
    food_name: str | None = Field(
        default=None, validation_alias=AliasChoices("foodName", "food_name")
    )
