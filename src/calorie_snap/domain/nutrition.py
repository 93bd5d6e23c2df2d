"""Models for normalized recognition results."""

import math
import re
from enum import StrEnum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)

DEFAULT_FOOD_NAME = "Unrecognized food"
DEFAULT_CALORIE_ESTIMATE = "0kcal"
DEFAULT_CONFIDENCE = 0.8
DEFAULT_HEALTH_TIPS = "No health advice available; consult a nutritionist."
DEFAULT_GI_VALUE = 50

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


class DiabetesSuitability(StrEnum):
    """How suitable a food is for people with diabetes."""

    SUITABLE = "suitable"
    MODERATE = "moderate"
    UNSUITABLE = "unsuitable"
    UNKNOWN = "unknown"


_SUITABILITY_ALIASES: dict[str, DiabetesSuitability] = {
    "suitable": DiabetesSuitability.SUITABLE,
    "yes": DiabetesSuitability.SUITABLE,
    "适合": DiabetesSuitability.SUITABLE,
    "moderate": DiabetesSuitability.MODERATE,
    "moderately": DiabetesSuitability.MODERATE,
    "in moderation": DiabetesSuitability.MODERATE,
    "适量": DiabetesSuitability.MODERATE,
    "适量食用": DiabetesSuitability.MODERATE,
    "unsuitable": DiabetesSuitability.UNSUITABLE,
    "not suitable": DiabetesSuitability.UNSUITABLE,
    "no": DiabetesSuitability.UNSUITABLE,
    "不适合": DiabetesSuitability.UNSUITABLE,
}


def _drop_empty(data: object) -> object:
    """Remove null and blank values so field defaults apply."""
    if not isinstance(data, dict):
        return data
    return {
        key: value
        for key, value in data.items()
        if value is not None and not (isinstance(value, str) and not value.strip())
    }


def _finite(value: float) -> float | None:
    return value if math.isfinite(value) else None


class _DefaultingModel(BaseModel):
    """Base model where an invalid field takes its default instead of failing."""

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _defaults_for_missing(cls, data: object) -> object:
        return _drop_empty(data)

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_when_invalid(
        cls,
        value: object,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> object:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name or ""]
            return field.get_default(call_default_factory=True)


class NutritionBreakdown(_DefaultingModel):
    """Macro breakdown as free-form quantity strings, e.g. "12g"."""

    protein: str = "0g"
    carbs: str = "0g"
    fat: str = "0g"
    calories: str = "0kcal"

    @field_validator("protein", "carbs", "fat", "calories", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value


class NutritionRecord(_DefaultingModel):
    """Normalized result of a single recognition call.

    Each field is checked on its own: a missing, null, blank or malformed
    value takes that field's default while the rest of the reply is kept.
    """

    food_name: str = DEFAULT_FOOD_NAME
    calorie_estimate: int | float | str = DEFAULT_CALORIE_ESTIMATE
    confidence: float = DEFAULT_CONFIDENCE
    health_tips: str = DEFAULT_HEALTH_TIPS
    gi_value: int = DEFAULT_GI_VALUE
    suitable_for_diabetes: DiabetesSuitability = DiabetesSuitability.UNKNOWN
    nutrition: NutritionBreakdown = Field(default_factory=NutritionBreakdown)

    @field_validator("calorie_estimate", mode="before")
    @classmethod
    def _finite_calories(cls, value: object) -> object:
        if isinstance(value, float) and not math.isfinite(value):
            return DEFAULT_CALORIE_ESTIMATE
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_in_range(cls, value: object) -> float:
        if isinstance(value, bool):
            return DEFAULT_CONFIDENCE
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return DEFAULT_CONFIDENCE
        if not 0.0 <= number <= 1.0:
            return DEFAULT_CONFIDENCE
        return number

    @field_validator("gi_value", mode="before")
    @classmethod
    def _gi_as_int(cls, value: object) -> int:
        if isinstance(value, bool):
            return DEFAULT_GI_VALUE
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            number = _finite(value)
        else:
            match = _NUMBER.search(str(value))
            number = _finite(float(match.group())) if match else None
        if number is None:
            return DEFAULT_GI_VALUE
        return round(number)

    @field_validator("suitable_for_diabetes", mode="before")
    @classmethod
    def _suitability_from_text(cls, value: object) -> DiabetesSuitability:
        if isinstance(value, DiabetesSuitability):
            return value
        text = str(value).strip().lower()
        return _SUITABILITY_ALIASES.get(text, DiabetesSuitability.UNKNOWN)

    @property
    def calories(self) -> float:
        """Numeric calorie estimate in kcal."""
        return parse_quantity(self.calorie_estimate)


def parse_quantity(value: object) -> float:
    """Return the first number in a quantity such as "52kcal", or 0.0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    match = _NUMBER.search(str(value or ""))
    if match is None:
        return 0.0
    return float(match.group())


PLACEHOLDER_RECORD = NutritionRecord(
    food_name="Recognized food",
    calorie_estimate="100kcal",
    confidence=0.85,
    health_tips=(
        "This is an AI-based recognition result; "
        "consult a nutritionist for more precise advice."
    ),
    gi_value=50,
    suitable_for_diabetes=DiabetesSuitability.MODERATE,
    nutrition=NutritionBreakdown(
        protein="2g", carbs="15g", fat="3g", calories="100kcal"
    ),
)
