"""Domain models for the local recognition history."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from calorie_snap.domain.nutrition import NutritionRecord


class CalorieRecord(BaseModel):
    """One persisted entry representing a completed recognition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    date: date
    time: str
    timestamp: int
    food_name: str = Field(alias="foodName")
    calorie: float
    image_path: str | None = Field(default=None, alias="imagePath")
    confidence: float | None = None
    health_tips: str | None = Field(default=None, alias="healthTips")

    @classmethod
    def from_recognition(
        cls,
        result: NutritionRecord,
        *,
        image_path: str | None = None,
        now: datetime | None = None,
    ) -> "CalorieRecord":
        """Build a record for a successful recognition."""
        created = now or datetime.now()
        return cls(
            id=uuid4().hex,
            date=created.date(),
            time=created.strftime("%H:%M"),
            timestamp=int(created.timestamp() * 1000),
            food_name=result.food_name,
            calorie=result.calories,
            image_path=image_path,
            confidence=result.confidence,
            health_tips=result.health_tips,
        )

    def to_storage(self) -> dict[str, object]:
        """Serialize with the camelCase keys used in storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class DailyTotal:
    """Summed calories for a single calendar date."""

    day: date
    total: float


@dataclass(frozen=True)
class PeriodSummary:
    """Today's total and per-day averages over the last week and month."""

    today_total: float
    week_average: float
    month_average: float
