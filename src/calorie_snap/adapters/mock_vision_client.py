"""Canned vision replies for local testing without a provider key."""

import json
from dataclasses import dataclass, field

from calorie_snap.services.gateway import VisionClient

MOCK_CATALOG: dict[str, dict[str, object]] = {
    "apple": {
        "food_name": "apple",
        "calorie_estimate": 52,
        "confidence": 0.95,
        "health_tips": "Rich in fiber; eat with the skin on.",
        "gi_value": 36,
        "suitable_for_diabetes": "suitable",
        "nutrition": {
            "protein": "0.3g",
            "carbs": "14g",
            "fat": "0.2g",
            "calories": "52kcal",
        },
    },
    "chicken breast": {
        "food_name": "chicken breast",
        "calorie_estimate": 165,
        "confidence": 0.9,
        "health_tips": "Lean protein; prefer grilling or steaming over frying.",
        "gi_value": 0,
        "suitable_for_diabetes": "suitable",
        "nutrition": {
            "protein": "31g",
            "carbs": "0g",
            "fat": "3.6g",
            "calories": "165kcal",
        },
    },
    "rice": {
        "food_name": "rice",
        "calorie_estimate": 130,
        "confidence": 0.88,
        "health_tips": "Pair with vegetables and protein to slow absorption.",
        "gi_value": 73,
        "suitable_for_diabetes": "moderate",
        "nutrition": {
            "protein": "2.7g",
            "carbs": "28g",
            "fat": "0.3g",
            "calories": "130kcal",
        },
    },
    "yogurt": {
        "food_name": "yogurt",
        "calorie_estimate": 61,
        "confidence": 0.86,
        "health_tips": "Choose unsweetened varieties.",
        "gi_value": 35,
        "suitable_for_diabetes": "suitable",
        "nutrition": {
            "protein": "3.5g",
            "carbs": "4.7g",
            "fat": "3.3g",
            "calories": "61kcal",
        },
    },
    "broccoli": {
        "food_name": "broccoli",
        "calorie_estimate": 34,
        "confidence": 0.92,
        "health_tips": "High in fiber and vitamin C.",
        "gi_value": 15,
        "suitable_for_diabetes": "suitable",
        "nutrition": {
            "protein": "2.8g",
            "carbs": "7g",
            "fat": "0.4g",
            "calories": "34kcal",
        },
    },
}

DEFAULT_MOCK_FOOD = "apple"


@dataclass
class MockVisionClient(VisionClient):
    """Returns catalog entries chosen by the food-name hint."""

    catalog: dict[str, dict[str, object]] = field(
        default_factory=lambda: dict(MOCK_CATALOG)
    )
    default_food: str = DEFAULT_MOCK_FOOD

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        food_name_hint: str | None = None,
    ) -> str:
        """Return the hinted entry, or the default one, as a JSON reply."""
        key = (food_name_hint or "").strip().lower()
        entry = self.catalog.get(key) or self.catalog[self.default_food]
        return json.dumps(entry)
