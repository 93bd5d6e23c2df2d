"""Tests for recognition result normalization."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from calorie_snap.domain.nutrition import (
    DEFAULT_CONFIDENCE,
    DEFAULT_FOOD_NAME,
    DEFAULT_GI_VALUE,
    DEFAULT_HEALTH_TIPS,
    PLACEHOLDER_RECORD,
    DiabetesSuitability,
    NutritionBreakdown,
    NutritionRecord,
    parse_quantity,
)
from calorie_snap.domain.records import CalorieRecord
from tests.conftest import APPLE_REPLY


def test_empty_reply_gets_every_default() -> None:
    record = NutritionRecord.model_validate({})

    assert record.food_name == DEFAULT_FOOD_NAME
    assert record.calorie_estimate == "0kcal"
    assert record.confidence == DEFAULT_CONFIDENCE
    assert record.health_tips == DEFAULT_HEALTH_TIPS
    assert record.gi_value == DEFAULT_GI_VALUE
    assert record.suitable_for_diabetes is DiabetesSuitability.UNKNOWN
    assert record.nutrition.protein == "0g"
    assert record.nutrition.calories == "0kcal"


def test_present_fields_pass_through_and_missing_are_defaulted() -> None:
    record = NutritionRecord.model_validate(APPLE_REPLY)

    assert record.food_name == "apple"
    assert record.calorie_estimate == 52
    assert record.confidence == 0.95
    assert record.health_tips == "Rich in fiber."
    assert record.nutrition.carbs == "14g"
    assert record.gi_value == DEFAULT_GI_VALUE
    assert record.suitable_for_diabetes is DiabetesSuitability.UNKNOWN


def test_each_breakdown_field_defaults_independently() -> None:
    record = NutritionRecord.model_validate(
        {"nutrition": {"protein": "12g", "fat": None, "carbs": ""}}
    )

    assert record.nutrition.protein == "12g"
    assert record.nutrition.fat == "0g"
    assert record.nutrition.carbs == "0g"
    assert record.nutrition.calories == "0kcal"


def test_null_values_fall_back_to_defaults() -> None:
    record = NutritionRecord.model_validate(
        {"food_name": None, "gi_value": None, "nutrition": None}
    )

    assert record.food_name == DEFAULT_FOOD_NAME
    assert record.gi_value == DEFAULT_GI_VALUE
    assert record.nutrition.fat == "0g"


def test_numeric_breakdown_values_become_text() -> None:
    record = NutritionRecord.model_validate({"nutrition": {"protein": 12}})

    assert record.nutrition.protein == "12"


def test_suitability_aliases_map_to_enum() -> None:
    def suitability(value: str) -> DiabetesSuitability:
        record = NutritionRecord.model_validate({"suitable_for_diabetes": value})
        return record.suitable_for_diabetes

    assert suitability("适量") is DiabetesSuitability.MODERATE
    assert suitability("Not suitable") is DiabetesSuitability.UNSUITABLE
    assert suitability("suitable") is DiabetesSuitability.SUITABLE
    assert suitability("maybe") is DiabetesSuitability.UNKNOWN


def test_gi_and_confidence_are_coerced() -> None:
    record = NutritionRecord.model_validate(
        {"gi_value": "55 (medium)", "confidence": 7}
    )

    assert record.gi_value == 55
    assert record.confidence == DEFAULT_CONFIDENCE


def test_malformed_breakdown_keeps_valid_fields() -> None:
    record = NutritionRecord.model_validate(
        {"food_name": "rice", "nutrition": {"protein": ["2g"], "carbs": "28g"}}
    )

    assert record.food_name == "rice"
    assert record.nutrition.protein == "0g"
    assert record.nutrition.carbs == "28g"


def test_non_object_breakdown_is_defaulted() -> None:
    record = NutritionRecord.model_validate({"nutrition": "lots of protein"})

    assert record.nutrition == NutritionBreakdown()


def test_gi_text_too_large_for_float_is_defaulted() -> None:
    record = NutritionRecord.model_validate({"gi_value": "9" * 400})

    assert record.gi_value == DEFAULT_GI_VALUE


def test_placeholder_record_is_immutable() -> None:
    with pytest.raises(ValidationError):
        PLACEHOLDER_RECORD.food_name = "changed"  # type: ignore[misc]

    assert PLACEHOLDER_RECORD.food_name == "Recognized food"


def test_parse_quantity_reads_leading_number() -> None:
    assert parse_quantity("52kcal") == 52.0
    assert parse_quantity("100千卡") == 100.0
    assert parse_quantity(88.5) == 88.5
    assert parse_quantity("about") == 0.0
    assert parse_quantity(None) == 0.0


def test_calorie_record_from_recognition() -> None:
    result = NutritionRecord.model_validate(APPLE_REPLY)
    now = datetime(2026, 3, 4, 12, 30, 15)

    record = CalorieRecord.from_recognition(result, image_path="apple.jpg", now=now)

    assert record.food_name == "apple"
    assert record.calorie == 52.0
    assert record.date.isoformat() == "2026-03-04"
    assert record.time == "12:30"
    assert record.timestamp == int(now.timestamp() * 1000)
    assert record.to_storage()["foodName"] == "apple"
    assert record.to_storage()["imagePath"] == "apple.jpg"


def test_calorie_record_ids_are_unique_within_a_millisecond() -> None:
    result = NutritionRecord.model_validate(APPLE_REPLY)
    now = datetime(2026, 3, 4, 12, 30, 15)

    first = CalorieRecord.from_recognition(result, now=now)
    second = CalorieRecord.from_recognition(result, now=now)

    assert first.timestamp == second.timestamp
    assert first.id != second.id
