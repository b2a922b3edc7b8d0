from datetime import datetime
from decimal import Decimal
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest
from pydantic import ValidationError

from glucose_insights.models import MealType, MedicationType, ReadingType
from glucose_insights.payloads import GlucoseReadingPayload, MealPayload, MedicationPayload, UserRecordsPayload


def test_reading_payload_converts_to_record():
    payload = GlucoseReadingPayload.model_validate(
        {"id": 5, "readingValue": 112, "takenAt": "2024-03-01T07:30:00Z", "readingType": "FASTING"}
    )

    record = payload.to_record()

    assert record.value == Decimal("112")
    assert record.taken_at == datetime(2024, 3, 1, 7, 30)
    assert record.reading_type is ReadingType.FASTING
    assert record.record_id == "5"


def test_offset_timestamps_are_normalised_to_utc():
    payload = GlucoseReadingPayload.model_validate({"readingValue": 100, "takenAt": "2024-03-01T09:30:00+02:00"})

    assert payload.takenAt == datetime(2024, 3, 1, 7, 30)
    assert payload.takenAt.tzinfo is None


@pytest.mark.parametrize("value", [19.99, 1000])
def test_reading_value_bounds(value):
    with pytest.raises(ValidationError):
        GlucoseReadingPayload.model_validate({"readingValue": value, "takenAt": "2024-03-01T07:30:00"})


def test_invalid_timestamp_is_rejected():
    with pytest.raises(ValidationError):
        GlucoseReadingPayload.model_validate({"readingValue": 100, "takenAt": "not a date"})


@pytest.mark.parametrize("value", ["", "NaT"])
def test_blank_timestamp_is_rejected(value):
    with pytest.raises(ValidationError):
        GlucoseReadingPayload.model_validate({"readingValue": 300, "takenAt": value})
    with pytest.raises(ValidationError):
        MealPayload.model_validate({"description": "Toast", "consumedAt": value})
    with pytest.raises(ValidationError):
        MedicationPayload.model_validate({"name": "Metformin", "takenAt": value})


def test_meal_payload_defaults_and_bounds():
    payload = MealPayload.model_validate(
        {"description": "Oatmeal", "carbsGrams": 45, "calories": 300, "consumedAt": "2024-03-01T08:00:00"}
    )

    record = payload.to_record()
    assert record.meal_type is MealType.OTHER
    assert record.carbs_grams == 45

    with pytest.raises(ValidationError):
        MealPayload.model_validate({"description": "Feast", "carbsGrams": 1001, "consumedAt": "2024-03-01T08:00:00"})
    with pytest.raises(ValidationError):
        MealPayload.model_validate({"description": "   ", "consumedAt": "2024-03-01T08:00:00"})
    with pytest.raises(ValidationError):
        MealPayload.model_validate({"description": "Brunch", "mealType": "BRUNCH", "consumedAt": "2024-03-01T08:00:00"})


@pytest.mark.parametrize("rating", [0, 6])
def test_medication_rating_bounds(rating):
    with pytest.raises(ValidationError):
        MedicationPayload.model_validate(
            {"name": "Metformin", "takenAt": "2024-03-01T08:00:00", "effectivenessRating": rating}
        )


def test_user_records_payload():
    payload = UserRecordsPayload.model_validate(
        {
            "userId": "user-1",
            "glucoseReadings": [{"readingValue": 110, "takenAt": "2024-03-01T07:00:00"}],
            "meals": [{"description": "Toast", "consumedAt": "2024-03-01T08:00:00", "mealType": "BREAKFAST"}],
            "medications": [
                {"name": "Lispro", "takenAt": "2024-03-01T08:00:00", "medicationType": "INSULIN_RAPID"},
                {"name": "Metformin", "takenAt": "2024-03-01T20:00:00"},
            ],
        }
    )

    readings, meals, doses = payload.to_records()

    assert len(readings) == 1
    assert meals[0].meal_type is MealType.BREAKFAST
    assert [dose.medication_type for dose in doses] == [MedicationType.INSULIN_RAPID, MedicationType.OTHER]


def test_missing_required_fields():
    with pytest.raises(ValidationError):
        UserRecordsPayload.model_validate({"glucoseReadings": [{"readingValue": 110}]})
