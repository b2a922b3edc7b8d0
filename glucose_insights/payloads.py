"""
Inbound record payloads.

Validates raw JSON dictionaries (camelCase keys, as exported by the logging
application) and converts them into the immutable record models.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, List, Optional, Tuple, Union

import pandas as pd
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .models import GlucoseReading, Meal, MealType, MedicationDose, MedicationType, ReadingType


def _parse_timestamp(value):
    """Parse anything ``pd.to_datetime`` understands into a naive datetime.

    Offset-aware values are normalised to UTC before the offset is dropped.
    """
    if value is None or isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = pd.to_datetime(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid timestamp: {value!r}") from exc
    if parsed is not None and pd.isna(parsed):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(parsed, pd.Timestamp):
        parsed = parsed.to_pydatetime()
    if parsed is not None and parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


Timestamp = Annotated[datetime, BeforeValidator(_parse_timestamp)]


def _record_id(value: Union[int, str, None]) -> Optional[str]:
    return None if value is None else str(value)


class GlucoseReadingPayload(BaseModel):
    """
    Model for a logged glucose reading.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[Union[int, str]] = Field(default=None, description="Record ID")
    readingValue: Decimal = Field(ge=Decimal("20.0"), le=Decimal("999.99"), description="Glucose value in mg/dL")
    takenAt: Timestamp = Field(description="Reading timestamp")
    readingType: ReadingType = Field(default=ReadingType.OTHER, description="Reading context")
    note: Optional[str] = Field(default=None, max_length=500, description="Free-text note")

    def to_record(self) -> GlucoseReading:
        return GlucoseReading(
            value=self.readingValue,
            taken_at=self.takenAt,
            reading_type=self.readingType,
            note=self.note,
            record_id=_record_id(self.id),
        )


class MealPayload(BaseModel):
    """
    Model for a logged meal.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[Union[int, str]] = Field(default=None, description="Record ID")
    description: str = Field(min_length=1, max_length=500, description="Meal description")
    carbsGrams: Optional[int] = Field(default=None, ge=0, le=1000, description="Carbohydrates in grams")
    calories: Optional[int] = Field(default=None, ge=0, le=10000, description="Energy in kcal")
    proteinGrams: Optional[int] = Field(default=None, ge=0, le=500, description="Protein in grams")
    fatGrams: Optional[int] = Field(default=None, ge=0, le=500, description="Fat in grams")
    mealType: MealType = Field(default=MealType.OTHER, description="Meal type")
    consumedAt: Timestamp = Field(description="Meal timestamp")
    photoUrl: Optional[str] = Field(default=None, max_length=1000, description="Photo URL")
    notes: Optional[str] = Field(default=None, max_length=1000, description="Free-text notes")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Meal description is required")
        return value

    def to_record(self) -> Meal:
        return Meal(
            description=self.description,
            consumed_at=self.consumedAt,
            meal_type=self.mealType,
            carbs_grams=self.carbsGrams,
            calories=self.calories,
            protein_grams=self.proteinGrams,
            fat_grams=self.fatGrams,
            notes=self.notes,
            record_id=_record_id(self.id),
        )


class MedicationPayload(BaseModel):
    """
    Model for a logged medication dose.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[Union[int, str]] = Field(default=None, description="Record ID")
    name: str = Field(min_length=1, max_length=200, description="Medication name")
    dosage: Optional[str] = Field(default=None, max_length=100, description="Dosage")
    medicationType: MedicationType = Field(default=MedicationType.OTHER, description="Medication type")
    takenAt: Timestamp = Field(description="Dose timestamp")
    notes: Optional[str] = Field(default=None, max_length=500, description="Free-text notes")
    effectivenessRating: Optional[int] = Field(default=None, ge=1, le=5, description="Effectiveness rating 1-5")
    sideEffects: Optional[str] = Field(default=None, max_length=500, description="Reported side effects")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Medication name is required")
        return value

    def to_record(self) -> MedicationDose:
        return MedicationDose(
            name=self.name,
            taken_at=self.takenAt,
            medication_type=self.medicationType,
            dosage=self.dosage,
            effectiveness_rating=self.effectivenessRating,
            side_effects=self.sideEffects,
            notes=self.notes,
            record_id=_record_id(self.id),
        )


class UserRecordsPayload(BaseModel):
    """
    Model for every record logged by one user.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    userId: Optional[str] = Field(default=None, description="User ID")
    glucoseReadings: List[GlucoseReadingPayload] = Field(default_factory=list, description="Glucose readings")
    meals: List[MealPayload] = Field(default_factory=list, description="Meals")
    medications: List[MedicationPayload] = Field(default_factory=list, description="Medication doses")

    def to_records(self) -> Tuple[List[GlucoseReading], List[Meal], List[MedicationDose]]:
        return (
            [reading.to_record() for reading in self.glucoseReadings],
            [meal.to_record() for meal in self.meals],
            [dose.to_record() for dose in self.medications],
        )
