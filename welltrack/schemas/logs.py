"""Log entry schemas.

Update schemas are partial: services apply only the fields present in the
request body (``model_dump(exclude_unset=True)``).
"""

from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from welltrack.core.habit_values import TrackingType
from welltrack.schemas.common import CamelModel


def _check_range(value: int | None, field: str, low: int, high: int, nullable: bool) -> int | None:
    if value is None:
        if nullable:
            return None
        raise ValueError(f"{field} must be an integer between {low} and {high}")
    if not low <= value <= high:
        raise ValueError(f"{field} must be an integer between {low} and {high}")
    return value


def _check_logged_at(value: datetime | None) -> datetime:
    if value is None:
        raise ValueError("loggedAt must be a valid date")
    return value


# Symptom logs


class SymptomSummary(CamelModel):
    id: UUID
    name: str
    category: str | None = None


class SymptomLogCreate(CamelModel):
    symptom_id: UUID
    severity: int
    notes: str | None = None
    logged_at: datetime | None = None

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: int) -> int:
        return _check_range(v, "severity", 1, 10, nullable=False)


class SymptomLogUpdate(CamelModel):
    severity: int | None = None
    notes: str | None = None
    logged_at: datetime | None = None

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: int | None) -> int | None:
        return _check_range(v, "severity", 1, 10, nullable=False)

    @field_validator("logged_at")
    @classmethod
    def validate_logged_at(cls, v: datetime | None) -> datetime:
        return _check_logged_at(v)


class SymptomLogResponse(CamelModel):
    id: UUID
    user_id: UUID
    symptom_id: UUID
    severity: int
    notes: str | None = None
    logged_at: datetime
    created_at: datetime
    symptom: SymptomSummary


# Mood logs


class MoodLogCreate(CamelModel):
    mood_score: int
    energy_level: int | None = None
    stress_level: int | None = None
    notes: str | None = None
    logged_at: datetime | None = None

    @field_validator("mood_score")
    @classmethod
    def validate_mood_score(cls, v: int) -> int:
        return _check_range(v, "moodScore", 1, 5, nullable=False)

    @field_validator("energy_level")
    @classmethod
    def validate_energy_level(cls, v: int | None) -> int | None:
        return _check_range(v, "energyLevel", 1, 5, nullable=True)

    @field_validator("stress_level")
    @classmethod
    def validate_stress_level(cls, v: int | None) -> int | None:
        return _check_range(v, "stressLevel", 1, 5, nullable=True)


class MoodLogUpdate(MoodLogCreate):
    mood_score: int | None = None

    @field_validator("logged_at")
    @classmethod
    def validate_logged_at(cls, v: datetime | None) -> datetime:
        return _check_logged_at(v)


class MoodLogResponse(CamelModel):
    id: UUID
    user_id: UUID
    mood_score: int
    energy_level: int | None = None
    stress_level: int | None = None
    notes: str | None = None
    logged_at: datetime
    created_at: datetime


# Medication logs


class MedicationSummary(CamelModel):
    id: UUID
    name: str
    dosage: str | None = None


class MedicationLogCreate(CamelModel):
    medication_id: UUID
    taken: bool = True
    taken_at: datetime | None = None
    notes: str | None = None


class MedicationLogUpdate(CamelModel):
    taken: bool | None = None
    taken_at: datetime | None = None
    notes: str | None = None

    @field_validator("taken")
    @classmethod
    def validate_taken(cls, v: bool | None) -> bool:
        if v is None:
            raise ValueError("taken must be a boolean")
        return v


class MedicationLogResponse(CamelModel):
    id: UUID
    user_id: UUID
    medication_id: UUID
    taken: bool
    taken_at: datetime | None = None
    notes: str | None = None
    created_at: datetime
    medication: MedicationSummary


# Habit logs


class HabitSummary(CamelModel):
    id: UUID
    name: str
    tracking_type: TrackingType
    unit: str | None = None


class HabitLogCreate(CamelModel):
    habit_id: UUID
    value_boolean: bool | None = None
    value_numeric: float | None = None
    value_duration: int | None = None
    notes: str | None = None
    logged_at: datetime | None = None


class HabitLogUpdate(CamelModel):
    value_boolean: bool | None = None
    value_numeric: float | None = None
    value_duration: int | None = None
    notes: str | None = None
    logged_at: datetime | None = None

    @field_validator("logged_at")
    @classmethod
    def validate_logged_at(cls, v: datetime | None) -> datetime:
        return _check_logged_at(v)


class HabitLogResponse(CamelModel):
    id: UUID
    user_id: UUID
    habit_id: UUID
    value_boolean: bool | None = None
    value_numeric: float | None = None
    value_duration: int | None = None
    notes: str | None = None
    logged_at: datetime
    created_at: datetime
    habit: HabitSummary
