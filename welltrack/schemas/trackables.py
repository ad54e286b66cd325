"""Symptom, habit and medication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from welltrack.core.habit_values import TrackingType
from welltrack.schemas.common import CamelModel, require_non_empty


class _NameValidators(CamelModel):
    @field_validator("name", check_fields=False)
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return require_non_empty(v, "name")


# Symptoms


class SymptomCreate(_NameValidators):
    name: str
    category: str | None = None


class SymptomUpdate(_NameValidators):
    name: str | None = None
    category: str | None = None
    is_active: bool | None = None


class SymptomResponse(CamelModel):
    id: UUID
    user_id: UUID | None = None
    name: str
    category: str | None = None
    is_active: bool
    created_at: datetime


# Habits


class HabitCreate(_NameValidators):
    name: str
    tracking_type: TrackingType
    unit: str | None = None

    @field_validator("tracking_type", mode="before")
    @classmethod
    def validate_tracking_type(cls, v: object) -> object:
        if v not in {t.value for t in TrackingType}:
            raise ValueError("trackingType must be one of: boolean, numeric, duration")
        return v


class HabitUpdate(_NameValidators):
    name: str | None = None
    unit: str | None = None
    is_active: bool | None = None


class HabitResponse(CamelModel):
    id: UUID
    user_id: UUID | None = None
    name: str
    tracking_type: TrackingType
    unit: str | None = None
    is_active: bool
    created_at: datetime


# Medications


class MedicationCreate(_NameValidators):
    name: str
    dosage: str | None = None
    frequency: str | None = None


class MedicationUpdate(_NameValidators):
    name: str | None = None
    dosage: str | None = None
    frequency: str | None = None
    is_active: bool | None = None


class MedicationResponse(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    dosage: str | None = None
    frequency: str | None = None
    is_active: bool
    created_at: datetime
