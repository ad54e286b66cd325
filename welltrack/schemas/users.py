"""User profile and audit schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import EmailStr, Field, field_validator

from welltrack.schemas.auth import MIN_PASSWORD_LENGTH
from welltrack.schemas.common import CamelModel, normalize_email


def is_valid_timezone(name: str) -> bool:
    """True for IANA zone names known to the system tz database."""
    if not name or name != name.strip():
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


class UserProfile(CamelModel):
    id: UUID
    email: str
    display_name: str | None = None
    pronouns: str | None = None
    phone_number: str | None = None
    timezone: str
    weekly_digest_opt_in: bool
    last_login_at: datetime | None = None
    created_at: datetime


class UserUpdate(CamelModel):
    """Partial profile update; only fields present in the body are applied."""

    display_name: str | None = None
    pronouns: str | None = None
    phone_number: str | None = Field(None, max_length=32)
    timezone: str | None = None
    email: EmailStr | None = None
    weekly_digest_opt_in: bool | None = None

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, v: object) -> object:
        return normalize_email(v)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str:
        if v is None or not is_valid_timezone(v):
            raise ValueError("timezone must be a valid IANA timezone string")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_present(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("email must be a valid email address")
        return v

    @field_validator("weekly_digest_opt_in")
    @classmethod
    def validate_opt_in(cls, v: bool | None) -> bool:
        if v is None:
            raise ValueError("weeklyDigestOptIn must be a boolean")
        return v


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v


class AuditLogEntry(CamelModel):
    id: UUID
    action: str
    metadata: dict[str, Any] | None = None
    created_at: datetime
