"""Shared schema building blocks."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON and accepting snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str


def require_non_empty(value: str | None, field: str) -> str:
    """Reject ``None`` and blank strings for a field that must stay set."""
    if value is None or not value.strip():
        raise ValueError(f"{field} must be a non-empty string")
    return value.strip()


def normalize_email(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value
