"""Helpers shared by the resource services."""

from datetime import UTC, date, datetime, time
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, Table, or_

from welltrack.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def visible_to(table: Table, user_id: UUID) -> ColumnElement[bool]:
    """Rows of a trackable table the user may see: system rows plus their own."""
    return or_(table.c.user_id.is_(None), table.c.user_id == user_id)


def ensure_owner(row: Any, user_id: UUID, label: str) -> None:
    """
    Check that a fetched row exists and belongs to the user.

    Raises:
        NotFoundException: If the row is absent
        ForbiddenException: If it is system-owned or owned by someone else
    """
    if row is None:
        raise NotFoundException(f"{label} not found")
    if row.user_id is None:
        raise ForbiddenException(f"System {label.lower()}s cannot be modified")
    if row.user_id != user_id:
        raise ForbiddenException("Forbidden")


def date_bounds(
    column: Any,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[ColumnElement[bool]]:
    """Inclusive range conditions on a timestamp column."""
    conditions = []
    if start is not None:
        conditions.append(column >= start)
    if end is not None:
        conditions.append(column <= end)
    return conditions


def page_size(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(limit, MAX_PAGE_SIZE))


def parse_date_bound(value: str | None, field: str, end: bool = False) -> datetime | None:
    """
    Parse a ``startDate``/``endDate`` query value.

    Accepts an ISO date or datetime. A date-only ``end`` bound covers the
    whole day; naive datetimes are taken as UTC.

    Raises:
        ValidationException: If the value is not an ISO date or datetime
    """
    if value is None or value == "":
        return None
    text = value.strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            bound = datetime.combine(day, time.max if end else time.min, tzinfo=UTC)
        else:
            bound = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationException(f"Invalid {field}") from None
    if bound.tzinfo is None:
        bound = bound.replace(tzinfo=UTC)
    return bound


def parse_id(value: str, label: str) -> UUID:
    """
    Parse a resource id from the URL.

    Raises:
        NotFoundException: If the value is not a UUID; no such row can exist
    """
    try:
        return UUID(value)
    except ValueError:
        raise NotFoundException(f"{label} not found") from None
