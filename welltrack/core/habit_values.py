"""Habit log values as a tagged union keyed by the habit's tracking type.

Storage keeps three nullable columns (``value_boolean``, ``value_numeric``,
``value_duration``); everywhere else a habit log value is exactly one of
``BooleanValue``, ``NumericValue`` or ``DurationValue``.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar


class TrackingType(str, Enum):
    """How a habit is measured."""

    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    DURATION = "duration"


@dataclass(frozen=True)
class BooleanValue:
    value: bool

    tracking_type: ClassVar[TrackingType] = TrackingType.BOOLEAN

    def to_columns(self) -> dict[str, Any]:
        return {"value_boolean": self.value, "value_numeric": None, "value_duration": None}

    def to_csv(self) -> str:
        return "yes" if self.value else "no"


@dataclass(frozen=True)
class NumericValue:
    value: float

    tracking_type: ClassVar[TrackingType] = TrackingType.NUMERIC

    def __post_init__(self) -> None:
        if not math.isfinite(self.value):
            raise ValueError("numeric value must be a finite number")

    def to_columns(self) -> dict[str, Any]:
        return {"value_boolean": None, "value_numeric": self.value, "value_duration": None}

    def to_csv(self) -> str:
        if float(self.value).is_integer():
            return str(int(self.value))
        return repr(float(self.value))


@dataclass(frozen=True)
class DurationValue:
    value: int

    tracking_type: ClassVar[TrackingType] = TrackingType.DURATION

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("duration must be a non-negative integer")

    def to_columns(self) -> dict[str, Any]:
        return {"value_boolean": None, "value_numeric": None, "value_duration": self.value}

    def to_csv(self) -> str:
        return str(self.value)


HabitValue = BooleanValue | NumericValue | DurationValue

# Payload field carrying the value for each tracking type
VALUE_FIELDS: dict[TrackingType, str] = {
    TrackingType.BOOLEAN: "value_boolean",
    TrackingType.NUMERIC: "value_numeric",
    TrackingType.DURATION: "value_duration",
}

_CAMEL_NAMES = {
    "value_boolean": "valueBoolean",
    "value_numeric": "valueNumeric",
    "value_duration": "valueDuration",
}


def from_payload(tracking_type: TrackingType | str, fields: dict[str, Any]) -> HabitValue:
    """
    Build the value for ``tracking_type`` from API payload fields.

    ``fields`` maps the three storage column names to the values the client
    sent (absent keys mean "not sent"). The field for the habit's own type
    is required; any non-null field for another type is rejected.

    Raises:
        ValueError: with a client-facing message
    """
    tracking_type = TrackingType(tracking_type)
    expected = VALUE_FIELDS[tracking_type]

    for name in VALUE_FIELDS.values():
        if name != expected and fields.get(name) is not None:
            raise ValueError(
                f"{_CAMEL_NAMES[name]} is not valid for {tracking_type.value} habits"
            )

    raw = fields.get(expected)
    if raw is None:
        raise ValueError(f"{_CAMEL_NAMES[expected]} is required for {tracking_type.value} habits")

    if tracking_type is TrackingType.BOOLEAN:
        if not isinstance(raw, bool):
            raise ValueError("valueBoolean must be a boolean")
        return BooleanValue(raw)
    if tracking_type is TrackingType.NUMERIC:
        if isinstance(raw, bool) or not isinstance(raw, int | float):
            raise ValueError("valueNumeric must be a number")
        return NumericValue(float(raw))
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ValueError("valueDuration must be a non-negative integer")
    return DurationValue(raw)


def from_csv(tracking_type: TrackingType | str, raw: str) -> HabitValue:
    """
    Parse the ``value`` column of a Habit Logs CSV row.

    Raises:
        ValueError: with a message naming the expected shape
    """
    tracking_type = TrackingType(tracking_type)
    text = raw.strip()

    if tracking_type is TrackingType.BOOLEAN:
        lowered = text.lower()
        if lowered not in ("yes", "no"):
            raise ValueError(f'invalid boolean value "{text}"')
        return BooleanValue(lowered == "yes")

    if tracking_type is TrackingType.NUMERIC:
        try:
            return NumericValue(float(text))
        except ValueError:
            raise ValueError(f'invalid numeric value "{text}"') from None

    try:
        return DurationValue(int(text))
    except ValueError:
        raise ValueError(f'invalid duration value "{text}"') from None


def from_columns(tracking_type: TrackingType | str, row: Any) -> HabitValue | None:
    """Rebuild the value from a stored habit log row (``None`` if the column is empty)."""
    tracking_type = TrackingType(tracking_type)
    if tracking_type is TrackingType.BOOLEAN:
        return None if row.value_boolean is None else BooleanValue(row.value_boolean)
    if tracking_type is TrackingType.NUMERIC:
        return None if row.value_numeric is None else NumericValue(row.value_numeric)
    return None if row.value_duration is None else DurationValue(row.value_duration)
