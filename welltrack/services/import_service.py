"""Import of WellTrack CSV files.

Rows are independent: each accepted row is committed on its own and a bad
row is skipped with an error naming its section and 1-based row number.
"""

import csv
import re
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime, time
from typing import Any
from uuid import UUID

import structlog
from fastapi import UploadFile
from sqlalchemy import Table, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.config import settings
from welltrack.core.exceptions import BadRequestException
from welltrack.core.habit_values import from_csv
from welltrack.models.logs import habit_logs, medication_logs, mood_logs, symptom_logs
from welltrack.models.trackables import habits, medications, symptoms
from welltrack.schemas.imports import ImportResult, SectionCounts
from welltrack.services.common import visible_to
from welltrack.services.csv_format import (
    HABIT_LOGS,
    MEDICATION_LOGS,
    MOOD_LOGS,
    SYMPTOM_LOGS,
    Section,
    clean_notes,
    scan_sections,
)

logger = structlog.get_logger(__name__)

ALLOWED_CONTENT_TYPES = {"text/csv", "text/plain", "application/vnd.ms-excel"}

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Section label -> counter attribute on SectionCounts
_COUNTERS = {
    SYMPTOM_LOGS: "symptom_logs",
    MOOD_LOGS: "mood_logs",
    MEDICATION_LOGS: "medication_logs",
    HABIT_LOGS: "habit_logs",
}


class RowError(ValueError):
    """A row that cannot be imported; the message is shown to the user."""


def decode_upload(content: bytes, content_type: str | None) -> str:
    """
    Validate an uploaded file and decode it to text.

    Raises:
        BadRequestException: If the file is empty, too large, of the wrong
            type or not UTF-8
    """
    if not content:
        raise BadRequestException("No file uploaded")
    if len(content) > settings.import_max_bytes:
        raise BadRequestException("File too large")
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type not in ALLOWED_CONTENT_TYPES:
        raise BadRequestException("Only CSV files are accepted")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise BadRequestException("File must be UTF-8 encoded text") from None


async def read_upload(file: UploadFile) -> str:
    """
    Read an uploaded CSV file, stopping one byte past the size limit.

    Raises:
        BadRequestException: As for ``decode_upload``
    """
    content = await file.read(settings.import_max_bytes + 1)
    return decode_upload(content, file.content_type)


def parse_row_date(raw: str | None) -> datetime:
    """``YYYY-MM-DD`` that is a real calendar date, as UTC midnight."""
    text = (raw or "").strip()
    if not _DATE_PATTERN.match(text):
        raise RowError(f'invalid date "{raw or ""}"')
    try:
        day = date.fromisoformat(text)
    except ValueError:
        raise RowError(f'invalid date "{raw}"') from None
    return datetime.combine(day, time.min, tzinfo=UTC)


def parse_score(raw: str | None, column: str, low: int, high: int, required: bool = True) -> int | None:
    text = (raw or "").strip()
    if not text and not required:
        return None
    try:
        value = int(text)
    except ValueError:
        raise RowError(f'invalid {column} "{text}"') from None
    if not low <= value <= high:
        raise RowError(f'invalid {column} "{text}"')
    return value


def parse_yes_no(raw: str | None, column: str) -> bool:
    text = (raw or "").strip().lower()
    if text not in ("yes", "no"):
        raise RowError(f'invalid {column} "{(raw or "").strip()}"; expected "yes" or "no"')
    return text == "yes"


def first_match_lookup(rows: list[Any]) -> dict[str, Any]:
    """Case-insensitive name lookup where the first row with a name wins."""
    lookup: dict[str, Any] = {}
    for row in rows:
        lookup.setdefault(row.name.strip().lower(), row)
    return lookup


RowHandler = Callable[[dict[str, str]], Awaitable[dict[str, Any]]]


class ImportService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def import_csv(self, user_id: UUID, text: str) -> ImportResult:
        """
        Import every known section of a WellTrack CSV file.

        Raises:
            BadRequestException: If the text cannot be tokenised as CSV
        """
        try:
            sections = scan_sections(text)
        except csv.Error as e:
            raise BadRequestException(f"Malformed CSV: {e}") from None

        result = ImportResult()
        for section in sections:
            await self._import_section(user_id, section, result)

        logger.info(
            "csv_import_completed",
            user_id=str(user_id),
            imported=result.imported.model_dump(),
            skipped=result.skipped.model_dump(),
        )
        return result

    async def _import_section(self, user_id: UUID, section: Section, result: ImportResult) -> None:
        if not section.rows:
            return

        table, handler = await self._handler_for(user_id, section.name)
        counter = _COUNTERS[section.name]

        for number, row in enumerate(section.rows, start=1):
            try:
                values = await handler(row)
            except RowError as e:
                result.errors.append(f"{section.name} row {number}: {e}")
                _increment(result.skipped, counter)
                continue

            await self.db.execute(insert(table).values(user_id=user_id, **values))
            await self.db.commit()
            _increment(result.imported, counter)

    async def _handler_for(self, user_id: UUID, name: str) -> tuple[Table, RowHandler]:
        if name == SYMPTOM_LOGS:
            lookup = await self._lookup(symptoms, user_id, include_system=True)
            return symptom_logs, lambda row: self._symptom_row(row, lookup)
        if name == MOOD_LOGS:
            return mood_logs, self._mood_row
        if name == MEDICATION_LOGS:
            lookup = await self._lookup(medications, user_id, include_system=False)
            return medication_logs, lambda row: self._medication_row(row, lookup)
        lookup = await self._lookup(habits, user_id, include_system=True)
        return habit_logs, lambda row: self._habit_row(row, lookup)

    async def _lookup(self, table: Table, user_id: UUID, include_system: bool) -> dict[str, Any]:
        condition = visible_to(table, user_id) if include_system else table.c.user_id == user_id
        result = await self.db.execute(
            select(table)
            .where(condition)
            # System rows first, then the user's own in creation order
            .order_by(table.c.user_id.is_not(None), table.c.created_at, table.c.id)
        )
        return first_match_lookup(result.fetchall())

    async def _symptom_row(self, row: dict[str, str], lookup: dict[str, Any]) -> dict[str, Any]:
        logged_at = parse_row_date(row.get("date"))
        name = (row.get("symptom_name") or "").strip()
        symptom = lookup.get(name.lower())
        if symptom is None:
            raise RowError(f'symptom "{name}" not found')
        severity = parse_score(row.get("severity"), "severity", 1, 10)
        return {
            "symptom_id": symptom.id,
            "severity": severity,
            "notes": clean_notes(row.get("notes")),
            "logged_at": logged_at,
        }

    async def _mood_row(self, row: dict[str, str]) -> dict[str, Any]:
        logged_at = parse_row_date(row.get("date"))
        return {
            "mood_score": parse_score(row.get("mood_score"), "mood_score", 1, 5),
            "energy_level": parse_score(row.get("energy_level"), "energy_level", 1, 5, required=False),
            "stress_level": parse_score(row.get("stress_level"), "stress_level", 1, 5, required=False),
            "notes": clean_notes(row.get("notes")),
            "logged_at": logged_at,
        }

    async def _medication_row(self, row: dict[str, str], lookup: dict[str, Any]) -> dict[str, Any]:
        day = parse_row_date(row.get("date"))
        name = (row.get("medication_name") or "").strip()
        medication = lookup.get(name.lower())
        if medication is None:
            raise RowError(f'medication "{name}" not found')
        taken = parse_yes_no(row.get("taken"), "taken")
        return {
            "medication_id": medication.id,
            "taken": taken,
            "taken_at": day if taken else None,
            "notes": clean_notes(row.get("notes")),
            # Exports bucket medication logs by created_at
            "created_at": day,
        }

    async def _habit_row(self, row: dict[str, str], lookup: dict[str, Any]) -> dict[str, Any]:
        logged_at = parse_row_date(row.get("date"))
        name = (row.get("habit_name") or "").strip()
        habit = lookup.get(name.lower())
        if habit is None:
            raise RowError(f'habit "{name}" not found')
        try:
            value = from_csv(habit.tracking_type, row.get("value") or "")
        except ValueError as e:
            raise RowError(str(e)) from None
        return {
            "habit_id": habit.id,
            "notes": clean_notes(row.get("notes")),
            "logged_at": logged_at,
            **value.to_columns(),
        }


def _increment(counts: SectionCounts, attribute: str) -> None:
    setattr(counts, attribute, getattr(counts, attribute) + 1)
