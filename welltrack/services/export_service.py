"""Export of a user's logs as WellTrack CSV (and the rows the PDF renders)."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.core.habit_values import from_columns
from welltrack.models.logs import habit_logs, medication_logs, mood_logs, symptom_logs
from welltrack.models.trackables import habits, medications, symptoms
from welltrack.services.common import date_bounds
from welltrack.services.csv_format import (
    HABIT_LOGS,
    MEDICATION_LOGS,
    MOOD_LOGS,
    SYMPTOM_LOGS,
    Cell,
    render_sections,
)

logger = structlog.get_logger(__name__)


def date_key(moment: datetime) -> str:
    """``YYYY-MM-DD`` of the UTC timestamp."""
    return moment.astimezone(UTC).date().isoformat()


def export_filename(extension: str, today: date | None = None) -> str:
    today = today or datetime.now(UTC).date()
    return f"welltrack-export-{today.isoformat()}.{extension}"


@dataclass
class ExportData:
    """Formatted rows per section, oldest first, in export column order."""

    symptom_logs: list[list[Cell]] = field(default_factory=list)
    mood_logs: list[list[Cell]] = field(default_factory=list)
    medication_logs: list[list[Cell]] = field(default_factory=list)
    habit_logs: list[list[Cell]] = field(default_factory=list)

    def sections(self) -> list[tuple[str, list[list[Cell]]]]:
        return [
            (SYMPTOM_LOGS, self.symptom_logs),
            (MOOD_LOGS, self.mood_logs),
            (MEDICATION_LOGS, self.medication_logs),
            (HABIT_LOGS, self.habit_logs),
        ]


class ExportService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def collect(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> ExportData:
        """
        Load every log of the user within the bounds.

        Symptom, mood and habit logs are bounded by ``logged_at``, medication
        logs by ``created_at``.
        """
        data = ExportData()

        result = await self.db.execute(
            select(
                symptom_logs.c.logged_at,
                symptoms.c.name,
                symptoms.c.category,
                symptom_logs.c.severity,
                symptom_logs.c.notes,
            )
            .select_from(symptom_logs.join(symptoms, symptom_logs.c.symptom_id == symptoms.c.id))
            .where(symptom_logs.c.user_id == user_id, *date_bounds(symptom_logs.c.logged_at, start, end))
            .order_by(symptom_logs.c.logged_at)
        )
        for row in result.fetchall():
            data.symptom_logs.append([date_key(row.logged_at), row.name, row.category, row.severity, row.notes])

        result = await self.db.execute(
            select(mood_logs)
            .where(mood_logs.c.user_id == user_id, *date_bounds(mood_logs.c.logged_at, start, end))
            .order_by(mood_logs.c.logged_at)
        )
        for row in result.fetchall():
            data.mood_logs.append(
                [date_key(row.logged_at), row.mood_score, row.energy_level, row.stress_level, row.notes]
            )

        result = await self.db.execute(
            select(
                medication_logs.c.created_at,
                medications.c.name,
                medications.c.dosage,
                medication_logs.c.taken,
                medication_logs.c.notes,
            )
            .select_from(
                medication_logs.join(medications, medication_logs.c.medication_id == medications.c.id)
            )
            .where(
                medication_logs.c.user_id == user_id,
                *date_bounds(medication_logs.c.created_at, start, end),
            )
            .order_by(medication_logs.c.created_at)
        )
        for row in result.fetchall():
            data.medication_logs.append(
                [date_key(row.created_at), row.name, row.dosage, "yes" if row.taken else "no", row.notes]
            )

        result = await self.db.execute(
            select(
                habit_logs,
                habits.c.name.label("habit_name"),
                habits.c.tracking_type,
                habits.c.unit,
            )
            .select_from(habit_logs.join(habits, habit_logs.c.habit_id == habits.c.id))
            .where(habit_logs.c.user_id == user_id, *date_bounds(habit_logs.c.logged_at, start, end))
            .order_by(habit_logs.c.logged_at)
        )
        for row in result.fetchall():
            value = from_columns(row.tracking_type, row)
            data.habit_logs.append(
                [
                    date_key(row.logged_at),
                    row.habit_name,
                    row.tracking_type,
                    value.to_csv() if value is not None else None,
                    row.unit,
                    row.notes,
                ]
            )

        return data

    async def export_csv(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> str:
        data = await self.collect(user_id, start, end)
        logger.info(
            "csv_export_generated",
            user_id=str(user_id),
            rows=sum(len(rows) for _, rows in data.sections()),
        )
        return render_sections(data.sections())
