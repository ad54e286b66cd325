"""Habit log entries.

Values go through the habit value union so a log only ever carries the
column of its habit's tracking type.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.core.exceptions import ValidationException
from welltrack.core.habit_values import VALUE_FIELDS, from_payload
from welltrack.models.logs import habit_logs
from welltrack.models.trackables import habits
from welltrack.schemas.logs import HabitLogCreate, HabitLogResponse, HabitLogUpdate
from welltrack.services.common import date_bounds, ensure_owner, page_size
from welltrack.services.habit_service import HabitService

logger = structlog.get_logger(__name__)

_select = select(
    habit_logs,
    habits.c.name.label("habit_name"),
    habits.c.tracking_type.label("habit_tracking_type"),
    habits.c.unit.label("habit_unit"),
).select_from(habit_logs.join(habits, habit_logs.c.habit_id == habits.c.id))

_VALUE_COLUMNS = tuple(VALUE_FIELDS.values())


def _to_response(row: Any) -> HabitLogResponse:
    data = dict(row._mapping)
    data["habit"] = {
        "id": data["habit_id"],
        "name": data.pop("habit_name"),
        "tracking_type": data.pop("habit_tracking_type"),
        "unit": data.pop("habit_unit"),
    }
    return HabitLogResponse.model_validate(data)


def _value_columns(tracking_type: str, fields: dict[str, Any]) -> dict[str, Any]:
    try:
        return from_payload(tracking_type, fields).to_columns()
    except ValueError as e:
        raise ValidationException(str(e)) from None


class HabitLogService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_logs(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[HabitLogResponse]:
        """Newest first, bounded by ``logged_at``."""
        stmt = (
            _select.where(
                habit_logs.c.user_id == user_id,
                *date_bounds(habit_logs.c.logged_at, start, end),
            )
            .order_by(habit_logs.c.logged_at.desc())
            .limit(page_size(limit))
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return [_to_response(row) for row in result.fetchall()]

    async def create_log(self, user_id: UUID, data: HabitLogCreate) -> HabitLogResponse:
        """
        Log a habit.

        Raises:
            NotFoundException: If the habit is not visible to the user
            ValidationException: If the value does not match the habit's
                tracking type
        """
        habit = await HabitService(self.db).get_visible(user_id, data.habit_id)
        columns = _value_columns(habit.tracking_type, data.model_dump(include=set(_VALUE_COLUMNS)))

        result = await self.db.execute(
            insert(habit_logs)
            .values(
                user_id=user_id,
                habit_id=habit.id,
                notes=data.notes,
                logged_at=data.logged_at or datetime.now(UTC),
                **columns,
            )
            .returning(habit_logs.c.id)
        )
        log_id = result.scalar_one()
        await self.db.commit()
        logger.info("habit_log_created", user_id=str(user_id), log_id=str(log_id))
        return await self._get(log_id)

    async def update_log(self, user_id: UUID, log_id: UUID, data: HabitLogUpdate) -> HabitLogResponse:
        """
        Update one of the user's habit logs.

        A value change must carry the value for the habit's tracking type.

        Raises:
            NotFoundException: If the log does not exist
            ForbiddenException: If it belongs to someone else
            ValidationException: If the value does not match the habit's
                tracking type
        """
        await self._check_owned(user_id, log_id)
        values = data.model_dump(exclude_unset=True)

        sent_values = {name: values.pop(name) for name in _VALUE_COLUMNS if name in values}
        if sent_values:
            current = await self._get(log_id)
            values.update(_value_columns(current.habit.tracking_type, sent_values))

        if values:
            await self.db.execute(update(habit_logs).where(habit_logs.c.id == log_id).values(**values))
            await self.db.commit()
        return await self._get(log_id)

    async def delete_log(self, user_id: UUID, log_id: UUID) -> None:
        await self._check_owned(user_id, log_id)
        await self.db.execute(delete(habit_logs).where(habit_logs.c.id == log_id))
        await self.db.commit()

    async def _get(self, log_id: UUID) -> HabitLogResponse:
        result = await self.db.execute(_select.where(habit_logs.c.id == log_id))
        return _to_response(result.one())

    async def _check_owned(self, user_id: UUID, log_id: UUID) -> None:
        result = await self.db.execute(
            select(habit_logs.c.id, habit_logs.c.user_id).where(habit_logs.c.id == log_id)
        )
        ensure_owner(result.first(), user_id, "Habit log")
