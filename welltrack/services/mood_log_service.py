"""Mood log entries."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.models.logs import mood_logs
from welltrack.schemas.logs import MoodLogCreate, MoodLogResponse, MoodLogUpdate
from welltrack.services.common import date_bounds, ensure_owner, page_size

logger = structlog.get_logger(__name__)


class MoodLogService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_logs(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[MoodLogResponse]:
        """Newest first, bounded by ``logged_at``."""
        stmt = (
            select(mood_logs)
            .where(mood_logs.c.user_id == user_id, *date_bounds(mood_logs.c.logged_at, start, end))
            .order_by(mood_logs.c.logged_at.desc())
            .limit(page_size(limit))
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return [MoodLogResponse.model_validate(dict(row._mapping)) for row in result.fetchall()]

    async def create_log(self, user_id: UUID, data: MoodLogCreate) -> MoodLogResponse:
        values = data.model_dump()
        values["logged_at"] = values["logged_at"] or datetime.now(UTC)
        result = await self.db.execute(
            insert(mood_logs).values(user_id=user_id, **values).returning(mood_logs)
        )
        row = result.one()
        await self.db.commit()
        logger.info("mood_log_created", user_id=str(user_id), log_id=str(row.id))
        return MoodLogResponse.model_validate(dict(row._mapping))

    async def update_log(self, user_id: UUID, log_id: UUID, data: MoodLogUpdate) -> MoodLogResponse:
        """
        Update one of the user's mood logs.

        Raises:
            NotFoundException: If the log does not exist
            ForbiddenException: If it belongs to someone else
        """
        await self._check_owned(user_id, log_id)
        values = data.model_dump(exclude_unset=True)
        if values:
            await self.db.execute(update(mood_logs).where(mood_logs.c.id == log_id).values(**values))
            await self.db.commit()
        result = await self.db.execute(select(mood_logs).where(mood_logs.c.id == log_id))
        return MoodLogResponse.model_validate(dict(result.one()._mapping))

    async def delete_log(self, user_id: UUID, log_id: UUID) -> None:
        await self._check_owned(user_id, log_id)
        await self.db.execute(delete(mood_logs).where(mood_logs.c.id == log_id))
        await self.db.commit()

    async def _check_owned(self, user_id: UUID, log_id: UUID) -> None:
        result = await self.db.execute(
            select(mood_logs.c.id, mood_logs.c.user_id).where(mood_logs.c.id == log_id)
        )
        ensure_owner(result.first(), user_id, "Mood log")
