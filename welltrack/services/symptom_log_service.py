"""Symptom log entries."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.models.logs import symptom_logs
from welltrack.models.trackables import symptoms
from welltrack.schemas.logs import SymptomLogCreate, SymptomLogResponse, SymptomLogUpdate
from welltrack.services.common import date_bounds, ensure_owner, page_size
from welltrack.services.symptom_service import SymptomService

logger = structlog.get_logger(__name__)

_joined = symptom_logs.join(symptoms, symptom_logs.c.symptom_id == symptoms.c.id)
_select = select(
    symptom_logs,
    symptoms.c.name.label("symptom_name"),
    symptoms.c.category.label("symptom_category"),
).select_from(_joined)


def _to_response(row: Any) -> SymptomLogResponse:
    data = dict(row._mapping)
    data["symptom"] = {
        "id": data["symptom_id"],
        "name": data.pop("symptom_name"),
        "category": data.pop("symptom_category"),
    }
    return SymptomLogResponse.model_validate(data)


class SymptomLogService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_logs(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[SymptomLogResponse]:
        """Newest first, bounded by ``logged_at``."""
        stmt = (
            _select.where(
                symptom_logs.c.user_id == user_id,
                *date_bounds(symptom_logs.c.logged_at, start, end),
            )
            .order_by(symptom_logs.c.logged_at.desc())
            .limit(page_size(limit))
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return [_to_response(row) for row in result.fetchall()]

    async def create_log(self, user_id: UUID, data: SymptomLogCreate) -> SymptomLogResponse:
        """
        Log a symptom.

        Raises:
            NotFoundException: If the symptom is not visible to the user
        """
        await SymptomService(self.db).get_visible(user_id, data.symptom_id)
        result = await self.db.execute(
            insert(symptom_logs)
            .values(
                user_id=user_id,
                symptom_id=data.symptom_id,
                severity=data.severity,
                notes=data.notes,
                logged_at=data.logged_at or datetime.now(UTC),
            )
            .returning(symptom_logs.c.id)
        )
        log_id = result.scalar_one()
        await self.db.commit()
        logger.info("symptom_log_created", user_id=str(user_id), log_id=str(log_id))
        return await self._get(log_id)

    async def update_log(
        self,
        user_id: UUID,
        log_id: UUID,
        data: SymptomLogUpdate,
    ) -> SymptomLogResponse:
        """
        Update one of the user's symptom logs.

        Raises:
            NotFoundException: If the log does not exist
            ForbiddenException: If it belongs to someone else
        """
        await self._check_owned(user_id, log_id)
        values = data.model_dump(exclude_unset=True)
        if values:
            await self.db.execute(
                update(symptom_logs).where(symptom_logs.c.id == log_id).values(**values)
            )
            await self.db.commit()
        return await self._get(log_id)

    async def delete_log(self, user_id: UUID, log_id: UUID) -> None:
        await self._check_owned(user_id, log_id)
        await self.db.execute(delete(symptom_logs).where(symptom_logs.c.id == log_id))
        await self.db.commit()

    async def _get(self, log_id: UUID) -> SymptomLogResponse:
        result = await self.db.execute(_select.where(symptom_logs.c.id == log_id))
        return _to_response(result.one())

    async def _check_owned(self, user_id: UUID, log_id: UUID) -> None:
        result = await self.db.execute(
            select(symptom_logs.c.id, symptom_logs.c.user_id).where(symptom_logs.c.id == log_id)
        )
        ensure_owner(result.first(), user_id, "Symptom log")
