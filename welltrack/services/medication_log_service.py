"""Medication log entries. Their point in time is ``created_at``."""

from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.models.logs import medication_logs
from welltrack.models.trackables import medications
from welltrack.schemas.logs import (
    MedicationLogCreate,
    MedicationLogResponse,
    MedicationLogUpdate,
)
from welltrack.services.common import date_bounds, ensure_owner, page_size
from welltrack.services.medication_service import MedicationService

logger = structlog.get_logger(__name__)

_select = select(
    medication_logs,
    medications.c.name.label("medication_name"),
    medications.c.dosage.label("medication_dosage"),
).select_from(
    medication_logs.join(medications, medication_logs.c.medication_id == medications.c.id)
)


def _to_response(row: Any) -> MedicationLogResponse:
    data = dict(row._mapping)
    data["medication"] = {
        "id": data["medication_id"],
        "name": data.pop("medication_name"),
        "dosage": data.pop("medication_dosage"),
    }
    return MedicationLogResponse.model_validate(data)


class MedicationLogService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_logs(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[MedicationLogResponse]:
        """Newest first, bounded by ``created_at``."""
        stmt = (
            _select.where(
                medication_logs.c.user_id == user_id,
                *date_bounds(medication_logs.c.created_at, start, end),
            )
            .order_by(medication_logs.c.created_at.desc())
            .limit(page_size(limit))
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return [_to_response(row) for row in result.fetchall()]

    async def create_log(self, user_id: UUID, data: MedicationLogCreate) -> MedicationLogResponse:
        """
        Log a dose.

        Raises:
            NotFoundException: If the medication is not the user's
        """
        await MedicationService(self.db).get_owned(user_id, data.medication_id)
        result = await self.db.execute(
            insert(medication_logs)
            .values(user_id=user_id, **data.model_dump())
            .returning(medication_logs.c.id)
        )
        log_id = result.scalar_one()
        await self.db.commit()
        logger.info("medication_log_created", user_id=str(user_id), log_id=str(log_id))
        return await self._get(log_id)

    async def update_log(
        self,
        user_id: UUID,
        log_id: UUID,
        data: MedicationLogUpdate,
    ) -> MedicationLogResponse:
        """
        Update one of the user's medication logs.

        Raises:
            NotFoundException: If the log does not exist
            ForbiddenException: If it belongs to someone else
        """
        await self._check_owned(user_id, log_id)
        values = data.model_dump(exclude_unset=True)
        if values:
            await self.db.execute(
                update(medication_logs).where(medication_logs.c.id == log_id).values(**values)
            )
            await self.db.commit()
        return await self._get(log_id)

    async def delete_log(self, user_id: UUID, log_id: UUID) -> None:
        await self._check_owned(user_id, log_id)
        await self.db.execute(delete(medication_logs).where(medication_logs.c.id == log_id))
        await self.db.commit()

    async def _get(self, log_id: UUID) -> MedicationLogResponse:
        result = await self.db.execute(_select.where(medication_logs.c.id == log_id))
        return _to_response(result.one())

    async def _check_owned(self, user_id: UUID, log_id: UUID) -> None:
        result = await self.db.execute(
            select(medication_logs.c.id, medication_logs.c.user_id).where(
                medication_logs.c.id == log_id
            )
        )
        ensure_owner(result.first(), user_id, "Medication log")
