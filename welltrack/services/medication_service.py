"""Medication definitions. Medications are always user-owned."""

from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.core.exceptions import NotFoundException
from welltrack.models.trackables import medications
from welltrack.schemas.trackables import (
    MedicationCreate,
    MedicationResponse,
    MedicationUpdate,
)
from welltrack.services.common import ensure_owner

logger = structlog.get_logger(__name__)


class MedicationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_medications(self, user_id: UUID) -> list[MedicationResponse]:
        """Active medications of the user, by name."""
        stmt = (
            select(medications)
            .where(medications.c.user_id == user_id, medications.c.is_active.is_(True))
            .order_by(medications.c.name)
        )
        result = await self.db.execute(stmt)
        return [MedicationResponse.model_validate(dict(row._mapping)) for row in result.fetchall()]

    async def get_owned(self, user_id: UUID, medication_id: UUID) -> MedicationResponse:
        """
        Get a medication the user can log against.

        Raises:
            NotFoundException: If it does not exist or belongs to someone else
        """
        result = await self.db.execute(
            select(medications).where(
                medications.c.id == medication_id,
                medications.c.user_id == user_id,
            )
        )
        row = result.first()
        if not row:
            raise NotFoundException("Medication not found")
        return MedicationResponse.model_validate(dict(row._mapping))

    async def create_medication(self, user_id: UUID, data: MedicationCreate) -> MedicationResponse:
        result = await self.db.execute(
            insert(medications).values(user_id=user_id, **data.model_dump()).returning(medications)
        )
        row = result.one()
        await self.db.commit()
        logger.info("medication_created", user_id=str(user_id), medication_id=str(row.id))
        return MedicationResponse.model_validate(dict(row._mapping))

    async def update_medication(
        self,
        user_id: UUID,
        medication_id: UUID,
        data: MedicationUpdate,
    ) -> MedicationResponse:
        """
        Update one of the user's medications.

        Raises:
            NotFoundException: If the medication does not exist
            ForbiddenException: If it belongs to someone else
        """
        await self._check_owned(user_id, medication_id)
        values = data.model_dump(exclude_unset=True)
        if values:
            await self.db.execute(
                update(medications).where(medications.c.id == medication_id).values(**values)
            )
            await self.db.commit()
        result = await self.db.execute(select(medications).where(medications.c.id == medication_id))
        return MedicationResponse.model_validate(dict(result.one()._mapping))

    async def delete_medication(self, user_id: UUID, medication_id: UUID) -> None:
        await self._check_owned(user_id, medication_id)
        await self.db.execute(delete(medications).where(medications.c.id == medication_id))
        await self.db.commit()
        logger.info("medication_deleted", user_id=str(user_id), medication_id=str(medication_id))

    async def _check_owned(self, user_id: UUID, medication_id: UUID) -> None:
        result = await self.db.execute(
            select(medications.c.id, medications.c.user_id).where(medications.c.id == medication_id)
        )
        ensure_owner(result.first(), user_id, "Medication")
