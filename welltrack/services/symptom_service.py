"""Symptom definitions."""

from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.core.exceptions import NotFoundException
from welltrack.models.trackables import symptoms
from welltrack.schemas.trackables import SymptomCreate, SymptomResponse, SymptomUpdate
from welltrack.services.common import ensure_owner, visible_to

logger = structlog.get_logger(__name__)


class SymptomService:
    """System symptoms plus the user's own."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_symptoms(self, user_id: UUID) -> list[SymptomResponse]:
        stmt = select(symptoms).where(visible_to(symptoms, user_id)).order_by(symptoms.c.name)
        result = await self.db.execute(stmt)
        return [SymptomResponse.model_validate(dict(row._mapping)) for row in result.fetchall()]

    async def get_visible(self, user_id: UUID, symptom_id: UUID) -> SymptomResponse:
        """
        Get a symptom the user can log against.

        Raises:
            NotFoundException: If it does not exist or belongs to someone else
        """
        result = await self.db.execute(
            select(symptoms).where(symptoms.c.id == symptom_id, visible_to(symptoms, user_id))
        )
        row = result.first()
        if not row:
            raise NotFoundException("Symptom not found")
        return SymptomResponse.model_validate(dict(row._mapping))

    async def create_symptom(self, user_id: UUID, data: SymptomCreate) -> SymptomResponse:
        result = await self.db.execute(
            insert(symptoms)
            .values(user_id=user_id, **data.model_dump())
            .returning(symptoms)
        )
        row = result.one()
        await self.db.commit()
        logger.info("symptom_created", user_id=str(user_id), symptom_id=str(row.id))
        return SymptomResponse.model_validate(dict(row._mapping))

    async def update_symptom(
        self,
        user_id: UUID,
        symptom_id: UUID,
        data: SymptomUpdate,
    ) -> SymptomResponse:
        """
        Update one of the user's own symptoms.

        Raises:
            NotFoundException: If the symptom does not exist
            ForbiddenException: If it is a system symptom or someone else's
        """
        await self._get_owned(user_id, symptom_id)
        values = data.model_dump(exclude_unset=True)
        if values:
            await self.db.execute(update(symptoms).where(symptoms.c.id == symptom_id).values(**values))
            await self.db.commit()
        result = await self.db.execute(select(symptoms).where(symptoms.c.id == symptom_id))
        return SymptomResponse.model_validate(dict(result.one()._mapping))

    async def delete_symptom(self, user_id: UUID, symptom_id: UUID) -> None:
        """Delete one of the user's own symptoms and its logs."""
        await self._get_owned(user_id, symptom_id)
        await self.db.execute(delete(symptoms).where(symptoms.c.id == symptom_id))
        await self.db.commit()
        logger.info("symptom_deleted", user_id=str(user_id), symptom_id=str(symptom_id))

    async def _get_owned(self, user_id: UUID, symptom_id: UUID):
        result = await self.db.execute(select(symptoms).where(symptoms.c.id == symptom_id))
        row = result.first()
        ensure_owner(row, user_id, "Symptom")
        return row
