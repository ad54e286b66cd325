"""Habit definitions."""

from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.core.exceptions import NotFoundException
from welltrack.models.trackables import habits
from welltrack.schemas.trackables import HabitCreate, HabitResponse, HabitUpdate
from welltrack.services.common import ensure_owner, visible_to

logger = structlog.get_logger(__name__)


class HabitService:
    """System habits plus the user's own."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_habits(self, user_id: UUID) -> list[HabitResponse]:
        stmt = select(habits).where(visible_to(habits, user_id)).order_by(habits.c.name)
        result = await self.db.execute(stmt)
        return [HabitResponse.model_validate(dict(row._mapping)) for row in result.fetchall()]

    async def get_visible(self, user_id: UUID, habit_id: UUID) -> HabitResponse:
        """
        Get a habit the user can log against.

        Raises:
            NotFoundException: If it does not exist or belongs to someone else
        """
        result = await self.db.execute(
            select(habits).where(habits.c.id == habit_id, visible_to(habits, user_id))
        )
        row = result.first()
        if not row:
            raise NotFoundException("Habit not found")
        return HabitResponse.model_validate(dict(row._mapping))

    async def create_habit(self, user_id: UUID, data: HabitCreate) -> HabitResponse:
        result = await self.db.execute(
            insert(habits)
            .values(user_id=user_id, **data.model_dump(mode="json"))
            .returning(habits)
        )
        row = result.one()
        await self.db.commit()
        logger.info("habit_created", user_id=str(user_id), habit_id=str(row.id))
        return HabitResponse.model_validate(dict(row._mapping))

    async def update_habit(
        self,
        user_id: UUID,
        habit_id: UUID,
        data: HabitUpdate,
    ) -> HabitResponse:
        """
        Update one of the user's own habits.

        Raises:
            NotFoundException: If the habit does not exist
            ForbiddenException: If it is a system habit or someone else's
        """
        await self._get_owned(user_id, habit_id)
        values = data.model_dump(exclude_unset=True)
        if values:
            await self.db.execute(update(habits).where(habits.c.id == habit_id).values(**values))
            await self.db.commit()
        result = await self.db.execute(select(habits).where(habits.c.id == habit_id))
        return HabitResponse.model_validate(dict(result.one()._mapping))

    async def delete_habit(self, user_id: UUID, habit_id: UUID) -> None:
        """Delete one of the user's own habits and its logs."""
        await self._get_owned(user_id, habit_id)
        await self.db.execute(delete(habits).where(habits.c.id == habit_id))
        await self.db.commit()
        logger.info("habit_deleted", user_id=str(user_id), habit_id=str(habit_id))

    async def _get_owned(self, user_id: UUID, habit_id: UUID):
        result = await self.db.execute(select(habits).where(habits.c.id == habit_id))
        row = result.first()
        ensure_owner(row, user_id, "Habit")
        return row
