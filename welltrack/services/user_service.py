"""User profile service."""

from uuid import UUID

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.core.exceptions import ConflictException, NotFoundException
from welltrack.core.security import generate_secure_token
from welltrack.models.users import users
from welltrack.schemas.users import UserProfile, UserUpdate
from welltrack.services.audit_service import AuditAction, AuditService

logger = structlog.get_logger(__name__)


class UserService:
    """Service for the signed-in user's own account."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def get_profile(self, user_id: UUID) -> UserProfile:
        """
        Get the user's profile.

        Raises:
            NotFoundException: If the account no longer exists
        """
        result = await self.db.execute(select(users).where(users.c.id == user_id))
        row = result.first()
        if not row:
            raise NotFoundException("User not found")
        return UserProfile.model_validate(dict(row._mapping))

    async def update_profile(self, user_id: UUID, data: UserUpdate) -> UserProfile:
        """
        Apply a partial profile update.

        Changing the email records an ``email_change`` audit event; opting in
        to the weekly digest mints the unsubscribe token on first opt-in.

        Raises:
            ConflictException: If the new email belongs to another account
            NotFoundException: If the account no longer exists
        """
        current = await self.get_profile(user_id)
        values = data.model_dump(exclude_unset=True)

        email_changed = "email" in values and values["email"] != current.email
        if "email" in values:
            values["email"] = str(values["email"])
            taken = await self.db.execute(
                select(users.c.id).where(users.c.email == values["email"], users.c.id != user_id)
            )
            if taken.first():
                raise ConflictException("Email already in use")

        if values.get("weekly_digest_opt_in"):
            token_result = await self.db.execute(
                select(users.c.weekly_digest_token).where(users.c.id == user_id)
            )
            if not token_result.scalar():
                values["weekly_digest_token"] = generate_secure_token()

        if not values:
            return current

        try:
            await self.db.execute(update(users).where(users.c.id == user_id).values(**values))
            if email_changed:
                await AuditService(self.db).record(
                    user_id,
                    AuditAction.EMAIL_CHANGE,
                    {"from": current.email, "to": values["email"]},
                )
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException("Email already in use") from None

        logger.info("user_profile_updated", user_id=str(user_id), fields=sorted(values))
        return await self.get_profile(user_id)

    async def delete_account(self, user_id: UUID) -> None:
        """Delete the account; owned rows go with it through ON DELETE CASCADE."""
        await self.db.execute(delete(users).where(users.c.id == user_id))
        await self.db.commit()
        logger.info("user_deleted", user_id=str(user_id))

    async def unsubscribe_digest(self, token: str) -> None:
        """
        Opt out of the weekly digest through an emailed link.

        Raises:
            NotFoundException: If no account holds the token
        """
        result = await self.db.execute(
            update(users)
            .where(users.c.weekly_digest_token == token)
            .values(weekly_digest_opt_in=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundException("Invalid or expired unsubscribe link")
        await self.db.commit()
        logger.info("weekly_digest_unsubscribed")
