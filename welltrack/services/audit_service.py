"""Append-only audit trail."""

from enum import Enum
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.models.audit_logs import audit_logs
from welltrack.schemas.users import AuditLogEntry

logger = structlog.get_logger(__name__)


class AuditAction(str, Enum):
    LOGIN = "login"
    PASSWORD_CHANGE = "password_change"
    EMAIL_CHANGE = "email_change"


class AuditService:
    """Records and lists security-relevant account events."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        user_id: UUID,
        action: AuditAction,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Append an event to the caller's transaction.

        The caller commits; events never update or delete existing rows.
        """
        await self.db.execute(
            insert(audit_logs).values(user_id=user_id, action=action.value, metadata=metadata)
        )
        logger.info("audit_event_recorded", user_id=str(user_id), action=action.value)

    async def list_for_user(self, user_id: UUID, limit: int = 100) -> list[AuditLogEntry]:
        """Newest events first."""
        stmt = (
            select(audit_logs)
            .where(audit_logs.c.user_id == user_id)
            .order_by(audit_logs.c.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [AuditLogEntry.model_validate(dict(row._mapping)) for row in result.fetchall()]
