"""FastAPI dependencies."""

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.core.exceptions import UnauthorizedException
from welltrack.core.security import decode_access_token
from welltrack.database import get_db
from welltrack.services.common import DEFAULT_PAGE_SIZE, page_size, parse_date_bound
from welltrack.services.notification_service import (
    NotificationSender,
    get_notification_sender,
)

INVALID_ACCESS_TOKEN = "Invalid or expired access token"

# Missing credentials are reported by get_current_user_id as a 401
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """
    Extract and validate the user ID from the bearer access token.

    Args:
        credentials: Bearer token credentials, if any were sent

    Returns:
        User ID from the token

    Raises:
        UnauthorizedException: If the header is missing or the token is
            malformed, expired, badly signed or not an access token
    """
    if credentials is None:
        raise UnauthorizedException(INVALID_ACCESS_TOKEN)

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException(INVALID_ACCESS_TOKEN)

    user_id_str = payload.get("sub")
    if not isinstance(user_id_str, str):
        raise UnauthorizedException(INVALID_ACCESS_TOKEN)

    try:
        return UUID(user_id_str)
    except ValueError:
        raise UnauthorizedException(INVALID_ACCESS_TOKEN) from None


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
Notifier = Annotated[NotificationSender, Depends(get_notification_sender)]


@dataclass(frozen=True)
class DateRange:
    start: datetime | None
    end: datetime | None


@dataclass(frozen=True)
class Page:
    limit: int
    offset: int


def get_date_range(
    start_date: Annotated[str | None, Query(alias="startDate")] = None,
    end_date: Annotated[str | None, Query(alias="endDate")] = None,
) -> DateRange:
    """``startDate``/``endDate`` as ISO dates or datetimes (422 when unparsable)."""
    return DateRange(
        start=parse_date_bound(start_date, "startDate"),
        end=parse_date_bound(end_date, "endDate", end=True),
    )


def get_page(
    limit: Annotated[int, Query(ge=1)] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> Page:
    """Pagination; ``limit`` is capped at the maximum page size."""
    return Page(limit=page_size(limit), offset=offset)


Dates = Annotated[DateRange, Depends(get_date_range)]
Pagination = Annotated[Page, Depends(get_page)]
