"""Mood log endpoints."""

from fastapi import APIRouter, Request, Response, status

from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession, Dates, Pagination
from welltrack.schemas.logs import MoodLogCreate, MoodLogResponse, MoodLogUpdate
from welltrack.services.common import parse_id
from welltrack.services.mood_log_service import MoodLogService

router = APIRouter()


@router.get("", response_model=list[MoodLogResponse], summary="List mood logs")
async def list_mood_logs(
    user_id: CurrentUserId,
    db: DatabaseSession,
    dates: Dates,
    page: Pagination,
) -> list[MoodLogResponse]:
    """The user's mood check-ins, newest first."""
    return await MoodLogService(db).list_logs(user_id, dates.start, dates.end, page.limit, page.offset)


@router.post(
    "",
    response_model=MoodLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a mood entry",
)
@write_limit
async def create_mood_log(
    request: Request,
    data: MoodLogCreate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> MoodLogResponse:
    return await MoodLogService(db).create_log(user_id, data)


@router.patch("/{log_id}", response_model=MoodLogResponse, summary="Update a mood log")
@write_limit
async def update_mood_log(
    request: Request,
    log_id: str,
    data: MoodLogUpdate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> MoodLogResponse:
    return await MoodLogService(db).update_log(user_id, parse_id(log_id, "Mood log"), data)


@router.delete(
    "/{log_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a mood log",
)
@write_limit
async def delete_mood_log(
    request: Request,
    log_id: str,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> Response:
    await MoodLogService(db).delete_log(user_id, parse_id(log_id, "Mood log"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
