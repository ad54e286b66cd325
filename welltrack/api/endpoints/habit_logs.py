"""Habit log endpoints.

The value field sent must match the habit's tracking type.
"""

from fastapi import APIRouter, Request, Response, status

from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession, Dates, Pagination
from welltrack.schemas.logs import HabitLogCreate, HabitLogResponse, HabitLogUpdate
from welltrack.services.common import parse_id
from welltrack.services.habit_log_service import HabitLogService

router = APIRouter()


@router.get("", response_model=list[HabitLogResponse], summary="List habit logs")
async def list_habit_logs(
    user_id: CurrentUserId,
    db: DatabaseSession,
    dates: Dates,
    page: Pagination,
) -> list[HabitLogResponse]:
    """The user's habit logs, newest first, each with its habit."""
    return await HabitLogService(db).list_logs(user_id, dates.start, dates.end, page.limit, page.offset)


@router.post(
    "",
    response_model=HabitLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a habit",
)
@write_limit
async def create_habit_log(
    request: Request,
    data: HabitLogCreate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> HabitLogResponse:
    return await HabitLogService(db).create_log(user_id, data)


@router.patch("/{log_id}", response_model=HabitLogResponse, summary="Update a habit log")
@write_limit
async def update_habit_log(
    request: Request,
    log_id: str,
    data: HabitLogUpdate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> HabitLogResponse:
    return await HabitLogService(db).update_log(user_id, parse_id(log_id, "Habit log"), data)


@router.delete(
    "/{log_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a habit log",
)
@write_limit
async def delete_habit_log(
    request: Request,
    log_id: str,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> Response:
    await HabitLogService(db).delete_log(user_id, parse_id(log_id, "Habit log"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
