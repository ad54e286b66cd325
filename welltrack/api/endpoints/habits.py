"""Habit endpoints."""

from fastapi import APIRouter, Request, Response, status

from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession
from welltrack.schemas.trackables import HabitCreate, HabitResponse, HabitUpdate
from welltrack.services.common import parse_id
from welltrack.services.habit_service import HabitService

router = APIRouter()


@router.get("", response_model=list[HabitResponse], summary="List habits")
async def list_habits(user_id: CurrentUserId, db: DatabaseSession) -> list[HabitResponse]:
    """System habits and the user's own, ordered by name."""
    return await HabitService(db).list_habits(user_id)


@router.post(
    "",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a custom habit",
)
@write_limit
async def create_habit(
    request: Request,
    data: HabitCreate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> HabitResponse:
    return await HabitService(db).create_habit(user_id, data)


@router.patch("/{habit_id}", response_model=HabitResponse, summary="Update a custom habit")
@write_limit
async def update_habit(
    request: Request,
    habit_id: str,
    data: HabitUpdate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> HabitResponse:
    """System habits and other users' habits cannot be changed (403)."""
    return await HabitService(db).update_habit(user_id, parse_id(habit_id, "Habit"), data)


@router.delete(
    "/{habit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a custom habit",
)
@write_limit
async def delete_habit(
    request: Request,
    habit_id: str,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> Response:
    await HabitService(db).delete_habit(user_id, parse_id(habit_id, "Habit"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
