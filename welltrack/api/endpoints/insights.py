"""Insights endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from welltrack.core.exceptions import ValidationException
from welltrack.dependencies import CurrentUserId, DatabaseSession
from welltrack.schemas.insights import ActivityPoint, StreakResponse, TrendPoint
from welltrack.services.insights_service import InsightsService

router = APIRouter()

# Unsupported window lengths fall back to the default instead of failing
Days = Annotated[str | None, Query(description="Window length: 7, 30 or 90 days")]


@router.get("/trends", response_model=list[TrendPoint], summary="Daily averages of a metric")
async def get_trends(
    user_id: CurrentUserId,
    db: DatabaseSession,
    metric: Annotated[
        str | None,
        Query(alias="type", description="mood, energy, stress or a symptom id"),
    ] = None,
    days: Days = None,
) -> list[TrendPoint]:
    if not metric:
        raise ValidationException("type is required")
    return await InsightsService(db).trend(user_id, metric, days)


@router.get("/activity", response_model=list[ActivityPoint], summary="Logs per day")
async def get_activity(user_id: CurrentUserId, db: DatabaseSession, days: Days = None) -> list[ActivityPoint]:
    """Counts across symptom, mood, medication and habit logs."""
    return await InsightsService(db).activity(user_id, days)


@router.get("/streak", response_model=StreakResponse, summary="Current logging streak")
async def get_streak(user_id: CurrentUserId, db: DatabaseSession) -> StreakResponse:
    """
    Consecutive days with at least one log.

    A day without logs yet today does not break the streak; counting then
    starts from yesterday.
    """
    return await InsightsService(db).streak(user_id)
