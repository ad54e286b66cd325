"""Insights schemas."""

from welltrack.schemas.common import CamelModel


class TrendPoint(CamelModel):
    date: str
    avg: float


class ActivityPoint(CamelModel):
    date: str
    count: int


class StreakResponse(CamelModel):
    current_streak: int
