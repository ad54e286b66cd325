"""Daily aggregates over a user's logs: trends, activity and streaks.

Every calculation buckets timestamps by their UTC calendar date. The
reference "now" is injectable so results are reproducible in tests.
"""

from collections import defaultdict
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime, time, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.core.exceptions import NotFoundException
from welltrack.models.logs import habit_logs, medication_logs, mood_logs, symptom_logs
from welltrack.schemas.insights import ActivityPoint, StreakResponse, TrendPoint
from welltrack.services.symptom_service import SymptomService

ALLOWED_WINDOWS = (7, 30, 90)
DEFAULT_WINDOW = 30
STREAK_LOOKBACK_DAYS = 400

# Trend type selector -> mood_logs column
MOOD_METRICS = {
    "mood": mood_logs.c.mood_score,
    "energy": mood_logs.c.energy_level,
    "stress": mood_logs.c.stress_level,
}


def normalize_window(days: int | str | None) -> int:
    """Window length in days; anything outside 7/30/90 falls back to 30."""
    try:
        value = int(days) if days is not None else DEFAULT_WINDOW
    except (TypeError, ValueError):
        return DEFAULT_WINDOW
    return value if value in ALLOWED_WINDOWS else DEFAULT_WINDOW


def utc_date(moment: datetime) -> date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(UTC).date()


def window_start(now: datetime, days: int) -> datetime:
    """UTC midnight of ``today - (days - 1)``."""
    first_day = utc_date(now) - timedelta(days=days - 1)
    return datetime.combine(first_day, time.min, tzinfo=UTC)


def daily_averages(samples: Iterable[tuple[datetime, float | None]]) -> list[TrendPoint]:
    """One point per date that has at least one non-null value, ascending."""
    buckets: dict[date, list[float]] = defaultdict(list)
    for moment, value in samples:
        if value is None:
            continue
        buckets[utc_date(moment)].append(value)
    return [
        TrendPoint(date=day.isoformat(), avg=sum(values) / len(values))
        for day, values in sorted(buckets.items())
    ]


def daily_counts(moments: Iterable[datetime]) -> list[ActivityPoint]:
    counts: dict[date, int] = defaultdict(int)
    for moment in moments:
        counts[utc_date(moment)] += 1
    return [ActivityPoint(date=day.isoformat(), count=n) for day, n in sorted(counts.items())]


def current_streak(logged_days: set[date], today: date) -> int:
    """
    Consecutive logged days ending today.

    A day without logs only breaks the streak once it is over, so when today
    has nothing yet the count starts from yesterday.
    """
    cursor = today if today in logged_days else today - timedelta(days=1)
    streak = 0
    while cursor in logged_days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


class InsightsService:
    """Aggregations for the insights endpoints and the weekly digest."""

    def __init__(self, db: AsyncSession, now: Callable[[], datetime] | None = None):
        self.db = db
        self.now = now or (lambda: datetime.now(UTC))

    async def trend(self, user_id: UUID, metric: str, days: int | str | None = None) -> list[TrendPoint]:
        """
        Daily averages of one metric.

        Args:
            user_id: Owner of the logs
            metric: ``mood``, ``energy``, ``stress`` or a symptom id
            days: Window length (7, 30 or 90; anything else means 30)

        Raises:
            NotFoundException: If ``metric`` is not a symptom visible to the user
        """
        start = window_start(self.now(), normalize_window(days))

        if metric in MOOD_METRICS:
            column = MOOD_METRICS[metric]
            stmt = select(mood_logs.c.logged_at, column).where(
                mood_logs.c.user_id == user_id,
                mood_logs.c.logged_at >= start,
            )
        else:
            try:
                symptom_id = UUID(metric)
            except ValueError:
                raise NotFoundException("Symptom not found") from None
            await SymptomService(self.db).get_visible(user_id, symptom_id)
            stmt = select(symptom_logs.c.logged_at, symptom_logs.c.severity).where(
                symptom_logs.c.user_id == user_id,
                symptom_logs.c.symptom_id == symptom_id,
                symptom_logs.c.logged_at >= start,
            )

        result = await self.db.execute(stmt)
        return daily_averages((row[0], row[1]) for row in result.fetchall())

    async def activity(self, user_id: UUID, days: int | str | None = None) -> list[ActivityPoint]:
        """Number of logs of any kind per day."""
        start = window_start(self.now(), normalize_window(days))
        return daily_counts(await self.log_timestamps(user_id, start))

    async def streak(self, user_id: UUID) -> StreakResponse:
        now = self.now()
        start = window_start(now, STREAK_LOOKBACK_DAYS)
        moments = await self.log_timestamps(user_id, start)
        logged_days = {utc_date(moment) for moment in moments}
        return StreakResponse(current_streak=current_streak(logged_days, utc_date(now)))

    async def log_timestamps(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime | None = None,
    ) -> list[datetime]:
        """Timestamps of every log since ``start`` across all four log tables."""
        sources = (
            (symptom_logs, symptom_logs.c.logged_at),
            (mood_logs, mood_logs.c.logged_at),
            (medication_logs, medication_logs.c.created_at),
            (habit_logs, habit_logs.c.logged_at),
        )
        moments: list[datetime] = []
        for table, column in sources:
            conditions = [table.c.user_id == user_id, column >= start]
            if end is not None:
                conditions.append(column < end)
            result = await self.db.execute(select(column).where(*conditions))
            moments.extend(result.scalars().all())
        return moments
