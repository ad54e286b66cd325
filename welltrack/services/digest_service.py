"""Weekly wellness digest."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from welltrack.config import settings
from welltrack.models.logs import habit_logs, medication_logs, mood_logs, symptom_logs
from welltrack.models.users import users
from welltrack.services.insights_service import InsightsService, utc_date, window_start
from welltrack.services.notification_service import Notification, NotificationSender

logger = structlog.get_logger(__name__)

DIGEST_DAYS = 7


@dataclass(frozen=True)
class DigestSummary:
    week_start: str
    week_end: str
    days_logged: int
    symptom_logs: int
    mood_logs: int
    medication_logs: int
    habit_logs: int
    avg_mood: float | None
    avg_energy: float | None
    avg_stress: float | None
    current_streak: int

    @property
    def total_entries(self) -> int:
        return self.symptom_logs + self.mood_logs + self.medication_logs + self.habit_logs


@dataclass(frozen=True)
class DigestRunResult:
    sent: int
    failed: int


def _average(values: list[int]) -> float | None:
    return sum(values) / len(values) if values else None


def _fmt(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.1f}"


def digest_notification(summary: DigestSummary, unsubscribe_url: str) -> Notification:
    text = (
        f"Your WellTrack week: {summary.week_start} to {summary.week_end}\n\n"
        f"Days logged: {summary.days_logged} of {DIGEST_DAYS}\n"
        f"Current streak: {summary.current_streak} day(s)\n"
        f"Entries: {summary.total_entries} "
        f"(symptoms {summary.symptom_logs}, mood {summary.mood_logs}, "
        f"medications {summary.medication_logs}, habits {summary.habit_logs})\n"
        f"Average mood: {_fmt(summary.avg_mood)}\n"
        f"Average energy: {_fmt(summary.avg_energy)}\n"
        f"Average stress: {_fmt(summary.avg_stress)}\n\n"
        f"Unsubscribe from these emails: {unsubscribe_url}\n"
    )
    return Notification(subject="Your weekly WellTrack digest", text=text)


class DigestService:
    """Builds and sends the weekly digest to every opted-in user."""

    def __init__(
        self,
        db: AsyncSession,
        sender: NotificationSender,
        now: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.sender = sender
        self.now = now or (lambda: datetime.now(UTC))

    async def build_summary(self, user_id: UUID) -> DigestSummary:
        """Statistics for the last seven UTC days, today included."""
        now = self.now()
        start = window_start(now, DIGEST_DAYS)
        end = start + timedelta(days=DIGEST_DAYS)

        counts = {}
        for name, table, column in (
            ("symptom_logs", symptom_logs, symptom_logs.c.logged_at),
            ("medication_logs", medication_logs, medication_logs.c.created_at),
            ("habit_logs", habit_logs, habit_logs.c.logged_at),
        ):
            result = await self.db.execute(
                select(column).where(table.c.user_id == user_id, column >= start, column < end)
            )
            counts[name] = result.scalars().all()

        mood_result = await self.db.execute(
            select(
                mood_logs.c.logged_at,
                mood_logs.c.mood_score,
                mood_logs.c.energy_level,
                mood_logs.c.stress_level,
            ).where(
                mood_logs.c.user_id == user_id,
                mood_logs.c.logged_at >= start,
                mood_logs.c.logged_at < end,
            )
        )
        moods = mood_result.fetchall()

        logged_days = {utc_date(moment) for moments in counts.values() for moment in moments}
        logged_days.update(utc_date(row.logged_at) for row in moods)

        insights = InsightsService(self.db, now=self.now)
        streak = await insights.streak(user_id)

        return DigestSummary(
            week_start=start.date().isoformat(),
            week_end=(end - timedelta(days=1)).date().isoformat(),
            days_logged=len(logged_days),
            symptom_logs=len(counts["symptom_logs"]),
            mood_logs=len(moods),
            medication_logs=len(counts["medication_logs"]),
            habit_logs=len(counts["habit_logs"]),
            avg_mood=_average([row.mood_score for row in moods]),
            avg_energy=_average([row.energy_level for row in moods if row.energy_level is not None]),
            avg_stress=_average([row.stress_level for row in moods if row.stress_level is not None]),
            current_streak=streak.current_streak,
        )

    async def run(self) -> DigestRunResult:
        """
        Send the digest to every opted-in user, one at a time.

        A failure for one user is logged and does not stop the others.
        """
        result = await self.db.execute(
            select(users.c.id, users.c.email, users.c.weekly_digest_token).where(
                users.c.weekly_digest_opt_in.is_(True),
                users.c.weekly_digest_token.is_not(None),
            )
        )
        recipients = result.fetchall()
        logger.info("weekly_digest_started", recipients=len(recipients))

        sent = failed = 0
        api_base = settings.api_base_url.rstrip("/")
        for user in recipients:
            try:
                summary = await self.build_summary(user.id)
                unsubscribe_url = (
                    f"{api_base}{settings.api_prefix}/users/unsubscribe?token={user.weekly_digest_token}"
                )
                await self.sender.send(user.email, digest_notification(summary, unsubscribe_url))
            except Exception as e:
                failed += 1
                await self.db.rollback()
                logger.exception("weekly_digest_failed", user_id=str(user.id), error=str(e))
                continue
            sent += 1

        logger.info("weekly_digest_completed", sent=sent, failed=failed)
        return DigestRunResult(sent=sent, failed=failed)
