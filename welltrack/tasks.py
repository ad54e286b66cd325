"""Scheduled jobs of the application."""

from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from welltrack.config import settings
from welltrack.core.scheduler import Clock, TaskRegistry, WeeklySchedule, utc_now
from welltrack.services.digest_service import DigestRunResult, DigestService
from welltrack.services.notification_service import NotificationSender

WEEKLY_DIGEST = "weekly_digest"


async def send_weekly_digest(
    session_factory: async_sessionmaker[AsyncSession],
    sender: NotificationSender,
    now: Callable[[], datetime] = utc_now,
) -> DigestRunResult:
    """Run the weekly digest in a session of its own."""
    async with session_factory() as session:
        return await DigestService(session, sender, now=now).run()


def create_task_registry(
    session_factory: async_sessionmaker[AsyncSession],
    sender: NotificationSender,
    clock: Clock = utc_now,
) -> TaskRegistry:
    """
    Build the registry with every scheduled job registered.

    Args:
        session_factory: Sessions for the jobs' database work
        sender: Delivery backend for outgoing notifications
        clock: Source of the current time for scheduling and the jobs

    Returns:
        A registry that has not been started
    """
    registry = TaskRegistry(clock=clock, timezone=settings.digest_timezone)
    registry.register(
        WEEKLY_DIGEST,
        WeeklySchedule(
            weekday=settings.digest_weekday,
            hour=settings.digest_hour,
            minute=settings.digest_minute,
        ),
        lambda: send_weekly_digest(session_factory, sender, now=clock),
    )
    return registry
