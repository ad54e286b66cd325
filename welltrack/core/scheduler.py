"""In-process scheduled task registry.

The registry is created once by the application lifespan with an injected
clock and time zone. Each task runs on a weekly wall-clock schedule in that
zone; ``run_now`` executes a task immediately for tests and operations.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta
from zoneinfo import ZoneInfo

import structlog

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]
TaskCallback = Callable[[], Awaitable[object]]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class WeeklySchedule:
    """A fixed weekday and wall-clock time (weekday: Monday=0)."""

    weekday: int
    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.weekday <= 6:
            raise ValueError("weekday must be between 0 and 6")
        if not 0 <= self.hour <= 23:
            raise ValueError("hour must be between 0 and 23")
        if not 0 <= self.minute <= 59:
            raise ValueError("minute must be between 0 and 59")

    def next_run(self, after: datetime, tz: ZoneInfo) -> datetime:
        """
        First run strictly after ``after``.

        Args:
            after: Aware reference instant
            tz: Zone the weekday and wall-clock time are expressed in

        Returns:
            Aware datetime in ``tz``
        """
        local = after.astimezone(tz)
        days_ahead = (self.weekday - local.weekday()) % 7
        candidate = datetime.combine(
            local.date() + timedelta(days=days_ahead),
            time(self.hour, self.minute),
            tzinfo=tz,
        )
        if candidate <= local:
            candidate = datetime.combine(
                candidate.date() + timedelta(days=7),
                candidate.timetz(),
            )
        return candidate


@dataclass
class ScheduledTask:
    name: str
    schedule: WeeklySchedule
    callback: TaskCallback
    last_run_at: datetime | None = None
    last_error: str | None = None
    runs: int = field(default=0)


class TaskRegistry:
    """Holds scheduled tasks and drives them from the event loop."""

    def __init__(self, clock: Clock = utc_now, timezone: str = "UTC"):
        self.clock = clock
        self.tz = ZoneInfo(timezone)
        self._tasks: dict[str, ScheduledTask] = {}
        self._runners: dict[str, asyncio.Task] = {}

    @property
    def tasks(self) -> list[ScheduledTask]:
        return list(self._tasks.values())

    @property
    def running(self) -> bool:
        return bool(self._runners)

    def register(self, name: str, schedule: WeeklySchedule, callback: TaskCallback) -> ScheduledTask:
        """Add a task. Names are unique within a registry."""
        if name in self._tasks:
            raise ValueError(f"Task already registered: {name}")
        task = ScheduledTask(name=name, schedule=schedule, callback=callback)
        self._tasks[name] = task
        logger.info(
            "scheduled_task_registered",
            task=name,
            weekday=schedule.weekday,
            hour=schedule.hour,
            minute=schedule.minute,
            timezone=str(self.tz),
        )
        return task

    def next_run(self, name: str) -> datetime:
        """Next run of a task after the registry clock's current time."""
        return self._get(name).schedule.next_run(self.clock(), self.tz)

    async def run_now(self, name: str) -> bool:
        """
        Execute a task immediately.

        A failure is logged and recorded on the task; it never propagates.

        Returns:
            True if the callback completed without raising
        """
        task = self._get(name)
        task.last_run_at = self.clock()
        task.runs += 1
        logger.info("scheduled_task_started", task=name)
        try:
            await task.callback()
        except Exception as e:
            task.last_error = str(e)
            logger.exception("scheduled_task_failed", task=name, error=str(e))
            return False
        task.last_error = None
        logger.info("scheduled_task_completed", task=name)
        return True

    def start(self) -> None:
        """Start one runner per registered task on the running loop."""
        for name in self._tasks:
            if name not in self._runners:
                self._runners[name] = asyncio.create_task(self._run_forever(name), name=f"scheduled:{name}")
        logger.info("task_registry_started", tasks=list(self._runners))

    async def stop(self) -> None:
        """Cancel all runners and wait for them to finish."""
        runners = list(self._runners.values())
        self._runners.clear()
        for runner in runners:
            runner.cancel()
        await asyncio.gather(*runners, return_exceptions=True)
        logger.info("task_registry_stopped")

    async def _run_forever(self, name: str) -> None:
        schedule = self._get(name).schedule
        previous: datetime | None = None
        while True:
            now = self.clock()
            # Never fire twice for the same slot if the sleep returned early
            due = schedule.next_run(max(now, previous) if previous else now, self.tz)
            previous = due
            delay = (due - self.clock()).total_seconds()
            logger.debug("scheduled_task_waiting", task=name, next_run=due.isoformat())
            if delay > 0:
                await asyncio.sleep(delay)
            await self.run_now(name)

    def _get(self, name: str) -> ScheduledTask:
        try:
            return self._tasks[name]
        except KeyError:
            raise KeyError(f"Unknown task: {name}") from None
