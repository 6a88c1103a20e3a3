"""Periodic task scheduler on top of asyncio."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Iterable, Protocol

from ..models import SchedulerStatus, TaskStatus

logger = logging.getLogger(__name__)

Handler = Callable[[], Awaitable[Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Trigger(Protocol):
    def next_fire(self, after: datetime) -> datetime: ...

    def next_delay(self, now: datetime) -> float: ...


@dataclass(frozen=True)
class IntervalTrigger:
    """Fire every ``seconds``."""

    seconds: float

    def __post_init__(self) -> None:
        if self.seconds <= 0:
            raise ValueError(f"Interval must be positive, got {self.seconds}")

    def next_fire(self, after: datetime) -> datetime:
        return after + timedelta(seconds=self.seconds)

    def next_delay(self, now: datetime) -> float:
        return float(self.seconds)


@dataclass(frozen=True)
class DailyTrigger:
    """Fire once a day at ``hour:minute`` UTC."""

    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        if not (0 <= self.hour <= 23 and 0 <= self.minute <= 59):
            raise ValueError(f"Invalid time of day {self.hour:02d}:{self.minute:02d}")

    def next_fire(self, after: datetime) -> datetime:
        """First ``hour:minute`` strictly later than ``after``."""
        target = after.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if target <= after:
            target += timedelta(days=1)
        return target

    def next_delay(self, now: datetime) -> float:
        return (self.next_fire(now) - now).total_seconds()


@dataclass(frozen=True)
class TaskSpec:
    name: str
    trigger: Trigger
    handler: Handler
    allow_overlap: bool = False


@dataclass
class ScheduledTask:
    """Runtime state of one registered task."""

    spec: TaskSpec
    in_flight: int = 0
    timer: asyncio.Task | None = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def is_running(self) -> bool:
        return self.in_flight > 0

    @property
    def enabled(self) -> bool:
        return self.timer is not None and not self.timer.done()


class TaskScheduler:
    """Run named async handlers on interval or daily triggers.

    A handler failure is logged and never stops its timer or any other task.
    By default a tick is skipped while the previous invocation of the same
    task is still in flight.
    """

    def __init__(
        self,
        specs: Iterable[TaskSpec],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._specs: dict[str, TaskSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate task name: {spec.name}")
            self._specs[spec.name] = spec
        self._clock = clock
        self._tasks = self._build_registry()
        self._in_flight: set[asyncio.Task] = set()
        self._running = False

    def _build_registry(self) -> dict[str, ScheduledTask]:
        return {name: ScheduledTask(spec) for name, spec in self._specs.items()}

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start every timer loop. Must be called with a running event loop."""
        if self._running:
            logger.warning("Scheduler is already running")
            return

        loop = asyncio.get_running_loop()
        self._tasks = self._build_registry()
        for task in self._tasks.values():
            task.timer = loop.create_task(self._timer_loop(task), name=f"timer:{task.name}")
        self._running = True
        logger.info("Scheduler started with %d tasks", len(self._tasks))

    def stop(self) -> None:
        """Cancel timers and clear the registry; in-flight runs finish on their own."""
        if not self._running:
            return
        for task in self._tasks.values():
            if task.timer is not None:
                task.timer.cancel()
        self._tasks = {}
        self._running = False
        logger.info("Scheduler stopped")

    async def drain(self) -> None:
        """Wait for in-flight handler invocations to finish."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _timer_loop(self, task: ScheduledTask) -> None:
        trigger = task.spec.trigger
        target = trigger.next_fire(self._clock())
        while True:
            delay = (target - self._clock()).total_seconds()
            await asyncio.sleep(max(0.0, delay))
            invocation = asyncio.create_task(self._invoke(task))
            self._in_flight.add(invocation)
            invocation.add_done_callback(self._in_flight.discard)
            # Advance from the slot just fired; the wall clock may still read
            # slightly before it when the monotonic sleep wakes early.
            target = trigger.next_fire(max(self._clock(), target))

    async def _invoke(self, task: ScheduledTask) -> bool:
        if task.is_running and not task.spec.allow_overlap:
            logger.warning("Task %s is still running, skipping this run", task.name)
            return False

        task.in_flight += 1
        try:
            await task.spec.handler()
        except Exception:
            logger.exception("Task %s failed", task.name)
            return False
        finally:
            task.in_flight -= 1
        return True

    async def execute_task(self, name: str) -> bool:
        """Run ``name`` now; False when unknown, already running or failed."""
        task = self._tasks.get(name)
        if task is None:
            logger.error("Task %s not found", name)
            return False
        logger.info("Manually executing task %s", name)
        return await self._invoke(task)

    def get_status(self) -> SchedulerStatus:
        return SchedulerStatus(
            is_running=self._running,
            task_count=len(self._tasks),
            tasks=tuple(
                TaskStatus(name=t.name, running=t.is_running, enabled=t.enabled)
                for t in self._tasks.values()
            ),
        )
