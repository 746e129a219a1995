from __future__ import annotations

import asyncio
import datetime as _dt
import re
from collections.abc import AsyncIterator

from taskdesk.errors import NoTaskSelectedError, TaskCompletedError
from taskdesk.models import Task, TaskStatus
from taskdesk.models.task import local_now
from taskdesk.observability import get_json_logger
from taskdesk.store import Clock, TaskStore

TICK_INTERVAL_S = 1.0


def with_added_time(task: Task, minutes: int) -> Task:
    """Copy of ``task`` with ``minutes`` added to its tracked time."""
    return task.model_copy(update={"actual_time": (task.actual_time or 0) + minutes})


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_minutes(value: int | str) -> int:
    """Read a positive whole number of minutes.

    Strings are read like a form field: leading whitespace is skipped and the
    leading integer is taken, so ``"12.5"`` is 12 and ``"10min"`` is 10.
    """
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        if m is None:
            raise ValueError("enter a valid number of minutes")
        value = int(m.group(1))
    if isinstance(value, bool) or value <= 0:
        raise ValueError("enter a valid number of minutes")
    return value


class TimeTracker:
    """Stopwatch over the tasks of a ``TaskStore``.

    Running the clock touches nothing; ``pause``/``stop`` writes the whole
    elapsed minutes into the task's ``actual_time`` with a single update.
    """

    def __init__(self, store: TaskStore, *, clock: Clock = local_now) -> None:
        self._store = store
        self._clock = clock
        self._task_id: str | None = None
        self._started_at: _dt.datetime | None = None
        self._logger = get_json_logger("taskdesk.tracking")

    @property
    def is_tracking(self) -> bool:
        return self._started_at is not None

    @property
    def task_id(self) -> str | None:
        return self._task_id

    def start(self, task: Task | None = None) -> None:
        """Start timing ``task`` (default: the selected task).

        A session already running is paused first, so its minutes are written
        before the new one begins. Completed tasks cannot be tracked.
        """
        target = task or self._store.selected_task
        if target is None:
            raise NoTaskSelectedError()
        if target.status == TaskStatus.COMPLETED:
            raise TaskCompletedError(target.id)
        if self.is_tracking:
            self.pause()
        self._task_id = target.id
        self._started_at = self._clock()
        self._logger.info(
            "tracking started", extra={"event": "tracking_start", "task_id": target.id}
        )

    def elapsed_minutes(self, now: _dt.datetime | None = None) -> int:
        if self._started_at is None:
            return 0
        seconds = ((now or self._clock()) - self._started_at).total_seconds()
        return max(0, int(seconds // 60))

    def pause(self) -> Task | None:
        if self._started_at is None or self._task_id is None:
            return None
        minutes = self.elapsed_minutes()
        task = next((t for t in self._store.tasks if t.id == self._task_id), None)
        task_id = self._task_id
        self._task_id = None
        self._started_at = None
        if task is None:
            self._logger.info(
                "tracked task is gone; session dropped",
                extra={"event": "tracking_dropped", "task_id": task_id},
            )
            return None
        self._logger.info(
            "tracking paused",
            extra={
                "event": "tracking_pause",
                "task_id": task_id,
                "attributes": {"minutes": minutes},
            },
        )
        return self._store.update(with_added_time(task, minutes))

    def stop(self) -> Task | None:
        return self.pause()

    def add_manual_time(self, minutes: int | str, task: Task | None = None) -> Task | None:
        amount = parse_minutes(minutes)
        target = task or self._store.selected_task
        if target is None:
            raise NoTaskSelectedError()
        return self._store.update(with_added_time(target, amount))

    def total_tracked(self, task: Task | None = None) -> int:
        target = task or self._store.selected_task
        if target is None:
            return 0
        return target.actual_time or 0

    async def ticks(self, interval: float = TICK_INTERVAL_S) -> AsyncIterator[int]:
        """Yield elapsed minutes every ``interval`` seconds while tracking."""
        while self.is_tracking:
            yield self.elapsed_minutes()
            await asyncio.sleep(interval)


__all__ = ["TICK_INTERVAL_S", "TimeTracker", "parse_minutes", "with_added_time"]
