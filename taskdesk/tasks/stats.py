from __future__ import annotations

import datetime as _dt
from collections.abc import Sequence

from taskdesk.models import Task, TaskPriority, TaskStats, TaskStatus
from taskdesk.models.task import as_aware, local_now

from .utils import is_overdue


def _local_day_bounds(now: _dt.datetime) -> tuple[_dt.datetime, _dt.datetime]:
    local = now.astimezone()
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + _dt.timedelta(days=1)


def compute_stats(
    tasks: Sequence[Task],
    now: _dt.datetime | None = None,
    current_user_id: str | None = None,
) -> TaskStats:
    """Aggregate counters over ``tasks``.

    ``completed_today`` counts completed tasks whose ``updated_at`` lies in the
    local calendar day of ``now``. The per-user counters stay at zero when no
    ``current_user_id`` is given.
    """
    moment = as_aware(now) if now is not None else local_now()
    day_start, day_end = _local_day_bounds(moment)

    stats = TaskStats(total=len(tasks))
    for status in TaskStatus:
        stats.by_status[status] = sum(1 for t in tasks if t.status == status)
    for priority in TaskPriority:
        stats.by_priority[priority] = sum(1 for t in tasks if t.priority == priority)
    stats.completed_today = sum(
        1
        for t in tasks
        if t.status == TaskStatus.COMPLETED and day_start <= t.updated_at < day_end
    )
    stats.overdue_count = sum(1 for t in tasks if is_overdue(t, moment))

    if current_user_id is None:
        return stats

    by_assignee: dict[str, int] = {}
    for t in tasks:
        for user_id in t.assigned_to:
            by_assignee[user_id] = by_assignee.get(user_id, 0) + 1
    stats.by_assignee = by_assignee
    stats.my_tasks = sum(1 for t in tasks if t.created_by == current_user_id)
    stats.assigned_to_me = sum(1 for t in tasks if current_user_id in t.assigned_to)
    stats.watching = sum(1 for t in tasks if current_user_id in t.watchers)
    return stats


__all__ = ["compute_stats"]
