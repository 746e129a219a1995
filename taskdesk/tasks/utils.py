from __future__ import annotations

import datetime as _dt
from collections.abc import Iterable
from enum import StrEnum
from typing import assert_never

from taskdesk.models import Task, TaskPriority, TaskStatus
from taskdesk.models.task import as_aware, local_now

PRIORITY_ORDER: tuple[TaskPriority, ...] = (
    TaskPriority.URGENT,
    TaskPriority.HIGH,
    TaskPriority.MEDIUM,
    TaskPriority.LOW,
)


class SortKey(StrEnum):
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    CREATED_AT = "created_at"


def is_overdue(task: Task, now: _dt.datetime | None = None) -> bool:
    if task.due_date is None or task.status == TaskStatus.COMPLETED:
        return False
    moment = as_aware(now) if now is not None else local_now()
    return task.due_date < moment


def priority_rank(priority: TaskPriority) -> int:
    return PRIORITY_ORDER.index(priority)


def sort_tasks(tasks: Iterable[Task], key: SortKey | str) -> list[Task]:
    """Return a new list ordered by ``key``; the input is left untouched.

    - due_date: dated tasks ascending, undated tasks last
    - priority: urgent, high, medium, low
    - created_at: newest first
    Equal keys keep their input order.
    """
    sort_key = SortKey(key)
    items = list(tasks)
    match sort_key:
        case SortKey.DUE_DATE:
            return sorted(
                items,
                key=lambda t: (t.due_date is None, t.due_date.timestamp() if t.due_date else 0.0),
            )
        case SortKey.PRIORITY:
            return sorted(items, key=lambda t: priority_rank(t.priority))
        case SortKey.CREATED_AT:
            return sorted(items, key=lambda t: t.created_at, reverse=True)
        case _:
            assert_never(sort_key)


def tasks_due_on(tasks: Iterable[Task], day: _dt.date | _dt.datetime) -> list[Task]:
    """Tasks whose due date falls on ``day`` in local time."""
    if isinstance(day, _dt.datetime):
        day = as_aware(day).astimezone().date()
    return [t for t in tasks if t.due_date is not None and t.due_date.astimezone().date() == day]


__all__ = [
    "PRIORITY_ORDER",
    "SortKey",
    "is_overdue",
    "priority_rank",
    "sort_tasks",
    "tasks_due_on",
]
