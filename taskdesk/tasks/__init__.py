from __future__ import annotations

from .filtering import FilterPolicy, filter_tasks, matches_filter
from .stats import compute_stats
from .utils import PRIORITY_ORDER, SortKey, is_overdue, sort_tasks, tasks_due_on

__all__ = [
    "FilterPolicy",
    "PRIORITY_ORDER",
    "SortKey",
    "compute_stats",
    "filter_tasks",
    "is_overdue",
    "matches_filter",
    "sort_tasks",
    "tasks_due_on",
]
