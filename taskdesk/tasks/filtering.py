from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from taskdesk.models import DateRange, Task, TaskFilter


class FilterPolicy(StrEnum):
    """How the search, date range and tag dimensions combine.

    FIRST_MATCH: status and priority always apply; after that the first set
    dimension among search, date range, tags decides alone and the rest are
    skipped. This is the historical behaviour and the default.

    ALL: every set dimension must match.
    """

    FIRST_MATCH = "first_match"
    ALL = "all"


def _matches_search(task: Task, search: str) -> bool:
    needle = search.lower()
    if needle in task.title.lower():
        return True
    if task.description and needle in task.description.lower():
        return True
    return any(needle in tag.lower() for tag in task.tags)


def _matches_date_range(task: Task, date_range: DateRange) -> bool:
    if task.due_date is None:
        return False
    return date_range.contains(task.due_date)


def _matches_tags(task: Task, tags: list[str]) -> bool:
    return any(tag in task.tags for tag in tags)


def matches_filter(
    task: Task, task_filter: TaskFilter, policy: FilterPolicy = FilterPolicy.FIRST_MATCH
) -> bool:
    if task_filter.status and task.status != task_filter.status:
        return False
    if task_filter.priority and task.priority != task_filter.priority:
        return False

    if policy == FilterPolicy.FIRST_MATCH:
        if task_filter.search:
            return _matches_search(task, task_filter.search)
        if task_filter.date_range:
            return _matches_date_range(task, task_filter.date_range)
        if task_filter.tags:
            return _matches_tags(task, task_filter.tags)
        return True

    if task_filter.search and not _matches_search(task, task_filter.search):
        return False
    if task_filter.date_range and not _matches_date_range(task, task_filter.date_range):
        return False
    if task_filter.tags and not _matches_tags(task, task_filter.tags):
        return False
    return True


def filter_tasks(
    tasks: Iterable[Task],
    task_filter: TaskFilter,
    policy: FilterPolicy = FilterPolicy.FIRST_MATCH,
) -> list[Task]:
    """Return the tasks that pass ``task_filter``, keeping their order."""
    return [t for t in tasks if matches_filter(t, task_filter, policy)]


__all__ = ["FilterPolicy", "filter_tasks", "matches_filter"]
