from __future__ import annotations

import datetime as _dt
from collections.abc import Callable, Iterable

from taskdesk.errors import StorageError
from taskdesk.models import Task, TaskDraft, TaskFilter, TaskStats
from taskdesk.models.task import local_now, next_update_stamp
from taskdesk.observability import get_json_logger, get_metrics
from taskdesk.storage import LocalTaskStorage
from taskdesk.tasks import FilterPolicy, compute_stats, filter_tasks

Clock = Callable[[], _dt.datetime]


class TaskStore:
    """Single-user task store.

    Owns the task collection, the active filter and the selection. The
    selection is kept as an id and resolved against the collection on read.

    Persistence is best-effort: a failing ``LocalTaskStorage`` is logged and the
    in-memory state is updated regardless.
    """

    def __init__(
        self,
        storage: LocalTaskStorage | None = None,
        *,
        filter_policy: FilterPolicy = FilterPolicy.FIRST_MATCH,
        clock: Clock = local_now,
    ) -> None:
        self._storage = storage
        self._policy = FilterPolicy(filter_policy)
        self._clock = clock
        self._tasks: list[Task] = []
        self._filter = TaskFilter()
        self._selected_id: str | None = None
        self._logger = get_json_logger("taskdesk.store")

    # ----------------------------
    # State accessors
    # ----------------------------
    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def filter(self) -> TaskFilter:
        return self._filter

    @property
    def filter_policy(self) -> FilterPolicy:
        return self._policy

    @property
    def selected_task(self) -> Task | None:
        if self._selected_id is None:
            return None
        return self._find(self._selected_id)

    # ----------------------------
    # Operations
    # ----------------------------
    def load(self, tasks: Iterable[Task] | None = None) -> list[Task]:
        if tasks is None:
            tasks = self._storage.get_tasks() if self._storage is not None else []
        self._tasks = list(tasks)
        self._logger.info(
            "tasks loaded",
            extra={"event": "tasks_loaded", "attributes": {"count": len(self._tasks)}},
        )
        return self.tasks

    def add(self, draft: TaskDraft) -> Task:
        task = Task.from_draft(draft, now=self._clock())
        self._tasks.append(task)
        self._persist("add", task.id, lambda s: s.add_task(task))
        self._record("add", task.id)
        return task

    def update(self, task: Task) -> Task | None:
        current = self._find(task.id)
        if current is None:
            self._logger.info(
                "update ignored for unknown task",
                extra={"event": "task_update_missing", "task_id": task.id},
            )
            return None
        previous = max(current.updated_at, task.updated_at)
        updated = task.model_copy(update={"updated_at": next_update_stamp(previous, self._clock)})
        self._tasks = [updated if t.id == updated.id else t for t in self._tasks]
        self._persist("update", updated.id, lambda s: s.update_task(updated))
        self._record("update", updated.id)
        return updated

    def delete(self, task_id: str) -> bool:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        removed = len(self._tasks) != before
        if self._selected_id == task_id:
            self._selected_id = None
        self._persist("delete", task_id, lambda s: s.delete_task(task_id))
        if removed:
            self._record("delete", task_id)
        return removed

    def set_filter(self, task_filter: TaskFilter) -> None:
        self._filter = task_filter

    def set_selected_task(self, task: Task | None) -> None:
        self._selected_id = task.id if task is not None else None

    def get_filtered_tasks(self) -> list[Task]:
        return filter_tasks(self._tasks, self._filter, self._policy)

    def get_task_stats(self, now: _dt.datetime | None = None) -> TaskStats:
        return compute_stats(self._tasks, now or self._clock())

    # ----------------------------
    # Internals
    # ----------------------------
    def _find(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def _persist(self, op: str, task_id: str, write: Callable[[LocalTaskStorage], object]) -> None:
        if self._storage is None:
            return
        try:
            write(self._storage)
        except StorageError as e:
            self._logger.error(
                "persisting task failed",
                extra={
                    "event": "task_persist_error",
                    "op": op,
                    "task_id": task_id,
                    "attributes": {"error": str(e)[:200]},
                },
            )
            get_metrics().increment("task_errors", {"op": op, "store": "local"})

    def _record(self, op: str, task_id: str) -> None:
        self._logger.info(
            f"task {op}",
            extra={"event": f"task_{op}", "op": op, "task_id": task_id},
        )
        get_metrics().increment("task_ops", {"op": op, "store": "local"})


__all__ = ["Clock", "TaskStore"]
