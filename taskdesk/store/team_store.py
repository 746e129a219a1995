from __future__ import annotations

import datetime as _dt

from taskdesk.auth import AuthStore
from taskdesk.errors import NotAuthenticatedError, TaskdeskError
from taskdesk.models import AuthState, Task, TaskComment, TaskDraft, TaskFilter, TaskStats
from taskdesk.models.task import local_now
from taskdesk.observability import get_json_logger, get_metrics
from taskdesk.services.interface import TaskService
from taskdesk.tasks import FilterPolicy, compute_stats, filter_tasks

from .task_store import Clock

_SERVER_FIELDS = {"id", "created_at", "updated_at"}


class TeamTaskStore:
    """Multi-user task store backed by an async ``TaskService``.

    - Loads when the ``AuthStore`` reports a login, clears on logout
    - Adapter failures are stored as ``error`` and leave the collection as it was
    - Results apply in the order calls resolve; overlapping calls are not
      serialized, so the last one to resolve wins
    """

    def __init__(
        self,
        service: TaskService,
        auth: AuthStore,
        *,
        filter_policy: FilterPolicy = FilterPolicy.FIRST_MATCH,
        clock: Clock = local_now,
    ) -> None:
        self._service = service
        self._auth = auth
        self._policy = FilterPolicy(filter_policy)
        self._clock = clock
        self._tasks: list[Task] = []
        self._filter = TaskFilter()
        self._selected_id: str | None = None
        self._error: str | None = None
        self._logger = get_json_logger("taskdesk.store.team")
        self._unsubscribe = auth.subscribe(self._on_auth_changed)

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
    def error(self) -> str | None:
        return self._error

    @property
    def selected_task(self) -> Task | None:
        if self._selected_id is None:
            return None
        return next((t for t in self._tasks if t.id == self._selected_id), None)

    def clear_error(self) -> None:
        self._error = None

    def close(self) -> None:
        """Stop following authentication changes."""
        self._unsubscribe()

    # ----------------------------
    # Operations
    # ----------------------------
    async def load(self) -> list[Task]:
        user = self._auth.current_user
        if user is None or not self._auth.is_authenticated:
            self._clear()
            return []
        try:
            tasks = await self._service.get_tasks(user_id=user.id)
        except TaskdeskError as e:
            self._fail("load", None, e)
            return self.tasks
        current = self._auth.current_user
        if not self._auth.is_authenticated or current is None or current.id != user.id:
            self._logger.info(
                "stale load discarded",
                extra={"event": "tasks_load_stale", "user_id": user.id},
            )
            return self.tasks
        self._tasks = list(tasks)
        self._logger.info(
            "tasks loaded",
            extra={"event": "tasks_loaded", "attributes": {"count": len(self._tasks)}},
        )
        return self.tasks

    async def add(self, draft: TaskDraft) -> Task | None:
        user = self._auth.current_user
        if user is None or not self._auth.is_authenticated:
            self._fail("add", None, NotAuthenticatedError())
            return None
        watchers = list(draft.watchers)
        if user.id not in watchers:
            watchers.append(user.id)
        prepared = draft.model_copy(
            update={"created_by": user.id, "watchers": watchers, "attachments": [], "comments": []}
        )
        try:
            task = await self._service.create_task(prepared)
        except TaskdeskError as e:
            self._fail("add", None, e)
            return None
        self._tasks = [*self._tasks, task]
        self._record("add", task.id)
        return task

    async def update(self, task: Task) -> Task | None:
        updates = task.model_dump(exclude=_SERVER_FIELDS)
        try:
            updated = await self._service.update_task(task.id, updates)
        except TaskdeskError as e:
            self._fail("update", task.id, e)
            return None
        self._replace(updated)
        self._record("update", updated.id)
        return updated

    async def delete(self, task_id: str) -> bool:
        try:
            await self._service.delete_task(task_id)
        except TaskdeskError as e:
            self._fail("delete", task_id, e)
            return False
        self._tasks = [t for t in self._tasks if t.id != task_id]
        if self._selected_id == task_id:
            self._selected_id = None
        self._record("delete", task_id)
        return True

    async def add_comment(self, task_id: str, content: str) -> TaskComment | None:
        user = self._auth.current_user
        if user is None:
            self._fail("comment", task_id, NotAuthenticatedError())
            return None
        try:
            comment = await self._service.add_comment(task_id, content, user.id)
            fresh = await self._service.get_task_by_id(task_id)
        except TaskdeskError as e:
            self._fail("comment", task_id, e)
            return None
        if fresh is not None:
            self._replace(fresh)
        self._record("comment", task_id)
        return comment

    def set_filter(self, task_filter: TaskFilter) -> None:
        self._filter = task_filter

    def set_selected_task(self, task: Task | None) -> None:
        self._selected_id = task.id if task is not None else None

    def get_filtered_tasks(self) -> list[Task]:
        return filter_tasks(self._tasks, self._filter, self._policy)

    def get_task_stats(self, now: _dt.datetime | None = None) -> TaskStats:
        user = self._auth.current_user if self._auth.is_authenticated else None
        return compute_stats(
            self._tasks,
            now or self._clock(),
            current_user_id=user.id if user is not None else None,
        )

    # ----------------------------
    # Internals
    # ----------------------------
    async def _on_auth_changed(self, state: AuthState) -> None:
        if state.is_authenticated:
            await self.load()
        else:
            self._clear()

    def _clear(self) -> None:
        self._tasks = []
        self._selected_id = None

    def _replace(self, task: Task) -> None:
        self._tasks = [task if t.id == task.id else t for t in self._tasks]

    def _fail(self, op: str, task_id: str | None, exc: Exception) -> None:
        self._error = str(exc) or f"{op} failed"
        self._logger.error(
            "task operation failed",
            extra={
                "event": "task_error",
                "op": op,
                "task_id": task_id,
                "attributes": {"error": str(exc)[:200], "err_type": type(exc).__name__},
            },
        )
        get_metrics().increment("task_errors", {"op": op, "store": "team"})

    def _record(self, op: str, task_id: str) -> None:
        self._logger.info(
            f"task {op}",
            extra={"event": f"task_{op}", "op": op, "task_id": task_id},
        )
        get_metrics().increment("task_ops", {"op": op, "store": "team"})


__all__ = ["TeamTaskStore"]
