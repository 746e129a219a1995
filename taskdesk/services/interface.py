from __future__ import annotations

from typing import Any, Protocol

from taskdesk.models import Task, TaskComment, TaskDraft


class TaskService(Protocol):
    """Async task backend used by the multi-user store.

    ``MockTaskService`` is the in-process implementation; anything with the
    same coroutine methods can stand in for it.
    """

    async def get_tasks(
        self, user_id: str | None = None, team_id: str | None = None
    ) -> list[Task]: ...

    async def get_task_by_id(self, task_id: str) -> Task | None: ...

    async def create_task(self, draft: TaskDraft) -> Task: ...

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> Task:
        """Apply ``updates`` and return the stored task. Raises ``TaskNotFoundError``."""
        ...

    async def delete_task(self, task_id: str) -> None:
        """Remove a task. Raises ``TaskNotFoundError``."""
        ...

    async def add_comment(self, task_id: str, content: str, user_id: str) -> TaskComment: ...


__all__ = ["TaskService"]
