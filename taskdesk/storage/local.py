from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from taskdesk.errors import StorageError
from taskdesk.models import Task
from taskdesk.observability import get_json_logger

from .interface import KeyValueStorage

DEFAULT_STORAGE_KEY = "personal-task-manager-tasks"


class LocalTaskStorage:
    """Single-user task persistence: one key holding a JSON array of tasks.

    - Datetimes are stored as ISO-8601 strings and parsed back on read
    - Missing or corrupt data reads as an empty collection
    - Backend write failures raise ``StorageError``
    """

    def __init__(self, backend: KeyValueStorage, *, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._backend = backend
        self._key = key
        self._logger = get_json_logger("taskdesk.storage")

    @property
    def key(self) -> str:
        return self._key

    def _decode(self, raw: str | None) -> list[Task]:
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            self._logger.warning(
                "stored tasks are not valid JSON",
                extra={"event": "storage_corrupt", "attributes": {"error": str(e)[:200]}},
            )
            return []
        if not isinstance(data, list):
            self._logger.warning(
                "stored tasks are not a list",
                extra={"event": "storage_corrupt", "attributes": {"type": type(data).__name__}},
            )
            return []
        tasks: list[Task] = []
        for item in data:
            try:
                tasks.append(Task.model_validate(item))
            except ValidationError as e:
                self._logger.warning(
                    "skipping unreadable task record",
                    extra={"event": "storage_corrupt", "attributes": {"error": str(e)[:200]}},
                )
        return tasks

    def _read(self) -> list[Task]:
        return self._decode(self._backend.get(self._key))

    def get_tasks(self) -> list[Task]:
        try:
            return self._read()
        except StorageError:
            self._logger.exception("loading tasks failed", extra={"event": "storage_error"})
            return []

    def save_tasks(self, tasks: list[Task]) -> None:
        payload: list[dict[str, Any]] = [t.model_dump(mode="json") for t in tasks]
        self._backend.set(self._key, json.dumps(payload, ensure_ascii=False))

    def add_task(self, task: Task) -> None:
        tasks = self._read()
        tasks.append(task)
        self.save_tasks(tasks)

    def update_task(self, task: Task) -> bool:
        tasks = self._read()
        for i, existing in enumerate(tasks):
            if existing.id == task.id:
                tasks[i] = task
                self.save_tasks(tasks)
                return True
        return False

    def delete_task(self, task_id: str) -> bool:
        tasks = self._read()
        remaining = [t for t in tasks if t.id != task_id]
        if len(remaining) == len(tasks):
            return False
        self.save_tasks(remaining)
        return True

    def clear_tasks(self) -> None:
        self._backend.delete(self._key)


__all__ = ["DEFAULT_STORAGE_KEY", "LocalTaskStorage"]
