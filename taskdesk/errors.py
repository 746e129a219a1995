from __future__ import annotations


class TaskdeskError(Exception):
    """Base class for errors raised by taskdesk components."""


class StorageError(TaskdeskError):
    """A persistence backend failed to read or write."""


class TaskNotFoundError(TaskdeskError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"task not found: {task_id}")
        self.task_id = task_id


class AuthenticationError(TaskdeskError):
    """Bad credentials."""


class RegistrationError(TaskdeskError):
    """Duplicate username or email on registration."""


class NotAuthenticatedError(TaskdeskError):
    def __init__(self, message: str = "user is not logged in") -> None:
        super().__init__(message)


class NoTaskSelectedError(TaskdeskError):
    def __init__(self, message: str = "select a task first") -> None:
        super().__init__(message)


class TaskCompletedError(TaskdeskError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"task is already completed: {task_id}")
        self.task_id = task_id


__all__ = [
    "AuthenticationError",
    "NoTaskSelectedError",
    "NotAuthenticatedError",
    "RegistrationError",
    "StorageError",
    "TaskCompletedError",
    "TaskNotFoundError",
    "TaskdeskError",
]
