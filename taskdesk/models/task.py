from __future__ import annotations

import datetime as _dt
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

from taskdesk.ids import generate_id


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskVisibility(StrEnum):
    """Coarse access label. Nothing enforces it beyond the mock service's listing."""

    PUBLIC = "public"
    ASSIGNED = "assigned"
    PRIVATE = "private"


def local_now() -> _dt.datetime:
    """Current time as an aware datetime in the local zone."""
    return _dt.datetime.now().astimezone()


def as_aware(value: _dt.datetime) -> _dt.datetime:
    # Naive datetimes are read as local wall-clock time
    if value.tzinfo is None:
        return value.astimezone()
    return value


def next_update_stamp(
    previous: _dt.datetime, clock: Callable[[], _dt.datetime] = local_now
) -> _dt.datetime:
    """A timestamp from ``clock`` that is strictly later than ``previous``."""
    now = clock()
    if now <= previous:
        return previous + _dt.timedelta(microseconds=1)
    return now


class TaskAttachment(BaseModel):
    id: str = Field(default_factory=generate_id)
    filename: str
    original_name: str
    size: int = Field(ge=0)
    mime_type: str
    uploaded_by: str
    uploaded_at: _dt.datetime = Field(default_factory=local_now)
    url: str


class TaskComment(BaseModel):
    id: str = Field(default_factory=generate_id)
    task_id: str
    user_id: str
    content: str
    created_at: _dt.datetime = Field(default_factory=local_now)
    updated_at: _dt.datetime = Field(default_factory=local_now)
    parent_id: str | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _aware(cls, v: _dt.datetime) -> _dt.datetime:
        return as_aware(v)


class _TaskFields(BaseModel):
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    due_date: _dt.datetime | None = None
    estimated_time: int | None = Field(default=None, ge=0)
    actual_time: int | None = Field(default=None, ge=0)

    # Collaboration fields; only meaningful in the multi-user variant
    created_by: str | None = None
    assigned_to: list[str] = Field(default_factory=list)
    team_id: str | None = None
    visibility: TaskVisibility = TaskVisibility.PUBLIC
    watchers: list[str] = Field(default_factory=list)
    attachments: list[TaskAttachment] = Field(default_factory=list)
    comments: list[TaskComment] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must be non-empty")
        return v

    @field_validator("due_date")
    @classmethod
    def _due_aware(cls, v: _dt.datetime | None) -> _dt.datetime | None:
        return as_aware(v) if v is not None else None


class TaskDraft(_TaskFields):
    """Input for creating a task: everything except id and timestamps."""


class Task(_TaskFields):
    id: str
    created_at: _dt.datetime
    updated_at: _dt.datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _aware(cls, v: _dt.datetime) -> _dt.datetime:
        return as_aware(v)

    @model_validator(mode="after")
    def _updated_not_before_created(self) -> Task:
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not precede created_at")
        return self

    @classmethod
    def from_draft(cls, draft: TaskDraft, *, now: _dt.datetime | None = None) -> Task:
        stamp = now or local_now()
        return cls(
            **draft.model_dump(),
            id=generate_id(),
            created_at=stamp,
            updated_at=stamp,
        )


class DateRange(BaseModel):
    start: _dt.datetime
    end: _dt.datetime

    @field_validator("start", "end")
    @classmethod
    def _aware(cls, v: _dt.datetime) -> _dt.datetime:
        return as_aware(v)

    def contains(self, moment: _dt.datetime) -> bool:
        return self.start <= moment <= self.end


class TaskFilter(BaseModel):
    """Declarative predicate over tasks. ``None`` (or empty) means unconstrained."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str | None = None
    date_range: DateRange | None = None
    tags: list[str] | None = None


class TaskStats(BaseModel):
    total: int = 0
    by_status: dict[TaskStatus, int] = Field(
        default_factory=lambda: {s: 0 for s in TaskStatus}
    )
    by_priority: dict[TaskPriority, int] = Field(
        default_factory=lambda: {p: 0 for p in TaskPriority}
    )
    completed_today: int = 0
    overdue_count: int = 0
    by_assignee: dict[str, int] = Field(default_factory=dict)
    my_tasks: int = 0
    assigned_to_me: int = 0
    watching: int = 0


__all__ = [
    "DateRange",
    "Task",
    "TaskAttachment",
    "TaskComment",
    "TaskDraft",
    "TaskFilter",
    "TaskPriority",
    "TaskStats",
    "TaskStatus",
    "TaskVisibility",
    "as_aware",
    "local_now",
    "next_update_stamp",
]
