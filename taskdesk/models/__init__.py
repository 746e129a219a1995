from __future__ import annotations

from .task import (
    DateRange,
    Task,
    TaskAttachment,
    TaskComment,
    TaskDraft,
    TaskFilter,
    TaskPriority,
    TaskStats,
    TaskStatus,
    TaskVisibility,
)
from .user import (
    AuthState,
    LoginCredentials,
    Permission,
    RegisterData,
    Team,
    TeamMember,
    TeamRole,
    TeamSettings,
    User,
    UserRole,
    UserStatus,
)

__all__ = [
    "AuthState",
    "DateRange",
    "LoginCredentials",
    "Permission",
    "RegisterData",
    "Task",
    "TaskAttachment",
    "TaskComment",
    "TaskDraft",
    "TaskFilter",
    "TaskPriority",
    "TaskStats",
    "TaskStatus",
    "TaskVisibility",
    "Team",
    "TeamMember",
    "TeamRole",
    "TeamSettings",
    "User",
    "UserRole",
    "UserStatus",
]
