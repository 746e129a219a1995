from __future__ import annotations

import datetime as _dt
from enum import StrEnum

from pydantic import BaseModel, Field

from taskdesk.ids import generate_id

from .task import TaskVisibility, local_now


class UserRole(StrEnum):
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


class UserStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class TeamRole(StrEnum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class Permission(StrEnum):
    VIEW_TASKS = "view_tasks"
    CREATE_TASKS = "create_tasks"
    EDIT_OWN_TASKS = "edit_own_tasks"
    EDIT_ALL_TASKS = "edit_all_tasks"
    DELETE_OWN_TASKS = "delete_own_tasks"
    DELETE_ALL_TASKS = "delete_all_tasks"
    ASSIGN_TASKS = "assign_tasks"
    MANAGE_MEMBERS = "manage_members"
    MANAGE_SETTINGS = "manage_settings"


OWNER_PERMISSIONS: tuple[Permission, ...] = tuple(Permission)
MEMBER_PERMISSIONS: tuple[Permission, ...] = (
    Permission.VIEW_TASKS,
    Permission.CREATE_TASKS,
    Permission.EDIT_OWN_TASKS,
    Permission.DELETE_OWN_TASKS,
)


class User(BaseModel):
    id: str = Field(default_factory=generate_id)
    username: str
    email: str
    display_name: str
    avatar: str | None = None
    role: UserRole = UserRole.MEMBER
    status: UserStatus = UserStatus.ACTIVE
    created_at: _dt.datetime = Field(default_factory=local_now)
    updated_at: _dt.datetime = Field(default_factory=local_now)
    last_login_at: _dt.datetime | None = None


class TeamMember(BaseModel):
    user_id: str
    user: User
    role: TeamRole = TeamRole.MEMBER
    joined_at: _dt.datetime = Field(default_factory=local_now)
    permissions: list[Permission] = Field(default_factory=lambda: list(MEMBER_PERMISSIONS))


class TeamSettings(BaseModel):
    allow_member_invite: bool = False
    allow_member_create_tasks: bool = True
    allow_member_edit_all_tasks: bool = False
    task_visibility: TaskVisibility = TaskVisibility.PUBLIC


class Team(BaseModel):
    id: str = Field(default_factory=generate_id)
    name: str
    description: str | None = None
    created_by: str
    members: list[TeamMember] = Field(default_factory=list)
    created_at: _dt.datetime = Field(default_factory=local_now)
    updated_at: _dt.datetime = Field(default_factory=local_now)
    settings: TeamSettings = Field(default_factory=TeamSettings)


class AuthState(BaseModel):
    user: User | None = None
    token: str | None = None
    is_authenticated: bool = False
    is_loading: bool = False
    error: str | None = None


class LoginCredentials(BaseModel):
    username: str
    password: str


class RegisterData(BaseModel):
    username: str
    email: str
    password: str
    display_name: str


__all__ = [
    "AuthState",
    "LoginCredentials",
    "MEMBER_PERMISSIONS",
    "OWNER_PERMISSIONS",
    "Permission",
    "RegisterData",
    "Team",
    "TeamMember",
    "TeamRole",
    "TeamSettings",
    "User",
    "UserRole",
    "UserStatus",
]
