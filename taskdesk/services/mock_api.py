from __future__ import annotations

import asyncio
import datetime as _dt
import time
from dataclasses import dataclass
from typing import Any

from taskdesk.errors import (
    AuthenticationError,
    NotAuthenticatedError,
    RegistrationError,
    TaskNotFoundError,
)
from taskdesk.ids import generate_id
from taskdesk.models import (
    AuthState,
    LoginCredentials,
    RegisterData,
    Task,
    TaskComment,
    TaskDraft,
    TaskPriority,
    TaskStatus,
    TaskVisibility,
    Team,
    TeamMember,
    TeamRole,
    User,
    UserRole,
)
from taskdesk.models.task import local_now, next_update_stamp
from taskdesk.models.user import MEMBER_PERMISSIONS, OWNER_PERMISSIONS
from taskdesk.observability import get_json_logger

# Every account accepts this password; there is no real credential check.
MOCK_PASSWORD = "password"
TOKEN_PREFIX = "mock-token-"

_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


def make_token(user_id: str) -> str:
    return f"{TOKEN_PREFIX}{user_id}-{int(time.time() * 1000)}"


def user_id_from_token(token: str) -> str | None:
    """Extract the user id from a ``mock-token-<user id>-<ms>`` token."""
    if not token.startswith(TOKEN_PREFIX):
        return None
    body = token[len(TOKEN_PREFIX) :]
    user_id, sep, stamp = body.rpartition("-")
    if not sep or not user_id or not stamp.isdigit():
        return None
    return user_id


def seed_users() -> list[User]:
    now = local_now()
    return [
        User(
            id="user-1",
            username="admin",
            email="admin@example.com",
            display_name="Administrator",
            role=UserRole.ADMIN,
            created_at=_dt.datetime(2024, 1, 1).astimezone(),
            updated_at=now,
            last_login_at=now,
        ),
        User(
            id="user-2",
            username="alice",
            email="alice@example.com",
            display_name="Alice Wang",
            created_at=_dt.datetime(2024, 1, 2).astimezone(),
            updated_at=now,
        ),
        User(
            id="user-3",
            username="bob",
            email="bob@example.com",
            display_name="Bob Chen",
            created_at=_dt.datetime(2024, 1, 3).astimezone(),
            updated_at=now,
        ),
    ]


def seed_teams(users: list[User]) -> list[Team]:
    by_id = {u.id: u for u in users}
    members = [
        TeamMember(
            user_id="user-1",
            user=by_id["user-1"],
            role=TeamRole.OWNER,
            joined_at=_dt.datetime(2024, 1, 1).astimezone(),
            permissions=list(OWNER_PERMISSIONS),
        ),
        TeamMember(
            user_id="user-2",
            user=by_id["user-2"],
            joined_at=_dt.datetime(2024, 1, 2).astimezone(),
            permissions=list(MEMBER_PERMISSIONS),
        ),
        TeamMember(
            user_id="user-3",
            user=by_id["user-3"],
            joined_at=_dt.datetime(2024, 1, 3).astimezone(),
            permissions=list(MEMBER_PERMISSIONS),
        ),
    ]
    return [
        Team(
            id="team-1",
            name="开发团队",
            description="项目开发小组",
            created_by="user-1",
            members=members,
            created_at=_dt.datetime(2024, 1, 1).astimezone(),
        )
    ]


def seed_tasks() -> list[Task]:
    now = local_now()
    return [
        Task(
            id="task-1",
            title="设计用户界面",
            description="为新功能设计用户界面",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.HIGH,
            due_date=now + _dt.timedelta(days=7),
            created_at=_dt.datetime(2024, 1, 1).astimezone(),
            updated_at=now,
            estimated_time=480,
            actual_time=240,
            tags=["设计", "UI"],
            created_by="user-1",
            assigned_to=["user-2"],
            team_id="team-1",
            watchers=["user-1", "user-2"],
        ),
        Task(
            id="task-2",
            title="实现后端API",
            description="开发RESTful API接口",
            status=TaskStatus.TODO,
            priority=TaskPriority.MEDIUM,
            due_date=now + _dt.timedelta(days=14),
            created_at=_dt.datetime(2024, 1, 2).astimezone(),
            updated_at=now,
            estimated_time=960,
            tags=["后端", "API"],
            created_by="user-1",
            assigned_to=["user-3"],
            team_id="team-1",
            watchers=["user-1", "user-3"],
        ),
    ]


class _LatencyMixin:
    _latency_s: float

    async def _delay(self) -> None:
        await asyncio.sleep(max(0.0, self._latency_s))


class MockAuthService(_LatencyMixin):
    """Simulated authentication backend over an in-memory user table."""

    def __init__(self, users: list[User] | None = None, *, latency_s: float = 0.0) -> None:
        self._users: list[User] = users if users is not None else seed_users()
        self._latency_s = latency_s
        self._current_user: User | None = None
        self._token: str | None = None
        self._logger = get_json_logger("taskdesk.services.auth")

    @property
    def users(self) -> list[User]:
        return [u.model_copy() for u in self._users]

    @property
    def current_user(self) -> User | None:
        return self._current_user

    @property
    def token(self) -> str | None:
        return self._token

    def is_authenticated(self) -> bool:
        return self._current_user is not None and self._token is not None

    def find_user(self, user_id: str) -> User | None:
        for u in self._users:
            if u.id == user_id:
                return u.model_copy()
        return None

    async def login(self, credentials: LoginCredentials) -> AuthState:
        await self._delay()
        user = next((u for u in self._users if u.username == credentials.username), None)
        if user is None or credentials.password != MOCK_PASSWORD:
            self._logger.info(
                "login rejected",
                extra={"event": "login_failed", "attributes": {"username": credentials.username}},
            )
            raise AuthenticationError("invalid username or password")
        now = local_now()
        user.last_login_at = now
        user.updated_at = now
        return self._start_session(user)

    async def register(self, data: RegisterData) -> AuthState:
        await self._delay()
        if any(u.username == data.username for u in self._users):
            raise RegistrationError("username already exists")
        if any(u.email == data.email for u in self._users):
            raise RegistrationError("email already registered")
        user = User(
            username=data.username,
            email=data.email,
            display_name=data.display_name,
        )
        self._users.append(user)
        return self._start_session(user)

    async def resume(self, token: str) -> AuthState:
        """Re-open a session from a previously issued token."""
        await self._delay()
        user_id = user_id_from_token(token)
        user = next((u for u in self._users if u.id == user_id), None)
        if user is None:
            raise AuthenticationError("session token is no longer valid")
        self._current_user = user
        self._token = token
        return AuthState(user=user.model_copy(), token=token, is_authenticated=True)

    def logout(self) -> None:
        self._current_user = None
        self._token = None

    def _start_session(self, user: User) -> AuthState:
        self._current_user = user
        self._token = make_token(user.id)
        self._logger.info("session started", extra={"event": "login", "user_id": user.id})
        return AuthState(
            user=user.model_copy(),
            token=self._token,
            is_authenticated=True,
            is_loading=False,
            error=None,
        )


class MockTeamService(_LatencyMixin):
    def __init__(
        self,
        auth: MockAuthService,
        teams: list[Team] | None = None,
        *,
        latency_s: float = 0.0,
    ) -> None:
        self._auth = auth
        self._teams: list[Team] = teams if teams is not None else seed_teams(auth.users)
        self._latency_s = latency_s

    async def get_user_teams(self, user_id: str) -> list[Team]:
        await self._delay()
        return [
            t.model_copy(deep=True)
            for t in self._teams
            if any(m.user_id == user_id for m in t.members)
        ]

    async def get_team_by_id(self, team_id: str) -> Team | None:
        await self._delay()
        team = next((t for t in self._teams if t.id == team_id), None)
        return team.model_copy(deep=True) if team is not None else None

    async def create_team(self, name: str | None = None, description: str | None = None) -> Team:
        await self._delay()
        user = self._auth.current_user
        if user is None or not self._auth.is_authenticated():
            raise NotAuthenticatedError()
        team = Team(
            name=name or "New team",
            description=description,
            created_by=user.id,
            members=[
                TeamMember(
                    user_id=user.id,
                    user=user.model_copy(),
                    role=TeamRole.OWNER,
                    permissions=list(OWNER_PERMISSIONS),
                )
            ],
        )
        self._teams.append(team)
        return team.model_copy(deep=True)


class MockTaskService(_LatencyMixin):
    """Simulated task backend. Missing ids raise ``TaskNotFoundError``."""

    def __init__(self, tasks: list[Task] | None = None, *, latency_s: float = 0.0) -> None:
        self._tasks: list[Task] = tasks if tasks is not None else seed_tasks()
        self._latency_s = latency_s

    def _index(self, task_id: str) -> int:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        raise TaskNotFoundError(task_id)

    async def get_tasks(self, user_id: str | None = None, team_id: str | None = None) -> list[Task]:
        """List tasks, optionally narrowed to a team and to what a user can see.

        A user sees tasks they created, are assigned to or watch, plus every
        public task.
        """
        await self._delay()
        tasks = self._tasks
        if team_id:
            tasks = [t for t in tasks if t.team_id == team_id]
        if user_id:
            tasks = [
                t
                for t in tasks
                if t.created_by == user_id
                or user_id in t.assigned_to
                or user_id in t.watchers
                or t.visibility == TaskVisibility.PUBLIC
            ]
        return [t.model_copy(deep=True) for t in tasks]

    async def get_task_by_id(self, task_id: str) -> Task | None:
        await self._delay()
        task = next((t for t in self._tasks if t.id == task_id), None)
        return task.model_copy(deep=True) if task is not None else None

    async def create_task(self, draft: TaskDraft) -> Task:
        await self._delay()
        task = Task.from_draft(draft.model_copy(update={"attachments": [], "comments": []}))
        self._tasks.append(task)
        return task.model_copy(deep=True)

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> Task:
        await self._delay()
        idx = self._index(task_id)
        current = self._tasks[idx]
        fields = {k: v for k, v in updates.items() if k not in _IMMUTABLE_FIELDS}
        merged = current.model_dump()
        merged.update(fields)
        merged["updated_at"] = next_update_stamp(current.updated_at)
        updated = Task.model_validate(merged)
        self._tasks[idx] = updated
        return updated.model_copy(deep=True)

    async def delete_task(self, task_id: str) -> None:
        await self._delay()
        idx = self._index(task_id)
        del self._tasks[idx]

    async def add_comment(self, task_id: str, content: str, user_id: str) -> TaskComment:
        await self._delay()
        idx = self._index(task_id)
        task = self._tasks[idx]
        comment = TaskComment(id=generate_id(), task_id=task_id, user_id=user_id, content=content)
        task.comments.append(comment)
        task.updated_at = next_update_stamp(task.updated_at)
        return comment.model_copy()

    async def get_task_comments(self, task_id: str) -> list[TaskComment]:
        await self._delay()
        task = self._tasks[self._index(task_id)]
        return [c.model_copy() for c in sorted(task.comments, key=lambda c: c.created_at)]


@dataclass(slots=True)
class MockServices:
    auth: MockAuthService
    teams: MockTeamService
    tasks: MockTaskService


def create_mock_services(*, latency_s: float = 0.0) -> MockServices:
    """Build a fresh, seeded set of services sharing one user table."""
    auth = MockAuthService(latency_s=latency_s)
    return MockServices(
        auth=auth,
        teams=MockTeamService(auth, latency_s=latency_s),
        tasks=MockTaskService(latency_s=latency_s),
    )


__all__ = [
    "MOCK_PASSWORD",
    "MockAuthService",
    "MockServices",
    "MockTaskService",
    "MockTeamService",
    "create_mock_services",
    "make_token",
    "seed_tasks",
    "seed_teams",
    "seed_users",
    "user_id_from_token",
]
