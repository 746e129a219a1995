from __future__ import annotations

import json

import pytest

from taskdesk.bootstrap import build_task_store, build_team_session
from taskdesk.config import load_config
from taskdesk.models import LoginCredentials, TaskDraft
from taskdesk.services.mock_api import MOCK_PASSWORD
from taskdesk.storage import InMemoryKeyValueStorage
from taskdesk.tasks import FilterPolicy


def test_build_task_store_loads_existing_tasks() -> None:
    kv = InMemoryKeyValueStorage()
    cfg = load_config({"TASKDESK_STORAGE_KEY": "mine", "TASKDESK_FILTER_POLICY": "all"})

    first = build_task_store(cfg, kv)
    t = first.add(TaskDraft(title="persisted"))
    assert json.loads(kv.get("mine") or "[]")[0]["id"] == t.id

    second = build_task_store(cfg, kv)
    assert [x.id for x in second.tasks] == [t.id]
    assert second.filter_policy is FilterPolicy.ALL


@pytest.mark.asyncio
async def test_team_session_login_loads_seeded_tasks() -> None:
    kv = InMemoryKeyValueStorage()
    session = build_team_session(load_config({"TASKDESK_API_LATENCY_MS": "0"}), kv)

    await session.auth.login(LoginCredentials(username="admin", password=MOCK_PASSWORD))

    assert session.auth.is_authenticated
    assert {t.id for t in session.tasks.tasks} == {"task-1", "task-2"}
    assert kv.get("auth-token") == session.auth.state.token
