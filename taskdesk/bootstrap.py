from __future__ import annotations

from dataclasses import dataclass

from taskdesk.auth import AuthStore
from taskdesk.config import TaskdeskConfig, build_storage, load_config
from taskdesk.observability import get_json_logger
from taskdesk.services import MockServices, create_mock_services
from taskdesk.storage import KeyValueStorage, LocalTaskStorage
from taskdesk.store import TaskStore, TeamTaskStore
from taskdesk.tasks import FilterPolicy


@dataclass(slots=True)
class TeamSession:
    services: MockServices
    auth: AuthStore
    tasks: TeamTaskStore


def build_task_store(
    config: TaskdeskConfig | None = None, backend: KeyValueStorage | None = None
) -> TaskStore:
    """Wire a single-user store over the configured key-value backend and load it."""
    cfg = config or load_config()
    kv = backend if backend is not None else build_storage(cfg)
    store = TaskStore(
        LocalTaskStorage(kv, key=cfg.storage_key),
        filter_policy=FilterPolicy(cfg.filter_policy),
    )
    store.load()
    get_json_logger("taskdesk").info(
        "task store ready",
        extra={
            "event": "store_ready",
            "attributes": {
                "variant": "single_user",
                "backend": cfg.storage_backend,
                "filter_policy": cfg.filter_policy,
            },
        },
    )
    return store


def build_team_session(
    config: TaskdeskConfig | None = None, backend: KeyValueStorage | None = None
) -> TeamSession:
    """Wire the multi-user variant: mock services, auth store, task store."""
    cfg = config or load_config()
    kv = backend if backend is not None else build_storage(cfg)
    services = create_mock_services(latency_s=cfg.api_latency_s)
    auth = AuthStore(services.auth, kv)
    tasks = TeamTaskStore(services.tasks, auth, filter_policy=FilterPolicy(cfg.filter_policy))
    get_json_logger("taskdesk").info(
        "task store ready",
        extra={
            "event": "store_ready",
            "attributes": {
                "variant": "multi_user",
                "backend": cfg.storage_backend,
                "latency_s": cfg.api_latency_s,
            },
        },
    )
    return TeamSession(services=services, auth=auth, tasks=tasks)


__all__ = ["TeamSession", "build_task_store", "build_team_session"]
