from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Literal

from .storage import (
    DEFAULT_STORAGE_KEY,
    InMemoryKeyValueStorage,
    KeyValueStorage,
    RedisKeyValueStorage,
)

DEFAULT_LATENCY_MS = 300


@dataclass(slots=True)
class TaskdeskConfig:
    storage_backend: Literal["memory", "redis"]
    redis_url: str
    key_prefix: str
    storage_key: str
    api_latency_s: float
    filter_policy: Literal["first_match", "all"]


def _read_latency_ms(raw: str | None) -> int:
    value = (raw or "").strip()
    try:
        ms = int(value) if value else DEFAULT_LATENCY_MS
    except Exception:
        ms = DEFAULT_LATENCY_MS
    return max(0, ms)


def load_config(env: dict[str, str] | None = None) -> TaskdeskConfig:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    backend = (e.get("TASKDESK_STORAGE") or "memory").strip().lower()
    if backend not in ("memory", "redis"):
        backend = "memory"
    policy = (e.get("TASKDESK_FILTER_POLICY") or "first_match").strip().lower()
    if policy not in ("first_match", "all"):
        policy = "first_match"
    return TaskdeskConfig(
        storage_backend=backend,  # type: ignore[arg-type]
        redis_url=e.get("REDIS_URL", "redis://localhost:6379/0"),
        key_prefix=e.get("TASKDESK_STORE_PREFIX", "taskdesk"),
        storage_key=(e.get("TASKDESK_STORAGE_KEY") or "").strip() or DEFAULT_STORAGE_KEY,
        api_latency_s=_read_latency_ms(e.get("TASKDESK_API_LATENCY_MS")) / 1000.0,
        filter_policy=policy,  # type: ignore[arg-type]
    )


def build_storage(config: TaskdeskConfig) -> KeyValueStorage:
    """Construct the key-value backend selected by ``config``."""
    if config.storage_backend == "redis":
        return RedisKeyValueStorage(url=config.redis_url, key_prefix=config.key_prefix)
    return InMemoryKeyValueStorage()


__all__ = ["TaskdeskConfig", "build_storage", "load_config"]
