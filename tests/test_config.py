from __future__ import annotations

import pytest

from taskdesk.config import build_storage, load_config
from taskdesk.storage import DEFAULT_STORAGE_KEY, InMemoryKeyValueStorage, RedisKeyValueStorage

_VARS = (
    "TASKDESK_STORAGE",
    "REDIS_URL",
    "TASKDESK_STORE_PREFIX",
    "TASKDESK_STORAGE_KEY",
    "TASKDESK_API_LATENCY_MS",
    "TASKDESK_FILTER_POLICY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    cfg = load_config()
    assert cfg.storage_backend == "memory"
    assert cfg.redis_url == "redis://localhost:6379/0"
    assert cfg.key_prefix == "taskdesk"
    assert cfg.storage_key == DEFAULT_STORAGE_KEY
    assert cfg.api_latency_s == pytest.approx(0.3)
    assert cfg.filter_policy == "first_match"
    assert isinstance(build_storage(cfg), InMemoryKeyValueStorage)


def test_explicit_env_is_layered_over_process_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKDESK_API_LATENCY_MS", "50")
    cfg = load_config(
        {
            "TASKDESK_STORAGE": " Redis ",
            "REDIS_URL": "redis://cache:6380/2",
            "TASKDESK_STORE_PREFIX": "tm",
            "TASKDESK_STORAGE_KEY": "tasks",
            "TASKDESK_FILTER_POLICY": "ALL",
        }
    )
    assert cfg.storage_backend == "redis"
    assert cfg.redis_url == "redis://cache:6380/2"
    assert cfg.key_prefix == "tm"
    assert cfg.storage_key == "tasks"
    assert cfg.api_latency_s == pytest.approx(0.05)
    assert cfg.filter_policy == "all"
    # redis-py connects lazily, so no server is needed here
    assert isinstance(build_storage(cfg), RedisKeyValueStorage)


@pytest.mark.parametrize(
    ("raw", "expected"), [("abc", 0.3), ("-10", 0.0), ("0", 0.0), ("1500", 1.5)]
)
def test_latency_parsing(raw: str, expected: float) -> None:
    cfg = load_config({"TASKDESK_API_LATENCY_MS": raw})
    assert cfg.api_latency_s == pytest.approx(expected)


def test_unknown_choices_fall_back() -> None:
    cfg = load_config({"TASKDESK_STORAGE": "sqlite", "TASKDESK_FILTER_POLICY": "any"})
    assert cfg.storage_backend == "memory"
    assert cfg.filter_policy == "first_match"
