from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterator
from functools import lru_cache

import pytest

from taskdesk.observability import clear_session_context, reset_metrics

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def _wait_until(timeout_s: float, pause_s: float, check: Callable[[], bool]) -> bool:
    deadline = time.time() + timeout_s
    while time.time() < deadline:
        if check():
            return True
        time.sleep(pause_s)
    return False


def _redis_ping(url: str) -> bool:
    try:
        import redis

        r = redis.Redis.from_url(url, socket_connect_timeout=0.5)
        return bool(r.ping())
    except Exception:
        return False


@lru_cache(maxsize=1)
def _local_redis_available() -> bool:
    return _redis_ping(os.getenv("REDIS_URL", DEFAULT_REDIS_URL))


@pytest.fixture(autouse=True)
def _fresh_observability() -> Iterator[None]:
    """Each test starts with zeroed counters and no session bound."""
    reset_metrics()
    clear_session_context()
    yield
    clear_session_context()


@pytest.fixture(scope="session")
def redis_url() -> str:
    """Provide a reachable Redis URL or skip.

    Priority:
    1) REDIS_URL env if reachable
    2) localhost:6379 if reachable
    """
    env_url = os.getenv("REDIS_URL")
    if env_url and _wait_until(5.0, 0.2, lambda: _redis_ping(env_url)):
        return env_url
    if _wait_until(1.0, 0.2, lambda: _redis_ping(DEFAULT_REDIS_URL)):
        return DEFAULT_REDIS_URL
    pytest.skip("Redis not available; set REDIS_URL or start local Redis")


@pytest.fixture()
def unique_prefix() -> str:
    # millisecond prefix to avoid collisions
    return f"test:{int(time.time() * 1000)}"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip tests marked 'redis' when no Redis server answers."""
    if _local_redis_available() or os.getenv("REDIS_URL"):
        return
    skip = pytest.mark.skip(reason="Redis not available; set REDIS_URL or start local Redis")
    for item in items:
        if "redis" in item.keywords:
            item.add_marker(skip)
