from __future__ import annotations

from .interface import InMemoryKeyValueStorage, KeyValueStorage
from .local import DEFAULT_STORAGE_KEY, LocalTaskStorage
from .redis_storage import RedisKeyValueStorage

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "InMemoryKeyValueStorage",
    "KeyValueStorage",
    "LocalTaskStorage",
    "RedisKeyValueStorage",
]
