from __future__ import annotations

from typing import Any, cast

import redis

from taskdesk.errors import StorageError

from .interface import KeyValueStorage


class RedisKeyValueStorage(KeyValueStorage):
    """Redis-backed key-value storage.

    Each logical key maps to a plain string key ``{prefix}:{key}``. Redis
    failures surface as ``StorageError`` so callers need not import redis.
    """

    def __init__(
        self,
        *,
        url: str = "redis://localhost:6379/0",
        key_prefix: str = "taskdesk",
        client: Any | None = None,
    ) -> None:
        if client is not None:
            self._redis = client
        else:
            self._redis = redis.Redis.from_url(url, decode_responses=True)
        self._prefix = key_prefix.rstrip(":")

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> str | None:
        try:
            raw = cast(str | bytes | None, self._redis.get(self._key(key)))
        except redis.exceptions.RedisError as e:
            raise StorageError(f"redis get failed: {e}") from e
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return raw

    def set(self, key: str, value: str) -> None:
        try:
            self._redis.set(self._key(key), value)
        except redis.exceptions.RedisError as e:
            raise StorageError(f"redis set failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._redis.delete(self._key(key))
        except redis.exceptions.RedisError as e:
            raise StorageError(f"redis delete failed: {e}") from e


__all__ = ["RedisKeyValueStorage"]
