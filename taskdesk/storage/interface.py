from __future__ import annotations

from typing import Protocol


class KeyValueStorage(Protocol):
    """Minimal string key-value store, the shape of browser local storage.

    Keep this tiny so the task persistence can run against memory, Redis, or
    anything else that stores strings by key.
    """

    def get(self, key: str) -> str | None:
        """Return the stored value or None when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def delete(self, key: str) -> None:
        """Remove ``key``. Missing keys are ignored."""


class InMemoryKeyValueStorage(KeyValueStorage):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


__all__ = ["InMemoryKeyValueStorage", "KeyValueStorage"]
