from __future__ import annotations

from .store import AUTH_TOKEN_KEY, AuthListener, AuthStore

__all__ = ["AUTH_TOKEN_KEY", "AuthListener", "AuthStore"]
