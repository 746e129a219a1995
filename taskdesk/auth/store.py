from __future__ import annotations

from collections.abc import Awaitable, Callable

from taskdesk.errors import TaskdeskError
from taskdesk.models import AuthState, LoginCredentials, RegisterData, User
from taskdesk.observability import clear_session_context, get_json_logger, set_session_context
from taskdesk.services.mock_api import MockAuthService
from taskdesk.storage import KeyValueStorage

AUTH_TOKEN_KEY = "auth-token"

AuthListener = Callable[[AuthState], Awaitable[None]]


class AuthStore:
    """Session state for the multi-user variant.

    Listeners registered with ``subscribe`` are awaited, in registration order,
    each time ``is_authenticated`` flips. Failures never raise out of
    ``login``/``register``; they land in ``state.error``.
    """

    def __init__(self, service: MockAuthService, storage: KeyValueStorage) -> None:
        self._service = service
        self._storage = storage
        self._state = AuthState()
        self._listeners: list[AuthListener] = []
        self._logger = get_json_logger("taskdesk.auth")

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def current_user(self) -> User | None:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def login(self, credentials: LoginCredentials) -> None:
        await self._authenticate(lambda: self._service.login(credentials), "login failed")

    async def register(self, data: RegisterData) -> None:
        await self._authenticate(lambda: self._service.register(data), "registration failed")

    async def restore_session(self) -> bool:
        """Resume a session from the stored token. Returns True when resumed."""
        token = self._storage.get(AUTH_TOKEN_KEY)
        if not token:
            return False
        try:
            result = await self._service.resume(token)
        except TaskdeskError as e:
            self._logger.info(
                "stored session discarded",
                extra={"event": "session_discarded", "attributes": {"error": str(e)}},
            )
            self._storage.delete(AUTH_TOKEN_KEY)
            return False
        await self._transition(result)
        return True

    async def logout(self) -> None:
        self._service.logout()
        self._storage.delete(AUTH_TOKEN_KEY)
        await self._transition(AuthState())

    def clear_error(self) -> None:
        self._state = self._state.model_copy(update={"error": None})

    async def _authenticate(
        self, call: Callable[[], Awaitable[AuthState]], fallback_message: str
    ) -> None:
        self._state = self._state.model_copy(update={"is_loading": True, "error": None})
        try:
            result = await call()
        except TaskdeskError as e:
            self._logger.info(
                fallback_message,
                extra={"event": "auth_failed", "attributes": {"error": str(e)}},
            )
            await self._transition(AuthState(error=str(e) or fallback_message))
            return
        if result.token:
            self._storage.set(AUTH_TOKEN_KEY, result.token)
        await self._transition(result)

    async def _transition(self, new_state: AuthState) -> None:
        was_authenticated = self._state.is_authenticated
        self._state = new_state
        if new_state.user is not None:
            set_session_context(new_state.user.id)
        else:
            clear_session_context()
        if was_authenticated == new_state.is_authenticated:
            return
        self._logger.info(
            "authentication changed",
            extra={
                "event": "auth_changed",
                "attributes": {"authenticated": new_state.is_authenticated},
            },
        )
        for listener in list(self._listeners):
            await listener(new_state)


__all__ = ["AUTH_TOKEN_KEY", "AuthListener", "AuthStore"]
