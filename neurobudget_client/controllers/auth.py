"""
Auth controller: the single owner of the UI's authenticated state.
"""
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

import structlog

from ..models.auth import CurrentUser
from ..services.auth import AuthService
from ..utils.exceptions import ConfigurationError, StorageError

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthState:
    """Snapshot of what the UI needs to decide between signed-in and signed-out views."""
    is_authenticated: bool = False
    current_user: Optional[CurrentUser] = None
    loading_initial_state: bool = True


AuthListener = Callable[[AuthState], None]


class AuthController:
    """
    Holds authenticated state for one app instance.

    Call initialize() once at startup; it reads the persisted session without
    touching the network. login/register/logout are only available between
    initialize() and close().
    """

    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service
        self._state = AuthState()
        self._initialized = False
        self._closed = False
        self._listeners: List[AuthListener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def current_user(self) -> Optional[CurrentUser]:
        return self._state.current_user

    @property
    def loading_initial_state(self) -> bool:
        return self._state.loading_initial_state

    @property
    def is_active(self) -> bool:
        return self._initialized and not self._closed

    def add_listener(self, listener: AuthListener) -> Callable[[], None]:
        """Register a state-change callback; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def initialize(self) -> AuthState:
        """Derive the initial state from the stored session."""
        if self._closed:
            raise ConfigurationError("Auth controller has been closed")
        if self._initialized:
            return self._state

        user: Optional[CurrentUser] = None
        try:
            user = await self.auth_service.get_current_user()
        except StorageError as e:
            logger.error("Failed to read stored session", error=e.message)
        finally:
            self._initialized = True
            self._set_state(AuthState(
                is_authenticated=user is not None,
                current_user=user,
                loading_initial_state=False
            ))

        logger.info("Auth state loaded", is_authenticated=self._state.is_authenticated)
        return self._state

    async def login(self, email: str, password: str) -> CurrentUser:
        """Sign in; state comes straight from the login response."""
        self._ensure_active()
        response = await self.auth_service.login(email, password)

        user = CurrentUser(
            user_id=response.user_id,
            email=response.email or email,
            name=response.full_name
        )
        self._set_state(replace(self._state, is_authenticated=True, current_user=user))
        return user

    async def register(self, email: str, password: str, first_name: str, last_name: str) -> CurrentUser:
        """Create an account and sign in with it."""
        self._ensure_active()
        response = await self.auth_service.register(email, password, first_name, last_name)

        user = CurrentUser(
            user_id=response.user_id,
            email=response.email or email,
            name=f"{first_name} {last_name}"
        )
        self._set_state(replace(self._state, is_authenticated=True, current_user=user))
        return user

    async def logout(self) -> None:
        """Sign out. In-memory state is reset even when clearing storage fails."""
        self._ensure_active()
        try:
            await self.auth_service.logout()
        finally:
            self._set_state(replace(self._state, is_authenticated=False, current_user=None))

    def close(self) -> None:
        """Detach the controller; further operations raise ConfigurationError."""
        self._closed = True
        self._listeners.clear()

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise ConfigurationError(
                "Auth controller not initialized",
                details=["Call initialize() before using login, register or logout"]
            )

    def _set_state(self, state: AuthState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
