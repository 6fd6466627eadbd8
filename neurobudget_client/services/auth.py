"""
Authentication service: login, registration, token refresh and logout.
"""
from typing import Optional

import structlog

from ..infrastructure.api_client import ApiClient
from ..infrastructure.session_store import SessionStore
from ..models.auth import AuthResponse, CurrentUser, LoginRequest, RegisterRequest
from ..utils.constants import AUTH_LOGIN_PATH, AUTH_REGISTER_PATH
from ..utils.validators import build_request, parse_response

logger = structlog.get_logger()


class AuthService:
    """Service for authentication operations."""

    def __init__(self, api_client: ApiClient, session_store: SessionStore):
        self.api_client = api_client
        self.session_store = session_store

    async def login(self, email: str, password: str) -> AuthResponse:
        """Authenticate with email/password and persist the new session."""
        request = build_request(LoginRequest, email=email, password=password)
        data = await self.api_client.post(AUTH_LOGIN_PATH, json=request.to_payload())
        response = parse_response(AuthResponse, data, AUTH_LOGIN_PATH)

        await self.session_store.save(response.to_session(email=request.email))

        logger.info("User logged in", user_id=response.user_id)
        return response

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str
    ) -> AuthResponse:
        """Create an account and persist the new session."""
        request = build_request(
            RegisterRequest,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name
        )
        data = await self.api_client.post(AUTH_REGISTER_PATH, json=request.to_payload())
        response = parse_response(AuthResponse, data, AUTH_REGISTER_PATH)

        await self.session_store.save(
            response.to_session(
                email=request.email,
                first_name=request.first_name,
                last_name=request.last_name
            )
        )

        logger.info("User registered", user_id=response.user_id)
        return response

    async def refresh(self) -> AuthResponse:
        """Rotate the token pair. Normally only the API client needs this."""
        return await self.api_client.refresh_session()

    async def logout(self) -> None:
        """Forget the session locally; the backend keeps no session state."""
        await self.session_store.clear()
        logger.info("User logged out")

    async def is_authenticated(self) -> bool:
        return bool(await self.session_store.get_access_token())

    async def get_current_user(self) -> Optional[CurrentUser]:
        """Cached identity of the signed-in user, or None when signed out."""
        session = await self.session_store.load()
        if not session.is_authenticated:
            return None
        return CurrentUser.from_session(session)
