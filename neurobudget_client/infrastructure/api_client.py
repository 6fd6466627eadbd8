"""
Authenticated HTTP client for the NeuroBudget API.

Every request carries the stored bearer token. A 401 triggers one refresh of
the token pair followed by one re-issue of the original request; a second 401
or a failed refresh ends the session and surfaces the original 401.
"""
import asyncio
from typing import Any, Dict, Optional

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from ..config import Settings, get_settings
from ..middleware.logging import LoggingHooks
from ..models.auth import AuthResponse, RefreshTokenRequest
from ..utils.constants import (
    AUTH_REFRESH_PATH,
    AUTHORIZATION_HEADER,
    BEARER_PREFIX,
    DEFAULT_HEADERS,
    MAX_AUTH_RETRIES,
)
from ..utils.exceptions import (
    ApiError,
    ApiValidationError,
    AppException,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RequestTimeoutError,
)
from .session_store import SessionStore

logger = structlog.get_logger()


def _retrieve_refresh_result(task: asyncio.Future) -> None:
    """Mark a refresh failure as retrieved even when every waiter was cancelled."""
    if not task.cancelled():
        task.exception()


class ApiClient:
    """HTTP client with bearer injection and single refresh-and-retry on 401."""

    def __init__(
        self,
        session_store: SessionStore,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.settings = settings or get_settings()
        self.session_store = session_store
        self._owns_client = http_client is None
        self._client = http_client or self._create_client()
        self._refresh_task: Optional[asyncio.Task] = None

    def _create_client(self) -> httpx.AsyncClient:
        """Create the pooled HTTP client from settings."""
        headers = dict(DEFAULT_HEADERS)
        headers["User-Agent"] = self.settings.user_agent
        return httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.request_timeout_seconds,
            headers=headers,
            event_hooks=LoggingHooks().as_event_hooks()
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    # Verbs

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Send an authenticated request and return the decoded body."""
        return await self._request(method, path, json=json, params=params, attempt=0)

    async def _request(
        self,
        method: str,
        path: str,
        json: Any,
        params: Optional[Dict[str, Any]],
        attempt: int,
        access_token: Optional[str] = None
    ) -> Any:
        if access_token is None:
            access_token = await self.session_store.get_access_token()

        response = await self._send(method, path, json=json, params=params, access_token=access_token)

        if response.status_code != 401:
            return self._decode(response, path)

        unauthorized = self._error_for(response, path)
        if attempt >= MAX_AUTH_RETRIES:
            logger.warning(
                "Request rejected after token refresh",
                method=method,
                path=path,
                attempt=attempt
            )
            raise unauthorized

        logger.info("Access token rejected, refreshing", method=method, path=path)
        try:
            auth = await self.refresh_session()
        except AppException as refresh_error:
            raise unauthorized from refresh_error

        return await self._request(
            method,
            path,
            json=json,
            params=params,
            attempt=attempt + 1,
            access_token=auth.token
        )

    async def _send(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        access_token: Optional[str] = None
    ) -> httpx.Response:
        """Issue one HTTP call, translating transport failures."""
        headers = {}
        if access_token:
            headers[AUTHORIZATION_HEADER] = f"{BEARER_PREFIX} {access_token}"

        try:
            return await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("Request timed out", method=method, path=path, error=str(e))
            raise RequestTimeoutError(
                message=f"{method} {path} timed out",
                details=[str(e)]
            ) from e
        except httpx.TransportError as e:
            logger.warning("Network error", method=method, path=path, error=str(e))
            raise NetworkError(
                message=f"{method} {path} failed: {e.__class__.__name__}",
                details=[str(e)]
            ) from e

    # Token refresh

    async def refresh_session(self) -> AuthResponse:
        """
        Exchange the stored refresh token for a new token pair.

        Concurrent callers share one in-flight refresh. On success the new
        tokens are persisted before this returns; on any failure the session
        is cleared and the failure is raised.
        """
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.ensure_future(self._perform_refresh())
            self._refresh_task.add_done_callback(_retrieve_refresh_result)
        return await asyncio.shield(self._refresh_task)

    async def _perform_refresh(self) -> AuthResponse:
        try:
            auth = await self._request_new_tokens()
            await self.session_store.save_tokens(auth.token, auth.refresh_token)
        except AppException as e:
            logger.warning("Token refresh failed, clearing session", error=e.message, code=e.code)
            await self.session_store.clear()
            raise

        logger.info("Token refresh succeeded")
        return auth

    async def _request_new_tokens(self) -> AuthResponse:
        refresh_token = await self.session_store.get_refresh_token()
        if not refresh_token:
            raise AuthenticationError(message="No refresh token available")

        body = RefreshTokenRequest(refresh_token=refresh_token).to_payload()
        response = await self._send("POST", AUTH_REFRESH_PATH, json=body)
        if not response.is_success:
            raise self._error_for(response, AUTH_REFRESH_PATH)

        try:
            return AuthResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise AuthenticationError(
                message="Malformed token refresh response",
                details=[str(e)]
            ) from e

    # Response handling

    def _decode(self, response: httpx.Response, path: str) -> Any:
        """Return the decoded body of a successful response, or raise."""
        if not response.is_success:
            raise self._error_for(response, path)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _body_of(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def _error_for(self, response: httpx.Response, path: str) -> ApiError:
        """Map an HTTP error response to the client's exception hierarchy."""
        status = response.status_code
        body = self._body_of(response)
        message = f"HTTP {status}"
        if isinstance(body, dict) and body.get("message"):
            message = str(body["message"])

        if status == 401:
            return AuthenticationError(message=message, body=body)
        if status == 404:
            return NotFoundError(message=message, body=body, resource_path=path)
        if status in (400, 422):
            return ApiValidationError(message=message, status_code=status, body=body)
        return ApiError(message=message, status_code=status, body=body)
