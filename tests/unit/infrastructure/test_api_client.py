"""
Unit tests for the authenticated API client.
"""
import asyncio
import gc
import json

import httpx
import pytest

from neurobudget_client.infrastructure.api_client import ApiClient
from neurobudget_client.infrastructure.session_store import InMemorySessionStore
from neurobudget_client.models.auth import Session
from neurobudget_client.utils.exceptions import (
    ApiError,
    ApiValidationError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RequestTimeoutError,
)
from tests.fake_backend import bearer


@pytest.mark.unit
class TestBearerInjection:
    """Authorization header handling."""

    @pytest.mark.asyncio
    async def test_request_carries_stored_token(self, api_client, backend):
        """A request issued while a token is stored carries exactly that token."""
        backend.add("GET", "/accounts", json=[])

        await api_client.get("/accounts")

        [request] = backend.calls("GET", "/accounts")
        assert request.headers["authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_request_without_token_has_no_header(self, test_settings, session_store, http_client, backend):
        """No stored token means no Authorization header at all."""
        backend.add("GET", "/accounts", json=[])
        client = ApiClient(session_store, settings=test_settings, http_client=http_client)

        await client.get("/accounts")

        [request] = backend.calls("GET", "/accounts")
        assert "authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_token_is_read_per_request(self, api_client, signed_in_store, backend):
        """A token written between requests is picked up by the next request."""
        backend.add("GET", "/accounts", json=[])

        await api_client.get("/accounts")
        await signed_in_store.save_tokens("xyz", "refresh-xyz")
        await api_client.get("/accounts")

        tokens = [bearer(r) for r in backend.calls("GET", "/accounts")]
        assert tokens == ["abc", "xyz"]


@pytest.mark.unit
class TestTokenRefresh:
    """401 -> refresh -> retry behavior."""

    @pytest.mark.asyncio
    async def test_refresh_success_retries_once_with_new_token(self, api_client, signed_in_store, backend):
        """Two calls to the endpoint, one refresh call, retried call carries the new token."""
        backend.add("GET", "/accounts", status=401, json={"message": "expired"})
        backend.add("GET", "/accounts", json=[{"id": 1}])
        backend.add("POST", "/auth/refresh", json={"token": "t2", "refreshToken": "r2"})

        result = await api_client.get("/accounts")

        assert result == [{"id": 1}]
        endpoint_calls = backend.calls("GET", "/accounts")
        refresh_calls = backend.calls("POST", "/auth/refresh")
        assert len(endpoint_calls) == 2
        assert len(refresh_calls) == 1
        assert bearer(endpoint_calls[0]) == "abc"
        assert bearer(endpoint_calls[1]) == "t2"

    @pytest.mark.asyncio
    async def test_refresh_call_is_unauthenticated_and_sends_refresh_token(self, api_client, backend):
        """The refresh call carries the refresh token in its body and no bearer header."""
        backend.add("GET", "/accounts", status=401)
        backend.add("GET", "/accounts", json=[])
        backend.add("POST", "/auth/refresh", json={"token": "t2", "refreshToken": "r2"})

        await api_client.get("/accounts")

        [refresh] = backend.calls("POST", "/auth/refresh")
        assert "authorization" not in refresh.headers
        assert json.loads(refresh.content) == {"refreshToken": "refresh-abc"}

    @pytest.mark.asyncio
    async def test_refresh_success_persists_new_tokens(self, api_client, signed_in_store, backend):
        """New tokens are stored and the cached identity is kept."""
        backend.add("GET", "/accounts", status=401)
        backend.add("GET", "/accounts", json=[])
        backend.add("POST", "/auth/refresh", json={"token": "t2", "refreshToken": "r2"})

        await api_client.get("/accounts")

        session = await signed_in_store.load()
        assert session.access_token == "t2"
        assert session.refresh_token == "r2"
        assert session.user_id == "1"
        assert session.display_name == "A B"

    @pytest.mark.asyncio
    async def test_refresh_failure_clears_session_and_raises_original_401(self, api_client, signed_in_store, backend):
        """A failed refresh empties the store; the caller sees the endpoint's 401."""
        backend.add("GET", "/accounts", status=401, json={"message": "Token expired"})
        backend.add("POST", "/auth/refresh", status=403, json={"message": "Refresh token revoked"})

        with pytest.raises(AuthenticationError) as exc_info:
            await api_client.get("/accounts")

        assert exc_info.value.message == "Token expired"
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == {"message": "Token expired"}

        session = await signed_in_store.load()
        assert session == Session()
        assert session.access_token is None
        assert session.refresh_token is None
        assert session.user_id is None
        assert session.email is None
        assert session.display_name is None
        assert len(backend.calls("GET", "/accounts")) == 1

    @pytest.mark.asyncio
    async def test_refresh_network_failure_clears_session(self, api_client, signed_in_store, backend):
        """A transport failure during refresh counts as a failed refresh."""
        backend.add("GET", "/accounts", status=401, json={"message": "expired"})
        backend.fail("POST", "/auth/refresh", httpx.ConnectError("connection refused"))

        with pytest.raises(AuthenticationError) as exc_info:
            await api_client.get("/accounts")

        assert isinstance(exc_info.value.__cause__, NetworkError)
        assert not (await signed_in_store.load()).is_authenticated

    @pytest.mark.asyncio
    async def test_refresh_without_refresh_token_fails(self, test_settings, http_client, backend):
        """No stored refresh token: no refresh call, session cleared, original 401 raised."""
        store = InMemorySessionStore(Session(access_token="abc", user_id="1"))
        client = ApiClient(store, settings=test_settings, http_client=http_client)
        backend.add("GET", "/accounts", status=401)

        with pytest.raises(AuthenticationError):
            await client.get("/accounts")

        assert backend.calls("POST", "/auth/refresh") == []
        assert await store.load() == Session()

    @pytest.mark.asyncio
    async def test_malformed_refresh_response_fails(self, api_client, signed_in_store, backend):
        """A 200 refresh response without tokens is treated as a failed refresh."""
        backend.add("GET", "/accounts", status=401)
        backend.add("POST", "/auth/refresh", json={"unexpected": True})

        with pytest.raises(AuthenticationError):
            await api_client.get("/accounts")

        assert await signed_in_store.get_access_token() is None

    @pytest.mark.asyncio
    async def test_second_401_is_not_refreshed_again(self, api_client, signed_in_store, backend):
        """A 401 on the retried request propagates at once with no second refresh."""
        backend.add("GET", "/accounts", status=401, json={"message": "still rejected"})
        backend.add("POST", "/auth/refresh", json={"token": "t2", "refreshToken": "r2"})

        with pytest.raises(AuthenticationError) as exc_info:
            await api_client.get("/accounts")

        assert exc_info.value.message == "still rejected"
        assert len(backend.calls("GET", "/accounts")) == 2
        assert len(backend.calls("POST", "/auth/refresh")) == 1
        # The refresh itself succeeded, so its tokens stay stored
        assert await signed_in_store.get_access_token() == "t2"

    @pytest.mark.asyncio
    async def test_concurrent_401s_share_one_refresh(self, api_client, backend):
        """Simultaneous 401s wait on a single refresh call."""
        backend.add("GET", "/accounts", status=401)
        backend.add("GET", "/accounts", status=401)
        backend.add("GET", "/accounts", json=[])
        backend.add("POST", "/auth/refresh", json={"token": "t2", "refreshToken": "r2"})

        results = await asyncio.gather(api_client.get("/accounts"), api_client.get("/accounts"))

        assert results == [[], []]
        assert len(backend.calls("POST", "/auth/refresh")) == 1
        retried = backend.calls("GET", "/accounts")[2:]
        assert [bearer(r) for r in retried] == ["t2", "t2"]

    @pytest.mark.asyncio
    async def test_refresh_session_returns_new_tokens(self, api_client, backend):
        """refresh_session() rotates tokens on demand."""
        backend.add("POST", "/auth/refresh", json={"token": "t9", "refreshToken": "r9", "userId": 1})

        auth = await api_client.refresh_session()

        assert auth.token == "t9"
        assert auth.refresh_token == "r9"


    @pytest.mark.asyncio
    async def test_failed_refresh_with_cancelled_waiter_is_retrieved(self, api_client, signed_in_store, backend):
        """A refresh that fails after its only waiter was cancelled reports nothing to the loop."""
        backend.add("POST", "/auth/refresh", status=500)
        loop = asyncio.get_running_loop()
        unhandled = []
        loop.set_exception_handler(lambda _loop, context: unhandled.append(context))

        waiter = asyncio.ensure_future(api_client.refresh_session())
        await asyncio.sleep(0)
        waiter.cancel()
        for _ in range(5):
            await asyncio.sleep(0)

        refresh_task = api_client._refresh_task
        assert waiter.cancelled()
        assert refresh_task.done()
        assert await signed_in_store.load() == Session()

        api_client._refresh_task = None
        del refresh_task
        gc.collect()
        loop.set_exception_handler(None)

        assert unhandled == []


@pytest.mark.unit
class TestErrorPropagation:
    """Non-401 failures propagate without retry."""

    @pytest.mark.asyncio
    async def test_not_found(self, api_client, backend):
        backend.add("GET", "/accounts/99", status=404, json={"message": "Account not found"})

        with pytest.raises(NotFoundError) as exc_info:
            await api_client.get("/accounts/99")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Account not found"
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_validation_error(self, api_client, backend):
        backend.add("POST", "/transactions", status=400, json={"message": "Amount must be greater than 0"})

        with pytest.raises(ApiValidationError) as exc_info:
            await api_client.post("/transactions", json={"amount": 0})

        assert exc_info.value.status_code == 400
        assert exc_info.value.body == {"message": "Amount must be greater than 0"}

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self, api_client, backend):
        backend.add("GET", "/accounts", status=500, json={"error": "boom"})

        with pytest.raises(ApiError) as exc_info:
            await api_client.get("/accounts")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "HTTP 500"
        assert exc_info.value.body == {"error": "boom"}
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_forbidden_does_not_trigger_refresh(self, api_client, backend):
        backend.add("GET", "/accounts", status=403)

        with pytest.raises(ApiError) as exc_info:
            await api_client.get("/accounts")

        assert exc_info.value.status_code == 403
        assert backend.calls("POST", "/auth/refresh") == []

    @pytest.mark.asyncio
    async def test_network_error(self, api_client, backend):
        backend.fail("GET", "/accounts", httpx.ConnectError("unreachable"))

        with pytest.raises(NetworkError) as exc_info:
            await api_client.get("/accounts")

        assert exc_info.value.code == "NETWORK_ERROR"
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout(self, api_client, backend):
        backend.fail("GET", "/accounts", httpx.ReadTimeout("too slow"))

        with pytest.raises(RequestTimeoutError) as exc_info:
            await api_client.get("/accounts")

        assert isinstance(exc_info.value, NetworkError)
        assert exc_info.value.code == "REQUEST_TIMEOUT"

    @pytest.mark.asyncio
    async def test_empty_body_decodes_to_none(self, api_client, backend):
        backend.add("DELETE", "/accounts/1", status=204)

        assert await api_client.delete("/accounts/1") is None

    @pytest.mark.asyncio
    async def test_session_untouched_on_other_errors(self, api_client, signed_in_store, backend):
        backend.add("GET", "/accounts", status=500)

        with pytest.raises(ApiError):
            await api_client.get("/accounts")

        assert await signed_in_store.get_access_token() == "abc"


@pytest.mark.unit
class TestClientLifecycle:
    """Ownership of the underlying httpx client."""

    @pytest.mark.asyncio
    async def test_borrowed_client_is_not_closed(self, api_client, http_client):
        await api_client.aclose()

        assert not http_client.is_closed

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self, test_settings, session_store):
        async with ApiClient(session_store, settings=test_settings) as client:
            inner = client._client
            assert str(inner.base_url).rstrip("/") == test_settings.api_base_url
            assert inner.headers["user-agent"] == test_settings.user_agent

        assert inner.is_closed
