"""
Integration tests: the assembled client against a fake backend.
"""
import pytest

from neurobudget_client.infrastructure.session_store import FileSessionStore, InMemorySessionStore
from neurobudget_client.main import NeuroBudgetApp, create_app
from neurobudget_client.models.auth import Session
from neurobudget_client.models.financial import TransactionCreateRequest
from neurobudget_client.utils.exceptions import AuthenticationError, ConfigurationError
from tests.factories.financial_factory import AccountFactory, CashflowSummaryFactory, TransactionFactory
from tests.fake_backend import bearer


@pytest.mark.integration
class TestAppLifecycle:
    """Startup and shutdown of the assembled client."""

    def test_auth_unavailable_before_start(self, test_settings, http_client):
        app = create_app(test_settings, http_client=http_client)

        assert isinstance(app, NeuroBudgetApp)
        with pytest.raises(ConfigurationError):
            app.auth

    @pytest.mark.asyncio
    async def test_context_manager_starts_and_stops(self, test_settings, http_client):
        app = create_app(test_settings, session_store=InMemorySessionStore(), http_client=http_client)

        async with app:
            assert app.auth.loading_initial_state is False
            assert app.auth.is_authenticated is False

        with pytest.raises(ConfigurationError):
            app.auth

    @pytest.mark.asyncio
    async def test_memory_backend_from_settings(self, test_settings, http_client):
        app = create_app(test_settings, http_client=http_client)

        assert isinstance(app.session_store, InMemorySessionStore)


@pytest.mark.integration
class TestSignedInFlow:
    """Login, use the API through a token refresh, then log out."""

    @pytest.mark.asyncio
    async def test_full_session(self, test_settings, http_client, backend, tmp_path):
        store = FileSessionStore(str(tmp_path / "session.json"))
        backend.add("POST", "/auth/login", json={
            "token": "t1", "refreshToken": "r1", "userId": 1, "firstName": "A", "lastName": "B", "role": "USER"
        })
        backend.add("GET", "/accounts", json=AccountFactory.build_batch(2))
        backend.add("GET", "/accounts/cashflow", status=401)
        backend.add("GET", "/accounts/cashflow", json=CashflowSummaryFactory(availableToSpend=99))
        backend.add("POST", "/auth/refresh", json={"token": "t2", "refreshToken": "r2"})
        backend.add("GET", "/transactions", json=TransactionFactory.build_batch(7))
        backend.add("POST", "/transactions", json=TransactionFactory(id=50, merchant="Bakery"))

        async with create_app(test_settings, session_store=store, http_client=http_client) as app:
            user = await app.auth.login("a@b.com", "pw")
            assert user.name == "A B"

            accounts = await app.accounts.list_accounts()
            assert len(accounts) == 2
            assert bearer(backend.calls("GET", "/accounts")[0]) == "t1"

            snapshot = await app.dashboard.load_dashboard()
            assert len(snapshot.recent_transactions) == 5
            assert [bearer(r) for r in backend.calls("GET", "/accounts/cashflow")] == ["t1", "t2"]
            assert (await store.load()).refresh_token == "r2"

            created = await app.transactions.create_transaction(
                TransactionCreateRequest(account_id=accounts[0].id, merchant="Bakery", amount="4.20")
            )
            assert created.id == 50
            assert bearer(backend.calls("POST", "/transactions")[0]) == "t2"

            await app.auth.logout()
            assert app.auth.is_authenticated is False
            assert await store.load() == Session()

    @pytest.mark.asyncio
    async def test_restart_restores_session(self, test_settings, http_client, tmp_path, backend):
        path = str(tmp_path / "session.json")
        backend.add("POST", "/auth/login", json={
            "token": "t1", "refreshToken": "r1", "userId": 3, "firstName": "Grace", "lastName": "Hopper"
        })

        async with create_app(test_settings, session_store=FileSessionStore(path), http_client=http_client) as app:
            await app.auth.login("grace@b.com", "pw")

        backend.requests.clear()
        async with create_app(test_settings, session_store=FileSessionStore(path), http_client=http_client) as app:
            assert app.auth.is_authenticated is True
            assert app.auth.current_user.name == "Grace Hopper"
            assert app.auth.current_user.email == "grace@b.com"
            assert backend.requests == []

    @pytest.mark.asyncio
    async def test_expired_session_ends_on_failed_refresh(self, test_settings, signed_in_store, http_client, backend):
        backend.add("GET", "/accounts", status=401, json={"message": "Token expired"})
        backend.add("POST", "/auth/refresh", status=401, json={"message": "Refresh expired"})

        async with create_app(test_settings, session_store=signed_in_store, http_client=http_client) as app:
            assert app.auth.is_authenticated is True

            with pytest.raises(AuthenticationError) as exc_info:
                await app.accounts.list_accounts()

            assert exc_info.value.message == "Token expired"
            assert await signed_in_store.load() == Session()
