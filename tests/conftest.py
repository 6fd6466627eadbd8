"""
Global pytest configuration and fixtures.
"""

import os

import httpx
import pytest

from neurobudget_client.config import Settings
from neurobudget_client.infrastructure.api_client import ApiClient
from neurobudget_client.infrastructure.session_store import InMemorySessionStore
from neurobudget_client.models.auth import Session
from tests.fake_backend import API_BASE_URL, FakeBackend


@pytest.fixture
def test_settings() -> Settings:
    """Test settings configuration."""
    return Settings(
        app_name="neurobudget-client-test",
        version="1.0.0-test",
        debug=True,
        environment="testing",
        api_base_url=API_BASE_URL,
        request_timeout_seconds=5,
        session_backend="memory",
        log_level="DEBUG",
        log_json=False
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def http_client(backend) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=API_BASE_URL, transport=backend.transport)


@pytest.fixture
def session_store() -> InMemorySessionStore:
    """Empty in-memory session store."""
    return InMemorySessionStore()


@pytest.fixture
def signed_in_store() -> InMemorySessionStore:
    """Session store holding a complete signed-in session."""
    return InMemorySessionStore(
        Session(
            access_token="abc",
            refresh_token="refresh-abc",
            user_id="1",
            email="a@b.com",
            display_name="A B"
        )
    )


@pytest.fixture
def api_client(test_settings, signed_in_store, http_client) -> ApiClient:
    return ApiClient(signed_in_store, settings=test_settings, http_client=http_client)


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


# Pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
