"""
Infrastructure layer: session persistence and the HTTP client.
"""
from .api_client import ApiClient
from .session_store import (
    FileSessionStore,
    InMemorySessionStore,
    SessionStore,
    create_session_store,
)

__all__ = [
    "ApiClient",
    "FileSessionStore",
    "InMemorySessionStore",
    "SessionStore",
    "create_session_store",
]
