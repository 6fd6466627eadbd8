"""
Client application entry point.

Builds the object graph (session store, API client, services, auth
controller) and manages its lifecycle.
"""

import logging
from typing import Optional

import httpx
import structlog

from .config import Settings, get_settings
from .controllers.auth import AuthController
from .infrastructure.api_client import ApiClient
from .infrastructure.session_store import SessionStore, create_session_store
from .services.account import AccountService
from .services.auth import AuthService
from .services.dashboard import DashboardService
from .services.transaction import TransactionService
from .utils.exceptions import ConfigurationError


# Configure structured logging
def configure_logging(settings: Settings) -> None:
    """Configure structured logging."""
    logging.basicConfig(
        format="%(message)s",
        stream=None,
        level=getattr(logging, settings.log_level),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class NeuroBudgetApp:
    """
    One running client: owns the HTTP client and the auth controller.

    Use as an async context manager, or call start()/stop() explicitly.
    """

    def __init__(
        self,
        settings: Settings,
        session_store: SessionStore,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.settings = settings
        self.session_store = session_store
        self.api_client = ApiClient(session_store, settings=settings, http_client=http_client)

        self.auth_service = AuthService(self.api_client, session_store)
        self.accounts = AccountService(self.api_client)
        self.transactions = TransactionService(self.api_client)
        self.dashboard = DashboardService(self.accounts, self.transactions)

        self._auth_controller = AuthController(self.auth_service)
        self._started = False

    @property
    def auth(self) -> AuthController:
        """The auth controller; only available while the app is running."""
        if not self._started:
            raise ConfigurationError("Auth controller not initialized")
        return self._auth_controller

    async def start(self) -> "NeuroBudgetApp":
        """Load the persisted session into the auth controller."""
        logger = structlog.get_logger()
        logger.info(
            "Client starting up",
            app_name=self.settings.app_name,
            version=self.settings.version,
            environment=self.settings.environment,
            api_base_url=self.settings.api_base_url
        )

        await self._auth_controller.initialize()
        self._started = True
        return self

    async def stop(self) -> None:
        """Detach the controller and close network resources."""
        self._auth_controller.close()
        self._started = False
        await self.api_client.aclose()

        structlog.get_logger().info("Client shut down")

    async def __aenter__(self) -> "NeuroBudgetApp":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()


def create_app(
    settings: Optional[Settings] = None,
    session_store: Optional[SessionStore] = None,
    http_client: Optional[httpx.AsyncClient] = None
) -> NeuroBudgetApp:
    """Create and configure the client application."""
    settings = settings or get_settings()
    configure_logging(settings)

    return NeuroBudgetApp(
        settings=settings,
        session_store=session_store or create_session_store(settings),
        http_client=http_client
    )
