"""
NeuroBudget client: session storage, authenticated API access and auth state.
"""
from .config import Settings, get_settings
from .main import NeuroBudgetApp, configure_logging, create_app

__version__ = "1.0.0"

__all__ = [
    "NeuroBudgetApp",
    "Settings",
    "configure_logging",
    "create_app",
    "get_settings",
]
