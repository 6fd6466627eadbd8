"""
Domain services mapping each operation onto one API call.
"""
from .account import AccountService
from .auth import AuthService
from .dashboard import DashboardService
from .transaction import TransactionService

__all__ = [
    "AccountService",
    "AuthService",
    "DashboardService",
    "TransactionService",
]
