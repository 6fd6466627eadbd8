"""
Wire and session models.
"""
from .auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    Session,
)
from .financial import (
    Account,
    AccountCreateRequest,
    AccountType,
    AccountUpdateRequest,
    CashflowSummary,
    DashboardSnapshot,
    EmotionTag,
    Transaction,
    TransactionCreateRequest,
    TransactionFilter,
    TransactionType,
    TransactionUpdateRequest,
    TriggerTag,
)

__all__ = [
    "Account",
    "AccountCreateRequest",
    "AccountType",
    "AccountUpdateRequest",
    "AuthResponse",
    "CashflowSummary",
    "CurrentUser",
    "DashboardSnapshot",
    "EmotionTag",
    "LoginRequest",
    "RefreshTokenRequest",
    "RegisterRequest",
    "Session",
    "Transaction",
    "TransactionCreateRequest",
    "TransactionFilter",
    "TransactionType",
    "TransactionUpdateRequest",
    "TriggerTag",
]
