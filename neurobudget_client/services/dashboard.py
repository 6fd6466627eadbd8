"""
Dashboard loader: cashflow totals plus the most recent transactions.
"""
import asyncio

import structlog

from ..models.financial import DashboardSnapshot
from ..utils.constants import DEFAULT_RECENT_TRANSACTIONS
from .account import AccountService
from .transaction import TransactionService

logger = structlog.get_logger()


class DashboardService:
    """Composes the account and transaction services for the dashboard view."""

    def __init__(self, account_service: AccountService, transaction_service: TransactionService):
        self.account_service = account_service
        self.transaction_service = transaction_service

    async def load_dashboard(self, recent_limit: int = DEFAULT_RECENT_TRANSACTIONS) -> DashboardSnapshot:
        """Fetch the cashflow summary and transaction list concurrently."""
        if recent_limit < 0:
            raise ValueError("recent_limit must not be negative")

        summary, transactions = await asyncio.gather(
            self.account_service.get_cashflow_summary(),
            self.transaction_service.list_transactions(),
        )

        logger.debug(
            "Dashboard loaded",
            transaction_count=len(transactions),
            available_to_spend=str(summary.available_to_spend)
        )
        return DashboardSnapshot(
            cashflow=summary,
            recent_transactions=transactions[:recent_limit]
        )
