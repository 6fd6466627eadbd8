"""
Transaction service for managing financial transactions.
"""
from datetime import date
from typing import List, Optional

from ..infrastructure.api_client import ApiClient
from ..models.financial import (
    Identifier,
    Transaction,
    TransactionCreateRequest,
    TransactionFilter,
    TransactionUpdateRequest,
)
from ..utils.constants import TRANSACTIONS_PATH
from ..utils.validators import build_request, parse_response, parse_response_list


class TransactionService:
    """Service for transaction operations."""

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    async def list_transactions(
        self,
        filters: Optional[TransactionFilter] = None,
        *,
        account_id: Optional[Identifier] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Transaction]:
        """
        List transactions, optionally narrowed by account and/or date range.

        Filters can be passed as a TransactionFilter or as keyword arguments;
        each one is sent only when set.
        """
        if filters is None:
            filters = build_request(
                TransactionFilter,
                account_id=account_id,
                start_date=start_date,
                end_date=end_date
            )

        params = filters.to_query_params()
        data = await self.api_client.get(TRANSACTIONS_PATH, params=params or None)
        return parse_response_list(Transaction, data, TRANSACTIONS_PATH)

    async def get_transaction(self, transaction_id: Identifier) -> Transaction:
        """Get transaction by ID."""
        data = await self.api_client.get(f"{TRANSACTIONS_PATH}/{transaction_id}")
        return parse_response(Transaction, data, f"{TRANSACTIONS_PATH}/{transaction_id}")

    async def create_transaction(self, request: TransactionCreateRequest) -> Transaction:
        """Create a new transaction."""
        data = await self.api_client.post(TRANSACTIONS_PATH, json=request.to_payload())
        return parse_response(Transaction, data, TRANSACTIONS_PATH)

    async def update_transaction(
        self,
        transaction_id: Identifier,
        request: TransactionUpdateRequest
    ) -> Transaction:
        """Update an existing transaction."""
        data = await self.api_client.put(f"{TRANSACTIONS_PATH}/{transaction_id}", json=request.to_payload())
        return parse_response(Transaction, data, f"{TRANSACTIONS_PATH}/{transaction_id}")

    async def delete_transaction(self, transaction_id: Identifier) -> None:
        """Delete a transaction."""
        await self.api_client.delete(f"{TRANSACTIONS_PATH}/{transaction_id}")
