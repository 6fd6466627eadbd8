"""
Account service for managing financial accounts.
"""
from typing import List

from ..infrastructure.api_client import ApiClient
from ..models.financial import (
    Account,
    AccountCreateRequest,
    AccountUpdateRequest,
    CashflowSummary,
    Identifier,
)
from ..utils.constants import ACCOUNTS_PATH, CASHFLOW_PATH
from ..utils.validators import parse_response, parse_response_list


class AccountService:
    """Service for account operations."""

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client

    async def list_accounts(self) -> List[Account]:
        """List the user's accounts."""
        data = await self.api_client.get(ACCOUNTS_PATH)
        return parse_response_list(Account, data, ACCOUNTS_PATH)

    async def get_account(self, account_id: Identifier) -> Account:
        """Get account by ID."""
        data = await self.api_client.get(f"{ACCOUNTS_PATH}/{account_id}")
        return parse_response(Account, data, f"{ACCOUNTS_PATH}/{account_id}")

    async def create_account(self, request: AccountCreateRequest) -> Account:
        """Create a new account."""
        data = await self.api_client.post(ACCOUNTS_PATH, json=request.to_payload())
        return parse_response(Account, data, ACCOUNTS_PATH)

    async def update_account(self, account_id: Identifier, request: AccountUpdateRequest) -> Account:
        """Update an existing account."""
        data = await self.api_client.put(f"{ACCOUNTS_PATH}/{account_id}", json=request.to_payload())
        return parse_response(Account, data, f"{ACCOUNTS_PATH}/{account_id}")

    async def delete_account(self, account_id: Identifier) -> None:
        """Delete an account."""
        await self.api_client.delete(f"{ACCOUNTS_PATH}/{account_id}")

    async def get_cashflow_summary(self) -> CashflowSummary:
        """Fetch the server-computed cashflow totals."""
        data = await self.api_client.get(CASHFLOW_PATH)
        return parse_response(CashflowSummary, data, CASHFLOW_PATH)
