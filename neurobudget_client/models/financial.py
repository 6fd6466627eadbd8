"""
Financial domain models: Account, Transaction, CashflowSummary, etc.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import Field, model_validator, validator

from ..utils.constants import DEFAULT_CURRENCY, MAX_NOTES_LENGTH
from .base import ApiModel, Money, PartialUpdateModel, RequestModel


class AccountType(str, Enum):
    """Types of financial accounts."""
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    CREDIT_CARD = "CREDIT_CARD"
    LOAN = "LOAN"
    INVESTMENT = "INVESTMENT"


class TransactionType(str, Enum):
    """Types of transactions."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class EmotionTag(str, Enum):
    """How the user felt when the money moved."""
    HAPPY = "HAPPY"
    STRESSED = "STRESSED"
    BORED = "BORED"
    EXCITED = "EXCITED"
    ANXIOUS = "ANXIOUS"
    TIRED = "TIRED"
    FRUSTRATED = "FRUSTRATED"
    CONTENT = "CONTENT"
    SAD = "SAD"
    NEUTRAL = "NEUTRAL"


class TriggerTag(str, Enum):
    """What prompted the spend."""
    SOCIAL_MEDIA = "SOCIAL_MEDIA"
    LATE_NIGHT = "LATE_NIGHT"
    WORK_STRESS = "WORK_STRESS"
    SOCIAL_PRESSURE = "SOCIAL_PRESSURE"
    REWARD = "REWARD"
    BOREDOM = "BOREDOM"
    HUNGER = "HUNGER"
    PLANNED = "PLANNED"
    EMERGENCY = "EMERGENCY"
    IMPULSE = "IMPULSE"


Identifier = Union[int, str]


# Account models
class Account(ApiModel):
    """Financial account as returned by the backend."""

    id: Identifier
    name: str
    type: AccountType
    balance: Money = Decimal("0")
    currency: str = DEFAULT_CURRENCY
    credit_limit: Optional[Money] = None
    minimum_payment: Optional[Money] = None
    available_credit: Optional[Money] = None
    active: bool = True
    transaction_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_credit(self) -> bool:
        return self.type == AccountType.CREDIT_CARD


class AccountCreateRequest(RequestModel):
    """Request model for creating accounts."""

    name: str = Field(..., min_length=1, max_length=100)
    type: AccountType
    balance: Money = Field(..., ge=0)
    credit_limit: Optional[Money] = None
    minimum_payment: Optional[Money] = None
    currency: str = Field(default=DEFAULT_CURRENCY, min_length=3, max_length=3)

    @validator("currency")
    def validate_currency(cls, v):
        """Validate currency code."""
        return v.upper()


class AccountUpdateRequest(PartialUpdateModel):
    """Request model for updating accounts."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    balance: Optional[Money] = None
    credit_limit: Optional[Money] = None
    minimum_payment: Optional[Money] = None
    active: Optional[bool] = None


class CashflowSummary(ApiModel):
    """Server-computed aggregate of spendable funds across accounts."""

    available_to_spend: Money = Decimal("0")
    total_cash: Money = Decimal("0")
    total_credit: Money = Decimal("0")
    total_debt: Money = Decimal("0")
    minimum_payments_due: Money = Decimal("0")
    total_investments: Optional[Money] = None
    upcoming_bills: Optional[Money] = None


# Transaction models
class Transaction(ApiModel):
    """Financial transaction as returned by the backend."""

    id: Identifier
    account_id: Identifier
    account_name: Optional[str] = None
    transaction_date: date
    description: str = ""
    merchant: str = ""
    amount: Money
    type: TransactionType
    category: str = ""
    emotion: Optional[EmotionTag] = None
    trigger: Optional[TriggerTag] = None
    notes: Optional[str] = None
    is_credit_spend: bool = False
    is_recurring: bool = False
    created_at: Optional[datetime] = None


class TransactionCreateRequest(RequestModel):
    """Request model for creating transactions."""

    account_id: Identifier
    transaction_date: date = Field(default_factory=date.today)
    description: Optional[str] = Field(None, max_length=200)
    merchant: str = Field(..., min_length=1, max_length=100)
    amount: Money = Field(..., gt=0)
    type: TransactionType = TransactionType.EXPENSE
    category: str = Field(default="Other", min_length=1, max_length=50)
    emotion: Optional[EmotionTag] = None
    trigger: Optional[TriggerTag] = None
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)
    is_credit_spend: bool = False
    is_recurring: bool = False

    @validator("amount")
    def validate_amount(cls, v):
        """Validate amount precision."""
        if v.as_tuple().exponent < -2:
            raise ValueError("Amount cannot have more than 2 decimal places")
        return v

    @model_validator(mode="after")
    def default_description(self):
        """A blank description falls back to the merchant name."""
        if not (self.description or "").strip():
            self.description = self.merchant
        return self


class TransactionUpdateRequest(PartialUpdateModel):
    """Request model for updating transactions."""

    description: Optional[str] = Field(None, max_length=200)
    merchant: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[Money] = Field(None, gt=0)
    type: Optional[TransactionType] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    emotion: Optional[EmotionTag] = None
    trigger: Optional[TriggerTag] = None
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)
    is_credit_spend: Optional[bool] = None
    is_recurring: Optional[bool] = None


class TransactionFilter(ApiModel):
    """Optional query filters for listing transactions; each applies independently."""

    account_id: Optional[Identifier] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @validator("end_date")
    def validate_date_range(cls, v, values):
        """Validate end date is not before start date."""
        start = values.get("start_date")
        if v and start and v < start:
            raise ValueError("End date must not be before start date")
        return v

    def to_query_params(self) -> Dict[str, Any]:
        """Query-string parameters for the filters that are set."""
        # Only None counts as unset; accountId=0 is still sent
        return self.to_payload()


class DashboardSnapshot(ApiModel):
    """Data behind the dashboard: cashflow totals and the latest transactions."""

    cashflow: CashflowSummary
    recent_transactions: List[Transaction] = Field(default_factory=list)
