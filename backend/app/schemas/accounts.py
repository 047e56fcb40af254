"""
Account schemas for Ledgerly.

**Naming Convention**:
- AC prefix: Account schemas
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict, field_validator

from backend.app.schemas.common import check_amount_limit


class ACCreateItem(BaseModel):
    """
    DTO for POST /accounts.

    initial_balance is recorded as an "Initial balance" income entry so the
    balance invariant holds from the first commit.
    """
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., max_length=100, description="Account name")
    initial_balance: Decimal = Field(default=Decimal("0"), description="Opening balance (>= 0)")

    @field_validator('name', mode='before')
    @classmethod
    def _validate_name(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Name is required")
        return v

    @field_validator('initial_balance')
    @classmethod
    def _validate_initial_balance(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Balance must be positive")
        return check_amount_limit(v)


class ACReadItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    balance: Decimal
    created_at: datetime


class ACOption(BaseModel):
    """Account id/name pair for select inputs."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ACBalanceCheck(BaseModel):
    """
    Cached vs recomputed balance for one account.

    computed_balance = sum(incomes.amount) - sum(expenses.amount)
    """
    account_id: int
    cached_balance: Decimal
    computed_balance: Decimal
    income_total: Decimal
    expense_total: Decimal
    consistent: bool
