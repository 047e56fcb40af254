"""
Ledger entry schemas for Ledgerly.

DTOs for expense and income operations.

**Naming Convention**:
- EX prefix: Expense schemas
- IN prefix: Income schemas
- Item suffix: single request/response item

**Design Notes**:
- Amounts are Decimal and must be >= 0; the entry kind gives the direction
- Tags arrive as an array or a comma-separated string and are normalized
  once here into an ordered list of trimmed, non-empty, unique names
- EXUpdateItem carries the full form (title, amount, ... tags): an edit
  replaces every field and the whole tag set
"""
from __future__ import annotations

from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict, field_validator

from backend.app.schemas.accounts import ACOption
from backend.app.schemas.common import check_amount_limit, validate_tags_list
from backend.app.utils.datetime_utils import parse_ISO_date


# =============================================================================
# SHARED BASE
# =============================================================================

class EntryPayload(BaseModel):
    """
    Fields shared by every entry form.

    Field semantics:
    - title: required, trimmed
    - amount: >= 0, coerced from number or numeric string
    - description: optional, trimmed, empty -> None
    - date: ISO date or timestamp, stored as a calendar date
    - account_id: account owned by the caller
    """
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(..., description="Entry title")
    amount: Decimal = Field(..., description="Amount (>= 0)")
    description: Optional[str] = Field(default=None, max_length=1000, description="Notes")
    date: date_type = Field(..., description="Entry date")
    account_id: int = Field(..., description="Account ID")

    @field_validator('title', mode='before')
    @classmethod
    def _validate_title(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Title is required")
        return v

    @field_validator('amount', mode='before')
    @classmethod
    def _coerce_amount(cls, v):
        if isinstance(v, bool):
            raise ValueError("Amount must be a number")
        if isinstance(v, (int, float, str)):
            try:
                return Decimal(str(v).strip())
            except ArithmeticError:
                raise ValueError("Amount must be a number")
        return v

    @field_validator('amount')
    @classmethod
    def _validate_amount(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Amount must be a number")
        if v < 0:
            raise ValueError("Amount should be greater than 0")
        return check_amount_limit(v)

    @field_validator('description', mode='before')
    @classmethod
    def _empty_description(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('date', mode='before')
    @classmethod
    def _parse_date(cls, v):
        try:
            return parse_ISO_date(v)
        except (TypeError, ValueError):
            raise ValueError("Invalid date")

    @field_validator('account_id', mode='before')
    @classmethod
    def _validate_account_id(cls, v):
        if v is None or v == "":
            raise ValueError("Account is required")
        try:
            account_id = int(v)
        except (TypeError, ValueError):
            raise ValueError("Account is required")
        if account_id <= 0:
            raise ValueError("Account is required")
        return account_id


# =============================================================================
# INCOME
# =============================================================================

class INCreateItem(EntryPayload):
    """DTO for POST /incomes."""
    pass


class INReadItem(BaseModel):
    """Income row joined with its account name."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    amount: Decimal
    description: Optional[str] = None
    date: date_type
    account_id: Optional[int] = None
    account_name: Optional[str] = None
    created_at: datetime


# =============================================================================
# EXPENSE
# =============================================================================

class EXCreateItem(EntryPayload):
    """DTO for POST /expenses."""
    tags: List[str] = Field(default_factory=list, description="Tag names (array or comma-separated string)")

    @field_validator('tags', mode='before')
    @classmethod
    def _validate_tags(cls, v):
        return validate_tags_list(v)


class EXUpdateItem(EXCreateItem):
    """DTO for PUT /expenses/{id}. Same shape as create: the edit form is submitted whole."""
    pass


class EXTagRef(BaseModel):
    id: int
    name: str


class EXReadItem(BaseModel):
    """Expense row joined with its account name and tags."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    amount: Decimal
    description: Optional[str] = None
    date: date_type
    account_id: Optional[int] = None
    account_name: Optional[str] = None
    tags: List[EXTagRef] = Field(default_factory=list)
    created_at: datetime


class EXEditorData(BaseModel):
    """Everything the edit form needs: the expense, the user's tag names and accounts."""
    expense: EXReadItem
    tag_names: List[str]
    accounts: List[ACOption]


# =============================================================================
# RESULTS
# =============================================================================

class EntryCreateResult(BaseModel):
    """Result of a create operation: the new entry id and the account balance after commit."""
    id: int
    account_id: Optional[int] = None
    account_balance: Optional[Decimal] = None


class EXUpdateResult(BaseModel):
    """Result of an expense edit: ids and balances of every account touched."""
    id: int
    adjusted_accounts: dict[int, Decimal] = Field(default_factory=dict, description="account_id -> balance after commit")
