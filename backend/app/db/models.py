"""
Database models for Ledgerly.

All models use SQLModel (SQLAlchemy 2.x) with the following conventions:
- Money columns use Numeric(18, 6) for precision
- Timestamps in UTC (created_at, updated_at)
- Every row is owned by exactly one user (user_id), including join rows
  indirectly through their expense
- Foreign keys enforced with PRAGMA foreign_keys=ON

Balance invariant:
    accounts.balance == sum(incomes.amount) - sum(expenses.amount)
    for all entries whose account_id points at the account.
Only LedgerService writes accounts.balance.
"""
from datetime import date as date_type, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Column,
    UniqueConstraint,
    Index,
    Numeric,
    Text,
    event,
    CheckConstraint,
    Integer,
    ForeignKey,
    )
from sqlmodel import Field, SQLModel

from backend.app.utils.datetime_utils import utcnow


# ============================================================================
# ENUMS
# ============================================================================

class EntryKind(str, Enum):
    """
    Ledger entry kind.

    - EXPENSE: money leaving an account (balance decreases by amount)
    - INCOME: money entering an account (balance increases by amount)
    """
    EXPENSE = "expense"
    INCOME = "income"


# ============================================================================
# MODELS
# ============================================================================


class User(SQLModel, table=True):
    """Application user. Owner of accounts, tags and entries."""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)
    hashed_password: str = Field(nullable=False)

    is_active: bool = Field(default=True)
    is_superuser: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Account(SQLModel, table=True):
    """
    Named money account (bank account, wallet, cash...).

    balance is a cached value maintained by LedgerService with atomic
    ``balance = balance +/- amount`` statements; it is never recomputed
    in application memory.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        Index("idx_accounts_user_created", "user_id", "created_at"),
        )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    balance: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(18, 6), nullable=False, default=0))

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Tag(SQLModel, table=True):
    """Expense tag. Names are unique per user."""
    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
        )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    name: str = Field(nullable=False)

    created_at: datetime = Field(default_factory=utcnow)


class Expense(SQLModel, table=True):
    """
    Expense entry.

    account_id is nullable: an expense may exist without an account, in
    which case it affects no balance.
    """
    __tablename__ = "expenses"
    __table_args__ = (
        Index("idx_expenses_user_date", "user_id", "date"),
        CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),
        )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    amount: Decimal = Field(sa_column=Column(Numeric(18, 6), nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    date: date_type = Field(nullable=False, index=True)

    account_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("accounts.id"), index=True, nullable=True),
        )

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Income(SQLModel, table=True):
    """Income entry."""
    __tablename__ = "incomes"
    __table_args__ = (
        Index("idx_incomes_user_date", "user_id", "date"),
        CheckConstraint("amount >= 0", name="ck_incomes_amount_non_negative"),
        )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    amount: Decimal = Field(sa_column=Column(Numeric(18, 6), nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    date: date_type = Field(nullable=False, index=True)

    account_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("accounts.id"), index=True, nullable=True),
        )

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ExpenseTag(SQLModel, table=True):
    """
    Join row linking one expense to one tag.

    Replaced wholesale when an expense is edited (delete all, recreate).
    """
    __tablename__ = "expense_tags"

    expense_id: int = Field(
        sa_column=Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), primary_key=True),
        )
    tag_id: int = Field(
        sa_column=Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True),
        )


# ============================================================================
# EVENT LISTENERS
# ============================================================================


@event.listens_for(User, "before_update")
@event.listens_for(Account, "before_update")
@event.listens_for(Expense, "before_update")
@event.listens_for(Income, "before_update")
def receive_before_update(mapper, connection, target):
    """Update updated_at timestamp on update."""
    target.updated_at = utcnow()
