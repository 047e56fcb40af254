"""
Ledger Service for Ledgerly.

Owns every write that touches an account balance:
- create income (balance += amount)
- create expense with tags (balance -= amount)
- edit expense (balance delta, tag set replacement)
- open account (optional initial balance recorded as an income)

Design Notes:
- The session is injected per request; there is no global handle
- Each public operation is one transaction: commit on success, rollback on
  any failure, datastore errors surfaced as LedgerTransactionError (no retry)
- Balances move only through ``UPDATE accounts SET balance = balance + :delta``
  so concurrent writers serialize in the database
- No other module writes Account.balance
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Dict, List, Optional

import structlog
from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Account, Expense, ExpenseTag, Income
from backend.app.schemas.accounts import ACCreateItem, ACReadItem
from backend.app.schemas.entries import (
    EXCreateItem,
    EXUpdateItem,
    INCreateItem,
    EntryCreateResult,
    EXUpdateResult,
    )
from backend.app.services import tag_service
from backend.app.utils.datetime_utils import today_date, utcnow
from backend.app.utils.decimal_utils import truncate_amount

logger = structlog.get_logger(__name__)

INITIAL_BALANCE_TITLE = "Initial balance"


# =============================================================================
# ERRORS
# =============================================================================

class AuthError(Exception):
    """Raised when an operation is invoked without an authenticated user."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotFoundError(Exception):
    """Raised when an entity does not exist or is owned by another user."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class LedgerValidationError(Exception):
    """Raised when a payload is well-formed but refers to something the user cannot use."""

    def __init__(self, field_errors: Dict[str, List[str]]):
        self.field_errors = field_errors
        super().__init__("; ".join(f"{k}: {', '.join(v)}" for k, v in field_errors.items()))


class LedgerTransactionError(Exception):
    """Raised when a write inside the atomic block fails. The transaction was rolled back."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


# =============================================================================
# SERVICE
# =============================================================================

class LedgerService:
    """
    Service for ledger mutations.

    All methods are async and expect an AsyncSession.
    Unlike the read services, this service commits: each public method is
    a complete unit of work.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # TRANSACTION SCOPE
    # =========================================================================

    @asynccontextmanager
    async def _atomic(self, operation: str) -> AsyncIterator[None]:
        """Commit the enclosed writes together or roll all of them back."""
        try:
            yield
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Ledger transaction rolled back", operation=operation, error=str(e))
            raise LedgerTransactionError(operation, str(e)) from e
        except BaseException:
            await self.session.rollback()
            raise

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _require_user(user_id: Optional[int]) -> int:
        if user_id is None:
            raise AuthError()
        return user_id

    async def _get_owned_account(self, user_id: int, account_id: int) -> Account:
        stmt = select(Account).where(Account.id == account_id, Account.user_id == user_id)
        result = await self.session.execute(stmt)
        account = result.scalar_one_or_none()
        if account is None:
            raise LedgerValidationError({"account_id": ["Account not found"]})
        return account

    async def _get_owned_expense(self, user_id: int, expense_id: int) -> Expense:
        stmt = select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
        result = await self.session.execute(stmt)
        expense = result.scalar_one_or_none()
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        return expense

    async def _adjust_balance(self, account_id: int, delta: Decimal) -> None:
        """Atomic increment (delta > 0) or decrement (delta < 0) evaluated by the database."""
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(balance=Account.balance + delta, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            raise LedgerTransactionError("adjust_balance", f"account {account_id} not updated")

    async def _read_balance(self, account_id: int) -> Decimal:
        stmt = select(Account.balance).where(Account.id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def _link_tags(self, expense_id: int, tag_ids: List[int]) -> None:
        self.session.add_all([ExpenseTag(expense_id=expense_id, tag_id=tag_id) for tag_id in dict.fromkeys(tag_ids)])
        await self.session.flush()

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    async def open_account(self, user_id: Optional[int], item: ACCreateItem) -> ACReadItem:
        """
        Create an account for the user.

        A positive initial balance is booked as an income titled
        "Initial balance", dated today, so the account balance equals its
        net entries from the start.
        """
        user_id = self._require_user(user_id)
        initial_balance = truncate_amount(item.initial_balance)

        async with self._atomic("open_account"):
            account = Account(user_id=user_id, name=item.name, balance=Decimal("0"))
            self.session.add(account)
            await self.session.flush()

            if initial_balance > 0:
                self.session.add(Income(
                    user_id=user_id,
                    title=INITIAL_BALANCE_TITLE,
                    amount=initial_balance,
                    date=today_date(),
                    account_id=account.id,
                    ))
                await self.session.flush()
                await self._adjust_balance(account.id, initial_balance)

            balance = await self._read_balance(account.id)
            account_id, created_at = account.id, account.created_at

        logger.info("Account opened", user_id=user_id, account_id=account_id, initial_balance=str(initial_balance))
        return ACReadItem(id=account_id, name=item.name, balance=balance, created_at=created_at)

    # =========================================================================
    # INCOME
    # =========================================================================

    async def create_income(self, user_id: Optional[int], item: INCreateItem) -> EntryCreateResult:
        """
        Record an income and credit its account.

        Raises:
            AuthError: user_id is None
            LedgerValidationError: account missing or owned by someone else
            LedgerTransactionError: any write failed (rolled back)
        """
        user_id = self._require_user(user_id)
        amount = truncate_amount(item.amount)

        async with self._atomic("create_income"):
            await self._get_owned_account(user_id, item.account_id)

            income = Income(
                user_id=user_id,
                title=item.title,
                amount=amount,
                description=item.description,
                date=item.date,
                account_id=item.account_id,
                )
            self.session.add(income)
            await self.session.flush()

            await self._adjust_balance(item.account_id, amount)
            balance = await self._read_balance(item.account_id)
            income_id = income.id

        logger.info("Income created", user_id=user_id, income_id=income_id, account_id=item.account_id, amount=str(amount))
        return EntryCreateResult(id=income_id, account_id=item.account_id, account_balance=balance)

    # =========================================================================
    # EXPENSE
    # =========================================================================

    async def create_expense(self, user_id: Optional[int], item: EXCreateItem) -> EntryCreateResult:
        """
        Record an expense, link its tags and debit its account.

        Missing tags are created (skip duplicates) and resolved inside the
        same transaction as the expense insert and the balance update.

        Raises:
            AuthError: user_id is None
            LedgerValidationError: account missing or owned by someone else
            LedgerTransactionError: any write failed (rolled back)
        """
        user_id = self._require_user(user_id)
        amount = truncate_amount(item.amount)

        async with self._atomic("create_expense"):
            await self._get_owned_account(user_id, item.account_id)
            tag_ids = await tag_service.resolve_tag_ids(self.session, user_id, item.tags)

            expense = Expense(
                user_id=user_id,
                title=item.title,
                amount=amount,
                description=item.description,
                date=item.date,
                account_id=item.account_id,
                )
            self.session.add(expense)
            await self.session.flush()

            await self._link_tags(expense.id, tag_ids)
            await self._adjust_balance(item.account_id, -amount)
            balance = await self._read_balance(item.account_id)
            expense_id = expense.id

        logger.info(
            "Expense created",
            user_id=user_id,
            expense_id=expense_id,
            account_id=item.account_id,
            amount=str(amount),
            tags=len(tag_ids),
            )
        return EntryCreateResult(id=expense_id, account_id=item.account_id, account_balance=balance)

    async def edit_expense(self, user_id: Optional[int], expense_id: int, item: EXUpdateItem) -> EXUpdateResult:
        """
        Replace an expense's fields and tag set, reconciling balances.

        Balance policy:
        - account changed: old account += old amount (when there is one),
          new account -= new amount
        - same account, amount changed: account += old amount - new amount
        - otherwise: no adjustment

        Raises:
            AuthError: user_id is None
            NotFoundError: expense missing or owned by someone else
            LedgerValidationError: new account missing or owned by someone else
            LedgerTransactionError: any write failed (rolled back)
        """
        user_id = self._require_user(user_id)
        new_amount = truncate_amount(item.amount)
        touched: List[int] = []

        async with self._atomic("edit_expense"):
            expense = await self._get_owned_expense(user_id, expense_id)
            await self._get_owned_account(user_id, item.account_id)
            tag_ids = await tag_service.resolve_tag_ids(self.session, user_id, item.tags)

            old_account_id = expense.account_id
            old_amount = expense.amount

            if old_account_id != item.account_id:
                if old_account_id is not None:
                    await self._adjust_balance(old_account_id, old_amount)
                    touched.append(old_account_id)
                await self._adjust_balance(item.account_id, -new_amount)
                touched.append(item.account_id)
            elif old_amount != new_amount:
                await self._adjust_balance(item.account_id, old_amount - new_amount)
                touched.append(item.account_id)

            expense.title = item.title
            expense.amount = new_amount
            expense.description = item.description
            expense.date = item.date
            expense.account_id = item.account_id
            self.session.add(expense)

            await self.session.execute(delete(ExpenseTag).where(ExpenseTag.expense_id == expense_id))
            await self._link_tags(expense_id, tag_ids)

            balances = {account_id: await self._read_balance(account_id) for account_id in touched}

        logger.info(
            "Expense edited",
            user_id=user_id,
            expense_id=expense_id,
            old_account_id=old_account_id,
            new_account_id=item.account_id,
            old_amount=str(old_amount),
            new_amount=str(new_amount),
            tags=len(tag_ids),
            )
        return EXUpdateResult(id=expense_id, adjusted_accounts=balances)
