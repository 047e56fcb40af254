"""
Account Service for Ledgerly.

Read side of accounts:
- listing (newest first) and select options
- balance verification: cached balance vs sum(incomes) - sum(expenses)

Design Notes:
- Read-only: account creation and every balance write go through LedgerService
- Reads use populate_existing so balances changed by SQL-level increments
  are never served from a stale identity map
"""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Numeric, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Account, Expense, Income
from backend.app.schemas.accounts import ACReadItem, ACOption, ACBalanceCheck
from backend.app.services.ledger_service import AuthError, NotFoundError


class AccountService:
    """
    Service for reading accounts.

    All methods are async and expect an AsyncSession.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_accounts(self, user_id: Optional[int]) -> List[ACReadItem]:
        """User's accounts, most recently created first."""
        if user_id is None:
            raise AuthError()

        stmt = (
            select(Account)
            .where(Account.user_id == user_id)
            .order_by(Account.created_at.desc(), Account.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return [ACReadItem.model_validate(a) for a in result.scalars().all()]

    async def list_options(self, user_id: int) -> List[ACOption]:
        stmt = select(Account.id, Account.name).where(Account.user_id == user_id).order_by(Account.name)
        result = await self.session.execute(stmt)
        return [ACOption(id=account_id, name=name) for account_id, name in result.all()]

    async def get_account(self, user_id: Optional[int], account_id: int) -> ACReadItem:
        if user_id is None:
            raise AuthError()

        stmt = (
            select(Account)
            .where(Account.id == account_id, Account.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        account = result.scalar_one_or_none()
        if account is None:
            raise NotFoundError("Account", account_id)
        return ACReadItem.model_validate(account)

    async def verify_balance(self, user_id: Optional[int], account_id: int) -> ACBalanceCheck:
        """
        Recompute an account's balance from its entries and compare with the cached value.

        Raises:
            AuthError: user_id is None
            NotFoundError: account missing or owned by someone else
        """
        account = await self.get_account(user_id, account_id)

        income_total = await self._sum_amounts(Income, account_id)
        expense_total = await self._sum_amounts(Expense, account_id)
        computed = income_total - expense_total

        return ACBalanceCheck(
            account_id=account_id,
            cached_balance=account.balance,
            computed_balance=computed,
            income_total=income_total,
            expense_total=expense_total,
            consistent=account.balance == computed,
            )

    async def _sum_amounts(self, model, account_id: int) -> Decimal:
        # SQLite sums REAL values; the Numeric result type rounds them back to scale 6
        total = func.coalesce(func.sum(model.amount), 0, type_=Numeric(18, 6))
        result = await self.session.execute(select(total).where(model.account_id == account_id))
        return result.scalar_one()
