"""
Report Service for Ledgerly.

Read side of entries:
- expense / income listings filtered by account and period, joined with
  account names (and tag names for expenses)
- expense editor payload
- daily totals for the dashboard charts

Periods are resolved against "now" at call time; callers may pass ``now``
explicitly (tests, or a request timestamp).
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Type, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Account, EntryKind, Expense, ExpenseTag, Income, Tag
from backend.app.schemas.common import EntryFilters
from backend.app.schemas.entries import EXEditorData, EXReadItem, EXTagRef, INReadItem
from backend.app.schemas.reports import ChartPoint, DashboardResponse, DashboardSeries, TGReadItem
from backend.app.services import tag_service
from backend.app.services.account_service import AccountService
from backend.app.services.ledger_service import AuthError, NotFoundError

EntryModel = Union[Type[Expense], Type[Income]]


class ReportService:
    """
    Service for entry listings and aggregates.

    All methods are async and expect an AsyncSession.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # FILTERS
    # =========================================================================

    @staticmethod
    def _apply_filters(stmt, model: EntryModel, user_id: int, filters: EntryFilters, now: Optional[datetime]):
        stmt = stmt.where(model.user_id == user_id)

        if filters.account_id:
            stmt = stmt.where(model.account_id == filters.account_id)

        date_range = filters.date_range(now)
        if date_range.start is not None:
            stmt = stmt.where(model.date >= date_range.start)
        if date_range.end is not None:
            stmt = stmt.where(model.date < date_range.end)

        return stmt

    # =========================================================================
    # LISTINGS
    # =========================================================================

    async def list_expenses(self, user_id: Optional[int], filters: EntryFilters, now: Optional[datetime] = None) -> List[EXReadItem]:
        """User's expenses with account name and tags, newest first."""
        if user_id is None:
            raise AuthError()

        stmt = select(Expense, Account.name).outerjoin(Account, Expense.account_id == Account.id)
        stmt = self._apply_filters(stmt, Expense, user_id, filters, now)
        stmt = stmt.order_by(Expense.date.desc(), Expense.id.desc())

        result = await self.session.execute(stmt)
        rows = result.all()

        tags_by_expense = await self._tags_for_expenses([expense.id for expense, _ in rows])

        return [
            EXReadItem(
                id=expense.id,
                title=expense.title,
                amount=expense.amount,
                description=expense.description,
                date=expense.date,
                account_id=expense.account_id,
                account_name=account_name,
                tags=tags_by_expense.get(expense.id, []),
                created_at=expense.created_at,
                )
            for expense, account_name in rows
            ]

    async def list_incomes(self, user_id: Optional[int], filters: EntryFilters, now: Optional[datetime] = None) -> List[INReadItem]:
        """User's incomes with account name, newest first."""
        if user_id is None:
            raise AuthError()

        stmt = select(Income, Account.name).outerjoin(Account, Income.account_id == Account.id)
        stmt = self._apply_filters(stmt, Income, user_id, filters, now)
        stmt = stmt.order_by(Income.date.desc(), Income.id.desc())

        result = await self.session.execute(stmt)
        return [
            INReadItem(
                id=income.id,
                title=income.title,
                amount=income.amount,
                description=income.description,
                date=income.date,
                account_id=income.account_id,
                account_name=account_name,
                created_at=income.created_at,
                )
            for income, account_name in result.all()
            ]

    async def _tags_for_expenses(self, expense_ids: List[int]) -> Dict[int, List[EXTagRef]]:
        if not expense_ids:
            return {}

        stmt = (
            select(ExpenseTag.expense_id, Tag.id, Tag.name)
            .join(Tag, ExpenseTag.tag_id == Tag.id)
            .where(ExpenseTag.expense_id.in_(expense_ids))
            .order_by(Tag.name)
        )
        result = await self.session.execute(stmt)

        tags: Dict[int, List[EXTagRef]] = defaultdict(list)
        for expense_id, tag_id, name in result.all():
            tags[expense_id].append(EXTagRef(id=tag_id, name=name))
        return tags

    # =========================================================================
    # EDITOR / TAGS
    # =========================================================================

    async def get_expense(self, user_id: Optional[int], expense_id: int) -> EXReadItem:
        if user_id is None:
            raise AuthError()

        stmt = (
            select(Expense, Account.name)
            .outerjoin(Account, Expense.account_id == Account.id)
            .where(Expense.id == expense_id, Expense.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            raise NotFoundError("Expense", expense_id)

        expense, account_name = row
        tags = await self._tags_for_expenses([expense.id])
        return EXReadItem(
            id=expense.id,
            title=expense.title,
            amount=expense.amount,
            description=expense.description,
            date=expense.date,
            account_id=expense.account_id,
            account_name=account_name,
            tags=tags.get(expense.id, []),
            created_at=expense.created_at,
            )

    async def get_expense_editor(self, user_id: Optional[int], expense_id: int) -> EXEditorData:
        """Expense with its tags, plus the user's tag names and accounts for the edit form."""
        expense = await self.get_expense(user_id, expense_id)
        tags = await tag_service.list_tags(self.session, user_id)
        accounts = await AccountService(self.session).list_options(user_id)
        return EXEditorData(expense=expense, tag_names=[t.name for t in tags], accounts=accounts)

    async def list_tags(self, user_id: Optional[int]) -> List[TGReadItem]:
        if user_id is None:
            raise AuthError()
        tags = await tag_service.list_tags(self.session, user_id)
        return [TGReadItem.model_validate(t) for t in tags]

    # =========================================================================
    # CHARTS
    # =========================================================================

    async def daily_totals(
        self,
        user_id: Optional[int],
        kind: EntryKind,
        filters: EntryFilters,
        now: Optional[datetime] = None,
        ) -> List[ChartPoint]:
        """
        Sum of amounts per calendar day, ascending by date.

        Days without entries are omitted.
        """
        if user_id is None:
            raise AuthError()

        model: EntryModel = Expense if kind == EntryKind.EXPENSE else Income
        stmt = select(model.date, func.sum(model.amount))
        stmt = self._apply_filters(stmt, model, user_id, filters, now)
        stmt = stmt.group_by(model.date).order_by(model.date)

        result = await self.session.execute(stmt)
        return [ChartPoint(date=day, amount=Decimal(str(total))) for day, total in result.all()]

    async def dashboard(
        self,
        user_id: Optional[int],
        expense_filters: EntryFilters,
        income_filters: EntryFilters,
        now: Optional[datetime] = None,
        ) -> DashboardResponse:
        """Expense and income series, each with its own filters, plus account options."""
        if user_id is None:
            raise AuthError()

        expense_points = await self.daily_totals(user_id, EntryKind.EXPENSE, expense_filters, now)
        income_points = await self.daily_totals(user_id, EntryKind.INCOME, income_filters, now)
        accounts = await AccountService(self.session).list_options(user_id)

        return DashboardResponse(
            expenses=DashboardSeries(filters=expense_filters, points=expense_points),
            incomes=DashboardSeries(filters=income_filters, points=income_points),
            accounts=accounts,
            )
