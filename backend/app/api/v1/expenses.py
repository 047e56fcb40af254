"""
Expense API endpoints for Ledgerly.

- GET /expenses?account_id=&period=: filtered listing with tags, newest first
- POST /expenses: record an expense (tags created on the fly) and debit its account
- GET /expenses/{id}: editor data (expense, user's tag names, account options)
- PUT /expenses/{id}: replace fields and tag set, reconciling account balances

Unknown or foreign expense ids redirect (303) to the listing.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.v1.auth import get_current_user
from backend.app.db.models import User
from backend.app.db.session import get_session_generator
from backend.app.schemas.common import EntryFilters
from backend.app.schemas.entries import (
    EXCreateItem,
    EXUpdateItem,
    EXReadItem,
    EXEditorData,
    EntryCreateResult,
    EXUpdateResult,
    )
from backend.app.services.ledger_service import LedgerService
from backend.app.services.report_service import ReportService
from backend.app.utils.datetime_utils import Period

expense_router = APIRouter(prefix="/expenses", tags=["EX (Expenses)"])


# =============================================================================
# READ
# =============================================================================

@expense_router.get("", response_model=List[EXReadItem])
async def list_expenses(
    account_id: Optional[int] = Query(None, gt=0, description="Filter by account"),
    period: Period = Query(Period.ALL, description="Named date range"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> List[EXReadItem]:
    filters = EntryFilters(account_id=account_id, period=period)
    return await ReportService(session).list_expenses(current_user.id, filters)


@expense_router.get("/{expense_id}", response_model=EXEditorData)
async def get_expense_editor(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> EXEditorData:
    return await ReportService(session).get_expense_editor(current_user.id, expense_id)


# =============================================================================
# WRITE
# =============================================================================

@expense_router.post("", response_model=EntryCreateResult, status_code=201)
async def create_expense(
    item: EXCreateItem,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> EntryCreateResult:
    """
    Record an expense.

    ``tags`` accepts an array or a comma-separated string; unknown names
    are created in the same transaction.
    """
    user_id = current_user.id
    return await LedgerService(session).create_expense(user_id, item)


@expense_router.put("/{expense_id}", response_model=EXUpdateResult)
async def edit_expense(
    expense_id: int,
    item: EXUpdateItem,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> EXUpdateResult:
    user_id = current_user.id
    return await LedgerService(session).edit_expense(user_id, expense_id, item)
