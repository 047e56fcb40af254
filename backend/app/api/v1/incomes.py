"""
Income API endpoints for Ledgerly.

- GET /incomes?account_id=&period=: filtered listing, newest first
- POST /incomes: record an income and credit its account
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.v1.auth import get_current_user
from backend.app.db.models import User
from backend.app.db.session import get_session_generator
from backend.app.schemas.common import EntryFilters
from backend.app.schemas.entries import INCreateItem, INReadItem, EntryCreateResult
from backend.app.services.ledger_service import LedgerService
from backend.app.services.report_service import ReportService
from backend.app.utils.datetime_utils import Period

income_router = APIRouter(prefix="/incomes", tags=["IN (Incomes)"])


@income_router.get("", response_model=List[INReadItem])
async def list_incomes(
    account_id: Optional[int] = Query(None, gt=0, description="Filter by account"),
    period: Period = Query(Period.ALL, description="Named date range"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> List[INReadItem]:
    filters = EntryFilters(account_id=account_id, period=period)
    return await ReportService(session).list_incomes(current_user.id, filters)


@income_router.post("", response_model=EntryCreateResult, status_code=201)
async def create_income(
    item: INCreateItem,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> EntryCreateResult:
    user_id = current_user.id
    return await LedgerService(session).create_income(user_id, item)
