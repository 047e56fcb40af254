"""
Report API endpoints for Ledgerly.

- GET /tags: the caller's tags
- GET /dashboard: daily expense and income totals, filtered independently
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.v1.auth import get_current_user
from backend.app.db.models import User
from backend.app.db.session import get_session_generator
from backend.app.schemas.common import EntryFilters
from backend.app.schemas.reports import TGReadItem, DashboardResponse
from backend.app.services.report_service import ReportService
from backend.app.utils.datetime_utils import Period

report_router = APIRouter(tags=["Reports"])


@report_router.get("/tags", response_model=List[TGReadItem])
async def list_tags(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> List[TGReadItem]:
    return await ReportService(session).list_tags(current_user.id)


@report_router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    expense_account_id: Optional[int] = Query(None, gt=0, description="Expense series: account filter"),
    expense_period: Period = Query(Period.ALL, description="Expense series: date range"),
    income_account_id: Optional[int] = Query(None, gt=0, description="Income series: account filter"),
    income_period: Period = Query(Period.ALL, description="Income series: date range"),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> DashboardResponse:
    return await ReportService(session).dashboard(
        current_user.id,
        expense_filters=EntryFilters(account_id=expense_account_id, period=expense_period),
        income_filters=EntryFilters(account_id=income_account_id, period=income_period),
        )
