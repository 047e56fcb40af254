"""
Reporting schemas for Ledgerly: tag listing and dashboard chart series.
"""
from __future__ import annotations

from datetime import date as date_type
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from backend.app.schemas.accounts import ACOption
from backend.app.schemas.common import EntryFilters


class TGReadItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ChartPoint(BaseModel):
    """Sum of entry amounts for one calendar day."""
    date: date_type
    amount: Decimal


class DashboardSeries(BaseModel):
    filters: EntryFilters
    points: List[ChartPoint] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    """
    Home dashboard payload.

    Expense and income series are filtered independently.
    """
    expenses: DashboardSeries
    incomes: DashboardSeries
    accounts: List[ACOption]
