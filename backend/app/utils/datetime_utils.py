"""
Date and time utilities for Ledgerly.

Provides timezone-aware datetime helpers and the named period filters
used by the expense/income listings and the dashboard.
"""
from datetime import datetime, timezone, date, timedelta
from enum import Enum
from typing import Optional, Tuple


def utcnow() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Note:
        Always use this function instead of datetime.now() to ensure
        timezone-aware timestamps across the application.
    """
    return datetime.now(timezone.utc)


def today_date() -> date:
    """Current UTC calendar date."""
    return utcnow().date()


def parse_ISO_date(v) -> date:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        try:
            return date.fromisoformat(v)
        except ValueError:
            pass
        try:
            # Full timestamps as sent by date pickers ("2026-10-19T00:00:00.000Z")
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        except ValueError as e:
            raise ValueError(f"Input must be an ISO date string (YYYY-MM-DD). Error: {e}")
    raise TypeError(f"Input must be a str, date or datetime, got {type(v)}")


def first_day_of_month(d: date) -> date:
    return d.replace(day=1)


def first_day_of_previous_month(d: date) -> date:
    return (first_day_of_month(d) - timedelta(days=1)).replace(day=1)


class Period(str, Enum):
    """
    Named relative date ranges for listing and chart filters.

    - ALL: no date restriction
    - TODAY: date >= today
    - YESTERDAY: yesterday <= date < today
    - LAST_7_DAYS: date >= today - 7 days
    - LAST_30_DAYS: date >= today - 30 days
    - THIS_MONTH: date >= first day of the current month
    - LAST_MONTH: first day of previous month <= date < first day of current month
    """
    ALL = "all"
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_7_DAYS = "last-7-days"
    LAST_30_DAYS = "last-30-days"
    THIS_MONTH = "this-month"
    LAST_MONTH = "last-month"


def period_range(period: Period, now: Optional[datetime] = None) -> Tuple[Optional[date], Optional[date]]:
    """
    Resolve a period to a half-open date range ``[start, end)``.

    Either bound may be None (unbounded). ``now`` defaults to the current
    UTC time and is evaluated at call time, i.e. per request.

    Examples:
        >>> period_range(Period.LAST_MONTH, datetime(2026, 3, 15))
        (datetime.date(2026, 2, 1), datetime.date(2026, 3, 1))
        >>> period_range(Period.ALL)
        (None, None)
    """
    if now is None:
        now = utcnow()
    today = now.date() if isinstance(now, datetime) else now

    if period == Period.ALL:
        return None, None
    if period == Period.TODAY:
        return today, None
    if period == Period.YESTERDAY:
        return today - timedelta(days=1), today
    if period == Period.LAST_7_DAYS:
        return today - timedelta(days=7), None
    if period == Period.LAST_30_DAYS:
        return today - timedelta(days=30), None
    if period == Period.THIS_MONTH:
        return first_day_of_month(today), None
    if period == Period.LAST_MONTH:
        return first_day_of_previous_month(today), first_day_of_month(today)
    raise ValueError(f"Unknown period: {period}")
