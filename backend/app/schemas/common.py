"""
Common schemas shared across subsystems.

**Domain Coverage**:
- DateRangeModel: half-open date range produced by a Period filter
- EntryFilters: account/period filters shared by expense and income listings
- FieldErrorsResponse: field -> messages mapping returned on validation failure
- validate_tags_list: normalizes the tag payload union (array or comma string)
- check_amount_limit: keeps money values inside NUMERIC(18, 6)

**Design Notes**:
- Validation error messages are keyed by the request field name (title, amount,
  description, date, account_id, tags); anything not tied to a field goes in
  form_errors.
"""
# Postpones evaluation of type hints to improve imports and performance. Also avoid circular import issues.
from __future__ import annotations

from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any, Iterable

from pydantic import BaseModel, Field, ConfigDict, model_validator

from backend.app.utils.datetime_utils import Period, period_range


# =============================================================================
# AMOUNTS
# =============================================================================

# NUMERIC(18, 6) leaves 12 integer digits
AMOUNT_LIMIT = Decimal(10) ** 12


def check_amount_limit(v: Decimal) -> Decimal:
    if abs(v) >= AMOUNT_LIMIT:
        raise ValueError("Amount is too large")
    return v


# =============================================================================
# TAGS
# =============================================================================

def validate_tags_list(v: Any) -> List[str]:
    """
    Shared validator for the tags field.

    Accepts:
    - None -> []
    - List[str] -> stripped, non-empty, de-duplicated (first occurrence wins)
    - str (comma-separated) -> same normalization after splitting on ','

    Examples:
        >>> validate_tags_list(" Food, Travel,,Food ")
        ['Food', 'Travel']
        >>> validate_tags_list(["Food", "  ", "Rent"])
        ['Food', 'Rent']
    """
    if v is None:
        return []
    if isinstance(v, str):
        raw: Iterable[Any] = v.split(',')
    elif isinstance(v, (list, tuple)):
        raw = v
    else:
        raise ValueError("tags must be a list of strings or comma-separated string")

    tags: List[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise ValueError("tags must be a list of strings or comma-separated string")
        name = item.strip()
        if name and name not in tags:
            tags.append(name)
    return tags


# =============================================================================
# DATE RANGES / FILTERS
# =============================================================================

class DateRangeModel(BaseModel):
    """
    Half-open date range [start, end).

    Attributes:
        start: Start date (inclusive), None = unbounded
        end: End date (exclusive), None = unbounded

    Examples:
        # Last month, seen on 2026-10-19
        {"start": "2026-09-01", "end": "2026-10-01"}

        # Last 7 days
        {"start": "2026-10-12", "end": null}
    """
    model_config = ConfigDict(extra="forbid")

    start: Optional[date_type] = Field(None, description="Start date (inclusive)")
    end: Optional[date_type] = Field(None, description="End date (exclusive)")

    @model_validator(mode='after')
    def validate_end_after_start(self) -> 'DateRangeModel':
        """Ensure end > start when both are provided."""
        if self.start is not None and self.end is not None and self.end <= self.start:
            raise ValueError(f"end date ({self.end}) must be after start date ({self.start})")
        return self

    @classmethod
    def from_period(cls, period: Period, now: Optional[datetime] = None) -> 'DateRangeModel':
        start, end = period_range(period, now)
        return cls(start=start, end=end)

    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None


class EntryFilters(BaseModel):
    """Filters accepted by the expense/income listings and the dashboard series."""
    model_config = ConfigDict(extra="forbid")

    account_id: Optional[int] = Field(None, gt=0, description="Exact account match")
    period: Period = Field(Period.ALL, description="Named relative date range")

    def date_range(self, now: Optional[datetime] = None) -> DateRangeModel:
        return DateRangeModel.from_period(self.period, now)


# =============================================================================
# ERRORS
# =============================================================================

class FieldErrorsResponse(BaseModel):
    """
    Validation failure payload.

    Examples:
        {
            "form_errors": [],
            "field_errors": {"title": ["Title is required"], "amount": ["Amount should be greater than 0"]}
        }
    """
    form_errors: List[str] = Field(default_factory=list, description="Errors not tied to a field")
    field_errors: Dict[str, List[str]] = Field(default_factory=dict, description="Field name -> messages")


_VALUE_ERROR_PREFIX = "Value error, "


def flatten_validation_errors(errors: Iterable[dict]) -> FieldErrorsResponse:
    """
    Flatten pydantic/FastAPI error dicts into a FieldErrorsResponse.

    The request location prefix ("body", "query") is dropped, so
    ``("body", "title")`` becomes the ``title`` key.
    """
    form_errors: List[str] = []
    field_errors: Dict[str, List[str]] = {}

    for err in errors:
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith(_VALUE_ERROR_PREFIX):
            msg = msg[len(_VALUE_ERROR_PREFIX):]

        loc = [part for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        if not loc:
            form_errors.append(msg)
            continue

        field = str(loc[0])
        field_errors.setdefault(field, []).append(msg)

    return FieldErrorsResponse(form_errors=form_errors, field_errors=field_errors)
