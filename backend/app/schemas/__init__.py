"""
Pydantic schemas for Ledgerly.

Used across API and services to validate data structures and standardize
data exchange between components.

**Organization by Domain**:
- common.py: Shared schemas (DateRangeModel, EntryFilters, FieldErrorsResponse, tag normalization)
- accounts.py: Account schemas (AC prefix)
- entries.py: Expense (EX prefix) and income (IN prefix) schemas
- reports.py: Tag listing and dashboard chart series
- auth.py: Login/registration schemas

**Design Notes**:
- All models use Pydantic v2
- Schemas separated from API layer (no inline definitions)
"""
from backend.app.schemas.accounts import (
    ACCreateItem,
    ACReadItem,
    ACOption,
    ACBalanceCheck,
    )
from backend.app.schemas.common import (
    DateRangeModel,
    EntryFilters,
    FieldErrorsResponse,
    flatten_validation_errors,
    validate_tags_list,
    )
from backend.app.schemas.entries import (
    EntryPayload,
    INCreateItem,
    INReadItem,
    EXCreateItem,
    EXUpdateItem,
    EXTagRef,
    EXReadItem,
    EXEditorData,
    EntryCreateResult,
    EXUpdateResult,
    )
from backend.app.schemas.reports import (
    TGReadItem,
    ChartPoint,
    DashboardSeries,
    DashboardResponse,
    )

__all__ = [
    # Accounts
    "ACCreateItem",
    "ACReadItem",
    "ACOption",
    "ACBalanceCheck",
    # Common
    "DateRangeModel",
    "EntryFilters",
    "FieldErrorsResponse",
    "flatten_validation_errors",
    "validate_tags_list",
    # Entries
    "EntryPayload",
    "INCreateItem",
    "INReadItem",
    "EXCreateItem",
    "EXUpdateItem",
    "EXTagRef",
    "EXReadItem",
    "EXEditorData",
    "EntryCreateResult",
    "EXUpdateResult",
    # Reports
    "TGReadItem",
    "ChartPoint",
    "DashboardSeries",
    "DashboardResponse",
    ]
