"""
Services package.
Business logic on top of the database session.

Service Layer:
- LedgerService: every balance-affecting write (accounts, incomes, expenses)
- AccountService: account listing and balance verification
- ReportService: entry listings, expense editor data, dashboard totals
- tag_service: create-if-absent tag resolution (used inside ledger transactions)
"""
from backend.app.services import tag_service
from backend.app.services.ledger_service import (
    LedgerService,
    AuthError,
    NotFoundError,
    LedgerValidationError,
    LedgerTransactionError,
    )
from backend.app.services.account_service import AccountService
from backend.app.services.report_service import ReportService

__all__ = [
    "LedgerService",
    "AccountService",
    "ReportService",
    "tag_service",
    "AuthError",
    "NotFoundError",
    "LedgerValidationError",
    "LedgerTransactionError",
    ]
