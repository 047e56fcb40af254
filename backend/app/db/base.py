"""
Metadata root for Ledgerly tables.

Alembic's env.py and the test schema setup import SQLModel from here, so
every table module must be imported below to register on the metadata.
"""
from sqlmodel import SQLModel

from backend.app.db.models import EntryKind, User, Account, Tag, Expense, Income, ExpenseTag

__all__ = ["SQLModel", "EntryKind", "User", "Account", "Tag", "Expense", "Income", "ExpenseTag"]
