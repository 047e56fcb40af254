"""
Database package: models, metadata and engines.
"""
from backend.app.db.base import SQLModel, EntryKind, User, Account, Tag, Expense, Income, ExpenseTag
from backend.app.db.session import get_sync_engine, get_async_engine, get_session_generator

__all__ = [
    "SQLModel",
    "EntryKind",
    "User",
    "Account",
    "Tag",
    "Expense",
    "Income",
    "ExpenseTag",
    "get_sync_engine",
    "get_async_engine",
    "get_session_generator",
    ]
