"""
Engines and per-request sessions for the SQLite database.

- sync engine: Alembic and test schema setup
- async engine (aiosqlite): the FastAPI app; one AsyncSession per request
"""
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.config import get_settings

settings = get_settings()


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """SQLite ships with FK enforcement off; turn it on for every new connection (sync and async)."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _database_url(driver: str = "") -> str:
    """Configured URL, with its parent directory created and an optional driver suffix (``+aiosqlite``)."""
    url = settings.DATABASE_URL
    if url.startswith("sqlite:///"):
        path = Path(url[len("sqlite:///"):])
        if not path.is_absolute():
            path = Path.cwd() / path
        path.parent.mkdir(parents=True, exist_ok=True)
        if driver:
            url = url.replace("sqlite://", f"sqlite+{driver}://", 1)
    return url


def get_sync_engine() -> Engine:
    return create_engine(_database_url(), echo=False, poolclass=NullPool)


def get_async_engine() -> AsyncEngine:
    # NullPool: SQLite connections are cheap and must not be shared across event loops
    return create_async_engine(_database_url("aiosqlite"), echo=False, poolclass=NullPool)


sync_engine = get_sync_engine()
async_engine = get_async_engine()


async def get_session_generator() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one AsyncSession per request.

    Services receive the session explicitly; nothing holds a global handle.
    expire_on_commit=False keeps loaded rows readable after LedgerService commits.
    """
    async with AsyncSession(async_engine, expire_on_commit=False) as session:
        yield session
