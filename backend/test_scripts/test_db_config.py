"""
Test Database Configuration

Points the application at a throwaway SQLite database.

``setup_test_database()`` must run BEFORE importing any app module that reads
settings (db.session builds its engines at import time). Test modules call
it at the top, then import the app.
"""
import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent.parent

TEST_DB_PATH = Path(os.environ.get(
    "LEDGERLY_TEST_DB_PATH",
    str(PROJECT_ROOT / "backend" / "data" / "sqlite" / "test_ledgerly.db"),
    ))
TEST_DATABASE_URL = f"sqlite:///{TEST_DB_PATH}"

_schema_ready = False


def setup_test_database() -> Path:
    """
    Configure the environment for the test database and start from an empty file.

    Idempotent within a process: the file is removed only on the first call.

    Returns:
        Path: Path to test database
    """
    global _schema_ready

    os.environ["LEDGERLY_TEST_MODE"] = "1"
    os.environ["TEST_DATABASE_URL"] = TEST_DATABASE_URL
    os.environ["DATABASE_URL"] = TEST_DATABASE_URL
    os.environ["LOG_TO_FILE"] = "false"

    if not _schema_ready:
        TEST_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        if TEST_DB_PATH.exists():
            TEST_DB_PATH.unlink()

    return TEST_DB_PATH


def create_test_schema() -> None:
    """Create every table on the test database (once per process)."""
    global _schema_ready
    if _schema_ready:
        return

    from backend.app.db.base import SQLModel
    from backend.app.db.session import get_sync_engine

    verify_test_database()
    engine = get_sync_engine()
    SQLModel.metadata.create_all(engine)
    engine.dispose()
    _schema_ready = True


def verify_test_database() -> str:
    """
    Refuse to touch anything but the test database.

    Raises:
        RuntimeError: settings resolve to another database
    """
    from backend.app.config import get_settings

    db_url = get_settings().DATABASE_URL
    if db_url != TEST_DATABASE_URL:
        raise RuntimeError(f"Not using the test database: {db_url}")
    return db_url
