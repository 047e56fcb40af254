"""
Ledgerly settings.

Values come from the environment first, then from ``.env`` at the project
root. Test mode (``--test`` on the server command line or
``LEDGERLY_TEST_MODE=1``) points the app at TEST_DATABASE_URL.
"""
import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

TEST_MODE_ENV = "LEDGERLY_TEST_MODE"
_TRUTHY = ("1", "true", "yes")

_test_mode = os.environ.get(TEST_MODE_ENV, "").lower() in _TRUTHY


def set_test_mode(enabled: bool = True):
    """
    Switch test mode on or off for this process and its children.

    The env var is exported too, so alembic subprocesses see the same database.
    """
    global _test_mode
    _test_mode = enabled
    os.environ[TEST_MODE_ENV] = "1" if enabled else "0"


def is_test_mode() -> bool:
    return _test_mode or os.environ.get(TEST_MODE_ENV, "").lower() in _TRUTHY


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        )

    # Storage (relative sqlite paths resolve from the project root)
    DATABASE_URL: str = "sqlite:///./backend/data/sqlite/ledgerly.db"
    TEST_DATABASE_URL: str = "sqlite:///./backend/data/sqlite/test_ledgerly.db"

    # HTTP
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Ledgerly"
    VERSION: str = "0.1.0"
    PORT: int = 8000
    TEST_PORT: int = 8001
    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging: console always, logs/ledgerly.log when LOG_TO_FILE
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True

    # Login sessions (cookie max-age and server-side expiry)
    SESSION_EXPIRE_HOURS: int = 24


def get_settings() -> Settings:
    """
    Build the settings from the current environment.

    Not cached: test setup changes the environment before the app reads it.
    """
    settings = Settings()
    if is_test_mode():
        settings.DATABASE_URL = settings.TEST_DATABASE_URL
    return settings
