"""
Structured logging for Ledgerly (structlog over stdlib logging).

Every event is one JSON line with ``timestamp``, ``level``, ``logger`` and
the keyword arguments of the call. Ledger writes log user_id / account_id /
amount so a balance can be traced back through the file.

Output:
- stdout, always
- logs/ledgerly.log when file logging is enabled; rotated every Monday
  (UTC), rotated files gzip-compressed, one year kept
"""
import gzip
import logging
import logging.handlers
import shutil
import sys
from pathlib import Path
from typing import Any, List, Optional

import structlog
from structlog.types import EventDict

LOG_DIR = Path(__file__).parent.parent.parent / "logs"
LOG_FILE_NAME = "ledgerly.log"
LOG_BACKUP_WEEKS = 52


def uppercase_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """``level`` field as INFO / WARNING / ..., with the ``warn`` alias folded in."""
    event_dict["level"] = ("warning" if method_name == "warn" else method_name).upper()
    return event_dict


def _gzip_namer(default_name: str) -> str:
    return f"{default_name}.gz"


def _gzip_rotator(source: str, dest: str) -> None:
    with open(source, "rb") as plain, gzip.open(dest, "wb") as packed:
        shutil.copyfileobj(plain, packed)
    Path(source).unlink()


def _file_handler(level: int) -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(LOG_DIR / LOG_FILE_NAME),
        when="W0",
        backupCount=LOG_BACKUP_WEEKS,
        encoding="utf-8",
        utc=True,
        )
    handler.namer = _gzip_namer
    handler.rotator = _gzip_rotator
    handler.setLevel(level)
    return handler


def configure_logging(log_level: str = "INFO", enable_file_logging: bool = True) -> None:
    """
    Install handlers and the structlog processor chain.

    Safe to call more than once: previously installed root handlers
    (uvicorn, pytest) are replaced.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setLevel(level)
    handlers: List[logging.Handler] = [stdout]
    if enable_file_logging:
        handlers.append(_file_handler(level))

    logging.basicConfig(format="%(message)s", handlers=handlers, level=level, force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            uppercase_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
            ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        )


def bind_request_user(user_id: Optional[int]) -> None:
    """Attach ``user_id`` to every event logged for the rest of the current request."""
    structlog.contextvars.clear_contextvars()
    if user_id is not None:
        structlog.contextvars.bind_contextvars(user_id=user_id)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
