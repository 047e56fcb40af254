"""
Ledgerly FastAPI application.
Main entry point for the backend API.
"""
import sqlite3
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from backend.app.api.v1.router import router as api_v1_router
from backend.app.config import get_settings, set_test_mode, is_test_mode, PROJECT_ROOT
from backend.app.logging_config import configure_logging, get_logger
from backend.app.schemas.common import FieldErrorsResponse, flatten_validation_errors
from backend.app.services.ledger_service import (
    AuthError,
    NotFoundError,
    LedgerValidationError,
    LedgerTransactionError,
    )

# Must run before anything reads settings
if "--test" in sys.argv:
    set_test_mode(True)
    sys.argv.remove("--test")

settings = get_settings()

configure_logging(settings.LOG_LEVEL, settings.LOG_TO_FILE)
logger = get_logger(__name__)

# Listing each entity kind redirects to when the requested row is hidden
LISTING_PATHS = {
    "Expense": "/expenses",
    "Account": "/accounts",
    }


def _sqlite_path(db_url: str) -> Path | None:
    if not db_url.startswith("sqlite:///"):
        return None
    path = Path(db_url.replace("sqlite:///", ""))
    return path if path.is_absolute() else PROJECT_ROOT / path


def _count_tables(db_path: Path) -> int:
    conn = sqlite3.connect(str(db_path))
    try:
        cursor = conn.execute("SELECT count(*) FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'")
        return cursor.fetchone()[0]
    finally:
        conn.close()


def ensure_database_exists():
    """
    Run Alembic migrations when the database file is missing, empty or has no tables.

    Used on server startup (lifespan). Exits the process if migrations fail.
    """
    db_url = get_settings().DATABASE_URL
    db_path = _sqlite_path(db_url)
    if db_path is None:
        return

    if not db_path.exists() or db_path.stat().st_size == 0:
        logger.warning("Database missing or empty, running migrations", db_path=str(db_path))
    else:
        try:
            table_count = _count_tables(db_path)
        except sqlite3.DatabaseError as e:
            logger.warning("Database unreadable, running migrations", db_path=str(db_path), error=str(e))
            table_count = 0
        if table_count > 0:
            logger.info("Database ready", db_path=str(db_path), tables=table_count)
            return
        logger.warning("Database has no tables, running migrations", db_path=str(db_path))

    db_path.parent.mkdir(parents=True, exist_ok=True)
    alembic_ini = PROJECT_ROOT / "backend" / "alembic.ini"

    result = subprocess.run(
        ["alembic", "-c", str(alembic_ini), "upgrade", "head"],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        )
    if result.returncode != 0:
        logger.error("Database migration failed", stderr=result.stderr)
        sys.exit(1)
    logger.info("Database created and migrated")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    logger.info(
        "Starting Ledgerly",
        version=settings.VERSION,
        database_url=settings.DATABASE_URL.split("///")[-1],
        test_mode=is_test_mode(),
        )
    ensure_database_exists()
    yield
    logger.info("Shutting down Ledgerly")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url=f"{settings.API_V1_PREFIX}/docs",
    redoc_url=f"{settings.API_V1_PREFIX}/redoc",
    lifespan=lifespan,
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    )

app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = flatten_validation_errors(exc.errors())
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(LedgerValidationError)
async def ledger_validation_handler(request: Request, exc: LedgerValidationError) -> JSONResponse:
    body = FieldErrorsResponse(field_errors=exc.field_errors)
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    listing = LISTING_PATHS.get(exc.entity)
    if listing is None:
        return JSONResponse(status_code=404, content={"detail": str(exc)})
    logger.info("Hidden or missing entity, redirecting", entity=exc.entity, entity_id=exc.entity_id)
    return RedirectResponse(url=f"{settings.API_V1_PREFIX}{listing}", status_code=303)


@app.exception_handler(LedgerTransactionError)
async def ledger_transaction_handler(request: Request, exc: LedgerTransactionError) -> JSONResponse:
    # Already logged (with the datastore error) and rolled back by the service
    return JSONResponse(status_code=500, content={"detail": "The operation could not be completed"})


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": f"{settings.API_V1_PREFIX}/docs",
        }


if __name__ == "__main__":
    import uvicorn

    port = settings.TEST_PORT if is_test_mode() else settings.PORT
    uvicorn.run(app, host="0.0.0.0", port=port)
