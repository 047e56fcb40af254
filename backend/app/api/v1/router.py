"""
API v1 router.
Aggregates all v1 endpoints.
"""
from fastapi import APIRouter

from backend.app.api.v1.accounts import account_router
from backend.app.api.v1.auth import auth_router
from backend.app.api.v1.expenses import expense_router
from backend.app.api.v1.incomes import income_router
from backend.app.api.v1.reports import report_router
from backend.app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()

router.include_router(auth_router)
router.include_router(account_router)
router.include_router(expense_router)
router.include_router(income_router)
router.include_router(report_router)


@router.get("/health")
async def health_check():
    """Service status."""
    logger.debug("Health check requested")
    return {"status": "ok"}
