"""
Account API endpoints for Ledgerly.

- GET /accounts: list the caller's accounts (newest first)
- POST /accounts: open an account, optionally with an initial balance
- GET /accounts/{id}/balance-check: cached balance vs recomputed balance
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.v1.auth import get_current_user
from backend.app.db.models import User
from backend.app.db.session import get_session_generator
from backend.app.logging_config import get_logger
from backend.app.schemas.accounts import ACCreateItem, ACReadItem, ACBalanceCheck
from backend.app.services.account_service import AccountService
from backend.app.services.ledger_service import LedgerService

logger = get_logger(__name__)

account_router = APIRouter(prefix="/accounts", tags=["AC (Accounts)"])


@account_router.get("", response_model=List[ACReadItem])
async def list_accounts(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> List[ACReadItem]:
    return await AccountService(session).list_accounts(current_user.id)


@account_router.post("", response_model=ACReadItem, status_code=201)
async def open_account(
    item: ACCreateItem,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> ACReadItem:
    """
    Open an account.

    A positive ``initial_balance`` is booked as an "Initial balance" income.
    """
    user_id = current_user.id
    return await LedgerService(session).open_account(user_id, item)


@account_router.get("/{account_id}/balance-check", response_model=ACBalanceCheck)
async def check_balance(
    account_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_generator),
    ) -> ACBalanceCheck:
    """
    Compare the cached balance with sum(incomes) - sum(expenses).

    Inconsistencies are logged at warning level.
    """
    check = await AccountService(session).verify_balance(current_user.id, account_id)
    if not check.consistent:
        logger.warning(
            "Account balance mismatch",
            account_id=account_id,
            cached=str(check.cached_balance),
            computed=str(check.computed_balance),
            )
    return check
