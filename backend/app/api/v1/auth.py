"""
Authentication API Endpoints

Registration, login/logout with a session cookie, and the
``get_current_user`` dependency used by every ledger endpoint.
"""
from typing import Literal

from fastapi import APIRouter, HTTPException, Response, Request, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.config import get_settings
from backend.app.db.models import User
from backend.app.db.session import get_session_generator
from backend.app.logging_config import get_logger, bind_request_user
from backend.app.schemas.auth import (
    AuthLoginRequest,
    AuthLoginResponse,
    AuthLogoutResponse,
    AuthMeResponse,
    AuthUserResponse,
    AuthRegisterRequest,
    AuthRegisterResponse,
    )
from backend.app.services import user_service
from backend.app.services.auth_service import sessions

logger = get_logger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])

SESSION_COOKIE_NAME = "session"
SESSION_COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=get_settings().SESSION_EXPIRE_HOURS * 3600,
        httponly=True,
        samesite=SESSION_COOKIE_SAMESITE,
        )


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_session_generator),
    ) -> User:
    """
    Dependency returning the authenticated user.

    Raises:
        HTTPException 401: no cookie, unknown/expired session, or the user is gone or disabled
    """
    user_id = sessions.user_id_for(request.cookies.get(SESSION_COOKIE_NAME))
    if user_id is None:
        bind_request_user(None)
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await user_service.get_user_by_id(session, user_id)
    if user is None or not user.is_active:
        bind_request_user(None)
        raise HTTPException(status_code=401, detail="Not authenticated")

    bind_request_user(user.id)
    return user


@auth_router.post("/register", response_model=AuthRegisterResponse, status_code=201)
async def register(
    payload: AuthRegisterRequest,
    session: AsyncSession = Depends(get_session_generator),
    ) -> AuthRegisterResponse:
    user, error = await user_service.create_user(
        session,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        )
    if user is None:
        raise HTTPException(status_code=400, detail=error)

    return AuthRegisterResponse(user=AuthUserResponse.model_validate(user))


@auth_router.post("/login", response_model=AuthLoginResponse)
async def login(
    payload: AuthLoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session_generator),
    ) -> AuthLoginResponse:
    """
    Authenticate with username (or email) and password.

    Sets the session cookie on success.
    """
    user = await user_service.authenticate(session, payload.username, payload.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    sessions.purge_expired()
    _set_session_cookie(response, sessions.create(user.id))
    logger.info("User logged in", user_id=user.id)

    return AuthLoginResponse(user=AuthUserResponse.model_validate(user))


@auth_router.post("/logout", response_model=AuthLogoutResponse)
async def logout(request: Request, response: Response) -> AuthLogoutResponse:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        sessions.delete(token)

    response.delete_cookie(key=SESSION_COOKIE_NAME, httponly=True, samesite=SESSION_COOKIE_SAMESITE)
    return AuthLogoutResponse()


@auth_router.get("/me", response_model=AuthMeResponse)
async def get_me(current_user: User = Depends(get_current_user)) -> AuthMeResponse:
    return AuthMeResponse(user=AuthUserResponse.model_validate(current_user))
