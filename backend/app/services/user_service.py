"""
User Service

User lookup, registration and credential checks for the auth API.
"""
from typing import Optional, Tuple

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_

from backend.app.db.models import User
from backend.app.services.auth_service import hash_password, verify_password

logger = structlog.get_logger(__name__)


async def _first(session: AsyncSession, stmt) -> Optional[User]:
    result = await session.execute(stmt)
    return result.scalars().first()


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[User]:
    return await _first(session, select(User).where(User.id == user_id))


async def get_user_by_username(session: AsyncSession, username: str) -> Optional[User]:
    return await _first(session, select(User).where(User.username == username))


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    return await _first(session, select(User).where(User.email == email))


async def get_user_by_username_or_email(session: AsyncSession, identifier: str) -> Optional[User]:
    """Login accepts either the username or the email address."""
    return await _first(session, select(User).where(or_(User.username == identifier, User.email == identifier)))


async def authenticate(session: AsyncSession, identifier: str, password: str) -> Optional[User]:
    """
    Return the active user matching the credentials, or None.

    Unknown user, wrong password and inactive account all return None so
    the caller can answer with a single generic message.
    """
    user = await get_user_by_username_or_email(session, identifier)
    if user is None or not verify_password(password, user.hashed_password):
        logger.info("Login rejected", identifier=identifier)
        return None
    if not user.is_active:
        logger.info("Login rejected: inactive user", user_id=user.id)
        return None
    return user


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    password: str,
    is_superuser: bool = False,
) -> Tuple[Optional[User], Optional[str]]:
    """
    Register a new user.

    Returns:
        (User, None) on success or (None, error_message) when the username
        or email is already taken
    """
    if await get_user_by_username(session, username):
        return None, "Username already taken"
    if await get_user_by_email(session, email):
        return None, "Email already registered"

    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        is_superuser=is_superuser,
        )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration on the unique indexes
        await session.rollback()
        logger.info("Registration conflict", username=username)
        if await get_user_by_email(session, email) and not await get_user_by_username(session, username):
            return None, "Email already registered"
        return None, "Username already taken"
    await session.refresh(user)

    logger.info("User created", user_id=user.id, username=user.username)
    return user, None
