"""
Authentication Service

Password hashing and the cookie session store behind ``get_current_user``.

Sessions live in process memory: a restart logs everybody out.
"""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

import bcrypt
import structlog

from backend.app.config import get_settings
from backend.app.utils.datetime_utils import utcnow

logger = structlog.get_logger(__name__)

BCRYPT_ROUNDS = 12
BCRYPT_MAX_BYTES = 72
SESSION_TOKEN_BYTES = 48


# =============================================================================
# Passwords
# =============================================================================

def hash_password(password: str) -> str:
    """Hash a password with bcrypt (input truncated to bcrypt's 72-byte limit)."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """True when the password matches; a malformed stored hash counts as a mismatch."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES],
            hashed_password.encode("utf-8"),
            )
    except ValueError as e:
        logger.warning("Password verification failed", error=str(e))
        return False


# =============================================================================
# Sessions
# =============================================================================

@dataclass
class LoginSession:
    user_id: int
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at


class SessionStore:
    """In-memory map of session token -> LoginSession."""

    def __init__(self, expire_hours: Optional[int] = None):
        self._expire_hours = expire_hours
        self._sessions: Dict[str, LoginSession] = {}

    @property
    def lifetime(self) -> timedelta:
        hours = self._expire_hours if self._expire_hours is not None else get_settings().SESSION_EXPIRE_HOURS
        return timedelta(hours=hours)

    def create(self, user_id: int) -> str:
        token = secrets.token_urlsafe(SESSION_TOKEN_BYTES)
        now = utcnow()
        self._sessions[token] = LoginSession(user_id=user_id, created_at=now, expires_at=now + self.lifetime)
        logger.info("Session created", user_id=user_id, session=token[:8] + "...")
        return token

    def get(self, token: str) -> Optional[LoginSession]:
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.is_expired():
            self.delete(token)
            return None
        return session

    def user_id_for(self, token: Optional[str]) -> Optional[int]:
        if not token:
            return None
        session = self.get(token)
        return session.user_id if session else None

    def delete(self, token: str) -> bool:
        if self._sessions.pop(token, None) is None:
            return False
        logger.info("Session deleted", session=token[:8] + "...")
        return True

    def purge_expired(self) -> int:
        now = utcnow()
        expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info("Expired sessions purged", count=len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


sessions = SessionStore()
