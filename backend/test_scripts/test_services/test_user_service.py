"""
Tests for user registration and credential checks.

Reference: backend/app/services/user_service.py
"""
import pytest
import pytest_asyncio

# Setup test database BEFORE importing app modules
from backend.test_scripts.test_db_config import setup_test_database, create_test_schema

setup_test_database()

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import async_engine
from backend.app.services import user_service
from backend.test_scripts.test_utils import unique_name

PASSWORD = "correct-horse"


@pytest.fixture(scope="module", autouse=True)
def schema():
    create_test_schema()


@pytest_asyncio.fixture
async def session():
    async with AsyncSession(async_engine, expire_on_commit=False) as session:
        yield session


async def register(session, name: str, email: str = None):
    return await user_service.create_user(session, username=name, email=email or f"{name}@example.com", password=PASSWORD)


def stale_first_lookup(real_lookup):
    """Lookup that misses once, as if the other registration had not committed yet."""
    calls = []

    async def lookup(session, value):
        calls.append(value)
        if len(calls) == 1:
            return None
        return await real_lookup(session, value)

    return lookup


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_register_and_authenticate(self, session):
        name = unique_name("user")
        user, error = await register(session, name)

        assert error is None
        assert user.id is not None
        assert (await user_service.authenticate(session, f"{name}@example.com", PASSWORD)).id == user.id
        assert await user_service.authenticate(session, name, "wrong-password") is None

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, session):
        name = unique_name("user")
        await register(session, name)

        user, error = await register(session, name, email=f"other_{name}@example.com")

        assert user is None
        assert error == "Username already taken"

    @pytest.mark.asyncio
    async def test_username_conflict_at_insert_is_reported(self, session, monkeypatch):
        name = unique_name("race")
        await register(session, name)
        monkeypatch.setattr(user_service, "get_user_by_username", stale_first_lookup(user_service.get_user_by_username))

        user, error = await register(session, name, email=f"other_{name}@example.com")

        assert user is None
        assert error == "Username already taken"
        assert await user_service.get_user_by_email(session, f"other_{name}@example.com") is None

    @pytest.mark.asyncio
    async def test_email_conflict_at_insert_is_reported(self, session, monkeypatch):
        name = unique_name("race")
        await register(session, name)
        monkeypatch.setattr(user_service, "get_user_by_email", stale_first_lookup(user_service.get_user_by_email))

        user, error = await register(session, unique_name("race"), email=f"{name}@example.com")

        assert user is None
        assert error == "Email already registered"
