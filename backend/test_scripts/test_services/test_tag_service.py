"""
Tests for tag_service: create-if-absent and name -> id resolution.

The functions never commit; each test commits or rolls back itself.
"""
import pytest
import pytest_asyncio

from backend.test_scripts.test_db_config import setup_test_database, create_test_schema

setup_test_database()

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Tag, User
from backend.app.db.session import async_engine
from backend.app.services import tag_service
from backend.test_scripts.test_utils import unique_name


@pytest.fixture(scope="module", autouse=True)
def schema():
    create_test_schema()


@pytest_asyncio.fixture
async def session():
    async with AsyncSession(async_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def user_id(session) -> int:
    name = unique_name("tags")
    user = User(username=name, email=f"{name}@example.com", hashed_password="not-a-hash")
    session.add(user)
    await session.commit()
    return user.id


async def tag_count(session, user_id: int) -> int:
    result = await session.execute(select(func.count()).select_from(Tag).where(Tag.user_id == user_id))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_find_missing_preserves_request_order(session, user_id):
    await tag_service.create_missing_tags(session, user_id, ["Food"])
    await session.commit()

    missing = await tag_service.find_missing_tag_names(session, user_id, ["Travel", "Food", "Bills"])

    assert missing == ["Travel", "Bills"]


@pytest.mark.asyncio
async def test_create_missing_skips_duplicates(session, user_id):
    await tag_service.create_missing_tags(session, user_id, ["Food", "Food"])
    await tag_service.create_missing_tags(session, user_id, ["Food"])
    await session.commit()

    assert await tag_count(session, user_id) == 1


@pytest.mark.asyncio
async def test_resolve_returns_ids_in_request_order(session, user_id):
    first = await tag_service.resolve_tag_ids(session, user_id, ["Rent", "Food"])
    await session.commit()

    second = await tag_service.resolve_tag_ids(session, user_id, ["Food", "Rent", "Fun"])
    await session.commit()

    assert second[:2] == [first[1], first[0]]
    assert len(set(second)) == 3
    assert await tag_count(session, user_id) == 3


@pytest.mark.asyncio
async def test_resolve_empty_list(session, user_id):
    assert await tag_service.resolve_tag_ids(session, user_id, []) == []


@pytest.mark.asyncio
async def test_resolve_is_scoped_to_user(session, user_id):
    other = User(username=unique_name("tags"), email=f"{unique_name('mail')}@example.com", hashed_password="x")
    session.add(other)
    await session.commit()

    mine = await tag_service.resolve_tag_ids(session, user_id, ["Shared"])
    theirs = await tag_service.resolve_tag_ids(session, other.id, ["Shared"])
    await session.commit()

    assert mine != theirs
    assert [t.name for t in await tag_service.list_tags(session, other.id)] == ["Shared"]


@pytest.mark.asyncio
async def test_rollback_discards_created_tags(session, user_id):
    await tag_service.resolve_tag_ids(session, user_id, ["Temporary"])
    await session.rollback()

    assert await tag_count(session, user_id) == 0
