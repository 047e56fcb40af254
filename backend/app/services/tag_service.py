"""
Tag Service

Create-if-absent and name -> id resolution for expense tags.

These functions never commit: LedgerService calls them inside its own
transaction so that new tags, the expense row and the balance update are
committed (or rolled back) together.
"""
from typing import List, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Tag
from backend.app.utils.datetime_utils import utcnow

logger = structlog.get_logger(__name__)


async def list_tags(session: AsyncSession, user_id: int) -> List[Tag]:
    """All tags owned by the user, ordered by name."""
    stmt = select(Tag).where(Tag.user_id == user_id).order_by(Tag.name)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def find_missing_tag_names(session: AsyncSession, user_id: int, names: Sequence[str]) -> List[str]:
    """
    Return the requested names the user does not have yet, in request order.

    Args:
        session: Database session
        user_id: Owner
        names: Normalized tag names (trimmed, non-empty)
    """
    if not names:
        return []

    stmt = select(Tag.name).where(Tag.user_id == user_id, Tag.name.in_(list(names)))
    result = await session.execute(stmt)
    existing = set(result.scalars().all())
    return [name for name in names if name not in existing]


async def create_missing_tags(session: AsyncSession, user_id: int, names: Sequence[str]) -> int:
    """
    Insert tags that do not exist yet, skipping duplicates.

    ON CONFLICT DO NOTHING on (user_id, name) makes this idempotent, also
    against a concurrent request inserting the same name.

    Returns:
        Number of names submitted for insertion
    """
    if not names:
        return 0

    now = utcnow()
    stmt = insert(Tag).values([
        {"user_id": user_id, "name": name, "created_at": now}
        for name in dict.fromkeys(names)
        ])
    stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "name"])
    await session.execute(stmt)

    logger.debug("Tags created", user_id=user_id, tags=list(names))
    return len(names)


async def resolve_tag_ids(session: AsyncSession, user_id: int, names: Sequence[str]) -> List[int]:
    """
    Resolve tag names to ids, creating the missing ones first.

    Algorithm:
    1. names the user does not have yet -> tags_not_found
    2. insert tags_not_found (skip duplicates)
    3. re-read every requested name, scoped to the user

    Returns:
        Tag ids in the order of ``names``
    """
    if not names:
        return []

    tags_not_found = await find_missing_tag_names(session, user_id, names)
    await create_missing_tags(session, user_id, tags_not_found)

    stmt = select(Tag.name, Tag.id).where(Tag.user_id == user_id, Tag.name.in_(list(names)))
    result = await session.execute(stmt)
    id_by_name = {name: tag_id for name, tag_id in result.all()}

    return [id_by_name[name] for name in names]
