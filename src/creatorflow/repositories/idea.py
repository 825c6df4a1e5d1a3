"""Repository helpers for the Idea model (always scoped to one owner)."""

import uuid
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, update as sa_update, func, or_
from creatorflow.models.idea import Idea
from creatorflow.models.base import utcnow

__all__ = [
    "get_by_id",
    "list_all",
    "count_referencing",
    "create",
    "update",
    "delete_by_id",
    "delete_where_deleted",
    "delete_by_channel",
    "reassign_channel",
    "set_deleted",
    "set_completed_for_status",
    "delete_all",
]


async def get_by_id(session: AsyncSession, user_id: uuid.UUID, idea_id: uuid.UUID) -> Optional[Idea]:
    res = await session.execute(select(Idea).where(Idea.id == idea_id, Idea.user_id == user_id))
    return res.scalar_one_or_none()


async def list_all(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    include_deleted: bool = False,
    only_deleted: bool = False,
    channel_id: uuid.UUID | None = None,
    status_id: uuid.UUID | None = None,
) -> Sequence[Idea]:
    stmt = select(Idea).where(Idea.user_id == user_id)
    if only_deleted:
        stmt = stmt.where(Idea.is_deleted.is_(True))
    elif not include_deleted:
        stmt = stmt.where(Idea.is_deleted.is_(False))
    if channel_id is not None:
        stmt = stmt.where(Idea.channel_id == channel_id)
    if status_id is not None:
        stmt = stmt.where(Idea.status_id == status_id)
    res = await session.execute(stmt.order_by(Idea.created_at.desc(), Idea.id))
    return list(res.scalars().all())


async def count_referencing(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    channel_id: uuid.UUID | None = None,
    status_id: uuid.UUID | None = None,
) -> int:
    conditions = []
    if channel_id is not None:
        conditions.append(Idea.channel_id == channel_id)
    if status_id is not None:
        conditions.append(Idea.status_id == status_id)
    stmt = select(func.count(Idea.id)).where(Idea.user_id == user_id, or_(*conditions))
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def create(session: AsyncSession, *, user_id: uuid.UUID, id: uuid.UUID | None = None, **fields) -> Idea:
    idea = Idea(user_id=user_id, is_deleted=False, **fields, **({"id": id} if id else {}))
    session.add(idea)
    # flush + refresh so timestamps are loaded before serialization
    await session.flush()
    await session.refresh(idea)
    return idea


async def update(session: AsyncSession, idea: Idea, **changes) -> Idea:
    for key, value in changes.items():
        setattr(idea, key, value)
    idea.updated_at = utcnow()
    await session.flush()
    await session.refresh(idea)
    return idea


async def delete_by_id(session: AsyncSession, user_id: uuid.UUID, idea_id: uuid.UUID) -> int:
    res = await session.execute(delete(Idea).where(Idea.id == idea_id, Idea.user_id == user_id))
    return res.rowcount or 0


async def delete_where_deleted(session: AsyncSession, user_id: uuid.UUID) -> int:
    res = await session.execute(
        delete(Idea).where(Idea.user_id == user_id, Idea.is_deleted.is_(True))
    )
    return res.rowcount or 0


async def delete_by_channel(session: AsyncSession, user_id: uuid.UUID, channel_id: uuid.UUID) -> int:
    res = await session.execute(
        delete(Idea).where(Idea.user_id == user_id, Idea.channel_id == channel_id)
    )
    return res.rowcount or 0


async def reassign_channel(
    session: AsyncSession, user_id: uuid.UUID, old_channel_id: uuid.UUID, new_channel_id: uuid.UUID
) -> int:
    res = await session.execute(
        sa_update(Idea)
        .where(Idea.user_id == user_id, Idea.channel_id == old_channel_id)
        .values(channel_id=new_channel_id, updated_at=utcnow())
    )
    return res.rowcount or 0


async def set_deleted(session: AsyncSession, idea: Idea, flag: bool) -> Idea:
    """Toggle the recycle-bin flag; content columns are left as they are."""
    idea.is_deleted = flag
    idea.updated_at = utcnow()
    await session.flush()
    await session.refresh(idea)
    return idea


async def set_completed_for_status(
    session: AsyncSession,
    user_id: uuid.UUID,
    status_id: uuid.UUID,
    completed_at,
    *,
    only_unset: bool = False,
) -> int:
    """Stamp (or clear) ``completed_at`` on every idea at ``status_id``, binned ones included."""
    stmt = sa_update(Idea).where(Idea.user_id == user_id, Idea.status_id == status_id)
    if only_unset:
        stmt = stmt.where(Idea.completed_at.is_(None))
    res = await session.execute(
        stmt.values(completed_at=completed_at, updated_at=utcnow()).execution_options(
            synchronize_session="fetch"
        )
    )
    return res.rowcount or 0


async def delete_all(session: AsyncSession, user_id: uuid.UUID) -> int:
    res = await session.execute(delete(Idea).where(Idea.user_id == user_id))
    return res.rowcount or 0
