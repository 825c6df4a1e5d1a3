"""Repository helpers for the Channel model (always scoped to one owner)."""

import uuid
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from creatorflow.models.channel import Channel

__all__ = ["get_by_id", "list_all", "create", "update", "delete_by_id", "delete_all"]


async def get_by_id(session: AsyncSession, user_id: uuid.UUID, channel_id: uuid.UUID) -> Optional[Channel]:
    res = await session.execute(
        select(Channel).where(Channel.id == channel_id, Channel.user_id == user_id)
    )
    return res.scalar_one_or_none()


async def list_all(session: AsyncSession, user_id: uuid.UUID) -> Sequence[Channel]:
    stmt = select(Channel).where(Channel.user_id == user_id).order_by(Channel.name, Channel.created_at)
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def create(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    name: str,
    color: str,
    icon: str,
    id: uuid.UUID | None = None,
) -> Channel:
    channel = Channel(user_id=user_id, name=name, color=color, icon=icon, **({"id": id} if id else {}))
    session.add(channel)
    await session.flush()
    await session.refresh(channel)
    return channel


async def update(session: AsyncSession, channel: Channel, **changes) -> Channel:
    for key, value in changes.items():
        setattr(channel, key, value)
    await session.flush()
    await session.refresh(channel)
    return channel


async def delete_by_id(session: AsyncSession, user_id: uuid.UUID, channel_id: uuid.UUID) -> int:
    res = await session.execute(
        delete(Channel).where(Channel.id == channel_id, Channel.user_id == user_id)
    )
    return res.rowcount or 0


async def delete_all(session: AsyncSession, user_id: uuid.UUID) -> int:
    res = await session.execute(delete(Channel).where(Channel.user_id == user_id))
    return res.rowcount or 0
