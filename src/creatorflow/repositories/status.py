"""Repository helpers for the Status model (always scoped to one owner)."""

import uuid
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from creatorflow.models.status import Status

__all__ = ["get_by_id", "list_all", "max_order", "create", "update", "delete_by_id", "delete_all"]


async def get_by_id(session: AsyncSession, user_id: uuid.UUID, status_id: uuid.UUID) -> Optional[Status]:
    res = await session.execute(
        select(Status).where(Status.id == status_id, Status.user_id == user_id)
    )
    return res.scalar_one_or_none()


async def list_all(session: AsyncSession, user_id: uuid.UUID) -> Sequence[Status]:
    # order ties fall back to creation time, then id
    stmt = (
        select(Status)
        .where(Status.user_id == user_id)
        .order_by(Status.order, Status.created_at, Status.id)
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def max_order(session: AsyncSession, user_id: uuid.UUID) -> int | None:
    res = await session.execute(select(func.max(Status.order)).where(Status.user_id == user_id))
    return res.scalar_one_or_none()


async def create(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    name: str,
    color: str,
    order: int,
    id: uuid.UUID | None = None,
) -> Status:
    row = Status(user_id=user_id, name=name, color=color, order=order, **({"id": id} if id else {}))
    session.add(row)
    await session.flush()
    await session.refresh(row)
    return row


async def update(session: AsyncSession, row: Status, **changes) -> Status:
    for key, value in changes.items():
        setattr(row, key, value)
    await session.flush()
    await session.refresh(row)
    return row


async def delete_by_id(session: AsyncSession, user_id: uuid.UUID, status_id: uuid.UUID) -> int:
    res = await session.execute(
        delete(Status).where(Status.id == status_id, Status.user_id == user_id)
    )
    return res.rowcount or 0


async def delete_all(session: AsyncSession, user_id: uuid.UUID) -> int:
    res = await session.execute(delete(Status).where(Status.user_id == user_id))
    return res.rowcount or 0
