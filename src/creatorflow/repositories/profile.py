import uuid
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from creatorflow.models.profile import Profile


async def get_by_id(session: AsyncSession, id: uuid.UUID) -> Optional[Profile]:
    res = await session.execute(select(Profile).where(Profile.id == id))
    return res.scalar_one_or_none()


async def create(session: AsyncSession, *, id: uuid.UUID, display_name: str = "", avatar_url: str | None = None) -> Profile:
    profile = Profile(id=id, display_name=display_name, avatar_url=avatar_url)
    session.add(profile)
    await session.flush()
    return profile


async def update(session: AsyncSession, profile: Profile, **changes) -> Profile:
    for key, value in changes.items():
        setattr(profile, key, value)
    await session.flush()
    return profile
