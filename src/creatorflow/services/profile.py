"""Profile service layer."""
from __future__ import annotations

import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.models.profile import Profile
from creatorflow.repositories import profile as profile_repo
from creatorflow.services.seed import ensure_defaults

__all__ = [
    "ProfileNotFoundError",
    "get_profile_or_404",
    "provision_profile",
    "update_profile",
]


class ProfileNotFoundError(Exception):
    """Raised when no profile exists for the requested identity."""


async def get_profile_or_404(session: AsyncSession, user_id: uuid.UUID) -> Profile:
    profile = await profile_repo.get_by_id(session, user_id)
    if not profile:
        raise ProfileNotFoundError()
    return profile


async def provision_profile(
    session: AsyncSession, user_id: uuid.UUID, *, display_name: str = ""
) -> Profile:
    """Return the profile for ``user_id``, creating it (and seeding defaults) on first use."""
    profile = await profile_repo.get_by_id(session, user_id)
    if not profile:
        profile = await profile_repo.create(session, id=user_id, display_name=display_name)
    await ensure_defaults(session, user_id)
    return profile


async def update_profile(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    display_name: str | None = None,
    avatar_url: str | None = None,
) -> Profile:
    profile = await get_profile_or_404(session, user_id)
    changes: dict = {}
    if display_name is not None:
        changes["display_name"] = display_name
    if avatar_url is not None:
        # empty string removes the avatar
        changes["avatar_url"] = avatar_url or None
    return await profile_repo.update(session, profile, **changes)
