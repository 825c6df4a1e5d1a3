"""Channel service layer, including the delete policy for referencing ideas."""
from __future__ import annotations

import enum
import logging
import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.core.errors import ChannelInUseError
from creatorflow.models.channel import Channel
from creatorflow.repositories import channel as channel_repo
from creatorflow.repositories import idea as idea_repo

log = logging.getLogger(__name__)

__all__ = [
    "ChannelNotFoundError",
    "ChannelDeletePolicy",
    "create_channel",
    "get_channel_or_404",
    "list_channels",
    "update_channel",
    "delete_channel",
]


class ChannelNotFoundError(Exception):
    pass


class ChannelDeletePolicy(str, enum.Enum):
    ORPHAN = "orphan"
    CASCADE = "cascade"
    REASSIGN = "reassign"
    BLOCK = "block"


async def create_channel(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    name: str,
    color: str = "#52525b",
    icon: str = "Folder",
    id: uuid.UUID | None = None,
) -> Channel:
    return await channel_repo.create(session, user_id=user_id, name=name, color=color, icon=icon, id=id)


async def get_channel_or_404(session: AsyncSession, user_id: uuid.UUID, channel_id: uuid.UUID) -> Channel:
    channel = await channel_repo.get_by_id(session, user_id, channel_id)
    if not channel:
        raise ChannelNotFoundError()
    return channel


async def list_channels(session: AsyncSession, user_id: uuid.UUID) -> list[Channel]:
    return list(await channel_repo.list_all(session, user_id))


async def update_channel(
    session: AsyncSession,
    user_id: uuid.UUID,
    channel_id: uuid.UUID,
    *,
    name: str | None = None,
    color: str | None = None,
    icon: str | None = None,
) -> Channel:
    channel = await get_channel_or_404(session, user_id, channel_id)
    changes = {k: v for k, v in {"name": name, "color": color, "icon": icon}.items() if v is not None}
    return await channel_repo.update(session, channel, **changes)


async def delete_channel(
    session: AsyncSession,
    user_id: uuid.UUID,
    channel_id: uuid.UUID,
    policy: ChannelDeletePolicy = ChannelDeletePolicy.BLOCK,
) -> int:
    """Delete a channel and apply ``policy`` to ideas referencing it.

    Returns the number of ideas that were deleted or reassigned.
    Raises ``ChannelInUseError`` under ``block`` (or ``reassign`` with no
    other channel left) while references exist.
    """
    await get_channel_or_404(session, user_id, channel_id)
    policy = ChannelDeletePolicy(policy)
    references = await idea_repo.count_referencing(session, user_id, channel_id=channel_id)
    affected = 0
    if references:
        if policy is ChannelDeletePolicy.BLOCK:
            raise ChannelInUseError(channel_id, references)
        if policy is ChannelDeletePolicy.CASCADE:
            affected = await idea_repo.delete_by_channel(session, user_id, channel_id)
        elif policy is ChannelDeletePolicy.REASSIGN:
            remaining = [c for c in await channel_repo.list_all(session, user_id) if c.id != channel_id]
            if not remaining:
                raise ChannelInUseError(channel_id, references)
            affected = await idea_repo.reassign_channel(session, user_id, channel_id, remaining[0].id)
    await channel_repo.delete_by_id(session, user_id, channel_id)
    log.info(
        "channel deleted",
        extra={"user_id": user_id, "channel_id": channel_id, "policy": policy.value, "affected_ideas": affected},
    )
    return affected
