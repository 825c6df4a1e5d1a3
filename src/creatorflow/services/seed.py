"""Default pipeline and channel set for a fresh account.

Seeding is idempotent per user: each list is only populated when it is
empty, so a user who deletes every channel gets the defaults back on the
next ``ensure_defaults`` call but never gets duplicates.
"""
from __future__ import annotations

import logging
import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.repositories import channel as channel_repo
from creatorflow.repositories import idea as idea_repo
from creatorflow.repositories import status as status_repo

log = logging.getLogger(__name__)

DEFAULT_STATUSES: list[dict] = [
    {"name": "Initial", "color": "#71717a", "order": 0},
    {"name": "Script Write", "color": "#3b82f6", "order": 1},
    {"name": "Record", "color": "#f97316", "order": 2},
    {"name": "Edit", "color": "#a855f7", "order": 3},
    {"name": "Upload", "color": "#22c55e", "order": 4},
]

DEFAULT_CHANNELS: list[dict] = [
    {"name": "Tech Reviews", "color": "#ef4444", "icon": "Cpu"},
    {"name": "Vlog Daily", "color": "#ec4899", "icon": "Camera"},
]


async def ensure_defaults(session: AsyncSession, user_id: uuid.UUID) -> tuple[int, int]:
    """Seed statuses / channels for ``user_id`` where none exist.

    Returns the number of (statuses, channels) created.
    """
    seeded_statuses = 0
    seeded_channels = 0
    if not await status_repo.list_all(session, user_id):
        for fields in DEFAULT_STATUSES:
            await status_repo.create(session, user_id=user_id, **fields)
            seeded_statuses += 1
    if not await channel_repo.list_all(session, user_id):
        for fields in DEFAULT_CHANNELS:
            await channel_repo.create(session, user_id=user_id, **fields)
            seeded_channels += 1
    if seeded_statuses or seeded_channels:
        log.info(
            "seeded defaults",
            extra={"user_id": user_id, "statuses": seeded_statuses, "channels": seeded_channels},
        )
    return seeded_statuses, seeded_channels


async def reset_workspace(session: AsyncSession, user_id: uuid.UUID) -> int:
    """Wipe every idea, channel and stage of ``user_id`` and seed the defaults again.

    The profile is kept. Returns the number of ideas removed.
    """
    ideas = await idea_repo.delete_all(session, user_id)
    await channel_repo.delete_all(session, user_id)
    await status_repo.delete_all(session, user_id)
    log.info("workspace reset", extra={"user_id": user_id, "ideas": ideas})
    await ensure_defaults(session, user_id)
    return ideas
