"""Idea service layer.

Wraps the `Idea` repository with the pipeline rules: default channel/stage
on creation, the completion stamp on stage transitions and the three
deletion tiers (bin, permanent delete, empty bin).
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Mapping
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.models.base import utcnow
from creatorflow.models.idea import Idea
from creatorflow.repositories import idea as idea_repo
from creatorflow.repositories import channel as channel_repo
from creatorflow.repositories import status as status_repo
from creatorflow.services.channel import ChannelNotFoundError
from creatorflow.services.pipeline import completed_at_after_transition, terminal_status
from creatorflow.services.status import StatusNotFoundError, terminal_status_id

__all__ = [
    "IdeaNotFoundError",
    "MissingPipelineError",
    "create_idea",
    "get_idea_or_404",
    "list_ideas",
    "update_idea",
    "soft_delete_idea",
    "restore_idea",
    "permanently_delete_idea",
    "empty_bin",
]

UPDATABLE_FIELDS = {
    "title",
    "description",
    "notes",
    "channel_id",
    "status_id",
    "priority",
    "tags",
    "scheduled_date",
}
# explicit null is ignored for these
_REQUIRED_FIELDS = {"title", "channel_id", "status_id", "priority", "tags"}


class IdeaNotFoundError(Exception):
    pass


class MissingPipelineError(Exception):
    """No channel or no status exists to default a new idea onto."""


async def _check_references(session: AsyncSession, user_id: uuid.UUID, fields: Mapping[str, Any]) -> None:
    """The channel and stage an idea points at must exist and belong to the same user."""
    channel_id = fields.get("channel_id")
    if channel_id is not None and not await channel_repo.get_by_id(session, user_id, channel_id):
        raise ChannelNotFoundError(channel_id)
    status_id = fields.get("status_id")
    if status_id is not None and not await status_repo.get_by_id(session, user_id, status_id):
        raise StatusNotFoundError(status_id)


async def create_idea(
    session: AsyncSession,
    user_id: uuid.UUID,
    data: Mapping[str, Any],
    *,
    now: datetime | None = None,
    id: uuid.UUID | None = None,
) -> Idea:
    now = now or utcnow()
    fields = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
    await _check_references(session, user_id, fields)
    statuses = await status_repo.list_all(session, user_id)
    if fields.get("channel_id") is None:
        channels = await channel_repo.list_all(session, user_id)
        if not channels:
            raise MissingPipelineError("no channel available")
        fields["channel_id"] = channels[0].id
    if fields.get("status_id") is None:
        if not statuses:
            raise MissingPipelineError("no status available")
        fields["status_id"] = statuses[0].id
    terminal = terminal_status(statuses)
    fields["completed_at"] = completed_at_after_transition(
        previous_status_id=None,
        previous_completed_at=None,
        new_status_id=fields["status_id"],
        terminal_status_id=terminal.id if terminal else None,
        now=now,
    )
    return await idea_repo.create(
        session, user_id=user_id, id=id, created_at=now, updated_at=now, **fields
    )


async def get_idea_or_404(session: AsyncSession, user_id: uuid.UUID, idea_id: uuid.UUID) -> Idea:
    idea = await idea_repo.get_by_id(session, user_id, idea_id)
    if not idea:
        raise IdeaNotFoundError()
    return idea


async def list_ideas(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    include_deleted: bool = False,
    only_deleted: bool = False,
    channel_id: uuid.UUID | None = None,
    status_id: uuid.UUID | None = None,
) -> list[Idea]:
    return list(
        await idea_repo.list_all(
            session,
            user_id,
            include_deleted=include_deleted,
            only_deleted=only_deleted,
            channel_id=channel_id,
            status_id=status_id,
        )
    )


async def update_idea(
    session: AsyncSession,
    user_id: uuid.UUID,
    idea_id: uuid.UUID,
    changes: Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> Idea:
    """Apply ``changes`` to the stored idea, maintaining ``completed_at``.

    The transition is judged against the row as currently persisted.
    """
    now = now or utcnow()
    idea = await get_idea_or_404(session, user_id, idea_id)
    fields = {
        k: v
        for k, v in changes.items()
        if k in UPDATABLE_FIELDS and not (v is None and k in _REQUIRED_FIELDS)
    }
    # an orphaned reference may be saved back unchanged
    await _check_references(
        session,
        user_id,
        {k: v for k, v in fields.items() if k in ("channel_id", "status_id") and v != getattr(idea, k)},
    )
    new_status_id = fields.get("status_id", idea.status_id)
    if new_status_id != idea.status_id:
        fields["completed_at"] = completed_at_after_transition(
            previous_status_id=idea.status_id,
            previous_completed_at=idea.completed_at,
            new_status_id=new_status_id,
            terminal_status_id=await terminal_status_id(session, user_id),
            now=now,
        )
    return await idea_repo.update(session, idea, **fields)


async def soft_delete_idea(session: AsyncSession, user_id: uuid.UUID, idea_id: uuid.UUID) -> Idea:
    idea = await get_idea_or_404(session, user_id, idea_id)
    return await idea_repo.set_deleted(session, idea, True)


async def restore_idea(session: AsyncSession, user_id: uuid.UUID, idea_id: uuid.UUID) -> Idea:
    idea = await get_idea_or_404(session, user_id, idea_id)
    return await idea_repo.set_deleted(session, idea, False)


async def permanently_delete_idea(session: AsyncSession, user_id: uuid.UUID, idea_id: uuid.UUID) -> bool:
    """Remove the row. Returns False (not an error) when it was already gone."""
    return await idea_repo.delete_by_id(session, user_id, idea_id) > 0


async def empty_bin(session: AsyncSession, user_id: uuid.UUID) -> int:
    return await idea_repo.delete_where_deleted(session, user_id)
