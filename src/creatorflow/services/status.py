"""Status (pipeline stage) service layer.

The last stage by order is the terminal one: ideas there carry a
``completed_at`` stamp and ideas anywhere else do not. Any stage write that
moves the terminal stage re-stamps ideas in the same transaction.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.core.errors import StatusInUseError
from creatorflow.models.base import utcnow
from creatorflow.models.status import Status
from creatorflow.repositories import status as status_repo
from creatorflow.repositories import idea as idea_repo
from creatorflow.services.pipeline import terminal_status

log = logging.getLogger(__name__)

__all__ = [
    "StatusNotFoundError",
    "create_status",
    "get_status_or_404",
    "list_statuses",
    "update_status",
    "delete_status",
    "terminal_status_id",
    "sync_completion_stamps",
]


class StatusNotFoundError(Exception):
    pass


async def terminal_status_id(session: AsyncSession, user_id: uuid.UUID) -> uuid.UUID | None:
    terminal = terminal_status(await status_repo.list_all(session, user_id))
    return terminal.id if terminal else None


async def sync_completion_stamps(
    session: AsyncSession,
    user_id: uuid.UUID,
    previous_terminal_id: uuid.UUID | None,
    *,
    now: datetime | None = None,
) -> int:
    """Re-stamp ideas after a stage write; returns the number of ideas touched.

    Ideas left behind in the former terminal stage lose their stamp; ideas
    in the new terminal stage are stamped ``now``.
    """
    current = await terminal_status_id(session, user_id)
    if current == previous_terminal_id:
        return 0
    now = now or utcnow()
    touched = 0
    if previous_terminal_id is not None:
        touched += await idea_repo.set_completed_for_status(session, user_id, previous_terminal_id, None)
    if current is not None:
        touched += await idea_repo.set_completed_for_status(session, user_id, current, now, only_unset=True)
    log.info(
        "terminal stage moved",
        extra={"user_id": str(user_id), "status_id": str(current), "ideas": touched},
    )
    return touched


async def create_status(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    name: str,
    color: str = "#71717a",
    order: int | None = None,
    id: uuid.UUID | None = None,
) -> Status:
    previous_terminal = await terminal_status_id(session, user_id)
    if order is None:
        current = await status_repo.max_order(session, user_id)
        order = 0 if current is None else current + 1
    row = await status_repo.create(session, user_id=user_id, name=name, color=color, order=order, id=id)
    await sync_completion_stamps(session, user_id, previous_terminal)
    return row


async def get_status_or_404(session: AsyncSession, user_id: uuid.UUID, status_id: uuid.UUID) -> Status:
    row = await status_repo.get_by_id(session, user_id, status_id)
    if not row:
        raise StatusNotFoundError()
    return row


async def list_statuses(session: AsyncSession, user_id: uuid.UUID) -> list[Status]:
    return list(await status_repo.list_all(session, user_id))


async def update_status(
    session: AsyncSession,
    user_id: uuid.UUID,
    status_id: uuid.UUID,
    *,
    name: str | None = None,
    color: str | None = None,
    order: int | None = None,
) -> Status:
    row = await get_status_or_404(session, user_id, status_id)
    previous_terminal = await terminal_status_id(session, user_id)
    changes = {k: v for k, v in {"name": name, "color": color, "order": order}.items() if v is not None}
    row = await status_repo.update(session, row, **changes)
    if "order" in changes:
        await sync_completion_stamps(session, user_id, previous_terminal)
    return row


async def delete_status(session: AsyncSession, user_id: uuid.UUID, status_id: uuid.UUID) -> None:
    await get_status_or_404(session, user_id, status_id)
    references = await idea_repo.count_referencing(session, user_id, status_id=status_id)
    if references:
        raise StatusInUseError(status_id, references)
    previous_terminal = await terminal_status_id(session, user_id)
    await status_repo.delete_by_id(session, user_id, status_id)
    await sync_completion_stamps(session, user_id, previous_terminal)
