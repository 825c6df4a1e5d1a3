"""Pipeline ordering and the completion-stamp rule.

Shared by the HTTP services and the client-side store so that both write
paths keep ``completed_at`` in step with the terminal stage.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Iterable, Protocol, TypeVar, Optional


class _Stage(Protocol):
    id: uuid.UUID
    order: int
    created_at: Optional[datetime]


S = TypeVar("S", bound=_Stage)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _as_aware(ts: Optional[datetime]) -> datetime:
    if ts is None:
        return _EPOCH
    # sqlite hands back naive timestamps; everything is stored as UTC
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def stage_sort_key(stage: _Stage) -> tuple:
    return (stage.order, _as_aware(stage.created_at), str(stage.id))


def sort_statuses(statuses: Iterable[S]) -> list[S]:
    """Order stages by ``order``; ties by creation time, then id."""
    return sorted(statuses, key=stage_sort_key)


def terminal_status(statuses: Iterable[S]) -> Optional[S]:
    """The last stage of the pipeline (highest ``order``), or None if there are none."""
    ordered = sort_statuses(statuses)
    return ordered[-1] if ordered else None


def completed_at_after_transition(
    *,
    previous_status_id: Optional[uuid.UUID],
    previous_completed_at: Optional[datetime],
    new_status_id: uuid.UUID,
    terminal_status_id: Optional[uuid.UUID],
    now: datetime,
) -> Optional[datetime]:
    """Value ``completed_at`` must hold after moving an idea to ``new_status_id``.

    ``previous_*`` describe the persisted row, never the edited draft; for a
    brand new idea pass ``previous_status_id=None``.
    """
    if previous_status_id == new_status_id:
        return previous_completed_at
    if terminal_status_id is not None and new_status_id == terminal_status_id:
        return now
    if terminal_status_id is not None and previous_status_id == terminal_status_id:
        return None
    return previous_completed_at
