"""Read-only selectors backing the pages (Home, Channels, Calendar, Settings).

All functions take plain lists as mirrored by the store; binned ideas are
excluded everywhere except ``recycle_bin``.
"""
from __future__ import annotations

import calendar
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from creatorflow.schemas.channel import ChannelRead
from creatorflow.schemas.idea import IdeaRead
from creatorflow.schemas.status import StatusRead
from creatorflow.services.pipeline import sort_statuses

UNKNOWN_CHANNEL = "Unknown Channel"
UNKNOWN_CHANNEL_COLOR = "#52525b"


@dataclass(frozen=True)
class Folder:
    status: StatusRead
    count: int


@dataclass(frozen=True)
class ChannelCard:
    channel: ChannelRead
    count: int


def _active(ideas: Iterable[IdeaRead]) -> list[IdeaRead]:
    return [i for i in ideas if not i.is_deleted]


def status_folders(ideas: Iterable[IdeaRead], statuses: Iterable[StatusRead]) -> list[Folder]:
    active = _active(ideas)
    return [
        Folder(status=s, count=sum(1 for i in active if i.status_id == s.id))
        for s in sort_statuses(statuses)
    ]


def ideas_in_status(ideas: Iterable[IdeaRead], status_id: uuid.UUID) -> list[IdeaRead]:
    return [i for i in _active(ideas) if i.status_id == status_id]


def channel_cards(ideas: Iterable[IdeaRead], channels: Iterable[ChannelRead]) -> list[ChannelCard]:
    active = _active(ideas)
    return [ChannelCard(channel=c, count=sum(1 for i in active if i.channel_id == c.id)) for c in channels]


def ideas_in_channel(
    ideas: Iterable[IdeaRead], channel_id: uuid.UUID, status_id: Optional[uuid.UUID] = None
) -> list[IdeaRead]:
    """Active ideas of a channel, optionally narrowed to one stage (None = all)."""
    return [
        i
        for i in _active(ideas)
        if i.channel_id == channel_id and (status_id is None or i.status_id == status_id)
    ]


def ideas_on_day(ideas: Iterable[IdeaRead], day: date) -> list[IdeaRead]:
    return [i for i in _active(ideas) if i.scheduled_date == day]


def calendar_month(ideas: Iterable[IdeaRead], year: int, month: int) -> dict[date, list[IdeaRead]]:
    """Every day of the month mapped to the ideas scheduled on it."""
    _, last = calendar.monthrange(year, month)
    days = {date(year, month, d): [] for d in range(1, last + 1)}
    for idea in _active(ideas):
        if idea.scheduled_date in days:
            days[idea.scheduled_date].append(idea)
    return days


def recent_activity(ideas: Iterable[IdeaRead], limit: int = 3) -> list[IdeaRead]:
    active = sorted(_active(ideas), key=lambda i: i.created_at, reverse=True)
    return active[:limit]


def recycle_bin(ideas: Iterable[IdeaRead]) -> list[IdeaRead]:
    return [i for i in ideas if i.is_deleted]


def channel_label(channels: Iterable[ChannelRead], channel_id: uuid.UUID) -> tuple[str, str]:
    """(name, color) of a channel, with a fallback for orphaned references."""
    for channel in channels:
        if channel.id == channel_id:
            return channel.name, channel.color
    return UNKNOWN_CHANNEL, UNKNOWN_CHANNEL_COLOR
