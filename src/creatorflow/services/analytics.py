"""Activity trend for the home page graph.

Ideas are bucketed by the day (1W / 1M) or calendar month (1Y) of either
their creation or completion timestamp. ``TrendSeries`` is lazy and can be
iterated any number of times; nothing is stored.
"""
from __future__ import annotations

import calendar
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator, Literal, Optional, Sequence

from creatorflow.schemas.idea import IdeaRead

Metric = Literal["created_at", "completed_at"]
Timeframe = Literal["1W", "1M", "1Y"]

TIMEFRAME_DAYS = {"1W": 7, "1M": 30}
MIN_SCALE = 5


@dataclass(frozen=True)
class TrendBucket:
    start: date
    label: str
    count: int


def _day(ts: datetime) -> date:
    # naive timestamps are UTC (sqlite drops tzinfo)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).date()


def bucket_starts(timeframe: Timeframe, today: date) -> list[date]:
    if timeframe == "1Y":
        return [date(today.year, month, 1) for month in range(1, 13)]
    days = TIMEFRAME_DAYS[timeframe]
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


class TrendSeries:
    def __init__(
        self,
        ideas: Iterable[IdeaRead],
        *,
        metric: Metric = "created_at",
        timeframe: Timeframe = "1W",
        channel_id: Optional[uuid.UUID] = None,
        today: Optional[date] = None,
    ) -> None:
        if metric not in ("created_at", "completed_at"):
            raise ValueError(f"unknown metric {metric!r}")
        if timeframe not in ("1W", "1M", "1Y"):
            raise ValueError(f"unknown timeframe {timeframe!r}")
        self.metric = metric
        self.timeframe = timeframe
        self.channel_id = channel_id
        self.today = today or datetime.now(timezone.utc).date()
        self._ideas: Sequence[IdeaRead] = list(ideas)

    def _days(self) -> Iterator[date]:
        for idea in self._ideas:
            if idea.is_deleted:
                continue
            if self.channel_id is not None and idea.channel_id != self.channel_id:
                continue
            ts = getattr(idea, self.metric)
            if ts is not None:
                yield _day(ts)

    def _matches(self, start: date, day: date) -> bool:
        if self.timeframe == "1Y":
            return day.year == start.year and day.month == start.month
        return day == start

    def _label(self, start: date) -> str:
        if self.timeframe == "1Y":
            return calendar.month_abbr[start.month]
        if self.timeframe == "1W":
            return calendar.day_abbr[start.weekday()]
        return str(start.day)

    def __iter__(self) -> Iterator[TrendBucket]:
        for start in bucket_starts(self.timeframe, self.today):
            count = sum(1 for day in self._days() if self._matches(start, day))
            yield TrendBucket(start=start, label=self._label(start), count=count)

    def __len__(self) -> int:
        return 12 if self.timeframe == "1Y" else TIMEFRAME_DAYS[self.timeframe]

    def counts(self) -> list[int]:
        return [b.count for b in self]

    @property
    def total(self) -> int:
        return sum(self.counts())

    @property
    def scale(self) -> int:
        """Denominator for plotting; never below ``MIN_SCALE``."""
        return max([MIN_SCALE, *self.counts()])

    def points(self, width: float, height: float) -> list[tuple[float, float]]:
        """Polyline vertices, x left to right, y measured down from the top."""
        counts = self.counts()
        scale = max([MIN_SCALE, *counts])
        step = width / (len(counts) - 1) if len(counts) > 1 else 0.0
        return [(round(i * step, 2), round(height - (c / scale) * height, 2)) for i, c in enumerate(counts)]


def completion_summary(ideas: Iterable[IdeaRead], terminal_status_id: Optional[uuid.UUID]) -> dict[str, float]:
    """Headline numbers shown above the graph."""
    active = [i for i in ideas if not i.is_deleted]
    completed = sum(1 for i in active if terminal_status_id is not None and i.status_id == terminal_status_id)
    total = len(active)
    return {
        "total": total,
        "completed": completed,
        "in_progress": total - completed,
        "completion_rate": round(completed / total, 4) if total else 0.0,
    }
