import uuid
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.api import deps
from creatorflow.models.profile import Profile
from creatorflow.schemas.analytics import (
    CompletionSummaryRead,
    TrendBucketRead,
    TrendRead,
    TrendMetric,
    Timeframe,
)
from creatorflow.schemas.idea import IdeaRead
from creatorflow.services.analytics import TrendSeries, completion_summary
from creatorflow.services.idea import list_ideas
from creatorflow.services.pipeline import terminal_status
from creatorflow.services.status import list_statuses

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/trend", response_model=TrendRead, summary="Activity trend",
            description="Ideas per day (1W, 1M) or per month of the current year (1Y).")
async def trend(
    metric: TrendMetric = Query("created_at"),
    timeframe: Timeframe = Query("1W"),
    channel_id: uuid.UUID | None = Query(None),
    today: date | None = Query(None, description="Anchor date; defaults to today (UTC)"),
    session: AsyncSession = Depends(deps.get_db),
    profile: Profile = Depends(deps.get_current_profile),
):
    ideas = [IdeaRead.model_validate(i) for i in await list_ideas(session, profile.id)]
    series = TrendSeries(ideas, metric=metric, timeframe=timeframe, channel_id=channel_id, today=today)
    terminal = terminal_status(await list_statuses(session, profile.id))
    if channel_id is not None:
        ideas = [i for i in ideas if i.channel_id == channel_id]
    return TrendRead(
        metric=metric,
        timeframe=timeframe,
        buckets=[TrendBucketRead(start=b.start, label=b.label, count=b.count) for b in series],
        scale=series.scale,
        total=series.total,
        summary=CompletionSummaryRead(**completion_summary(ideas, terminal.id if terminal else None)),
    )
