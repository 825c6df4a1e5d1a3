from datetime import date
from typing import Literal
from pydantic import BaseModel

TrendMetric = Literal["created_at", "completed_at"]
Timeframe = Literal["1W", "1M", "1Y"]


class TrendBucketRead(BaseModel):
    start: date
    label: str
    count: int


class CompletionSummaryRead(BaseModel):
    total: int
    completed: int
    in_progress: int
    completion_rate: float


class TrendRead(BaseModel):
    metric: TrendMetric
    timeframe: Timeframe
    buckets: list[TrendBucketRead]
    scale: int
    total: int
    summary: CompletionSummaryRead
