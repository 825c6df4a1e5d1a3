import uuid
from datetime import datetime
from pydantic import BaseModel, Field
from .base import ORMBase


class StatusCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    color: str = "#71717a"
    # appended after the current last stage when omitted
    order: int | None = None


class StatusRead(ORMBase):
    id: uuid.UUID
    name: str
    color: str
    order: int
    created_at: datetime | None = None


class StatusUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    color: str | None = None
    order: int | None = None
