import uuid
from datetime import datetime
from pydantic import BaseModel, Field
from .base import ORMBase


class ProfileRead(ORMBase):
    id: uuid.UUID
    display_name: str
    avatar_url: str | None = None
    created_at: datetime | None = None


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(default=None, min_length=1, max_length=255)
    avatar_url: str | None = None
