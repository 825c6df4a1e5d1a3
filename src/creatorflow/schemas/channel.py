import uuid
from datetime import datetime
from pydantic import BaseModel, Field
from .base import ORMBase


class ChannelCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    color: str = "#52525b"
    icon: str = "Folder"


class ChannelRead(ORMBase):
    id: uuid.UUID
    name: str
    color: str
    icon: str
    created_at: datetime | None = None


class ChannelUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    color: str | None = None
    icon: str | None = None
