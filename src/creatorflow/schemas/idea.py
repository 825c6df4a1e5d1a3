import uuid
from datetime import date, datetime
from typing import Iterable
from pydantic import BaseModel, Field, field_validator
from .base import ORMBase
from creatorflow.models.idea import Priority


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Strip tags, drop empties and repeats (first occurrence wins)."""
    seen: list[str] = []
    for raw in tags or []:
        tag = str(raw).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class IdeaDraft(BaseModel):
    """Form state of the idea editor.

    Nothing is validated on construction so a half-filled form can be held;
    ``is_savable`` decides whether the save control is enabled.
    """
    title: str = ""
    description: str = ""
    notes: str | None = None
    channel_id: uuid.UUID | None = None
    status_id: uuid.UUID | None = None
    priority: Priority = Priority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    scheduled_date: date | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        return normalize_tags(v)

    def problems(self) -> list[str]:
        found = []
        if not self.title.strip():
            found.append("title is required")
        if self.channel_id is None:
            found.append("channel is required")
        if self.status_id is None:
            found.append("status is required")
        return found

    @property
    def is_savable(self) -> bool:
        return not self.problems()

    @classmethod
    def from_idea(cls, idea: "IdeaRead") -> "IdeaDraft":
        return cls(
            title=idea.title,
            description=idea.description,
            notes=idea.notes,
            channel_id=idea.channel_id,
            status_id=idea.status_id,
            priority=idea.priority,
            tags=list(idea.tags),
            scheduled_date=idea.scheduled_date,
        )


class IdeaCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    notes: str | None = None
    # default to the first channel / first stage when omitted
    channel_id: uuid.UUID | None = None
    status_id: uuid.UUID | None = None
    priority: Priority = Priority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    scheduled_date: date | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        return normalize_tags(v)


class IdeaUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    notes: str | None = None
    channel_id: uuid.UUID | None = None
    status_id: uuid.UUID | None = None
    priority: Priority | None = None
    tags: list[str] | None = None
    scheduled_date: date | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        return None if v is None else normalize_tags(v)


class IdeaRead(ORMBase):
    id: uuid.UUID
    title: str
    description: str
    notes: str | None = None
    channel_id: uuid.UUID
    status_id: uuid.UUID
    priority: Priority
    tags: list[str]
    scheduled_date: date | None = None
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None
    is_deleted: bool = False
