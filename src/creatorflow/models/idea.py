import uuid
import enum
from datetime import date, datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Date, DateTime, Boolean, Enum, JSON, ForeignKey
from creatorflow.db.session import Base
from creatorflow.models.base import utcnow


class Priority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Idea(Base):
    """Video idea moving through the production pipeline."""

    __tablename__ = "ideas"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), default="", index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Not foreign keys: what happens to references on channel deletion is
    # decided by the configured ChannelDeletePolicy.
    channel_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    status_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority, values_callable=lambda e: [m.value for m in e], name="priority"),
        default=Priority.MEDIUM,
    )
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    # bumped by the repository on every write
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)