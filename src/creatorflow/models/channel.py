import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, ForeignKey
from creatorflow.db.session import Base
from creatorflow.models.base import utcnow


class Channel(Base):
    """Content brand ideas are grouped under."""
    __tablename__ = "channels"
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    color: Mapped[str] = mapped_column(String(32), default="#52525b")
    icon: Mapped[str] = mapped_column(String(64), default="Folder")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
