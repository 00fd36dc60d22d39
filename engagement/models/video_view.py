"""Video view model: durable proof that a user counted as a viewer."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from engagement.db.base import Base
from engagement.models.base import TimestampMixin, utcnow


class VideoView(Base, TimestampMixin):
    """One row per (video, user). Never updated once written."""

    __tablename__ = "video_views"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    video_id: Mapped[UUID] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Session descriptor
    user_agent: Mapped[str] = mapped_column(String(500), default="")
    ip_address: Mapped[str] = mapped_column(String(64), default="")
    platform: Mapped[str] = mapped_column(String(100), default="")
    browser: Mapped[str] = mapped_column(String(100), default="")

    __table_args__ = (
        # One counted view per user per video
        Index("ix_video_views_unique", "video_id", "user_id", unique=True),
        Index("ix_video_views_video_viewed_at", "video_id", "viewed_at"),
        Index("ix_video_views_user_viewed_at", "user_id", "viewed_at"),
    )
