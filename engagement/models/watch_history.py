"""Watch history model tracking playback progress per user and video."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from engagement.db.base import Base
from engagement.models.base import TimestampMixin, utcnow


class WatchHistory(Base, TimestampMixin):
    """Mutable playback state for a (user, video) pair."""

    __tablename__ = "watch_history"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    video_id: Mapped[UUID] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )

    watch_progress: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)  # seconds
    watch_percentage: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)  # 0-100
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_watched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Distinct {user_agent, platform, browser} descriptors seen for this pair
    device_info: Mapped[list[dict]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), default=list
    )

    # Relationships
    video: Mapped["Video"] = relationship()  # noqa: F821

    __table_args__ = (
        Index("ix_watch_history_unique", "user_id", "video_id", unique=True),
        Index("ix_watch_history_user_last_watched", "user_id", "last_watched_at"),
        Index("ix_watch_history_user_completed", "user_id", "is_completed"),
    )
