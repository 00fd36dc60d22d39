"""Video catalog model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from engagement.db.base import Base
from engagement.models.base import TimestampMixin


class Video(Base, TimestampMixin):
    """Represents an uploaded video owned by a channel."""

    __tablename__ = "videos"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    thumbnail: Mapped[str | None] = mapped_column(String(500))
    video_file: Mapped[str | None] = mapped_column(String(500))
    duration: Mapped[float] = mapped_column(Float, default=0.0)  # seconds

    # Denormalized counter, only ever changed by an atomic increment
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="videos")  # noqa: F821

    __table_args__ = (
        Index("ix_videos_owner_published", "owner_id", "is_published"),
    )

    @property
    def published_timestamp(self) -> datetime:
        """When the video went public, falling back to upload time."""
        return self.published_at or self.created_at

    @property
    def channel_id(self) -> UUID:
        return self.owner_id
