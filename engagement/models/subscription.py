"""Subscription relation between a subscriber and a channel."""

from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from engagement.db.base import Base
from engagement.models.base import TimestampMixin


class Subscription(Base, TimestampMixin):
    """Existence of the row means the subscription is active."""

    __tablename__ = "subscriptions"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    subscriber_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    channel: Mapped["User"] = relationship(foreign_keys=[channel_id])  # noqa: F821

    __table_args__ = (
        Index("ix_subscriptions_unique", "subscriber_id", "channel_id", unique=True),
        Index("ix_subscriptions_channel", "channel_id"),
    )
