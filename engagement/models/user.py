"""User model. A channel is a user that owns videos."""

from uuid import UUID, uuid4

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from engagement.db.base import Base
from engagement.models.base import TimestampMixin


class User(Base, TimestampMixin):
    """Represents a viewer and, when it owns videos, a channel."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    avatar: Mapped[str | None] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relationships
    videos: Mapped[list["Video"]] = relationship(  # noqa: F821
        back_populates="owner", cascade="all, delete-orphan"
    )
