"""Common schemas for pagination and shared projections."""

import math
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper."""

    items: list[T]
    total: int = Field(description="Total number of items")
    page: int = Field(description="Current page")
    limit: int = Field(description="Max items returned")
    total_pages: int = 0
    has_next_page: bool = False
    has_prev_page: bool = False

    @classmethod
    def build(cls, items: list, total: int, page: int, limit: int):
        """Fill in the derived page metadata."""
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class ChannelPublic(BaseModel):
    """Public projection of a channel (a user that owns videos)."""

    id: UUID
    username: str
    full_name: str | None
    avatar: str | None

    class Config:
        from_attributes = True


class VideoSummary(BaseModel):
    """Video projection shared by history and feed responses."""

    id: UUID
    title: str
    description: str | None
    thumbnail: str | None
    video_file: str | None
    duration: float
    view_count: int
    published_at: datetime | None
    created_at: datetime

    class Config:
        from_attributes = True
