"""Video view schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ViewReport(BaseModel):
    """Client-supplied part of the session descriptor."""

    platform: str = Field("", max_length=100)
    browser: str = Field("", max_length=100)


class ViewRecorded(BaseModel):
    """Response when this report created the view."""

    view_id: UUID
    new_view: bool = True
    total_views: int | None


class ViewAlreadyRecorded(BaseModel):
    """Response when the user's view was already counted."""

    already_viewed: bool = True


class VideoViewCounter(BaseModel):
    """Video identity and denormalized counter."""

    id: UUID
    title: str
    view_count: int


class ViewStats(BaseModel):
    """Aggregates over a video's view records."""

    total_views: int
    unique_viewers: int
    first_view: datetime | None
    last_view: datetime | None


class VideoViewStats(BaseModel):
    """View statistics for a video."""

    video: VideoViewCounter
    stats: ViewStats
