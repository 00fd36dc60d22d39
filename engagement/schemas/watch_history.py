"""Watch history schemas."""

import math
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from engagement.schemas.common import ChannelPublic, PaginatedResponse, VideoSummary


class DeviceInfo(BaseModel):
    """Device descriptor for a playback session."""

    user_agent: str = Field("", max_length=500)
    platform: str = Field("", max_length=100)
    browser: str = Field("", max_length=100)


class ProgressReport(BaseModel):
    """Schema for reporting playback progress."""

    watch_progress: float = Field(
        ..., ge=0, strict=True, description="Playback position in seconds"
    )
    device_info: DeviceInfo | None = None

    @field_validator("watch_progress")
    @classmethod
    def must_be_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("watch_progress must be a finite number")
        return value


class WatchHistoryDetail(BaseModel):
    """Schema for a watch history record."""

    id: UUID
    user_id: UUID
    video_id: UUID
    watch_progress: float
    watch_percentage: float
    is_completed: bool
    completed_at: datetime | None
    last_watched_at: datetime
    device_info: list[DeviceInfo]
    created_at: datetime

    class Config:
        from_attributes = True


class WatchedVideo(VideoSummary):
    """Video projection with its channel."""

    owner: ChannelPublic


class WatchHistoryItem(BaseModel):
    """Watch history record joined with video and channel."""

    id: UUID
    watch_progress: float
    watch_percentage: float
    is_completed: bool
    last_watched_at: datetime
    created_at: datetime
    video: WatchedVideo

    class Config:
        from_attributes = True


class WatchHistoryList(PaginatedResponse[WatchHistoryItem]):
    """Paginated watch history."""

    pass


class WatchHistoryStats(BaseModel):
    """Aggregate statistics over a user's watch history."""

    total_videos_watched: int
    total_watch_time: float
    total_watch_time_formatted: str
    completed_videos: int
    average_watch_percentage: float
    oldest_watch: datetime | None
    latest_watch: datetime | None


class DeletedCount(BaseModel):
    """Result of a delete operation."""

    deleted_count: int
