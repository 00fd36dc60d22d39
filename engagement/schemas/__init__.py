"""Pydantic schemas for request/response models."""

from engagement.schemas.common import (
    ChannelPublic,
    PaginatedResponse,
    VideoSummary,
)
from engagement.schemas.subscription import (
    FeedEntry,
    FeedPage,
    SubscribedChannel,
    SubscriberCount,
    SubscriptionToggle,
)
from engagement.schemas.video_view import (
    VideoViewStats,
    ViewAlreadyRecorded,
    ViewRecorded,
    ViewReport,
)
from engagement.schemas.watch_history import (
    DeletedCount,
    DeviceInfo,
    ProgressReport,
    WatchHistoryDetail,
    WatchHistoryItem,
    WatchHistoryList,
    WatchHistoryStats,
)

__all__ = [
    "ChannelPublic",
    "DeletedCount",
    "DeviceInfo",
    "FeedEntry",
    "FeedPage",
    "PaginatedResponse",
    "ProgressReport",
    "SubscribedChannel",
    "SubscriberCount",
    "SubscriptionToggle",
    "VideoSummary",
    "VideoViewStats",
    "ViewAlreadyRecorded",
    "ViewRecorded",
    "ViewReport",
    "WatchHistoryDetail",
    "WatchHistoryItem",
    "WatchHistoryList",
    "WatchHistoryStats",
]
