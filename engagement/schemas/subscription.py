"""Subscription and feed schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from engagement.schemas.common import ChannelPublic, PaginatedResponse, VideoSummary


class SubscriptionToggle(BaseModel):
    """Result of toggling a subscription."""

    action: Literal["subscribed", "unsubscribed"]
    is_subscribed: bool


class SubscriberCount(BaseModel):
    """Number of subscribers of a channel."""

    channel_id: UUID
    total_subscribers: int


class FeedEntry(VideoSummary):
    """Newest published video of one subscribed channel."""

    channel_id: UUID
    owner: ChannelPublic


class FeedPage(PaginatedResponse[FeedEntry]):
    """Deduplicated subscription feed page."""

    pass


class SubscribedChannel(ChannelPublic):
    """Channel the user follows, with counters and its latest upload."""

    description: str | None
    subscribers_count: int
    videos_count: int
    latest_video: VideoSummary | None
    subscribed_at: datetime
