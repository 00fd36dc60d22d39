"""Subscription feed: the newest published video of every followed channel."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from engagement.core.telemetry import get_tracer
from engagement.db.repositories import SubscriptionRepository, VideoRepository
from engagement.models import Video

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


@dataclass
class FeedResult:
    """One page of the feed."""

    items: list[Video]
    total: int
    page: int
    limit: int


def _recency(video: Video) -> tuple:
    return (video.published_timestamp, video.created_at, str(video.id))


def latest_per_channel(videos: Iterable[Video]) -> dict[UUID, Video]:
    """Reduce candidate videos to the single newest one per channel.

    Ties on publish time fall back to upload time, then to video id, so the
    pick is stable across reads.
    """
    latest: dict[UUID, Video] = {}
    for video in videos:
        current = latest.get(video.owner_id)
        if current is None or _recency(video) > _recency(current):
            latest[video.owner_id] = video
    return latest


def order_feed(videos: Iterable[Video]) -> list[Video]:
    """Newest publish time first; equal timestamps ordered by channel id."""
    by_channel = sorted(videos, key=lambda video: str(video.owner_id))
    return sorted(by_channel, key=lambda video: video.published_timestamp, reverse=True)


class FeedBuilder:
    """Builds a user's subscription feed, one entry per followed channel."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.subscriptions = SubscriptionRepository(db)
        self.videos = VideoRepository(db)

    async def build_feed(self, user_id: UUID, page: int = 1, limit: int = 20) -> FeedResult:
        """Build one page of the feed.

        Args:
            user_id: UUID of the subscriber
            page: 1-based page number
            limit: Page size

        Returns:
            FeedResult whose items never repeat a channel
        """
        with tracer.start_as_current_span("feed.build") as span:
            channel_ids = await self.subscriptions.get_channel_ids(user_id)
            span.set_attribute("feed.channels", len(channel_ids))

            if not channel_ids:
                return FeedResult(items=[], total=0, page=page, limit=limit)

            candidates = await self.videos.latest_published_candidates(channel_ids)
            entries = order_feed(latest_per_channel(candidates).values())

            offset = (page - 1) * limit
            items = entries[offset : offset + limit]
            span.set_attribute("feed.entries", len(entries))

        logger.debug(
            f"Feed for user {user_id}: {len(entries)} channels with videos, "
            f"page {page} has {len(items)} entries"
        )
        return FeedResult(items=items, total=len(entries), page=page, limit=limit)
