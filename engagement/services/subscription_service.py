"""Subscription management."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from engagement.core.exceptions import BadRequestError, NotFoundError
from engagement.db.repositories import SubscriptionRepository, UserRepository, VideoRepository
from engagement.services.feed_builder import latest_per_channel

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Toggles subscriptions and describes the channels a user follows."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = SubscriptionRepository(db)
        self.users = UserRepository(db)
        self.videos = VideoRepository(db)

    async def toggle(self, subscriber_id: UUID, channel_id: UUID) -> dict:
        """Subscribe if not subscribed yet, unsubscribe otherwise.

        Raises:
            BadRequestError: If a user tries to subscribe to themselves
            NotFoundError: If the channel doesn't exist
        """
        if subscriber_id == channel_id:
            raise BadRequestError("Cannot subscribe to your own channel")

        channel = await self.users.get(channel_id)
        if not channel:
            raise NotFoundError("Channel", str(channel_id))

        if await self.repo.get_relation(subscriber_id, channel_id):
            await self.repo.unsubscribe(subscriber_id, channel_id)
            logger.info(f"User {subscriber_id} unsubscribed from {channel_id}")
            return {"action": "unsubscribed", "is_subscribed": False}

        await self.repo.subscribe(subscriber_id, channel_id)
        logger.info(f"User {subscriber_id} subscribed to {channel_id}")
        return {"action": "subscribed", "is_subscribed": True}

    async def subscriber_count(self, channel_id: UUID) -> dict:
        """Count a channel's subscribers."""
        total = await self.repo.count_subscribers(channel_id)
        return {"channel_id": channel_id, "total_subscribers": total}

    async def subscribed_channels(self, user_id: UUID) -> list[dict]:
        """Describe every channel the user follows, newest subscription first."""
        subscriptions = await self.repo.list_for_subscriber(user_id)
        if not subscriptions:
            return []

        channel_ids = [sub.channel_id for sub in subscriptions]
        subscriber_counts = await self.repo.count_subscribers_by_channels(channel_ids)
        video_counts = await self.videos.count_published_by_owners(channel_ids)
        latest = latest_per_channel(
            await self.videos.latest_published_candidates(channel_ids)
        )

        return [
            {
                "id": sub.channel.id,
                "username": sub.channel.username,
                "full_name": sub.channel.full_name,
                "avatar": sub.channel.avatar,
                "description": sub.channel.description,
                "subscribers_count": subscriber_counts.get(sub.channel_id, 0),
                "videos_count": video_counts.get(sub.channel_id, 0),
                "latest_video": latest.get(sub.channel_id),
                "subscribed_at": sub.created_at,
            }
            for sub in subscriptions
        ]
