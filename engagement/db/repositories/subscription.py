"""Subscription repository."""

from __future__ import annotations

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from engagement.db.repositories.base import BaseRepository
from engagement.models import Subscription


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for subscriber/channel relations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Subscription)

    async def get_relation(
        self, subscriber_id: UUID, channel_id: UUID
    ) -> Subscription | None:
        """Get the relation for a (subscriber, channel) pair."""
        stmt = select(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def subscribe(self, subscriber_id: UUID, channel_id: UUID) -> bool:
        """Create the relation if missing. Commits.

        Returns:
            True if the relation was created by this call.
        """
        created = await self.insert_or_ignore(
            conflict_columns=("subscriber_id", "channel_id"),
            subscriber_id=subscriber_id,
            channel_id=channel_id,
        )
        await self.session.commit()
        return created

    async def unsubscribe(self, subscriber_id: UUID, channel_id: UUID) -> int:
        """Delete the relation. Commits.

        Returns:
            Number of relations deleted (0 or 1).
        """
        stmt = delete(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    async def get_channel_ids(self, subscriber_id: UUID) -> list[UUID]:
        """Get ids of every channel the user follows."""
        stmt = select(Subscription.channel_id).where(
            Subscription.subscriber_id == subscriber_id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_subscriber(self, subscriber_id: UUID) -> list[Subscription]:
        """Get a user's subscriptions with channels loaded, newest first."""
        stmt = (
            select(Subscription)
            .where(Subscription.subscriber_id == subscriber_id)
            .options(selectinload(Subscription.channel))
            .order_by(Subscription.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_subscribers(self, channel_id: UUID) -> int:
        """Count subscribers of a channel."""
        stmt = select(func.count(Subscription.id)).where(
            Subscription.channel_id == channel_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def count_subscribers_by_channels(
        self, channel_ids: Collection[UUID]
    ) -> dict[UUID, int]:
        """Count subscribers for several channels at once."""
        if not channel_ids:
            return {}

        stmt = (
            select(Subscription.channel_id, func.count(Subscription.id))
            .where(Subscription.channel_id.in_(channel_ids))
            .group_by(Subscription.channel_id)
        )
        result = await self.session.execute(stmt)
        return {channel_id: count for channel_id, count in result.all()}
