"""Video catalog repository."""

from __future__ import annotations

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from engagement.db.repositories.base import BaseRepository
from engagement.models import Video

# Publish time of a video, falling back to upload time
published_timestamp = func.coalesce(Video.published_at, Video.created_at)


class VideoRepository(BaseRepository[Video]):
    """Repository for video catalog operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Video)

    async def increment_view_count(self, video_id: UUID) -> int | None:
        """Atomically add one to the video's view counter.

        The increment is evaluated by the database, so concurrent calls never
        lose updates. Does not commit.

        Returns:
            The new counter value, or None if the video does not exist.
        """
        stmt = (
            update(Video)
            .where(Video.id == video_id)
            .values(view_count=Video.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

        result = await self.session.execute(
            select(Video.view_count).where(Video.id == video_id)
        )
        return result.scalar_one_or_none()

    async def latest_published_candidates(
        self, owner_ids: Collection[UUID]
    ) -> list[Video]:
        """Get the newest published videos of each owner.

        Returns every published video whose publish timestamp equals the
        newest one of its owner, so an owner can appear more than once when
        two uploads share a timestamp. Callers reduce to one per owner.
        """
        if not owner_ids:
            return []

        latest = (
            select(
                Video.owner_id.label("owner_id"),
                func.max(published_timestamp).label("latest_at"),
            )
            .where(
                Video.owner_id.in_(owner_ids),
                Video.is_published == True,  # noqa: E712
            )
            .group_by(Video.owner_id)
            .subquery()
        )

        stmt = (
            select(Video)
            .join(
                latest,
                and_(
                    Video.owner_id == latest.c.owner_id,
                    published_timestamp == latest.c.latest_at,
                ),
            )
            .where(Video.is_published == True)  # noqa: E712
            .options(selectinload(Video.owner))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_published_by_owners(
        self, owner_ids: Collection[UUID]
    ) -> dict[UUID, int]:
        """Count published videos per owner."""
        if not owner_ids:
            return {}

        stmt = (
            select(Video.owner_id, func.count(Video.id))
            .where(
                Video.owner_id.in_(owner_ids),
                Video.is_published == True,  # noqa: E712
            )
            .group_by(Video.owner_id)
        )
        result = await self.session.execute(stmt)
        return {owner_id: count for owner_id, count in result.all()}
