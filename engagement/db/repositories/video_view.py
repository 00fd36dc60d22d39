"""Video view repository."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.db.repositories.base import BaseRepository
from engagement.models import VideoView


class VideoViewRepository(BaseRepository[VideoView]):
    """Repository for per-user video view records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, VideoView)

    async def get_by_video_and_user(
        self, video_id: UUID, user_id: UUID
    ) -> VideoView | None:
        """Get the view record for a (video, user) pair."""
        stmt = select(VideoView).where(
            VideoView.video_id == video_id,
            VideoView.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def record_once(
        self,
        *,
        view_id: UUID,
        video_id: UUID,
        user_id: UUID,
        user_agent: str = "",
        ip_address: str = "",
        platform: str = "",
        browser: str = "",
    ) -> bool:
        """Insert the view record unless the pair was already recorded.

        Returns:
            True if this call created the record. Does not commit.
        """
        return await self.insert_or_ignore(
            conflict_columns=("video_id", "user_id"),
            id=view_id,
            video_id=video_id,
            user_id=user_id,
            user_agent=user_agent,
            ip_address=ip_address,
            platform=platform,
            browser=browser,
        )

    async def get_stats(self, video_id: UUID) -> dict:
        """Aggregate view records for a video."""
        stmt = select(
            func.count(VideoView.id),
            func.count(distinct(VideoView.user_id)),
            func.min(VideoView.viewed_at),
            func.max(VideoView.viewed_at),
        ).where(VideoView.video_id == video_id)
        result = await self.session.execute(stmt)
        total_views, unique_viewers, first_view, last_view = result.one()

        return {
            "total_views": total_views or 0,
            "unique_viewers": unique_viewers or 0,
            "first_view": first_view,
            "last_view": last_view,
        }
