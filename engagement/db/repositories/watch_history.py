"""Watch history repository."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from engagement.db.repositories.base import BaseRepository
from engagement.models import User, Video, WatchHistory


class WatchHistoryRepository(BaseRepository[WatchHistory]):
    """Repository for watch history operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, WatchHistory)

    async def get_by_user_and_video(
        self, user_id: UUID, video_id: UUID
    ) -> WatchHistory | None:
        """Get the watch history record for a (user, video) pair."""
        stmt = select(WatchHistory).where(
            WatchHistory.user_id == user_id,
            WatchHistory.video_id == video_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def insert_first_sample(
        self,
        *,
        user_id: UUID,
        video_id: UUID,
        watch_progress: float,
        watch_percentage: float,
        is_completed: bool,
        watched_at: datetime,
        device_info: list[dict],
    ) -> bool:
        """Create the record for a pair's first progress sample.

        Returns:
            False if a record already existed. Does not commit.
        """
        return await self.insert_or_ignore(
            conflict_columns=("user_id", "video_id"),
            user_id=user_id,
            video_id=video_id,
            watch_progress=watch_progress,
            watch_percentage=watch_percentage,
            is_completed=is_completed,
            completed_at=watched_at if is_completed else None,
            last_watched_at=watched_at,
            device_info=device_info,
        )

    async def apply_progress(
        self,
        history_id: UUID,
        *,
        watch_progress: float,
        watch_percentage: float,
        is_completed: bool,
        watched_at: datetime,
        device_info: list[dict] | None = None,
    ) -> None:
        """Fold a progress sample into an existing record.

        Progress and percentage only move forward and completion is never
        cleared; the comparison runs inside the UPDATE so a lower concurrent
        sample cannot overwrite a higher one. Does not commit.
        """
        moves_forward = WatchHistory.watch_progress < watch_progress
        values = {
            "watch_progress": case(
                (moves_forward, watch_progress), else_=WatchHistory.watch_progress
            ),
            "watch_percentage": case(
                (moves_forward, watch_percentage), else_=WatchHistory.watch_percentage
            ),
            "last_watched_at": watched_at,
        }
        if is_completed:
            values["is_completed"] = True
            values["completed_at"] = func.coalesce(WatchHistory.completed_at, watched_at)
        if device_info is not None:
            values["device_info"] = device_info

        stmt = (
            update(WatchHistory)
            .where(WatchHistory.id == history_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def list(
        self,
        *,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        channel_id: UUID | None = None,
        completed_only: bool = False,
    ) -> tuple[list[WatchHistory], int]:
        """List a user's history joined with video and channel, newest first."""
        stmt = (
            select(WatchHistory)
            .join(Video, WatchHistory.video_id == Video.id)
            .join(User, Video.owner_id == User.id)
            .where(WatchHistory.user_id == user_id)
            .options(selectinload(WatchHistory.video).selectinload(Video.owner))
        )

        if date_from:
            stmt = stmt.where(WatchHistory.last_watched_at >= date_from)

        if date_to:
            stmt = stmt.where(WatchHistory.last_watched_at <= date_to)

        if completed_only:
            stmt = stmt.where(WatchHistory.is_completed == True)  # noqa: E712

        if channel_id:
            stmt = stmt.where(Video.owner_id == channel_id)

        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Video.title.ilike(pattern),
                    Video.description.ilike(pattern),
                    User.username.ilike(pattern),
                )
            )

        stmt = stmt.order_by(WatchHistory.last_watched_at.desc())
        return await self.paginate(stmt, page=page, limit=limit)

    async def get_stats(self, user_id: UUID) -> dict:
        """Aggregate a user's watch history."""
        stmt = (
            select(
                func.count(WatchHistory.id),
                func.coalesce(func.sum(WatchHistory.watch_progress), 0.0),
                func.coalesce(
                    func.sum(case((WatchHistory.is_completed == True, 1), else_=0)),  # noqa: E712
                    0,
                ),
                func.coalesce(func.avg(WatchHistory.watch_percentage), 0.0),
                func.min(WatchHistory.created_at),
                func.max(WatchHistory.last_watched_at),
            )
            .join(Video, WatchHistory.video_id == Video.id)
            .where(WatchHistory.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        total, watch_time, completed, avg_percentage, oldest, latest = result.one()

        return {
            "total_videos_watched": total or 0,
            "total_watch_time": float(watch_time or 0),
            "completed_videos": int(completed or 0),
            "average_watch_percentage": float(avg_percentage or 0),
            "oldest_watch": oldest,
            "latest_watch": latest,
        }

    async def clear(self, user_id: UUID) -> int:
        """Delete all of a user's watch history.

        Returns:
            Number of records deleted.
        """
        stmt = delete(WatchHistory).where(WatchHistory.user_id == user_id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    async def remove(self, user_id: UUID, video_id: UUID) -> int:
        """Delete one video from a user's watch history.

        Returns:
            Number of records deleted (0 or 1).
        """
        stmt = delete(WatchHistory).where(
            WatchHistory.user_id == user_id,
            WatchHistory.video_id == video_id,
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount
