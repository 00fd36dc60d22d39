"""Counts at most one view per user per video."""

import logging
from dataclasses import dataclass
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.core.exceptions import InternalServerError, NotFoundError, UnauthorizedError
from engagement.core.telemetry import get_tracer
from engagement.db.repositories import VideoRepository, VideoViewRepository

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


@dataclass
class SessionInfo:
    """Descriptor of the playback session that produced a view."""

    user_agent: str = ""
    ip_address: str = ""
    platform: str = ""
    browser: str = ""


@dataclass
class ViewResult:
    """Outcome of a view report."""

    created: bool
    total_views: int | None = None
    view_id: UUID | None = None


class ViewRecorder:
    """Records video views idempotently.

    The first report for a (video, user) pair creates a view record and bumps
    the video's counter in the same transaction. Every later report, including
    one that loses an insert race to a concurrent request, is a no-op.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.videos = VideoRepository(db)
        self.views = VideoViewRepository(db)

    async def record_view(
        self,
        video_id: UUID,
        user_id: UUID | None,
        session_info: SessionInfo | None = None,
    ) -> ViewResult:
        """Record that a user viewed a video.

        Args:
            video_id: UUID of the video
            user_id: UUID of the authenticated viewer
            session_info: Descriptor of the viewer's session

        Returns:
            ViewResult with created=True and the new total for a first view,
            created=False otherwise

        Raises:
            UnauthorizedError: If there is no authenticated viewer
            NotFoundError: If the video doesn't exist
            InternalServerError: If storage fails
        """
        if user_id is None:
            raise UnauthorizedError("Authentication required to record video view")

        session_info = session_info or SessionInfo()

        with tracer.start_as_current_span("views.record") as span:
            span.set_attribute("video.id", str(video_id))

            video = await self.videos.get(video_id)
            if not video:
                raise NotFoundError("Video", str(video_id))

            try:
                existing = await self.views.get_by_video_and_user(video_id, user_id)
                if existing:
                    span.set_attribute("views.created", False)
                    return ViewResult(created=False)

                view_id = uuid4()
                created = await self.views.record_once(
                    view_id=view_id,
                    video_id=video_id,
                    user_id=user_id,
                    user_agent=session_info.user_agent,
                    ip_address=session_info.ip_address,
                    platform=session_info.platform,
                    browser=session_info.browser,
                )
                if not created:
                    # A concurrent request recorded the same pair first
                    logger.debug(f"View for video {video_id} already recorded concurrently")
                    span.set_attribute("views.created", False)
                    return ViewResult(created=False)

                total_views = await self.videos.increment_view_count(video_id)
                await self.db.commit()

            except SQLAlchemyError:
                await self.db.rollback()
                logger.exception(f"Failed to record view for video {video_id}")
                raise InternalServerError("Failed to record video view")

            span.set_attribute("views.created", True)
            logger.info(f"New view recorded for video {video_id}: total={total_views}")
            return ViewResult(created=True, total_views=total_views, view_id=view_id)

    async def get_view_stats(self, video_id: UUID) -> dict:
        """Get a video's counter alongside aggregates of its view records.

        Raises:
            NotFoundError: If the video doesn't exist
        """
        video = await self.videos.get(video_id)
        if not video:
            raise NotFoundError("Video", str(video_id))

        await self.db.refresh(video)
        stats = await self.views.get_stats(video_id)
        return {
            "video": {
                "id": video.id,
                "title": video.title,
                "view_count": video.view_count,
            },
            "stats": stats,
        }
