"""Watch progress tracking and watch history management."""

import logging
import math
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.config import settings
from engagement.core.exceptions import BadRequestError, InternalServerError, NotFoundError
from engagement.core.telemetry import get_tracer
from engagement.db.repositories import VideoRepository, WatchHistoryRepository
from engagement.models import WatchHistory

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

DEVICE_FIELDS = ("user_agent", "platform", "browser")


def watch_percentage(progress: float, duration: float | None) -> float:
    """Share of the video watched, 0-100. Zero when the duration is unknown."""
    if not duration or duration <= 0:
        return 0.0
    return min(100.0, progress / duration * 100)


def normalize_device(device_info: dict | None) -> dict | None:
    """Keep the known descriptor fields, or None if nothing was sent."""
    if not device_info:
        return None
    device = {field: str(device_info.get(field) or "") for field in DEVICE_FIELDS}
    if not any(device.values()):
        return None
    return device


def format_watch_time(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours}h {minutes}m"


class ProgressTracker:
    """Upserts one watch history record per (user, video).

    Each report is validated and applied independently; sampling of player
    ticks happens in the playback session before reports are sent.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.videos = VideoRepository(db)
        self.history = WatchHistoryRepository(db)

    async def record_progress(
        self,
        video_id: UUID,
        user_id: UUID,
        watch_progress: float,
        device_info: dict | None = None,
    ) -> WatchHistory:
        """Fold a progress report into the user's watch history.

        Args:
            video_id: UUID of the video
            user_id: UUID of the viewer
            watch_progress: Playback position in seconds
            device_info: Descriptor of the reporting device

        Returns:
            The current watch history record

        Raises:
            BadRequestError: If watch_progress is not a number >= 0
            NotFoundError: If the video doesn't exist
            InternalServerError: If storage fails
        """
        if (
            isinstance(watch_progress, bool)
            or not isinstance(watch_progress, (int, float))
            or not math.isfinite(watch_progress)
            or watch_progress < 0
        ):
            raise BadRequestError("Valid watch progress is required")

        video = await self.videos.get(video_id)
        if not video:
            raise NotFoundError("Video", str(video_id))

        progress = float(watch_progress)
        percentage = watch_percentage(progress, video.duration)
        completed = percentage >= settings.WATCH_COMPLETION_THRESHOLD
        device = normalize_device(device_info)
        now = datetime.now(timezone.utc)

        with tracer.start_as_current_span("watch_history.record") as span:
            span.set_attribute("video.id", str(video_id))
            span.set_attribute("watch.progress", progress)

            try:
                # A clear between the insert and the lookup removes the record,
                # so the insert is attempted a second time
                for _ in range(2):
                    created = await self.history.insert_first_sample(
                        user_id=user_id,
                        video_id=video_id,
                        watch_progress=progress,
                        watch_percentage=percentage,
                        is_completed=completed,
                        watched_at=now,
                        device_info=[device] if device else [],
                    )
                    record = await self.history.get_by_user_and_video(user_id, video_id)
                    if record is not None:
                        break
                else:
                    await self.db.rollback()
                    logger.error(f"Watch history record for video {video_id} vanished twice")
                    raise InternalServerError("Failed to record watch history")

                if not created:
                    devices = None
                    known = list(record.device_info or [])
                    if device and device not in known:
                        devices = known + [device]

                    await self.history.apply_progress(
                        record.id,
                        watch_progress=progress,
                        watch_percentage=percentage,
                        is_completed=completed,
                        watched_at=now,
                        device_info=devices,
                    )

                await self.db.commit()
                await self.db.refresh(record)

            except SQLAlchemyError:
                await self.db.rollback()
                logger.exception(f"Failed to record watch progress for video {video_id}")
                raise InternalServerError("Failed to record watch history")

            span.set_attribute("watch_history.created", created)

        logger.debug(
            f"Watch progress for video {video_id}: {record.watch_progress}s "
            f"({record.watch_percentage:.1f}%), completed={record.is_completed}"
        )
        return record

    async def list_history(self, user_id: UUID, **filters) -> tuple[list[WatchHistory], int]:
        """List a user's watch history. See WatchHistoryRepository.list."""
        return await self.history.list(user_id=user_id, **filters)

    async def get_stats(self, user_id: UUID) -> dict:
        """Aggregate statistics over a user's watch history."""
        stats = await self.history.get_stats(user_id)
        stats["total_watch_time_formatted"] = format_watch_time(stats["total_watch_time"])
        return stats

    async def clear_history(self, user_id: UUID) -> int:
        """Delete every watch history record of a user."""
        deleted = await self.history.clear(user_id)
        logger.info(f"Watch history cleared for user {user_id}: {deleted} records")
        return deleted

    async def remove_video(self, user_id: UUID, video_id: UUID) -> int:
        """Delete a single video from a user's watch history.

        Raises:
            NotFoundError: If the video is not in the user's history
        """
        deleted = await self.history.remove(user_id, video_id)
        if not deleted:
            raise NotFoundError("Watch history entry", str(video_id))
        return deleted
