"""Client-side playback driver.

The player calls ``PlaybackSession.on_time_update`` on every tick. The session
reports a view once per loaded video and decides which ticks are worth a
progress write, so the server sees roughly one report per ten seconds of
playback instead of one per tick.
"""

import logging
import math
from enum import Enum
from uuid import UUID

from engagement.core.exceptions import EngagementAPIError
from engagement.services.engagement_client import EngagementClient

logger = logging.getLogger(__name__)

# Seconds of playback before a view counts
VIEW_THRESHOLD_SECONDS = 3
# Seconds of playback before the first progress write
FIRST_SAMPLE_SECONDS = 5
# Seconds between progress writes
SAMPLE_INTERVAL_SECONDS = 10
# Fraction of the duration treated as finished
NEAR_COMPLETION_RATIO = 0.9


class SampleReason(str, Enum):
    """Why a tick was persisted."""

    FIRST_SAMPLE = "first_sample"
    INTERVAL = "interval"
    NEAR_COMPLETION = "near_completion"


class ProgressSampler:
    """Decides which player ticks become progress writes."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.last_recorded: int | None = None
        self.completion_recorded = False

    def should_record(self, current_time: float, duration: float) -> SampleReason | None:
        """Return why this tick should be persisted, or None to skip it.

        A positive answer moves the last recorded time to floor(current_time).
        """
        current_floor = math.floor(current_time)

        if self.last_recorded is None:
            is_first = current_floor >= FIRST_SAMPLE_SECONDS
            is_interval = False
        else:
            is_first = False
            is_interval = current_floor - self.last_recorded >= SAMPLE_INTERVAL_SECONDS

        # Near completion only forces a write once per video
        is_near_completion = (
            not self.completion_recorded
            and duration > 0
            and current_time >= duration * NEAR_COMPLETION_RATIO
        )

        if is_first:
            reason = SampleReason.FIRST_SAMPLE
        elif is_near_completion:
            reason = SampleReason.NEAR_COMPLETION
        elif is_interval:
            reason = SampleReason.INTERVAL
        else:
            return None

        if is_near_completion:
            self.completion_recorded = True
        self.last_recorded = current_floor
        return reason


class PlaybackSession:
    """Reports engagement for whatever video the player currently shows.

    Reports are best-effort: failures are logged and never reach the player.
    """

    def __init__(
        self,
        client: EngagementClient,
        video_id: UUID | str,
        device_info: dict[str, str] | None = None,
    ):
        self.client = client
        self.device_info = device_info or {}
        self.sampler = ProgressSampler()
        self.load(video_id)

    def load(self, video_id: UUID | str) -> None:
        """Switch to another video, starting its tracking from scratch."""
        self.video_id = video_id
        self.view_recorded = False
        self.sampler.reset()

    async def on_time_update(self, current_time: float, duration: float) -> SampleReason | None:
        """Handle a player tick.

        Returns:
            The reason a progress report was sent, or None if the tick was skipped
        """
        if not self.view_recorded and current_time >= VIEW_THRESHOLD_SECONDS:
            self.view_recorded = True
            await self._report_view()

        reason = self.sampler.should_record(current_time, duration)
        if reason:
            logger.debug(
                f"Recording watch progress for {self.video_id}: "
                f"{self.sampler.last_recorded}s ({reason.value})"
            )
            await self._report_progress(self.sampler.last_recorded)
        return reason

    async def _report_view(self) -> None:
        try:
            await self.client.record_view(
                self.video_id,
                platform=self.device_info.get("platform", ""),
                browser=self.device_info.get("browser", ""),
            )
        except EngagementAPIError as e:
            logger.warning(f"Failed to record view for {self.video_id}: {e.detail}")

    async def _report_progress(self, watch_progress: int) -> None:
        try:
            await self.client.record_progress(
                self.video_id,
                watch_progress,
                device_info=self.device_info or None,
            )
        except EngagementAPIError as e:
            logger.warning(f"Failed to record watch progress for {self.video_id}: {e.detail}")
