"""Unit tests for ProgressTracker service."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import delete, func, select

from engagement.core.exceptions import BadRequestError, InternalServerError, NotFoundError
from engagement.models import WatchHistory
from engagement.services import ProgressTracker
from engagement.services.progress_tracker import (
    format_watch_time,
    normalize_device,
    watch_percentage,
)


async def count_history(db_session, user_id) -> int:
    result = await db_session.execute(
        select(func.count(WatchHistory.id)).where(WatchHistory.user_id == user_id)
    )
    return result.scalar()


class TestHelpers:
    """Tests for module-level helpers."""

    def test_watch_percentage(self):
        assert watch_percentage(25, 100) == 25.0
        assert watch_percentage(150, 100) == 100.0

    def test_watch_percentage_unknown_duration(self):
        """Test that a zero or missing duration yields zero."""
        assert watch_percentage(30, 0) == 0.0
        assert watch_percentage(30, None) == 0.0

    def test_normalize_device(self):
        device = normalize_device({"platform": "iOS", "extra": "ignored"})
        assert device == {"user_agent": "", "platform": "iOS", "browser": ""}

    def test_normalize_empty_device(self):
        assert normalize_device(None) is None
        assert normalize_device({"platform": ""}) is None

    def test_format_watch_time(self):
        assert format_watch_time(3 * 3600 + 25 * 60 + 10) == "3h 25m"
        assert format_watch_time(59) == "0h 0m"


class TestRecordProgress:
    """Tests for ProgressTracker.record_progress."""

    @pytest.mark.asyncio
    async def test_first_sample_creates_record(self, db_session, viewer, sample_video):
        """Test that the first report creates the record."""
        tracker = ProgressTracker(db_session)

        record = await tracker.record_progress(sample_video.id, viewer.id, 10)

        assert record.watch_progress == 10
        assert record.watch_percentage == 10.0
        assert record.is_completed is False
        assert record.completed_at is None
        assert record.device_info == []

    @pytest.mark.asyncio
    async def test_playback_reaches_completion(self, db_session, viewer, sample_video):
        """Test a viewer watching a 100 second video through to the end."""
        tracker = ProgressTracker(db_session)

        record = await tracker.record_progress(sample_video.id, viewer.id, 10)
        assert record.is_completed is False

        record = await tracker.record_progress(sample_video.id, viewer.id, 95)
        assert record.watch_percentage == 95.0
        assert record.is_completed is True
        assert record.completed_at is not None

    @pytest.mark.asyncio
    async def test_progress_does_not_move_backwards(
        self, db_session, viewer, sample_video
    ):
        """Test that a lower sample keeps the higher stored progress."""
        tracker = ProgressTracker(db_session)
        await tracker.record_progress(sample_video.id, viewer.id, 60)

        record = await tracker.record_progress(sample_video.id, viewer.id, 20)

        assert record.watch_progress == 60
        assert record.watch_percentage == 60.0

    @pytest.mark.asyncio
    async def test_completion_is_never_cleared(self, db_session, viewer, sample_video):
        """Test that seeking back after completion keeps the video completed."""
        tracker = ProgressTracker(db_session)
        completed = await tracker.record_progress(sample_video.id, viewer.id, 95)
        completed_at = completed.completed_at

        record = await tracker.record_progress(sample_video.id, viewer.id, 5)

        assert record.is_completed is True
        assert record.completed_at == completed_at
        assert record.watch_progress == 95

    @pytest.mark.asyncio
    async def test_repeated_progress_keeps_values(self, db_session, viewer, sample_video):
        """Test that reporting the same position twice only touches last_watched_at."""
        tracker = ProgressTracker(db_session)
        first = await tracker.record_progress(sample_video.id, viewer.id, 40)
        first_values = (first.watch_progress, first.watch_percentage, first.is_completed)

        second = await tracker.record_progress(sample_video.id, viewer.id, 40)

        assert (
            second.watch_progress,
            second.watch_percentage,
            second.is_completed,
        ) == first_values

        assert await count_history(db_session, viewer.id) == 1

    @pytest.mark.asyncio
    async def test_devices_are_deduplicated(
        self, db_session, viewer, sample_video, device_info
    ):
        """Test that each distinct device is stored once."""
        tracker = ProgressTracker(db_session)
        phone = {"user_agent": "Mobile Safari", "platform": "iOS", "browser": "Safari"}

        await tracker.record_progress(sample_video.id, viewer.id, 10, device_info)
        await tracker.record_progress(sample_video.id, viewer.id, 20, device_info)
        record = await tracker.record_progress(sample_video.id, viewer.id, 30, phone)

        assert record.device_info == [device_info, phone]

    @pytest.mark.asyncio
    async def test_unknown_duration_never_completes(
        self, db_session, viewer, channel, video_factory
    ):
        """Test that a video without duration stays at zero percent."""
        video = await video_factory(channel, duration=0.0)
        tracker = ProgressTracker(db_session)

        record = await tracker.record_progress(video.id, viewer.id, 500)

        assert record.watch_progress == 500
        assert record.watch_percentage == 0.0
        assert record.is_completed is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [-1, "abc", None, float("nan"), float("inf"), True])
    async def test_invalid_progress(self, db_session, viewer, sample_video, value):
        """Test that invalid positions are rejected before anything is stored."""
        tracker = ProgressTracker(db_session)

        with pytest.raises(BadRequestError) as exc_info:
            await tracker.record_progress(sample_video.id, viewer.id, value)

        assert exc_info.value.status_code == 400
        assert await count_history(db_session, viewer.id) == 0

    @pytest.mark.asyncio
    async def test_unknown_video(self, db_session, viewer):
        """Test that an unknown video raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await ProgressTracker(db_session).record_progress(uuid4(), viewer.id, 10)

    @pytest.mark.asyncio
    async def test_history_cleared_during_report(self, db_session, viewer, sample_video):
        """Test that a record removed between insert and lookup is inserted again."""
        tracker = ProgressTracker(db_session)
        await tracker.record_progress(sample_video.id, viewer.id, 10)
        lookup = tracker.history.get_by_user_and_video
        calls = []

        async def cleared_before_first_lookup(user_id, video_id):
            calls.append(video_id)
            if len(calls) == 1:
                await db_session.execute(
                    delete(WatchHistory).where(WatchHistory.user_id == user_id)
                )
                return None
            return await lookup(user_id, video_id)

        with patch.object(
            tracker.history,
            "get_by_user_and_video",
            AsyncMock(side_effect=cleared_before_first_lookup),
        ):
            record = await tracker.record_progress(sample_video.id, viewer.id, 40)

        assert len(calls) == 2
        assert record.watch_progress == 40
        assert await count_history(db_session, viewer.id) == 1

    @pytest.mark.asyncio
    async def test_record_never_found(self, db_session, viewer, sample_video):
        """Test that a record that keeps disappearing is a server error, not a crash."""
        tracker = ProgressTracker(db_session)

        with patch.object(
            tracker.history, "get_by_user_and_video", AsyncMock(return_value=None)
        ):
            with pytest.raises(InternalServerError) as exc_info:
                await tracker.record_progress(sample_video.id, viewer.id, 10)

        assert exc_info.value.status_code == 500
        assert await count_history(db_session, viewer.id) == 0


class TestWatchHistory:
    """Tests for listing, statistics and removal."""

    @pytest.fixture
    async def history(self, db_session, viewer, user_factory, video_factory):
        """Three watched videos from two channels, the last one completed."""
        cooking = await user_factory("cooking", full_name="Cooking Channel")
        music = await user_factory("music", full_name="Music Channel")
        pasta = await video_factory(cooking, title="Fresh pasta", minutes=1)
        bread = await video_factory(cooking, title="Sourdough bread", minutes=2)
        song = await video_factory(music, title="Live session", minutes=3)

        tracker = ProgressTracker(db_session)
        await tracker.record_progress(pasta.id, viewer.id, 30)
        await tracker.record_progress(bread.id, viewer.id, 50)
        await tracker.record_progress(song.id, viewer.id, 95)

        # Spread last_watched_at so ordering is deterministic
        start = datetime(2024, 2, 1, 9, 0, 0)
        for offset, video in enumerate([pasta, bread, song]):
            record = await tracker.history.get_by_user_and_video(viewer.id, video.id)
            record.last_watched_at = start + timedelta(hours=offset)
        await db_session.commit()

        return {"cooking": cooking, "music": music, "pasta": pasta, "bread": bread, "song": song}

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session, viewer, history):
        items, total = await ProgressTracker(db_session).list_history(viewer.id)

        assert total == 3
        assert [item.video.title for item in items] == [
            "Live session",
            "Sourdough bread",
            "Fresh pasta",
        ]
        assert items[0].video.owner.username == "music"

    @pytest.mark.asyncio
    async def test_list_pagination(self, db_session, viewer, history):
        items, total = await ProgressTracker(db_session).list_history(
            viewer.id, page=2, limit=2
        )

        assert total == 3
        assert [item.video.title for item in items] == ["Fresh pasta"]

    @pytest.mark.asyncio
    async def test_list_filters(self, db_session, viewer, history):
        tracker = ProgressTracker(db_session)

        items, _ = await tracker.list_history(viewer.id, search="bread")
        assert [item.video.title for item in items] == ["Sourdough bread"]

        items, _ = await tracker.list_history(viewer.id, search="music")
        assert [item.video.title for item in items] == ["Live session"]

        items, _ = await tracker.list_history(viewer.id, channel_id=history["cooking"].id)
        assert {item.video.title for item in items} == {"Fresh pasta", "Sourdough bread"}

        items, _ = await tracker.list_history(viewer.id, completed_only=True)
        assert [item.video.title for item in items] == ["Live session"]

        items, _ = await tracker.list_history(
            viewer.id, date_from=datetime(2024, 2, 1, 9, 30, 0)
        )
        assert len(items) == 2

    @pytest.mark.asyncio
    async def test_list_is_per_user(self, db_session, user_factory, history):
        stranger = await user_factory("stranger")

        items, total = await ProgressTracker(db_session).list_history(stranger.id)

        assert items == []
        assert total == 0

    @pytest.mark.asyncio
    async def test_stats(self, db_session, viewer, history):
        stats = await ProgressTracker(db_session).get_stats(viewer.id)

        assert stats["total_videos_watched"] == 3
        assert stats["total_watch_time"] == 175.0
        assert stats["total_watch_time_formatted"] == "0h 2m"
        assert stats["completed_videos"] == 1
        assert stats["average_watch_percentage"] == pytest.approx(175 / 3)

    @pytest.mark.asyncio
    async def test_stats_empty(self, db_session, viewer):
        stats = await ProgressTracker(db_session).get_stats(viewer.id)

        assert stats["total_videos_watched"] == 0
        assert stats["total_watch_time"] == 0.0
        assert stats["latest_watch"] is None

    @pytest.mark.asyncio
    async def test_remove_video(self, db_session, viewer, history):
        tracker = ProgressTracker(db_session)

        deleted = await tracker.remove_video(viewer.id, history["pasta"].id)

        assert deleted == 1
        assert await count_history(db_session, viewer.id) == 2

    @pytest.mark.asyncio
    async def test_remove_missing_video(self, db_session, viewer, sample_video):
        with pytest.raises(NotFoundError):
            await ProgressTracker(db_session).remove_video(viewer.id, sample_video.id)

    @pytest.mark.asyncio
    async def test_clear_history(self, db_session, viewer, history):
        deleted = await ProgressTracker(db_session).clear_history(viewer.id)

        assert deleted == 3
        assert await count_history(db_session, viewer.id) == 0
