"""Unit tests for SubscriptionService and SubscriptionRepository."""

from uuid import uuid4

import pytest

from engagement.core.exceptions import BadRequestError, NotFoundError
from engagement.db.repositories import SubscriptionRepository
from engagement.services import SubscriptionService


class TestSubscriptionRepository:
    """Tests for SubscriptionRepository."""

    @pytest.mark.asyncio
    async def test_subscribe_is_idempotent(self, db_session, viewer, channel):
        """Test that subscribing twice keeps a single relation."""
        repo = SubscriptionRepository(db_session)

        assert await repo.subscribe(viewer.id, channel.id) is True
        assert await repo.subscribe(viewer.id, channel.id) is False

        assert await repo.count_subscribers(channel.id) == 1
        assert await repo.get_channel_ids(viewer.id) == [channel.id]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, db_session, viewer, channel):
        repo = SubscriptionRepository(db_session)
        await repo.subscribe(viewer.id, channel.id)

        assert await repo.unsubscribe(viewer.id, channel.id) == 1
        assert await repo.unsubscribe(viewer.id, channel.id) == 0
        assert await repo.get_relation(viewer.id, channel.id) is None

    @pytest.mark.asyncio
    async def test_count_subscribers_by_channels(
        self, db_session, user_factory, viewer, channel, subscribe
    ):
        other_viewer = await user_factory("other-viewer")
        quiet = await user_factory("quiet")
        await subscribe(viewer, channel, quiet)
        await subscribe(other_viewer, channel)

        counts = await SubscriptionRepository(db_session).count_subscribers_by_channels(
            [channel.id, quiet.id, uuid4()]
        )

        assert counts == {channel.id: 2, quiet.id: 1}


class TestSubscriptionService:
    """Tests for SubscriptionService."""

    @pytest.mark.asyncio
    async def test_toggle(self, db_session, viewer, channel):
        """Test that toggling alternates between subscribed and unsubscribed."""
        service = SubscriptionService(db_session)

        first = await service.toggle(viewer.id, channel.id)
        second = await service.toggle(viewer.id, channel.id)

        assert first == {"action": "subscribed", "is_subscribed": True}
        assert second == {"action": "unsubscribed", "is_subscribed": False}
        assert (await service.subscriber_count(channel.id))["total_subscribers"] == 0

    @pytest.mark.asyncio
    async def test_cannot_subscribe_to_self(self, db_session, viewer):
        with pytest.raises(BadRequestError):
            await SubscriptionService(db_session).toggle(viewer.id, viewer.id)

    @pytest.mark.asyncio
    async def test_unknown_channel(self, db_session, viewer):
        with pytest.raises(NotFoundError):
            await SubscriptionService(db_session).toggle(viewer.id, uuid4())

    @pytest.mark.asyncio
    async def test_subscriber_count(self, db_session, user_factory, channel, subscribe):
        for index in range(3):
            await subscribe(await user_factory(f"fan-{index}"), channel)

        result = await SubscriptionService(db_session).subscriber_count(channel.id)

        assert result == {"channel_id": channel.id, "total_subscribers": 3}

    @pytest.mark.asyncio
    async def test_subscribed_channels(
        self, db_session, viewer, channel, user_factory, video_factory, subscribe
    ):
        """Test channel details with counters and latest upload, newest subscription first."""
        empty = await user_factory("empty-channel")
        await video_factory(channel, minutes=1)
        latest = await video_factory(channel, minutes=2)
        await video_factory(channel, minutes=3, is_published=False)
        await subscribe(viewer, channel, empty)

        channels = await SubscriptionService(db_session).subscribed_channels(viewer.id)

        assert [c["username"] for c in channels] == ["empty-channel", "channel"]
        assert channels[0]["videos_count"] == 0
        assert channels[0]["latest_video"] is None
        assert channels[1]["subscribers_count"] == 1
        assert channels[1]["videos_count"] == 2
        assert channels[1]["latest_video"].id == latest.id

    @pytest.mark.asyncio
    async def test_subscribed_channels_empty(self, db_session, viewer):
        assert await SubscriptionService(db_session).subscribed_channels(viewer.id) == []
