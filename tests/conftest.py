"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from engagement.db.base import Base
from engagement.models import Subscription, User, Video


# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed reference point so ordering assertions don't depend on the clock
BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
async def async_engine():
    """Create async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for testing."""
    session_maker = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def user_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Create users (viewers or channels) in the database."""

    async def create(username: str | None = None, **kwargs) -> User:
        user = User(
            id=kwargs.pop("id", uuid4()),
            username=username or f"user-{uuid4().hex[:8]}",
            full_name=kwargs.pop("full_name", "Test User"),
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return create


@pytest.fixture
def video_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Create videos owned by a channel.

    ``minutes`` offsets both publish and upload time from BASE_TIME.
    """

    async def create(
        owner: User,
        minutes: int = 0,
        is_published: bool = True,
        **kwargs,
    ) -> Video:
        timestamp = BASE_TIME + timedelta(minutes=minutes)
        video = Video(
            id=kwargs.pop("id", uuid4()),
            owner_id=owner.id,
            title=kwargs.pop("title", f"Video at +{minutes}m"),
            duration=kwargs.pop("duration", 100.0),
            is_published=is_published,
            published_at=kwargs.pop("published_at", timestamp if is_published else None),
            created_at=kwargs.pop("created_at", timestamp),
            **kwargs,
        )
        db_session.add(video)
        await db_session.commit()
        await db_session.refresh(video)
        return video

    return create


@pytest.fixture
def subscribe(db_session: AsyncSession) -> Callable[..., Any]:
    """Subscribe a user to channels directly in the database."""

    async def create(subscriber: User, *channels: User) -> None:
        for index, channel in enumerate(channels):
            db_session.add(
                Subscription(
                    subscriber_id=subscriber.id,
                    channel_id=channel.id,
                    created_at=BASE_TIME + timedelta(minutes=index),
                )
            )
        await db_session.commit()

    return create


@pytest.fixture
async def viewer(user_factory) -> User:
    """The authenticated user in most tests."""
    return await user_factory("viewer", full_name="Viewer")


@pytest.fixture
async def channel(user_factory) -> User:
    """A channel that owns videos."""
    return await user_factory("channel", full_name="Channel")


@pytest.fixture
async def sample_video(video_factory, channel) -> Video:
    """A published 100 second video."""
    return await video_factory(channel, title="Sample video")


@pytest.fixture
def mock_engagement_client():
    """Mock engagement API client for playback session tests."""
    client = MagicMock()
    client.record_view = AsyncMock(
        return_value={"view_id": str(uuid4()), "new_view": True, "total_views": 1}
    )
    client.record_progress = AsyncMock(return_value={"watch_progress": 0})
    client.get_feed = AsyncMock(return_value={"items": [], "total": 0})
    return client


@pytest.fixture
def device_info() -> dict[str, str]:
    """Device descriptor of a desktop browser session."""
    return {
        "user_agent": "Mozilla/5.0 (X11; Linux x86_64)",
        "platform": "Linux",
        "browser": "Firefox",
    }

