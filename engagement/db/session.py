"""Async engine and session factory."""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from engagement.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Objects stay readable after commit; services refresh what Core UPDATEs touch
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Register the models and check that the database answers.

    The schema itself is managed by the Alembic migrations.
    """
    from engagement.models import (  # noqa: F401
        Subscription,
        User,
        Video,
        VideoView,
        WatchHistory,
    )

    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info(f"Database reachable at {engine.url.render_as_string(hide_password=True)}")
