"""Database module."""

from engagement.db.base import Base
from engagement.db.session import async_session_maker, engine, init_db

__all__ = ["Base", "async_session_maker", "engine", "init_db"]
