"""Repository classes for database operations."""

from engagement.db.repositories.base import BaseRepository
from engagement.db.repositories.subscription import SubscriptionRepository
from engagement.db.repositories.user import UserRepository
from engagement.db.repositories.video import VideoRepository
from engagement.db.repositories.video_view import VideoViewRepository
from engagement.db.repositories.watch_history import WatchHistoryRepository

__all__ = [
    "BaseRepository",
    "SubscriptionRepository",
    "UserRepository",
    "VideoRepository",
    "VideoViewRepository",
    "WatchHistoryRepository",
]
