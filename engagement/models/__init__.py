"""SQLAlchemy models."""

from engagement.models.subscription import Subscription
from engagement.models.user import User
from engagement.models.video import Video
from engagement.models.video_view import VideoView
from engagement.models.watch_history import WatchHistory

__all__ = [
    "Subscription",
    "User",
    "Video",
    "VideoView",
    "WatchHistory",
]
