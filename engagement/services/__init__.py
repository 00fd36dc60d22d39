"""Business logic services."""

from engagement.services.engagement_client import EngagementClient
from engagement.services.feed_builder import FeedBuilder
from engagement.services.playback_session import PlaybackSession, ProgressSampler
from engagement.services.progress_tracker import ProgressTracker
from engagement.services.subscription_service import SubscriptionService
from engagement.services.view_recorder import SessionInfo, ViewRecorder

__all__ = [
    "EngagementClient",
    "FeedBuilder",
    "PlaybackSession",
    "ProgressSampler",
    "ProgressTracker",
    "SessionInfo",
    "SubscriptionService",
    "ViewRecorder",
]
