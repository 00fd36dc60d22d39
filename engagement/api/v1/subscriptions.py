"""Subscription and feed endpoints."""

from fastapi import APIRouter, Query

from engagement.api.deps import CurrentUser, DbSession, parse_id
from engagement.config import settings
from engagement.schemas import FeedPage, SubscribedChannel, SubscriberCount, SubscriptionToggle
from engagement.services import FeedBuilder, SubscriptionService

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.get("/feed", response_model=FeedPage)
async def get_subscription_feed(
    db: DbSession,
    user: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.FEED_MAX_LIMIT),
):
    """Get the newest video of each subscribed channel, newest first."""
    feed = await FeedBuilder(db).build_feed(user.id, page=page, limit=limit)
    return FeedPage.build(feed.items, feed.total, feed.page, feed.limit)


@router.get("/channels", response_model=list[SubscribedChannel])
async def get_subscribed_channels(
    db: DbSession,
    user: CurrentUser,
):
    """List the channels the user follows."""
    return await SubscriptionService(db).subscribed_channels(user.id)


@router.post("/{channel_id}", response_model=SubscriptionToggle)
async def toggle_subscription(
    channel_id: str,
    db: DbSession,
    user: CurrentUser,
):
    """Subscribe to a channel, or unsubscribe if already subscribed."""
    target_channel_id = parse_id(channel_id, "channel")
    return await SubscriptionService(db).toggle(user.id, target_channel_id)


@router.get("/{channel_id}/subscribers", response_model=SubscriberCount)
async def get_channel_subscribers(
    channel_id: str,
    db: DbSession,
    user: CurrentUser,
):
    """Count a channel's subscribers."""
    target_channel_id = parse_id(channel_id, "channel")
    return await SubscriptionService(db).subscriber_count(target_channel_id)
