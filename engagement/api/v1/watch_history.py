"""Watch history endpoints."""

from datetime import datetime

from fastapi import APIRouter, Query

from engagement.api.deps import CurrentUser, DbSession, parse_id
from engagement.schemas import (
    DeletedCount,
    ProgressReport,
    WatchHistoryDetail,
    WatchHistoryList,
    WatchHistoryStats,
)
from engagement.services import ProgressTracker

router = APIRouter(prefix="/watch-history", tags=["watch-history"])


@router.post("/{video_id}", response_model=WatchHistoryDetail)
async def record_progress(
    video_id: str,
    data: ProgressReport,
    db: DbSession,
    user: CurrentUser,
):
    """Record playback progress for a video."""
    target_video_id = parse_id(video_id, "video")
    device_info = data.device_info.model_dump() if data.device_info else None

    return await ProgressTracker(db).record_progress(
        target_video_id,
        user.id,
        data.watch_progress,
        device_info=device_info,
    )


@router.get("", response_model=WatchHistoryList)
async def list_watch_history(
    db: DbSession,
    user: CurrentUser,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    channel_id: str | None = Query(None, description="Filter by channel ID"),
    completed_only: bool = False,
):
    """List the user's watch history, most recently watched first."""
    target_channel_id = parse_id(channel_id, "channel") if channel_id else None

    items, total = await ProgressTracker(db).list_history(
        user.id,
        page=page,
        limit=limit,
        search=search,
        date_from=date_from,
        date_to=date_to,
        channel_id=target_channel_id,
        completed_only=completed_only,
    )
    return WatchHistoryList.build(items, total, page, limit)


@router.get("/stats", response_model=WatchHistoryStats)
async def get_watch_history_stats(
    db: DbSession,
    user: CurrentUser,
):
    """Get statistics over the user's watch history."""
    return await ProgressTracker(db).get_stats(user.id)


@router.delete("", response_model=DeletedCount)
async def clear_watch_history(
    db: DbSession,
    user: CurrentUser,
):
    """Clear the user's whole watch history."""
    deleted = await ProgressTracker(db).clear_history(user.id)
    return DeletedCount(deleted_count=deleted)


@router.delete("/{video_id}", response_model=DeletedCount)
async def remove_from_watch_history(
    video_id: str,
    db: DbSession,
    user: CurrentUser,
):
    """Remove a single video from the user's watch history."""
    target_video_id = parse_id(video_id, "video")
    deleted = await ProgressTracker(db).remove_video(user.id, target_video_id)
    return DeletedCount(deleted_count=deleted)
