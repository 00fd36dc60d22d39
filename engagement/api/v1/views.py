"""Video view endpoints."""

from fastapi import APIRouter, Request, Response, status

from engagement.api.deps import CurrentUser, DbSession, parse_id
from engagement.schemas import VideoViewStats, ViewAlreadyRecorded, ViewRecorded, ViewReport
from engagement.services import SessionInfo, ViewRecorder

router = APIRouter(prefix="/views", tags=["views"])


@router.post(
    "/{video_id}",
    response_model=ViewRecorded | ViewAlreadyRecorded,
    status_code=status.HTTP_201_CREATED,
)
async def record_view(
    video_id: str,
    request: Request,
    response: Response,
    db: DbSession,
    user: CurrentUser,
    data: ViewReport | None = None,
):
    """Record a view of a video, once per user per video."""
    target_video_id = parse_id(video_id, "video")
    data = data or ViewReport()

    session_info = SessionInfo(
        user_agent=request.headers.get("user-agent", ""),
        ip_address=request.client.host if request.client else "",
        platform=data.platform,
        browser=data.browser,
    )

    result = await ViewRecorder(db).record_view(target_video_id, user.id, session_info)
    if not result.created:
        response.status_code = status.HTTP_200_OK
        return ViewAlreadyRecorded()

    return ViewRecorded(view_id=result.view_id, total_views=result.total_views)


@router.get("/{video_id}/stats", response_model=VideoViewStats)
async def get_view_stats(
    video_id: str,
    db: DbSession,
    user: CurrentUser,
):
    """Get view statistics for a video."""
    target_video_id = parse_id(video_id, "video")
    return await ViewRecorder(db).get_view_stats(target_video_id)
