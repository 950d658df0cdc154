"""Fallback endpoint that repairs a missing user/video link."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.deps import bearer_token, resolve_caller
from app.errors import error_response
from app.observability import get_logger
from app.schemas import ErrorResponse, VerifyVideoLinkFailure, VerifyVideoLinkResponse
from app.services.user_video_link import ensure_user_video_link

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/api/verify-video-link",
    response_model=VerifyVideoLinkResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": VerifyVideoLinkFailure},
    },
    tags=["video-link"],
)
async def verify_video_link(
    request: Request,
    token: Optional[str] = Depends(bearer_token),
    db: Session = Depends(get_db),
):
    """Create the caller's `user_videos` row for a saved analysis if the primary save left it out."""
    try:
        try:
            body = await request.json()
        except ValueError:
            body = None
        video_id = body.get("videoId") if isinstance(body, dict) else None
        if not video_id or not isinstance(video_id, str):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": "video_id_required", "message": "videoId is required"},
            )

        user_id = resolve_caller(db, token)
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"error": "authentication_required", "message": "Authentication required"},
            )

        result = ensure_user_video_link(db, user_id, video_id)
        if result.error and not result.linked:
            logger.error(
                "verify_video_link.failed",
                extra={
                    "event": "verify_video_link.failed",
                    "youtube_id": video_id,
                    "user_id": user_id,
                    "error": result.error,
                },
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=VerifyVideoLinkFailure(error=result.error).model_dump(),
            )

        return VerifyVideoLinkResponse(linked=result.linked, video_id=result.video_id)
    except HTTPException:
        raise
    except Exception:
        logger.exception("verify_video_link.exception", extra={"event": "verify_video_link.exception"})
        return error_response("verify_video_link_failed", message="Failed to verify video link", status_code=500)
