"""Primary save path for finished analyses."""
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.deps import bearer_token, resolve_caller
from app.schemas import SaveAnalysisRequest, SaveAnalysisResponse
from app.services.video_save import RetryOptions, VideoAnalysisParams, save_video_analysis_with_retry
from app.settings import get_settings

router = APIRouter()
settings = get_settings()


# Sync handler: retries sleep, so it runs in the threadpool instead of on the event loop.
@router.post(
    "/api/save-analysis",
    response_model=SaveAnalysisResponse,
    responses={502: {"model": SaveAnalysisResponse}},
    tags=["video-analysis"],
)
def save_analysis(
    payload: SaveAnalysisRequest,
    token: Optional[str] = Depends(bearer_token),
    db: Session = Depends(get_db),
):
    user_id = resolve_caller(db, token)
    params = VideoAnalysisParams(
        youtube_id=payload.youtube_id,
        title=payload.title,
        author=payload.author,
        duration=payload.duration,
        thumbnail_url=payload.thumbnail_url,
        transcript=payload.transcript,
        topics=payload.topics,
        summary=payload.summary,
        suggested_questions=payload.suggested_questions,
        model_used=payload.model_used,
        user_id=user_id,
        language=payload.language,
        available_languages=payload.available_languages,
    )
    options = RetryOptions(max_retries=settings.save_max_retries, retry_delay_ms=settings.save_retry_delay_ms)
    result = save_video_analysis_with_retry(db, params, options)

    body = SaveAnalysisResponse(
        success=result.success,
        video_id=result.video_id,
        error=result.error,
        retried_count=result.retried_count,
    )
    if not result.success:
        # Client falls back to /api/verify-video-link once the profile exists.
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=body.model_dump(by_alias=True))
    return body
