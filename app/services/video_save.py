"""Primary save path for video analyses.

`insert_video_analysis_server` inserts the analysis and links it to the user in
one transaction. For freshly signed-up users the profile row can lag behind,
so the call is retried with a linear delay when the failure is the profile
foreign key; anything else fails immediately.
"""
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import PersistenceError, TransientDependencyError, classify_db_error
from app.observability import get_logger

logger = get_logger(__name__)

MAX_RETRIES_EXCEEDED = "Max retries exceeded"

INSERT_VIDEO_ANALYSIS_SQL = text(
    """
SELECT insert_video_analysis_server(
  p_youtube_id => :p_youtube_id,
  p_title => :p_title,
  p_author => :p_author,
  p_duration => :p_duration,
  p_thumbnail_url => :p_thumbnail_url,
  p_transcript => CAST(:p_transcript AS jsonb),
  p_topics => CAST(:p_topics AS jsonb),
  p_summary => CAST(:p_summary AS jsonb),
  p_suggested_questions => CAST(:p_suggested_questions AS jsonb),
  p_model_used => :p_model_used,
  p_user_id => :p_user_id,
  p_language => :p_language,
  p_available_languages => CAST(:p_available_languages AS jsonb)
)
"""
)


@dataclass
class VideoAnalysisParams:
    youtube_id: str
    title: str
    author: Optional[str]
    duration: int
    thumbnail_url: Optional[str]
    transcript: Any
    topics: Any
    summary: Any = None
    suggested_questions: Any = None
    model_used: Optional[str] = None
    user_id: Optional[str] = None
    language: Optional[str] = None
    available_languages: Any = None


@dataclass(frozen=True)
class RetryOptions:
    max_retries: int = 3
    retry_delay_ms: int = 500


@dataclass(frozen=True)
class SaveResult:
    success: bool
    video_id: Optional[str]
    error: Optional[str]
    retried_count: int


def _jsonb(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False, default=str)


def _rpc_args(params: VideoAnalysisParams) -> dict:
    return {
        "p_youtube_id": params.youtube_id,
        "p_title": params.title,
        "p_author": params.author,
        "p_duration": params.duration,
        "p_thumbnail_url": params.thumbnail_url,
        "p_transcript": _jsonb(params.transcript),
        "p_topics": _jsonb(params.topics),
        "p_summary": _jsonb(params.summary),
        "p_suggested_questions": _jsonb(params.suggested_questions),
        "p_model_used": params.model_used,
        "p_user_id": params.user_id,
        "p_language": params.language,
        "p_available_languages": _jsonb(params.available_languages),
    }


def insert_video_analysis(db: Session, params: VideoAnalysisParams) -> str:
    """Run one `insert_video_analysis_server` call and commit. Raises a PersistenceError subclass on DB failure."""
    try:
        video_id = db.execute(INSERT_VIDEO_ANALYSIS_SQL, _rpc_args(params)).scalar_one()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise classify_db_error(exc) from exc
    return str(video_id)


def save_video_analysis_with_retry(
    db: Session,
    params: VideoAnalysisParams,
    options: Optional[RetryOptions] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SaveResult:
    opts = options or RetryOptions()
    max_retries = opts.max_retries
    error_message = MAX_RETRIES_EXCEEDED

    for attempt in range(max_retries):
        try:
            video_id = insert_video_analysis(db, params)
            return SaveResult(success=True, video_id=video_id, error=None, retried_count=attempt)
        except TransientDependencyError as exc:
            if attempt < max_retries - 1:
                delay_ms = opts.retry_delay_ms * (attempt + 1)
                logger.warning(
                    "video_save.retry",
                    extra={
                        "event": "video_save.retry",
                        "youtube_id": params.youtube_id,
                        "attempt": attempt + 1,
                        "max_retries": max_retries,
                        "delay_ms": delay_ms,
                        "error": str(exc),
                    },
                )
                sleep(delay_ms / 1000.0)
                continue
            logger.error(
                "video_save.failed",
                extra={
                    "event": "video_save.failed",
                    "youtube_id": params.youtube_id,
                    "attempt": attempt + 1,
                    "max_retries": max_retries,
                    "retryable": True,
                    "error": str(exc),
                },
            )
        except PersistenceError as exc:
            logger.error(
                "video_save.failed",
                extra={
                    "event": "video_save.failed",
                    "youtube_id": params.youtube_id,
                    "attempt": attempt + 1,
                    "max_retries": max_retries,
                    "retryable": False,
                    "sqlstate": exc.sqlstate,
                    "constraint": exc.constraint,
                    "error": str(exc),
                },
            )
            error_message = str(exc)
            break
        except Exception as exc:
            logger.exception(
                "video_save.unexpected_error",
                extra={
                    "event": "video_save.unexpected_error",
                    "youtube_id": params.youtube_id,
                    "attempt": attempt + 1,
                    "max_retries": max_retries,
                },
            )
            error_message = str(exc) or exc.__class__.__name__
            break

    # retried_count reports max_retries even when a terminal error stopped the loop early.
    return SaveResult(success=False, video_id=None, error=error_message, retried_count=max_retries)
