"""Fallback link repair between a user and an already saved video analysis."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import VideoNotFoundError, classify_db_error
from app.models import UserVideo, VideoAnalysis
from app.observability import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LinkResult:
    linked: bool
    video_id: Optional[str]
    error: Optional[str]


def _resolve_video_id(db: Session, youtube_id: str) -> str:
    row = db.query(VideoAnalysis.id).filter(VideoAnalysis.youtube_id == youtube_id).first()
    if row is None:
        raise VideoNotFoundError(youtube_id)
    return row[0]


def _link_exists(db: Session, user_id: str, video_id: str) -> bool:
    row = (
        db.query(UserVideo.id)
        .filter(UserVideo.user_id == user_id, UserVideo.video_id == video_id)
        .first()
    )
    return row is not None


def _upsert_link(db: Session, user_id: str, video_id: str, accessed_at: datetime) -> None:
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        insert = postgresql.insert
    elif dialect == "sqlite":
        insert = sqlite.insert
    else:
        raise RuntimeError(f"unsupported dialect for user_videos upsert: {dialect}")

    table = UserVideo.__table__
    stmt = insert(table).values(user_id=user_id, video_id=video_id, accessed_at=accessed_at)
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.user_id, table.c.video_id],
        set_={"accessed_at": stmt.excluded.accessed_at},
    )
    db.execute(stmt)
    db.commit()


def ensure_user_video_link(db: Session, user_id: str, youtube_id: str) -> LinkResult:
    """Make sure `user_id` has a `user_videos` row for the analysis of `youtube_id`.

    Safe to call repeatedly: an existing link is reported without writing, and
    the insert is deduplicated on (user_id, video_id).
    """
    try:
        try:
            video_id = _resolve_video_id(db, youtube_id)
        except VideoNotFoundError as exc:
            return LinkResult(linked=False, video_id=None, error=str(exc))

        if _link_exists(db, user_id, video_id):
            return LinkResult(linked=True, video_id=video_id, error=None)

        try:
            _upsert_link(db, user_id, video_id, datetime.utcnow())
        except SQLAlchemyError as exc:
            db.rollback()
            err = classify_db_error(exc)
            logger.error(
                "user_video_link.write_failed",
                extra={
                    "event": "user_video_link.write_failed",
                    "user_id": user_id,
                    "youtube_id": youtube_id,
                    "video_id": video_id,
                    "sqlstate": err.sqlstate,
                    "constraint": err.constraint,
                    "error": str(err),
                },
            )
            return LinkResult(linked=False, video_id=video_id, error=str(err))

        logger.info(
            "user_video_link.created",
            extra={
                "event": "user_video_link.created",
                "user_id": user_id,
                "youtube_id": youtube_id,
                "video_id": video_id,
            },
        )
        return LinkResult(linked=True, video_id=video_id, error=None)
    except Exception as exc:
        logger.exception(
            "user_video_link.unexpected_error",
            extra={"event": "user_video_link.unexpected_error", "user_id": user_id, "youtube_id": youtube_id},
        )
        return LinkResult(linked=False, video_id=None, error=str(exc) or exc.__class__.__name__)
