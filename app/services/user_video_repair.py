"""Set-based reconciliation of `user_videos` from recorded video generations.

Users whose save call failed before the fallback link endpoint existed still
have a `video_generations` row for every analysis they paid for. This inserts
the missing links in one statement, using the earliest generation time as
`accessed_at`. Generations whose user no longer has a profile are skipped so
the profile foreign key is never violated, and the unique (user_id, video_id)
constraint makes a rerun a no-op.
"""
from typing import Dict

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.observability import get_logger

logger = get_logger(__name__)

_NEW_ID_SQL: Dict[str, str] = {
    "postgresql": "gen_random_uuid()::text",
    "sqlite": "lower(hex(randomblob(16)))",
}

_MISSING_LINKS_FROM = """
FROM video_generations vg
JOIN video_analyses va ON va.youtube_id = vg.youtube_id
JOIN profiles p ON p.id = vg.user_id
LEFT JOIN user_videos uv ON uv.user_id = vg.user_id AND uv.video_id = va.id
WHERE vg.user_id IS NOT NULL
  AND va.id IS NOT NULL
  AND uv.id IS NULL
"""

COUNT_MISSING_USER_VIDEOS_SQL = (
    "SELECT count(*) FROM (SELECT DISTINCT vg.user_id, va.id" + _MISSING_LINKS_FROM + ") missing"
)

REPAIR_MISSING_USER_VIDEOS_SQL = (
    "INSERT INTO user_videos (id, user_id, video_id, accessed_at, created_at)\n"
    "SELECT {new_id}, vg.user_id, va.id, min(vg.created_at), min(vg.created_at)"
    + _MISSING_LINKS_FROM
    + "GROUP BY vg.user_id, va.id\n"
    "ON CONFLICT (user_id, video_id) DO NOTHING"
)


def repair_statement(dialect: str) -> str:
    try:
        new_id = _NEW_ID_SQL[dialect]
    except KeyError:
        raise RuntimeError(f"unsupported dialect for user_videos repair: {dialect}") from None
    return REPAIR_MISSING_USER_VIDEOS_SQL.format(new_id=new_id)


def count_missing_user_videos(db: Session) -> int:
    return int(db.execute(text(COUNT_MISSING_USER_VIDEOS_SQL)).scalar_one())


def repair_missing_user_videos(db: Session) -> int:
    """Insert every missing link and commit. Returns the number of rows inserted."""
    dialect = db.get_bind().dialect.name
    try:
        res = db.execute(text(repair_statement(dialect)))
        db.commit()
    except Exception:
        db.rollback()
        raise
    inserted = max(0, int(res.rowcount or 0))
    logger.info(
        "user_video_repair.done",
        extra={"event": "user_video_repair.done", "inserted": inserted, "dialect": dialect},
    )
    return inserted
