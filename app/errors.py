from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

# Markers used only when the driver gives no SQLSTATE/diagnostics (e.g. SQLite).
PROFILE_DEPENDENCY_MARKERS = (
    "foreign key",
    "profiles",
    "violates foreign key constraint",
    "user_videos_user_id_fkey",
)
PROFILE_DEPENDENCY_CONSTRAINTS = {"user_videos_user_id_fkey"}
PROFILE_DEPENDENCY_TABLES = {"profiles", "user_videos"}
FOREIGN_KEY_VIOLATION = "23503"


class ErrorEnvelope(BaseModel):
    error: str
    message: str | None = None


class ReconcileError(Exception):
    """Base class for save/link failures surfaced to callers as structured results."""


class VideoNotFoundError(ReconcileError):
    def __init__(self, youtube_id: str) -> None:
        super().__init__("Video not found")
        self.youtube_id = youtube_id


class PersistenceError(ReconcileError):
    """A write failed for a reason that retrying will not fix."""

    def __init__(self, message: str, *, sqlstate: Optional[str] = None, constraint: Optional[str] = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate
        self.constraint = constraint


class TransientDependencyError(PersistenceError):
    """Foreign-key violation on the profile dependency; the profile row may not be committed yet."""


def db_error_message(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    text = str(orig if orig is not None else exc).strip()
    return text or exc.__class__.__name__


def classify_db_error(exc: SQLAlchemyError) -> PersistenceError:
    orig = getattr(exc, "orig", None)
    message = db_error_message(exc)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    diag = getattr(orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    table = getattr(diag, "table_name", None)

    if sqlstate:
        is_profile_fk = sqlstate == FOREIGN_KEY_VIOLATION and (
            constraint in PROFILE_DEPENDENCY_CONSTRAINTS
            or (constraint is None and table in PROFILE_DEPENDENCY_TABLES)
            or "profiles" in message
        )
    else:
        lowered = message.lower()
        is_profile_fk = any(marker in lowered for marker in PROFILE_DEPENDENCY_MARKERS)

    cls = TransientDependencyError if is_profile_fk else PersistenceError
    return cls(message, sqlstate=sqlstate, constraint=constraint)


def error_response(error: str, message: str | None = None, status_code: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorEnvelope(error=error, message=message).model_dump())


async def http_exception_handler(request: Request, exc):  # type: ignore[override]
    # Fallback handler to normalize FastAPI HTTPException.
    detail = getattr(exc, "detail", None)
    error = "error"
    message = None
    if isinstance(detail, dict):
        error = detail.get("error", error)
        message = detail.get("message")
    elif isinstance(detail, str):
        # Most endpoints raise string codes like "authentication_required"; treat as the error code.
        error = detail
    return error_response(error=error, message=message, status_code=getattr(exc, "status_code", 400))
