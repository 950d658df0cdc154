from typing import Optional

from fastapi import Header
from sqlalchemy.orm import Session

from app.observability import bind_context
from app.services.session_service import SessionService, parse_bearer
from app.settings import get_settings

settings = get_settings()
session_service = SessionService(ttl_days=settings.session_ttl_days)


def bearer_token(authorization: Optional[str] = Header(None, alias="Authorization")) -> Optional[str]:
    return parse_bearer(authorization)


def resolve_caller(db: Session, token: Optional[str]) -> Optional[str]:
    """Resolve the caller's user id once at the HTTP boundary; core services receive it explicitly."""
    user_id = session_service.resolve_user_id(db, token)
    if user_id:
        bind_context(user_id=user_id)
    return user_id
