import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.models import AuthSession
from app.observability import get_logger


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionService:
    """Resolves bearer tokens to user ids against `auth_sessions`."""

    def __init__(self, ttl_days: int = 30) -> None:
        self.ttl_days = ttl_days
        self._logger = get_logger(__name__)

    def issue(self, db: Session, user_id: str) -> Tuple[str, datetime]:
        token = secrets.token_urlsafe(32)
        now = datetime.utcnow()
        expires_at = now + timedelta(days=self.ttl_days)
        rec = AuthSession(user_id=user_id, token_hash=hash_token(token), issued_at=now, expires_at=expires_at)
        db.add(rec)
        db.commit()
        self._logger.info(
            "session.issued",
            extra={"event": "session.issued", "session_id": rec.id, "user_id": user_id},
        )
        return token, expires_at

    def resolve_user_id(self, db: Session, token: Optional[str]) -> Optional[str]:
        """Return the user id behind an active session, or None when the token is unknown, revoked or expired."""
        if not token:
            return None
        rec = (
            db.query(AuthSession)
            .filter(AuthSession.token_hash == hash_token(token), AuthSession.revoked_at.is_(None))
            .order_by(AuthSession.issued_at.desc())
            .first()
        )
        if not rec:
            return None
        if rec.expires_at is not None and rec.expires_at <= datetime.utcnow():
            self._logger.info(
                "session.expired",
                extra={"event": "session.expired", "session_id": rec.id},
            )
            return None
        return rec.user_id
