"""
Tests for bearer session resolution.
"""

from datetime import datetime, timedelta

import pytest

from app.models import AuthSession
from app.services.session_service import SessionService, hash_token, parse_bearer


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc123", "abc123"),
        ("bearer   abc123  ", "abc123"),
        ("Basic abc123", None),
        ("Bearer ", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_bearer(header, expected):
    assert parse_bearer(header) == expected


class TestSessionService:
    def setup_method(self):
        self.service = SessionService(ttl_days=7)

    def test_issue_then_resolve(self, db):
        token, expires_at = self.service.issue(db, "user-1")

        assert self.service.resolve_user_id(db, token) == "user-1"
        assert expires_at > datetime.utcnow() + timedelta(days=6)
        stored = db.query(AuthSession).one()
        assert stored.token_hash == hash_token(token)
        assert stored.token_hash != token

    def test_unknown_token(self, db):
        self.service.issue(db, "user-1")
        assert self.service.resolve_user_id(db, "not-a-token") is None

    def test_missing_token(self, db):
        assert self.service.resolve_user_id(db, None) is None

    def test_expired_session(self, db):
        db.add(
            AuthSession(
                user_id="user-1",
                token_hash=hash_token("old"),
                issued_at=datetime.utcnow() - timedelta(days=10),
                expires_at=datetime.utcnow() - timedelta(days=1),
            )
        )
        db.commit()
        assert self.service.resolve_user_id(db, "old") is None

    def test_revoked_session(self, db):
        token, _ = self.service.issue(db, "user-1")
        rec = db.query(AuthSession).one()
        rec.revoked_at = datetime.utcnow()
        db.commit()
        assert self.service.resolve_user_id(db, token) is None
