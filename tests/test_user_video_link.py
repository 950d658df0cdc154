"""
Tests for the user/video link fallback.
"""

from datetime import datetime
from unittest.mock import MagicMock

from sqlalchemy.orm import Session

from app.models import UserVideo
from app.services.user_video_link import ensure_user_video_link
from factories import add_link, add_profile, add_video


def _links(db, user_id):
    db.expire_all()
    return db.query(UserVideo).filter(UserVideo.user_id == user_id).all()


class TestEnsureUserVideoLink:
    def test_video_not_found(self, db):
        add_profile(db, "user-1")

        result = ensure_user_video_link(db, "user-1", "missing-yt")

        assert result.linked is False
        assert result.video_id is None
        assert result.error == "Video not found"
        assert _links(db, "user-1") == []

    def test_creates_missing_link(self, db):
        add_profile(db, "user-1")
        video = add_video(db, "yt-1")

        result = ensure_user_video_link(db, "user-1", "yt-1")

        assert result.linked is True
        assert result.video_id == video.id
        assert result.error is None
        links = _links(db, "user-1")
        assert len(links) == 1
        assert links[0].video_id == video.id
        assert links[0].accessed_at is not None

    def test_is_idempotent(self, db):
        add_profile(db, "user-1")
        video = add_video(db, "yt-1")

        first = ensure_user_video_link(db, "user-1", "yt-1")
        second = ensure_user_video_link(db, "user-1", "yt-1")

        assert first.linked is True and second.linked is True
        assert first.video_id == second.video_id == video.id
        assert len(_links(db, "user-1")) == 1

    def test_existing_link_is_not_rewritten(self, db):
        add_profile(db, "user-1")
        video = add_video(db, "yt-1")
        accessed = datetime(2025, 12, 31, 8, 30)
        add_link(db, "user-1", video.id, accessed_at=accessed)

        result = ensure_user_video_link(db, "user-1", "yt-1")

        assert result.linked is True
        links = _links(db, "user-1")
        assert len(links) == 1
        assert links[0].accessed_at == accessed

    def test_links_are_per_user(self, db):
        add_profile(db, "user-1")
        add_profile(db, "user-2")
        video = add_video(db, "yt-1")
        add_link(db, "user-1", video.id)

        result = ensure_user_video_link(db, "user-2", "yt-1")

        assert result.linked is True
        assert len(_links(db, "user-1")) == 1
        assert len(_links(db, "user-2")) == 1

    def test_write_failure_keeps_video_id(self, db):
        # No profile row: the profile foreign key rejects the insert.
        video = add_video(db, "yt-1")

        result = ensure_user_video_link(db, "ghost", "yt-1")

        assert result.linked is False
        assert result.video_id == video.id
        assert "FOREIGN KEY" in result.error
        assert _links(db, "ghost") == []

    def test_unexpected_error_is_reported(self):
        session = MagicMock(spec=Session)
        session.query.side_effect = RuntimeError("connection reset")

        result = ensure_user_video_link(session, "user-1", "yt-1")

        assert result.linked is False
        assert result.video_id is None
        assert result.error == "connection reset"
