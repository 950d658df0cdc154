"""
Tests for POST /api/verify-video-link.
"""

from unittest.mock import patch

import pytest

from app.deps import session_service
from app.models import UserVideo
from factories import add_link, add_profile, add_video

URL = "/api/verify-video-link"


@pytest.fixture()
def auth_headers(db):
    add_profile(db, "user-1")
    token, _ = session_service.issue(db, "user-1")
    return {"Authorization": f"Bearer {token}"}


def _link_count(db, user_id):
    db.expire_all()
    return db.query(UserVideo).filter(UserVideo.user_id == user_id).count()


class TestVerifyVideoLink:
    def test_empty_body_is_rejected(self, client, auth_headers):
        resp = client.post(URL, json={}, headers=auth_headers)

        assert resp.status_code == 400
        assert resp.json() == {"error": "video_id_required", "message": "videoId is required"}

    @pytest.mark.parametrize("body", [{"videoId": 123}, {"videoId": ""}, {"videoId": None}, ["yt-1"]])
    def test_bad_video_id_is_rejected(self, client, auth_headers, body):
        resp = client.post(URL, json=body, headers=auth_headers)
        assert resp.status_code == 400

    def test_non_json_body_is_rejected(self, client, auth_headers):
        resp = client.post(URL, content=b"not json", headers={**auth_headers, "Content-Type": "application/json"})
        assert resp.status_code == 400

    def test_input_checked_before_auth(self, client, db):
        resp = client.post(URL, json={})
        assert resp.status_code == 400

    def test_requires_authentication(self, client, db):
        resp = client.post(URL, json={"videoId": "yt-1"})

        assert resp.status_code == 401
        assert resp.json()["error"] == "authentication_required"

    def test_rejects_unknown_token(self, client, db):
        resp = client.post(URL, json={"videoId": "yt-1"}, headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_existing_link(self, client, db, auth_headers):
        video = add_video(db, "yt-1")
        add_link(db, "user-1", video.id)

        resp = client.post(URL, json={"videoId": "yt-1"}, headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json() == {"linked": True, "videoId": video.id}
        assert _link_count(db, "user-1") == 1

    def test_creates_missing_link(self, client, db, auth_headers):
        video = add_video(db, "yt-1")

        resp = client.post(URL, json={"videoId": "yt-1"}, headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json() == {"linked": True, "videoId": video.id}
        assert _link_count(db, "user-1") == 1

    def test_links_only_the_caller(self, client, db, auth_headers):
        add_profile(db, "user-2")
        add_video(db, "yt-1")

        client.post(URL, json={"videoId": "yt-1"}, headers=auth_headers)

        assert _link_count(db, "user-1") == 1
        assert _link_count(db, "user-2") == 0

    def test_video_not_found(self, client, db, auth_headers):
        resp = client.post(URL, json={"videoId": "missing"}, headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"linked": False, "error": "Video not found"}

    def test_unexpected_error_is_generic(self, client, db, auth_headers):
        with patch("app.routers.video_link.ensure_user_video_link", side_effect=RuntimeError("db exploded")):
            resp = client.post(URL, json={"videoId": "yt-1"}, headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": "verify_video_link_failed", "message": "Failed to verify video link"}

    def test_echoes_request_id(self, client, db, auth_headers):
        add_video(db, "yt-1")
        resp = client.post(URL, json={"videoId": "yt-1"}, headers={**auth_headers, "X-Request-Id": "req-42"})
        assert resp.headers["X-Request-Id"] == "req-42"
