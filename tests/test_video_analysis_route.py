"""
Tests for POST /api/save-analysis.
"""

from unittest.mock import patch

from app.deps import session_service
from app.services.video_save import SaveResult
from factories import add_profile

URL = "/api/save-analysis"

BODY = {
    "youtubeId": "yt-1",
    "title": "A talk",
    "author": "Someone",
    "duration": 600,
    "thumbnailUrl": "https://i.ytimg.com/vi/yt-1/hqdefault.jpg",
    "transcript": [{"text": "hi", "start": 0.0, "duration": 1.2}],
    "topics": [],
    "suggestedQuestions": [],
    "language": "en",
}


class TestSaveAnalysis:
    def test_success(self, client, db):
        add_profile(db, "user-1")
        token, _ = session_service.issue(db, "user-1")
        saved = SaveResult(success=True, video_id="vid-1", error=None, retried_count=1)

        with patch("app.routers.video_analysis.save_video_analysis_with_retry", return_value=saved) as save:
            resp = client.post(URL, json=BODY, headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "videoId": "vid-1", "error": None, "retriedCount": 1}
        params = save.call_args.args[1]
        options = save.call_args.args[2]
        assert params.user_id == "user-1"
        assert params.youtube_id == "yt-1"
        assert params.thumbnail_url == BODY["thumbnailUrl"]
        assert params.topics == []
        assert options.max_retries == 3

    def test_anonymous_save_has_no_user(self, client, db):
        saved = SaveResult(success=True, video_id="vid-1", error=None, retried_count=0)

        with patch("app.routers.video_analysis.save_video_analysis_with_retry", return_value=saved) as save:
            resp = client.post(URL, json=BODY)

        assert resp.status_code == 200
        assert save.call_args.args[1].user_id is None

    def test_failure_is_reported(self, client, db):
        failed = SaveResult(success=False, video_id=None, error="Max retries exceeded", retried_count=3)

        with patch("app.routers.video_analysis.save_video_analysis_with_retry", return_value=failed):
            resp = client.post(URL, json=BODY)

        assert resp.status_code == 502
        assert resp.json() == {"success": False, "videoId": None, "error": "Max retries exceeded", "retriedCount": 3}

    def test_invalid_body(self, client, db):
        resp = client.post(URL, json={"title": "no id"})

        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"
