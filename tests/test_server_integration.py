# tests/test_server_integration.py
"""Server integration tests — payload helpers and the HTTP routes."""

from unittest.mock import patch

import pytest
from starlette.testclient import TestClient

from conftest import VIDEO_ID, FakeHttpClient, make_player_response, make_watch_page

from tubecaption.ingestion.errors import (
    NoCaptionsAvailableError,
    PageStructureError,
    TransportError,
    TransportTimeoutError,
)
from tubecaption.ingestion.youtube import InvalidVideoIdError, YouTubeFetcher, watch_url
from tubecaption.service import CaptionService


@pytest.fixture
def server_service(service):
    """Patch the server's _get_service to use fixture pages."""
    import tubecaption.server as server_mod

    with patch.object(server_mod, "_service", service):
        with patch.object(server_mod, "_get_service", return_value=service):
            yield service


@pytest.fixture
def client(server_service):
    from tubecaption.server import mcp

    return TestClient(mcp.http_app())


class TestErrorStatus:
    @pytest.mark.parametrize("error, status", [
        (InvalidVideoIdError("bad"), 400),
        (NoCaptionsAvailableError("none"), 404),
        (PageStructureError("layout"), 502),
        (TransportError("watch page", "u", "HTTP 500"), 502),
        (TransportTimeoutError("caption track", "u", "timed out"), 504),
        (RuntimeError("boom"), 500),
    ])
    def test_mapping(self, error, status):
        from tubecaption.server import error_status

        assert error_status(error) == status


class TestTranscriptPayload:
    def test_success(self, server_service):
        from tubecaption.server import transcript_payload

        body, status = transcript_payload(f"https://youtu.be/{VIDEO_ID}")
        assert status == 200
        assert body == {"transcription": "Hello\nWorld"}

    def test_invalid_video(self, server_service):
        from tubecaption.server import transcript_payload

        body, status = transcript_payload("not a video")
        assert status == 400
        assert "error" in body

    def test_no_captions(self):
        import tubecaption.server as server_mod

        http = FakeHttpClient({watch_url(VIDEO_ID): make_watch_page(make_player_response([]))})
        svc = CaptionService(fetcher=YouTubeFetcher(http=http))
        with patch.object(server_mod, "_get_service", return_value=svc):
            body, status = server_mod.transcript_payload(VIDEO_ID)
        assert status == 404
        assert body == {"error": "No caption tracks found for this video"}

    def test_unexpected_failure(self, server_service):
        from tubecaption.server import transcript_payload

        with patch.object(server_service, "get_transcript", side_effect=KeyError("captions")):
            body, status = transcript_payload(VIDEO_ID)
        assert status == 500
        assert body == {"error": "Internal error extracting captions"}


class TestHTTPRoutes:
    def test_extract_captions(self, client):
        resp = client.post("/api/extract-captions", json={"videoId": VIDEO_ID})
        assert resp.status_code == 200
        assert resp.json() == {"transcription": "Hello\nWorld"}

    def test_extract_captions_manual_preference(self, client):
        resp = client.post("/api/extract-captions", json={"videoId": VIDEO_ID, "useAutoCaption": False})
        assert resp.status_code == 200
        assert "Hello" in resp.json()["transcription"]

    def test_missing_video_id(self, client):
        resp = client.post("/api/extract-captions", json={})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing videoId parameter"}

    def test_invalid_json(self, client):
        resp = client.post(
            "/api/extract-captions",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert "Invalid JSON" in resp.json()["error"]

    def test_bad_auto_flag(self, client):
        resp = client.post("/api/extract-captions", json={"videoId": VIDEO_ID, "useAutoCaption": "yes"})
        assert resp.status_code == 400

    def test_page_unreachable(self, client, server_service, fake_http):
        fake_http.pages.clear()
        resp = client.post("/api/extract-captions", json={"videoId": VIDEO_ID})
        assert resp.status_code == 502
        assert "watch page" in resp.json()["error"]

    def test_unexpected_failure_is_json_500(self, client, server_service):
        with patch.object(server_service, "get_transcript", side_effect=RuntimeError("boom")):
            resp = client.post("/api/extract-captions", json={"videoId": VIDEO_ID})
        assert resp.status_code == 500
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.json() == {"error": "Internal error extracting captions"}

    def test_malformed_track_entry_is_404(self, client, fake_http):
        page = make_watch_page(make_player_response([{"baseUrl": "U1", "languageCode": None, "kind": 5}]))
        fake_http.pages[watch_url(VIDEO_ID)] = page
        resp = client.post("/api/extract-captions", json={"videoId": VIDEO_ID})
        assert resp.status_code == 404
        assert "error" in resp.json()

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "OK"
        assert "timestamp" in resp.json()
