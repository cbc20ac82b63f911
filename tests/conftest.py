# tests/conftest.py
"""Shared fixtures for tubecaption tests."""

import json

import pytest

from tubecaption.ingestion.errors import TransportError
from tubecaption.ingestion.youtube import YouTubeFetcher, watch_url
from tubecaption.models import CaptionTrack
from tubecaption.service import CaptionService

VIDEO_ID = "dQw4w9WgXcQ"


def make_track(language_code, kind=None, base_url=None, name=None):
    """Raw captionTracks entry as it appears in the player response."""
    track = {
        "baseUrl": base_url or f"https://www.youtube.com/api/timedtext?v={VIDEO_ID}&lang={language_code}",
        "name": {"simpleText": name or language_code},
        "languageCode": language_code,
    }
    if kind is not None:
        track["kind"] = kind
    return track


def make_player_response(tracks=None, video_id=VIDEO_ID):
    response = {
        "videoDetails": {
            "videoId": video_id,
            "title": "Never Gonna Give You Up {official}",
            "shortDescription": "The official video; braces } and }; included.",
            "author": "Rick Astley",
            "channelId": "UCuAXFkgsw1L7xaCfnd5JJOw",
            "viewCount": "1500000000",
        },
        "microformat": {
            "playerMicroformatRenderer": {"uploadDate": "2009-10-24"},
        },
    }
    if tracks is not None:
        response["captions"] = {
            "playerCaptionsTracklistRenderer": {"captionTracks": tracks},
        }
    return response


def make_watch_page(player_response):
    """Wrap a player response the way the watch page embeds it."""
    return (
        "<!DOCTYPE html><html><head><title>Video - YouTube</title></head><body>"
        "<script>var ytcfg = {\"a\": 1};</script>"
        f"<script>var ytInitialPlayerResponse = {json.dumps(player_response)};"
        "var meta = document.createElement('meta');</script>"
        "</body></html>"
    )


def make_timedtext(cues):
    """Timed-text XML from (start, dur, escaped_text) tuples."""
    body = "".join(f'<text start="{s}" dur="{d}">{t}</text>' for s, d, t in cues)
    return f'<?xml version="1.0" encoding="utf-8" ?><transcript>{body}</transcript>'


class FakeHttpClient:
    """HttpClient serving canned bodies; exceptions in ``pages`` are raised."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []

    def get(self, url, *, stage="resource"):
        self.calls.append((stage, url))
        body = self.pages.get(url)
        if body is None:
            raise TransportError(stage, url, "HTTP 404")
        if isinstance(body, Exception):
            raise body
        return body


@pytest.fixture
def en_tracks():
    """English auto, English manual and French manual, in page order."""
    return [
        make_track("en", kind="asr", name="English (auto-generated)"),
        make_track("en", name="English"),
        make_track("fr", name="French"),
    ]


@pytest.fixture
def sample_tracks():
    """Parsed CaptionTrack list mirroring en_tracks."""
    return [
        CaptionTrack(fetch_url="https://example.com/en-asr", language_code="en", kind="asr"),
        CaptionTrack(fetch_url="https://example.com/en", language_code="en"),
        CaptionTrack(fetch_url="https://example.com/fr", language_code="fr"),
    ]


@pytest.fixture
def fake_http():
    """FakeHttpClient serving a watch page with one auto English track."""
    track_url = "https://www.youtube.com/api/timedtext?v=dQw4w9WgXcQ&lang=en&kind=asr"
    page = make_watch_page(make_player_response([make_track("en", kind="asr", base_url=track_url)]))
    xml = make_timedtext([(0.0, 1.5, "Hello"), (1.5, 2.0, "World")])
    return FakeHttpClient({watch_url(VIDEO_ID): page, track_url: xml})


@pytest.fixture
def service(fake_http):
    """CaptionService wired to the fixture HTTP client."""
    return CaptionService(fetcher=YouTubeFetcher(http=fake_http))
