"""Watch-page and caption-track fetching."""

import logging
import re
from urllib.parse import parse_qs, urlparse

from tubecaption.config import settings
from tubecaption.ingestion.transport import HttpClient, UrllibHttpClient
from tubecaption.models import CaptionTrack

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


class InvalidVideoIdError(ValueError):
    """Raised when no video ID can be read from user input."""


_ID_PATTERN = re.compile(r"^[\w-]{11}$")

_URL_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?.*v=)([\w-]{11})"),
    re.compile(r"(?:youtu\.be/)([\w-]{11})"),
    re.compile(r"(?:youtube\.com/embed/)([\w-]{11})"),
    re.compile(r"(?:youtube\.com/v/)([\w-]{11})"),
    re.compile(r"(?:youtube\.com/shorts/)([\w-]{11})"),
]


def parse_video_id(value: str) -> str:
    """Extract the 11-character video ID from a bare ID or a YouTube URL.

    Supports youtube.com/watch, youtu.be, /embed/, /v/ and /shorts/ formats.

    Raises:
        InvalidVideoIdError: If no ID can be found.
    """
    value = (value or "").strip()
    if _ID_PATTERN.match(value):
        return value

    for pattern in _URL_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)

    # Fallback: query parameter parsing
    parsed = urlparse(value)
    video_id = parse_qs(parsed.query).get("v", [None])[0]
    if video_id and _ID_PATTERN.match(video_id):
        return video_id

    raise InvalidVideoIdError(f"Could not extract video ID from: {value!r}")


def watch_url(video_id: str) -> str:
    """Canonical watch-page URL for a video ID."""
    return WATCH_URL.format(video_id=video_id)


class YouTubeFetcher:
    """Performs the two outbound requests of the pipeline.

    The HTTP client is injected so tests can serve fixture pages; by
    default a urllib client is built from settings.
    """

    def __init__(self, http: HttpClient | None = None) -> None:
        self._http = http or UrllibHttpClient(
            timeout=settings.request_timeout,
            headers=settings.request_headers,
        )

    def fetch_watch_page(self, video_id: str) -> str:
        """Return the HTML of the watch page for ``video_id``.

        Raises:
            TransportError: If the page cannot be fetched.
        """
        url = watch_url(video_id)
        logger.info("Fetching watch page: %s", url)
        html = self._http.get(url, stage="watch page")
        logger.debug("Watch page for %s: %d characters", video_id, len(html))
        return html

    def fetch_caption_track(self, track: CaptionTrack) -> str:
        """Return the raw timed-text XML served for ``track``.

        Raises:
            TransportError: If the track cannot be fetched.
        """
        logger.info("Fetching caption track: %s (%s)", track.language_code, track.kind or "manual")
        return self._http.get(track.fetch_url, stage="caption track")
