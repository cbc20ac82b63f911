"""Core business logic for tubecaption."""

import logging

from tubecaption.config import settings
from tubecaption.ingestion.errors import PageStructureError
from tubecaption.ingestion.player import (
    extract_player_response,
    locate_caption_tracks,
    parse_video_details,
    select_caption_track,
)
from tubecaption.ingestion.timedtext import decode_captions, parse_timedtext
from tubecaption.ingestion.youtube import YouTubeFetcher
from tubecaption.models import CaptionTrack, TranscriptSegment, VideoDetails

logger = logging.getLogger(__name__)

TRANSCRIPT_SEPARATOR = "\n"


class CaptionService:
    """Core service layer — single orchestration point for caption extraction.

    Both the CLI and MCP server are thin wrappers over this class.
    Every call runs the full pipeline (page, locate, track, decode) and
    keeps no state between calls, so one instance can serve concurrent
    requests.
    """

    def __init__(self, fetcher: YouTubeFetcher | None = None) -> None:
        self._fetcher = fetcher or YouTubeFetcher()

    def get_transcript(
        self,
        video_id: str,
        language: str | None = None,
        allow_auto_captions: bool | None = None,
    ) -> str:
        """Fetch and flatten the preferred caption track of a video.

        Args:
            video_id: YouTube video ID.
            language: Target language code (defaults to settings.language).
            allow_auto_captions: Prefer auto-generated captions in the
                target language (defaults to settings.allow_auto_captions).

        Returns:
            Plain transcript text, one cue per line. May be empty.

        Raises:
            TransportError: If the watch page or caption track is unreachable.
            PageStructureError: If the watch page has no player response.
            NoCaptionsAvailableError: If the video lists no caption tracks.
        """
        xml = self._fetch_selected_track(video_id, language, allow_auto_captions)
        transcript = decode_captions(xml, separator=TRANSCRIPT_SEPARATOR)
        logger.info("Extracted transcript for %s (%d characters)", video_id, len(transcript))
        return transcript

    def get_segments(
        self,
        video_id: str,
        language: str | None = None,
        allow_auto_captions: bool | None = None,
    ) -> list[TranscriptSegment]:
        """Like get_transcript, but keep each cue with its timing."""
        xml = self._fetch_selected_track(video_id, language, allow_auto_captions)
        return parse_timedtext(xml)

    def list_caption_tracks(self, video_id: str) -> list[CaptionTrack]:
        """List the caption tracks a video offers, in page order."""
        html = self._fetcher.fetch_watch_page(video_id)
        return locate_caption_tracks(html)

    def get_video_details(self, video_id: str) -> VideoDetails:
        """Scrape title, channel and caption availability from the watch page.

        Raises:
            PageStructureError: If the player response is missing or unreadable.
        """
        html = self._fetcher.fetch_watch_page(video_id)
        try:
            player_response = extract_player_response(html)
        except ValueError as e:
            raise PageStructureError(f"Unreadable player response data: {e}") from e
        return parse_video_details(video_id, player_response)

    def _fetch_selected_track(
        self,
        video_id: str,
        language: str | None,
        allow_auto_captions: bool | None,
    ) -> str:
        language = language or settings.language
        if allow_auto_captions is None:
            allow_auto_captions = settings.allow_auto_captions

        logger.info(
            "Fetching captions for %s (language=%s, auto=%s)",
            video_id, language, allow_auto_captions,
        )
        html = self._fetcher.fetch_watch_page(video_id)
        tracks = locate_caption_tracks(html)
        track = select_caption_track(tracks, language=language, allow_auto_captions=allow_auto_captions)
        logger.info(
            "Selected caption track for %s: %s [%s]",
            video_id, track.display_name or track.language_code, track.kind or "manual",
        )
        return self._fetcher.fetch_caption_track(track)
