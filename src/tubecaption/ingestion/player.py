"""Caption-track discovery from the watch page's embedded player response."""

import json
import logging
import re

from pydantic import ValidationError

from tubecaption.ingestion.errors import NoCaptionsAvailableError, PageStructureError
from tubecaption.models import CaptionTrack, VideoDetails

logger = logging.getLogger(__name__)

# Matches `ytInitialPlayerResponse = {`, `var ytInitialPlayerResponse = {`
# and `window["ytInitialPlayerResponse"] = {`; the match ends on the brace.
_MARKER = re.compile(r"""ytInitialPlayerResponse["']?\]?\s*=\s*(?=\{)""")

_decoder = json.JSONDecoder()


def extract_player_response(html: str) -> dict:
    """Extract the player-response object embedded in watch-page HTML.

    The object is decoded straight from the marker position, so nested
    braces and `};` inside string values cannot cut it short.

    Raises:
        PageStructureError: If no player-response assignment is present.
        json.JSONDecodeError: If every candidate object is malformed.
    """
    error: json.JSONDecodeError | None = None
    for match in _MARKER.finditer(html):
        try:
            obj, _ = _decoder.raw_decode(html, match.end())
            return obj
        except json.JSONDecodeError as e:
            error = e
    if error is not None:
        raise error
    raise PageStructureError("Could not find player response data")


def parse_caption_tracks(player_response: dict) -> list[CaptionTrack]:
    """Read captions.playerCaptionsTracklistRenderer.captionTracks.

    Any missing, empty or wrongly typed level yields an empty list.
    Entries without a usable fetch URL or with invalid fields are dropped.
    """
    captions = _as_dict(player_response.get("captions"))
    renderer = _as_dict(captions.get("playerCaptionsTracklistRenderer"))
    raw_tracks = renderer.get("captionTracks")
    if not isinstance(raw_tracks, list):
        return []

    tracks = []
    for raw in raw_tracks:
        if not isinstance(raw, dict) or not raw.get("baseUrl"):
            continue
        try:
            tracks.append(CaptionTrack(
                fetch_url=raw["baseUrl"],
                language_code=raw.get("languageCode") or "",
                display_name=_display_name(raw.get("name")),
                kind=raw.get("kind"),
            ))
        except ValidationError as e:
            logger.warning("Skipping malformed caption track entry: %s", e)
    return tracks


def locate_caption_tracks(html: str) -> list[CaptionTrack]:
    """Return the caption tracks listed on a watch page, in page order.

    Raises:
        PageStructureError: If the page has no player response at all.
    """
    try:
        player_response = extract_player_response(html)
    except json.JSONDecodeError as e:
        logger.warning("Player response present but unreadable: %s", e)
        return []
    tracks = parse_caption_tracks(player_response)
    logger.info("Found %d caption tracks", len(tracks))
    return tracks


def select_caption_track(
    tracks: list[CaptionTrack],
    language: str = "en",
    allow_auto_captions: bool = True,
) -> CaptionTrack:
    """Pick one track by ordered preference.

    1. Auto-generated track in ``language`` (only if allowed).
    2. Manual track in ``language``.
    3. Any track in ``language``.
    4. The first track on the page.

    Raises:
        NoCaptionsAvailableError: If ``tracks`` is empty.
    """
    if not tracks:
        raise NoCaptionsAvailableError("No caption tracks found for this video")

    in_language = [t for t in tracks if t.language_code == language]

    if allow_auto_captions:
        for track in in_language:
            if track.kind == "asr":
                return track

    for track in in_language:
        if track.kind != "asr":
            return track

    if in_language:
        return in_language[0]

    logger.info("No %r caption track, falling back to %r", language, tracks[0].language_code)
    return tracks[0]


def parse_video_details(video_id: str, player_response: dict) -> VideoDetails:
    """Build VideoDetails from the player response's metadata blocks."""
    details = _as_dict(player_response.get("videoDetails"))
    microformat = _as_dict(_as_dict(player_response.get("microformat")).get("playerMicroformatRenderer"))

    try:
        view_count = int(details.get("viewCount") or 0)
    except (TypeError, ValueError):
        view_count = 0

    return VideoDetails(
        video_id=_as_str(details.get("videoId")) or video_id,
        title=_as_str(details.get("title")),
        description=_as_str(details.get("shortDescription")),
        channel_name=_as_str(details.get("author")) or _as_str(microformat.get("ownerChannelName")),
        channel_id=_as_str(details.get("channelId")) or _as_str(microformat.get("externalChannelId")),
        view_count=view_count,
        upload_date=_as_str(microformat.get("uploadDate")),
        caption_tracks=parse_caption_tracks(player_response),
    )


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _as_str(value) -> str:
    return value if isinstance(value, str) else ""


def _display_name(name) -> str:
    """Flatten a YouTube text object ({"simpleText"} or {"runs"})."""
    name = _as_dict(name)
    if "simpleText" in name:
        return _as_str(name["simpleText"])
    runs = name.get("runs")
    if not isinstance(runs, list):
        return ""
    return "".join(_as_str(_as_dict(run).get("text")) for run in runs)
