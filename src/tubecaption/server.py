"""FastMCP server — MCP tools plus plain JSON routes over CaptionService."""

import logging
from datetime import datetime, timezone

from fastmcp import FastMCP
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse

from tubecaption.ingestion.errors import (
    CaptionError,
    NoCaptionsAvailableError,
    PageStructureError,
    TransportError,
    TransportTimeoutError,
)
from tubecaption.ingestion.youtube import InvalidVideoIdError, parse_video_id
from tubecaption.service import CaptionService

logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="tubecaption",
    instructions=(
        "tubecaption turns YouTube captions into plain text. "
        "Use get_transcript with a video URL or ID, list_caption_tracks "
        "to see which languages exist, and get_video_details for metadata."
    ),
)

_service: CaptionService | None = None


def _get_service() -> CaptionService:
    """Lazy-initialise the service singleton with default dependencies."""
    global _service
    if _service is None:
        _service = CaptionService()
    return _service


def error_status(error: Exception) -> int:
    """HTTP status for a pipeline failure."""
    if isinstance(error, InvalidVideoIdError):
        return 400
    if isinstance(error, NoCaptionsAvailableError):
        return 404
    if isinstance(error, TransportTimeoutError):
        return 504
    if isinstance(error, (TransportError, PageStructureError)):
        return 502
    return 500


def transcript_payload(
    video: str,
    language: str | None = None,
    allow_auto_captions: bool | None = None,
) -> tuple[dict, int]:
    """Run the pipeline and shape the outcome as (JSON body, status)."""
    try:
        video_id = parse_video_id(video)
        transcription = _get_service().get_transcript(
            video_id, language=language, allow_auto_captions=allow_auto_captions,
        )
    except (InvalidVideoIdError, CaptionError) as e:
        logger.warning("Caption extraction failed for %r: %s", video, e)
        return {"error": str(e)}, error_status(e)
    except Exception as e:
        logger.exception("Unexpected failure extracting captions for %r", video)
        return {"error": "Internal error extracting captions"}, error_status(e)
    return {"transcription": transcription}, 200


@mcp.tool(annotations={"readOnlyHint": True, "idempotentHint": True})
def get_transcript(
    video: str,
    language: str | None = None,
    allow_auto_captions: bool | None = None,
) -> dict:
    """Get the plain-text transcript of a YouTube video from its captions.

    Args:
        video: YouTube video URL or 11-character video ID.
        language: Preferred caption language code (default "en").
        allow_auto_captions: Prefer auto-generated captions in that
            language over manual ones (default true).
    """
    body, _ = transcript_payload(video, language, allow_auto_captions)
    return body


@mcp.tool(annotations={"readOnlyHint": True})
def list_caption_tracks(video: str) -> dict:
    """List the caption tracks a YouTube video offers.

    Args:
        video: YouTube video URL or 11-character video ID.
    """
    try:
        video_id = parse_video_id(video)
        tracks = _get_service().list_caption_tracks(video_id)
    except (InvalidVideoIdError, CaptionError) as e:
        return {"error": str(e)}
    return {
        "video_id": video_id,
        "tracks": [t.model_dump(mode="json") for t in tracks],
    }


@mcp.tool(annotations={"readOnlyHint": True})
def get_video_details(video: str) -> dict:
    """Get title, channel, view count and caption tracks of a YouTube video.

    Args:
        video: YouTube video URL or 11-character video ID.
    """
    try:
        details = _get_service().get_video_details(parse_video_id(video))
    except (InvalidVideoIdError, CaptionError) as e:
        return {"error": str(e)}
    return details.model_dump(mode="json")


@mcp.custom_route("/api/extract-captions", methods=["POST"])
async def extract_captions(request: Request) -> JSONResponse:
    """POST {"videoId", "useAutoCaption"?, "language"?} -> {"transcription"}."""
    try:
        body = await request.json()
    except ValueError as e:
        return JSONResponse({"error": f"Invalid JSON in request body: {e}"}, status_code=400)

    if not isinstance(body, dict) or not body.get("videoId"):
        return JSONResponse({"error": "Missing videoId parameter"}, status_code=400)

    use_auto = body.get("useAutoCaption", True)
    if not isinstance(use_auto, bool):
        return JSONResponse({"error": "useAutoCaption must be a boolean"}, status_code=400)

    language = body.get("language")
    if language is not None and not isinstance(language, str):
        return JSONResponse({"error": "language must be a string"}, status_code=400)

    payload, status = await run_in_threadpool(
        transcript_payload,
        str(body["videoId"]),
        language,
        use_auto,
    )
    return JSONResponse(payload, status_code=status)


@mcp.custom_route("/health", methods=["GET"])
async def health(request: Request) -> JSONResponse:
    """Liveness probe."""
    return JSONResponse({
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })
