"""CLI interface — thin wrapper over CaptionService and FastMCP server."""

import logging
from pathlib import Path

import typer

from tubecaption.config import settings
from tubecaption.ingestion.errors import CaptionError
from tubecaption.ingestion.youtube import InvalidVideoIdError, parse_video_id
from tubecaption.service import CaptionService


app = typer.Typer(
    name="tubecaption",
    help="Turn YouTube captions into plain-text transcripts.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Log pipeline progress to stderr."),
) -> None:
    """Turn YouTube captions into plain-text transcripts."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")


def _get_service() -> CaptionService:
    """Create a service instance with default dependencies."""
    return CaptionService()


def _video_id_or_exit(video: str) -> str:
    """Parse a URL or bare ID, exiting with an error if neither."""
    try:
        return parse_video_id(video)
    except InvalidVideoIdError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)


def _timestamp(seconds: float) -> str:
    mins, secs = divmod(int(seconds), 60)
    return f"{mins:02d}:{secs:02d}"


@app.command()
def transcript(
    video: str = typer.Argument(..., help="YouTube video URL or ID."),
    language: str = typer.Option(settings.language, "--language", "-l", help="Preferred caption language."),
    no_auto: bool = typer.Option(False, "--no-auto", help="Prefer manual captions over auto-generated ones."),
    timestamps: bool = typer.Option(False, "--timestamps", "-t", help="Prefix each line with its start time."),
    output: str | None = typer.Option(None, "--output", "-o", help="Save transcript to file."),
) -> None:
    """Print the transcript of a video."""
    video_id = _video_id_or_exit(video)
    svc = _get_service()
    allow_auto = False if no_auto else None
    try:
        if timestamps:
            segments = svc.get_segments(video_id, language=language, allow_auto_captions=allow_auto)
            text = "\n".join(f"[{_timestamp(s.start)}] {s.text}" for s in segments)
        else:
            text = svc.get_transcript(video_id, language=language, allow_auto_captions=allow_auto)
    except CaptionError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    if not text:
        typer.echo(f"⚠️  Caption track for {video_id} is empty.", err=True)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        typer.echo(f"✅ Transcript saved: {output}")
    else:
        typer.echo(text)


@app.command()
def tracks(video: str = typer.Argument(..., help="YouTube video URL or ID.")) -> None:
    """List the caption tracks a video offers."""
    video_id = _video_id_or_exit(video)
    try:
        found = _get_service().list_caption_tracks(video_id)
    except CaptionError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    if not found:
        typer.echo("No caption tracks found.")
        return
    for i, t in enumerate(found, 1):
        kind = "auto" if t.is_auto_generated else "manual"
        typer.echo(f"  {i}. {t.language_code:<8s} {kind:<7s} {t.display_name}")


@app.command()
def info(video: str = typer.Argument(..., help="YouTube video URL or ID.")) -> None:
    """Show metadata scraped from the watch page."""
    video_id = _video_id_or_exit(video)
    try:
        details = _get_service().get_video_details(video_id)
    except CaptionError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    languages = ", ".join(t.language_code for t in details.caption_tracks) or "(none)"
    typer.echo(f"Title:       {details.title}")
    typer.echo(f"Channel:     {details.channel_name} ({details.channel_id})")
    typer.echo(f"Views:       {details.view_count}")
    typer.echo(f"Uploaded:    {details.upload_date or '(unknown)'}")
    typer.echo(f"URL:         {details.url}")
    typer.echo(f"Captions:    {languages}")


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", help="Use stdio transport instead of HTTP."),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to."),
    port: int = typer.Option(settings.port, "--port", help="Port to bind to."),
) -> None:
    """Start the tubecaption MCP server."""
    from tubecaption.server import mcp

    if stdio:
        typer.echo("Starting tubecaption MCP server (stdio)...", err=True)
        mcp.run(transport="stdio")
    else:
        typer.echo(f"Starting tubecaption MCP server on http://{host}:{port}/mcp")
        typer.echo(f"Caption endpoint: POST http://{host}:{port}/api/extract-captions")
        mcp.run(transport="streamable-http", host=host, port=port)
