"""Domain models for tubecaption."""

from pydantic import BaseModel, ConfigDict, Field, computed_field


class CaptionTrack(BaseModel):
    """One selectable subtitle stream listed on a watch page."""

    model_config = ConfigDict(frozen=True)

    fetch_url: str  # absolute timed-text URL ("baseUrl" on the page)
    language_code: str  # e.g. "en", "ar"
    display_name: str = ""
    kind: str | None = None  # "asr" marks auto-generated captions

    @computed_field
    @property
    def is_auto_generated(self) -> bool:
        """True for speech-recognition tracks."""
        return self.kind == "asr"


class TranscriptSegment(BaseModel):
    """A single caption cue from the timed-text document."""

    start: float  # start time in seconds
    duration: float  # duration in seconds
    text: str

    @computed_field
    @property
    def end(self) -> float:
        """End time in seconds."""
        return self.start + self.duration


class VideoDetails(BaseModel):
    """Metadata scraped from a watch page's player response."""

    video_id: str  # YouTube video ID (e.g. "dQw4w9WgXcQ")
    title: str = ""
    description: str = ""
    channel_name: str = ""
    channel_id: str = ""
    view_count: int = 0
    upload_date: str = ""
    caption_tracks: list[CaptionTrack] = Field(default_factory=list)

    @computed_field
    @property
    def url(self) -> str:
        """Full YouTube URL derived from video_id."""
        return f"https://www.youtube.com/watch?v={self.video_id}"
