"""Failure taxonomy for the caption pipeline."""


class CaptionError(Exception):
    """Base class for every caption pipeline failure."""


class TransportError(CaptionError):
    """Raised when the watch page or a caption track cannot be fetched.

    ``stage`` names what was being fetched ("watch page" or
    "caption track") so callers can tell the two apart without
    separate exception types. The underlying exception is chained.
    """

    def __init__(self, stage: str, url: str, reason: str) -> None:
        self.stage = stage
        self.url = url
        self.reason = reason
        super().__init__(f"Could not reach {stage}: {reason}")


class TransportTimeoutError(TransportError):
    """Raised when an outbound request exceeds the configured timeout."""


class PageStructureError(CaptionError):
    """Raised when the watch page carries no embedded player response."""


class NoCaptionsAvailableError(CaptionError):
    """Raised when a readable watch page lists no caption tracks."""
