"""Configuration management for tubecaption."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable overrides.

    All settings can be overridden via environment variables
    prefixed with TUBECAPTION_ (e.g. TUBECAPTION_LANGUAGE, TUBECAPTION_PORT).
    """

    model_config = {"env_prefix": "TUBECAPTION_"}

    # Track selection
    language: str = "en"
    allow_auto_captions: bool = True

    # Outbound HTTP
    request_timeout: float = Field(
        default=20.0,
        gt=0,
        description="Seconds to wait for the watch page or a caption track",
    )
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )
    accept_language: str = "en-US,en;q=0.9"

    # Server
    host: str = "127.0.0.1"
    port: int = 3000

    @property
    def request_headers(self) -> dict[str, str]:
        """Headers sent with every outbound request."""
        return {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
        }


# Module-level singleton — import this throughout the app
settings = Settings()
