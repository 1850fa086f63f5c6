import logging
from typing import List
from urllib.parse import quote

from pydantic_settings import BaseSettings

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Readability"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Public base URL of this deployment (used for redirects and footer links)
    APP_URL: str = "http://localhost:8000"

    # Where the chat relay asks for JSON extractions (normally this same app)
    READABILITY_API_URL: str = "http://localhost:8000/v1/readability"

    # Telegram
    BOT_TOKEN: str = ""
    TELEGRAM_API_URL: str = "https://api.telegram.org"
    IV_RHASH: str = ""  # Instant View template hash issued by Telegram
    TELEGRAM_TIMEOUT: float = 10.0

    # Upstream fetch
    DEFAULT_USER_AGENT_SUFFIX: str = "readability-bot/0.1"
    FALLBACK_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 readability-bot/0.1"
    )
    UPSTREAM_REFERER: str = "https://www.google.com/?feeling-lucky"
    UPSTREAM_TIMEOUT: float = 30.0  # seconds
    DEFAULT_CACHE_CONTROL: str = "public, max-age=900"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2
    SENTRY_ENVIRONMENT: str = "development"

    # Logging
    LOG_FORMAT: str = "json"  # "json" for production, "text" for development
    LOG_LEVEL: str = "INFO"

    # Metrics
    METRICS_ENABLED: bool = True

    def model_post_init(self, __context) -> None:
        if not self.BOT_TOKEN:
            _logger.warning(
                "BOT_TOKEN not set; the Telegram webhook will reject updates. "
                "Set BOT_TOKEN in your .env or environment to enable the bot."
            )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()


def construct_readable_url(url: str) -> str:
    """Link to the HTML rendition of ``url`` served by this app."""
    return f"{settings.APP_URL.rstrip('/')}/v1/readability?url={quote(url, safe='')}"


def construct_iv_url(url: str) -> str:
    """Telegram Instant View link wrapping the readable rendition of ``url``."""
    readable = quote(construct_readable_url(url), safe="")
    return f"https://t.me/iv?url={readable}&rhash={settings.IV_RHASH}"
