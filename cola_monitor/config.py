"""Configuration management from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

from cola_monitor.exceptions import ConfigError

# Load .env file
load_dotenv()

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
SEEN_LABELS_FILE = Path(os.getenv("SEEN_LABELS_FILE", str(DATA_DIR / "seen-labels.json")))


def _positive_int(raw: str | None, default: int) -> int:
    """Parse a positive integer, falling back to default when unset or invalid."""
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Notifications
    WEBHOOK_URL: str | None = os.getenv("WEBHOOK_URL")
    WEBHOOK_USERNAME: str = os.getenv("WEBHOOK_USERNAME", "TTB COLA Monitor")

    # Browser-automation proxy
    BROWSERLESS_TOKEN: str | None = os.getenv("BROWSERLESS_TOKEN")
    BROWSERLESS_URL: str = os.getenv("BROWSERLESS_URL", "https://production-sfo.browserless.io/unblock")

    # Registry
    BASE_URL: str = os.getenv("BASE_URL", "https://www.ttbonline.gov/colasonline")
    # The registry serves an incomplete certificate chain
    REGISTRY_VERIFY_TLS: bool = _flag(os.getenv("REGISTRY_VERIFY_TLS"), False)
    DAYS_BACK: int = _positive_int(os.getenv("DAYS_BACK"), 1)
    CLASS_TYPE_FROM: str = os.getenv("CLASS_TYPE_FROM", "100")
    CLASS_TYPE_TO: str = os.getenv("CLASS_TYPE_TO", "199")
    TIMEOUT: int = _positive_int(os.getenv("TIMEOUT"), 60)

    # Pacing (seconds)
    IMAGE_FETCH_PAUSE: float = 0.5
    HEADER_PAUSE: float = 0.5
    IMAGE_MESSAGE_PAUSE: float = 1.0
    BATCH_PAUSE: float = 1.0

    # Webhook delivery
    WEBHOOK_MAX_ATTEMPTS: int = 3
    WEBHOOK_RETRY_DELAY: float = 2.0
    RATE_LIMIT_DEFAULT_WAIT: float = 2.0
    EMBED_BATCH_SIZE: int = 10

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls, require_scraper: bool = True) -> None:
        """Validate required configuration."""
        errors = []
        if not cls.WEBHOOK_URL:
            errors.append("WEBHOOK_URL is required")
        if require_scraper and not cls.BROWSERLESS_TOKEN:
            errors.append("BROWSERLESS_TOKEN is required")
        if errors:
            raise ConfigError(f"Configuration errors: {', '.join(errors)}")


config = Config()
