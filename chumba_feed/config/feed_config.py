"""Feed client configuration settings for Chumba Connect."""

from dataclasses import dataclass
import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ApiConfig:
    """Property API connection configuration."""
    base_url: str = "http://localhost:5000"
    timeout_seconds: float = 60.0


@dataclass
class PaginationConfig:
    """Feed pagination configuration."""
    page_size: int = 10


@dataclass
class SearchLogConfig:
    """Search logging configuration."""
    debounce_seconds: float = 1.0
    enabled: bool = True


@dataclass
class SessionConfig:
    """Session persistence configuration."""
    session_id: str = "chumba_feed"
    base_dir: str = "./feed_sessions"


@dataclass
class FeedSettings:
    """Main feed client configuration settings."""
    api: ApiConfig = None
    pagination: PaginationConfig = None
    search_log: SearchLogConfig = None
    session: SessionConfig = None

    def __post_init__(self):
        """Initialize nested configs if not provided."""
        if self.api is None:
            self.api = ApiConfig()
        if self.pagination is None:
            self.pagination = PaginationConfig()
        if self.search_log is None:
            self.search_log = SearchLogConfig()
        if self.session is None:
            self.session = SessionConfig()


def load_feed_config() -> dict:
    """Read feed configuration from environment variables."""
    return {
        "api": {
            "base_url": os.getenv("CHUMBA_API_BASE_URL", "http://localhost:5000"),
            "timeout_seconds": float(os.getenv("CHUMBA_API_TIMEOUT_SECONDS", "60")),
        },
        "pagination": {
            "page_size": int(os.getenv("FEED_PAGE_SIZE", "10")),
        },
        "search_log": {
            "debounce_seconds": float(os.getenv("SEARCH_LOG_DEBOUNCE_SECONDS", "1.0")),
            "enabled": _env_flag("SEARCH_LOG_ENABLED", "true"),
        },
        "session": {
            "session_id": os.getenv("SESSION_ID", "chumba_feed"),
            "base_dir": os.getenv("SESSION_BASE_DIR", "./feed_sessions"),
        },
    }


# Default feed configuration
FEED_CONFIG = load_feed_config()


def get_feed_settings(config: dict = None) -> FeedSettings:
    """Get feed settings from configuration.

    Args:
        config: Configuration dictionary, defaults to FEED_CONFIG
    """
    config = config or FEED_CONFIG
    return FeedSettings(
        api=ApiConfig(**config["api"]),
        pagination=PaginationConfig(**config["pagination"]),
        search_log=SearchLogConfig(**config["search_log"]),
        session=SessionConfig(**config["session"]),
    )
