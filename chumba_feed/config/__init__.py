"""Configuration module for the Chumba Connect feed client."""

from .feed_config import (
    FEED_CONFIG,
    FeedSettings,
    ApiConfig,
    PaginationConfig,
    SearchLogConfig,
    SessionConfig,
    get_feed_settings,
    load_feed_config,
)

__all__ = [
    'FEED_CONFIG',
    'FeedSettings',
    'ApiConfig',
    'PaginationConfig',
    'SearchLogConfig',
    'SessionConfig',
    'get_feed_settings',
    'load_feed_config',
]
