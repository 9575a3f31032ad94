"""
Error handling module for the property feed.

Provides fetch error classification, user-facing messages and the typed
exceptions raised by the API client.
"""

from .error_handler import (
    ErrorHandler,
    FeedFetchError,
    FetchErrorKind,
    ServerResponseError,
    SessionExpiredError,
    classify_fetch_error,
)

__all__ = [
    'ErrorHandler',
    'FeedFetchError',
    'FetchErrorKind',
    'ServerResponseError',
    'SessionExpiredError',
    'classify_fetch_error',
]
