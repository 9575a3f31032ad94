"""
Error handler for property feed fetches.

Classifies transport and server failures into the categories shown to the
user, and logs each failure with diagnostic context.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

import aiohttp


# Configure logging
logger = logging.getLogger(__name__)


DEFAULT_SERVER_MESSAGE = "Something went wrong on the server."
SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."


class FetchErrorKind(str, Enum):
    """Category of a failed fetch, in classification order."""
    NETWORK_UNAVAILABLE = "NetworkUnavailable"
    SERVER_UNRESPONSIVE = "ServerUnresponsive"
    SERVER_ERROR = "ServerError"
    UNKNOWN = "Unknown"


USER_MESSAGES = {
    FetchErrorKind.NETWORK_UNAVAILABLE:
        'Unable to connect. Please check your internet connection or try again later.',
    FetchErrorKind.SERVER_UNRESPONSIVE:
        'Server is not responding. Please try again later.',
    FetchErrorKind.SERVER_ERROR: DEFAULT_SERVER_MESSAGE,
    FetchErrorKind.UNKNOWN: 'Something went wrong. Please try again.',
}


class ServerResponseError(Exception):
    """The server answered with a failure status.

    Attributes:
        status: HTTP status code
        message: Message supplied by the server body, if any
        body: Decoded response body
    """

    def __init__(self, status: int, message: Optional[str] = None, body: Any = None):
        self.status = status
        self.message = message
        self.body = body
        super().__init__(f"HTTP {status}: {message or DEFAULT_SERVER_MESSAGE}")


class SessionExpiredError(ServerResponseError):
    """The bearer token was rejected; the stored token has been cleared."""

    def __init__(self, body: Any = None):
        super().__init__(401, SESSION_EXPIRED_MESSAGE, body)


@dataclass
class FeedFetchError:
    """Classified fetch failure kept on the feed state.

    Attributes:
        kind: Failure category
        message: User-facing message for a toast or banner
        operation: Controller operation that failed
        cause: Original exception
        status: HTTP status when the server responded
        occurred_at: Time the failure was recorded
    """
    kind: FetchErrorKind
    message: str
    operation: str
    cause: Optional[BaseException] = None
    status: Optional[int] = None
    occurred_at: datetime = field(default_factory=datetime.now)


def classify_fetch_error(error: BaseException) -> FetchErrorKind:
    """
    Classify a fetch exception.

    Network signatures (connection refused, DNS failure, timeouts) are checked
    first, then failures after the request went out without any response,
    then failures carrying a server response. Anything else is unknown.

    Args:
        error: Exception raised while fetching

    Returns:
        The matching FetchErrorKind
    """
    if isinstance(error, (aiohttp.ClientConnectorError, asyncio.TimeoutError)):
        return FetchErrorKind.NETWORK_UNAVAILABLE

    if isinstance(error, (aiohttp.ServerDisconnectedError, aiohttp.ClientPayloadError,
                          aiohttp.ServerConnectionError, aiohttp.ClientOSError)):
        return FetchErrorKind.SERVER_UNRESPONSIVE

    if isinstance(error, (ServerResponseError, aiohttp.ClientResponseError)):
        return FetchErrorKind.SERVER_ERROR

    return FetchErrorKind.UNKNOWN


def user_message(kind: FetchErrorKind, error: Optional[BaseException] = None) -> str:
    """
    Build the message shown to the user for a failed fetch.

    Server errors prefer the message supplied by the server body.

    Args:
        kind: Failure category
        error: Original exception

    Returns:
        Human-readable message
    """
    if kind == FetchErrorKind.SERVER_ERROR and isinstance(error, ServerResponseError):
        if error.message:
            return error.message
    return USER_MESSAGES[kind]


class ErrorHandler:
    """
    Converts fetch exceptions into FeedFetchError records.

    Every handled failure is logged with its operation, category and
    diagnostic context.
    """

    def handle(self, operation: str, error: BaseException, **context: Any) -> FeedFetchError:
        """
        Classify and log a fetch failure.

        Args:
            operation: Name of the controller operation that failed
            error: The exception that occurred
            **context: Extra diagnostic values (cursor, phase, ...)

        Returns:
            FeedFetchError describing the failure
        """
        kind = classify_fetch_error(error)
        status = None
        if isinstance(error, ServerResponseError):
            status = error.status
        elif isinstance(error, aiohttp.ClientResponseError):
            status = error.status

        fetch_error = FeedFetchError(
            kind=kind,
            message=user_message(kind, error),
            operation=operation,
            cause=error,
            status=status,
        )
        self._log_error(fetch_error, context)
        return fetch_error

    def _log_error(self, fetch_error: FeedFetchError, context: Dict[str, Any]) -> None:
        """
        Log error with timestamp, context, and diagnostic data.

        Args:
            fetch_error: Classified failure
            context: Extra diagnostic values passed by the caller
        """
        cause = fetch_error.cause
        diagnostic = {
            'timestamp': fetch_error.occurred_at.isoformat(),
            'operation': fetch_error.operation,
            'kind': fetch_error.kind.value,
            'status': fetch_error.status,
            'error_type': type(cause).__name__ if cause else None,
            'error_message': str(cause) if cause else None,
            'context': {k: str(v) for k, v in context.items()},
        }

        logger.error(
            f"Fetch failed: {fetch_error.operation} | "
            f"Kind: {fetch_error.kind.value} | "
            f"Error: {type(cause).__name__}: {cause}"
        )
        logger.debug(f"Full error context: {diagnostic}")
