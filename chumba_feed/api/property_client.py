"""
Property API client - fetches feed pages from the Chumba Connect backend and
records search analytics.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from chumba_feed.error_handling.error_handler import ServerResponseError, SessionExpiredError
from chumba_feed.models import FeedPage, LocationContext, RoomListing, SearchAnalysis
from chumba_feed.session.session_manager import FeedSessionManager


logger = logging.getLogger(__name__)


FEED_PATH = "/api/getallproperties"
STORE_SEARCH_PATH = "/api/store-search"


class PropertyApiClient:
    """
    Async client for the property feed endpoints.

    Authenticates with the bearer token held by the session manager. A 401
    answer clears that token, mirroring an expired login.
    """

    def __init__(
        self,
        base_url: str,
        session_manager: Optional[FeedSessionManager] = None,
        timeout_seconds: float = 60.0
    ):
        self.base_url = base_url.rstrip("/")
        self.session_manager = session_manager
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying HTTP session"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _ensure_session(self):
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.session_manager.get_token() if self.session_manager else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def build_feed_params(
        limit: int,
        cursor: Optional[str] = None,
        is_refreshing: bool = False,
        location: Optional[LocationContext] = None
    ) -> Dict[str, str]:
        """
        Build query parameters for a feed request.

        Args:
            limit: Page size
            cursor: Pagination cursor, omitted when None
            is_refreshing: Whether this is a pull-to-refresh request
            location: User location, or None when unknown

        Returns:
            Query parameter dictionary
        """
        params = {
            "limit": str(limit),
            "isRefreshing": "true" if is_refreshing else "false",
        }
        if cursor:
            params["cursor"] = cursor

        if location is None:
            params.update(LocationContext().to_query_params())
            params["noLocation"] = "true"
        else:
            params.update(location.to_query_params())

        return params

    async def fetch_feed(
        self,
        limit: int,
        cursor: Optional[str] = None,
        is_refreshing: bool = False,
        location: Optional[LocationContext] = None
    ) -> FeedPage:
        """
        Fetch one page of recommended listings.

        Args:
            limit: Page size
            cursor: Cursor returned by the previous page, None for the first
            is_refreshing: Whether this is a pull-to-refresh request
            location: User location, or None when unknown

        Returns:
            Parsed FeedPage

        Raises:
            SessionExpiredError: If the server rejected the bearer token
            ServerResponseError: If the server answered with a failure status
                or with a body that is not a valid feed page
            aiohttp.ClientError: On transport failures
        """
        await self._ensure_session()

        params = self.build_feed_params(limit, cursor, is_refreshing, location)
        url = f"{self.base_url}{FEED_PATH}"

        logger.debug(f"GET {FEED_PATH} cursor={cursor} refreshing={is_refreshing}")

        async with self._session.get(url, params=params, headers=self._headers()) as response:
            await self._raise_for_status(response)
            status = response.status
            try:
                data = await response.json(content_type=None)
            except ValueError as e:
                logger.warning(f"Feed response is not JSON: {e}")
                raise ServerResponseError(status) from e

        if not isinstance(data, dict):
            logger.warning(f"Feed response is not an object: {type(data).__name__}")
            raise ServerResponseError(status, None, data)

        try:
            return self._parse_page(data)
        except ValidationError as e:
            logger.warning(f"Feed response metadata failed validation: {e}")
            raise ServerResponseError(status, None, data) from e

    async def store_search(self, analysis: SearchAnalysis) -> bool:
        """
        Record a classified search. Failures are logged and never raised.

        Args:
            analysis: Classified search query

        Returns:
            True if the server accepted the record, False otherwise
        """
        body = analysis.to_dict()
        body["timestamp"] = datetime.now(timezone.utc).isoformat()

        try:
            await self._ensure_session()
            url = f"{self.base_url}{STORE_SEARCH_PATH}"
            async with self._session.post(url, json=body, headers=self._headers()) as response:
                await self._raise_for_status(response)
            return True
        except Exception as e:
            logger.debug(f"Search logging failed for {analysis.normalized_query!r}: {e}")
            return False

    async def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        if response.status < 400:
            return

        body = await self._read_error_body(response)

        if response.status == 401:
            if self.session_manager:
                self.session_manager.clear_token()
            raise SessionExpiredError(body)

        message = body.get("message") if isinstance(body, dict) else None
        raise ServerResponseError(
            response.status,
            message if isinstance(message, str) and message else None,
            body,
        )

    @staticmethod
    async def _read_error_body(response: aiohttp.ClientResponse) -> Any:
        try:
            return await response.json(content_type=None)
        except ValueError:
            return None

    def _parse_page(self, data: Dict[str, Any]) -> FeedPage:
        """Parse a feed response, skipping listings that fail validation"""
        listings: List[RoomListing] = []
        raw_listings = data.get("recommended") or []
        if not isinstance(raw_listings, list):
            raw_listings = []

        for item in raw_listings:
            if not isinstance(item, dict):
                continue
            try:
                listings.append(RoomListing.from_api(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed listing {item.get('id', item.get('_id'))}: {e}")

        metadata = {k: v for k, v in data.items() if k != "recommended"}
        page = FeedPage.model_validate(metadata)
        return page.model_copy(update={"recommended": listings})
