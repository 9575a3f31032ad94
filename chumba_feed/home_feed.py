"""
Home feed: the query input and listing surface of the home screen.

Wires the feed store, pagination controller, filter engine and debounced
search logging together behind the operations a screen drives.
"""

import logging
from typing import List, Optional

from chumba_feed.feed.feed_store import FeedStore
from chumba_feed.feed.pagination_controller import FeedPaginationController
from chumba_feed.filtering.listing_filter import ListingFilter
from chumba_feed.models import (
    FetchOutcome,
    LocationContext,
    PriceRange,
    RoomListing,
    SearchAnalysis,
)
from chumba_feed.search.query_classifier import QueryClassifier
from chumba_feed.search.search_logger import SearchLogDebouncer
from chumba_feed.search.vocabulary import ALL_AREAS, ANY_PRICE, ANY_ROOM_TYPE
from chumba_feed.session.session_manager import FeedSessionManager


logger = logging.getLogger(__name__)


class HomeFeed:
    """
    One feed session with its search and selector state.

    Attributes:
        controller: Pagination controller owning the store
        listing_filter: Filter engine applied on every read
        search_logger: Debounced search analytics, None when disabled
        session_manager: Recent search persistence, optional
        location: Location passed to every fetch, None when unknown
    """

    def __init__(
        self,
        client,
        page_size: int = 10,
        search_logger: Optional[SearchLogDebouncer] = None,
        session_manager: Optional[FeedSessionManager] = None,
        location: Optional[LocationContext] = None
    ):
        self.classifier = QueryClassifier()
        self.listing_filter = ListingFilter(self.classifier)
        self.controller = FeedPaginationController(client, FeedStore(), page_size=page_size)
        self.search_logger = search_logger
        self.session_manager = session_manager
        self.location = location

        self.query = ""
        self.selected_location = ALL_AREAS
        self.selected_room_type = ANY_ROOM_TYPE
        self.selected_price_range = ANY_PRICE

    @property
    def store(self) -> FeedStore:
        return self.controller.store

    def set_query(self, query: str) -> Optional[SearchAnalysis]:
        """
        Update the search text.

        Valid queries are handed to the debounced search logger, which must
        then be running inside an event loop. Any other text drops the send
        still pending for an earlier query.

        Args:
            query: Text as typed

        Returns:
            SearchAnalysis for a valid query, None otherwise
        """
        self.query = query or ""
        analysis = self.classifier.classify(self.query) if self.query.strip() else None

        if self.search_logger is not None:
            if analysis is None:
                self.search_logger.cancel()
            else:
                self.search_logger.submit(analysis)

        return analysis

    def commit_search(self) -> List[str]:
        """
        Record the current query in the recent searches.

        Returns:
            Updated recent search list, empty without a session manager
        """
        if self.session_manager is None:
            return []
        if self.classifier.classify(self.query) is None:
            return self.session_manager.recent_searches()
        return self.session_manager.add_recent_search(self.query)

    def select_location(self, location: str) -> None:
        self.selected_location = location or ALL_AREAS

    def select_room_type(self, room_type: str) -> None:
        self.selected_room_type = room_type or ANY_ROOM_TYPE

    def select_price_range(self, price_range: Optional[PriceRange]) -> None:
        self.selected_price_range = price_range or ANY_PRICE

    def visible_listings(self) -> List[RoomListing]:
        """Listings from the store that pass the current search and selectors."""
        return self.listing_filter.apply(
            self.store.listings,
            query=self.query,
            location=self.selected_location,
            room_type=self.selected_room_type,
            price_range=self.selected_price_range,
        )

    async def load_initial(self) -> FetchOutcome:
        return await self.controller.load_initial(self.location)

    async def load_more(self) -> FetchOutcome:
        return await self.controller.load_more(self.location)

    async def refresh(self) -> FetchOutcome:
        return await self.controller.refresh(self.location)

    def begin_momentum(self) -> None:
        self.controller.begin_momentum()

    def close(self) -> None:
        """Tear down the session, cancelling any pending search log."""
        if self.search_logger is not None:
            self.search_logger.close()
