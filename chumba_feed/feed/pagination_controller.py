"""
Pagination controller for the property feed.

Owns the fetch lifecycle of one feed session: the initial load, scroll
triggered load-more requests and pull-to-refresh. At most one fetch is
outstanding at any time; the phase is claimed synchronously before the first
await, so a second request arriving while a fetch is in flight is skipped.
"""

import logging
from typing import Any, Callable, Optional

from chumba_feed.error_handling.error_handler import ErrorHandler
from chumba_feed.feed.feed_store import FeedStore
from chumba_feed.models import (
    FeedPage,
    FeedPhase,
    FetchOutcome,
    FetchStatus,
    LocationContext,
)
from chumba_feed.scroll_handler import ScrollMomentumGuard


# Configure logging
logger = logging.getLogger(__name__)


class FeedPaginationController:
    """
    Merges cursor-based feed pages into a FeedStore.

    Fetch errors never escape the controller: the store keeps its last good
    listings, the classified error is recorded as ``last_fetch_error`` and
    the outcome carries a message for display.

    Attributes:
        client: Network collaborator exposing ``fetch_feed``
        store: FeedStore mutated by this controller only
        page_size: Listings requested per page
        error_handler: Classifies fetch failures
        scroll_guard: One load-more per scroll gesture
    """

    def __init__(
        self,
        client: Any,
        store: Optional[FeedStore] = None,
        page_size: int = 10,
        error_handler: Optional[ErrorHandler] = None,
        scroll_guard: Optional[ScrollMomentumGuard] = None
    ):
        self.client = client
        self.store = store or FeedStore()
        self.page_size = page_size
        self.error_handler = error_handler or ErrorHandler()
        self.scroll_guard = scroll_guard or ScrollMomentumGuard()

    @property
    def state(self):
        return self.store.state

    def begin_momentum(self) -> None:
        """Notify the controller that a new scroll gesture started."""
        self.scroll_guard.begin_momentum()

    async def load_initial(self, location: Optional[LocationContext] = None) -> FetchOutcome:
        """
        Load the first page of the feed once per session.

        Args:
            location: User location, or None when unknown

        Returns:
            FetchOutcome; skipped when busy or already loaded
        """
        if not self.store.is_idle:
            return self._skip("load_initial", "busy")
        if self.state.initial_load_complete:
            return self._skip("load_initial", "already loaded")

        return await self._fetch(
            operation="load_initial",
            phase=FeedPhase.LOADING_INITIAL,
            cursor=None,
            is_refreshing=False,
            location=location,
            commit=self._commit_first_page,
        )

    async def load_more(self, location: Optional[LocationContext] = None) -> FetchOutcome:
        """
        Append the next page after the stored cursor.

        Requires an idle controller, a completed initial load, the backend's
        permission to fetch more, and a scroll gesture that has not already
        triggered a load.

        Args:
            location: User location, or None when unknown

        Returns:
            FetchOutcome whose ``added`` counts net-new listings only
        """
        if not self.store.is_idle:
            return self._skip("load_more", "busy")
        if not self.state.initial_load_complete:
            return self._skip("load_more", "initial load pending")
        if not self.state.can_fetch_more:
            return self._skip("load_more", "no more pages")
        if not self.scroll_guard.try_claim():
            return self._skip("load_more", "scroll gesture already handled")

        return await self._fetch(
            operation="load_more",
            phase=FeedPhase.LOADING_MORE,
            cursor=self.state.cursor,
            is_refreshing=False,
            location=location,
            commit=self.store.append,
        )

    async def refresh(self, location: Optional[LocationContext] = None) -> FetchOutcome:
        """
        Reload the feed from its first page.

        The stored cursor and the ``can_fetch_more`` gate are ignored. On
        success the listings and cursor are replaced wholesale.

        Args:
            location: User location, or None when unknown

        Returns:
            FetchOutcome; skipped only when another fetch is in flight
        """
        if not self.store.is_idle:
            return self._skip("refresh", "busy")

        return await self._fetch(
            operation="refresh",
            phase=FeedPhase.REFRESHING,
            cursor=None,
            is_refreshing=True,
            location=location,
            commit=self._commit_first_page,
        )

    def _commit_first_page(self, page: FeedPage) -> int:
        added = self.store.replace(page)
        self.state.initial_load_complete = True
        return added

    async def _fetch(
        self,
        operation: str,
        phase: FeedPhase,
        cursor: Optional[str],
        is_refreshing: bool,
        location: Optional[LocationContext],
        commit: Callable[[FeedPage], int]
    ) -> FetchOutcome:
        self.store.begin(phase)
        logger.info(f"{operation}: fetching page (cursor={cursor}, limit={self.page_size})")

        try:
            page = await self.client.fetch_feed(
                limit=self.page_size,
                cursor=cursor,
                is_refreshing=is_refreshing,
                location=location,
            )
        except Exception as e:
            fetch_error = self.error_handler.handle(
                operation, e, cursor=cursor, phase=phase.value
            )
            self.store.record_error(fetch_error)
            return FetchOutcome(
                FetchStatus.FAILED,
                error=fetch_error,
                message=fetch_error.message,
            )
        else:
            added = commit(page)
            logger.info(
                f"{operation}: committed {added} listings "
                f"(total={len(self.store)}, next_cursor={page.next_cursor}, "
                f"can_fetch_more={page.can_fetch_more})"
            )
            return FetchOutcome(FetchStatus.COMPLETED, added=added)
        finally:
            self.store.finish()

    def _skip(self, operation: str, reason: str) -> FetchOutcome:
        logger.debug(f"{operation} skipped: {reason}")
        return FetchOutcome(FetchStatus.SKIPPED, skip_reason=reason)
