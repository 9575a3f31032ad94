"""
In-memory feed store holding listings and pagination metadata.

The pagination controller is the only writer; the filter engine reads the
listing snapshot.
"""

from typing import Optional, Tuple

from chumba_feed.models import FeedPage, FeedPhase, FeedState, RoomListing


class FeedStore:
    """Listings in insertion order, unique by id, plus pagination state."""

    def __init__(self, state: Optional[FeedState] = None):
        self._state = state or FeedState()

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def listings(self) -> Tuple[RoomListing, ...]:
        """Snapshot of the listings for readers."""
        return tuple(self._state.listings)

    @property
    def phase(self) -> FeedPhase:
        return self._state.phase

    @property
    def is_idle(self) -> bool:
        return self._state.phase == FeedPhase.IDLE

    def __len__(self) -> int:
        return len(self._state.listings)

    def begin(self, phase: FeedPhase) -> None:
        """Enter a fetch phase.

        Raises:
            RuntimeError: If another fetch phase is already active
        """
        if not self.is_idle:
            raise RuntimeError(
                f"Cannot enter {phase.value} while {self._state.phase.value}"
            )
        self._state.phase = phase

    def finish(self) -> None:
        self._state.phase = FeedPhase.IDLE

    def replace(self, page: FeedPage) -> int:
        """Replace all listings with a fresh first page.

        Args:
            page: Feed page returned by an initial load or refresh

        Returns:
            Number of listings now held
        """
        self._state.listings = _unique_by_id(page.recommended, set())
        self._apply_metadata(page)
        return len(self._state.listings)

    def append(self, page: FeedPage) -> int:
        """Append a page, dropping listings whose id is already held.

        Args:
            page: Feed page returned by a load-more

        Returns:
            Number of net-new listings appended
        """
        seen = {listing.id for listing in self._state.listings}
        new_listings = _unique_by_id(page.recommended, seen)
        self._state.listings.extend(new_listings)
        self._apply_metadata(page)
        return len(new_listings)

    def record_error(self, error) -> None:
        self._state.last_fetch_error = error

    def _apply_metadata(self, page: FeedPage) -> None:
        self._state.cursor = page.next_cursor
        self._state.has_more = page.has_more
        self._state.can_fetch_more = page.can_fetch_more
        self._state.has_more_in_batch = page.has_more_in_batch
        self._state.last_fetch_error = None


def _unique_by_id(listings, seen: set) -> list:
    unique = []
    for listing in listings:
        if listing.id in seen:
            continue
        seen.add(listing.id)
        unique.append(listing)
    return unique
