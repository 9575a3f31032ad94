"""
Listing filter implementation for the property feed.

This module narrows the listings held by the feed store down to the visible
subset, combining a classified free-text query with the location, room type
and price range selectors.
"""

from typing import Iterable, List, Optional
import re

from chumba_feed.models import PriceRange, RoomListing, SearchAnalysis, SearchType
from chumba_feed.search.query_classifier import QueryClassifier
from chumba_feed.search.vocabulary import ALL_AREAS, ANY_PRICE, ANY_ROOM_TYPE


# Price searches match listings within this fraction of the detected price
PRICE_TOLERANCE = 0.2


class ListingFilter:
    """Filters room listings against search and selector criteria.

    Every stage keeps the listings that pass it and drops the rest, in the
    order the listings were given. Filtering never mutates or reorders its
    input, so applying the same criteria twice yields the same result.
    """

    def __init__(self, classifier: Optional[QueryClassifier] = None):
        self.classifier = classifier or QueryClassifier()

    def apply(
        self,
        listings: Iterable[RoomListing],
        query: str = "",
        location: str = ALL_AREAS,
        room_type: str = ANY_ROOM_TYPE,
        price_range: PriceRange = ANY_PRICE
    ) -> List[RoomListing]:
        """Apply every filter stage in turn.

        An empty or invalid query skips the free-text stage only; the
        selector stages still apply.

        Args:
            listings: Listings in feed order
            query: Raw search text
            location: Location selector value
            room_type: Room type selector value
            price_range: Selected price bracket

        Returns:
            Listings passing every stage, in their original order
        """
        filtered = list(listings)

        if query and query.strip():
            analysis = self.classifier.classify(query)
            if analysis is not None:
                filtered = self.filter_by_query(filtered, analysis)

        filtered = self.filter_by_location(filtered, location)
        filtered = self.filter_by_room_type(filtered, room_type)
        filtered = self.filter_by_price(filtered, price_range)
        return filtered

    def filter_by_query(
        self,
        listings: List[RoomListing],
        analysis: SearchAnalysis
    ) -> List[RoomListing]:
        """Filter listings by a classified free-text query.

        A listing passes when it satisfies any one of: text match on title,
        location or room type; its price containing the digits typed; price
        within 20% of the detected price for price searches; the detected room
        type for room-type searches.

        Args:
            listings: Listings to filter
            analysis: Classified query

        Returns:
            Listings matching the query
        """
        return [
            listing for listing in listings
            if self._matches_query(listing, analysis)
        ]

    def filter_by_location(
        self,
        listings: List[RoomListing],
        location: str
    ) -> List[RoomListing]:
        """Filter listings by location selector (case-insensitive substring).

        Args:
            listings: Listings to filter
            location: Selected area, "All Areas" disables the stage

        Returns:
            Listings whose location contains the selected area
        """
        if not location or location == ALL_AREAS:
            return list(listings)

        pattern_lower = location.lower()
        return [
            listing for listing in listings
            if pattern_lower in _text(listing.location).lower()
        ]

    def filter_by_room_type(
        self,
        listings: List[RoomListing],
        room_type: str
    ) -> List[RoomListing]:
        if not room_type or room_type == ANY_ROOM_TYPE:
            return list(listings)

        return [listing for listing in listings if listing.room_type == room_type]

    def filter_by_price(
        self,
        listings: List[RoomListing],
        price_range: Optional[PriceRange]
    ) -> List[RoomListing]:
        """Filter listings by price bracket.

        Both bounds are inclusive. A zero maximum leaves the bracket open at
        the top; a bracket with both bounds at zero disables the stage.

        Args:
            listings: Listings to filter
            price_range: Selected price bracket

        Returns:
            Listings priced within the bracket
        """
        if price_range is None or price_range.is_unbounded():
            return list(listings)

        filtered = []
        for listing in listings:
            price_value = listing.price_value()

            if price_value < price_range.min:
                continue

            if price_range.max and price_value > price_range.max:
                continue

            filtered.append(listing)

        return filtered

    def _matches_query(self, listing: RoomListing, analysis: SearchAnalysis) -> bool:
        needle = analysis.normalized_query

        for text in (listing.title, listing.location, listing.room_type):
            if needle in _text(text).lower():
                return True

        price_value = listing.price_value()

        digits = re.sub(r'\D', '', analysis.raw_query or '')
        if digits and digits in _price_digits(price_value):
            return True

        if analysis.search_type == SearchType.PRICE and analysis.detected_price:
            tolerance = analysis.detected_price * PRICE_TOLERANCE
            if abs(price_value - analysis.detected_price) <= tolerance:
                return True

        if (analysis.search_type == SearchType.ROOM_TYPE
                and analysis.detected_room_type
                and listing.room_type == analysis.detected_room_type):
            return True

        return False


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def _price_digits(price_value: float) -> str:
    if isinstance(price_value, float) and price_value.is_integer():
        price_value = int(price_value)
    return str(price_value)
