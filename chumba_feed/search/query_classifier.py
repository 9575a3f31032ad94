"""
Query classifier turning validated search text into a search intent.
"""

import logging
from typing import Optional

from chumba_feed.models import SearchAnalysis, SearchType
from chumba_feed.search.query_validator import (
    QueryValidator,
    detect_room_type,
    extract_price,
    is_location_query,
    normalize_query,
)


logger = logging.getLogger(__name__)


class QueryClassifier:
    """Parses a valid query into a SearchAnalysis.

    The search type comes from the validator so that classification and
    validation always agree on precedence (price, room type, location,
    general).

    Attributes:
        validator: QueryValidator consulted before classification
    """

    def __init__(self, validator: Optional[QueryValidator] = None):
        self.validator = validator or QueryValidator()

    def classify(self, query: Optional[str]) -> Optional[SearchAnalysis]:
        """Classify a raw query.

        Args:
            query: Text as typed into the search box

        Returns:
            SearchAnalysis for valid queries, None when validation fails
        """
        result = self.validator.validate(query)
        if not result.is_valid:
            logger.debug(f"Query {query!r} rejected: {result.reason}")
            return None

        normalized = normalize_query(query)
        search_type = result.search_type or SearchType.GENERAL

        # Price searches take the number that made them price searches
        detected_price = extract_price(
            normalized, signalled_only=search_type == SearchType.PRICE
        )

        analysis = SearchAnalysis(
            raw_query=query,
            normalized_query=normalized,
            search_type=search_type,
            detected_price=detected_price,
            detected_room_type=detect_room_type(normalized),
            is_location_search=is_location_query(normalized),
        )

        logger.debug(
            f"Classified {query!r} as {analysis.search_type.value} "
            f"(price={analysis.detected_price}, room_type={analysis.detected_room_type}, "
            f"location={analysis.is_location_search})"
        )
        return analysis
