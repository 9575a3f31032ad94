"""
Query validator for free-text property searches.

Accepts or rejects raw search text before it is classified. Queries that name
a price, a room type or a place are always accepted; anything else must carry
at least one meaningful word.
"""

import re
from typing import Optional

from chumba_feed.models import SearchType, ValidationResult
from chumba_feed.search.vocabulary import (
    KNOWN_AREAS,
    LOCATION_KEYWORDS,
    ROOM_TYPE_SYNONYMS,
    ROOM_TYPES,
    STOP_WORDS,
)


MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 50

ALLOWED_CHARACTERS = re.compile(r"^[A-Za-z0-9\s\-',.]+$")

# A number, optionally thousands-separated, followed by an optional unit
PRICE_PATTERN = re.compile(
    r"\b(?P<number>\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"
    r"\s*(?P<unit>k|thousand|m|million|shillings?|tsh)?\b",
    re.IGNORECASE,
)

UNIT_MULTIPLIERS = {
    'k': 1000,
    'thousand': 1000,
    'm': 1000000,
    'million': 1000000,
    'shilling': 1,
    'shillings': 1,
    'tsh': 1,
}

_ROOM_TYPE_PHRASES = [
    (re.compile(r"(?<!\w)" + re.escape(phrase) + r"(?!\w)"), canonical)
    for phrase, canonical in ROOM_TYPE_SYNONYMS
]

_WORD_PUNCTUATION = "-',."


def normalize_query(query: str) -> str:
    """Trim, lowercase and collapse internal whitespace."""
    return " ".join(query.strip().lower().split())


def _is_price_signal(raw_number: str, unit: str) -> bool:
    # A unit, four or more integer digits, or thousands separators
    return bool(unit) or ',' in raw_number or len(raw_number.split('.')[0]) >= 4


def extract_price(text: str, signalled_only: bool = False) -> Optional[float]:
    """Extract the first price mentioned in a query.

    Any number counts, with an optional unit (k, thousand, m, million,
    shilling(s), tsh) applied as a multiplier. With ``signalled_only`` a
    number counts only when it carries a unit, has four or more digits, or
    is written with thousands separators.

    Args:
        text: Query text, in any case
        signalled_only: Skip numbers that do not look like a price

    Returns:
        Price in shillings, or None if no number qualifies
    """
    for match in PRICE_PATTERN.finditer(text):
        raw_number = match.group('number')
        unit = (match.group('unit') or '').lower()

        if signalled_only and not _is_price_signal(raw_number, unit):
            continue

        value = float(raw_number.replace(',', '')) * UNIT_MULTIPLIERS.get(unit, 1)
        return int(value) if value.is_integer() else value

    return None


def mentions_price(text: str) -> bool:
    """Check whether a query matches the price pattern."""
    return extract_price(text, signalled_only=True) is not None


def detect_room_type(normalized: str) -> Optional[str]:
    """Map a normalized query to a canonical room type.

    The synonym table is consulted first; the canonical names are then tried
    as plain substrings.

    Args:
        normalized: Lowercase query text

    Returns:
        Canonical room type, or None if none is mentioned
    """
    for pattern, canonical in _ROOM_TYPE_PHRASES:
        if pattern.search(normalized):
            return canonical

    for room_type in ROOM_TYPES:
        if room_type.lower() in normalized:
            return room_type

    return None


def is_location_query(normalized: str) -> bool:
    """Check whether a normalized query names a place or asks for one.

    Location keywords and known area names both match as substrings.
    """
    return any(
        term in normalized for term in LOCATION_KEYWORDS + KNOWN_AREAS
    )


def meaningful_words(normalized: str) -> list:
    words = [word.strip(_WORD_PUNCTUATION) for word in normalized.split()]
    return [word for word in words if len(word) > 1]


class QueryValidator:
    """Validates raw search text.

    Rules are applied in order and the first failing rule decides the result:
    length bounds, allowed characters, recognised search intent, and finally
    the meaningless-word check.
    """

    def validate(self, query: Optional[str]) -> ValidationResult:
        """Validate a raw query.

        Args:
            query: Text as typed into the search box

        Returns:
            ValidationResult with a reason for rejected queries and the
            detected search type for accepted ones
        """
        trimmed = (query or '').strip()

        if len(trimmed) < MIN_QUERY_LENGTH:
            return ValidationResult(False, reason="too short")
        if len(trimmed) > MAX_QUERY_LENGTH:
            return ValidationResult(False, reason="too long")

        if not ALLOWED_CHARACTERS.match(trimmed):
            return ValidationResult(False, reason="invalid characters")

        search_type = self.detect_search_type(trimmed)
        if search_type is not None:
            return ValidationResult(True, search_type=search_type)

        words = meaningful_words(normalize_query(trimmed))
        if not words:
            return ValidationResult(False, reason="no meaningful search terms")
        if all(word in STOP_WORDS for word in words):
            return ValidationResult(False, reason="meaningless search terms")

        return ValidationResult(True, search_type=SearchType.GENERAL)

    def detect_search_type(self, query: str) -> Optional[SearchType]:
        """Detect a recognised search intent, highest precedence first.

        Precedence is price, then room type, then location.

        Args:
            query: Query text

        Returns:
            The detected SearchType, or None for free-form text
        """
        normalized = normalize_query(query)

        if mentions_price(normalized):
            return SearchType.PRICE
        if detect_room_type(normalized) is not None:
            return SearchType.ROOM_TYPE
        if is_location_query(normalized):
            return SearchType.LOCATION
        return None
