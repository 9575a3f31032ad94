"""
Data models for the Chumba Connect property feed.

This module defines the core data structures used throughout the feed:
search intents, price ranges, room listings as delivered by the backend,
and the mutable pagination state owned by the feed controller.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import math
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchType(str, Enum):
    """Classified meaning of a free-text query."""
    PRICE = "price"
    ROOM_TYPE = "room_type"
    LOCATION = "location"
    GENERAL = "general"


@dataclass
class ValidationResult:
    """Outcome of validating raw search text.

    Attributes:
        is_valid: Whether the query may be classified
        reason: Human-readable rejection reason for invalid queries
        search_type: Search intent detected during validation, if any
    """
    is_valid: bool
    reason: Optional[str] = None
    search_type: Optional[SearchType] = None


@dataclass
class SearchAnalysis:
    """Structured intent derived from a valid search query.

    Attributes:
        raw_query: Query exactly as typed
        normalized_query: Trimmed lowercase form of the query
        search_type: Detected search intent
        detected_price: Price extracted from the query, in shillings
        detected_room_type: Canonical room type mentioned in the query
        is_location_search: Whether the query names a place
    """
    raw_query: str
    normalized_query: str
    search_type: SearchType
    detected_price: Optional[float] = None
    detected_room_type: Optional[str] = None
    is_location_search: bool = False

    def to_dict(self) -> dict:
        """Convert analysis to the camelCase body expected by the backend.

        Returns:
            Dictionary representation with the search type as a plain string
        """
        return {
            'rawQuery': self.raw_query,
            'normalizedQuery': self.normalized_query,
            'searchType': self.search_type.value,
            'detectedPrice': self.detected_price,
            'detectedRoomType': self.detected_room_type,
            'isLocationSearch': self.is_location_search,
        }


@dataclass(frozen=True)
class PriceRange:
    """Monthly rent bracket offered by the price selector.

    A range with both bounds at zero places no constraint on price, and a
    zero maximum means the range is open-ended.
    """
    label: str
    min: int = 0
    max: int = 0

    def is_unbounded(self) -> bool:
        return self.min == 0 and self.max == 0


def parse_price(value: Any) -> float:
    """Parse a listing price into a number.

    Handles numbers as well as formatted strings like "120,000 Tsh" or
    "350 000". Thousands separators are stripped before parsing.

    Args:
        value: Raw price as received from the backend

    Returns:
        Numeric price, or 0 if the value cannot be parsed or is not finite
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return 0

    # Remove thousands separators, then take the first number present
    cleaned = re.sub(r'(?<=\d)[,\s](?=\d{3}\b)', '', value)
    match = re.search(r'\d+(?:\.\d+)?', cleaned)
    if not match:
        return 0

    number = float(match.group(0))
    return int(number) if number.is_integer() else number


def _text_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


class RoomListing(BaseModel):
    """A rentable room as delivered by the property feed.

    Listings are immutable once fetched. Text fields that arrive missing or
    with a non-string type are normalized to empty strings so downstream
    filtering never has to guard against them.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra='ignore')

    id: str
    title: str = ""
    price: Union[int, float, str, None] = None
    location: str = ""
    room_type: str = Field(default="", alias="roomType")
    description: str = ""
    images: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    occupied: bool = False
    min_months: int = Field(default=1, alias="minMonths")

    @field_validator('id', mode='before')
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator('title', 'location', 'room_type', 'description', mode='before')
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _text_or_empty(value)

    @field_validator('price', mode='before')
    @classmethod
    def _coerce_price(cls, value: Any) -> Any:
        if isinstance(value, (bool, list, dict)):
            return None
        return value

    @field_validator('images', 'amenities', mode='before')
    @classmethod
    def _coerce_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    @field_validator('occupied', mode='before')
    @classmethod
    def _coerce_occupied(cls, value: Any) -> bool:
        return bool(value)

    @field_validator('min_months', mode='before')
    @classmethod
    def _coerce_min_months(cls, value: Any) -> int:
        try:
            return max(int(value), 1)
        except (TypeError, ValueError):
            return 1

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'RoomListing':
        """Create a listing from a backend payload.

        Accepts document-store style ``_id`` keys in place of ``id``.

        Args:
            data: Listing dictionary from the feed response

        Returns:
            RoomListing instance
        """
        if 'id' not in data and '_id' in data:
            data = {**data, 'id': data['_id']}
        return cls.model_validate(data)

    def price_value(self) -> float:
        """Numeric price with separators stripped, 0 when unparsable."""
        return parse_price(self.price)


class FeedPage(BaseModel):
    """One page of the property feed response."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    recommended: List[RoomListing] = Field(default_factory=list)
    has_more: bool = Field(default=False, alias="hasMore")
    next_cursor: Optional[str] = Field(default=None, alias="nextCursor")
    can_fetch_more: bool = Field(default=False, alias="canFetchMore")
    has_more_in_batch: bool = Field(default=False, alias="hasMoreInBatch")

    @field_validator('has_more', 'can_fetch_more', 'has_more_in_batch', mode='before')
    @classmethod
    def _coerce_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator('next_cursor', mode='before')
    @classmethod
    def _coerce_cursor(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)


@dataclass
class LocationContext:
    """Reverse-geocoded position of the user, passed to each fetch."""
    street: Optional[str] = None
    district: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None

    def to_query_params(self) -> Dict[str, str]:
        return {
            'street': self.street or '',
            'district': self.district or '',
            'region': self.region or '',
            'city': self.city or '',
        }


class FeedPhase(str, Enum):
    """Fetch lifecycle phase of a feed session."""
    IDLE = "idle"
    LOADING_INITIAL = "loading-initial"
    LOADING_MORE = "loading-more"
    REFRESHING = "refreshing"


@dataclass
class FeedState:
    """Listings plus pagination metadata for one feed session.

    Attributes:
        listings: Listings in insertion order, unique by id
        cursor: Opaque pagination token, None at the start of the feed
        has_more: Backend reports more results exist
        can_fetch_more: Backend allows another load-more request
        has_more_in_batch: Backend has more results in the current batch
        phase: Current fetch phase, at most one non-idle at a time
        last_fetch_error: Most recent fetch failure, cleared on success
        initial_load_complete: A first page has been committed
    """
    listings: List[RoomListing] = field(default_factory=list)
    cursor: Optional[str] = None
    has_more: bool = True
    can_fetch_more: bool = False
    has_more_in_batch: bool = False
    phase: FeedPhase = FeedPhase.IDLE
    last_fetch_error: Optional[Any] = None
    initial_load_complete: bool = False


class FetchStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FetchOutcome:
    """Result of a pagination controller operation.

    Attributes:
        status: Whether the fetch ran, was skipped by a guard, or failed
        added: Number of listings newly committed to the store
        error: Classified fetch error for failed operations
        message: User-facing message for failed operations
        skip_reason: Guard that rejected a skipped operation
    """
    status: FetchStatus
    added: int = 0
    error: Optional[Any] = None
    message: Optional[str] = None
    skip_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.COMPLETED
