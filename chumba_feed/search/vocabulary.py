"""
Fixed vocabulary used to validate, classify and filter search input.

Room types, area names and price brackets mirror the choices offered by the
listing forms and filter chips of the mobile client.
"""

from typing import List, Tuple

from chumba_feed.models import PriceRange


# Canonical room types as stored on listings
ROOM_TYPES: List[str] = [
    'Single Room',
    'Self Contained',
    'Apartment',
    'Studio',
    'Bedsitter',
    'Shared Room',
    'Hostel',
]

# Phrase -> canonical room type. Checked in order, so longer and more
# specific phrases come before the words they contain.
ROOM_TYPE_SYNONYMS: List[Tuple[str, str]] = [
    ('bed sitter', 'Bedsitter'),
    ('bed-sitter', 'Bedsitter'),
    ('bedsitter', 'Bedsitter'),
    ('bedsitters', 'Bedsitter'),
    ('self contained', 'Self Contained'),
    ('self-contained', 'Self Contained'),
    ('selfcontained', 'Self Contained'),
    ('master bedroom', 'Self Contained'),
    ('studio apartment', 'Studio'),
    ('studio', 'Studio'),
    ('single room', 'Single Room'),
    ('single', 'Single Room'),
    ('shared room', 'Shared Room'),
    ('sharing', 'Shared Room'),
    ('hostel', 'Hostel'),
    ('hostels', 'Hostel'),
    ('apartment', 'Apartment'),
    ('apartments', 'Apartment'),
    ('flat', 'Apartment'),
]

# Words that signal the user is searching by place
LOCATION_KEYWORDS: List[str] = [
    'near',
    'around',
    'location',
    'area',
    'street',
    'road',
    'district',
    'region',
    'city',
    'town',
    'mtaa',
]

KNOWN_AREAS: List[str] = [
    'sinza',
    'makumbusho',
    'mbezi',
    'kijitonyama',
    'city center',
    'dar es salaam',
    'tabata',
    'temeke',
    'buza',
    'arusha',
    'zanzibar',
    'mwanza',
    'bukoba',
    'kinondoni',
    'ilala',
    'ubungo',
    'mikocheni',
    'masaki',
    'kariakoo',
    'mwenge',
    'kigamboni',
    'dodoma',
]

# Articles, pronouns, common verbs and filler or test tokens
STOP_WORDS = frozenset([
    'the', 'an', 'and', 'or', 'of', 'to', 'for', 'on', 'with', 'by', 'from',
    'in', 'at', 'is', 'are', 'was', 'were', 'be', 'been', 'am',
    'it', 'its', 'this', 'that', 'these', 'those', 'there', 'here',
    'he', 'she', 'we', 'they', 'you', 'me', 'my', 'your', 'our', 'their',
    'him', 'her', 'us', 'them', 'who', 'what', 'which',
    'do', 'does', 'did', 'have', 'has', 'had', 'get', 'got', 'want',
    'need', 'like', 'can', 'will', 'would', 'should', 'could', 'find',
    'show', 'give', 'looking', 'look', 'search', 'please',
    'so', 'just', 'very', 'really', 'some', 'any', 'all', 'no', 'not',
    'yes', 'ok', 'okay', 'hi', 'hello', 'hey', 'um', 'uh', 'hmm', 'lol',
    'test', 'testing', 'asdf', 'qwerty', 'abc', 'xyz', 'blah', 'foo', 'bar',
    'stuff', 'thing', 'things', 'something', 'anything',
])

# Selector values that mean "no filter"
ALL_AREAS = 'All Areas'
ANY_ROOM_TYPE = 'Any'

LOCATION_CHOICES: List[str] = [
    ALL_AREAS, 'Sinza', 'Makumbusho', 'Mbezi', 'Kijitonyama', 'City Center',
]

ROOM_TYPE_CHOICES: List[str] = [ANY_ROOM_TYPE] + ROOM_TYPES

PRICE_RANGES: List[PriceRange] = [
    PriceRange('Any', 0, 0),
    PriceRange('Under 150k', 0, 150000),
    PriceRange('150k - 300k', 150000, 300000),
    PriceRange('300k - 500k', 300000, 500000),
    PriceRange('500k+', 500000, 10000000),
]

ANY_PRICE = PRICE_RANGES[0]


def get_price_range(label: str) -> PriceRange:
    """Look up a price bracket by its label.

    Args:
        label: Bracket label, compared case-insensitively

    Returns:
        The matching PriceRange

    Raises:
        KeyError: If no bracket carries the label
    """
    for price_range in PRICE_RANGES:
        if price_range.label.lower() == label.strip().lower():
            return price_range
    raise KeyError(f"Unknown price range: {label}")
