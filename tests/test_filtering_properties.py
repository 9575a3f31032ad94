"""
Property-based tests for listing filtering.

These tests verify universal properties that should hold across all valid
executions of the filtering operations.
"""

import pytest
from hypothesis import given, settings, strategies as st

from chumba_feed.filtering import ListingFilter
from chumba_feed.models import PriceRange, RoomListing
from chumba_feed.search.vocabulary import (
    ALL_AREAS,
    ANY_PRICE,
    ANY_ROOM_TYPE,
    LOCATION_CHOICES,
    PRICE_RANGES,
    ROOM_TYPE_CHOICES,
    ROOM_TYPES,
)


def make_listing(id, title="Room", price=100000, location="Sinza, Dar es Salaam",
                 room_type="Single Room"):
    return RoomListing.from_api({
        'id': id,
        'title': title,
        'price': price,
        'location': location,
        'roomType': room_type,
    })


# Strategy for generating prices as numbers or formatted strings
prices = st.one_of(
    st.none(),
    st.integers(min_value=0, max_value=2000000),
    st.builds(lambda val: f"{val:,} Tsh", st.integers(min_value=1, max_value=2000000)),
    st.sampled_from(["negotiable", "", "TBD"]),
)

locations = st.sampled_from([
    "Sinza, Dar es Salaam", "Makumbusho, Dar es Salaam", "Mbezi Beach",
    "Kijitonyama", "City Center, Arusha", "", "Tabata",
])

titles = st.sampled_from([
    "Single Room at Sinza", "Self-Contained at Makumbusho", "2 Bedroom Apartment",
    "Studio Apartment at Kijitonyama", "Cozy bedsitter", "", "Hostel bed",
])

listings = st.lists(
    st.builds(
        lambda i, title, price, location, room_type: make_listing(
            str(i), title, price, location, room_type
        ),
        st.integers(min_value=0, max_value=10000),
        titles,
        prices,
        locations,
        st.sampled_from(ROOM_TYPES + [""]),
    ),
    max_size=30,
    unique_by=lambda listing: listing.id,
)

queries = st.sampled_from([
    "", "   ", "150k", "bedsitter", "bed sitter", "sinza", "studio in sinza",
    "100000", "apartment", "the", "x", "cozy", "!!invalid!!", "2 bedroom",
])


@given(
    listings_list=listings,
    query=queries,
    location=st.sampled_from(LOCATION_CHOICES),
    room_type=st.sampled_from(ROOM_TYPE_CHOICES),
    price_range=st.sampled_from(PRICE_RANGES)
)
@settings(max_examples=200)
def test_filtering_is_idempotent(listings_list, query, location, room_type, price_range):
    """
    For any listings and criteria, filtering the filtered result again with
    the same criteria changes nothing.
    """
    engine = ListingFilter()

    once = engine.apply(listings_list, query, location, room_type, price_range)
    twice = engine.apply(once, query, location, room_type, price_range)

    assert twice == once


@given(
    listings_list=listings,
    query=queries,
    location=st.sampled_from(LOCATION_CHOICES),
    room_type=st.sampled_from(ROOM_TYPE_CHOICES),
    price_range=st.sampled_from(PRICE_RANGES)
)
@settings(max_examples=200)
def test_filtering_preserves_order(listings_list, query, location, room_type, price_range):
    """
    For any criteria, the filtered result is an ordered subsequence of the
    input and the input is left untouched.
    """
    engine = ListingFilter()
    original = list(listings_list)

    filtered = engine.apply(listings_list, query, location, room_type, price_range)

    positions = [original.index(listing) for listing in filtered]
    assert positions == sorted(positions)
    assert listings_list == original


@given(
    listings_list=listings,
    min_price=st.integers(min_value=0, max_value=1000000),
    max_price=st.integers(min_value=1, max_value=2000000)
)
@settings(max_examples=100)
def test_price_range_filtering(listings_list, min_price, max_price):
    """
    For any bracket with MIN <= MAX, every kept listing has MIN <= price <= MAX.
    """
    if min_price > max_price:
        min_price, max_price = max_price, min_price

    engine = ListingFilter()
    filtered = engine.filter_by_price(listings_list, PriceRange("custom", min_price, max_price))

    for listing in filtered:
        assert min_price <= listing.price_value() <= max_price


def test_price_range_scenario():
    engine = ListingFilter()
    cheap = make_listing("1", price=45000)
    mid = make_listing("2", price=75000)

    filtered = engine.apply([cheap, mid], price_range=PriceRange("50k - 100k", 50000, 100000))

    assert filtered == [mid]


def test_formatted_price_strings_are_parsed():
    engine = ListingFilter()
    listing = make_listing("1", price="75,000 Tsh")

    filtered = engine.filter_by_price([listing], PriceRange("50k - 100k", 50000, 100000))

    assert filtered == [listing]


def test_zero_max_is_unbounded():
    engine = ListingFilter()
    pricey = make_listing("1", price=12000000)
    cheap = make_listing("2", price=50000)

    filtered = engine.filter_by_price([pricey, cheap], PriceRange("100k+", 100000, 0))

    assert filtered == [pricey]


def test_any_price_keeps_unparsable_prices():
    engine = ListingFilter()
    listing = make_listing("1", price="negotiable")

    assert engine.filter_by_price([listing], ANY_PRICE) == [listing]


def test_price_search_matches_within_twenty_percent():
    engine = ListingFilter()
    near = make_listing("1", title="Room", price=130000, location="Mbezi")
    far = make_listing("2", title="Room", price=100000, location="Mbezi")
    above = make_listing("3", title="Room", price=180000, location="Mbezi")

    filtered = engine.apply([near, far, above], query="150k")

    assert filtered == [near, above]


def test_query_digits_match_price():
    engine = ListingFilter()
    listing = make_listing("1", title="Room", price="100,000 Tsh", location="Mbezi")
    other = make_listing("2", title="Room", price=250000, location="Mbezi")

    assert engine.apply([listing, other], query="100000") == [listing]


def test_room_type_search_matches_exact_room_type():
    engine = ListingFilter()
    bedsitter = make_listing("1", title="Cozy room", location="Mwenge", room_type="Bedsitter")
    studio = make_listing("2", title="Cozy room", location="Mwenge", room_type="Studio")

    filtered = engine.apply([bedsitter, studio], query="bed sitter")

    assert filtered == [bedsitter]


def test_text_search_matches_title_location_or_room_type():
    engine = ListingFilter()
    by_title = make_listing("1", title="Room at Sinza", location="Somewhere")
    by_location = make_listing("2", title="Room", location="Sinza, Dar es Salaam")
    neither = make_listing("3", title="Room", location="Mbezi")

    filtered = engine.apply([by_title, by_location, neither], query="Sinza")

    assert filtered == [by_title, by_location]


@pytest.mark.parametrize("query", ["", "   ", "x", "the and", "room$$"])
def test_invalid_query_fails_open(query):
    engine = ListingFilter()
    sinza = make_listing("1", location="Sinza")
    mbezi = make_listing("2", location="Mbezi")

    assert engine.apply([sinza, mbezi], query=query) == [sinza, mbezi]
    assert engine.apply([sinza, mbezi], query=query, location="Sinza") == [sinza]


def test_location_selector_is_case_insensitive_substring():
    engine = ListingFilter()
    listing = make_listing("1", location="MBEZI BEACH, Dar es Salaam")

    assert engine.filter_by_location([listing], "Mbezi") == [listing]
    assert engine.filter_by_location([listing], ALL_AREAS) == [listing]
    assert engine.filter_by_location([listing], "Sinza") == []


def test_room_type_selector_requires_exact_match():
    engine = ListingFilter()
    listing = make_listing("1", room_type="Studio")

    assert engine.filter_by_room_type([listing], "Studio") == [listing]
    assert engine.filter_by_room_type([listing], "studio") == []
    assert engine.filter_by_room_type([listing], ANY_ROOM_TYPE) == [listing]


def test_missing_and_non_string_fields_do_not_raise():
    engine = ListingFilter()
    listing = RoomListing.from_api({
        '_id': 42,
        'title': None,
        'price': {'amount': 5},
        'location': 7,
        'roomType': ['Studio'],
    })

    filtered = engine.apply(
        [listing], query="studio", location="Sinza", room_type="Studio",
        price_range=PRICE_RANGES[1]
    )

    assert filtered == []
    assert engine.apply([listing], query="cozy room") == []
    assert engine.apply([listing]) == [listing]


def test_selector_stages_intersect():
    engine = ListingFilter()
    match = make_listing("1", price=200000, location="Sinza", room_type="Studio")
    wrong_type = make_listing("2", price=200000, location="Sinza", room_type="Hostel")
    wrong_price = make_listing("3", price=600000, location="Sinza", room_type="Studio")
    wrong_area = make_listing("4", price=200000, location="Mbezi", room_type="Studio")

    filtered = engine.apply(
        [match, wrong_type, wrong_price, wrong_area],
        location="Sinza",
        room_type="Studio",
        price_range=PRICE_RANGES[2],
    )

    assert filtered == [match]


@pytest.mark.parametrize("price", [float("nan"), float("inf")])
def test_non_finite_prices_fail_bounded_ranges(price):
    engine = ListingFilter()
    broken = make_listing("1", price=price)
    fine = make_listing("2", price=200000)

    filtered = engine.filter_by_price([broken, fine], PRICE_RANGES[2])

    assert filtered == [fine]
    assert broken.price_value() == 0
