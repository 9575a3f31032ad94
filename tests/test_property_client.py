"""
Tests for the property API client against a local aiohttp test server.
"""

import tempfile

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from chumba_feed.api.property_client import FEED_PATH, STORE_SEARCH_PATH, PropertyApiClient
from chumba_feed.error_handling import (
    ErrorHandler,
    FetchErrorKind,
    ServerResponseError,
    SessionExpiredError,
)
from chumba_feed.models import LocationContext
from chumba_feed.search.query_classifier import QueryClassifier
from chumba_feed.session.session_manager import FeedSessionManager


FEED_RESPONSE = {
    "recommended": [
        {"id": "r1", "title": "Single Room at Sinza", "price": "120,000 Tsh",
         "location": "Sinza, Dar es Salaam", "roomType": "Single Room",
         "images": ["https://example.com/1.jpg"], "amenities": ["Wi-Fi"],
         "occupied": False, "minMonths": 3},
        {"_id": "r2", "title": "Studio", "price": 250000, "roomType": "Studio"},
        {"title": "No id here", "price": 1000},
    ],
    "hasMore": True,
    "nextCursor": "cursor-2",
    "canFetchMore": True,
    "hasMoreInBatch": False,
}


class RecordingBackend:
    """aiohttp application recording the requests it receives."""

    def __init__(self, feed_status=200, feed_body=None, search_status=200, feed_text=None):
        self.feed_status = feed_status
        self.feed_text = feed_text
        self.feed_body = FEED_RESPONSE if feed_body is None else feed_body
        self.search_status = search_status
        self.feed_requests = []
        self.search_bodies = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(FEED_PATH, self.handle_feed)
        app.router.add_post(STORE_SEARCH_PATH, self.handle_search)
        return app

    async def handle_feed(self, request):
        self.feed_requests.append({
            'query': dict(request.query),
            'authorization': request.headers.get('Authorization'),
        })
        if self.feed_text is not None:
            return web.Response(text=self.feed_text, status=self.feed_status)
        return web.json_response(self.feed_body, status=self.feed_status)

    async def handle_search(self, request):
        self.search_bodies.append(await request.json())
        return web.json_response({"ok": True}, status=self.search_status)


async def start(backend: RecordingBackend) -> TestServer:
    server = TestServer(backend.app())
    await server.start_server()
    return server


def make_session(token=None) -> FeedSessionManager:
    manager = FeedSessionManager(session_id="test", base_dir=tempfile.mkdtemp())
    if token:
        manager.set_token(token)
    return manager


@pytest.mark.asyncio
async def test_first_page_request_parameters():
    backend = RecordingBackend()
    server = await start(backend)
    try:
        async with PropertyApiClient(str(server.make_url("/")), make_session("tok-123")) as client:
            page = await client.fetch_feed(limit=10)
    finally:
        await server.close()

    request = backend.feed_requests[0]
    assert request['authorization'] == "Bearer tok-123"
    assert request['query'] == {
        'limit': '10',
        'isRefreshing': 'false',
        'street': '',
        'district': '',
        'region': '',
        'city': '',
        'noLocation': 'true',
    }
    assert page.next_cursor == "cursor-2"
    assert page.can_fetch_more is True


@pytest.mark.asyncio
async def test_cursor_and_location_parameters():
    backend = RecordingBackend()
    server = await start(backend)
    location = LocationContext(street="Shekilango", district="Ubungo", region="Dar es Salaam")
    try:
        async with PropertyApiClient(str(server.make_url("/")), make_session()) as client:
            await client.fetch_feed(limit=5, cursor="cursor-1", is_refreshing=True, location=location)
    finally:
        await server.close()

    request = backend.feed_requests[0]
    assert request['authorization'] is None
    assert request['query'] == {
        'limit': '5',
        'cursor': 'cursor-1',
        'isRefreshing': 'true',
        'street': 'Shekilango',
        'district': 'Ubungo',
        'region': 'Dar es Salaam',
        'city': '',
    }


@pytest.mark.asyncio
async def test_malformed_listings_are_skipped():
    backend = RecordingBackend()
    server = await start(backend)
    try:
        async with PropertyApiClient(str(server.make_url("/"))) as client:
            page = await client.fetch_feed(limit=10)
    finally:
        await server.close()

    assert [listing.id for listing in page.recommended] == ["r1", "r2"]
    first = page.recommended[0]
    assert first.room_type == "Single Room"
    assert first.min_months == 3
    assert first.price_value() == 120000


@pytest.mark.asyncio
async def test_unauthorized_clears_token():
    backend = RecordingBackend(feed_status=401, feed_body={"message": "jwt expired"})
    server = await start(backend)
    session = make_session("stale-token")
    try:
        async with PropertyApiClient(str(server.make_url("/")), session) as client:
            with pytest.raises(SessionExpiredError):
                await client.fetch_feed(limit=10)
    finally:
        await server.close()

    assert session.get_token() is None


@pytest.mark.asyncio
async def test_server_error_carries_body_message():
    backend = RecordingBackend(feed_status=500, feed_body={"message": "Database unavailable"})
    server = await start(backend)
    try:
        async with PropertyApiClient(str(server.make_url("/"))) as client:
            with pytest.raises(ServerResponseError) as excinfo:
                await client.fetch_feed(limit=10)
    finally:
        await server.close()

    assert excinfo.value.status == 500
    assert excinfo.value.message == "Database unavailable"


@pytest.mark.asyncio
async def test_store_search_posts_analysis_with_timestamp():
    backend = RecordingBackend()
    server = await start(backend)
    analysis = QueryClassifier().classify("2 bedsitter in sinza")
    try:
        async with PropertyApiClient(str(server.make_url("/")), make_session("tok")) as client:
            stored = await client.store_search(analysis)
    finally:
        await server.close()

    assert stored is True
    body = backend.search_bodies[0]
    assert body['rawQuery'] == "2 bedsitter in sinza"
    assert body['searchType'] == "room_type"
    assert body['detectedPrice'] == 2
    assert body['detectedRoomType'] == "Bedsitter"
    assert body['isLocationSearch'] is True
    assert "T" in body['timestamp']


@pytest.mark.asyncio
async def test_store_search_failures_are_swallowed():
    backend = RecordingBackend(search_status=503)
    server = await start(backend)
    analysis = QueryClassifier().classify("studio")
    try:
        async with PropertyApiClient(str(server.make_url("/"))) as client:
            assert await client.store_search(analysis) is False
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_store_search_unreachable_server():
    analysis = QueryClassifier().classify("studio")

    async with PropertyApiClient("http://127.0.0.1:1", timeout_seconds=2) as client:
        assert await client.store_search(analysis) is False


def test_build_feed_params_without_location():
    params = PropertyApiClient.build_feed_params(limit=10)

    assert params['noLocation'] == 'true'
    assert 'cursor' not in params


@pytest.mark.asyncio
@pytest.mark.parametrize("backend", [
    RecordingBackend(feed_text="<html>Bad Gateway</html>"),
    RecordingBackend(feed_body=[{"id": "r1"}]),
    RecordingBackend(feed_body={"recommended": [], "hasMore": "maybe"}),
], ids=["not-json", "not-an-object", "bad-metadata"])
async def test_unusable_success_body_is_a_server_error(backend):
    server = await start(backend)
    try:
        async with PropertyApiClient(str(server.make_url("/"))) as client:
            with pytest.raises(ServerResponseError) as excinfo:
                await client.fetch_feed(limit=10)
    finally:
        await server.close()

    assert excinfo.value.status == 200

    fetch_error = ErrorHandler().handle("load_initial", excinfo.value)
    assert fetch_error.kind == FetchErrorKind.SERVER_ERROR
    assert fetch_error.message == "Something went wrong on the server."
