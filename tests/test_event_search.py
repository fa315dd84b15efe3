"""
Tests for cached event/store search and city geocoding.
"""

import pytest

from playhub_bot.api import http
from playhub_bot.data_models.event import EventsPage, GameStore, Store, StoresPage
from playhub_bot.data_models.search import GeoLocation
from playhub_bot.services.event_search import EventSearchService
from playhub_bot.services.geocoding import GeocodingService
from playhub_bot.services.ttl_cache import TTLCache
from playhub_bot.utils.exceptions import UpstreamAPIError, UpstreamUnavailableError

from conftest import make_event
from fakes_http import FakeResponse, FakeSession, connection_error

PORTLAND = GeoLocation(lat=45.5152, lon=-122.6784, display_name='Portland, Oregon')


class FakeGeocoder:
    def __init__(self, location=PORTLAND, error=None):
        self.location = location
        self.error = error
        self.calls = []

    async def geocode_city(self, city):
        self.calls.append(city)
        if self.error:
            raise self.error
        return self.location


class FakeClient:
    def __init__(self, events=(), error=None, stores=()):
        self.events = list(events)
        self.error = error
        self.stores = list(stores)
        self.event_filters = []
        self.store_calls = []

    async def fetch_events(self, filters):
        self.event_filters.append(dict(filters))
        if self.error:
            raise self.error
        return EventsPage(
            results=self.events,
            count=len(self.events),
            page_size=filters['page_size'],
            current_page=filters['page'],
        )

    async def fetch_stores(self, **kwargs):
        self.store_calls.append(kwargs)
        if self.error:
            raise self.error
        return StoresPage(results=self.stores, count=len(self.stores),
                          page_size=kwargs['page_size'], current_page=kwargs['page'])


@pytest.mark.asyncio
async def test_coords_search_builds_filters():
    client = FakeClient([make_event(1)])
    service = EventSearchService(client, FakeGeocoder())

    result = await service.search_events_by_coords(
        45.5, -122.6, location_label='Here', radius_miles=30,
        statuses=('past',), start_date='2025-01-01', end_date='2025-01-31',
        page_size=100, page=2,
    )

    assert result.ok
    assert result.value.location == 'Here'
    assert result.value.total == 1
    filters = client.event_filters[0]
    assert filters['latitude'] == 45.5
    assert filters['num_miles'] == 30
    assert filters['display_statuses'] == ['past']
    assert filters['start_date_after'] == '2025-01-01T00:00:00Z'
    assert filters['start_date_before'] == '2025-01-31T23:59:59Z'
    assert filters['page'] == 2


@pytest.mark.asyncio
async def test_open_ended_window_sends_no_bounds():
    client = FakeClient([])
    await EventSearchService(client, FakeGeocoder()).search_events_by_coords(1.0, 2.0)
    assert client.event_filters[0]['start_date_after'] is None
    assert client.event_filters[0]['start_date_before'] is None


@pytest.mark.asyncio
async def test_repeat_search_is_cached(clock):
    client = FakeClient([make_event(1)])
    service = EventSearchService(client, FakeGeocoder(), TTLCache(clock=clock))

    await service.search_events_by_coords(45.5, -122.6)
    await service.search_events_by_coords(45.5, -122.6)
    assert len(client.event_filters) == 1

    clock.advance(301)
    await service.search_events_by_coords(45.5, -122.6)
    assert len(client.event_filters) == 2


@pytest.mark.asyncio
async def test_city_search_geocodes_and_caches():
    client = FakeClient([make_event(1)])
    geocoder = FakeGeocoder()
    service = EventSearchService(client, geocoder)

    first = await service.search_events_by_city('Portland')
    second = await service.search_events_by_city('PORTLAND')

    assert first.ok and second.ok
    assert first.value.location == 'Portland, Oregon'
    assert geocoder.calls == ['Portland']
    assert len(client.event_filters) == 1


@pytest.mark.asyncio
async def test_city_search_unknown_location():
    service = EventSearchService(FakeClient(), FakeGeocoder(location=None))
    result = await service.search_events_by_city('Nowhere')
    assert not result.ok
    assert result.error == "Could not find location: Nowhere"


@pytest.mark.asyncio
async def test_upstream_error_becomes_failure():
    client = FakeClient(error=UpstreamAPIError(500, 'https://api.example/events/'))
    result = await EventSearchService(client, FakeGeocoder()).search_events_by_store(3)
    assert not result.ok
    assert result.error == "API error: 500"


@pytest.mark.asyncio
async def test_failures_are_not_cached():
    client = FakeClient(error=UpstreamAPIError(503, 'https://api.example/events/'))
    service = EventSearchService(client, FakeGeocoder())
    await service.search_events_by_coords(1.0, 2.0)
    await service.search_events_by_coords(1.0, 2.0)
    assert len(client.event_filters) == 2


@pytest.mark.asyncio
async def test_store_search_label_resolution():
    client = FakeClient([make_event(1, store_name='Dragon Games')])
    service = EventSearchService(client, FakeGeocoder())

    named = await service.search_events_by_store(3)
    labelled = await service.search_events_by_store(3, store_label='Custom')

    assert named.value.location == 'Dragon Games'
    assert labelled.value.location == 'Custom'
    assert client.event_filters[0]['store_id'] == 3

    empty = await EventSearchService(FakeClient([]), FakeGeocoder()).search_events_by_store(9)
    assert empty.value.location == 'Store 9'


@pytest.mark.asyncio
async def test_store_search_by_city():
    stores = [GameStore(id='s1', store=Store(id=1, name='Dragon Games'))]
    client = FakeClient(stores=stores)
    geocoder = FakeGeocoder()
    service = EventSearchService(client, geocoder)

    result = await service.search_stores(query='dragon', city='Portland', radius_miles=40)

    assert result.ok
    assert result.value.location == 'Portland, Oregon'
    assert result.value.stores[0].store.name == 'Dragon Games'
    call = client.store_calls[0]
    assert call['search'] == 'dragon'
    assert call['latitude'] == PORTLAND.lat
    assert call['radius_miles'] == 40


@pytest.mark.asyncio
async def test_store_search_by_name_only():
    client = FakeClient(stores=[])
    geocoder = FakeGeocoder()
    result = await EventSearchService(client, geocoder).search_stores(query='dragon')
    assert result.ok
    assert result.value.location is None
    assert geocoder.calls == []
    assert client.store_calls[0]['latitude'] is None


# ----------------------------------------------------------------------
# Geocoding
# ----------------------------------------------------------------------

@pytest.fixture
def no_sleep(monkeypatch):
    async def fake_sleep(delay):
        return None

    monkeypatch.setattr(http.asyncio, 'sleep', fake_sleep)


@pytest.mark.asyncio
async def test_geocode_parses_and_caches(no_sleep):
    session = FakeSession([FakeResponse(200, [
        {'lat': '45.5152', 'lon': '-122.6784', 'display_name': 'Portland, Oregon'},
    ])])
    geocoder = GeocodingService(session, user_agent='test-agent')

    first = await geocoder.geocode_city('Portland')
    second = await geocoder.geocode_city('portland')

    assert first == PORTLAND
    assert second == PORTLAND
    assert len(session.requests) == 1
    request = session.requests[0]
    assert request['headers']['User-Agent'] == 'test-agent'
    assert ('q', 'Portland') in request['params']


@pytest.mark.asyncio
async def test_geocode_not_found(no_sleep):
    geocoder = GeocodingService(FakeSession([FakeResponse(200, [])]))
    assert await geocoder.geocode_city('Atlantis') is None


@pytest.mark.asyncio
async def test_geocode_error_status_and_malformed(no_sleep):
    assert await GeocodingService(FakeSession([FakeResponse(403)])).geocode_city('X') is None
    malformed = FakeSession([FakeResponse(200, [{'display_name': 'no coords'}])])
    assert await GeocodingService(malformed).geocode_city('X') is None


@pytest.mark.asyncio
@pytest.mark.parametrize('body', ['<html>cloudflare</html>', {'lat': '45.5', 'lon': '-122.6'}])
async def test_geocode_unexpected_body_is_not_found(no_sleep, body):
    geocoder = GeocodingService(FakeSession([FakeResponse(200, body)]))
    assert await geocoder.geocode_city('Portland') is None
    assert len(geocoder.cache) == 0


@pytest.mark.asyncio
async def test_geocode_unreachable_raises(no_sleep):
    geocoder = GeocodingService(FakeSession([connection_error()]), max_retries=1)
    with pytest.raises(UpstreamUnavailableError):
        await geocoder.geocode_city('Portland')


class StoreDetailsClient(FakeClient):
    def __init__(self, store=None, error=None):
        super().__init__(error=error)
        self.store = store
        self.detail_calls = []

    async def fetch_store_details(self, game_store_id):
        self.detail_calls.append(game_store_id)
        if self.error:
            raise self.error
        return self.store


@pytest.mark.asyncio
async def test_get_store_is_cached():
    listing = GameStore(id='gs-1', store=Store(id=42, name='Dragon Games'))
    client = StoreDetailsClient(store=listing)
    service = EventSearchService(client, FakeGeocoder())

    first = await service.get_store('gs-1')
    second = await service.get_store('gs-1')

    assert first.value.store.id == 42
    assert second.ok
    assert client.detail_calls == ['gs-1']


@pytest.mark.asyncio
async def test_get_store_error_becomes_failure():
    client = StoreDetailsClient(error=UpstreamAPIError(404, 'https://api.example/game-stores/x/'))
    result = await EventSearchService(client, FakeGeocoder()).get_store('x')
    assert result.error == "API error: 404"
