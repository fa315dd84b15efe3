"""
Tests for the retrying HTTP transport and the PlayHub API client.
"""

import asyncio

import pytest

from playhub_bot.api import http
from playhub_bot.api.client import PlayHubClient, expand_statuses, paginate_standings
from playhub_bot.api.http import build_query, fetch_with_retry
from playhub_bot.data_models.event import StandingEntry
from playhub_bot.utils.exceptions import UpstreamAPIError, UpstreamUnavailableError

from fakes_http import FakeResponse, FakeSession, connection_error


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping."""
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(http.asyncio, 'sleep', fake_sleep)
    return delays


def test_build_query_repeats_list_keys_and_drops_empty():
    assert build_query({
        'display_statuses': ['past', 'inProgress'],
        'page': 2,
        'search': None,
        'store_id': '',
    }) == [('display_statuses', 'past'), ('display_statuses', 'inProgress'), ('page', '2')]


@pytest.mark.asyncio
async def test_retries_retryable_status_then_succeeds(sleeps):
    session = FakeSession([FakeResponse(503), FakeResponse(429), FakeResponse(200, {'ok': True})])
    response = await fetch_with_retry(session, 'https://api.example/events/', retry_delay=1.0)
    assert response.ok
    assert response.json() == {'ok': True}
    assert len(session.requests) == 3
    assert sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_non_retryable_status_returned_immediately(sleeps):
    session = FakeSession([FakeResponse(404, 'not found')])
    response = await fetch_with_retry(session, 'https://api.example/events/1/')
    assert response.status == 404
    assert not response.ok
    assert len(session.requests) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_retryable_status_exhausted_returns_last_response(sleeps):
    session = FakeSession([FakeResponse(502)])
    response = await fetch_with_retry(session, 'https://api.example/', max_retries=3, retry_delay=0.5)
    assert response.status == 502
    assert len(session.requests) == 4
    assert sleeps == [0.5, 1.0, 2.0]


@pytest.mark.asyncio
async def test_network_error_retried(sleeps):
    session = FakeSession([connection_error(), asyncio.TimeoutError(), FakeResponse(200, [])])
    response = await fetch_with_retry(session, 'https://api.example/')
    assert response.ok
    assert len(session.requests) == 3


@pytest.mark.asyncio
async def test_network_error_exhausted_raises(sleeps):
    session = FakeSession([connection_error()])
    with pytest.raises(UpstreamUnavailableError) as exc:
        await fetch_with_retry(session, 'https://api.example/', max_retries=2)
    assert len(session.requests) == 3
    assert exc.value.url == 'https://api.example/'


@pytest.mark.asyncio
async def test_zero_retries(sleeps):
    session = FakeSession([FakeResponse(503)])
    response = await fetch_with_retry(session, 'https://api.example/', max_retries=0)
    assert response.status == 503
    assert sleeps == []


def test_expand_statuses():
    assert expand_statuses(['all']) == ['upcoming', 'inProgress', 'past']
    assert expand_statuses([]) == ['upcoming', 'inProgress', 'past']
    assert expand_statuses(['past']) == ['past']


def test_paginate_standings():
    rows = [StandingEntry(rank=i) for i in range(1, 6)]
    page = paginate_standings(rows, 2, 2)
    assert [r.rank for r in page.results] == [3, 4]
    assert page.total == 5
    assert page.next_page == 3
    assert page.previous_page == 1
    last = paginate_standings(rows, 3, 2)
    assert last.next_page is None
    assert [r.rank for r in last.results] == [5]


@pytest.mark.asyncio
async def test_fetch_events_sends_game_slug_and_parses(sleeps):
    session = FakeSession([FakeResponse(200, {
        'count': 1,
        'page_size': 100,
        'current_page_number': 1,
        'next_page_number': None,
        'results': [{
            'id': 11,
            'name': 'Weekly',
            'start_datetime': '2025-02-01T18:00:00Z',
            'display_status': 'past',
            'store': {'id': 3, 'name': 'Dragon Games'},
        }],
    })])
    client = PlayHubClient(session, 'https://api.example/hydraproxy/api/v2/', game_slug='lorcana')

    page = await client.fetch_events({'display_statuses': ['past'], 'page': 1, 'page_size': 100})

    request = session.requests[0]
    assert request['url'] == 'https://api.example/hydraproxy/api/v2/events/'
    assert ('game_slug', 'lorcana') in request['params']
    assert ('display_statuses', 'past') in request['params']
    assert page.count == 1
    assert page.results[0].store.name == 'Dragon Games'
    assert page.results[0].is_completed


@pytest.mark.asyncio
async def test_error_status_raises_api_error(sleeps):
    client = PlayHubClient(FakeSession([FakeResponse(404, 'missing')]), 'https://api.example')
    with pytest.raises(UpstreamAPIError) as exc:
        await client.fetch_event_details(5)
    assert exc.value.status == 404
    assert exc.value.user_message == "API error: 404"


@pytest.mark.asyncio
async def test_round_standings_fall_back_to_unpaginated(sleeps):
    session = FakeSession(routes={
        '/standings/paginated/': [FakeResponse(200, {'results': [], 'total': 0})],
        '/standings/': [FakeResponse(200, {'standings': [
            {'rank': 1, 'player_name': 'Ann', 'record': '3-0'},
            {'rank': 2, 'player_name': 'Bob', 'record': '2-1'},
            {'rank': 3, 'player_name': 'Cy', 'record': '1-2'},
        ]})],
    })
    client = PlayHubClient(session, 'https://api.example')

    page = await client.fetch_round_standings(77, page=1, page_size=2)

    assert [s.player_name for s in page.results] == ['Ann', 'Bob']
    assert page.total == 3
    assert page.next_page == 2


@pytest.mark.asyncio
async def test_round_standings_empty_when_fallback_fails(sleeps):
    session = FakeSession(routes={
        '/standings/paginated/': [FakeResponse(200, {'results': [], 'total': 0})],
        '/standings/': [FakeResponse(500, 'err')],
    })
    client = PlayHubClient(session, 'https://api.example', max_retries=0)

    page = await client.fetch_round_standings(77)

    assert page.results == []
    assert page.total == 0


@pytest.mark.asyncio
async def test_paginated_standings_used_when_present(sleeps):
    session = FakeSession(routes={
        '/standings/paginated/': [FakeResponse(200, {
            'results': [{'rank': 1, 'player': {'id': 4, 'best_identifier': 'Dee'}, 'wins': 3, 'losses': 0}],
            'total': 1,
            'count': 1,
            'page_size': 50,
            'current_page_number': 1,
        })],
    })
    client = PlayHubClient(session, 'https://api.example')

    page = await client.fetch_round_standings(77, page_size=50)

    assert page.results[0].player_id == 4
    assert len(session.requests) == 1


@pytest.mark.asyncio
async def test_fetch_events_expands_all_statuses(sleeps):
    session = FakeSession([FakeResponse(200, {'count': 0, 'results': []})])
    client = PlayHubClient(session, 'https://api.example')

    page = await client.fetch_events({'display_statuses': ['all'], 'page': 1, 'page_size': 25})

    statuses = [v for k, v in session.requests[0]['params'] if k == 'display_statuses']
    assert statuses == ['upcoming', 'inProgress', 'past']
    assert page.results == []


@pytest.mark.asyncio
async def test_fetch_store_details(sleeps):
    session = FakeSession([FakeResponse(200, {
        'id': 'gs-9',
        'store': {'id': 42, 'name': 'Dragon Games', 'city': 'Portland', 'state': 'OR'},
        'distance_in_miles': '3.5',
    })])
    client = PlayHubClient(session, 'https://api.example')

    listing = await client.fetch_store_details('gs-9')

    assert session.requests[0]['url'] == 'https://api.example/game-stores/gs-9/'
    assert listing.store.id == 42
    assert listing.distance_in_miles == 3.5


@pytest.mark.asyncio
@pytest.mark.parametrize('body', ['<html>cloudflare</html>', [1, 2], '"just a string"'])
async def test_unexpected_body_raises_api_error(sleeps, body):
    client = PlayHubClient(FakeSession([FakeResponse(200, body)]), 'https://api.example')
    with pytest.raises(UpstreamAPIError) as exc:
        await client.fetch_events({'page': 1, 'page_size': 25})
    assert exc.value.status == 200
    assert exc.value.user_message == "API error: 200"


@pytest.mark.asyncio
async def test_round_standings_fallback_with_html_body_is_empty(sleeps):
    session = FakeSession(routes={
        '/standings/paginated/': [FakeResponse(200, {'results': [], 'total': 0})],
        '/standings/': [FakeResponse(200, '<html>cloudflare</html>')],
    })
    client = PlayHubClient(session, 'https://api.example')

    page = await client.fetch_round_standings(77)

    assert page.results == []


@pytest.mark.asyncio
async def test_fetch_event_registrations(sleeps):
    session = FakeSession([FakeResponse(200, {
        'total': 2,
        'count': 2,
        'page_size': 10,
        'current_page_number': 1,
        'next_page_number': None,
        'results': [
            {'id': 1, 'player': {'id': 4, 'best_identifier': 'Dee'}, 'registration_status': 'REGISTERED'},
            {'id': 2, 'player': {'id': 5, 'best_identifier': 'Eve'},
             'user_event_status': {'best_identifier': 'EveTCG'}},
        ],
    })])
    client = PlayHubClient(session, 'https://api.example')

    page = await client.fetch_event_registrations(9, page=1, page_size=10)

    assert session.requests[0]['url'] == 'https://api.example/events/9/registrations/'
    assert ('page_size', '10') in session.requests[0]['params']
    assert page.total == 2
    assert [r.display_name for r in page.results] == ['Dee', 'EveTCG']
    assert page.results[0].status == 'REGISTERED'


@pytest.mark.asyncio
async def test_fetch_round_matches(sleeps):
    session = FakeSession([FakeResponse(200, {
        'total': 2,
        'count': 2,
        'results': [
            {
                'id': 30,
                'table_number': 1,
                'status': 'COMPLETE',
                'winning_player': 4,
                'player_match_relationships': [
                    {'player': {'id': 4, 'best_identifier': 'Dee'}, 'games_won': 2},
                    {'player': {'id': 5, 'best_identifier': 'Eve'}, 'games_won': 1},
                ],
            },
            {'id': 31, 'table_number': 2, 'players': [{'id': 6, 'best_identifier': 'Fay'}]},
        ],
    })])
    client = PlayHubClient(session, 'https://api.example')

    page = await client.fetch_round_matches(77)

    assert session.requests[0]['url'] == 'https://api.example/tournament-rounds/77/matches/paginated/'
    first, second = page.results
    assert [p.identifier for p in first.players] == ['Dee', 'Eve']
    assert first.winning_player_id == 4
    assert first.players[0].games_won == 2
    assert not first.is_bye
    assert second.is_bye
    assert page.total == 2


@pytest.mark.asyncio
async def test_card_searches_post_query_and_game(sleeps):
    session = FakeSession(routes={
        '/quick-search/': [FakeResponse(200, {'count': 1, 'results': [{'id': 'c1', 'name': 'Elsa', 'subtitle': 'Snow Queen'}]})],
        '/search-with-filters/': [FakeResponse(200, {'count': 40, 'results': [{'id': 'c2', 'name': 'Elsa'}]})],
    })
    client = PlayHubClient(session, 'https://api.example', game_id=3)

    quick = await client.search_cards_quick('elsa')
    full = await client.search_cards_with_filters('elsa', limit=10, offset=20)

    quick_request, full_request = session.requests
    assert quick_request['method'] == 'POST'
    assert quick_request['url'] == 'https://api.example/deckbuilder/cards/quick-search/'
    assert quick_request['json'] == {'query': 'elsa', 'game_id': 3}
    assert full_request['json'] == {'query': 'elsa', 'game_id': 3, 'limit': 10, 'offset': 20}
    assert quick.results[0].title == 'Elsa - Snow Queen'
    assert (full.count, full.limit, full.offset) == (40, 10, 20)
    assert full.has_more


@pytest.mark.asyncio
async def test_fetch_card_by_id_quotes_id(sleeps):
    session = FakeSession([FakeResponse(200, {
        'id': 'set 1/42',
        'name': 'Elsa',
        'display_name': 'Elsa - Spirit of Winter',
        'rarity': {'name': 'Legendary'},
        'card_set': {'name': 'The First Chapter'},
        'cost': '8',
    })])
    client = PlayHubClient(session, 'https://api.example')

    card = await client.fetch_card_by_id('set 1/42')

    assert session.requests[0]['url'] == 'https://api.example/deckbuilder/cards/set%201%2F42/'
    assert card.title == 'Elsa - Spirit of Winter'
    assert (card.rarity, card.set_name, card.cost) == ('Legendary', 'The First Chapter', 8)


@pytest.mark.asyncio
async def test_card_search_error_status_raises(sleeps):
    client = PlayHubClient(FakeSession([FakeResponse(400, 'bad query')]), 'https://api.example')
    with pytest.raises(UpstreamAPIError):
        await client.search_cards_quick('')
