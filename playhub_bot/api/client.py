"""
PlayHub API client for events, tournament rounds, stores and cards.

Raw endpoint access only: every call goes upstream, returns typed records
and raises ``UpstreamAPIError`` on a non-success response or a body that is
not a JSON object. Caching and error-to-result mapping are the services
layer's job.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import quote

import aiohttp

from playhub_bot.api.http import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    FetchResponse,
    ParamValue,
    fetch_with_retry,
)
from playhub_bot.constants import SearchConstants
from playhub_bot.data_models.card import Card, CardsPage
from playhub_bot.data_models.event import (
    Event,
    EventRegistration,
    EventsPage,
    GameStore,
    Match,
    MatchesPage,
    RegistrationsPage,
    StandingEntry,
    StandingsPage,
    StoresPage,
)
from playhub_bot.utils.exceptions import PlayHubException, UpstreamAPIError

logger = logging.getLogger(__name__)


def expand_statuses(statuses: Iterable[str]) -> List[str]:
    """Expand ``all`` (or nothing) to every concrete display status."""
    statuses = list(statuses)
    if not statuses or 'all' in statuses:
        return list(SearchConstants.EVENT_STATUSES)
    return [s for s in statuses if s != 'all']


def paginate_standings(standings: List[StandingEntry], page: int, page_size: int) -> StandingsPage:
    """Slice a full standings list into the paginated response shape."""
    page = max(1, page)
    page_size = max(1, page_size)
    total = len(standings)
    start = (page - 1) * page_size
    results = standings[start:start + page_size]
    total_pages = max(1, math.ceil(total / page_size))
    return StandingsPage(
        results=results,
        count=len(results),
        total=total,
        page_size=page_size,
        current_page=page,
        next_page=page + 1 if page < total_pages else None,
        previous_page=page - 1 if 1 < page <= total_pages else None,
    )


class PlayHubClient:
    """Async client over the PlayHub REST API."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_base: str,
        *,
        game_slug: str = 'disney-lorcana',
        game_id: int = 1,
        referer: str = 'https://tcg.ravensburgerplay.com/',
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        debug: bool = False,
    ):
        self.session = session
        self.api_base = api_base.rstrip('/')
        self.game_slug = game_slug
        self.game_id = game_id
        self.headers = {
            'Content-Type': 'application/json',
            'Referer': referer,
        }
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.debug = debug

    async def _get(self, path: str, params: Optional[Mapping[str, ParamValue]] = None) -> FetchResponse:
        url = f"{self.api_base}/{path.lstrip('/')}"
        return await fetch_with_retry(
            self.session,
            url,
            params=params,
            headers=self.headers,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            debug=self.debug,
        )

    async def _get_json(self, path: str, params: Optional[Mapping[str, ParamValue]] = None) -> Dict[str, Any]:
        response = await self._get(path, params)
        return self._json_object(response)

    async def _post_json(self, path: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        url = f"{self.api_base}/{path.lstrip('/')}"
        response = await fetch_with_retry(
            self.session,
            url,
            method='POST',
            headers=self.headers,
            json=dict(payload),
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            debug=self.debug,
        )
        return self._json_object(response)

    @staticmethod
    def _json_object(response: FetchResponse) -> Dict[str, Any]:
        """Decode a success response whose body must be a JSON object."""
        if not response.ok:
            raise UpstreamAPIError(response.status, response.url, response.body[:200])
        try:
            data = response.json()
        except ValueError:
            raise UpstreamAPIError(response.status, response.url, "invalid JSON")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise UpstreamAPIError(response.status, response.url, "invalid JSON")
        return data

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def fetch_events(self, filters: Mapping[str, ParamValue]) -> EventsPage:
        """
        Fetch one page of events.

        ``filters`` are passed through as query params on top of the game slug,
        e.g. ``latitude``/``longitude``/``num_miles`` or ``store_id``,
        ``display_statuses``, ``start_date_after``, ``page`` and ``page_size``.
        """
        params: Dict[str, ParamValue] = {'game_slug': self.game_slug}
        params.update(filters)
        if 'display_statuses' in params:
            params['display_statuses'] = expand_statuses(params['display_statuses'] or [])
        if self.debug:
            logger.debug(f"fetch_events params={params}")
        data = await self._get_json('events/', params)
        page = EventsPage(
            results=[Event.from_api(e) for e in data.get('results') or []],
            count=int(data.get('count') or 0),
            page_size=int(data.get('page_size') or params.get('page_size') or 0),
            current_page=int(data.get('current_page_number') or params.get('page') or 1),
            next_page=data.get('next_page_number'),
        )
        if self.debug:
            logger.debug(f"fetch_events count={page.count} results={len(page.results)}")
        return page

    async def fetch_event_details(self, event_id: int) -> Event:
        data = await self._get_json(f'events/{event_id}/')
        return Event.from_api(data)

    async def fetch_event_registrations(self, event_id: int, page: int = 1, page_size: int = 25) -> RegistrationsPage:
        page = max(1, page)
        page_size = max(1, page_size)
        data = await self._get_json(
            f'events/{event_id}/registrations/',
            {'page': page, 'page_size': page_size},
        )
        results = [EventRegistration.from_api(r) for r in data.get('results') or []]
        return RegistrationsPage(
            results=results,
            count=int(data.get('count') or len(results)),
            total=int(data.get('total') or data.get('count') or 0),
            page_size=int(data.get('page_size') or page_size),
            current_page=int(data.get('current_page_number') or page),
            next_page=data.get('next_page_number'),
        )

    # ------------------------------------------------------------------
    # Tournament rounds
    # ------------------------------------------------------------------

    async def fetch_round_standings(self, round_id: int, page: int = 1, page_size: int = 25) -> StandingsPage:
        """
        Fetch one page of standings for a round.

        Some older events return an empty paginated response while the
        unpaginated endpoint has data; in that case the full list is fetched
        and paginated locally.
        """
        page = max(1, page)
        page_size = max(1, page_size)
        data = await self._get_json(
            f'tournament-rounds/{round_id}/standings/paginated/',
            {'page': page, 'page_size': page_size},
        )
        results = [StandingEntry.from_api(s) for s in data.get('results') or []]
        total = int(data.get('total') or 0)

        if not results and total == 0:
            try:
                full = await self.fetch_round_standings_unpaginated(round_id)
            except PlayHubException as e:
                logger.debug(f"Unpaginated standings fallback failed for round {round_id}: {e}")
                full = []
            if full:
                return paginate_standings(full, page, page_size)

        return StandingsPage(
            results=results,
            count=int(data.get('count') or len(results)),
            total=total,
            page_size=int(data.get('page_size') or page_size),
            current_page=int(data.get('current_page_number') or page),
            next_page=data.get('next_page_number'),
            previous_page=data.get('previous_page_number'),
        )

    async def fetch_round_standings_unpaginated(self, round_id: int) -> List[StandingEntry]:
        response = await self._get(f'tournament-rounds/{round_id}/standings/')
        if not response.ok:
            return []
        payload = self._json_object(response)
        return [StandingEntry.from_api(s) for s in payload.get('standings') or []]

    async def fetch_round_matches(self, round_id: int, page: int = 1, page_size: int = 25) -> MatchesPage:
        """Fetch one page of a round's pairings."""
        page = max(1, page)
        page_size = max(1, page_size)
        data = await self._get_json(
            f'tournament-rounds/{round_id}/matches/paginated/',
            {'page': page, 'page_size': page_size},
        )
        results = [Match.from_api(m) for m in data.get('results') or []]
        return MatchesPage(
            results=results,
            count=int(data.get('count') or len(results)),
            total=int(data.get('total') or data.get('count') or 0),
            page_size=int(data.get('page_size') or page_size),
            current_page=int(data.get('current_page_number') or page),
            next_page=data.get('next_page_number'),
        )

    # ------------------------------------------------------------------
    # Stores
    # ------------------------------------------------------------------

    async def fetch_stores(
        self,
        *,
        search: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        radius_miles: Optional[float] = None,
        page: int = 1,
        page_size: int = 25,
    ) -> StoresPage:
        params: Dict[str, ParamValue] = {
            'game_id': self.game_id,
            'page': page,
            'page_size': page_size,
            'search': search,
        }
        if latitude is not None and longitude is not None:
            params['latitude'] = latitude
            params['longitude'] = longitude
            params['num_miles'] = radius_miles
        data = await self._get_json('game-stores/', params)
        return StoresPage(
            results=[GameStore.from_api(s) for s in data.get('results') or []],
            count=int(data.get('count') or 0),
            page_size=int(data.get('page_size') or page_size),
            current_page=int(data.get('current_page_number') or page),
            next_page=data.get('next_page_number'),
        )

    async def fetch_store_details(self, store_id: str) -> GameStore:
        data = await self._get_json(f'game-stores/{store_id}/')
        return GameStore.from_api(data)

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    async def search_cards_quick(self, query: str) -> CardsPage:
        """Name search used for suggestions; the server picks the result size."""
        data = await self._post_json(
            'deckbuilder/cards/quick-search/',
            {'query': query, 'game_id': self.game_id},
        )
        results = [Card.from_api(c) for c in data.get('results') or []]
        return CardsPage(results=results, count=int(data.get('count') or len(results)))

    async def search_cards_with_filters(self, query: str, limit: int = 50, offset: int = 0) -> CardsPage:
        limit = max(1, limit)
        offset = max(0, offset)
        data = await self._post_json(
            'deckbuilder/cards/search-with-filters/',
            {'query': query, 'game_id': self.game_id, 'limit': limit, 'offset': offset},
        )
        results = [Card.from_api(c) for c in data.get('results') or []]
        return CardsPage(
            results=results,
            count=int(data.get('count') or len(results)),
            limit=limit,
            offset=offset,
        )

    async def fetch_card_by_id(self, card_id: str) -> Card:
        data = await self._get_json(f"deckbuilder/cards/{quote(str(card_id), safe='')}/")
        return Card.from_api(data)
