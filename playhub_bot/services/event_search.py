"""
Event and store search for the PlayHub leaderboard bot.

Page-fetchers for events by coordinates, city and store, and for stores,
each cached for five minutes. Upstream failures are returned as
``Failure`` results instead of being raised.
"""

import logging
from typing import Dict, Optional, Sequence

from playhub_bot.constants import CacheConstants, SearchConstants
from playhub_bot.data_models.event import EventsPage, GameStore
from playhub_bot.data_models.result import Failure, Result, Success
from playhub_bot.data_models.search import EventSearchPage, GeoLocation, StoreSearchPage
from playhub_bot.services.base import BaseService
from playhub_bot.utils.date_range import window_bounds
from playhub_bot.utils.exceptions import LocationNotFoundError, PlayHubException, UpstreamAPIError

logger = logging.getLogger(__name__)


def _cache_key(prefix: str, *parts) -> str:
    return f"{prefix}:" + '|'.join('' if p is None else str(p) for p in parts)


class EventSearchService(BaseService):
    """Cached event/store listing accessors."""
    
    def __init__(self, client, geocoder, cache=None):
        super().__init__(client, cache)
        self.geocoder = geocoder
    
    def _event_filters(
        self,
        statuses: Sequence[str],
        start_date: Optional[str],
        end_date: Optional[str],
        page_size: int,
        page: int,
    ) -> Dict:
        after, before = window_bounds(start_date or '', end_date or '')
        return {
            'display_statuses': list(statuses),
            'start_date_after': after if start_date else None,
            'start_date_before': before if end_date else None,
            'page': page,
            'page_size': page_size,
        }
    
    async def _resolve_city(self, city: str) -> GeoLocation:
        geo = await self.geocoder.geocode_city(city)
        if geo is None:
            raise LocationNotFoundError(city)
        return geo
    
    @staticmethod
    def _to_search_page(page: EventsPage, location: str) -> EventSearchPage:
        return EventSearchPage(
            events=page.results,
            location=location,
            total=page.count,
            current_page=page.current_page,
            next_page=page.next_page,
            page_size=page.page_size,
        )
    
    @staticmethod
    def _failure(error: PlayHubException) -> Failure:
        if isinstance(error, UpstreamAPIError):
            logger.warning(f"Upstream error during search: {error}")
        else:
            logger.info(f"Search failed: {error}")
        return Failure(error.user_message)
    
    async def search_events_by_coords(
        self,
        latitude: float,
        longitude: float,
        location_label: Optional[str] = None,
        radius_miles: float = SearchConstants.DEFAULT_EVENT_RADIUS_MILES,
        statuses: Sequence[str] = SearchConstants.DEFAULT_EVENT_STATUSES,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page_size: int = SearchConstants.DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> Result[EventSearchPage]:
        """Fetch one page of events within ``radius_miles`` of a point."""
        key = _cache_key(
            'eventsByCoords', f"{latitude:.4f}", f"{longitude:.4f}", radius_miles,
            ','.join(statuses), start_date, end_date, page_size, page,
        )
        filters = self._event_filters(statuses, start_date, end_date, page_size, page)
        filters.update({'latitude': latitude, 'longitude': longitude, 'num_miles': radius_miles})
        label = location_label or f"{latitude},{longitude}"
        
        async def load():
            return self._to_search_page(await self.client.fetch_events(filters), label)
        
        try:
            return Success(await self.cached(key, load, CacheConstants.SEARCH_TTL))
        except PlayHubException as e:
            return self._failure(e)
    
    async def search_events_by_city(
        self,
        city: str,
        radius_miles: float = SearchConstants.DEFAULT_EVENT_RADIUS_MILES,
        statuses: Sequence[str] = SearchConstants.DEFAULT_EVENT_STATUSES,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page_size: int = SearchConstants.DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> Result[EventSearchPage]:
        """Geocode ``city`` and fetch one page of nearby events."""
        key = _cache_key(
            'eventsByCity', city.lower(), radius_miles, ','.join(statuses),
            start_date, end_date, page_size, page,
        )
        cached = self.cache.get(key)
        if cached is not None:
            return Success(cached)
        
        try:
            geo = await self._resolve_city(city)
        except PlayHubException as e:
            return self._failure(e)
        
        result = await self.search_events_by_coords(
            geo.lat, geo.lon,
            location_label=geo.display_name,
            radius_miles=radius_miles,
            statuses=statuses,
            start_date=start_date,
            end_date=end_date,
            page_size=page_size,
            page=page,
        )
        if result.ok:
            self.cache.set(key, result.value, CacheConstants.SEARCH_TTL)
        return result
    
    async def search_events_by_store(
        self,
        store_id: int,
        store_label: Optional[str] = None,
        statuses: Sequence[str] = SearchConstants.DEFAULT_EVENT_STATUSES,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page_size: int = SearchConstants.DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> Result[EventSearchPage]:
        """Fetch one page of events hosted by a store."""
        key = _cache_key(
            'eventsByStore', store_id, store_label, ','.join(statuses),
            start_date, end_date, page_size, page,
        )
        filters = self._event_filters(statuses, start_date, end_date, page_size, page)
        filters['store_id'] = store_id
        
        async def load():
            page_data = await self.client.fetch_events(filters)
            first_store = next((e.store.name for e in page_data.results if e.store and e.store.name), None)
            label = store_label or first_store or f"Store {store_id}"
            return self._to_search_page(page_data, label)
        
        try:
            return Success(await self.cached(key, load, CacheConstants.SEARCH_TTL))
        except PlayHubException as e:
            return self._failure(e)
    
    async def search_stores(
        self,
        query: Optional[str] = None,
        city: Optional[str] = None,
        radius_miles: float = SearchConstants.DEFAULT_STORE_RADIUS_MILES,
        page_size: int = SearchConstants.DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> Result[StoreSearchPage]:
        """Search stores by name and/or proximity to a city."""
        key = _cache_key(
            'stores', (query or '').lower(), (city or '').lower(), radius_miles, page_size, page,
        )
        
        async def load():
            geo = await self._resolve_city(city) if city else None
            stores_page = await self.client.fetch_stores(
                search=query,
                latitude=geo.lat if geo else None,
                longitude=geo.lon if geo else None,
                radius_miles=radius_miles if geo else None,
                page=page,
                page_size=page_size,
            )
            return StoreSearchPage(
                stores=stores_page.results,
                total=stores_page.count,
                current_page=stores_page.current_page,
                next_page=stores_page.next_page,
                page_size=stores_page.page_size,
                location=geo.display_name if geo else None,
            )
        
        try:
            return Success(await self.cached(key, load, CacheConstants.SEARCH_TTL))
        except PlayHubException as e:
            return self._failure(e)
    
    async def get_store(self, game_store_id: str) -> Result[GameStore]:
        """Store listing details by game-store id, cached like searches."""
        try:
            store = await self.cached(
                _cache_key('store', game_store_id),
                lambda: self.client.fetch_store_details(str(game_store_id)),
                CacheConstants.SEARCH_TTL,
            )
        except PlayHubException as e:
            return self._failure(e)
        return Success(store)
