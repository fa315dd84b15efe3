"""
City geocoding via OpenStreetMap Nominatim with an in-memory TTL cache.

Results are cached for 10 minutes to respect Nominatim's rate limits and to
avoid duplicate lookups when several searches name the same city.
"""

import logging
from typing import Optional

import aiohttp

from playhub_bot.api.http import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY, fetch_with_retry
from playhub_bot.constants import CacheConstants
from playhub_bot.data_models.search import GeoLocation
from playhub_bot.services.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


class GeocodingService:
    """Resolves city names to coordinates."""
    
    def __init__(
        self,
        session: aiohttp.ClientSession,
        cache: Optional[TTLCache] = None,
        *,
        url: str = 'https://nominatim.openstreetmap.org/search',
        user_agent: str = 'playhub-leaderboard-bot/1.0',
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        debug: bool = False,
    ):
        self.session = session
        self.cache = cache if cache is not None else TTLCache(max_size=CacheConstants.GEOCODE_MAX_CACHE_SIZE)
        self.url = url
        self.user_agent = user_agent
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.debug = debug
    
    async def geocode_city(self, city: str) -> Optional[GeoLocation]:
        """
        Geocode a city or place name.
        
        Returns:
            GeoLocation, or None when the place is not found
            
        Raises:
            UpstreamUnavailableError: Nominatim unreachable after retries
        """
        cache_key = f"geocode:{city.lower()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached
        
        response = await fetch_with_retry(
            self.session,
            self.url,
            params={'q': city, 'format': 'json', 'limit': 1},
            headers={'User-Agent': self.user_agent},
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            debug=self.debug,
        )
        if not response.ok:
            logger.warning(f"Geocoding '{city}' failed with status {response.status}")
            return None
        
        try:
            data = response.json() or []
        except ValueError:
            logger.warning(f"Geocoding '{city}' returned a non-JSON body")
            return None
        if not isinstance(data, list):
            logger.warning(f"Unexpected geocoding payload for '{city}': {type(data).__name__}")
            return None
        if not data:
            logger.info(f"No geocoding result for '{city}'")
            return None
        
        first = data[0]
        try:
            location = GeoLocation(
                lat=float(first['lat']),
                lon=float(first['lon']),
                display_name=first.get('display_name') or city,
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed geocoding result for '{city}': {e}")
            return None
        
        self.cache.set(cache_key, location, CacheConstants.GEOCODE_TTL)
        return location
