"""
Base service class for the PlayHub leaderboard bot.

Provides read-through caching over an injected ``TTLCache`` for all service
layer operations that wrap upstream calls.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from playhub_bot.services.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

V = TypeVar('V')


class BaseService:
    """Base class for services backed by an upstream client and a cache."""
    
    def __init__(self, client, cache: Optional[TTLCache] = None):
        """
        Initialize base service.
        
        Args:
            client: PlayHubClient (or a compatible fake in tests)
            cache: Cache instance owned by the host application; a private
                unbounded cache is created when omitted
        """
        self.client = client
        self.cache = cache if cache is not None else TTLCache()
    
    async def cached(
        self,
        key: str,
        loader: Callable[[], Awaitable[V]],
        ttl: Union[float, Callable[[V], float]],
        cache: Optional[TTLCache] = None,
        should_cache: Optional[Callable[[V], bool]] = None,
    ) -> V:
        """
        Return the cached value for ``key`` or load, store and return it.
        
        Args:
            key: Cache key
            loader: Coroutine factory producing the fresh value
            ttl: Seconds, or a function of the loaded value returning seconds
            cache: Cache to use instead of the service default
            should_cache: Predicate deciding whether a loaded value is stored
        """
        cache = cache if cache is not None else self.cache
        hit = cache.get(key)
        if hit is not None:
            logger.debug(f"Cache hit for {key}")
            return hit
        
        logger.debug(f"Cache miss for {key}, fetching fresh")
        value = await loader()
        if should_cache is None or should_cache(value):
            cache.set(key, value, ttl(value) if callable(ttl) else ttl)
        return value
