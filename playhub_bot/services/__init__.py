"""
Services package for the PlayHub leaderboard bot.

Cached upstream accessors, standings resolution and leaderboard aggregation.
"""

from .base import BaseService
from .ttl_cache import TTLCache
from .geocoding import GeocodingService
from .event_search import EventSearchService
from .standings import StandingsService
from .leaderboard import LeaderboardService
from .rate_limiter import SimpleRateLimiter

__all__ = [
    'BaseService',
    'TTLCache',
    'GeocodingService',
    'EventSearchService',
    'StandingsService',
    'LeaderboardService',
    'SimpleRateLimiter',
]
