"""
Bot-wide constants for the PlayHub leaderboard bot.

Groups the TTLs, caps and defaults used by the services so the numbers
live in one place instead of being scattered through the code.
"""

class CacheConstants:
    """Constants for caching behavior (seconds / entry counts)."""
    
    # Completed events and their rounds never change
    PAST_EVENT_TTL = 7 * 24 * 60 * 60
    
    # In-progress and upcoming data is volatile
    LIVE_EVENT_TTL = 60
    
    SEARCH_TTL = 5 * 60
    GEOCODE_TTL = 10 * 60
    CARD_TTL = 24 * 60 * 60
    
    DEFAULT_MAX_CACHE_SIZE = 1000
    GEOCODE_MAX_CACHE_SIZE = 500

class LeaderboardConstants:
    """Limits and defaults for cross-event player leaderboards."""
    
    MAX_DATE_RANGE_DAYS = 366
    MAX_RADIUS_MILES = 100
    DEFAULT_RADIUS_MILES = 50
    MAX_LIMIT = 100
    DEFAULT_LIMIT = 20
    DEFAULT_MIN_EVENTS = 1
    
    EVENTS_PAGE_SIZE = 100
    STANDINGS_PAGE_SIZE = 100
    EVENT_STANDINGS_CONCURRENCY = 8
    
    # Statuses that can carry standings
    STANDINGS_STATUSES = ('past', 'inProgress')
    
    SORT_TOTAL_WINS = 'total_wins'
    SORT_EVENTS_PLAYED = 'events_played'
    SORT_WIN_RATE = 'win_rate'
    SORT_BEST_PLACEMENT = 'best_placement'
    SORT_KEYS = (SORT_TOTAL_WINS, SORT_EVENTS_PLAYED, SORT_WIN_RATE, SORT_BEST_PLACEMENT)
    
    SORT_LABELS = {
        SORT_TOTAL_WINS: 'Total Wins',
        SORT_EVENTS_PLAYED: 'Events Played',
        SORT_WIN_RATE: 'Win Rate',
        SORT_BEST_PLACEMENT: 'Best Placement',
    }

class StandingsConstants:
    """Round standings status classification and player identity."""
    
    AUTHORITATIVE_STATUSES = frozenset({'completed', 'final', 'published', 'closed'})
    PROVISIONAL_STATUSES = frozenset({'pending', 'in_progress', 'in progress'})
    
    PRIORITY_AUTHORITATIVE = 0
    PRIORITY_NEUTRAL = 1
    PRIORITY_PROVISIONAL = 2
    
    DEFAULT_PAGE_SIZE = 50

    # Paging limits when fetching every standing of a round
    FULL_ROUND_PAGE_SIZE = 100
    FULL_ROUND_MAX_PAGES = 50
    
    # Key/name used when a row carries no usable identity
    UNKNOWN_PLAYER = '—'

class SearchConstants:
    """Defaults for event and store searches."""
    
    EVENT_STATUSES = ('upcoming', 'inProgress', 'past')
    DEFAULT_EVENT_STATUSES = ('upcoming', 'inProgress')
    DEFAULT_EVENT_RADIUS_MILES = 25
    DEFAULT_STORE_RADIUS_MILES = 50
    DEFAULT_PAGE_SIZE = 25

class UIConstants:
    """Constants for Discord UI elements."""
    
    # Embed colors
    LEADERBOARD_COLOR = 0xF1C40F
    EVENTS_COLOR = 0x3498DB
    ERROR_COLOR = 0xE74C3C
    
    LEADERBOARD_PAGE_SIZE = 10
    MAX_EVENTS_LISTED = 10
    MAX_STANDINGS_LISTED = 16
    MAX_PAIRINGS_LISTED = 20
    MAX_REGISTRATIONS_LISTED = 30
    MAX_CARDS_LISTED = 10
    VIEW_TIMEOUT_SECONDS = 900
