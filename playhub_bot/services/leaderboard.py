"""
Leaderboard service for cross-event player rankings.

Builds a player leaderboard for a city (geocoded, within a radius) or a
store over a date window: pages through every past/in-progress event in
scope, resolves each event's standings with bounded concurrency, then
aggregates wins, losses and placements per player and ranks them.

Expected failures (bad dates, unknown city, no events, upstream errors on
the event listing) come back as ``Failure`` results, never as exceptions.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from playhub_bot.constants import LeaderboardConstants
from playhub_bot.data_models.event import Event, EventStandings
from playhub_bot.data_models.leaderboard import (
    DateRange,
    EventSummary,
    LeaderboardFilters,
    LeaderboardResult,
    PlayerStats,
)
from playhub_bot.data_models.result import Failure, Result, Success
from playhub_bot.data_models.search import EventSearchPage
from playhub_bot.utils.date_range import validate_date_range
from playhub_bot.utils.exceptions import PlayHubException
from playhub_bot.utils.standings import UNKNOWN_PLAYER, normalize_standing

logger = logging.getLogger(__name__)


def _clamp(value, low, high):
    return min(high, max(low, value))


def total_round_count(event: Event) -> int:
    """Rounds summed across all phases."""
    return event.total_rounds


def filter_by_min_rounds(
    event_standings: Sequence[EventStandings],
    min_rounds: Optional[int],
) -> List[EventStandings]:
    """Drop events with fewer than ``min_rounds`` rounds in total."""
    if not min_rounds:
        return list(event_standings)
    return [es for es in event_standings if total_round_count(es.event) >= min_rounds]


@dataclass
class _PlayerAccumulator:
    display_name: str
    has_event_status_name: bool
    wins: int = 0
    losses: int = 0
    events_played: int = 0
    placements: List[int] = field(default_factory=list)


SORT_KEYS: Dict[str, Callable[[PlayerStats], Tuple]] = {
    LeaderboardConstants.SORT_TOTAL_WINS: lambda p: (
        -p.total_wins, p.total_losses, p.best_placement,
    ),
    LeaderboardConstants.SORT_EVENTS_PLAYED: lambda p: (
        -p.events_played, -p.total_wins, p.total_losses, p.best_placement,
    ),
    LeaderboardConstants.SORT_WIN_RATE: lambda p: (
        -p.win_rate, -p.total_wins, p.total_losses, p.best_placement,
    ),
    LeaderboardConstants.SORT_BEST_PLACEMENT: lambda p: (
        p.best_placement, -p.total_wins, p.total_losses,
    ),
}


def sort_players(players: Sequence[PlayerStats], sort_by: str) -> List[PlayerStats]:
    """
    Sort players by the requested key with deterministic tie-breaks.
    
    Remaining full ties fall back to the player name, then to input order
    (which ``aggregate_standings`` fixes by player key), so the result does
    not depend on the order events were aggregated in.
    """
    key = SORT_KEYS.get(sort_by, SORT_KEYS[LeaderboardConstants.SORT_BEST_PLACEMENT])
    return sorted(players, key=lambda p: key(p) + (p.player_name,))


def aggregate_standings(
    event_standings: Sequence[EventStandings],
    min_events: int = LeaderboardConstants.DEFAULT_MIN_EVENTS,
    sort_by: str = LeaderboardConstants.SORT_TOTAL_WINS,
    limit: int = LeaderboardConstants.DEFAULT_LIMIT,
) -> List[PlayerStats]:
    """
    Aggregate per-event standings into a sorted, truncated player list.
    
    Rows whose identity cannot be resolved are skipped. A player's display
    name switches to the per-event handle once one is seen and never goes
    back to the cross-event handle.
    """
    agg: Dict[str, _PlayerAccumulator] = {}
    
    for es in event_standings:
        for index, entry in enumerate(es.standings):
            row = normalize_standing(entry, index)
            if row.player_key == UNKNOWN_PLAYER:
                continue
            rec = agg.get(row.player_key)
            if rec is None:
                rec = _PlayerAccumulator(
                    display_name=row.display_name,
                    has_event_status_name=row.has_event_status_name,
                )
                agg[row.player_key] = rec
            elif row.has_event_status_name and not rec.has_event_status_name:
                rec.display_name = row.display_name
                rec.has_event_status_name = True
            rec.wins += row.wins
            rec.losses += row.losses
            rec.events_played += 1
            rec.placements.append(row.placement)
    
    # Pre-ordered by player key so the stable sort breaks full name ties on it
    players = [
        PlayerStats(
            player_name=rec.display_name,
            total_wins=rec.wins,
            total_losses=rec.losses,
            events_played=rec.events_played,
            best_placement=min(rec.placements),
            first_place_finishes=sum(1 for p in rec.placements if p == 1),
            placements=sorted(rec.placements),
        )
        for _, rec in sorted(agg.items(), key=lambda item: item[0])
        if rec.events_played >= min_events
    ]
    return sort_players(players, sort_by)[:limit]


PageFetcher = Callable[[int], Awaitable[Result[EventSearchPage]]]


class LeaderboardService:
    """Service for city- and store-scoped player leaderboards."""
    
    def __init__(
        self,
        event_search,
        standings_service,
        geocoder,
        *,
        concurrency: int = LeaderboardConstants.EVENT_STANDINGS_CONCURRENCY,
        events_page_size: int = LeaderboardConstants.EVENTS_PAGE_SIZE,
        standings_page_size: int = LeaderboardConstants.STANDINGS_PAGE_SIZE,
        max_date_range_days: int = LeaderboardConstants.MAX_DATE_RANGE_DAYS,
    ):
        self.event_search = event_search
        self.standings_service = standings_service
        self.geocoder = geocoder
        self.concurrency = concurrency
        self.events_page_size = events_page_size
        self.standings_page_size = standings_page_size
        self.max_date_range_days = max_date_range_days
    
    def _validate(self, start_date: str, end_date: str, sort_by: str) -> Optional[str]:
        date_error = validate_date_range(start_date, end_date, self.max_date_range_days)
        if date_error:
            return date_error
        if sort_by not in SORT_KEYS:
            return f"sort_by must be one of: {', '.join(LeaderboardConstants.SORT_KEYS)}."
        return None
    
    async def _collect_events(self, fetch_page: PageFetcher) -> Result[List[Event]]:
        """Page through the event listing until a short page or the reported total."""
        events: List[Event] = []
        page = 1
        while True:
            result = await fetch_page(page)
            if not result.ok:
                return result
            events.extend(result.value.events)
            has_more = (
                len(result.value.events) == self.events_page_size
                and result.value.total > len(events)
            )
            if not has_more:
                return Success(events)
            page += 1
    
    async def _build(
        self,
        events: List[Event],
        start_date: str,
        end_date: str,
        filters: LeaderboardFilters,
        min_events: int,
        min_rounds: Optional[int],
        sort_by: str,
        limit: int,
    ) -> LeaderboardResult:
        event_standings = await self.standings_service.fetch_all_event_standings(
            [e.id for e in events],
            page_size=self.standings_page_size,
            concurrency=self.concurrency,
        )
        filtered = filter_by_min_rounds(event_standings, min_rounds)
        players = aggregate_standings(filtered, min_events, sort_by, limit)
        logger.info(
            f"Leaderboard {filters.city or filters.store}: {len(events)} events found, "
            f"{len(filtered)} analyzed, {len(players)} players returned"
        )
        return LeaderboardResult(
            players=players,
            events_analyzed=len(filtered),
            events_included=[
                EventSummary(id=es.event.id, name=es.event.name, start_date=es.event.start_date)
                for es in filtered
            ],
            date_range=DateRange(start=start_date, end=end_date),
            filters=filters,
            sort_by=sort_by,
        )
    
    async def leaderboard_by_city(
        self,
        city: str,
        start_date: str,
        end_date: str,
        radius_miles: float = LeaderboardConstants.DEFAULT_RADIUS_MILES,
        limit: int = LeaderboardConstants.DEFAULT_LIMIT,
        min_events: int = LeaderboardConstants.DEFAULT_MIN_EVENTS,
        min_rounds: Optional[int] = None,
        sort_by: str = LeaderboardConstants.SORT_TOTAL_WINS,
    ) -> Result[LeaderboardResult]:
        """Player leaderboard for events within ``radius_miles`` of a city."""
        error = self._validate(start_date, end_date, sort_by)
        if error:
            return Failure(error)
        
        radius = _clamp(radius_miles, 0, LeaderboardConstants.MAX_RADIUS_MILES)
        limit = _clamp(limit, 1, LeaderboardConstants.MAX_LIMIT)
        min_events = max(1, min_events)
        
        try:
            geo = await self.geocoder.geocode_city(city)
        except PlayHubException as e:
            logger.warning(f"Geocoding failed for '{city}': {e}")
            return Failure(e.user_message)
        if geo is None:
            return Failure(f"Could not find location: {city}")
        
        async def fetch_page(page: int) -> Result[EventSearchPage]:
            return await self.event_search.search_events_by_coords(
                geo.lat, geo.lon,
                location_label=geo.display_name,
                radius_miles=radius,
                statuses=LeaderboardConstants.STANDINGS_STATUSES,
                start_date=start_date,
                end_date=end_date,
                page_size=self.events_page_size,
                page=page,
            )
        
        collected = await self._collect_events(fetch_page)
        if not collected.ok:
            return collected
        events = collected.value
        if not events:
            return Failure(
                f"No past or in-progress events found near {geo.display_name} for "
                f"{start_date} – {end_date}. Try a larger radius or different dates."
            )
        
        filters = LeaderboardFilters(city=geo.display_name, min_rounds=min_rounds or None)
        result = await self._build(events, start_date, end_date, filters, min_events, min_rounds, sort_by, limit)
        return Success(result)
    
    async def leaderboard_by_store(
        self,
        store_id: int,
        start_date: str,
        end_date: str,
        store_label: Optional[str] = None,
        limit: int = LeaderboardConstants.DEFAULT_LIMIT,
        min_events: int = LeaderboardConstants.DEFAULT_MIN_EVENTS,
        min_rounds: Optional[int] = None,
        sort_by: str = LeaderboardConstants.SORT_TOTAL_WINS,
    ) -> Result[LeaderboardResult]:
        """Player leaderboard for events hosted by one store."""
        error = self._validate(start_date, end_date, sort_by)
        if error:
            return Failure(error)
        
        limit = _clamp(limit, 1, LeaderboardConstants.MAX_LIMIT)
        min_events = max(1, min_events)
        
        async def fetch_page(page: int) -> Result[EventSearchPage]:
            return await self.event_search.search_events_by_store(
                store_id,
                store_label=store_label,
                statuses=LeaderboardConstants.STANDINGS_STATUSES,
                start_date=start_date,
                end_date=end_date,
                page_size=self.events_page_size,
                page=page,
            )
        
        collected = await self._collect_events(fetch_page)
        if not collected.ok:
            return collected
        events = collected.value
        
        resolved_label = store_label or next(
            (e.store.name for e in events if e.store and e.store.name), None
        ) or f"Store {store_id}"
        if not events:
            return Failure(
                f"No past or in-progress events found at {resolved_label} for "
                f"{start_date} – {end_date}. Try different dates."
            )
        
        filters = LeaderboardFilters(store=resolved_label, min_rounds=min_rounds or None)
        result = await self._build(events, start_date, end_date, filters, min_events, min_rounds, sort_by, limit)
        return Success(result)
