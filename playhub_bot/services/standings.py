"""
Event standings resolution for the PlayHub leaderboard bot.

Fetches event details and round standings through TTL caches (long TTL for
completed events, short for live ones) and picks the most authoritative,
most recent round that actually has standings. Also serves full round
standings, the newest round's pairings and event registrations.

Round order matters: upstream may expose provisional round placeholders
with no data next to a finished earlier round, so the numerically last
round is not necessarily the one with results.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from playhub_bot.constants import CacheConstants, LeaderboardConstants, StandingsConstants
from playhub_bot.data_models.event import (
    Event,
    EventStandings,
    MatchesPage,
    RegistrationsPage,
    RoundPairings,
    StandingEntry,
    StandingsPage,
    TournamentPhase,
    TournamentRound,
)
from playhub_bot.services.base import BaseService
from playhub_bot.services.ttl_cache import TTLCache
from playhub_bot.utils.concurrency import run_with_bounded_concurrency

logger = logging.getLogger(__name__)


def cache_ttl_for_event(event: Event) -> float:
    return CacheConstants.PAST_EVENT_TTL if event.is_completed else CacheConstants.LIVE_EVENT_TTL


def round_standings_priority(standings_status: Optional[str]) -> int:
    """0 = authoritative, 1 = neutral/unknown, 2 = provisional."""
    if not standings_status:
        return StandingsConstants.PRIORITY_NEUTRAL
    status = standings_status.lower()
    if status in StandingsConstants.AUTHORITATIVE_STATUSES:
        return StandingsConstants.PRIORITY_AUTHORITATIVE
    if status in StandingsConstants.PROVISIONAL_STATUSES:
        return StandingsConstants.PRIORITY_PROVISIONAL
    return StandingsConstants.PRIORITY_NEUTRAL


@dataclass(frozen=True)
class RoundCandidate:
    id: int
    round_number: int
    phase_index: int
    standings_status: Optional[str] = None

    @property
    def sort_key(self):
        return (
            round_standings_priority(self.standings_status),
            -self.phase_index,
            -self.round_number,
        )


def candidate_rounds(event: Event) -> List[RoundCandidate]:
    """
    Flatten all rounds of an event, best candidate first.
    
    Ordered by standings authority, then later phases (top cut before
    swiss), then higher round numbers within a phase.
    """
    candidates = [
        RoundCandidate(
            id=rnd.id,
            round_number=rnd.round_number,
            phase_index=phase_index,
            standings_status=rnd.standings_status,
        )
        for phase_index, phase in enumerate(event.tournament_phases or [])
        for rnd in phase.rounds
    ]
    return sorted(candidates, key=lambda c: c.sort_key)


def latest_round(event: Event) -> Optional[Tuple[TournamentPhase, TournamentRound]]:
    """The highest-numbered round of the last phase that has rounds."""
    for phase in reversed(event.tournament_phases or []):
        if phase.rounds:
            return phase, max(phase.rounds, key=lambda r: r.round_number)
    return None


class StandingsService(BaseService):
    """Cached event details, round standings and event-standings resolution."""
    
    def __init__(
        self,
        client,
        event_cache: Optional[TTLCache] = None,
        standings_cache: Optional[TTLCache] = None,
    ):
        super().__init__(client, event_cache)
        self.standings_cache = standings_cache if standings_cache is not None else TTLCache()
    
    async def get_event_details(self, event_id: int) -> Event:
        """Full event details; cached 7 days when completed, 1 minute otherwise."""
        return await self.cached(
            str(event_id),
            lambda: self.client.fetch_event_details(event_id),
            cache_ttl_for_event,
        )
    
    async def get_round_standings(
        self,
        round_id: int,
        page: int = 1,
        page_size: int = StandingsConstants.DEFAULT_PAGE_SIZE,
        is_past_event: bool = False,
    ) -> StandingsPage:
        page = max(1, page)
        page_size = max(1, page_size)
        ttl = CacheConstants.PAST_EVENT_TTL if is_past_event else CacheConstants.LIVE_EVENT_TTL
        return await self.cached(
            f"{round_id}-{page}-{page_size}",
            lambda: self.client.fetch_round_standings(round_id, page, page_size),
            ttl,
            cache=self.standings_cache,
        )
    
    async def fetch_all_round_standings(self, round_id: int, is_past_event: bool = False) -> List[StandingEntry]:
        """
        Every standing of a round, paged 100 at a time up to 50 pages.
        
        Only non-empty results are cached, so a round that has not produced
        standings yet is asked for again next time.
        """
        async def load() -> List[StandingEntry]:
            rows: List[StandingEntry] = []
            page_size = StandingsConstants.FULL_ROUND_PAGE_SIZE
            for page in range(1, StandingsConstants.FULL_ROUND_MAX_PAGES + 1):
                response = await self.client.fetch_round_standings(round_id, page, page_size)
                rows.extend(response.results)
                if response.next_page is None or len(response.results) < page_size:
                    break
            else:
                logger.warning(f"Round {round_id} standings truncated at {len(rows)} rows")
            return rows
        
        ttl = CacheConstants.PAST_EVENT_TTL if is_past_event else CacheConstants.LIVE_EVENT_TTL
        return await self.cached(
            f"{round_id}-all",
            load,
            ttl,
            cache=self.standings_cache,
            should_cache=bool,
        )
    
    async def get_round_matches(
        self,
        round_id: int,
        page: int = 1,
        page_size: int = StandingsConstants.DEFAULT_PAGE_SIZE,
        is_past_event: bool = False,
    ) -> MatchesPage:
        page = max(1, page)
        page_size = max(1, page_size)
        ttl = CacheConstants.PAST_EVENT_TTL if is_past_event else CacheConstants.LIVE_EVENT_TTL
        return await self.cached(
            f"matches:{round_id}-{page}-{page_size}",
            lambda: self.client.fetch_round_matches(round_id, page, page_size),
            ttl,
            cache=self.standings_cache,
        )
    
    async def get_current_pairings(
        self,
        event_id: int,
        page_size: int = StandingsConstants.DEFAULT_PAGE_SIZE,
    ) -> Optional[RoundPairings]:
        """
        Pairings of the event's newest round, the last round of the last phase.
        
        Returns:
            RoundPairings, or None when the event has no rounds
            
        Raises:
            PlayHubException: event details or matches could not be fetched
        """
        event = await self.get_event_details(event_id)
        latest = latest_round(event)
        if latest is None:
            return None
        phase, rnd = latest
        matches = await self.get_round_matches(rnd.id, 1, page_size, is_past_event=event.is_completed)
        return RoundPairings(event=event, round=rnd, phase_name=phase.phase_name, matches=matches)
    
    async def get_event_registrations(
        self,
        event_id: int,
        page: int = 1,
        page_size: int = StandingsConstants.DEFAULT_PAGE_SIZE,
    ) -> RegistrationsPage:
        """Registrations change until check-in closes, so they are only cached briefly."""
        page = max(1, page)
        page_size = max(1, page_size)
        return await self.cached(
            f"registrations:{event_id}-{page}-{page_size}",
            lambda: self.client.fetch_event_registrations(event_id, page, page_size),
            CacheConstants.LIVE_EVENT_TTL,
            cache=self.standings_cache,
        )
    
    async def get_event_standings(
        self,
        event_id: int,
        page_size: int = StandingsConstants.DEFAULT_PAGE_SIZE,
    ) -> Optional[EventStandings]:
        """
        Get an event and the standings of its best round that has data.
        
        Returns:
            EventStandings, or None when the event has no rounds or no round
            yields standings
            
        Raises:
            PlayHubException: event details could not be fetched
        """
        event = await self.get_event_details(event_id)
        if not event.tournament_phases:
            return None
        
        is_past = event.is_completed
        for candidate in candidate_rounds(event):
            try:
                page = await self.get_round_standings(candidate.id, 1, page_size, is_past_event=is_past)
            except Exception as e:
                logger.debug(f"Standings fetch failed for event {event_id} round {candidate.id}: {e}")
                continue
            if page.results:
                return EventStandings(event=event, standings=page.results)
        
        logger.debug(f"No round with standings for event {event_id}")
        return None
    
    async def fetch_all_event_standings(
        self,
        event_ids: Sequence[int],
        page_size: int = LeaderboardConstants.STANDINGS_PAGE_SIZE,
        concurrency: int = LeaderboardConstants.EVENT_STANDINGS_CONCURRENCY,
    ) -> List[EventStandings]:
        """
        Resolve standings for many events with bounded concurrency.
        
        Events without standings, or whose resolution fails, are left out;
        the rest keep the order of ``event_ids``.
        """
        raw = await run_with_bounded_concurrency(
            list(event_ids),
            concurrency,
            lambda event_id: self.get_event_standings(event_id, page_size),
        )
        results = [item for item in raw if item is not None]
        failed_or_empty = len(raw) - len(results)
        if failed_or_empty:
            logger.info(f"{failed_or_empty} of {len(raw)} events had no usable standings")
        return results
