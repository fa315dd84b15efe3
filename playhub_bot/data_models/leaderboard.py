"""
Leaderboard data models for cross-event player rankings.

Provides immutable data transfer objects for leaderboard results. Player
stats are rebuilt from scratch on every leaderboard request.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class PlayerStats:
    """Aggregated results for one player across the analyzed events."""
    player_name: str
    total_wins: int
    total_losses: int
    events_played: int
    best_placement: int
    first_place_finishes: int
    placements: List[int] = field(default_factory=list)

    @property
    def win_rate(self) -> float:
        games = self.total_wins + self.total_losses
        return self.total_wins / games if games > 0 else 0.0


@dataclass(frozen=True)
class EventSummary:
    """Event that contributed standings to a leaderboard."""
    id: int
    name: str
    start_date: str


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str


@dataclass(frozen=True)
class LeaderboardFilters:
    """Echo of the resolved scope and filters."""
    city: Optional[str] = None
    store: Optional[str] = None
    min_rounds: Optional[int] = None


@dataclass(frozen=True)
class LeaderboardResult:
    """Sorted, truncated leaderboard plus the events it was built from."""
    players: List[PlayerStats]
    events_analyzed: int
    events_included: List[EventSummary]
    date_range: DateRange
    filters: LeaderboardFilters
    sort_by: str = 'total_wins'
