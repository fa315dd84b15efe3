"""
Event, round, standings, registration and pairing data models for the PlayHub API.

Immutable records built from upstream JSON payloads. The upstream API is
undocumented and loose about field presence, so every ``from_api`` tolerates
missing keys and keeps the original payload around for display helpers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Store:
    """Physical store hosting events."""
    id: int
    name: str
    full_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    website: Optional[str] = None
    distance_in_miles: Optional[float] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Store':
        return cls(
            id=_as_int(data.get('id')) or 0,
            name=data.get('name') or '',
            full_address=data.get('full_address'),
            city=data.get('city'),
            state=data.get('state'),
            country=data.get('country'),
            website=data.get('website'),
            distance_in_miles=_as_float(data.get('distance_in_miles')),
        )


@dataclass(frozen=True)
class GameStore:
    """Store listing as returned by the game-stores endpoint."""
    id: str
    store: Store
    distance_in_miles: Optional[float] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'GameStore':
        return cls(
            id=str(data.get('id', '')),
            store=Store.from_api(data.get('store') or {}),
            distance_in_miles=_as_float(data.get('distance_in_miles')),
        )


@dataclass(frozen=True)
class TournamentRound:
    """One pairing round within a tournament phase."""
    id: int
    round_number: int
    status: Optional[str] = None
    standings_status: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'TournamentRound':
        return cls(
            id=_as_int(data.get('id')) or 0,
            round_number=_as_int(data.get('round_number')) or 0,
            status=data.get('status'),
            standings_status=data.get('standings_status'),
        )


@dataclass(frozen=True)
class TournamentPhase:
    """Named bracket stage (e.g. Swiss, Top Cut); rounds ordered oldest to newest."""
    id: int
    phase_name: Optional[str] = None
    status: Optional[str] = None
    rounds: List[TournamentRound] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'TournamentPhase':
        return cls(
            id=_as_int(data.get('id')) or 0,
            phase_name=data.get('phase_name'),
            status=data.get('status'),
            rounds=[TournamentRound.from_api(r) for r in data.get('rounds') or []],
        )


@dataclass(frozen=True)
class Event:
    """Tournament event. ``tournament_phases`` is None when upstream omits it."""
    id: int
    name: str
    start_datetime: str
    display_status: Optional[str] = None
    cost_in_cents: Optional[int] = None
    currency: Optional[str] = None
    capacity: Optional[int] = None
    registered_user_count: Optional[int] = None
    lifecycle_status: Optional[str] = None
    store: Optional[Store] = None
    gameplay_format: Optional[str] = None
    tournament_phases: Optional[List[TournamentPhase]] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Event':
        phases = data.get('tournament_phases')
        settings = data.get('settings') or {}
        gameplay_format = data.get('gameplay_format') or {}
        store = data.get('store')
        return cls(
            id=_as_int(data.get('id')) or 0,
            name=data.get('name') or '',
            start_datetime=data.get('start_datetime') or '',
            display_status=data.get('display_status'),
            cost_in_cents=_as_int(data.get('cost_in_cents')),
            currency=data.get('currency'),
            capacity=_as_int(data.get('capacity')),
            registered_user_count=_as_int(data.get('registered_user_count')),
            lifecycle_status=settings.get('event_lifecycle_status') if isinstance(settings, dict) else None,
            store=Store.from_api(store) if isinstance(store, dict) else None,
            gameplay_format=gameplay_format.get('name') if isinstance(gameplay_format, dict) else None,
            tournament_phases=(
                [TournamentPhase.from_api(p) for p in phases] if isinstance(phases, list) else None
            ),
        )

    @property
    def start_date(self) -> str:
        """Calendar date part of the start timestamp."""
        return self.start_datetime[:10]

    @property
    def is_completed(self) -> bool:
        status = (self.display_status or '').lower()
        lifecycle = (self.lifecycle_status or '').lower()
        return status == 'past' or lifecycle in ('completed', 'past')

    @property
    def total_rounds(self) -> int:
        return sum(len(phase.rounds) for phase in self.tournament_phases or [])


@dataclass(frozen=True)
class StandingEntry:
    """
    One player's row within one round's standings.

    Upstream returns several overlapping shapes for the same facts
    (``rank``/``placement``, ``record``/``wins`` + ``losses``, several name
    fields). They are kept as-is here; ``playhub_bot.utils.standings``
    normalizes them.
    """
    rank: Optional[int] = None
    placement: Optional[int] = None
    player_id: Optional[int] = None
    player_identifier: Optional[str] = None
    event_status_identifier: Optional[str] = None
    player_name: Optional[str] = None
    display_name: Optional[str] = None
    username: Optional[str] = None
    wins: Optional[int] = None
    losses: Optional[int] = None
    record: Optional[str] = None
    match_record: Optional[str] = None
    match_points: Optional[float] = None
    opponent_match_win_pct: Optional[float] = None
    game_win_pct: Optional[float] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'StandingEntry':
        player = data.get('player') if isinstance(data.get('player'), dict) else {}
        event_status = data.get('user_event_status') if isinstance(data.get('user_event_status'), dict) else {}
        omwp = data.get('opponent_match_win_pct')
        if omwp is None:
            omwp = data.get('opponent_match_win_percentage')
        gwp = data.get('game_win_pct')
        if gwp is None:
            gwp = data.get('game_win_percentage')
        return cls(
            rank=_as_int(data.get('rank')),
            placement=_as_int(data.get('placement')),
            player_id=_as_int(player.get('id')),
            player_identifier=player.get('best_identifier'),
            event_status_identifier=event_status.get('best_identifier'),
            player_name=data.get('player_name'),
            display_name=data.get('display_name'),
            username=data.get('username'),
            wins=_as_int(data.get('wins')),
            losses=_as_int(data.get('losses')),
            record=data.get('record'),
            match_record=data.get('match_record'),
            match_points=_as_float(data.get('match_points')),
            opponent_match_win_pct=_as_float(omwp),
            game_win_pct=_as_float(gwp),
        )


@dataclass(frozen=True)
class EventRegistration:
    """One player's registration for an event."""
    id: int
    player_id: Optional[int] = None
    player_identifier: Optional[str] = None
    event_status_identifier: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'EventRegistration':
        player = data.get('player') if isinstance(data.get('player'), dict) else {}
        event_status = data.get('user_event_status') if isinstance(data.get('user_event_status'), dict) else {}
        return cls(
            id=_as_int(data.get('id')) or 0,
            player_id=_as_int(player.get('id')),
            player_identifier=player.get('best_identifier') or data.get('best_identifier'),
            event_status_identifier=event_status.get('best_identifier'),
            status=data.get('registration_status') or data.get('status'),
        )

    @property
    def display_name(self) -> str:
        return self.event_status_identifier or self.player_identifier or f"Player {self.player_id or self.id}"


@dataclass(frozen=True)
class MatchPlayer:
    """One seat in a match."""
    player_id: Optional[int] = None
    identifier: Optional[str] = None
    games_won: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'MatchPlayer':
        # Seats come either as a bare player or wrapped in a relationship row
        player = data.get('player') if isinstance(data.get('player'), dict) else data
        event_status = data.get('user_event_status') if isinstance(data.get('user_event_status'), dict) else {}
        return cls(
            player_id=_as_int(player.get('id')),
            identifier=event_status.get('best_identifier') or player.get('best_identifier'),
            games_won=_as_int(data.get('games_won')),
        )


@dataclass(frozen=True)
class Match:
    """One pairing within a round."""
    id: int
    table_number: Optional[int] = None
    status: Optional[str] = None
    players: List[MatchPlayer] = field(default_factory=list)
    winning_player_id: Optional[int] = None
    is_draw: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Match':
        seats = data.get('player_match_relationships')
        if not isinstance(seats, list):
            seats = data.get('players') if isinstance(data.get('players'), list) else []
        winner = data.get('winning_player')
        if isinstance(winner, dict):
            winner = winner.get('id')
        return cls(
            id=_as_int(data.get('id')) or 0,
            table_number=_as_int(data.get('table_number')),
            status=data.get('status'),
            players=[MatchPlayer.from_api(s) for s in seats if isinstance(s, dict)],
            winning_player_id=_as_int(winner),
            is_draw=bool(data.get('match_is_intentional_draw') or data.get('is_draw')),
        )

    @property
    def is_bye(self) -> bool:
        return len(self.players) == 1


@dataclass(frozen=True)
class EventsPage:
    """One page of the events listing."""
    results: List[Event]
    count: int
    page_size: int
    current_page: int
    next_page: Optional[int] = None


@dataclass(frozen=True)
class StandingsPage:
    """One page of a round's standings."""
    results: List[StandingEntry]
    count: int
    total: int
    page_size: int
    current_page: int
    next_page: Optional[int] = None
    previous_page: Optional[int] = None


@dataclass(frozen=True)
class StoresPage:
    """One page of the game-stores listing."""
    results: List[GameStore]
    count: int
    page_size: int
    current_page: int
    next_page: Optional[int] = None


@dataclass(frozen=True)
class RegistrationsPage:
    """One page of an event's registrations."""
    results: List[EventRegistration]
    count: int
    total: int
    page_size: int
    current_page: int
    next_page: Optional[int] = None


@dataclass(frozen=True)
class MatchesPage:
    """One page of a round's pairings."""
    results: List[Match]
    count: int
    total: int
    page_size: int
    current_page: int
    next_page: Optional[int] = None


@dataclass(frozen=True)
class EventStandings:
    """An event together with the standings of its most authoritative round."""
    event: Event
    standings: List[StandingEntry]


@dataclass(frozen=True)
class RoundPairings:
    """The pairings of an event's most recent round."""
    event: Event
    round: TournamentRound
    phase_name: Optional[str]
    matches: MatchesPage
