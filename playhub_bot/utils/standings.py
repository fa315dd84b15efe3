"""
Normalization of upstream standing rows.

Upstream standing rows describe the same facts through several optional,
overlapping fields. ``normalize_standing`` is the single adapter that turns
a ``StandingEntry`` into a ``NormalizedStanding`` with a fixed field
priority, so aggregation code never has to look at the raw shape:

- player key: ``player.id`` (as ``player_id:<id>``), ``player.best_identifier``,
  ``player_name``, ``display_name``, ``username``
- display name: ``user_event_status.best_identifier`` first, then the same
  chain as the key without the numeric id
- placement: ``rank``, ``placement``, then the row's 1-based position
- wins/losses: explicit ``wins`` and ``losses`` when both are present,
  otherwise parsed from ``record`` / ``match_record`` ("W-L")
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from playhub_bot.constants import StandingsConstants
from playhub_bot.data_models.event import StandingEntry

UNKNOWN_PLAYER = StandingsConstants.UNKNOWN_PLAYER


@dataclass(frozen=True)
class NormalizedStanding:
    player_key: str
    display_name: str
    has_event_status_name: bool
    placement: int
    wins: int
    losses: int


def parse_record(record: Optional[str]) -> Tuple[int, int]:
    """Parse a "W-L" record string; anything unparseable is 0-0."""
    if not isinstance(record, str) or not record.strip():
        return 0, 0
    parts = record.split('-')
    if len(parts) < 2:
        return 0, 0
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        return 0, 0


def _first_name(*candidates: Optional[str]) -> Optional[str]:
    for name in candidates:
        if name is not None:
            return name
    return None


def standing_player_key(entry: StandingEntry) -> str:
    """Stable key for aggregating a player across events."""
    if entry.player_id is not None:
        return f"player_id:{entry.player_id}"
    return _first_name(
        entry.player_identifier,
        entry.player_name,
        entry.display_name,
        entry.username,
    ) or UNKNOWN_PLAYER


def standing_display_name(entry: StandingEntry) -> str:
    return _first_name(
        entry.event_status_identifier,
        entry.player_identifier,
        entry.player_name,
        entry.display_name,
        entry.username,
    ) or UNKNOWN_PLAYER


def standing_placement(entry: StandingEntry, index: int) -> int:
    if entry.rank is not None:
        return entry.rank
    if entry.placement is not None:
        return entry.placement
    return index + 1


def standing_wins_losses(entry: StandingEntry) -> Tuple[int, int]:
    if entry.wins is not None and entry.losses is not None:
        return entry.wins, entry.losses
    return parse_record(entry.record if entry.record is not None else entry.match_record)


def normalize_standing(entry: StandingEntry, index: int) -> NormalizedStanding:
    """Adapt one raw standing row at 0-based position ``index``."""
    wins, losses = standing_wins_losses(entry)
    return NormalizedStanding(
        player_key=standing_player_key(entry),
        display_name=standing_display_name(entry),
        has_event_status_name=entry.event_status_identifier is not None,
        placement=standing_placement(entry, index),
        wins=wins,
        losses=losses,
    )


def format_record(entry: StandingEntry) -> Optional[str]:
    """Record string for display, or None when the row carries none."""
    if entry.record is not None:
        return entry.record
    if entry.match_record is not None:
        return entry.match_record
    if entry.wins is not None or entry.losses is not None:
        return f"{entry.wins or 0}-{entry.losses or 0}"
    return None


def format_percentage(value: Optional[float]) -> Optional[str]:
    """0.6123 -> '61.2%'."""
    if value is None:
        return None
    return f"{value * 100:.1f}%"
