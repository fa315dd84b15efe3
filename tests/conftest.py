"""
Shared builders and fakes for the PlayHub bot test suite.
"""

import os
import sys
from typing import Dict, List, Optional

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from playhub_bot.data_models.event import (
    Event,
    EventStandings,
    StandingEntry,
    StandingsPage,
    Store,
    TournamentPhase,
    TournamentRound,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_event(
    event_id: int = 1,
    name: Optional[str] = None,
    start: str = '2025-03-01T18:00:00Z',
    display_status: str = 'past',
    phases: Optional[List[List[Dict]]] = None,
    store_name: Optional[str] = None,
) -> Event:
    """
    Build an Event; ``phases`` is a list of phases, each a list of round
    dicts with ``id``, ``round_number`` and optional ``standings_status``.
    """
    tournament_phases = None
    if phases is not None:
        tournament_phases = [
            TournamentPhase(
                id=index + 1,
                phase_name=f"Phase {index + 1}",
                rounds=[
                    TournamentRound(
                        id=r['id'],
                        round_number=r['round_number'],
                        standings_status=r.get('standings_status'),
                    )
                    for r in rounds
                ],
            )
            for index, rounds in enumerate(phases)
        ]
    return Event(
        id=event_id,
        name=name or f"Event {event_id}",
        start_datetime=start,
        display_status=display_status,
        store=Store(id=7, name=store_name) if store_name else None,
        tournament_phases=tournament_phases,
    )


def make_rounds(count: int, first_id: int = 100) -> List[List[Dict]]:
    """A single phase with ``count`` rounds."""
    return [[{'id': first_id + i, 'round_number': i + 1} for i in range(count)]]


def standing(name: str, rank: Optional[int] = None, record: Optional[str] = None, **kwargs) -> StandingEntry:
    return StandingEntry(rank=rank, player_identifier=name, record=record, **kwargs)


def event_standings(event_id: int, rows: List[StandingEntry], rounds: int = 4, **kwargs) -> EventStandings:
    return EventStandings(
        event=make_event(event_id, phases=make_rounds(rounds, first_id=event_id * 100), **kwargs),
        standings=rows,
    )


def standings_page(rows: List[StandingEntry], page_size: int = 50) -> StandingsPage:
    return StandingsPage(
        results=rows,
        count=len(rows),
        total=len(rows),
        page_size=page_size,
        current_page=1,
    )


@pytest.fixture
def clock():
    return FakeClock()
