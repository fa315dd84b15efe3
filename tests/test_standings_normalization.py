"""
Tests for standing row normalization.
"""

import pytest

from playhub_bot.data_models.event import StandingEntry
from playhub_bot.utils.standings import (
    UNKNOWN_PLAYER,
    format_percentage,
    format_record,
    normalize_standing,
    parse_record,
)


@pytest.mark.parametrize('record, expected', [
    ('3-1', (3, 1)),
    (' 2 - 2 ', (2, 2)),
    ('4-0-1', (4, 0)),
    ('', (0, 0)),
    ('   ', (0, 0)),
    (None, (0, 0)),
    ('abc', (0, 0)),
    ('x-1', (0, 0)),
    ('5', (0, 0)),
])
def test_parse_record(record, expected):
    assert parse_record(record) == expected


def test_player_id_wins_key_priority():
    entry = StandingEntry(player_id=42, player_identifier='Ann', player_name='Annie')
    row = normalize_standing(entry, 0)
    assert row.player_key == 'player_id:42'
    assert row.display_name == 'Ann'


def test_key_falls_back_through_name_fields():
    assert normalize_standing(StandingEntry(player_name='P', username='u'), 0).player_key == 'P'
    assert normalize_standing(StandingEntry(display_name='D', username='u'), 0).player_key == 'D'
    assert normalize_standing(StandingEntry(username='u'), 0).player_key == 'u'


def test_unidentifiable_row_gets_unknown_key():
    row = normalize_standing(StandingEntry(rank=3, record='1-2'), 2)
    assert row.player_key == UNKNOWN_PLAYER
    assert row.display_name == UNKNOWN_PLAYER


def test_event_status_name_preferred_for_display():
    entry = StandingEntry(player_id=1, player_identifier='Global', event_status_identifier='Local')
    row = normalize_standing(entry, 0)
    assert row.display_name == 'Local'
    assert row.has_event_status_name is True
    assert row.player_key == 'player_id:1'


def test_placement_priority():
    assert normalize_standing(StandingEntry(username='u', rank=2, placement=5), 0).placement == 2
    assert normalize_standing(StandingEntry(username='u', placement=5), 0).placement == 5
    assert normalize_standing(StandingEntry(username='u'), 6).placement == 7


def test_explicit_wins_losses_beat_record():
    row = normalize_standing(StandingEntry(username='u', wins=4, losses=1, record='0-0'), 0)
    assert (row.wins, row.losses) == (4, 1)


def test_partial_wins_losses_fall_back_to_record():
    row = normalize_standing(StandingEntry(username='u', wins=4, record='2-2'), 0)
    assert (row.wins, row.losses) == (2, 2)
    row = normalize_standing(StandingEntry(username='u', match_record='3-1'), 0)
    assert (row.wins, row.losses) == (3, 1)


def test_from_api_payload_shape():
    entry = StandingEntry.from_api({
        'rank': '1',
        'player': {'id': 9, 'best_identifier': 'Nine'},
        'user_event_status': {'best_identifier': 'Nine (local)'},
        'record': '3-0',
        'opponent_match_win_percentage': 0.55,
    })
    row = normalize_standing(entry, 0)
    assert row.player_key == 'player_id:9'
    assert row.display_name == 'Nine (local)'
    assert row.placement == 1
    assert (row.wins, row.losses) == (3, 0)
    assert entry.opponent_match_win_pct == 0.55


def test_format_helpers():
    assert format_record(StandingEntry(record='2-1')) == '2-1'
    assert format_record(StandingEntry(wins=2)) == '2-0'
    assert format_record(StandingEntry()) is None
    assert format_percentage(0.6123) == '61.2%'
    assert format_percentage(None) is None
