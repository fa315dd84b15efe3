"""
Shared embed utilities for the PlayHub bot.

Provides reusable embed building functions for leaderboards, event and
store listings, standings, pairings, registrations and cards so cogs and
views render them the same way.
"""

import math
from datetime import datetime
from typing import List

import discord

from playhub_bot.constants import LeaderboardConstants, UIConstants
from playhub_bot.data_models.card import Card, CardsPage
from playhub_bot.data_models.event import Event, EventStandings, GameStore, Match, RegistrationsPage, RoundPairings
from playhub_bot.data_models.leaderboard import LeaderboardResult, PlayerStats
from playhub_bot.data_models.search import EventSearchPage, StoreSearchPage
from playhub_bot.utils.standings import format_percentage, format_record, standing_display_name, standing_placement


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')
    return f"{n}{suffix}"


def discord_timestamp(iso_datetime: str, style: str = 'f') -> str:
    """Render an ISO timestamp as Discord markup in the reader's timezone."""
    try:
        parsed = datetime.fromisoformat(iso_datetime.replace('Z', '+00:00'))
    except ValueError:
        return iso_datetime
    return f"<t:{int(parsed.timestamp())}:{style}>"


def format_leaderboard_entry(entry: PlayerStats, rank: int) -> str:
    """One compact leaderboard line."""
    games = entry.total_wins + entry.total_losses
    win_rate = f"{entry.win_rate * 100:.1f}%" if games > 0 else "—"
    event_label = "event" if entry.events_played == 1 else "events"
    return (
        f"{rank}. {entry.player_name} — {entry.total_wins}W-{entry.total_losses}L · "
        f"{entry.events_played} {event_label} · {win_rate} · Best {ordinal(entry.best_placement)}"
    )


def format_event_compact(event: Event, event_url_base: str) -> str:
    link = f"[{event.name}](<{event_url_base}/{event.id}>)"
    parts = [link, discord_timestamp(event.start_datetime)]
    if event.store and event.store.name:
        parts.append(f"@ {event.store.name}")
    if event.cost_in_cents and event.cost_in_cents > 0:
        parts.append(f"${event.cost_in_cents / 100:.2f}")
    else:
        parts.append("Free")
    return "• " + " – ".join(parts)


def format_store_compact(game_store: GameStore) -> str:
    store = game_store.store
    parts = [f"**{store.name}**"]
    location = [p for p in (store.city, store.state) if p]
    if location:
        parts.append(", ".join(location))
    elif store.full_address:
        parts.append(store.full_address)
    distance = game_store.distance_in_miles if game_store.distance_in_miles is not None else store.distance_in_miles
    if distance is not None:
        parts.append(f"{distance:.1f} mi")
    if store.website:
        url = store.website if store.website.startswith('http') else f"https://{store.website}"
        parts.append(f"[Website](<{url}>)")
    return "• " + " – ".join(parts)


def total_pages(result: LeaderboardResult, page_size: int = UIConstants.LEADERBOARD_PAGE_SIZE) -> int:
    return max(1, math.ceil(len(result.players) / page_size))


def build_leaderboard_embed(
    result: LeaderboardResult,
    event_url_base: str,
    page: int = 1,
    page_size: int = UIConstants.LEADERBOARD_PAGE_SIZE,
) -> discord.Embed:
    """
    Build one page of a leaderboard embed.
    
    Args:
        result: Computed leaderboard
        event_url_base: Public event page prefix for "events included" links
        page: 1-based page of players to show
        page_size: Players per page
    """
    scope = []
    if result.filters.city:
        scope.append(f"near {result.filters.city}")
    if result.filters.store:
        scope.append(f"at {result.filters.store}")
    title = "Player Leaderboard"
    if scope:
        title += f" ({' | '.join(scope)})"
    
    sort_label = LeaderboardConstants.SORT_LABELS.get(result.sort_by, result.sort_by)
    header = (
        f"Period: {result.date_range.start} – {result.date_range.end} · "
        f"Events analyzed: {result.events_analyzed}"
    )
    if result.filters.min_rounds:
        header += f" · Min rounds: {result.filters.min_rounds}"
    
    embed = discord.Embed(
        title=title[:256],
        description=f"{header}\n\n🏆 Top by {sort_label}",
        color=discord.Color(UIConstants.LEADERBOARD_COLOR)
    )
    
    start = (page - 1) * page_size
    rows = [
        format_leaderboard_entry(player, start + i + 1)
        for i, player in enumerate(result.players[start:start + page_size])
    ]
    embed.add_field(
        name="Players",
        value="\n".join(rows)[:1024] if rows else "No players met the filters.",
        inline=False
    )
    
    if result.events_included:
        lines = [
            f"• [{e.name}](<{event_url_base}/{e.id}>) — {e.start_date}"
            for e in result.events_included[:UIConstants.MAX_EVENTS_LISTED]
        ]
        hidden = len(result.events_included) - UIConstants.MAX_EVENTS_LISTED
        if hidden > 0:
            lines.append(f"• … and {hidden} more")
        embed.add_field(name="Events included", value="\n".join(lines)[:1024], inline=False)
    
    embed.set_footer(text=f"Page {page}/{total_pages(result, page_size)} | Players: {len(result.players)}")
    return embed


def build_events_embed(page: EventSearchPage, event_url_base: str) -> discord.Embed:
    embed = discord.Embed(
        title=f"Events near {page.location}"[:256],
        color=discord.Color(UIConstants.EVENTS_COLOR)
    )
    lines = [format_event_compact(e, event_url_base) for e in page.events]
    embed.description = "\n".join(lines)[:4096] if lines else "No events found."
    embed.set_footer(text=f"Page {page.current_page} | {page.total} events total")
    return embed


def build_stores_embed(page: StoreSearchPage) -> discord.Embed:
    title = "Stores"
    if page.location:
        title += f" near {page.location}"
    embed = discord.Embed(title=title[:256], color=discord.Color(UIConstants.EVENTS_COLOR))
    lines = [format_store_compact(s) for s in page.stores]
    embed.description = "\n".join(lines)[:4096] if lines else "No stores found."
    embed.set_footer(text=f"Page {page.current_page} | {page.total} stores total")
    return embed


def build_store_embed(game_store: GameStore) -> discord.Embed:
    store = game_store.store
    embed = discord.Embed(
        title=(store.name or f"Store {store.id}")[:256],
        description=format_store_compact(game_store),
        color=discord.Color(UIConstants.EVENTS_COLOR)
    )
    if store.full_address:
        embed.add_field(name="Address", value=store.full_address[:1024], inline=False)
    embed.add_field(name="Store ID", value=str(store.id), inline=True)
    embed.set_footer(text="Use the store ID with /events-store and /leaderboard-store")
    return embed


def build_standings_embed(event_standings: EventStandings, event_url_base: str) -> discord.Embed:
    event = event_standings.event
    embed = discord.Embed(
        title=f"Standings: {event.name}"[:256],
        url=f"{event_url_base}/{event.id}",
        color=discord.Color(UIConstants.EVENTS_COLOR)
    )
    lines: List[str] = []
    for index, entry in enumerate(event_standings.standings[:UIConstants.MAX_STANDINGS_LISTED]):
        parts = [f"**{standing_placement(entry, index)}.** {standing_display_name(entry)}"]
        record = format_record(entry)
        if record:
            parts.append(record)
        omwp = format_percentage(entry.opponent_match_win_pct)
        if omwp:
            parts.append(f"OMWP {omwp}")
        gwp = format_percentage(entry.game_win_pct)
        if gwp:
            parts.append(f"GWP {gwp}")
        lines.append(" · ".join(parts))
    embed.description = "\n".join(lines)[:4096] if lines else "No standings yet."
    embed.set_footer(text=f"{event.start_date} | {len(event_standings.standings)} players")
    return embed


def format_match(match: Match) -> str:
    table = f"Table {match.table_number}" if match.table_number is not None else "Table ?"
    if match.is_bye:
        return f"**{table}:** {match.players[0].identifier or 'Unknown'} — bye"
    names = []
    for player in match.players:
        name = player.identifier or "Unknown"
        if match.winning_player_id is not None and player.player_id == match.winning_player_id:
            name = f"**{name}**"
        if player.games_won is not None:
            name += f" ({player.games_won})"
        names.append(name)
    line = f"**{table}:** " + " vs ".join(names or ["TBD"])
    if match.is_draw:
        line += " — draw"
    return line


def build_pairings_embed(pairings: RoundPairings, event_url_base: str) -> discord.Embed:
    event = pairings.event
    round_label = f"Round {pairings.round.round_number}"
    if pairings.phase_name:
        round_label = f"{pairings.phase_name} · {round_label}"
    embed = discord.Embed(
        title=f"Pairings: {event.name}"[:256],
        url=f"{event_url_base}/{event.id}",
        description=round_label,
        color=discord.Color(UIConstants.EVENTS_COLOR)
    )
    matches = pairings.matches.results
    lines = [format_match(m) for m in matches[:UIConstants.MAX_PAIRINGS_LISTED]]
    hidden = pairings.matches.total - len(lines)
    if hidden > 0:
        lines.append(f"… and {hidden} more")
    embed.add_field(name="Matches", value="\n".join(lines)[:1024] if lines else "No pairings yet.", inline=False)
    embed.set_footer(text=f"{event.start_date} | {pairings.matches.total} matches")
    return embed


def build_registrations_embed(event: Event, registrations: RegistrationsPage, event_url_base: str) -> discord.Embed:
    embed = discord.Embed(
        title=f"Registrations: {event.name}"[:256],
        url=f"{event_url_base}/{event.id}",
        color=discord.Color(UIConstants.EVENTS_COLOR)
    )
    start = (registrations.current_page - 1) * registrations.page_size
    lines = [
        f"{start + i + 1}. {r.display_name}"
        for i, r in enumerate(registrations.results[:UIConstants.MAX_REGISTRATIONS_LISTED])
    ]
    embed.description = "\n".join(lines)[:4096] if lines else "Nobody has registered yet."
    capacity = f"/{event.capacity}" if event.capacity else ""
    embed.set_footer(text=f"Page {registrations.current_page} | {registrations.total}{capacity} registered")
    return embed


def format_card_compact(card: Card) -> str:
    parts = [f"**{card.title}**"]
    if card.set_name:
        parts.append(card.set_name)
    if card.rarity:
        parts.append(card.rarity)
    parts.append(f"`{card.id}`")
    return "• " + " – ".join(parts)


def build_cards_embed(query: str, cards: CardsPage, page: int) -> discord.Embed:
    embed = discord.Embed(title=f"Cards matching “{query}”"[:256], color=discord.Color(UIConstants.EVENTS_COLOR))
    lines = [format_card_compact(c) for c in cards.results]
    embed.description = "\n".join(lines)[:4096] if lines else "No cards found."
    embed.set_footer(text=f"Page {page} | {cards.count} cards total | Use /card for details")
    return embed


def build_card_embed(card: Card) -> discord.Embed:
    embed = discord.Embed(title=card.title[:256], color=discord.Color(UIConstants.EVENTS_COLOR))
    if card.rules_text:
        embed.description = card.rules_text[:4096]
    for name, value in (("Type", card.card_type), ("Cost", card.cost), ("Rarity", card.rarity), ("Set", card.set_name)):
        if value is not None:
            embed.add_field(name=name, value=str(value)[:1024], inline=True)
    if card.image_url:
        embed.set_image(url=card.image_url)
    embed.set_footer(text=f"Card ID: {card.id}")
    return embed
