import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional
from playhub_bot.constants import SearchConstants, UIConstants
from playhub_bot.services.rate_limiter import rate_limit
from playhub_bot.utils.embeds import (
    build_events_embed,
    build_pairings_embed,
    build_registrations_embed,
    build_standings_embed,
    build_store_embed,
    build_stores_embed,
)
from playhub_bot.utils.error_embeds import ErrorEmbeds
from playhub_bot.utils.exceptions import PlayHubException
import logging

logger = logging.getLogger(__name__)

STATUS_CHOICES = [
    app_commands.Choice(name="Upcoming & live", value="upcoming,inProgress"),
    app_commands.Choice(name="Upcoming", value="upcoming"),
    app_commands.Choice(name="In progress", value="inProgress"),
    app_commands.Choice(name="Past", value="past"),
    app_commands.Choice(name="All", value="all"),
]

def _statuses(choice: Optional[app_commands.Choice[str]]):
    if choice is None:
        return SearchConstants.DEFAULT_EVENT_STATUSES
    return tuple(choice.value.split(","))

class EventsCog(commands.Cog):
    """Event, store, standings, pairings and registration lookups"""
    
    def __init__(self, bot):
        self.bot = bot
        self.event_search = bot.event_search_service
        self.standings_service = bot.standings_service
    
    @app_commands.command(name="events-city", description="Find events near a city")
    @app_commands.describe(city="City name", radius="Search radius in miles", status="Which events to list", page="Result page")
    @app_commands.choices(status=STATUS_CHOICES)
    @rate_limit("events", limit=10, window=60)
    async def events_city(
        self,
        interaction: discord.Interaction,
        city: str,
        radius: Optional[app_commands.Range[int, 1, 100]] = None,
        status: Optional[app_commands.Choice[str]] = None,
        page: Optional[app_commands.Range[int, 1, 50]] = None
    ):
        """List events near a city."""
        await interaction.response.defer()
        result = await self.event_search.search_events_by_city(
            city,
            radius_miles=radius or SearchConstants.DEFAULT_EVENT_RADIUS_MILES,
            statuses=_statuses(status),
            page=page or 1,
        )
        if not result.ok:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(result.error))
            return
        await interaction.followup.send(embed=build_events_embed(result.value, self.bot.event_url_base))
    
    @app_commands.command(name="events-store", description="Find events at a store")
    @app_commands.describe(store_id="PlayHub store ID", status="Which events to list", page="Result page")
    @app_commands.choices(status=STATUS_CHOICES)
    @rate_limit("events", limit=10, window=60)
    async def events_store(
        self,
        interaction: discord.Interaction,
        store_id: int,
        status: Optional[app_commands.Choice[str]] = None,
        page: Optional[app_commands.Range[int, 1, 50]] = None
    ):
        """List events hosted by a store."""
        await interaction.response.defer()
        result = await self.event_search.search_events_by_store(
            store_id,
            statuses=_statuses(status),
            page=page or 1,
        )
        if not result.ok:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(result.error))
            return
        await interaction.followup.send(embed=build_events_embed(result.value, self.bot.event_url_base))
    
    @app_commands.command(name="stores", description="Find stores by name or city")
    @app_commands.describe(query="Store name search", city="City to search around", radius="Search radius in miles")
    @rate_limit("stores", limit=10, window=60)
    async def stores(
        self,
        interaction: discord.Interaction,
        query: Optional[str] = None,
        city: Optional[str] = None,
        radius: Optional[app_commands.Range[int, 1, 100]] = None
    ):
        """Search stores."""
        if not query and not city:
            await interaction.response.send_message(embed=ErrorEmbeds.invalid_input("Provide a store name, a city, or both."), ephemeral=True)
            return
        await interaction.response.defer()
        result = await self.event_search.search_stores(
            query=query,
            city=city,
            radius_miles=radius or SearchConstants.DEFAULT_STORE_RADIUS_MILES,
        )
        if not result.ok:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(result.error))
            return
        await interaction.followup.send(embed=build_stores_embed(result.value))
    
    @app_commands.command(name="standings", description="Show the latest standings for an event")
    @app_commands.describe(event_id="PlayHub event ID")
    @rate_limit("standings", limit=10, window=60)
    async def standings(self, interaction: discord.Interaction, event_id: int):
        """Show the most authoritative round standings for an event."""
        await interaction.response.defer()
        try:
            event_standings = await self.standings_service.get_event_standings(event_id)
        except PlayHubException as e:
            logger.warning(f"Standings lookup failed for event {event_id}: {e}")
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(e.user_message))
            return
        if event_standings is None:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(f"No standings are available yet for event {event_id}."))
            return
        await interaction.followup.send(embed=build_standings_embed(event_standings, self.bot.event_url_base))
    
    @app_commands.command(name="pairings", description="Show the newest round's pairings for an event")
    @app_commands.describe(event_id="PlayHub event ID")
    @rate_limit("standings", limit=10, window=60)
    async def pairings(self, interaction: discord.Interaction, event_id: int):
        """Show who plays whom in the event's latest round."""
        await interaction.response.defer()
        try:
            pairings = await self.standings_service.get_current_pairings(event_id)
        except PlayHubException as e:
            logger.warning(f"Pairings lookup failed for event {event_id}: {e}")
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(e.user_message))
            return
        if pairings is None:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(f"Event {event_id} has no rounds yet."))
            return
        await interaction.followup.send(embed=build_pairings_embed(pairings, self.bot.event_url_base))
    
    @app_commands.command(name="registrations", description="List players registered for an event")
    @app_commands.describe(event_id="PlayHub event ID", page="Result page")
    @rate_limit("standings", limit=10, window=60)
    async def registrations(
        self,
        interaction: discord.Interaction,
        event_id: int,
        page: Optional[app_commands.Range[int, 1, 50]] = None
    ):
        """List an event's registrations."""
        await interaction.response.defer()
        try:
            event = await self.standings_service.get_event_details(event_id)
            registrations = await self.standings_service.get_event_registrations(
                event_id, page or 1, UIConstants.MAX_REGISTRATIONS_LISTED
            )
        except PlayHubException as e:
            logger.warning(f"Registrations lookup failed for event {event_id}: {e}")
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(e.user_message))
            return
        await interaction.followup.send(embed=build_registrations_embed(event, registrations, self.bot.event_url_base))
    
    @app_commands.command(name="store-info", description="Show a store listing and its store ID")
    @app_commands.describe(game_store_id="Listing ID from /stores")
    @rate_limit("stores", limit=10, window=60)
    async def store_info(self, interaction: discord.Interaction, game_store_id: str):
        """Show one store listing; its store ID is what /events-store and /leaderboard-store take."""
        await interaction.response.defer()
        result = await self.event_search.get_store(game_store_id)
        if not result.ok:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(result.error))
            return
        await interaction.followup.send(embed=build_store_embed(result.value))

async def setup(bot):
    await bot.add_cog(EventsCog(bot))
