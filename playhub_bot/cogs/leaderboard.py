import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional
from playhub_bot.constants import LeaderboardConstants
from playhub_bot.views.leaderboard import LeaderboardView
from playhub_bot.services.rate_limiter import rate_limit
from playhub_bot.utils.error_embeds import ErrorEmbeds
import logging

logger = logging.getLogger(__name__)

SORT_CHOICES = [
    app_commands.Choice(name=label, value=key)
    for key, label in LeaderboardConstants.SORT_LABELS.items()
]

class LeaderboardCog(commands.Cog):
    """Cross-event player leaderboards by city or store"""
    
    def __init__(self, bot):
        self.bot = bot
        self.leaderboard_service = bot.leaderboard_service
    
    async def _send_result(self, interaction: discord.Interaction, result):
        if not result.ok:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(result.error))
            return
        view = LeaderboardView(result.value, self.bot.event_url_base)
        await interaction.followup.send(embed=view.build_embed(), view=view)
    
    @app_commands.command(name="leaderboard-city", description="Player leaderboard for events near a city")
    @app_commands.describe(
        city="City name, e.g. 'Detroit, MI'",
        start_date="First day (YYYY-MM-DD)",
        end_date="Last day (YYYY-MM-DD)",
        radius="Search radius in miles (max 100)",
        sort="Ranking order",
        min_events="Only players with at least this many events",
        min_rounds="Only events with at least this many rounds",
        limit="Number of players (max 100)"
    )
    @app_commands.choices(sort=SORT_CHOICES)
    @rate_limit("leaderboard", limit=5, window=60)
    async def leaderboard_city(
        self,
        interaction: discord.Interaction,
        city: str,
        start_date: str,
        end_date: str,
        radius: Optional[app_commands.Range[int, 1, 100]] = None,
        sort: Optional[app_commands.Choice[str]] = None,
        min_events: Optional[app_commands.Range[int, 1, 50]] = None,
        min_rounds: Optional[app_commands.Range[int, 1, 20]] = None,
        limit: Optional[app_commands.Range[int, 1, 100]] = None
    ):
        """Display a leaderboard for events near a city."""
        await interaction.response.defer()
        
        try:
            result = await self.leaderboard_service.leaderboard_by_city(
                city=city,
                start_date=start_date,
                end_date=end_date,
                radius_miles=radius or LeaderboardConstants.DEFAULT_RADIUS_MILES,
                limit=limit or LeaderboardConstants.DEFAULT_LIMIT,
                min_events=min_events or LeaderboardConstants.DEFAULT_MIN_EVENTS,
                min_rounds=min_rounds,
                sort_by=sort.value if sort else LeaderboardConstants.SORT_TOTAL_WINS,
            )
            await self._send_result(interaction, result)
        except Exception as e:
            logger.error(f"Error in city leaderboard command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("An error occurred while building the leaderboard. Please try again later."))
    
    @app_commands.command(name="leaderboard-store", description="Player leaderboard for events at a store")
    @app_commands.describe(
        store_id="PlayHub store ID",
        start_date="First day (YYYY-MM-DD)",
        end_date="Last day (YYYY-MM-DD)",
        sort="Ranking order",
        min_events="Only players with at least this many events",
        min_rounds="Only events with at least this many rounds",
        limit="Number of players (max 100)"
    )
    @app_commands.choices(sort=SORT_CHOICES)
    @rate_limit("leaderboard", limit=5, window=60)
    async def leaderboard_store(
        self,
        interaction: discord.Interaction,
        store_id: int,
        start_date: str,
        end_date: str,
        sort: Optional[app_commands.Choice[str]] = None,
        min_events: Optional[app_commands.Range[int, 1, 50]] = None,
        min_rounds: Optional[app_commands.Range[int, 1, 20]] = None,
        limit: Optional[app_commands.Range[int, 1, 100]] = None
    ):
        """Display a leaderboard for events hosted by a store."""
        await interaction.response.defer()
        
        try:
            result = await self.leaderboard_service.leaderboard_by_store(
                store_id=store_id,
                start_date=start_date,
                end_date=end_date,
                limit=limit or LeaderboardConstants.DEFAULT_LIMIT,
                min_events=min_events or LeaderboardConstants.DEFAULT_MIN_EVENTS,
                min_rounds=min_rounds,
                sort_by=sort.value if sort else LeaderboardConstants.SORT_TOTAL_WINS,
            )
            await self._send_result(interaction, result)
        except Exception as e:
            logger.error(f"Error in store leaderboard command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("An error occurred while building the leaderboard. Please try again later."))

async def setup(bot):
    await bot.add_cog(LeaderboardCog(bot))
