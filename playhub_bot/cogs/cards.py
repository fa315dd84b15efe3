"""
Cards Cog - card search and card details.
"""

import discord
from discord import app_commands
from discord.ext import commands
from typing import List, Optional
from playhub_bot.services.rate_limiter import rate_limit
from playhub_bot.utils.embeds import build_card_embed, build_cards_embed
from playhub_bot.utils.error_embeds import ErrorEmbeds
from playhub_bot.utils.exceptions import PlayHubException
import logging

logger = logging.getLogger(__name__)

class CardsCog(commands.Cog):
    """Deckbuilder card lookups"""
    
    def __init__(self, bot):
        self.bot = bot
        self.card_service = bot.card_service
    
    @app_commands.command(name="card", description="Show a card's details")
    @app_commands.describe(card="Card name (pick a suggestion) or card ID")
    @rate_limit("cards", limit=15, window=60)
    async def card(self, interaction: discord.Interaction, card: str):
        """Show one card; the autocomplete fills in the card ID."""
        await interaction.response.defer()
        result = await self.card_service.get_card(card)
        if not result.ok:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(result.error))
            return
        await interaction.followup.send(embed=build_card_embed(result.value))
    
    @card.autocomplete('card')
    async def card_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        """Suggest cards by name."""
        try:
            cards = await self.card_service.suggest_cards(current)
        except PlayHubException as e:
            logger.warning(f"Card autocomplete failed for {current!r}: {e}")
            return []
        return [
            app_commands.Choice(name=c.title[:100], value=c.id)
            for c in cards
            if c.id
        ][:25]  # Discord limit
    
    @app_commands.command(name="card-search", description="Search cards by name or text")
    @app_commands.describe(query="Search text", page="Result page")
    @rate_limit("cards", limit=15, window=60)
    async def card_search(
        self,
        interaction: discord.Interaction,
        query: str,
        page: Optional[app_commands.Range[int, 1, 50]] = None
    ):
        """List cards matching a query."""
        await interaction.response.defer()
        result = await self.card_service.search_cards(query, page or 1)
        if not result.ok:
            await interaction.followup.send(embed=ErrorEmbeds.lookup_failed(result.error))
            return
        await interaction.followup.send(embed=build_cards_embed(query, result.value, page or 1))

async def setup(bot):
    await bot.add_cog(CardsCog(bot))
