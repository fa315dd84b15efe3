import asyncio
import logging
from typing import Optional

import aiohttp
import discord
from discord.ext import commands
from discord import app_commands

from playhub_bot.config import Config
from playhub_bot.constants import CacheConstants
from playhub_bot.api.client import PlayHubClient
from playhub_bot.api.http import create_client_session
from playhub_bot.services.ttl_cache import TTLCache
from playhub_bot.services.cards import CardService
from playhub_bot.services.geocoding import GeocodingService
from playhub_bot.services.event_search import EventSearchService
from playhub_bot.services.standings import StandingsService
from playhub_bot.services.leaderboard import LeaderboardService
from playhub_bot.services.rate_limiter import SimpleRateLimiter
from playhub_bot.utils.error_embeds import ErrorEmbeds
from playhub_bot.utils.logger import setup_logger

EXTENSIONS = (
    'playhub_bot.cogs.leaderboard',
    'playhub_bot.cogs.events',
    'playhub_bot.cogs.cards',
    'playhub_bot.cogs.housekeeping',
)


class PlayHubBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        
        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None
        )
        
        self.tree.on_error = self.on_app_command_error
        
        self.owner_discord_id = Config.OWNER_DISCORD_ID
        self.event_url_base = f"{Config.PLAYHUB_WEB_BASE.rstrip('/')}/events"
        self.http_session: Optional[aiohttp.ClientSession] = None
        self.rate_limiter = SimpleRateLimiter()
        self.event_search_service: Optional[EventSearchService] = None
        self.standings_service: Optional[StandingsService] = None
        self.leaderboard_service: Optional[LeaderboardService] = None
        self.card_service: Optional[CardService] = None
        setup_logger(debug=Config.DEBUG)
        self.logger = logging.getLogger(__name__)
    
    def build_services(self, session: aiohttp.ClientSession):
        """Wire the client, caches and services; caches live as long as the bot."""
        client = PlayHubClient(
            session,
            Config.PLAYHUB_API_BASE,
            game_slug=Config.PLAYHUB_GAME_SLUG,
            game_id=Config.PLAYHUB_GAME_ID,
            referer=f"{Config.PLAYHUB_WEB_BASE.rstrip('/')}/",
            max_retries=Config.HTTP_MAX_RETRIES,
            retry_delay=Config.HTTP_RETRY_DELAY_SECONDS,
            debug=Config.API_DEBUG,
        )
        geocoder = GeocodingService(
            session,
            TTLCache(max_size=CacheConstants.GEOCODE_MAX_CACHE_SIZE),
            url=Config.NOMINATIM_URL,
            user_agent=Config.GEOCODER_USER_AGENT,
            max_retries=Config.HTTP_MAX_RETRIES,
            retry_delay=Config.HTTP_RETRY_DELAY_SECONDS,
            debug=Config.API_DEBUG,
        )
        self.event_search_service = EventSearchService(
            client,
            geocoder,
            TTLCache(max_size=CacheConstants.DEFAULT_MAX_CACHE_SIZE),
        )
        self.standings_service = StandingsService(
            client,
            event_cache=TTLCache(max_size=CacheConstants.DEFAULT_MAX_CACHE_SIZE),
            standings_cache=TTLCache(max_size=CacheConstants.DEFAULT_MAX_CACHE_SIZE),
        )
        self.leaderboard_service = LeaderboardService(
            self.event_search_service,
            self.standings_service,
            geocoder,
        )
        self.card_service = CardService(client, TTLCache(max_size=CacheConstants.DEFAULT_MAX_CACHE_SIZE))
    
    async def setup_hook(self):
        """Create the HTTP session and services, then register slash commands"""
        self.http_session = create_client_session(
            timeout=aiohttp.ClientTimeout(total=Config.HTTP_TIMEOUT_SECONDS)
        )
        self.build_services(self.http_session)
        self.logger.info(f"PlayHub services ready (api={Config.PLAYHUB_API_BASE}, api_debug={Config.API_DEBUG})")
        
        loaded = await self.load_cogs()
        if loaded:
            await self._sync_commands()
        else:
            self.logger.warning("No cogs loaded; skipping slash command sync")
    
    async def load_cogs(self) -> int:
        """Load command extensions; returns how many loaded"""
        loaded = 0
        for extension in EXTENSIONS:
            try:
                await self.load_extension(extension)
            except commands.ExtensionError as e:
                self.logger.error(f"Could not load {extension}: {e}", exc_info=True)
                continue
            loaded += 1
            self.logger.info(f"Loaded {extension}")
        return loaded
    
    async def _sync_to_guild(self, guild_id: int) -> int:
        guild = discord.Object(id=guild_id)
        self.tree.copy_global_to(guild=guild)
        try:
            synced = await self.tree.sync(guild=guild)
        except discord.Forbidden:
            self.logger.error(f"Missing applications.commands scope in guild {guild_id}")
            return 0
        except discord.HTTPException as e:
            self.logger.error(f"Command sync to guild {guild_id} failed ({e.status}): {e.text}")
            return 0
        return len(synced)
    
    async def _sync_commands(self):
        """Sync to configured guilds (instant) or globally (slow to propagate)"""
        guild_ids = Config.get_guild_ids()
        if not guild_ids:
            synced = await self.tree.sync()
            self.logger.info(f"Synced {len(synced)} global command(s); propagation can take up to an hour")
            return
        
        for guild_id in guild_ids:
            count = await self._sync_to_guild(guild_id)
            self.logger.info(f"Synced {count} command(s) to guild {guild_id}")
    
    async def on_ready(self):
        self.logger.info(f"Logged in as {self.user} in {len(self.guilds)} guild(s)")
        await self.change_presence(
            activity=discord.Game(name="PlayHub leaderboards | /leaderboard-city")
        )
    
    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Last-resort handler for errors escaping slash commands"""
        command_name = interaction.command.name if interaction.command else 'unknown'
        
        if isinstance(error, app_commands.CommandOnCooldown):
            embed = ErrorEmbeds.rate_limited(command_name, error.retry_after)
        elif isinstance(error, app_commands.TransformerError):
            embed = ErrorEmbeds.invalid_input(str(error))
        elif isinstance(error, app_commands.CheckFailure):
            self.logger.info(f"/{command_name} denied for {interaction.user}")
            embed = ErrorEmbeds.invalid_input("You can't use this command here.")
        else:
            self.logger.error(f"/{command_name} failed: {error}", exc_info=error)
            embed = ErrorEmbeds.command_error("An unexpected error occurred while processing your command.")
        
        send = interaction.followup.send if interaction.response.is_done() else interaction.response.send_message
        try:
            await send(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            self.logger.error(f"Could not report /{command_name} error to user: {e}")
    
    async def close(self):
        self.logger.info("Shutting down PlayHub Bot")
        if self.http_session is not None and not self.http_session.closed:
            await self.http_session.close()
        await super().close()


async def main():
    """Validate configuration and run the bot until interrupted"""
    Config.validate()
    bot = PlayHubBot()
    async with bot:
        await bot.start(Config.DISCORD_TOKEN)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted")


if __name__ == "__main__":
    run()
