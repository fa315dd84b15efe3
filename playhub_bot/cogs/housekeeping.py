"""
Housekeeping Cog - periodic cleanup of in-memory state.

Prunes idle rate limiter keys so users who ran a command once do not stay in
memory for the life of the process.
"""

from discord.ext import commands, tasks
import logging

logger = logging.getLogger(__name__)

RATE_LIMIT_IDLE_SECONDS = 3600


class HousekeepingCog(commands.Cog):
    """Background maintenance tasks"""
    
    def __init__(self, bot):
        self.bot = bot
    
    async def cog_load(self):
        self.prune_rate_limits.start()
    
    async def cog_unload(self):
        self.prune_rate_limits.cancel()
    
    @tasks.loop(hours=1)
    async def prune_rate_limits(self):
        try:
            removed = await self.bot.rate_limiter.prune(RATE_LIMIT_IDLE_SECONDS)
        except Exception as e:
            logger.error(f"Rate limiter prune failed: {e}", exc_info=True)
            return
        if removed:
            logger.info(f"Pruned {removed} idle rate limit entries")
    
    @prune_rate_limits.before_loop
    async def before_prune(self):
        await self.bot.wait_until_ready()

async def setup(bot):
    await bot.add_cog(HousekeepingCog(bot))
