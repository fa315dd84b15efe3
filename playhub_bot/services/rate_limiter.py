"""
Rate limiting for Discord commands.

Sliding-window limiter keyed by ``user:command``. Leaderboard commands fan
out to dozens of upstream requests, so they are throttled per user.
"""

import time
import asyncio
from functools import wraps
from collections import defaultdict, deque
import logging

from playhub_bot.utils.error_embeds import ErrorEmbeds

logger = logging.getLogger(__name__)

class SimpleRateLimiter:
    """In-memory sliding-window rate limiter.
    
    Keys whose window has fully drained are dropped on the next check so
    one-off users do not accumulate.
    """
    
    def __init__(self, clock=time.monotonic):
        self._requests = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._clock = clock
    
    async def is_allowed(self, user_id: int, command: str, limit: int, window: float) -> bool:
        """Check if user can execute command within rate limit, recording the call if so."""
        if limit <= 0 or window <= 0:
            return False
        
        key = f"{user_id}:{command}"
        now = self._clock()
        
        async with self._lock:
            history = self._requests[key]
            while history and history[0] <= now - window:
                history.popleft()
            
            if len(history) < limit:
                history.append(now)
                return True
            
            return False
    
    async def retry_after(self, user_id: int, command: str, window: float) -> float:
        """Seconds until the oldest recorded call leaves the window."""
        key = f"{user_id}:{command}"
        async with self._lock:
            history = self._requests.get(key)
            if not history:
                return 0.0
            return max(0.0, history[0] + window - self._clock())
    
    async def prune(self, window: float) -> int:
        """Drop keys with no calls inside ``window``; returns how many were removed."""
        now = self._clock()
        async with self._lock:
            stale = [key for key, history in self._requests.items()
                     if not history or history[-1] <= now - window]
            for key in stale:
                del self._requests[key]
        if stale:
            logger.debug(f"Pruned {len(stale)} idle rate limit keys")
        return len(stale)

def rate_limit(command: str, limit: int = 1, window: int = 60):
    """Decorator for rate limiting Discord app commands defined on a cog."""
    def decorator(func):
        @wraps(func)
        async def wrapper(self, interaction, *args, **kwargs):
            rate_limiter = self.bot.rate_limiter
            
            # Bot owner bypasses rate limits
            if interaction.user.id == self.bot.owner_discord_id:
                return await func(self, interaction, *args, **kwargs)
            
            if not await rate_limiter.is_allowed(interaction.user.id, command, limit, window):
                wait = await rate_limiter.retry_after(interaction.user.id, command, window)
                await interaction.response.send_message(
                    embed=ErrorEmbeds.rate_limited(command, wait),
                    ephemeral=True
                )
                return
            
            return await func(self, interaction, *args, **kwargs)
        return wrapper
    return decorator
