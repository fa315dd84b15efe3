"""
Error embeds shown to users when a lookup or command fails.
"""

import discord

from playhub_bot.constants import UIConstants


def _error_embed(title: str, description: str, color: discord.Color) -> discord.Embed:
    return discord.Embed(title=title, description=description[:4096], color=color)


class ErrorEmbeds:
    """Factory for the bot's error embeds."""
    
    @staticmethod
    def command_error(error: str) -> discord.Embed:
        """Unexpected failure while running a command."""
        return _error_embed(
            "Something Went Wrong",
            f"{error}\n\nIf this keeps happening, let the bot owner know.",
            discord.Color(UIConstants.ERROR_COLOR)
        )
    
    @staticmethod
    def invalid_input(message: str) -> discord.Embed:
        return _error_embed("Invalid Input", message, discord.Color(UIConstants.ERROR_COLOR))
    
    @staticmethod
    def lookup_failed(message: str) -> discord.Embed:
        """A search, standings or leaderboard request came back as a failure result."""
        return _error_embed("Nothing Found", message, discord.Color.orange())
    
    @staticmethod
    def rate_limited(command: str, retry_after: float = 0) -> discord.Embed:
        """Per-user command throttle hit."""
        description = f"`/{command}` queries PlayHub many times per call, so it is limited per user."
        if retry_after > 0:
            description += f" Try again in {retry_after:.0f}s."
        return _error_embed("Slow Down", description, discord.Color.orange())
