"""
Leaderboard view components for the PlayHub bot.

Pages through an already-computed leaderboard; changing page never goes
back upstream.
"""

import logging
from typing import Awaitable, Callable

import discord
from discord.ui import View, Button

from playhub_bot.constants import UIConstants
from playhub_bot.data_models.leaderboard import LeaderboardResult
from playhub_bot.utils.embeds import build_leaderboard_embed, total_pages

logger = logging.getLogger(__name__)

ButtonCallback = Callable[[discord.Interaction], Awaitable[None]]


class LeaderboardView(View):
    """First / previous / page / next / last navigation over a leaderboard."""

    def __init__(
        self,
        result: LeaderboardResult,
        event_url_base: str,
        *,
        page_size: int = UIConstants.LEADERBOARD_PAGE_SIZE,
        timeout: int = UIConstants.VIEW_TIMEOUT_SECONDS
    ):
        super().__init__(timeout=timeout)
        self.result = result
        self.event_url_base = event_url_base
        self.page_size = page_size
        self.current_page = 1
        self.total_pages = total_pages(result, page_size)
        self._render_controls()

    def build_embed(self) -> discord.Embed:
        return build_leaderboard_embed(self.result, self.event_url_base, self.current_page, self.page_size)

    def _nav_button(self, label: str, disabled: bool, callback: ButtonCallback = None) -> Button:
        button = Button(
            label=label,
            style=discord.ButtonStyle.primary if callback else discord.ButtonStyle.secondary,
            disabled=disabled,
        )
        if callback:
            button.callback = callback
        return button

    def _render_controls(self):
        on_first = self.current_page <= 1
        on_last = self.current_page >= self.total_pages
        self.clear_items()
        for button in (
            self._nav_button("«", on_first, self.first_page),
            self._nav_button("‹ Prev", on_first, self.previous_page),
            self._nav_button(f"{self.current_page} / {self.total_pages}", True),
            self._nav_button("Next ›", on_last, self.next_page),
            self._nav_button("»", on_last, self.last_page),
        ):
            self.add_item(button)

    async def first_page(self, interaction: discord.Interaction):
        await self._go_to(interaction, 1)

    async def previous_page(self, interaction: discord.Interaction):
        await self._go_to(interaction, self.current_page - 1)

    async def next_page(self, interaction: discord.Interaction):
        await self._go_to(interaction, self.current_page + 1)

    async def last_page(self, interaction: discord.Interaction):
        await self._go_to(interaction, self.total_pages)

    async def _go_to(self, interaction: discord.Interaction, page: int):
        self.current_page = min(max(1, page), self.total_pages)
        self._render_controls()
        try:
            await interaction.response.edit_message(embed=self.build_embed(), view=self)
        except discord.HTTPException as e:
            logger.error(f"Failed to update leaderboard page: {e}")
