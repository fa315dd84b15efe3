"""
Card lookups for the PlayHub bot.

Card data only changes with new set releases, so details are cached for a
day; searches use the same short TTL as event searches.
"""

import logging
from typing import List

from playhub_bot.constants import CacheConstants, UIConstants
from playhub_bot.data_models.card import Card, CardsPage
from playhub_bot.data_models.result import Failure, Result, Success
from playhub_bot.services.base import BaseService
from playhub_bot.utils.exceptions import PlayHubException, UpstreamAPIError

logger = logging.getLogger(__name__)


class CardService(BaseService):
    """Cached card search and detail accessors."""
    
    @staticmethod
    def _failure(error: PlayHubException) -> Failure:
        if isinstance(error, UpstreamAPIError):
            logger.warning(f"Upstream error during card lookup: {error}")
        else:
            logger.info(f"Card lookup failed: {error}")
        return Failure(error.user_message)
    
    async def suggest_cards(self, query: str) -> List[Card]:
        """
        Quick name matches for autocomplete.
        
        Raises:
            PlayHubException: upstream failure
        """
        query = query.strip()
        if not query:
            return []
        page = await self.cached(
            f"quick:{query.lower()}",
            lambda: self.client.search_cards_quick(query),
            CacheConstants.SEARCH_TTL,
        )
        return page.results
    
    async def search_cards(
        self,
        query: str,
        page: int = 1,
        page_size: int = UIConstants.MAX_CARDS_LISTED,
    ) -> Result[CardsPage]:
        """One page of full card search results."""
        query = query.strip()
        if not query:
            return Failure("Enter part of a card name to search for.")
        page = max(1, page)
        page_size = max(1, page_size)
        offset = (page - 1) * page_size
        try:
            cards = await self.cached(
                f"search:{query.lower()}|{page_size}|{offset}",
                lambda: self.client.search_cards_with_filters(query, limit=page_size, offset=offset),
                CacheConstants.SEARCH_TTL,
            )
        except PlayHubException as e:
            return self._failure(e)
        return Success(cards)
    
    async def get_card(self, card_id: str) -> Result[Card]:
        try:
            card = await self.cached(
                f"card:{card_id}",
                lambda: self.client.fetch_card_by_id(card_id),
                CacheConstants.CARD_TTL,
            )
        except PlayHubException as e:
            return self._failure(e)
        return Success(card)
