"""
Deckbuilder card data models for the PlayHub API.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from playhub_bot.data_models.event import _as_int


def _label(value: Any) -> Optional[str]:
    """Upstream sends some attributes as plain strings, some as ``{'name': ...}``."""
    if isinstance(value, dict):
        return value.get('name') or value.get('display_name')
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class Card:
    """One card from the deckbuilder catalogue."""
    id: str
    name: str
    display_name: Optional[str] = None
    subtitle: Optional[str] = None
    card_type: Optional[str] = None
    rarity: Optional[str] = None
    set_name: Optional[str] = None
    cost: Optional[int] = None
    image_url: Optional[str] = None
    rules_text: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Card':
        cost = data.get('cost')
        if cost is None:
            cost = data.get('ink_cost')
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name') or '',
            display_name=data.get('display_name'),
            subtitle=data.get('subtitle') or data.get('version'),
            card_type=_label(data.get('card_type') or data.get('type')),
            rarity=_label(data.get('rarity')),
            set_name=_label(data.get('card_set') or data.get('set')) or data.get('set_name'),
            cost=_as_int(cost),
            image_url=data.get('image_url') or data.get('image'),
            rules_text=data.get('rules_text') or data.get('text'),
        )

    @property
    def title(self) -> str:
        """Best human-readable name, e.g. ``Elsa - Snow Queen``."""
        if self.display_name:
            return self.display_name
        if self.subtitle:
            return f"{self.name} - {self.subtitle}"
        return self.name or self.id


@dataclass(frozen=True)
class CardsPage:
    """Card search results; ``offset`` is only meaningful for filtered search."""
    results: List[Card]
    count: int
    limit: Optional[int] = None
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.results) < self.count
