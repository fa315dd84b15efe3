"""
Search result models for event and store lookups.
"""

from dataclasses import dataclass
from typing import List, Optional

from playhub_bot.data_models.event import Event, GameStore


@dataclass(frozen=True)
class GeoLocation:
    lat: float
    lon: float
    display_name: str


@dataclass(frozen=True)
class EventSearchPage:
    """A page of events plus the resolved location label."""
    events: List[Event]
    location: str
    total: int
    current_page: int
    next_page: Optional[int]
    page_size: int


@dataclass(frozen=True)
class StoreSearchPage:
    stores: List[GameStore]
    total: int
    current_page: int
    next_page: Optional[int]
    page_size: int
    location: Optional[str] = None
