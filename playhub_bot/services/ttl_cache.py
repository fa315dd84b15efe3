"""
In-memory TTL cache with optional max size.

Entries expire on access (``get``) and are pruned on ``set``. When a max size
is configured, the oldest entries by insertion/access order are evicted on
``set`` once the cache is at capacity, which keeps one-off keys from growing
the cache without bound. There are no background timers.

Recency is an approximation of LRU: reads move a key to the back of the
eviction order, but callers must not depend on exact ordering under
interleaved access. All mutation is synchronous, so the cache is safe to
share between coroutines on one event loop; guard it with a lock before
sharing it across threads.
"""

import time
from collections import OrderedDict
from typing import Callable, Generic, Optional, Tuple, TypeVar

V = TypeVar('V')


class TTLCache(Generic[V]):
    """Keyed store with per-entry expiry and bounded size."""

    def __init__(self, max_size: int = 0, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            max_size: Max number of entries; 0 or less means unbounded
            clock: Monotonic time source in seconds
        """
        self.max_size = max_size
        self._clock = clock
        self._store: 'OrderedDict[str, Tuple[V, float]]' = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        """Live-entry check; does not touch recency or drop expired entries."""
        entry = self._store.get(key)
        return entry is not None and self._clock() <= entry[1]

    def get(self, key: str) -> Optional[V]:
        """Return the cached value, or None when missing or expired."""
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() > expires_at:
            del self._store[key]
            return None
        if self.max_size > 0:
            self._store.move_to_end(key)
        return value

    def set(self, key: str, value: V, ttl: float) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        self._prune_expired()
        is_new = key not in self._store
        if is_new and self.max_size > 0:
            while len(self._store) >= self.max_size:
                self._store.popitem(last=False)
        elif not is_new:
            del self._store[key]
        self._store[key] = (value, self._clock() + ttl)

    def invalidate(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def _prune_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._store.items() if now > expires_at]
        for key in expired:
            del self._store[key]
