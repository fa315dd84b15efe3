"""
Bounded-concurrency fan-out for async work lists.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

T = TypeVar('T')
R = TypeVar('R')

logger = logging.getLogger(__name__)


async def run_with_bounded_concurrency(
    items: Sequence[T],
    width: int,
    op: Callable[[T], Awaitable[R]],
) -> List[Optional[R]]:
    """
    Run ``op`` over ``items`` with at most ``width`` calls in flight.

    A fixed pool of ``min(width, len(items))`` workers pulls the next unclaimed
    index until the list is exhausted. The output has the same length and
    index order as ``items``; an item whose call raises is recorded as None
    and never cancels its siblings. No per-item timeout is applied here.
    """
    results: List[Optional[R]] = [None] * len(items)
    if not items:
        return results

    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while next_index < len(items):
            i = next_index
            next_index += 1
            try:
                results[i] = await op(items[i])
            except Exception as e:
                logger.debug(f"Bounded task {i} failed: {e!r}")
                results[i] = None

    workers = [worker() for _ in range(min(max(1, width), len(items)))]
    await asyncio.gather(*workers)
    return results
