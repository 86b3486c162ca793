"""
Bounded fan-out and cooperative cancellation for transition analysis.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from .exceptions import AnalysisCancelled
from .logging_config import get_agent_logger

logger = get_agent_logger("supervisor")

T = TypeVar("T")
R = TypeVar("R")


class CancellationToken:
    """
    Flag observed by a running analysis at each suspension point.

    Cancelling never interrupts an in-flight oracle call; the computation
    notices at its next checkpoint and stops without publishing anything.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise AnalysisCancelled()


async def map_with_concurrency(
    items: Sequence[T],
    limit: int,
    worker: Callable[[T, int], Awaitable[R]],
    token: Optional[CancellationToken] = None,
) -> List[R]:
    """
    Run worker(item, index) over items with at most `limit` in flight.

    Results come back in input order regardless of completion order. The
    first worker exception cancels the remaining lanes and is re-raised.
    """
    if not items:
        return []

    results: List[Optional[R]] = [None] * len(items)
    cursor = 0

    async def lane() -> None:
        nonlocal cursor
        while True:
            if token is not None:
                token.raise_if_cancelled()
            if cursor >= len(items):
                return
            index = cursor
            cursor += 1
            results[index] = await worker(items[index], index)

    lane_count = max(1, min(limit, len(items)))
    tasks = [asyncio.ensure_future(lane()) for _ in range(lane_count)]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    logger.debug(f"Completed {len(items)} items across {lane_count} lanes")
    return results  # type: ignore[return-value]
