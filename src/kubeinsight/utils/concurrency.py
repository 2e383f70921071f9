"""Bounded asyncio fan-out."""

import asyncio
from typing import Any, Awaitable, List


async def gather_with_concurrency(
    coros: List[Awaitable[Any]],
    max_concurrency: int = 5,
    return_exceptions: bool = True,
) -> List[Any]:
    """Execute coroutines with at most ``max_concurrency`` in flight."""
    semaphore = asyncio.Semaphore(max_concurrency)

    async def limited_coro(coro):
        async with semaphore:
            return await coro

    limited_coros = [limited_coro(coro) for coro in coros]
    return await asyncio.gather(*limited_coros, return_exceptions=return_exceptions)
