"""Bounded-concurrency helpers for async file work."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def run_limited(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: int,
) -> list[R]:
    """Run ``worker`` over ``items`` with at most ``concurrency`` in flight.

    Every item is attempted. Exceptions raised by a worker propagate once
    all workers have finished, so workers that need per-item isolation must
    catch their own errors.

    Args:
        items: Inputs to process.
        worker: Coroutine function applied to each item.
        concurrency: Maximum number of simultaneous workers.

    Returns:
        Worker results in input order.

    Raises:
        ValueError: If concurrency is less than 1.
    """
    if concurrency < 1:
        msg = "Concurrency must be at least 1"
        raise ValueError(msg)

    semaphore = asyncio.Semaphore(concurrency)

    async def _run(item: T) -> R:
        async with semaphore:
            return await worker(item)

    results = await asyncio.gather(*(_run(item) for item in items), return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results  # type: ignore[return-value]
