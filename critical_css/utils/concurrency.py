"""Concurrency utilities for critical-css."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')

async def gather_ordered(fn: Callable[[T], Awaitable[R]], items: Iterable[T]) -> List[R]:
    """Run `fn` over every item concurrently and return results in input order.

    Every call is started before any of them is awaited, so one slow item
    never delays the start of the next. The returned list is indexed like
    `items` regardless of completion order.

    Args:
        fn: Coroutine function applied to each item
        items: Inputs

    Returns:
        Results, in the order of `items`

    Raises:
        Exception: The first exception raised by `fn`, after the remaining
            calls have been cancelled
    """
    items = list(items)
    if not items:
        return []
    tasks = [asyncio.ensure_future(fn(item)) for item in items]
    logger.debug(f"Waiting for {len(tasks)} concurrent tasks")
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        # cancel the calls still running
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

async def run_blocking(fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
    """Run a blocking call in the default thread pool.

    Args:
        fn: Function to execute
        *args: Positional arguments
        **kwargs: Keyword arguments

    Returns:
        Result of the call
    """
    return await asyncio.to_thread(fn, *args, **kwargs)

# Exported functions
__all__ = ['gather_ordered', 'run_blocking']
