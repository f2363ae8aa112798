"""
Bounded retry with exponential backoff for flaky collaborator calls.

Only used around remote collaborators (metadata fetch, answer generation).
Local disk writes are never retried.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    label: str = "call",
) -> T:
    """
    Await ``fn()`` up to ``attempts`` times.

    Waits ``base_delay * 2**attempt`` seconds between tries (1s, 2s, 4s with
    the defaults). The last error is re-raised unchanged once attempts are
    exhausted; errors outside ``retry_on`` propagate immediately.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(attempts):
        try:
            return await fn()
        except retry_on as e:
            if attempt == attempts - 1:
                logger.error(f"{label} failed after {attempts} attempts: {e}")
                raise
            wait_time = base_delay * (2 ** attempt)
            logger.warning(
                f"{label} failed on attempt {attempt + 1}/{attempts}: {e}. "
                f"Retrying in {wait_time}s..."
            )
            await asyncio.sleep(wait_time)

    raise AssertionError("unreachable")
