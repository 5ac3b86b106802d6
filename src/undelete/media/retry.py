from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from undelete.exceptions import FetchError

logger = logging.getLogger(__name__)

Backoff = Callable[[int], float]


def linear(step: float) -> Backoff:
    """Delay of ``attempt * step`` seconds after the given failed attempt."""
    return lambda attempt: attempt * step


async def retry_with_backoff(
    func: Callable[[], Awaitable[Any]],
    *,
    attempts: int = 3,
    backoff: Backoff = linear(2.0),
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    label: str = "operation",
) -> Any:
    """Await ``func`` up to ``attempts`` times, sleeping ``backoff(n)`` after failure n.

    Raises :class:`FetchError` chained to the last failure once attempts are
    exhausted. Cancellation is never retried.
    """
    last_exception: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await func()
        except Exception as e:
            last_exception = e
            logger.warning("%s failed (attempt %d/%d): %s", label, attempt, attempts, e)
            if attempt < attempts:
                await sleep(backoff(attempt))
    raise FetchError(f"{label} failed after {attempts} attempts") from last_exception
