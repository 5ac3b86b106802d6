"""
Helpers for scheduling periodic background jobs and cancelling them when the
bot shuts down.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


async def startup(task_fn: Callable[[], Awaitable[None]], interval: float) -> asyncio.Task:
    """
    Schedule ``task_fn`` to run periodically every ``interval`` seconds.

    The first run happens one interval after scheduling. Exceptions raised by
    the task function are logged but do not stop the periodic execution.

    Returns the created :class:`asyncio.Task` handle.
    """

    async def _periodic() -> None:
        await asyncio.sleep(interval)   # delay initial loop
        while True:
            try:
                await task_fn()
            except Exception:
                logger.exception("Maintenance cycle failed")
            await asyncio.sleep(interval)

    return asyncio.create_task(_periodic())


async def shutdown(task: asyncio.Task | None) -> None:
    """
    Cancel a task started with :func:`startup`.

    Tolerates ``None`` and waits for the cancellation to finish.
    """

    if not task:
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:  # pragma: no cover - normal cancellation
        pass
