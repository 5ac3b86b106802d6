"""Periodic TTL eviction for the shadow store."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from . import maintenance
from .memory.shadow import ShadowStore

logger = logging.getLogger(__name__)


class EvictionSweeper:
    """Purge entries older than ``ttl`` every ``ttl`` seconds."""

    def __init__(
        self,
        store: ShadowStore,
        ttl: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._ttl = ttl
        self._clock = clock
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> list[str]:
        expired = self._store.sweep_expired(self._clock(), self._ttl)
        if expired:
            logger.info("Evicted %d expired messages; %d cached", len(expired), len(self._store))
        return expired

    async def start(self) -> asyncio.Task:
        if not self.running:
            logger.info("Starting eviction sweeper (interval=%ds)", self._ttl)
            self._task = await maintenance.startup(self.run_once, self._ttl)
        return self._task

    async def stop(self) -> None:
        if self._task:
            await maintenance.shutdown(self._task)
            self._task = None
