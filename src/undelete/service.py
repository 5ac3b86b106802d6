"""Runtime state shared by capture, recovery and the admin commands."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .memory.shadow import ShadowStore
from .recovery.routing import RoutingMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServiceStatus:
    enabled: bool
    mode: RoutingMode
    cache_size: int
    ttl: float


class AntiDeleteService:
    """Owns the shadow store and the enabled flag for one bot process."""

    def __init__(
        self,
        store: ShadowStore,
        *,
        mode: RoutingMode = RoutingMode.INBOX,
        ttl: float = 300.0,
        enabled: bool = True,
    ) -> None:
        self.store = store
        self.mode = mode
        self.ttl = ttl
        self.enabled = enabled
        self._in_flight: dict[str, asyncio.Event] = {}

    def enable(self) -> None:
        self.enabled = True
        logger.info("Anti-delete enabled (mode=%s)", self.mode.value)

    def disable(self) -> None:
        """Turn capture and recovery off and drop everything cached so far."""
        self.enabled = False
        dropped = self.store.clear()
        logger.info("Anti-delete disabled; cleared %d cached messages", dropped)

    def status(self) -> ServiceStatus:
        return ServiceStatus(
            enabled=self.enabled,
            mode=self.mode,
            cache_size=self.store.size(),
            ttl=self.ttl,
        )

    # ------------------------------------------------------------------ #
    # In-flight captures
    # ------------------------------------------------------------------ #

    def begin_capture(self, message_id: str) -> asyncio.Event:
        """Mark ``message_id`` as being captured until :meth:`end_capture`."""
        return self._in_flight.setdefault(message_id, asyncio.Event())

    def end_capture(self, message_id: str, marker: asyncio.Event) -> None:
        if self._in_flight.get(message_id) is marker:
            del self._in_flight[message_id]
        marker.set()

    async def wait_for_capture(self, message_id: str, timeout: float) -> bool:
        """
        Wait up to ``timeout`` seconds for an in-flight capture of ``message_id``.

        Returns ``True`` if a capture was in flight and finished in time.
        """
        marker = self._in_flight.get(message_id)
        if marker is None:
            return False
        try:
            await asyncio.wait_for(marker.wait(), timeout)
        except asyncio.TimeoutError:
            logger.warning("Capture of message %s still running after %.0fs", message_id, timeout)
            return False
        return True
