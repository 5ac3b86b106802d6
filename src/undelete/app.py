"""Wiring for one bot process: a single service shared by every component."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from .capture import CaptureService
from .events import SendFn
from .exceptions import ConfigurationError
from .media import MediaFetcher
from .memory.shadow import ShadowStore
from .recovery.dispatcher import RecoveryDispatcher
from .recovery.routing import RoutingMode
from .service import AntiDeleteService
from .sweeper import EvictionSweeper

logger = logging.getLogger(__name__)


@dataclass
class App:
    service: AntiDeleteService
    capture: CaptureService
    dispatcher: RecoveryDispatcher
    sweeper: EvictionSweeper

    async def start(self) -> None:
        """Load the snapshot and begin periodic eviction."""
        self.service.store.load()
        await self.sweeper.run_once()
        await self.sweeper.start()

    async def stop(self) -> None:
        """Stop eviction and write a final snapshot."""
        await self.sweeper.stop()
        self.service.store.flush()


def _capture_budget(recovery_cfg) -> float:
    """Longest a media download can take: every attempt timing out plus backoff."""
    attempts = recovery_cfg.FETCH_ATTEMPTS
    backoff = sum(n * recovery_cfg.FETCH_BACKOFF_SECONDS for n in range(1, attempts))
    return attempts * recovery_cfg.FETCH_TIMEOUT_SECONDS + backoff


def build_app(
    send: SendFn,
    *,
    core_cfg,
    recovery_cfg,
    fetcher: MediaFetcher | None = None,
    store: ShadowStore | None = None,
) -> App:
    """
    Build the pipeline from configuration objects.

    :param send: Outbound send function used for recoveries.
    :param core_cfg: Object exposing ``BOT_USER_ID``, ``OWNER_ID``, ``INBOX_CHANNEL_ID``.
    :param recovery_cfg: Object exposing the ``Recovery`` settings.
    :param fetcher: Optional media fetcher override (tests).
    :param store: Optional store override (tests).
    """
    mode = RoutingMode(recovery_cfg.MODE)
    owner_id = str(core_cfg.OWNER_ID) if core_cfg.OWNER_ID else None
    if mode is RoutingMode.OWNER_PM and owner_id is None:
        raise ConfigurationError("ANTI_DELETE_PATH=owner-pm requires OWNER_ID")

    try:
        tz = ZoneInfo(recovery_cfg.TIMEZONE)
    except (KeyError, ValueError) as exc:
        raise ConfigurationError(f"Unknown time zone {recovery_cfg.TIMEZONE!r}") from exc

    if store is None:
        store = ShadowStore(recovery_cfg.STORE_PATH)
    service = AntiDeleteService(
        store,
        mode=mode,
        ttl=recovery_cfg.TTL_SECONDS,
        enabled=recovery_cfg.ENABLED,
    )
    if fetcher is None:
        fetcher = MediaFetcher(
            attempts=recovery_cfg.FETCH_ATTEMPTS,
            backoff_step=recovery_cfg.FETCH_BACKOFF_SECONDS,
            attempt_timeout=recovery_cfg.FETCH_TIMEOUT_SECONDS,
            max_bytes=recovery_cfg.MAX_MEDIA_MB * 1024 * 1024,
        )
    app = App(
        service=service,
        capture=CaptureService(service, fetcher),
        dispatcher=RecoveryDispatcher(
            service,
            send,
            self_id=str(core_cfg.INBOX_CHANNEL_ID),
            owner_id=owner_id,
            tz=tz,
            capture_wait=_capture_budget(recovery_cfg),
        ),
        sweeper=EvictionSweeper(store, recovery_cfg.TTL_SECONDS),
    )
    logger.info(
        "Anti-delete %s (mode=%s, ttl=%ss, store=%s)",
        "enabled" if service.enabled else "disabled",
        mode.value,
        recovery_cfg.TTL_SECONDS,
        recovery_cfg.STORE_PATH,
    )
    return app
