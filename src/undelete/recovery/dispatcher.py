"""Turn revoke updates into recovery messages."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable
from zoneinfo import ZoneInfo

from undelete.events import (
    MediaKind,
    MediaPayload,
    MessageUpdate,
    Payload,
    SendFn,
    TextPayload,
    VOICE_NOTE_MIME,
    validate_update,
)
from undelete.exceptions import DispatchError, MalformedEventError
from undelete.memory.shadow import CachedMessage

from . import alert
from .routing import resolve_destination

if TYPE_CHECKING:
    from undelete.service import AntiDeleteService

logger = logging.getLogger(__name__)


class RecoveryDispatcher:
    """Forward cached content of deleted messages to the routed destination."""

    def __init__(
        self,
        service: "AntiDeleteService",
        send: SendFn,
        *,
        self_id: str,
        owner_id: str | None = None,
        tz: ZoneInfo | None = None,
        clock: Callable[[], float] = time.time,
        capture_wait: float = 60.0,
    ) -> None:
        self._service = service
        self._send = send
        self._self_id = self_id
        self._owner_id = owner_id
        self._tz = tz or ZoneInfo("UTC")
        self._clock = clock
        self._capture_wait = capture_wait

    async def on_updated(self, update: MessageUpdate) -> int:
        """
        Handle one update from the stream.

        Only revokes of cached, non-self messages produce output. Removing the
        entry from the store is what makes a repeated revoke a no-op.

        :returns: Number of sends that succeeded.
        """
        if not self._service.enabled:
            return 0
        try:
            validate_update(update)
        except MalformedEventError as e:
            logger.warning("Skipping update event: %s", e)
            return 0

        if not update.is_revoke or update.key.from_me:
            return 0

        entry = self._service.store.remove(update.key.id)
        if entry is None and await self._service.wait_for_capture(
            update.key.id, self._capture_wait
        ):
            entry = self._service.store.remove(update.key.id)
        if entry is None:
            logger.debug("Revoke for uncached message %s ignored", update.key.id)
            return 0

        try:
            destination = resolve_destination(
                self._service.mode,
                entry.chat_id,
                self_id=self._self_id,
                owner_id=self._owner_id,
            )
        except Exception:
            logger.exception("Cannot route recovery for message %s", entry.id)
            return 0

        logger.info(
            "Recovering deleted msg %s from chat %s -> %s (%s)",
            entry.id,
            entry.chat_id,
            destination,
            self._service.mode.value,
        )
        return await self._deliver(destination, entry, update.deleter_id)

    def build_payloads(
        self, entry: CachedMessage, deleter_id: str | None
    ) -> list[Payload]:
        """Alert first, then media, then caption text (when media exists)."""

        mentions = tuple(p for p in (entry.sender_id, deleter_id) if p)
        header = alert.build_alert(entry, deleter_id, tz=self._tz, now=self._clock())

        if not entry.media:
            text = alert.with_content(header, entry.text_content) if entry.text_content else header
            return [TextPayload(text=text, mentions=mentions)]

        payloads: list[Payload] = [TextPayload(text=header, mentions=mentions)]
        if entry.media_kind is MediaKind.VOICE_NOTE:
            payloads.append(
                MediaPayload(
                    kind=MediaKind.VOICE_NOTE,
                    data=entry.media,
                    mime_type=VOICE_NOTE_MIME,
                    ptt=True,
                )
            )
        else:
            payloads.append(
                MediaPayload(
                    kind=entry.media_kind,
                    data=entry.media,
                    mime_type=entry.mime_type,
                )
            )
        if entry.text_content:
            payloads.append(TextPayload(text=entry.text_content))
        return payloads

    async def _deliver(
        self, destination: str, entry: CachedMessage, deleter_id: str | None
    ) -> int:
        sent = 0
        for idx, payload in enumerate(self.build_payloads(entry, deleter_id), start=1):
            try:
                await self._send(destination, payload)
            except DispatchError as exc:
                logger.error("Recovery send %d for message %s failed: %s", idx, entry.id, exc)
                continue
            except Exception:
                logger.exception("Recovery send %d for message %s failed", idx, entry.id)
                continue
            sent += 1
        return sent
