"""
Capture pipeline for observed messages.

For each message:
1. Skip self-authored messages and broadcast/status conversations.
2. Text: first non-empty of body, extended body, attachment caption.
3. Media: the first attachment kind present in ``PROBE_ORDER`` is downloaded.
   Audio flagged push-to-talk is labelled as a voice note.
4. No text and no media -> nothing is cached.
"""

from __future__ import annotations

import logging
import textwrap
import time
from typing import Callable

from .events import (
    Attachment,
    MediaKind,
    ObservedMessage,
    PROBE_ORDER,
    validate_observed,
)
from .exceptions import FetchError, MalformedEventError
from .media import MediaFetcher
from .memory.shadow import CachedMessage
from .service import AntiDeleteService

logger = logging.getLogger(__name__)


def extract_text(message: ObservedMessage) -> str | None:
    """Return the first non-empty body variant or attachment caption."""

    candidates = [message.body, message.extended_body]
    candidates.extend(att.caption for att in message.attachments.values())
    for text in candidates:
        if text and text.strip():
            return text
    return None


def primary_attachment(message: ObservedMessage) -> Attachment | None:
    """Return the first attachment in probe order; at most one is fetched."""

    for kind in PROBE_ORDER:
        att = message.attachments.get(kind)
        if att is not None:
            return att
    return None


def _preview(entry: CachedMessage, *, width: int = 40) -> str:
    """Compact one-line summary for logs: e.g., image:'Look at…'."""
    kind = entry.media_kind.value if entry.media_kind else "text"
    if not entry.text_content:
        return kind
    return f"{kind}:'{textwrap.shorten(entry.text_content, width=width, placeholder='…')}'"


def effective_kind(att: Attachment) -> MediaKind:
    if att.kind is MediaKind.AUDIO and att.ptt:
        return MediaKind.VOICE_NOTE
    return att.kind


class CaptureService:
    def __init__(
        self,
        service: AntiDeleteService,
        fetcher: MediaFetcher,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._service = service
        self._fetcher = fetcher
        self._clock = clock

    async def on_observed(self, message: ObservedMessage) -> CachedMessage | None:
        """Cache ``message`` if it has recoverable content. Never raises."""

        if not self._service.enabled:
            return None
        try:
            validate_observed(message)
        except MalformedEventError as e:
            logger.warning("Skipping observed event: %s", e)
            return None

        if message.from_me or message.is_broadcast:
            return None

        # Deletions for this id wait on the marker until the entry is stored
        marker = self._service.begin_capture(message.id)
        try:
            try:
                entry = await self._build_entry(message)
            except Exception:
                logger.exception("Failed to capture message %s", message.id)
                return None

            if entry is None:
                logger.debug("Message %s has no recoverable content", message.id)
                return None

            # Disabled while the download was in flight
            if not self._service.enabled:
                return None

            self._service.store.put(message.id, entry)
        finally:
            self._service.end_capture(message.id, marker)

        if logger.isEnabledFor(logging.INFO):
            logger.info(
                "Cached msg %s in chat %s by %s | %s",
                message.id,
                message.chat_id,
                entry.sender_id,
                _preview(entry),
            )
        return entry

    async def _build_entry(self, message: ObservedMessage) -> CachedMessage | None:
        text = extract_text(message)

        media: bytes | None = None
        kind: MediaKind | None = None
        mime: str | None = None
        att = primary_attachment(message)
        if att is not None:
            try:
                media = await self._fetcher.fetch(att.ref, att.kind)
            except FetchError as e:
                logger.warning(
                    "Dropping %s media for message %s: %s", att.kind.value, message.id, e
                )
            else:
                if media:
                    kind = effective_kind(att)
                    mime = att.mime_type
                else:
                    media = None

        if not text and not media:
            return None

        return CachedMessage(
            id=message.id,
            sender_id=message.sender_id,
            chat_id=message.chat_id,
            captured_at=self._clock(),
            text_content=text,
            media=media,
            media_kind=kind,
            mime_type=mime,
        )
