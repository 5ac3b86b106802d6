"""
Translate discord.py objects into the transport-neutral event model.

``to_observed``
    :class:`discord.Message` -> :class:`ObservedMessage`. The first attachment
    of each media kind is kept; voice messages are audio with ``ptt`` set and
    stickers become sticker attachments.
``to_update`` / ``to_bulk_updates``
    Raw delete payloads -> revoke :class:`MessageUpdate` records. Discord does
    not report who deleted a message, so the acting participant is left empty
    and alerts fall back to the key's participant.
"""

from __future__ import annotations

from typing import Iterable

import discord

from undelete.events import (
    REVOKE,
    Attachment,
    MediaKind,
    MessageKey,
    MessageUpdate,
    ObservedMessage,
)

_STICKER_MIME = {
    "png": "image/png",
    "apng": "image/png",
    "gif": "image/gif",
    "lottie": "application/json",
}


def classify_attachment(att: discord.Attachment) -> MediaKind:
    """Map an attachment's declared content type onto a :class:`MediaKind`."""

    content_type = (att.content_type or "").lower()
    if content_type.startswith("image/"):
        return MediaKind.IMAGE
    if content_type.startswith("video/"):
        return MediaKind.VIDEO
    if content_type.startswith("audio/"):
        return MediaKind.AUDIO
    return MediaKind.DOCUMENT


def _attachments(message: discord.Message) -> dict[MediaKind, Attachment]:
    found: dict[MediaKind, Attachment] = {}
    for att in message.attachments or []:
        kind = classify_attachment(att)
        if kind in found:
            continue
        is_voice = bool(getattr(att, "is_voice_message", lambda: False)())
        found[kind] = Attachment(
            kind=kind,
            ref=att.url,
            mime_type=att.content_type,
            ptt=is_voice and kind is MediaKind.AUDIO,
            caption=getattr(att, "description", None),
            filename=att.filename,
        )
    stickers = getattr(message, "stickers", None) or []
    if stickers and MediaKind.STICKER not in found:
        sticker = stickers[0]
        found[MediaKind.STICKER] = Attachment(
            kind=MediaKind.STICKER,
            ref=sticker.url,
            mime_type=_STICKER_MIME.get(getattr(getattr(sticker, "format", None), "name", None), "image/png"),
            filename=getattr(sticker, "name", None),
        )
    return found


def _embed_text(message: discord.Message) -> str | None:
    parts = [e.description for e in (message.embeds or []) if getattr(e, "description", None)]
    return "\n".join(parts) if parts else None


def is_broadcast(channel) -> bool:
    """Announcement channels play the role of broadcast/status feeds."""
    return getattr(channel, "type", None) == discord.ChannelType.news


def to_observed(message: discord.Message, *, bot_user_id: int) -> ObservedMessage:
    author_id = getattr(message.author, "id", None)
    return ObservedMessage(
        id=str(message.id),
        chat_id=str(message.channel.id),
        participant_id=str(author_id) if author_id is not None else None,
        from_me=author_id == bot_user_id,
        body=message.content or None,
        extended_body=_embed_text(message),
        attachments=_attachments(message),
        is_broadcast=is_broadcast(message.channel),
    )


def _key(
    message_id: int,
    channel_id: int,
    cached: discord.Message | None,
    bot_user_id: int,
) -> MessageKey:
    author_id = getattr(getattr(cached, "author", None), "id", None)
    return MessageKey(
        id=str(message_id),
        chat_id=str(channel_id),
        participant_id=str(author_id) if author_id is not None else None,
        from_me=author_id is not None and author_id == bot_user_id,
    )


def to_update(payload: discord.RawMessageDeleteEvent, *, bot_user_id: int) -> MessageUpdate:
    key = _key(payload.message_id, payload.channel_id, payload.cached_message, bot_user_id)
    return MessageUpdate(key=key, status=REVOKE)


def to_bulk_updates(
    payload: discord.RawBulkMessageDeleteEvent, *, bot_user_id: int
) -> Iterable[MessageUpdate]:
    cached = {m.id: m for m in (payload.cached_messages or [])}
    for mid in sorted(payload.message_ids):
        key = _key(mid, payload.channel_id, cached.get(mid), bot_user_id)
        yield MessageUpdate(key=key, status=REVOKE)
