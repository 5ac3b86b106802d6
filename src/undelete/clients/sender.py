"""Outbound delivery of recovery payloads through the Discord API."""

from __future__ import annotations

import io
import logging
import mimetypes

import discord

from undelete.events import MediaKind, MediaPayload, Payload, TextPayload
from undelete.exceptions import DispatchError

logger = logging.getLogger(__name__)

MAX_MESSAGE_LEN = 2000


def _chunks(text: str, size: int = MAX_MESSAGE_LEN) -> list[str]:
    return [text[i : i + size] for i in range(0, len(text), size)] or [""]


def _with_mentions(text: str, mentions: tuple[str, ...]) -> str:
    """Turn plain ``@<id>`` markers into Discord user mentions."""
    for uid in mentions:
        if uid.isdigit():
            text = text.replace(f"@{uid}", f"<@{uid}>")
    return text


def default_filename(payload: MediaPayload) -> str:
    if payload.filename:
        return payload.filename
    if payload.kind is MediaKind.VOICE_NOTE:
        return "voice-message.ogg"
    base_mime = (payload.mime_type or "").split(";", 1)[0].strip()
    ext = mimetypes.guess_extension(base_mime) if base_mime else None
    return f"recovered-{payload.kind.value}{ext or '.bin'}"


class DiscordSender:
    """Callable implementing ``SendFn`` on top of a :class:`discord.Client`."""

    def __init__(self, client: discord.Client) -> None:
        self._client = client

    async def _resolve(self, destination: str) -> discord.abc.Messageable:
        try:
            target_id = int(destination)
        except ValueError as exc:
            raise DispatchError(f"Invalid destination id {destination!r}") from exc

        channel = self._client.get_channel(target_id)
        if channel is not None:
            return channel
        user = self._client.get_user(target_id)
        if user is not None:
            return user
        try:
            return await self._client.fetch_channel(target_id)
        except (discord.NotFound, discord.Forbidden):
            pass
        try:
            return await self._client.fetch_user(target_id)
        except discord.HTTPException as exc:
            raise DispatchError(f"Destination {destination} not found") from exc

    async def __call__(self, destination: str, payload: Payload) -> None:
        target = await self._resolve(destination)
        no_pings = discord.AllowedMentions.none()
        try:
            if isinstance(payload, TextPayload):
                text = _with_mentions(payload.text, payload.mentions)
                for part in _chunks(text):
                    await target.send(part, allowed_mentions=no_pings)
            elif isinstance(payload, MediaPayload):
                file = discord.File(io.BytesIO(payload.data), filename=default_filename(payload))
                await target.send(content=payload.caption, file=file, allowed_mentions=no_pings)
            else:
                raise DispatchError(f"Unsupported payload type {type(payload).__name__}")
        except discord.HTTPException as exc:
            raise DispatchError(f"Discord rejected send to {destination}: {exc}") from exc
