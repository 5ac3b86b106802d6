"""Transport-neutral event and payload models.

Two inbound feeds reach the pipeline:

``ObservedMessage``
    A message the bot has seen. Carries body variants and at most one primary
    attachment per :class:`MediaKind`.
``MessageUpdate``
    A change to a previously seen message. Only updates whose ``status`` equals
    :data:`REVOKE` are treated as deletions.

Outbound deliveries go through a :data:`SendFn` that accepts a destination id
and either a :class:`TextPayload` or a :class:`MediaPayload`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Union

from .exceptions import MalformedEventError

REVOKE = "REVOKE"

# Sent alongside voice notes so clients render them as push-to-talk audio.
VOICE_NOTE_MIME = "audio/ogg; codecs=opus"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    VOICE_NOTE = "voice_note"
    DOCUMENT = "document"
    STICKER = "sticker"


# Voice notes arrive as AUDIO with ``ptt`` set, so they are not probed directly.
PROBE_ORDER = (
    MediaKind.IMAGE,
    MediaKind.VIDEO,
    MediaKind.AUDIO,
    MediaKind.DOCUMENT,
    MediaKind.STICKER,
)


@dataclass(slots=True)
class Attachment:
    kind: MediaKind
    ref: str
    mime_type: Optional[str] = None
    ptt: bool = False
    caption: Optional[str] = None
    filename: Optional[str] = None


@dataclass(slots=True)
class ObservedMessage:
    id: str
    chat_id: str
    participant_id: Optional[str] = None
    from_me: bool = False
    body: Optional[str] = None
    extended_body: Optional[str] = None
    attachments: Dict[MediaKind, Attachment] = field(default_factory=dict)
    is_broadcast: bool = False

    @property
    def sender_id(self) -> str:
        """Participant in group chats, the conversation itself in direct ones."""
        return self.participant_id or self.chat_id


@dataclass(slots=True)
class MessageKey:
    id: str
    chat_id: str
    participant_id: Optional[str] = None
    from_me: bool = False


@dataclass(slots=True)
class MessageUpdate:
    key: MessageKey
    status: Optional[str] = None
    participant_id: Optional[str] = None

    @property
    def is_revoke(self) -> bool:
        return self.status == REVOKE

    @property
    def deleter_id(self) -> Optional[str]:
        return self.participant_id or self.key.participant_id


@dataclass(slots=True)
class TextPayload:
    text: str
    mentions: tuple[str, ...] = ()


@dataclass(slots=True)
class MediaPayload:
    kind: MediaKind
    data: bytes
    mime_type: Optional[str] = None
    caption: Optional[str] = None
    ptt: bool = False
    filename: Optional[str] = None


Payload = Union[TextPayload, MediaPayload]
SendFn = Callable[[str, Payload], Awaitable[None]]


def validate_observed(message: ObservedMessage) -> None:
    """Raise :class:`MalformedEventError` if ``message`` cannot be cached."""
    if not getattr(message, "id", None):
        raise MalformedEventError("observed message has no id")
    if not getattr(message, "chat_id", None):
        raise MalformedEventError(f"observed message {message.id} has no chat id")


def validate_update(update: MessageUpdate) -> None:
    """Raise :class:`MalformedEventError` if ``update`` has no usable key."""
    key = getattr(update, "key", None)
    if key is None or not getattr(key, "id", None):
        raise MalformedEventError("message update has no key id")
