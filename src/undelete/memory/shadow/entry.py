"""Cached message record and its JSON-safe form."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, Optional

from undelete.events import MediaKind


def _drop_nones(d: Dict[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of ``d`` without keys mapped to ``None``."""
    return {k: v for k, v in d.items() if v is not None}


@dataclass(frozen=True, slots=True)
class CachedMessage:
    """One captured message awaiting either deletion or expiry.

    Entries are immutable once captured. ``media_kind`` is required whenever
    ``media`` is present. ``captured_at`` is the capture wall-clock time in
    epoch seconds, not the stream's own timestamp.
    """

    id: str
    sender_id: str
    chat_id: str
    captured_at: float
    text_content: Optional[str] = None
    media: Optional[bytes] = None
    media_kind: Optional[MediaKind] = None
    mime_type: Optional[str] = None
    recovered: bool = False

    def __post_init__(self) -> None:
        if self.media is not None and self.media_kind is None:
            raise ValueError(f"Cached message {self.id} has media but no media kind")

    def has_content(self) -> bool:
        return bool(self.text_content) or bool(self.media)

    def age(self, now: float) -> float:
        return now - self.captured_at

    def to_dict(self) -> Dict[str, Any]:
        base = {
            "id": self.id,
            "sender_id": self.sender_id,
            "chat_id": self.chat_id,
            "captured_at": self.captured_at,
            "text_content": self.text_content,
            "media": base64.b64encode(self.media).decode("ascii") if self.media is not None else None,
            "media_kind": self.media_kind.value if self.media_kind is not None else None,
            "mime_type": self.mime_type,
            "recovered": self.recovered or None,
        }
        return _drop_nones(base)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedMessage":
        media = data.get("media")
        kind = data.get("media_kind")
        return cls(
            id=str(data["id"]),
            sender_id=str(data["sender_id"]),
            chat_id=str(data["chat_id"]),
            captured_at=float(data["captured_at"]),
            text_content=data.get("text_content"),
            media=base64.b64decode(media, validate=True) if media is not None else None,
            media_kind=MediaKind(kind) if kind is not None else None,
            mime_type=data.get("mime_type"),
            recovered=bool(data.get("recovered", False)),
        )
