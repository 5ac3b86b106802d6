"""Human-readable recovery alerts."""

from __future__ import annotations

import datetime
from zoneinfo import ZoneInfo

from undelete.memory.shadow import CachedMessage

TIME_FORMAT = "%b %d, %I:%M %p"


def format_participant(participant_id: str | None) -> str:
    """Render ``participant_id`` as ``@local-part``; ``@Unknown`` when missing."""
    if not participant_id:
        return "@Unknown"
    return "@" + str(participant_id).split("@", 1)[0]


def format_time(ts: float, tz: ZoneInfo) -> str:
    return datetime.datetime.fromtimestamp(ts, tz).strftime(TIME_FORMAT)


def kind_label(entry: CachedMessage) -> str:
    if entry.media_kind is None:
        return "TEXT"
    return entry.media_kind.value.replace("_", " ").upper()


def build_alert(
    entry: CachedMessage,
    deleter_id: str | None,
    *,
    tz: ZoneInfo,
    now: float,
) -> str:
    """Return the header block announcing a recovered message."""
    lines = [
        "**ANTI-DELETE ALERT**",
        f"• Type: {kind_label(entry)}",
        f"• Sender: {format_participant(entry.sender_id)}",
        f"• Deleted by: {format_participant(deleter_id)}",
        f"• Sent: {format_time(entry.captured_at, tz)}",
        f"• Recovered: {format_time(now, tz)}",
    ]
    return "\n".join(lines)


def with_content(alert: str, text: str) -> str:
    return f"{alert}\n• Content:\n{text}"
