"""Destination selection for recovered messages."""

from __future__ import annotations

from enum import Enum

from undelete.exceptions import ConfigurationError


class RoutingMode(str, Enum):
    SAME_CHAT = "same-chat"
    INBOX = "inbox"
    OWNER_PM = "owner-pm"


def resolve_destination(
    mode: RoutingMode,
    chat_id: str,
    *,
    self_id: str,
    owner_id: str | None = None,
) -> str:
    """
    Return the conversation that should receive a recovery.

    :param mode: Process-wide routing mode.
    :param chat_id: Conversation the deleted message belonged to.
    :param self_id: The bot's own conversation ("inbox").
    :param owner_id: Private conversation of the configured owner.
    :returns: Destination id for the send function.
    """
    if mode is RoutingMode.SAME_CHAT:
        return chat_id
    if mode is RoutingMode.INBOX:
        return self_id
    if mode is RoutingMode.OWNER_PM:
        if not owner_id:
            raise ConfigurationError("owner-pm routing requires an owner id")
        return owner_id
    raise ConfigurationError(f"Unsupported routing mode: {mode!r}")
