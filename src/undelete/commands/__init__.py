"""Command dispatch utilities."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, NamedTuple

import discord

from .handlers import CommandHandler, get as get_handler

if TYPE_CHECKING:
    from undelete.app import App

logger = logging.getLogger(__name__)


class CommandInvocation(NamedTuple):
    """Resolved command data for downstream consumers."""

    handler: CommandHandler
    name: str
    args: str


def _resolve_command(content: str, prefix: str) -> CommandInvocation | None:
    """Return the handler, command name, and args if ``content`` matches."""

    match = re.match(rf"\s*{re.escape(prefix)}(\w+)(?:\s+(.*))?", content, re.DOTALL)
    if not match:
        return None

    command, args = match.groups()
    command = (command or "").lower()
    handler = get_handler(command)
    if not handler:
        return None

    return CommandInvocation(handler=handler, name=command, args=(args or ""))


def is_authorized(message: discord.Message, *, bot_user_id: int, owner_id: int | None) -> bool:
    """Only the owner (or the bot account itself) may run admin commands."""

    author_id = getattr(getattr(message, "author", None), "id", None)
    return author_id is not None and author_id in {bot_user_id, owner_id}


async def dispatch(
    client: discord.Client,
    app: "App",
    message: discord.Message,
    *,
    prefix: str,
    bot_user_id: int,
    owner_id: int | None,
) -> bool:
    """
    Parse and execute a prefixed command at the start of the message.
    Returns True if the message was a command (handled or refused).
    """

    invocation = _resolve_command(message.content or "", prefix)
    if not invocation:
        return False

    handler, command, args = invocation
    if not is_authorized(message, bot_user_id=bot_user_id, owner_id=owner_id):
        logger.info("Refusing command '%s' from %s", command, message.author.id)
        await message.channel.send("You are not authorized to use this command.")
        return True

    logger.info("Dispatching command '%s' with args: %s", command, args)
    await handler.handle(client, app, message, args)
    return True
