import logging

import discord

from undelete import commands
from undelete.app import App
from undelete.clients.discord_events import to_observed

logger = logging.getLogger(__name__)


async def handle(
    client: discord.Client,
    app: App,
    message: discord.Message,
    *,
    prefix: str,
    bot_user_id: int,
    owner_id: int | None,
) -> None:
    """Handle an incoming Discord message: admin commands first, then capture."""

    # 1) Admin commands never enter the cache
    if await commands.dispatch(
        client,
        app,
        message,
        prefix=prefix,
        bot_user_id=bot_user_id,
        owner_id=owner_id,
    ):
        return

    # 2) Shadow-copy anything recoverable
    try:
        observed = to_observed(message, bot_user_id=bot_user_id)
    except (AttributeError, TypeError) as e:
        logger.warning("Cannot translate message %s: %s", getattr(message, "id", "?"), e)
        return
    await app.capture.on_observed(observed)
