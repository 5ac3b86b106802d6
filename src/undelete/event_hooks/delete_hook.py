import logging

import discord

from undelete.app import App
from undelete.clients.discord_events import to_bulk_updates, to_update

logger = logging.getLogger(__name__)


async def handle(app: App, payload: discord.RawMessageDeleteEvent, *, bot_user_id: int) -> None:
    """Forward a single deletion to the recovery dispatcher."""
    update = to_update(payload, bot_user_id=bot_user_id)
    await app.dispatcher.on_updated(update)


async def handle_bulk(
    app: App, payload: discord.RawBulkMessageDeleteEvent, *, bot_user_id: int
) -> None:
    """Moderator purges arrive as one event; recover each message in id order."""
    recovered = 0
    for update in to_bulk_updates(payload, bot_user_id=bot_user_id):
        if await app.dispatcher.on_updated(update):
            recovered += 1
    if recovered:
        logger.info("Recovered %d messages from bulk delete in %s", recovered, payload.channel_id)
