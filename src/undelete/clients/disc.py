"""Discord bot bootstrap utilities."""

from __future__ import annotations

import logging

import discord

from undelete.app import build_app
from undelete.config import core, recovery
from undelete.event_hooks import delete_hook, message_hook, ready_hook
from .sender import DiscordSender

logger = logging.getLogger(__name__)

# --- Intents --------------------------------------------------------------- #
intents = discord.Intents.default()
intents.message_content = True


class UndeleteClient(discord.Client):
    """Discord client feeding observed and deleted messages into the pipeline."""

    def __init__(self) -> None:
        super().__init__(intents=intents)
        self.app = build_app(DiscordSender(self), core_cfg=core, recovery_cfg=recovery)

    async def setup_hook(self) -> None:
        await ready_hook.setup(self.app)

    async def close(self) -> None:
        await self.app.stop()
        await super().close()


client = UndeleteClient()


@client.event
async def on_ready() -> None:
    await ready_hook.handle(client, client.app)


@client.event
async def on_message(message: discord.Message) -> None:
    await message_hook.handle(
        client,
        client.app,
        message,
        prefix=core.COMMAND_PREFIX,
        bot_user_id=core.BOT_USER_ID,
        owner_id=core.OWNER_ID,
    )


@client.event
async def on_raw_message_delete(payload: discord.RawMessageDeleteEvent) -> None:
    await delete_hook.handle(client.app, payload, bot_user_id=core.BOT_USER_ID)


@client.event
async def on_raw_bulk_message_delete(payload: discord.RawBulkMessageDeleteEvent) -> None:
    await delete_hook.handle_bulk(client.app, payload, bot_user_id=core.BOT_USER_ID)


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    if not core.DISCORD_API_TOKEN:
        logger.error("No DISCORD_API_TOKEN configured. Cannot run client.")
        return

    try:
        client.run(core.DISCORD_API_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)
    except Exception as exc:  # pragma: no cover - defensive guard
        logger.exception("Unexpected error while running client: %s", exc)
