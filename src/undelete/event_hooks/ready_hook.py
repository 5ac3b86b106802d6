import logging

import discord

from undelete.app import App

logger = logging.getLogger(__name__)


async def setup(app: App) -> None:
    """Load persisted state and start eviction before the gateway connects."""
    await app.start()


async def handle(client: discord.Client, app: App) -> None:
    """Log identity and pipeline status on client ready event."""
    logger.info("Logged in as %s (ID: %s)", client.user.name, client.user.id)
    status = app.service.status()
    logger.info(
        "Anti-delete %s | mode=%s | %d cached",
        "active" if status.enabled else "inactive",
        status.mode.value,
        status.cache_size,
    )
