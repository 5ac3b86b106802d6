from __future__ import annotations
import discord
from . import register, all_commands


@register
class HelpCommand:
    """List available commands."""

    command_str = "help"

    @staticmethod
    async def handle(client: discord.Client, app, message: discord.Message, args: str) -> None:
        """
        Send a comma-separated list of registered commands.

        :param client: Discord client instance (unused).
        :param app: Running pipeline (unused).
        :param message: Incoming command message.
        :param args: Raw argument string (unused).
        """
        cmds = ", ".join(sorted(all_commands().keys()))
        await message.channel.send(f"Available commands: {cmds}")
