from __future__ import annotations
from typing import TYPE_CHECKING
import discord
from undelete.service import ServiceStatus
from . import register

if TYPE_CHECKING:
    from undelete.app import App

_MODE_LABELS = {
    "same-chat": "Same chat",
    "inbox": "Inbox",
    "owner-pm": "Owner PM",
}


def render_status(status: ServiceStatus, *, header: str = "ANTI-DELETE STATUS") -> str:
    """Render the status block shared by on/off/status replies."""
    state = "ACTIVE" if status.enabled else "INACTIVE"
    return "\n".join(
        [
            f"**{header}**",
            f"• State: {state}",
            f"• Mode: {_MODE_LABELS.get(status.mode.value, status.mode.value)}",
            f"• Cache window: {int(status.ttl // 60)} min",
            f"• Messages in cache: {status.cache_size}",
        ]
    )


@register
class AntiDeleteCommand:
    """Toggle deletion recovery: ``antidelete [on|off|status]``."""

    command_str = "antidelete"

    @staticmethod
    async def handle(
        client: discord.Client, app: "App", message: discord.Message, args: str
    ) -> None:
        sub = (args.split() or ["status"])[0].lower()
        service = app.service

        if sub == "on":
            service.enable()
            reply = render_status(service.status(), header="ANTI-DELETE ENABLED")
        elif sub == "off":
            service.disable()
            reply = render_status(service.status(), header="ANTI-DELETE DISABLED")
        else:
            reply = render_status(service.status())

        await message.channel.send(reply)
