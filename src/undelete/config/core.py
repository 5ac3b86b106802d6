import logging
import os

from undelete.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _optional_int(raw) -> int | None:
    if raw is None or str(raw).strip() == "":
        return None
    return int(raw)


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("undelete", {})
        discord_cfg = cfg.get("discord", {})

        token_env = str(discord_cfg.get("token_env", "DISCORD_API_TOKEN"))
        self.DISCORD_API_TOKEN: str | None = os.getenv(token_env)

        self.BOT_USER_ID: int = int(discord_cfg.get("bot_user_id") or os.getenv("BOT_USER_ID", "0"))
        self.OWNER_ID: int | None = _optional_int(discord_cfg.get("owner_id", os.getenv("OWNER_ID")))

        # Bots cannot DM themselves, so "inbox" may be pointed at a private channel.
        self.INBOX_CHANNEL_ID: int = (
            _optional_int(discord_cfg.get("inbox_channel_id", os.getenv("INBOX_CHANNEL_ID")))
            or self.BOT_USER_ID
        )
        self.COMMAND_PREFIX: str = str(discord_cfg.get("command_prefix", os.getenv("COMMAND_PREFIX", "/")))

        required = [
            ("DISCORD_API_TOKEN", self.DISCORD_API_TOKEN),
            ("BOT_USER_ID", self.BOT_USER_ID),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")
