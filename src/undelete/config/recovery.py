import os
from pathlib import Path

from undelete.exceptions import ConfigurationError

_DEFAULT_STORE_PATH = Path(__file__).resolve().parent.parent.parent.parent / "data" / "shadow.json.gz"

_MODES = ("same-chat", "inbox", "owner-pm")


def _flag(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


class Recovery:
    def __init__(self, config: dict | None = None) -> None:
        rec_cfg = (config or {}).get("undelete", {}).get("recovery", {})
        self.ENABLED: bool = _flag(rec_cfg.get("enabled", os.getenv("ANTI_DELETE", "true")))
        self.MODE: str = str(rec_cfg.get("mode", os.getenv("ANTI_DELETE_PATH", "inbox"))).strip().lower()
        self.TTL_SECONDS: float = float(rec_cfg.get("ttl_seconds", os.getenv("CACHE_TTL_SECONDS", "300")))
        self.STORE_PATH: str = str(rec_cfg.get("store_path", os.getenv("STORE_PATH", str(_DEFAULT_STORE_PATH))))
        self.FETCH_ATTEMPTS: int = int(rec_cfg.get("fetch_attempts", os.getenv("FETCH_ATTEMPTS", "3")))
        self.FETCH_BACKOFF_SECONDS: float = float(
            rec_cfg.get("fetch_backoff_seconds", os.getenv("FETCH_BACKOFF_SECONDS", "2"))
        )
        self.FETCH_TIMEOUT_SECONDS: float = float(
            rec_cfg.get("fetch_timeout_seconds", os.getenv("FETCH_TIMEOUT_SECONDS", "30"))
        )
        self.MAX_MEDIA_MB: int = int(rec_cfg.get("max_media_mb", os.getenv("MAX_MEDIA_MB", "25")))
        self.TIMEZONE: str = str(rec_cfg.get("timezone", os.getenv("ALERT_TIMEZONE", "UTC")))

        # "same" is the legacy spelling of same-chat mode
        if self.MODE == "same":
            self.MODE = "same-chat"
        if self.MODE not in _MODES:
            raise ConfigurationError(
                f"Unknown recovery mode {self.MODE!r}; expected one of {', '.join(_MODES)}"
            )
        if self.TTL_SECONDS <= 0:
            raise ConfigurationError("CACHE_TTL_SECONDS must be positive")
        if self.FETCH_ATTEMPTS < 1:
            raise ConfigurationError("FETCH_ATTEMPTS must be at least 1")
