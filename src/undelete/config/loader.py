from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict

from undelete.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "UNDELETE_CONFIG"
DEFAULT_CONFIG_PATH = Path("config.toml")
SECTION = "undelete"


def config_path() -> Path:
    """``$UNDELETE_CONFIG`` when set, else ``config.toml`` in the working directory."""
    override = os.getenv(CONFIG_PATH_ENV, "").strip()
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Load the bot's TOML config.

    Returns an empty dict when the file is missing so settings fall back to
    environment variables. A path named explicitly through ``UNDELETE_CONFIG``
    must exist. Only the ``[undelete]`` table is read by the settings objects,
    so a file without it is reported and otherwise ignored.
    """
    target = Path(path) if path is not None else config_path()
    if not target.is_file():
        if path is None and target != DEFAULT_CONFIG_PATH:
            raise ConfigurationError(f"{CONFIG_PATH_ENV} points at missing file {target}")
        return {}

    try:
        with target.open("rb") as handle:
            raw = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {target}: {exc}") from exc

    if not isinstance(raw.get(SECTION), dict):
        logger.warning("%s has no [%s] table; using environment settings", target, SECTION)
        return {}
    return raw


__all__ = ["load_raw_config", "config_path", "CONFIG_PATH_ENV", "DEFAULT_CONFIG_PATH"]
