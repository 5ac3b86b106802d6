"""Shadow-cache and deletion recovery for chat bots."""

__version__ = "0.1.0"
