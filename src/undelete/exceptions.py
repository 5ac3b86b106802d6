"""
Exception types for the deletion-recovery pipeline.

None of these are fatal to the bot: each is caught and logged close to where
it is raised, and the worst outcome is a missed cache entry or a missed
recovery alert.
"""

from __future__ import annotations


class UndeleteError(Exception):
    """Base exception for all undelete errors"""
    pass


class FetchError(UndeleteError):
    """Media download failed after exhausting retries"""
    pass


class PersistenceError(UndeleteError):
    """Snapshot file could not be read or written"""
    pass


class DispatchError(UndeleteError):
    """An outbound send failed while delivering a recovery"""
    pass


class MalformedEventError(UndeleteError):
    """An observed or updated event is missing required fields"""
    pass


class ConfigurationError(UndeleteError):
    """Configuration or environment variable errors"""
    pass
