"""
Shadow copy of recently observed messages.

Modules
=======

``store``
    Defines :class:`~undelete.memory.shadow.store.ShadowStore`, the lock-guarded
    map that capture, recovery, the sweeper and admin commands share.
``entry``
    :class:`~undelete.memory.shadow.entry.CachedMessage` plus its JSON-safe
    dictionary form (media is base64 encoded).
``snapshot``
    Low-level gzip JSON helpers used by :mod:`store` for reading and writing
    the snapshot file.
"""

from .entry import CachedMessage
from .store import ShadowStore

__all__ = ["CachedMessage", "ShadowStore"]
