"""
In-memory shadow store mirrored to a snapshot file.

``ShadowStore`` maps message ids to :class:`CachedMessage` entries. Every
mutation (insert, removal, sweep batch, clear) rewrites the snapshot while the
store lock is held, so a flush always reflects a fully applied mutation.
Snapshot failures are logged and never reach the caller: the in-memory map
stays authoritative until the next successful flush.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterator

from undelete.exceptions import PersistenceError

from . import snapshot
from .entry import CachedMessage

logger = logging.getLogger(__name__)


class ShadowStore:
    """Lock-guarded id -> :class:`CachedMessage` mapping with durable mirror."""

    def __init__(self, path: str | Path | None) -> None:
        self._path = Path(path) if path is not None else None
        self._entries: dict[str, CachedMessage] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    def load(self) -> int:
        """Replace in-memory contents with the snapshot; start empty on failure."""

        if self._path is None:
            return 0
        with self._lock:
            try:
                loaded = snapshot.load(self._path)
            except PersistenceError as exc:
                logger.error("Snapshot load failed, starting empty: %s", exc)
                loaded = {}
            self._entries = loaded
            logger.info("Loaded %d cached messages from %s", len(loaded), self._path)
            return len(loaded)

    def flush(self) -> bool:
        """Write the current contents to disk. Returns ``False`` on failure."""

        if self._path is None:
            return True
        with self._lock:
            try:
                snapshot.save(self._path, self._entries)
            except PersistenceError as exc:
                logger.error("Snapshot flush failed: %s", exc)
                return False
            return True

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def put(self, message_id: str, entry: CachedMessage) -> None:
        """Insert or replace ``message_id``."""

        with self._lock:
            self._entries[message_id] = entry
            self.flush()

    def remove(self, message_id: str) -> CachedMessage | None:
        """Remove ``message_id`` and return the evicted entry, if any."""

        with self._lock:
            entry = self._entries.pop(message_id, None)
            if entry is not None:
                self.flush()
            return entry

    def sweep_expired(self, now: float, ttl: float) -> list[str]:
        """Drop every entry captured more than ``ttl`` seconds before ``now``."""

        with self._lock:
            expired = [
                mid for mid, entry in self._entries.items() if entry.age(now) > ttl
            ]
            for mid in expired:
                del self._entries[mid]
            if expired:
                self.flush()
            return expired

    def clear(self) -> int:
        """Empty the store. Returns the number of entries dropped."""

        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            self.flush()
            return dropped

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get(self, message_id: str) -> CachedMessage | None:
        with self._lock:
            return self._entries.get(message_id)

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, message_id: object) -> bool:
        with self._lock:
            return message_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())
