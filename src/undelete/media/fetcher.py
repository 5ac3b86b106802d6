"""
MediaFetcher
============
1. Input : attachment reference (download URL) and :class:`MediaKind`.
2. For each attempt (bounded, linear backoff between attempts)
   a. Open a GET with a per-attempt total timeout.
   b. Drain the chunked body into one buffer (≤ ``max_bytes``).
3. Return the complete payload, or raise :class:`FetchError`.

NOTE: A failure mid-stream discards the partial buffer; the next attempt
starts the download from the beginning.
"""

from __future__ import annotations

import logging
from typing import Callable

import aiohttp

from undelete.events import MediaKind
from .retry import linear, retry_with_backoff

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class MediaTooLarge(ValueError):
    pass


class MediaFetcher:
    def __init__(
        self,
        *,
        attempts: int = 3,
        backoff_step: float = 2.0,
        attempt_timeout: float = 30.0,
        max_bytes: int | None = None,
        session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession,
        sleep=None,
    ) -> None:
        self.attempts = attempts
        self.backoff_step = backoff_step
        self.attempt_timeout = attempt_timeout
        self.max_bytes = max_bytes
        self._session_factory = session_factory
        self._sleep = sleep

    async def _download(self, ref: str) -> bytes:
        timeout = aiohttp.ClientTimeout(total=self.attempt_timeout)
        buffer = bytearray()
        async with self._session_factory(timeout=timeout) as s, s.get(ref) as r:
            r.raise_for_status()
            async for chunk in r.content.iter_chunked(_CHUNK_SIZE):
                buffer.extend(chunk)
                if self.max_bytes is not None and len(buffer) > self.max_bytes:
                    raise MediaTooLarge(f"payload exceeds {self.max_bytes} bytes")
        return bytes(buffer)

    async def fetch(self, ref: str, kind: MediaKind) -> bytes:
        """Download ``ref`` completely or raise :class:`FetchError`."""

        kwargs = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        data = await retry_with_backoff(
            lambda: self._download(ref),
            attempts=self.attempts,
            backoff=linear(self.backoff_step),
            label=f"{kind.value} download",
            **kwargs,
        )
        logger.debug("Fetched %d bytes of %s media", len(data), kind.value)
        return data
