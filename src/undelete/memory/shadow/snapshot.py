"""Durable snapshot of the shadow store.

A single gzipped JSON file holds an array of ``[id, entry]`` pairs:
    [["<msg_id>", {"sender_id": ..., "media": "<base64>", ...}], ...]

Helpers:
    - load(path)
    - save(path, entries)
"""
from __future__ import annotations

from pathlib import Path
import contextlib
import gzip
import json
import os
from typing import Dict, Mapping

from undelete.exceptions import PersistenceError
from .entry import CachedMessage


def load(path: str | Path) -> Dict[str, CachedMessage]:
    p = Path(path)
    if not p.exists():
        return {}
    try:
        with gzip.open(p, "rt", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValueError(f"expected a list of pairs, got {type(raw).__name__}")
        out: Dict[str, CachedMessage] = {}
        for pair in raw:
            if not isinstance(pair, list) or len(pair) != 2 or not isinstance(pair[1], dict):
                raise ValueError(f"malformed snapshot pair: {pair!r:.80}")
            key, value = pair
            out[str(key)] = CachedMessage.from_dict(value)
        return out
    except (OSError, EOFError, ValueError, KeyError, TypeError) as exc:
        raise PersistenceError(f"Unreadable snapshot {p}: {exc}") from exc


def save(path: str | Path, entries: Mapping[str, CachedMessage]) -> None:
    p = Path(path)
    tmp = p.with_name(p.name + ".tmp")
    serializable = [[k, v.to_dict()] for k, v in entries.items()]
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with gzip.open(tmp, "wt", encoding="utf-8") as f:
            json.dump(serializable, f)
        os.replace(tmp, p)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise PersistenceError(f"Failed to write snapshot {p}: {exc}") from exc
