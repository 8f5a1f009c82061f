# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""TTL cache for player display names.

Names are held in memory and, when a path is given, mirrored to a single
JSON file so later runs can skip the lookup.  Each entry records when it
was stored; an entry older than the cache's TTL is a miss.

Usage::

    from data.cache import NameCache

    cache = NameCache()                                # memory only
    cache = NameCache(path="data/cache/names.json")    # persisted

    cache.set_many({"votto001": "Joey Votto"})
    cache.get("votto001")     # "Joey Votto"
    cache.invalidate("votto001")
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# TTL constants (seconds)
# ---------------------------------------------------------------------------

TTL_PLAYER_NAMES: int = 3_600        # 1 hour


# ---------------------------------------------------------------------------
# Cache class
# ---------------------------------------------------------------------------

class NameCache:
    """Player-id to name cache with a single TTL for every entry.

    Args:
        ttl: Seconds an entry stays fresh.
        path: Optional JSON file to load from and write through to.
        clock: Time source, replaceable in tests.
    """

    def __init__(
        self,
        ttl: int = TTL_PLAYER_NAMES,
        path: str | Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl = ttl
        self._path = Path(path) if path is not None else None
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, dict[str, Any]] = self._load()

    # -- public API --------------------------------------------------------

    def get(self, player_id: str) -> str | None:
        """Return the cached name, or ``None`` if missing or expired."""
        with self._lock:
            entry = self._entries.get(player_id)
            if entry is None:
                return None
            if self._clock() - entry.get("created", 0) > self.ttl:
                del self._entries[player_id]
                return None
            return entry.get("name")

    def get_many(self, player_ids: Iterable[str]) -> dict[str, str]:
        """Return cached names for whichever of ``player_ids`` are fresh."""
        found = {}
        for pid in player_ids:
            name = self.get(pid)
            if name is not None:
                found[pid] = name
        return found

    def set(self, player_id: str, name: str) -> None:
        self.set_many({player_id: name})

    def set_many(self, names: dict[str, str]) -> None:
        if not names:
            return
        now = self._clock()
        with self._lock:
            for pid, name in names.items():
                self._entries[pid] = {"name": name, "created": now}
            self._save()

    def invalidate(self, player_id: str) -> bool:
        """Remove one entry.  Returns ``True`` if it existed."""
        with self._lock:
            if self._entries.pop(player_id, None) is None:
                return False
            self._save()
            return True

    def clear(self) -> int:
        """Remove every entry and return how many there were."""
        with self._lock:
            count = len(self._entries)
            self._entries = {}
            self._save()
            return count

    def stats(self) -> dict[str, int]:
        with self._lock:
            now = self._clock()
            fresh = sum(1 for e in self._entries.values() if now - e.get("created", 0) <= self.ttl)
            return {"entries": len(self._entries), "fresh": fresh}

    # -- helpers -----------------------------------------------------------

    def _load(self) -> dict[str, dict[str, Any]]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            with open(self._path) as f:
                entries = json.load(f).get("entries", {})
        except (json.JSONDecodeError, OSError, AttributeError):
            logger.warning("Discarding unreadable name cache at %s", self._path)
            return {}
        return {k: v for k, v in entries.items() if isinstance(v, dict)}

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump({"entries": self._entries}, f, separators=(",", ":"))
        tmp_path.replace(self._path)  # atomic rename
