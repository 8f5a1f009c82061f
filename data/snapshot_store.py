# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Append-only lineup snapshot history per (game, session).

Snapshots are immutable once stored.  ``append`` takes the play index of
the latest snapshot the caller read; if another writer got there first the
append is rejected with ``StaleSnapshotError`` instead of overwriting.
"""

from __future__ import annotations

import bisect
import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from errors import DataInconsistencyError, StaleSnapshotError
from models import LineupSnapshot

logger = logging.getLogger(__name__)

# Passed as ``expected_latest`` to skip the concurrency check.
UNCHECKED = object()


class InMemorySnapshotStore:
    """Thread-safe snapshot store kept in process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: dict[tuple[str, str], list[LineupSnapshot]] = {}

    def latest(self, game_id: str, session_id: str) -> LineupSnapshot | None:
        with self._lock:
            history = self._history.get((game_id, session_id))
            return history[-1] if history else None

    def at_or_before(self, game_id: str, session_id: str, play_index: int) -> LineupSnapshot | None:
        """The newest snapshot whose play index is ``<= play_index``."""
        with self._lock:
            history = self._history.get((game_id, session_id)) or []
            pos = bisect.bisect_right([s.play_index for s in history], play_index)
            return history[pos - 1] if pos else None

    def history(self, game_id: str, session_id: str) -> list[LineupSnapshot]:
        with self._lock:
            return list(self._history.get((game_id, session_id), []))

    def append(
        self,
        snapshot: LineupSnapshot,
        expected_latest: int | None | object = UNCHECKED,
    ) -> None:
        """Store ``snapshot`` as the newest entry for its session.

        Args:
            snapshot: Snapshot to store.
            expected_latest: Play index of the latest snapshot the caller
                based its work on, or ``None`` if it saw no history.

        Raises:
            StaleSnapshotError: If the latest stored snapshot does not match
                ``expected_latest``, or ``snapshot`` does not come after it.
        """
        key = (snapshot.game_id, snapshot.session_id)
        with self._lock:
            history = self._history.setdefault(key, [])
            latest_index = history[-1].play_index if history else None
            if expected_latest is not UNCHECKED and latest_index != expected_latest:
                raise StaleSnapshotError(
                    f"Snapshot history for {snapshot.game_id}/{snapshot.session_id} "
                    f"moved to {latest_index}, expected {expected_latest}",
                    game_id=snapshot.game_id,
                    session_id=snapshot.session_id,
                    expected_play_index=expected_latest,
                    actual_play_index=latest_index,
                )
            if latest_index is not None and snapshot.play_index <= latest_index:
                raise StaleSnapshotError(
                    f"Snapshot for play {snapshot.play_index} is not after {latest_index}",
                    game_id=snapshot.game_id,
                    session_id=snapshot.session_id,
                    expected_play_index=latest_index,
                    actual_play_index=snapshot.play_index,
                )
            history.append(snapshot)
            self._persist(key, history)
        logger.debug("Stored snapshot %s/%s @ %d (%d changes)",
                     snapshot.game_id, snapshot.session_id, snapshot.play_index,
                     len(snapshot.changes))

    def delete_session(self, game_id: str, session_id: str) -> int:
        """Drop a session's history.  Returns the number of snapshots removed."""
        with self._lock:
            removed = len(self._history.pop((game_id, session_id), []))
            self._persist((game_id, session_id), [])
            return removed

    def _persist(self, key: tuple[str, str], history: list[LineupSnapshot]) -> None:
        """Hook for subclasses that keep a durable copy; called under the lock."""


class JsonFileSnapshotStore(InMemorySnapshotStore):
    """Snapshot store that mirrors each session's history to a JSON file.

    Files live at ``<root>/<game_id>/<session_id>.json`` and are rewritten
    atomically on every append.  Existing files are loaded on construction.
    """

    def __init__(self, root_dir: str | Path) -> None:
        super().__init__()
        self._root = Path(root_dir)
        for path in sorted(self._root.glob("*/*.json")):
            try:
                with open(path) as f:
                    raw = json.load(f)
                history = [LineupSnapshot.model_validate(s) for s in raw.get("snapshots", [])]
            except (json.JSONDecodeError, OSError, ValidationError) as e:
                raise DataInconsistencyError(f"Unreadable snapshot file {path}: {e}") from e
            if history:
                self._history[(history[0].game_id, history[0].session_id)] = history

    def _path_for(self, key: tuple[str, str]) -> Path:
        game_id, session_id = key
        return self._root / game_id / f"{session_id}.json"

    def _persist(self, key: tuple[str, str], history: list[LineupSnapshot]) -> None:
        path = self._path_for(key)
        if not history:
            path.unlink(missing_ok=True)
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump({"snapshots": [s.model_dump(mode="json") for s in history]}, f)
        tmp_path.replace(path)  # atomic rename
