# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Exception hierarchy for the replay engine.

Callers map these to their own status codes: ``NotFoundError`` for missing
games or plays, ``DataInconsistencyError`` for unusable stored data and
``StaleSnapshotError`` for a lost race on a session's snapshot history.
"""

from __future__ import annotations

from typing import Any


class ReplayError(Exception):
    """Base class for replay errors."""

    def __init__(self, message: str, game_id: str | None = None, details: Any = None):
        self.game_id = game_id
        self.details = details
        super().__init__(message)


class NotFoundError(ReplayError):
    """A game, play, or lineup state does not exist."""

    def __init__(
        self,
        message: str,
        game_id: str | None = None,
        play_index: int | None = None,
        details: Any = None,
    ):
        self.play_index = play_index
        super().__init__(message, game_id=game_id, details=details)


class DataInconsistencyError(ReplayError):
    """Stored game data cannot be replayed as-is.

    Raised for missing or malformed starting lineups and for play rows that
    fail validation.
    """


class StaleSnapshotError(ReplayError):
    """A snapshot write lost to a concurrent advance for the same session."""

    def __init__(
        self,
        message: str,
        game_id: str | None = None,
        session_id: str | None = None,
        expected_play_index: int | None = None,
        actual_play_index: int | None = None,
    ):
        self.session_id = session_id
        self.expected_play_index = expected_play_index
        self.actual_play_index = actual_play_index
        super().__init__(message, game_id=game_id)
