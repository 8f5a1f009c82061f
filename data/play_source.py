# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Read-only access to recorded games.

A game file is one JSON document::

    {
      "game_id": "CIN201904150",
      "teams": {"home": {"id": "CIN", "display_name": "Cincinnati Reds",
                         "short_name": "Reds"},
                "visitors": {...}},
      "players": {"votto001": "Joey Votto", ...},
      "starting_lineups": [{"team_id": "CIN", "batters": [...9 ids],
                            "positions": [...], "pitcher": "..."}, ...],
      "plays": [{"pn": 1, "inning": 1, "top_bot": 0, "batteam": "PIT", ...}]
    }

Play rows use Retrosheet column names (see ``PlayRecord.from_row``).
``PlaySource`` loads any number of such games and answers the lookups the
replay needs.  Missing games and plays raise ``NotFoundError``; rows or
lineups that fail validation raise ``DataInconsistencyError``.
"""

from __future__ import annotations

import bisect
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from errors import DataInconsistencyError, NotFoundError
from models import PlayRecord, StartingLineup, TeamInfo

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _player_name(value: Any) -> str:
    if isinstance(value, dict):
        first = str(value.get("first", "")).strip()
        last = str(value.get("last", "")).strip()
        return f"{first} {last}".strip()
    return str(value or "").strip()


def _team_info(raw: dict[str, Any] | None, fallback_id: str = "") -> TeamInfo | None:
    if not raw:
        return None
    team_id = str(raw.get("id") or raw.get("team_id") or fallback_id)
    return TeamInfo(
        team_id=team_id,
        display_name=raw.get("display_name") or raw.get("name") or team_id,
        short_name=raw.get("short_name") or raw.get("abbreviation") or team_id,
    )


class GameData:
    """One parsed game: plays in index order plus its lineups and teams."""

    def __init__(
        self,
        game_id: str,
        plays: list[PlayRecord],
        lineups: list[StartingLineup],
        teams: dict[str, TeamInfo],
        players: dict[str, str],
    ) -> None:
        self.game_id = game_id
        self.plays = sorted(plays, key=lambda p: p.play_index)
        self.indexes = [p.play_index for p in self.plays]
        self.lineups = lineups
        self.teams = teams
        self.players = players

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> GameData:
        """Parse a game document.

        Raises:
            DataInconsistencyError: If the document has no game id or a play
                row or lineup fails validation.
        """
        game_id = str(payload.get("game_id") or "")
        if not game_id:
            raise DataInconsistencyError("Game document has no game_id")

        try:
            plays = [PlayRecord.from_row(game_id, row) for row in payload.get("plays", [])]
        except (ValidationError, ValueError, TypeError) as e:
            raise DataInconsistencyError(
                f"Invalid play row in {game_id}: {e}", game_id=game_id,
            ) from e

        seen: set[int] = set()
        for play in plays:
            if play.play_index in seen:
                raise DataInconsistencyError(
                    f"Duplicate play index {play.play_index} in {game_id}", game_id=game_id,
                )
            seen.add(play.play_index)

        raw_lineups = payload.get("starting_lineups") or []
        if isinstance(raw_lineups, dict):
            raw_lineups = [{"team_id": k, **v} for k, v in raw_lineups.items()]
        try:
            lineups = [StartingLineup.model_validate(lu) for lu in raw_lineups]
        except ValidationError as e:
            raise DataInconsistencyError(
                f"Invalid starting lineup in {game_id}: {e}", game_id=game_id,
            ) from e

        teams: dict[str, TeamInfo] = {}
        for raw in (payload.get("teams") or {}).values():
            info = _team_info(raw)
            if info is not None:
                teams[info.team_id] = info

        players = {
            str(pid): _player_name(value)
            for pid, value in (payload.get("players") or {}).items()
        }
        return cls(game_id, plays, lineups, teams, players)


# ---------------------------------------------------------------------------
# Play source
# ---------------------------------------------------------------------------

class PlaySource:
    """In-memory catalogue of recorded games."""

    def __init__(self, games: list[GameData] | None = None) -> None:
        self._games: dict[str, GameData] = {}
        for game in games or []:
            self.add_game(game)

    @classmethod
    def from_directory(cls, directory: str | Path) -> PlaySource:
        """Load every ``*.json`` game file in ``directory``."""
        source = cls()
        root = Path(directory)
        if not root.is_dir():
            logger.warning("Game directory %s does not exist", root)
            return source
        for path in sorted(root.glob("*.json")):
            source.load_file(path)
        return source

    def load_file(self, path: str | Path) -> GameData:
        path = Path(path)
        try:
            with open(path) as f:
                payload = json.load(f)
        except json.JSONDecodeError as e:
            raise DataInconsistencyError(f"Game file {path} is not valid JSON: {e}") from e
        game = GameData.from_dict(payload)
        self.add_game(game)
        logger.debug("Loaded %s from %s (%d plays)", game.game_id, path, len(game.plays))
        return game

    def add_game(self, game: GameData | dict[str, Any]) -> GameData:
        if isinstance(game, dict):
            game = GameData.from_dict(game)
        self._games[game.game_id] = game
        return game

    @property
    def game_ids(self) -> list[str]:
        return sorted(self._games)

    # -- lookups -----------------------------------------------------------

    def _game(self, game_id: str) -> GameData:
        game = self._games.get(game_id)
        if game is None:
            raise NotFoundError(f"No game {game_id}", game_id=game_id)
        return game

    def fetch_plays(self, game_id: str) -> list[PlayRecord]:
        return list(self._game(game_id).plays)

    def fetch_first(self, game_id: str) -> PlayRecord:
        game = self._game(game_id)
        if not game.plays:
            raise NotFoundError(f"Game {game_id} has no plays", game_id=game_id)
        return game.plays[0]

    def fetch_by_index(self, game_id: str, play_index: int) -> PlayRecord:
        game = self._game(game_id)
        pos = bisect.bisect_left(game.indexes, play_index)
        if pos < len(game.indexes) and game.indexes[pos] == play_index:
            return game.plays[pos]
        raise NotFoundError(
            f"No play {play_index} in game {game_id}", game_id=game_id, play_index=play_index,
        )

    def fetch_after(self, game_id: str, play_index: int) -> PlayRecord:
        """The first play with an index greater than ``play_index``."""
        game = self._game(game_id)
        pos = bisect.bisect_right(game.indexes, play_index)
        if pos >= len(game.plays):
            raise NotFoundError(
                f"No play after {play_index} in game {game_id}",
                game_id=game_id, play_index=play_index,
            )
        return game.plays[pos]

    def fetch_starting_lineups(self, game_id: str) -> list[StartingLineup]:
        game = self._game(game_id)
        if not game.lineups:
            raise DataInconsistencyError(f"No starting lineups for {game_id}", game_id=game_id)
        return list(game.lineups)

    def fetch_team(self, game_id: str, team_id: str) -> TeamInfo:
        """Team names for ``team_id``, defaulting to the id itself."""
        info = self._game(game_id).teams.get(team_id)
        return info or TeamInfo(team_id=team_id, display_name=team_id, short_name=team_id)

    def lookup_players(self, player_ids: list[str]) -> dict[str, str]:
        """Names for any of ``player_ids`` found in the loaded games."""
        found: dict[str, str] = {}
        for game in self._games.values():
            for pid in player_ids:
                if pid not in found and game.players.get(pid):
                    found[pid] = game.players[pid]
        return found
