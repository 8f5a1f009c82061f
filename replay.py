# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "anthropic>=0.78.0",
#     "pydantic>=2.0",
# ]
# ///
"""Replay orchestration: initialize a session and step it play by play.

Each advance reads the current and next play, detects lineup changes
against the session's latest snapshot, stores the new snapshot, and
assembles the ``VisibleState`` for the next play.  Advances for one
(game, session) pair are serialized; a second concurrent advance fails
with ``StaleSnapshotError`` instead of waiting.
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Callable, Iterable

from commentary import AnnouncerStyle, CommentaryGenerator
from data.play_source import PlaySource
from data.players import PlayerNameResolver
from data.snapshot_store import InMemorySnapshotStore
from errors import NotFoundError, StaleSnapshotError
from event_translation import translate_event
from lineup.applier import apply_changes, initial_snapshot
from lineup.detectors import detect_changes
from lineup.rotation import next_batter_slot
from models import (
    BASES,
    GameSituation,
    LineupSnapshot,
    PlayRecord,
    ScoreResult,
    SubstitutionSummary,
    TeamState,
    VisibleState,
)
from score import ScoreTable, compute_score
from substitutions import narrate_substitutions

logger = logging.getLogger(__name__)


class ReplayOrchestrator:
    """Coordinates the play source, lineup engine, score and enrichments.

    Args:
        play_source: Game catalogue (see ``data.play_source.PlaySource``).
        store: Snapshot store for lineup history.
        resolver: Optional player-name resolver.  Without one, player ids
            are shown in place of names.
        commentary: Optional commentary generator for the game log.
        translator: Event-code translator for play descriptions.
        preload_scores: Build a cumulative score table per game instead of
            summing runs on every advance.
    """

    def __init__(
        self,
        play_source: PlaySource,
        store: InMemorySnapshotStore,
        resolver: PlayerNameResolver | None = None,
        commentary: CommentaryGenerator | None = None,
        translator: Callable[[str | None], str] = translate_event,
        preload_scores: bool = True,
    ) -> None:
        self.play_source = play_source
        self.store = store
        self.resolver = resolver
        self.commentary = commentary
        self.translator = translator
        self.preload_scores = preload_scores
        self._score_tables: dict[str, ScoreTable] = {}
        # Entries drop out once no request holds the lock.
        self._locks: weakref.WeakValueDictionary[tuple[str, str], threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    # -- public API --------------------------------------------------------

    def initialize(self, game_id: str, session_id: str) -> VisibleState:
        """Start (or restart) a session at the first play of a game.

        Raises:
            NotFoundError: If the game does not exist or has no plays.
            DataInconsistencyError: If the starting lineups are unusable.
            StaleSnapshotError: If the session is busy.
        """
        with self._session(game_id, session_id):
            first_play = self.play_source.fetch_first(game_id)
            lineups = self.play_source.fetch_starting_lineups(game_id)
            snapshot = initial_snapshot(game_id, session_id, lineups, first_play)

            removed = self.store.delete_session(game_id, session_id)
            if removed:
                logger.info("Restarting %s/%s; dropped %d snapshots", game_id, session_id, removed)
            self.store.append(snapshot, expected_latest=None)

            state = self._visible_state(snapshot, first_play, ScoreResult(), None)
            logger.info("Initialized %s/%s at play %d", game_id, session_id, first_play.play_index)
            return state

    def advance(
        self,
        game_id: str,
        session_id: str,
        current_play_index: int,
        announcer_style: AnnouncerStyle | str = AnnouncerStyle.CLASSIC,
    ) -> VisibleState:
        """Move a session from ``current_play_index`` to the following play.

        Args:
            game_id: Game to replay.
            session_id: Replay session.
            current_play_index: Index of the play currently shown.
            announcer_style: Commentary style for the game log.

        Returns:
            The visible state for the next play, with the current play's
            outcome as its description.

        Raises:
            NotFoundError: If the play does not exist or is the last one.
            DataInconsistencyError: If a lineup must be built and cannot be.
            StaleSnapshotError: If another advance for the session is running
                or has already moved past this play.
        """
        with self._session(game_id, session_id):
            current_play = self.play_source.fetch_by_index(game_id, current_play_index)
            next_play = self.play_source.fetch_after(game_id, current_play_index)
            logger.debug(
                "Advance %s/%s: play %d -> %d (inning %d %s, %d out, batter %s, pitcher %s)",
                game_id, session_id, current_play.play_index, next_play.play_index,
                next_play.inning, next_play.half.value, next_play.outs,
                next_play.batter, next_play.pitcher,
            )

            latest = self.store.latest(game_id, session_id)
            pregame = None
            if latest is None:
                latest = pregame = self._starting_snapshot(game_id, session_id)
            # The pre-game snapshot stands for the first play.
            shown = latest.play_index or self.play_source.fetch_first(game_id).play_index
            if shown != current_play.play_index:
                raise StaleSnapshotError(
                    f"Session {session_id} is at play {shown}, not {current_play.play_index}",
                    game_id=game_id,
                    session_id=session_id,
                    expected_play_index=current_play_index,
                    actual_play_index=latest.play_index,
                )
            if pregame is not None:
                self.store.append(pregame, expected_latest=None)

            names = self._names(self._change_ids(latest, current_play, next_play))
            changes = detect_changes(latest, current_play, next_play, names)
            snapshot = apply_changes(latest, changes, current_play, next_play)
            self.store.append(snapshot, expected_latest=latest.play_index)

            score = self._score(game_id, next_play)
            logger.debug("Score after play %d: home %d, visitors %d",
                         next_play.play_index, score.home_after, score.visitor_after)
            state = self._visible_state(snapshot, next_play, score, current_play)

        if self.commentary is not None:
            state.game.log = self._commentary(state, announcer_style)
        logger.info("Advanced %s/%s to play %d", game_id, session_id, next_play.play_index)
        return state

    def preview_substitutions(
        self,
        game_id: str,
        session_id: str,
        current_play_index: int,
    ) -> SubstitutionSummary:
        """Describe substitutions between a play and the next one, read-only.

        Raises:
            NotFoundError: If either play is missing or the session has no
                lineup history at or before ``current_play_index``.
        """
        current_play = self.play_source.fetch_by_index(game_id, current_play_index)
        next_play = self.play_source.fetch_after(game_id, current_play_index)
        snapshot = self.store.at_or_before(game_id, session_id, current_play_index)
        if snapshot is None:
            raise NotFoundError(
                f"No lineup state for {game_id}/{session_id} at play {current_play_index}",
                game_id=game_id,
                play_index=current_play_index,
            )
        return narrate_substitutions(snapshot, current_play, next_play, self.resolver)

    # -- helpers -----------------------------------------------------------

    def _session(self, game_id: str, session_id: str) -> _SessionGuard:
        with self._locks_guard:
            lock = self._locks.get((game_id, session_id))
            if lock is None:
                lock = threading.Lock()
                self._locks[(game_id, session_id)] = lock
        return _SessionGuard(lock, game_id, session_id)

    def _starting_snapshot(self, game_id: str, session_id: str) -> LineupSnapshot:
        logger.info("No lineup history for %s/%s; building starting lineup", game_id, session_id)
        return initial_snapshot(
            game_id,
            session_id,
            self.play_source.fetch_starting_lineups(game_id),
            self.play_source.fetch_first(game_id),
        )

    def _score(self, game_id: str, next_play: PlayRecord) -> ScoreResult:
        if not self.preload_scores:
            return compute_score(self.play_source.fetch_plays(game_id), next_play)
        table = self._score_tables.get(game_id)
        if table is None:
            table = ScoreTable(self.play_source.fetch_plays(game_id))
            self._score_tables[game_id] = table
        return table.score_at(next_play)

    @staticmethod
    def _change_ids(
        snapshot: LineupSnapshot, current_play: PlayRecord, next_play: PlayRecord,
    ) -> list[str]:
        ids = [current_play.pitcher, next_play.pitcher, next_play.batter]
        ids.extend(s.player_id for s in snapshot.batting_order(next_play.batting_team))
        ids.extend(current_play.fielders.values())
        ids.extend(next_play.fielders.values())
        return ids

    def _names(self, player_ids: Iterable[str | None]) -> dict[str, str]:
        ids = [pid for pid in player_ids if pid]
        if self.resolver is None:
            return {pid: pid for pid in ids}
        try:
            return self.resolver.resolve(ids)
        except Exception as e:
            logger.warning("Name resolution failed: %s", e)
            return {pid: "" for pid in ids}

    def _following_play(self, game_id: str, play: PlayRecord) -> PlayRecord | None:
        try:
            return self.play_source.fetch_after(game_id, play.play_index)
        except NotFoundError:
            return None

    def _commentary(self, state: VisibleState, style: AnnouncerStyle | str) -> list[str]:
        try:
            return self.commentary.generate(state, style)
        except Exception as e:
            logger.warning("Commentary failed for %s play %d: %s",
                           state.game_id, state.current_play, e)
            return []

    def _visible_state(
        self,
        snapshot: LineupSnapshot,
        play: PlayRecord,
        score: ScoreResult,
        described_play: PlayRecord | None,
    ) -> VisibleState:
        home_id, visitor_id = play.home_team, play.visiting_team
        following = self._following_play(snapshot.game_id, play)
        ids = [s.player_id for s in snapshot.slots] + [play.runner_on(b) for b in BASES]
        if following is not None:
            ids.append(following.pitcher)
        names = self._names(ids)

        def name(pid: str | None) -> str | None:
            if not pid:
                return None
            return names.get(pid, "")

        def team_state(team_id: str, runs: int) -> TeamState:
            info = self.play_source.fetch_team(snapshot.game_id, team_id)
            batting = snapshot.batting_order(team_id)
            batter = snapshot.current_batter(team_id)
            pitcher = snapshot.current_pitcher(team_id)
            on_deck = next_batter_slot(batting) if team_id == play.batting_team else batter
            next_pitcher = pitcher.player_id if pitcher else None
            if following is not None and following.fielding_team == team_id:
                next_pitcher = following.pitcher or next_pitcher
            return TeamState(
                team_id=team_id,
                display_name=info.display_name,
                short_name=info.short_name,
                current_batter=name(batter.player_id if batter else None),
                current_pitcher=name(pitcher.player_id if pitcher else None),
                next_batter=name(on_deck.player_id if on_deck else None),
                next_pitcher=name(next_pitcher),
                runs=runs,
            )

        description = None
        event_string = None
        if described_play is not None:
            description = self.translator(described_play.event) or None
            event_string = described_play.event

        return VisibleState(
            game_id=snapshot.game_id,
            session_id=snapshot.session_id,
            current_play=play.play_index,
            game=GameSituation(
                inning=play.inning,
                half=play.half,
                outs=play.outs,
                on_first=name(play.first) or "",
                on_second=name(play.second) or "",
                on_third=name(play.third) or "",
            ),
            home=team_state(home_id, score.home_after),
            visitors=team_state(visitor_id, score.visitor_after),
            play_description=description,
            event_string=event_string,
        )


class _SessionGuard:
    """Non-blocking per-session lock used as a context manager."""

    def __init__(self, lock: threading.Lock, game_id: str, session_id: str) -> None:
        self._lock = lock
        self.game_id = game_id
        self.session_id = session_id

    def __enter__(self) -> _SessionGuard:
        if not self._lock.acquire(blocking=False):
            logger.warning("Rejected concurrent request for %s/%s", self.game_id, self.session_id)
            raise StaleSnapshotError(
                f"Session {self.session_id} of {self.game_id} is busy",
                game_id=self.game_id,
                session_id=self.session_id,
            )
        return self

    def __exit__(self, *exc_info) -> None:
        self._lock.release()
