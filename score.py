# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Running score for a replayed game.

``compute_score`` sums runs on demand for one play.  ``ScoreTable`` does
one pass over the whole game up front so sequential replay is linear; both
return identical results for the same plays.
"""

from __future__ import annotations

from collections.abc import Iterable

from models import PlayRecord, ScoreResult


def compute_score(plays: Iterable[PlayRecord], next_play: PlayRecord) -> ScoreResult:
    """Score before and after ``next_play``.

    Args:
        plays: Every play of the game (order does not matter).
        next_play: The play being shown.  Its half-inning decides which team
            is home.

    Returns:
        ``ScoreResult`` where "before" sums runs of all plays with a lower
        index and "after" adds ``next_play.runs`` to its batting team.
    """
    home = next_play.home_team
    home_runs = 0
    visitor_runs = 0
    for play in plays:
        if play.play_index >= next_play.play_index:
            continue
        if play.batting_team == home:
            home_runs += play.runs
        else:
            visitor_runs += play.runs
    return _with_next(home_runs, visitor_runs, next_play)


def _with_next(home_before: int, visitor_before: int, next_play: PlayRecord) -> ScoreResult:
    home_after, visitor_after = home_before, visitor_before
    if next_play.batting_team == next_play.home_team:
        home_after += next_play.runs
    else:
        visitor_after += next_play.runs
    return ScoreResult(
        home_before=home_before,
        visitor_before=visitor_before,
        home_after=home_after,
        visitor_after=visitor_after,
    )


class ScoreTable:
    """Cumulative run totals for every play of one game."""

    def __init__(self, plays: Iterable[PlayRecord]):
        ordered = sorted(plays, key=lambda p: p.play_index)
        self._plays = {p.play_index: p for p in ordered}
        # Runs per team over all plays strictly before each index.
        self._before: dict[int, dict[str, int]] = {}
        totals: dict[str, int] = {}
        for play in ordered:
            self._before[play.play_index] = dict(totals)
            totals[play.batting_team] = totals.get(play.batting_team, 0) + play.runs

    def score_at(self, next_play: PlayRecord) -> ScoreResult:
        before = self._before.get(next_play.play_index)
        if before is None:
            # Not part of the preloaded game; fall back to the direct sum.
            return compute_score(self._plays.values(), next_play)
        home = next_play.home_team
        home_runs = before.get(home, 0)
        visitor_runs = sum(runs for team, runs in before.items() if team != home)
        return _with_next(home_runs, visitor_runs, next_play)
