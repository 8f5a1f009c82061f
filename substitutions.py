# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Read-only substitution preview for the upcoming play.

Reports pitching changes, pinch hitters and pinch runners between the
current and next play without writing anything.  Pitching and batting
checks reuse the detector functions, so the preview always agrees with
what an advance would record.
"""

from __future__ import annotations

from data.players import PlayerNameResolver
from lineup.detectors import detect_batting_substitution, detect_pitching_change
from models import (
    BASES,
    LineupSnapshot,
    PlayerChange,
    PlayRecord,
    Substitution,
    SubstitutionSummary,
    SubstitutionType,
)

_BASE_NAMES = {"first": "first base", "second": "second base", "third": "third base"}


def _involved_ids(current_play: PlayRecord, next_play: PlayRecord) -> list[str]:
    ids = [current_play.pitcher, next_play.pitcher, next_play.batter]
    for base in BASES:
        ids.extend([current_play.runner_on(base), next_play.runner_on(base)])
    return [pid for pid in ids if pid]


def narrate_substitutions(
    snapshot: LineupSnapshot,
    current_play: PlayRecord,
    next_play: PlayRecord,
    resolver: PlayerNameResolver | None = None,
) -> SubstitutionSummary:
    """Describe substitutions between ``current_play`` and ``next_play``.

    Args:
        snapshot: Latest snapshot at or before ``current_play``.
        current_play: The play being shown.
        next_play: The play that follows it.
        resolver: Optional name resolver.  Without one, ids are used as
            names.

    Returns:
        A ``SubstitutionSummary`` listing pitching change, pinch hitter and
        pinch runners (by base) in that order.
    """
    names: dict[str, str] = {}
    if resolver is not None:
        expected = [s.player_id for s in snapshot.batting_order(next_play.batting_team)]
        names = resolver.resolve(_involved_ids(current_play, next_play) + expected)

    def player(pid: str | None, team_id: str, position: str | None = None) -> PlayerChange:
        return PlayerChange(
            player_id=pid or "",
            player_name=names.get(pid or "") or pid or "",
            team_id=team_id,
            position=position,
        )

    subs: list[Substitution] = []

    pitching = detect_pitching_change(current_play, next_play, names)
    if pitching is not None:
        subs.append(Substitution(
            kind=SubstitutionType.PITCHING_CHANGE,
            player_in=player(pitching.player_in, pitching.team_id, "P"),
            player_out=player(pitching.player_out, pitching.team_id, "P"),
            description=pitching.description,
        ))

    batting = detect_batting_substitution(snapshot, current_play, next_play, names)
    if batting is not None:
        replaced = next(
            (s for s in snapshot.batting_order(batting.team_id)
             if s.batting_order == batting.batting_order),
            None,
        )
        position = replaced.position if replaced is not None else None
        incoming = player(batting.player_in, batting.team_id, position)
        outgoing = player(batting.player_out, batting.team_id, position)
        subs.append(Substitution(
            kind=SubstitutionType.PINCH_HITTER,
            player_in=incoming,
            player_out=outgoing,
            description=f"Pinch hitter: {incoming.player_name} bats for {outgoing.player_name}",
        ))

    for base in BASES:
        before = current_play.runner_on(base)
        after = next_play.runner_on(base)
        if not before or not after or before == after:
            continue
        incoming = player(after, next_play.batting_team)
        outgoing = player(before, next_play.batting_team)
        subs.append(Substitution(
            kind=SubstitutionType.PINCH_RUNNER,
            player_in=incoming,
            player_out=outgoing,
            description=(
                f"Pinch runner: {incoming.player_name} runs for "
                f"{outgoing.player_name} at {_BASE_NAMES[base]}"
            ),
        ))

    return SubstitutionSummary.from_substitutions(subs)
