# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Lineup change detection between two consecutive plays.

Three independent checks compare the current play, the next play and the
latest lineup snapshot: pitching changes, batting substitutions and
fielding changes.  All three are pure; nothing here touches storage.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from lineup.rotation import expected_batter_slot
from models import (
    FIELDING_POSITIONS,
    POSITION_ABBREVIATIONS,
    ChangeType,
    LineupChange,
    LineupSnapshot,
    PlayRecord,
    is_half_inning_change,
)

logger = logging.getLogger(__name__)


def _name(names: Mapping[str, str] | None, player_id: str | None) -> str:
    if not player_id:
        return ""
    if names and names.get(player_id):
        return names[player_id]
    return player_id


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------

def detect_pitching_change(
    current_play: PlayRecord,
    next_play: PlayRecord,
    names: Mapping[str, str] | None = None,
) -> LineupChange | None:
    """Detect a new pitcher within the same half-inning.

    A different pitcher across a half-inning turnover is just the other
    team's pitcher taking the mound and is never a change.
    """
    if is_half_inning_change(current_play, next_play):
        return None
    if current_play.pitcher == next_play.pitcher:
        return None
    return LineupChange(
        change_type=ChangeType.PITCHING_CHANGE,
        team_id=next_play.fielding_team,
        player_in=next_play.pitcher,
        player_out=current_play.pitcher,
        position=1,
        description=(
            f"Pitching change: {_name(names, next_play.pitcher)} "
            f"replaces {_name(names, current_play.pitcher)}"
        ),
    )


def detect_batting_substitution(
    snapshot: LineupSnapshot,
    current_play: PlayRecord,
    next_play: PlayRecord,
    names: Mapping[str, str] | None = None,
) -> LineupChange | None:
    """Detect a batter who is not the expected hitter and not in the lineup.

    Returns ``None`` when the expected batter cannot be determined (no
    flagged slot for the batting team), when the expected batter is the one
    who came up, or when the batter already holds a lineup slot for the
    team.
    """
    team_id = next_play.batting_team
    slots = snapshot.batting_order(team_id)
    expected = expected_batter_slot(slots, is_half_inning_change(current_play, next_play))
    if expected is None:
        logger.debug("No flagged batter for %s at play %d; skipping batting check",
                     team_id, next_play.play_index)
        return None
    if next_play.batter == expected.player_id:
        return None
    if any(s.player_id == next_play.batter for s in snapshot.team_slots(team_id)):
        return None
    return LineupChange(
        change_type=ChangeType.SUBSTITUTION,
        team_id=team_id,
        player_in=next_play.batter,
        player_out=expected.player_id,
        batting_order=expected.batting_order,
        description=(
            f"Batting substitution: {_name(names, next_play.batter)} "
            f"replaces {_name(names, expected.player_id)} in the lineup"
        ),
    )


def detect_fielding_changes(
    current_play: PlayRecord,
    next_play: PlayRecord,
    names: Mapping[str, str] | None = None,
) -> list[LineupChange]:
    """Detect fielders who differ at positions 2-9 within a half-inning."""
    if is_half_inning_change(current_play, next_play):
        return []
    changes: list[LineupChange] = []
    for position in FIELDING_POSITIONS:
        before = current_play.fielder_at(position)
        after = next_play.fielder_at(position)
        if not before or not after or before == after:
            continue
        changes.append(LineupChange(
            change_type=ChangeType.POSITION_CHANGE,
            team_id=next_play.fielding_team,
            player_in=after,
            player_out=before,
            position=position,
            description=(
                f"Fielding change: {_name(names, after)} replaces "
                f"{_name(names, before)} at {POSITION_ABBREVIATIONS[position]}"
            ),
        ))
    return changes


# ---------------------------------------------------------------------------
# Combined
# ---------------------------------------------------------------------------

def detect_changes(
    snapshot: LineupSnapshot,
    current_play: PlayRecord,
    next_play: PlayRecord,
    names: Mapping[str, str] | None = None,
) -> list[LineupChange]:
    """Run all three checks and return their changes in a fixed order.

    Pitching change first, then batting substitution, then fielding changes
    by ascending position.
    """
    changes: list[LineupChange] = []
    pitching = detect_pitching_change(current_play, next_play, names)
    if pitching is not None:
        changes.append(pitching)
    batting = detect_batting_substitution(snapshot, current_play, next_play, names)
    if batting is not None:
        changes.append(batting)
    changes.extend(detect_fielding_changes(current_play, next_play, names))
    for change in changes:
        logger.info("Play %d: %s", next_play.play_index, change.description)
    return changes
