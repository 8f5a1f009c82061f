# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Snapshot construction: starting lineups and play-to-play application.

``initial_snapshot`` turns the two starting lineups into the pre-game
snapshot (play index 0).  ``apply_changes`` folds detected changes into the
latest snapshot, advances the current-batter pointers, keeps the fielding
team's current pitcher in step with the mound, and finally repairs any
team whose current-batter flags are inconsistent.
"""

from __future__ import annotations

import logging

from errors import DataInconsistencyError
from lineup.rotation import flagged_slot, next_batter_slot
from models import (
    POSITION_ABBREVIATIONS,
    ChangeType,
    LineupChange,
    LineupSlot,
    LineupSnapshot,
    PlayRecord,
    StartingLineup,
    is_half_inning_change,
)

logger = logging.getLogger(__name__)

PREGAME_PLAY_INDEX = 0


# ---------------------------------------------------------------------------
# Slot helpers
# ---------------------------------------------------------------------------

def _flag_batter(slots: list[LineupSlot], team_id: str, batting_order: int) -> list[LineupSlot]:
    """Flag one batting slot of a team and clear the team's other batter flags."""
    out = []
    for slot in slots:
        if slot.team_id == team_id:
            wanted = slot.batting_order == batting_order
            if slot.is_current_batter != wanted:
                slot = slot.model_copy(update={"is_current_batter": wanted})
        out.append(slot)
    return out


def _flag_pitcher(slots: list[LineupSlot], team_id: str, player_id: str) -> list[LineupSlot]:
    """Make ``player_id`` the team's only current pitcher.

    A player not yet tracked for the team is added as a floating entry.
    """
    out = []
    found = False
    for slot in slots:
        if slot.team_id == team_id:
            wanted = slot.player_id == player_id and not found
            found = found or wanted
            if slot.is_current_pitcher != wanted:
                slot = slot.model_copy(update={"is_current_pitcher": wanted})
        out.append(slot)
    if not found:
        out.append(LineupSlot(
            team_id=team_id, player_id=player_id, position="P", is_current_pitcher=True,
        ))
    return out


def _batter_order_of(slots: list[LineupSlot], team_id: str, player_id: str) -> int | None:
    for slot in slots:
        if slot.team_id == team_id and slot.player_id == player_id and not slot.is_floating:
            return slot.batting_order
    return None


def _team_batting(slots: list[LineupSlot], team_id: str) -> list[LineupSlot]:
    return sorted(
        (s for s in slots if s.team_id == team_id and not s.is_floating),
        key=lambda s: s.batting_order,
    )


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------

def enforce_invariants(slots: list[LineupSlot], team_ids: list[str]) -> list[LineupSlot]:
    """Repair current-batter and current-pitcher flags for each team.

    Batter: with no flagged batting slot the lowest batting order is
    flagged; with several only the lowest keeps the flag.  Floating entries
    never carry the batter flag.  Pitcher: with several flagged entries the
    most recently added one keeps the flag.  Every repair is logged at
    warning level.
    """
    out = [
        s.model_copy(update={"is_current_batter": False})
        if s.is_floating and s.is_current_batter else s
        for s in slots
    ]
    for team_id in team_ids:
        batting = _team_batting(out, team_id)
        if not batting:
            continue
        flagged = [s for s in batting if s.is_current_batter]
        if len(flagged) != 1:
            keep = flagged[0] if flagged else batting[0]
            logger.warning(
                "Repairing current batter for %s: %d flagged, keeping order %d",
                team_id, len(flagged), keep.batting_order,
            )
            out = _flag_batter(out, team_id, keep.batting_order)

        pitchers = [s for s in out if s.team_id == team_id and s.is_current_pitcher]
        if len(pitchers) > 1:
            keep_pitcher = pitchers[-1]
            logger.warning(
                "Repairing current pitcher for %s: %d flagged, keeping %s",
                team_id, len(pitchers), keep_pitcher.player_id,
            )
            out = _flag_pitcher(out, team_id, keep_pitcher.player_id)
        elif not pitchers:
            logger.warning("No current pitcher flagged for %s", team_id)
    return out


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

def initial_snapshot(
    game_id: str,
    session_id: str,
    lineups: list[StartingLineup],
    first_play: PlayRecord,
) -> LineupSnapshot:
    """Build the pre-game snapshot from both teams' starting lineups.

    The batting team of the first play has the first play's batter flagged
    (slot 1 if that batter is not in its lineup); the other team has slot 1
    flagged as due up.  Each starting pitcher is flagged as current pitcher,
    on its batting slot if it holds one, otherwise as a floating entry.

    Raises:
        DataInconsistencyError: If the lineups do not cover exactly the two
            teams of the first play.
    """
    teams = {lu.team_id for lu in lineups}
    expected = {first_play.batting_team, first_play.fielding_team}
    if len(lineups) != 2 or teams != expected:
        raise DataInconsistencyError(
            f"Starting lineups for {game_id} cover {sorted(teams)}, "
            f"expected {sorted(expected)}",
            game_id=game_id,
        )

    slots: list[LineupSlot] = []
    changes: list[LineupChange] = []
    for lineup in sorted(lineups, key=lambda lu: lu.team_id != first_play.visiting_team):
        positions = lineup.positions or [""] * 9
        for order, (player_id, position) in enumerate(zip(lineup.batters, positions), start=1):
            slots.append(LineupSlot(
                team_id=lineup.team_id,
                player_id=player_id,
                batting_order=order,
                position=position,
            ))
        slots = _flag_pitcher(slots, lineup.team_id, lineup.pitcher)

        first_up = 1
        if lineup.team_id == first_play.batting_team:
            first_up = _batter_order_of(slots, lineup.team_id, first_play.batter) or 1
        slots = _flag_batter(slots, lineup.team_id, first_up)

        changes.append(LineupChange(
            change_type=ChangeType.INITIAL_LINEUP,
            team_id=lineup.team_id,
            player_in=lineup.pitcher,
            description=f"Starting lineup for {lineup.team_id}",
        ))

    # The log's first pitcher outranks the announced starter.
    slots = _flag_pitcher(slots, first_play.fielding_team, first_play.pitcher)

    logger.info("Initial lineup built for game %s session %s", game_id, session_id)
    return LineupSnapshot(
        game_id=game_id,
        session_id=session_id,
        play_index=PREGAME_PLAY_INDEX,
        inning=first_play.inning,
        half=first_play.half,
        outs=first_play.outs,
        slots=enforce_invariants(slots, [first_play.visiting_team, first_play.home_team]),
        changes=changes,
    )


# ---------------------------------------------------------------------------
# Applying changes
# ---------------------------------------------------------------------------

def _apply_pitching_change(slots: list[LineupSlot], change: LineupChange) -> list[LineupSlot]:
    out = []
    replaced = False
    for slot in slots:
        if slot.team_id == change.team_id and slot.is_current_pitcher and not replaced:
            slot = slot.model_copy(update={"player_id": change.player_in})
            replaced = True
        out.append(slot)
    if not replaced:
        out = _flag_pitcher(out, change.team_id, change.player_in)
    return out


def _apply_substitution(slots: list[LineupSlot], change: LineupChange) -> list[LineupSlot]:
    out = []
    replaced = False
    for slot in slots:
        if slot.team_id == change.team_id and slot.batting_order == change.batting_order:
            slot = slot.model_copy(update={"player_id": change.player_in})
            replaced = True
        out.append(slot)
    if not replaced:
        logger.warning("No batting slot %s for %s; substitution of %s ignored",
                       change.batting_order, change.team_id, change.player_in)
        return out
    return _flag_batter(out, change.team_id, change.batting_order)


def _apply_position_change(slots: list[LineupSlot], change: LineupChange) -> list[LineupSlot]:
    label = POSITION_ABBREVIATIONS.get(change.position, "")
    team = [s for s in slots if s.team_id == change.team_id]

    # A player already on the field moving over just changes label.
    if any(s.player_id == change.player_in for s in team):
        return [
            s.model_copy(update={"position": label})
            if s.team_id == change.team_id and s.player_id == change.player_in else s
            for s in slots
        ]

    out = []
    replaced = False
    for slot in slots:
        if slot.team_id == change.team_id and slot.position == label and not replaced:
            slot = slot.model_copy(update={"player_id": change.player_in})
            replaced = True
        out.append(slot)
    if not replaced:
        logger.debug("Nobody listed at %s for %s; fielding change not applied",
                     label, change.team_id)
    return out


def _apply_one(slots: list[LineupSlot], change: LineupChange) -> list[LineupSlot]:
    if change.change_type == ChangeType.PITCHING_CHANGE:
        return _apply_pitching_change(slots, change)
    elif change.change_type == ChangeType.SUBSTITUTION:
        return _apply_substitution(slots, change)
    elif change.change_type == ChangeType.POSITION_CHANGE:
        return _apply_position_change(slots, change)
    elif change.change_type == ChangeType.INITIAL_LINEUP:
        return slots
    raise ValueError(f"Unknown change type: {change.change_type}")


def _advance_pointer(slots: list[LineupSlot], team_id: str) -> list[LineupSlot]:
    nxt = next_batter_slot(_team_batting(slots, team_id))
    if nxt is None:
        return slots
    return _flag_batter(slots, team_id, nxt.batting_order)


def apply_changes(
    snapshot: LineupSnapshot,
    changes: list[LineupChange],
    current_play: PlayRecord,
    next_play: PlayRecord,
) -> LineupSnapshot:
    """Produce the snapshot for ``next_play``.

    Args:
        snapshot: Latest stored snapshot for the session.
        changes: Changes detected between ``current_play`` and ``next_play``.
        current_play: The play being left.
        next_play: The play being advanced to.

    Returns:
        A new snapshot stamped with ``next_play``'s index, inning, half and
        outs.  The input snapshot is not modified.
    """
    slots = list(snapshot.slots)
    for change in changes:
        slots = _apply_one(slots, change)

    batting_team = next_play.batting_team
    substituted = any(
        c.change_type == ChangeType.SUBSTITUTION and c.team_id == batting_team
        for c in changes
    )

    if is_half_inning_change(current_play, next_play):
        # Finished side moves to the hitter due up next time.
        slots = _advance_pointer(slots, current_play.batting_team)
        if not substituted:
            order = _batter_order_of(slots, batting_team, next_play.batter)
            if order is not None:
                slots = _flag_batter(slots, batting_team, order)
    elif not substituted:
        order = _batter_order_of(slots, batting_team, next_play.batter)
        if order is not None:
            slots = _flag_batter(slots, batting_team, order)
        else:
            slots = _advance_pointer(slots, batting_team)

    current_pitcher = next(
        (s for s in slots if s.team_id == next_play.fielding_team and s.is_current_pitcher),
        None,
    )
    if current_pitcher is None or current_pitcher.player_id != next_play.pitcher:
        logger.debug("Syncing %s pitcher to %s", next_play.fielding_team, next_play.pitcher)
        slots = _flag_pitcher(slots, next_play.fielding_team, next_play.pitcher)

    return LineupSnapshot(
        game_id=snapshot.game_id,
        session_id=snapshot.session_id,
        play_index=next_play.play_index,
        inning=next_play.inning,
        half=next_play.half,
        outs=next_play.outs,
        slots=enforce_invariants(slots, snapshot.team_ids),
        changes=list(changes),
    )


def due_up(snapshot: LineupSnapshot, team_id: str) -> LineupSlot | None:
    """The flagged slot for ``team_id``, i.e. its batter at the plate or due up."""
    return flagged_slot(snapshot.batting_order(team_id))
