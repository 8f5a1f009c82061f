# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Batting-order rotation.

The nine batting slots cycle 1 through 9 and back to 1.  Each team's lineup
carries one flagged slot: for the team at bat it is the batter at the
plate, for the team in the field it is the hitter due up when they next bat.
"""

from __future__ import annotations

from models import LineupSlot


def next_order(batting_order: int) -> int:
    """The batting-order number that follows ``batting_order`` (9 wraps to 1)."""
    return (batting_order % 9) + 1


def flagged_slot(slots: list[LineupSlot]) -> LineupSlot | None:
    """The lowest-numbered batting slot flagged as current batter, if any."""
    flagged = [s for s in slots if s.is_current_batter and not s.is_floating]
    if not flagged:
        return None
    return min(flagged, key=lambda s: s.batting_order)


def slot_for_order(slots: list[LineupSlot], batting_order: int) -> LineupSlot | None:
    for slot in slots:
        if slot.batting_order == batting_order:
            return slot
    return None


def next_batter_slot(slots: list[LineupSlot]) -> LineupSlot | None:
    """The slot that follows the flagged batter in the rotation.

    Args:
        slots: One team's lineup slots.  Floating pitcher entries are ignored.

    Returns:
        The slot after the flagged one, or ``None`` when no batting slot is
        flagged or the following batting-order number is missing.
    """
    current = flagged_slot(slots)
    if current is None:
        return None
    return slot_for_order(slots, next_order(current.batting_order))


def expected_batter_slot(slots: list[LineupSlot], half_inning_change: bool) -> LineupSlot | None:
    """The slot expected to bat in the next play.

    Within a half-inning that is the slot after the batter at the plate.
    When the batting team just came off the field its flag already marks
    the hitter due up, so that slot is expected as-is.
    """
    if half_inning_change:
        return flagged_slot(slots)
    return next_batter_slot(slots)
