# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Lineup reconstruction -- rotation, change detection and snapshot application."""

from lineup.applier import apply_changes, due_up, enforce_invariants, initial_snapshot
from lineup.detectors import (
    detect_batting_substitution,
    detect_changes,
    detect_fielding_changes,
    detect_pitching_change,
)
from lineup.rotation import expected_batter_slot, next_batter_slot, next_order

__all__ = [
    "apply_changes",
    "detect_batting_substitution",
    "detect_changes",
    "detect_fielding_changes",
    "detect_pitching_change",
    "due_up",
    "enforce_invariants",
    "expected_batter_slot",
    "initial_snapshot",
    "next_batter_slot",
    "next_order",
]
