# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for lineup.detectors.

Validates:
  1. Scenario A: expected batter comes up -> no change
  2. Scenario B: unknown batter -> one SUBSTITUTION at the expected slot
  3. Scenario C: new pitcher in the same half-inning -> PITCHING_CHANGE;
     different batting team -> no change
  4. A batter already in the lineup out of turn is not a substitution
  5. No flagged batter -> batting check skipped
  6. At a half-inning change the incoming team's due-up slot is expected
  7. Fielding changes at positions 2-9, skipped across a turnover
  8. For every possible flagged slot, the expected batter never yields a change
  9. Descriptions use resolved names when given
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from lineup.detectors import (
    detect_batting_substitution,
    detect_changes,
    detect_fielding_changes,
    detect_pitching_change,
)
from models import ChangeType, Half, LineupSlot, LineupSnapshot, PlayRecord


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _slots(team: str, flagged: int | None, pitcher_order: int | None = 9) -> list[LineupSlot]:
    return [
        LineupSlot(
            team_id=team,
            player_id=f"{team.lower()}{order}",
            batting_order=order,
            is_current_batter=(order == flagged),
            is_current_pitcher=(order == pitcher_order),
        )
        for order in range(1, 10)
    ]


def _snapshot(away_flagged: int | None = 3, home_flagged: int | None = 1) -> LineupSnapshot:
    return LineupSnapshot(
        game_id="G1",
        session_id="S1",
        play_index=10,
        inning=3,
        half=Half.TOP,
        outs=1,
        slots=_slots("AWY", away_flagged) + _slots("HOM", home_flagged),
    )


def _play(index: int, batter: str, pitcher: str = "hom9", half: Half = Half.TOP, **kw) -> PlayRecord:
    batting, fielding = ("AWY", "HOM") if half == Half.TOP else ("HOM", "AWY")
    return PlayRecord(
        game_id="G1",
        play_index=index,
        inning=kw.pop("inning", 3),
        half=half,
        batting_team=batting,
        fielding_team=fielding,
        batter=batter,
        pitcher=pitcher,
        **kw,
    )


# ---------------------------------------------------------------------------
# Batting substitution
# ---------------------------------------------------------------------------

class TestBattingSubstitution:
    def test_scenario_a_expected_batter_no_change(self):
        snapshot = _snapshot(away_flagged=3)
        changes = detect_changes(snapshot, _play(10, "awy3"), _play(11, "awy4"))
        assert changes == []

    def test_scenario_b_new_batter_substitution(self):
        snapshot = _snapshot(away_flagged=3)
        changes = detect_changes(snapshot, _play(10, "awy3"), _play(11, "ph01"))
        assert len(changes) == 1
        change = changes[0]
        assert change.change_type == ChangeType.SUBSTITUTION
        assert change.player_in == "ph01"
        assert change.player_out == "awy4"
        assert change.batting_order == 4
        assert change.team_id == "AWY"

    def test_rostered_batter_out_of_turn_is_not_substitution(self):
        snapshot = _snapshot(away_flagged=3)
        assert detect_batting_substitution(snapshot, _play(10, "awy3"), _play(11, "awy7")) is None

    def test_no_flagged_batter_skips_check(self):
        snapshot = _snapshot(away_flagged=None)
        assert detect_batting_substitution(snapshot, _play(10, "awy3"), _play(11, "ph01")) is None

    def test_turnover_expects_due_up_slot(self):
        snapshot = _snapshot(away_flagged=9, home_flagged=5)
        current = _play(10, "awy9")
        nxt = _play(11, "ph02", pitcher="awy9", half=Half.BOTTOM)
        change = detect_batting_substitution(snapshot, current, nxt)
        assert change.batting_order == 5
        assert change.player_out == "hom5"
        assert change.team_id == "HOM"

    def test_turnover_due_up_batter_no_change(self):
        snapshot = _snapshot(away_flagged=9, home_flagged=5)
        nxt = _play(11, "hom5", pitcher="awy9", half=Half.BOTTOM)
        assert detect_changes(snapshot, _play(10, "awy9"), nxt) == []

    @pytest.mark.parametrize("flagged", range(1, 10))
    def test_expected_batter_never_substitution(self, flagged):
        snapshot = _snapshot(away_flagged=flagged)
        expected = f"awy{flagged % 9 + 1}"
        current = _play(10, f"awy{flagged}")
        assert detect_batting_substitution(snapshot, current, _play(11, expected)) is None

    def test_description_uses_names(self):
        snapshot = _snapshot(away_flagged=3)
        change = detect_batting_substitution(
            snapshot, _play(10, "awy3"), _play(11, "ph01"),
            names={"ph01": "Pat Hitter", "awy4": "Al Fourth"},
        )
        assert change.description == "Batting substitution: Pat Hitter replaces Al Fourth in the lineup"


# ---------------------------------------------------------------------------
# Pitching change
# ---------------------------------------------------------------------------

class TestPitchingChange:
    def test_scenario_c_same_half_inning(self):
        snapshot = _snapshot(away_flagged=3)
        changes = detect_changes(
            snapshot, _play(10, "awy3", pitcher="P1"), _play(11, "awy4", pitcher="P2"),
        )
        assert len(changes) == 1
        assert changes[0].change_type == ChangeType.PITCHING_CHANGE
        assert changes[0].player_in == "P2"
        assert changes[0].player_out == "P1"
        assert changes[0].team_id == "HOM"

    def test_scenario_c_turnover_no_change(self):
        snapshot = _snapshot(away_flagged=3, home_flagged=1)
        current = _play(10, "awy3", pitcher="P1")
        nxt = _play(11, "hom1", pitcher="P2", half=Half.BOTTOM)
        assert detect_changes(snapshot, current, nxt) == []

    def test_same_pitcher_no_change(self):
        assert detect_pitching_change(_play(10, "awy3"), _play(11, "awy4")) is None

    def test_description(self):
        change = detect_pitching_change(
            _play(10, "awy3", pitcher="P1"), _play(11, "awy4", pitcher="P2"),
            names={"P1": "Old Arm", "P2": "New Arm"},
        )
        assert change.description == "Pitching change: New Arm replaces Old Arm"


# ---------------------------------------------------------------------------
# Fielding changes
# ---------------------------------------------------------------------------

class TestFieldingChanges:
    def test_changed_position_detected(self):
        current = _play(10, "awy3", fielders={7: "lf1", 8: "cf1"})
        nxt = _play(11, "awy4", fielders={7: "lf2", 8: "cf1"})
        changes = detect_fielding_changes(current, nxt)
        assert len(changes) == 1
        assert changes[0].change_type == ChangeType.POSITION_CHANGE
        assert changes[0].position == 7
        assert changes[0].player_in == "lf2"
        assert changes[0].player_out == "lf1"
        assert changes[0].team_id == "HOM"

    def test_missing_fielder_ignored(self):
        current = _play(10, "awy3", fielders={7: "lf1"})
        nxt = _play(11, "awy4", fielders={})
        assert detect_fielding_changes(current, nxt) == []

    def test_skipped_across_turnover(self):
        current = _play(10, "awy3", fielders={2: "c1"})
        nxt = _play(11, "hom1", pitcher="awy9", half=Half.BOTTOM, fielders={2: "c2"})
        assert detect_fielding_changes(current, nxt) == []

    def test_changes_ordered_by_position(self):
        current = _play(10, "awy3", fielders={4: "a", 9: "b"})
        nxt = _play(11, "awy4", fielders={4: "c", 9: "d"})
        assert [c.position for c in detect_fielding_changes(current, nxt)] == [4, 9]


class TestCombinedOrder:
    def test_pitching_then_batting_then_fielding(self):
        snapshot = _snapshot(away_flagged=3)
        current = _play(10, "awy3", pitcher="P1", fielders={5: "x"})
        nxt = _play(11, "ph01", pitcher="P2", fielders={5: "y"})
        kinds = [c.change_type for c in detect_changes(snapshot, current, nxt)]
        assert kinds == [
            ChangeType.PITCHING_CHANGE,
            ChangeType.SUBSTITUTION,
            ChangeType.POSITION_CHANGE,
        ]
