# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for data.play_source and PlayRecord parsing.

Validates:
  1. Retrosheet play rows map onto PlayRecord fields
  2. Blank runners are None, missing runs and outs are 0
  3. Game files load by path or directory
  4. fetch_by_index / fetch_after / fetch_first lookups and their NotFoundErrors
  5. Malformed rows, duplicate indexes, bad lineups and bad JSON raise
     DataInconsistencyError
  6. Team and player names, including the {first, last} name form
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from data.play_source import GameData, PlaySource
from errors import DataInconsistencyError, NotFoundError
from models import Half, PlayRecord

FIXTURE = Path(__file__).resolve().parent / "fixtures" / "sample_game.json"
GAME_ID = "CIN201904150"


def _row(pn: int, **overrides) -> dict:
    row = {
        "pn": pn, "inning": 1, "top_bot": 0, "batteam": "AWY", "pitteam": "HOM",
        "batter": f"b{pn}", "pitcher": "p1", "outs_pre": 0, "runs": 0, "event": "K",
    }
    row.update(overrides)
    return row


def _lineup(team: str) -> dict:
    return {
        "team_id": team,
        "batters": [f"{team.lower()}{i}" for i in range(1, 10)],
        "positions": list(range(2, 10)) + [1],
        "pitcher": f"{team.lower()}9",
    }


def _payload(**overrides) -> dict:
    payload = {
        "game_id": "G1",
        "plays": [_row(1), _row(2), _row(5, top_bot=1, batteam="HOM", pitteam="AWY")],
        "starting_lineups": [_lineup("AWY"), _lineup("HOM")],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def source() -> PlaySource:
    return PlaySource([GameData.from_dict(_payload())])


class TestPlayRecord:
    def test_from_row(self):
        row = _row(7, top_bot=1, batteam="HOM", pitteam="AWY", outs_pre=2, runs=1,
                   br1_pre="r1", br3_pre="r3", f2="c", f7="lf", event="S7.1-3")
        play = PlayRecord.from_row("G1", row)
        assert play.play_index == 7
        assert play.half == Half.BOTTOM
        assert play.batting_team == "HOM"
        assert play.home_team == "HOM"
        assert play.visiting_team == "AWY"
        assert play.outs == 2
        assert play.runs == 1
        assert play.first == "r1"
        assert play.second is None
        assert play.runner_on("third") == "r3"
        assert play.fielders == {2: "c", 7: "lf"}
        assert play.fielder_at(7) == "lf"
        assert play.event == "S7.1-3"

    def test_blank_values(self):
        play = PlayRecord.from_row("G1", _row(1, br1_pre="", runs=None, outs_pre=None, event=""))
        assert play.first is None
        assert play.runs == 0
        assert play.outs == 0
        assert play.event is None

    def test_home_team_in_top_half(self):
        play = PlayRecord.from_row("G1", _row(1))
        assert play.home_team == "HOM"
        assert play.visiting_team == "AWY"

    def test_invalid_outs(self):
        with pytest.raises(ValueError):
            PlayRecord.from_row("G1", _row(1, outs_pre=3))


class TestLookups:
    def test_fetch_first(self, source):
        assert source.fetch_first("G1").play_index == 1

    def test_fetch_by_index(self, source):
        assert source.fetch_by_index("G1", 2).batter == "b2"

    def test_fetch_by_missing_index(self, source):
        with pytest.raises(NotFoundError) as exc:
            source.fetch_by_index("G1", 3)
        assert exc.value.play_index == 3

    def test_fetch_after_skips_gaps(self, source):
        assert source.fetch_after("G1", 2).play_index == 5
        assert source.fetch_after("G1", 3).play_index == 5

    def test_fetch_after_last_play(self, source):
        with pytest.raises(NotFoundError):
            source.fetch_after("G1", 5)

    def test_unknown_game(self, source):
        with pytest.raises(NotFoundError) as exc:
            source.fetch_plays("NOPE")
        assert exc.value.game_id == "NOPE"

    def test_plays_sorted(self):
        source = PlaySource([GameData.from_dict(_payload(plays=[_row(3), _row(1), _row(2)]))])
        assert [p.play_index for p in source.fetch_plays("G1")] == [1, 2, 3]

    def test_game_without_plays(self):
        source = PlaySource([GameData.from_dict(_payload(plays=[]))])
        with pytest.raises(NotFoundError):
            source.fetch_first("G1")

    def test_starting_lineups(self, source):
        lineups = source.fetch_starting_lineups("G1")
        assert [lu.team_id for lu in lineups] == ["AWY", "HOM"]
        assert lineups[0].positions[0] == "C"
        assert lineups[0].positions[8] == "P"

    def test_missing_starting_lineups(self):
        source = PlaySource([GameData.from_dict(_payload(starting_lineups=[]))])
        with pytest.raises(DataInconsistencyError):
            source.fetch_starting_lineups("G1")

    def test_lineups_as_mapping(self):
        raw = {"AWY": _lineup("AWY"), "HOM": _lineup("HOM")}
        for value in raw.values():
            del value["team_id"]
        game = GameData.from_dict(_payload(starting_lineups=raw))
        assert sorted(lu.team_id for lu in game.lineups) == ["AWY", "HOM"]

    def test_team_defaults_to_id(self, source):
        info = source.fetch_team("G1", "AWY")
        assert info.display_name == "AWY"
        assert info.short_name == "AWY"


class TestInvalidData:
    def test_missing_game_id(self):
        with pytest.raises(DataInconsistencyError):
            GameData.from_dict(_payload(game_id=""))

    def test_bad_row(self):
        with pytest.raises(DataInconsistencyError) as exc:
            GameData.from_dict(_payload(plays=[_row(1, inning=0)]))
        assert exc.value.game_id == "G1"

    def test_duplicate_index(self):
        with pytest.raises(DataInconsistencyError, match="Duplicate"):
            GameData.from_dict(_payload(plays=[_row(1), _row(1)]))

    def test_short_lineup(self):
        lineup = _lineup("AWY")
        lineup["batters"] = lineup["batters"][:8]
        with pytest.raises(DataInconsistencyError):
            GameData.from_dict(_payload(starting_lineups=[lineup, _lineup("HOM")]))

    def test_repeated_batter(self):
        lineup = _lineup("AWY")
        lineup["batters"][3] = lineup["batters"][0]
        with pytest.raises(DataInconsistencyError):
            GameData.from_dict(_payload(starting_lineups=[lineup, _lineup("HOM")]))

    def test_bad_json_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(DataInconsistencyError):
            PlaySource().load_file(path)


class TestGameFiles:
    def test_load_fixture(self):
        source = PlaySource()
        game = source.load_file(FIXTURE)
        assert game.game_id == GAME_ID
        assert len(source.fetch_plays(GAME_ID)) == 37
        assert source.fetch_team(GAME_ID, "CIN").display_name == "Cincinnati Reds"
        assert source.fetch_team(GAME_ID, "PIT").short_name == "Pirates"

    def test_player_names(self):
        source = PlaySource()
        source.load_file(FIXTURE)
        names = source.lookup_players(["vottj001", "newmk001", "unknown"])
        assert names == {"vottj001": "Joey Votto", "newmk001": "Kevin Newman"}

    def test_from_directory(self, tmp_path):
        (tmp_path / "g1.json").write_text(json.dumps(_payload()))
        (tmp_path / "g2.json").write_text(json.dumps(_payload(game_id="G2")))
        (tmp_path / "notes.txt").write_text("ignored")
        source = PlaySource.from_directory(tmp_path)
        assert source.game_ids == ["G1", "G2"]

    def test_missing_directory(self, tmp_path):
        assert PlaySource.from_directory(tmp_path / "nope").game_ids == []
