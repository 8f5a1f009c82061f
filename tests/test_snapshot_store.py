# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for data.snapshot_store.

Validates:
  1. latest / at_or_before / history lookups
  2. append rejects a snapshot that is not after the latest one
  3. append with expected_latest rejects a moved history (optimistic check)
  4. delete_session drops only that session
  5. JsonFileSnapshotStore writes one file per session and reloads it
  6. Unreadable snapshot files raise DataInconsistencyError
"""

import json
import sys
import threading
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from data.snapshot_store import InMemorySnapshotStore, JsonFileSnapshotStore
from errors import DataInconsistencyError, StaleSnapshotError
from models import Half, LineupSlot, LineupSnapshot


def _snapshot(play_index: int, session_id: str = "s1", game_id: str = "G1") -> LineupSnapshot:
    return LineupSnapshot(
        game_id=game_id,
        session_id=session_id,
        play_index=play_index,
        inning=1,
        half=Half.TOP,
        outs=0,
        slots=[LineupSlot(team_id="AWY", player_id="a1", batting_order=1, is_current_batter=True)],
    )


@pytest.fixture
def store() -> InMemorySnapshotStore:
    store = InMemorySnapshotStore()
    for index in (0, 2, 5):
        store.append(_snapshot(index))
    return store


class TestLookups:
    def test_latest(self, store):
        assert store.latest("G1", "s1").play_index == 5

    def test_latest_empty(self, store):
        assert store.latest("G1", "other") is None

    @pytest.mark.parametrize("index,expected", [(0, 0), (1, 0), (2, 2), (4, 2), (9, 5)])
    def test_at_or_before(self, store, index, expected):
        assert store.at_or_before("G1", "s1", index).play_index == expected

    def test_at_or_before_nothing(self):
        store = InMemorySnapshotStore()
        store.append(_snapshot(3))
        assert store.at_or_before("G1", "s1", 2) is None

    def test_history_is_a_copy(self, store):
        history = store.history("G1", "s1")
        history.clear()
        assert len(store.history("G1", "s1")) == 3


class TestAppend:
    def test_not_after_latest(self, store):
        with pytest.raises(StaleSnapshotError) as exc:
            store.append(_snapshot(5))
        assert exc.value.expected_play_index == 5

    def test_expected_latest_matches(self, store):
        store.append(_snapshot(6), expected_latest=5)
        assert store.latest("G1", "s1").play_index == 6

    def test_expected_latest_moved(self, store):
        with pytest.raises(StaleSnapshotError) as exc:
            store.append(_snapshot(9), expected_latest=2)
        assert exc.value.actual_play_index == 5
        assert store.latest("G1", "s1").play_index == 5

    def test_expected_empty_history(self, store):
        with pytest.raises(StaleSnapshotError):
            store.append(_snapshot(1, session_id="s1"), expected_latest=None)
        store.append(_snapshot(0, session_id="s2"), expected_latest=None)
        assert store.latest("G1", "s2").play_index == 0

    def test_concurrent_writers_one_wins(self, store):
        errors = []
        barrier = threading.Barrier(4)

        def write():
            barrier.wait()
            try:
                store.append(_snapshot(6), expected_latest=5)
            except StaleSnapshotError as e:
                errors.append(e)

        threads = [threading.Thread(target=write) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(errors) == 3
        assert [s.play_index for s in store.history("G1", "s1")] == [0, 2, 5, 6]


class TestDeleteSession:
    def test_removes_only_that_session(self, store):
        store.append(_snapshot(0, session_id="s2"))
        assert store.delete_session("G1", "s1") == 3
        assert store.latest("G1", "s1") is None
        assert store.latest("G1", "s2").play_index == 0

    def test_missing_session(self, store):
        assert store.delete_session("G1", "nope") == 0


class TestJsonFileStore:
    def test_writes_session_file(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path)
        store.append(_snapshot(0))
        store.append(_snapshot(3))
        path = tmp_path / "G1" / "s1.json"
        data = json.loads(path.read_text())
        assert [s["play_index"] for s in data["snapshots"]] == [0, 3]
        assert not (tmp_path / "G1" / "s1.tmp").exists()

    def test_reloads_history(self, tmp_path):
        first = JsonFileSnapshotStore(tmp_path)
        first.append(_snapshot(0))
        first.append(_snapshot(4))
        second = JsonFileSnapshotStore(tmp_path)
        latest = second.latest("G1", "s1")
        assert latest.play_index == 4
        assert latest.slots[0].is_current_batter
        assert second.at_or_before("G1", "s1", 3).play_index == 0

    def test_delete_removes_file(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path)
        store.append(_snapshot(0))
        store.delete_session("G1", "s1")
        assert not (tmp_path / "G1" / "s1.json").exists()

    def test_unreadable_file(self, tmp_path):
        (tmp_path / "G1").mkdir()
        (tmp_path / "G1" / "s1.json").write_text("{broken")
        with pytest.raises(DataInconsistencyError):
            JsonFileSnapshotStore(tmp_path)
