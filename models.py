# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Data models for the lineup replay engine.

Play records come from the play-by-play log (one per plate appearance),
lineup snapshots are the reconstructed state at each play index, and the
visible state is what a caller renders for the play being shown.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Half(str, Enum):
    TOP = "TOP"
    BOTTOM = "BOTTOM"


class ChangeType(str, Enum):
    PITCHING_CHANGE = "PITCHING_CHANGE"
    SUBSTITUTION = "SUBSTITUTION"
    POSITION_CHANGE = "POSITION_CHANGE"
    INITIAL_LINEUP = "INITIAL_LINEUP"


class SubstitutionType(str, Enum):
    PITCHING_CHANGE = "PITCHING_CHANGE"
    PINCH_HITTER = "PINCH_HITTER"
    PINCH_RUNNER = "PINCH_RUNNER"


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

# Scorebook numbering; 10 is the designated hitter.
POSITION_ABBREVIATIONS: dict[int, str] = {
    1: "P", 2: "C", 3: "1B", 4: "2B", 5: "3B",
    6: "SS", 7: "LF", 8: "CF", 9: "RF", 10: "DH",
}

POSITION_NUMBERS: dict[str, int] = {v: k for k, v in POSITION_ABBREVIATIONS.items()}

FIELDING_POSITIONS: tuple[int, ...] = (2, 3, 4, 5, 6, 7, 8, 9)

BASES: tuple[str, ...] = ("first", "second", "third")


def normalize_position(value: Any) -> str:
    """Return the abbreviation for a position given as number or label.

    ``8``, ``"8"`` and ``"cf"`` all become ``"CF"``.  Unknown labels are
    upper-cased and returned unchanged.
    """
    if value is None:
        return ""
    text = str(value).strip().upper()
    if text.isdigit():
        return POSITION_ABBREVIATIONS.get(int(text), text)
    return text


# ---------------------------------------------------------------------------
# Play log
# ---------------------------------------------------------------------------

class PlayRecord(BaseModel):
    """One observed plate appearance from the play-by-play log."""
    model_config = ConfigDict(frozen=True)

    game_id: str
    play_index: int = Field(ge=0)
    inning: int = Field(ge=1)
    half: Half
    batting_team: str
    fielding_team: str
    batter: str
    pitcher: str
    outs: int = Field(default=0, ge=0, le=2, description="Outs before the play")
    runs: int = Field(default=0, ge=0, description="Runs scored on this play")
    first: Optional[str] = None
    second: Optional[str] = None
    third: Optional[str] = None
    fielders: dict[int, str] = Field(default_factory=dict, description="Fielder id by position 2-9")
    event: Optional[str] = None

    @field_validator("runs", "outs", mode="before")
    @classmethod
    def _missing_counts_are_zero(cls, v: Any) -> Any:
        return 0 if v in (None, "") else v

    @field_validator("first", "second", "third", "event", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("fielders", mode="before")
    @classmethod
    def _clean_fielders(cls, v: Any) -> Any:
        if not v:
            return {}
        cleaned: dict[int, str] = {}
        for pos, pid in dict(v).items():
            pos = int(pos)
            if pos not in FIELDING_POSITIONS:
                raise ValueError(f"fielder position must be 2-9, got {pos}")
            if pid:
                cleaned[pos] = str(pid)
        return cleaned

    @classmethod
    def from_row(cls, game_id: str, row: dict[str, Any]) -> PlayRecord:
        """Build a record from a Retrosheet-style play row.

        Recognised keys: ``pn``, ``inning``, ``top_bot`` (0 top, 1 bottom),
        ``batteam``, ``pitteam``, ``batter``, ``pitcher``, ``outs_pre``,
        ``runs``, ``br1_pre``..``br3_pre``, ``f2``..``f9`` and ``event``.
        """
        return cls(
            game_id=str(row.get("gid", game_id)),
            play_index=row.get("pn"),
            inning=row.get("inning"),
            half=Half.BOTTOM if int(row.get("top_bot", 0)) == 1 else Half.TOP,
            batting_team=str(row.get("batteam", "")),
            fielding_team=str(row.get("pitteam", "")),
            batter=str(row.get("batter", "")),
            pitcher=str(row.get("pitcher", "")),
            outs=row.get("outs_pre"),
            runs=row.get("runs"),
            first=row.get("br1_pre"),
            second=row.get("br2_pre"),
            third=row.get("br3_pre"),
            fielders={p: row.get(f"f{p}") for p in FIELDING_POSITIONS},
            event=row.get("event"),
        )

    @property
    def home_team(self) -> str:
        # Visitors bat in the top half, so the home side is fielding.
        return self.fielding_team if self.half == Half.TOP else self.batting_team

    @property
    def visiting_team(self) -> str:
        return self.batting_team if self.half == Half.TOP else self.fielding_team

    def fielder_at(self, position: int) -> Optional[str]:
        return self.fielders.get(position)

    def runner_on(self, base: str) -> Optional[str]:
        return getattr(self, base)


def is_half_inning_change(current_play: PlayRecord, next_play: PlayRecord) -> bool:
    """True when the two plays have different batting teams."""
    return current_play.batting_team != next_play.batting_team


# ---------------------------------------------------------------------------
# Lineup state
# ---------------------------------------------------------------------------

class LineupSlot(BaseModel):
    """One lineup entry for a team at a given snapshot.

    ``batting_order`` is ``None`` for a floating pitcher: a pitcher who is
    tracked for the team but does not hold one of the nine batting slots.
    """
    model_config = ConfigDict(frozen=True)

    team_id: str
    player_id: str
    batting_order: Optional[int] = Field(default=None, ge=1, le=9)
    position: str = ""
    is_current_batter: bool = False
    is_current_pitcher: bool = False

    @property
    def is_floating(self) -> bool:
        return self.batting_order is None


class LineupChange(BaseModel):
    """A lineup event detected between two plays."""
    model_config = ConfigDict(frozen=True)

    change_type: ChangeType
    team_id: str
    player_in: Optional[str] = None
    player_out: Optional[str] = None
    batting_order: Optional[int] = Field(default=None, ge=1, le=9)
    position: Optional[int] = Field(default=None, ge=1, le=10)
    description: str = ""


class LineupSnapshot(BaseModel):
    """Full lineup state for both teams as of one play index."""
    model_config = ConfigDict(frozen=True)

    game_id: str
    session_id: str
    play_index: int = Field(ge=0)
    inning: int = Field(ge=1)
    half: Half
    outs: int = Field(ge=0, le=2)
    slots: list[LineupSlot]
    changes: list[LineupChange] = Field(default_factory=list)

    @property
    def team_ids(self) -> list[str]:
        seen: list[str] = []
        for slot in self.slots:
            if slot.team_id not in seen:
                seen.append(slot.team_id)
        return seen

    def team_slots(self, team_id: str) -> list[LineupSlot]:
        return [s for s in self.slots if s.team_id == team_id]

    def batting_order(self, team_id: str) -> list[LineupSlot]:
        """The team's batting slots sorted by batting-order number."""
        slots = [s for s in self.slots if s.team_id == team_id and not s.is_floating]
        return sorted(slots, key=lambda s: s.batting_order)

    def current_batter(self, team_id: str) -> Optional[LineupSlot]:
        for slot in self.batting_order(team_id):
            if slot.is_current_batter:
                return slot
        return None

    def current_pitcher(self, team_id: str) -> Optional[LineupSlot]:
        for slot in self.team_slots(team_id):
            if slot.is_current_pitcher:
                return slot
        return None


class StartingLineup(BaseModel):
    """A team's official starting lineup for one game."""
    team_id: str
    batters: list[str] = Field(description="Player ids in batting order 1-9")
    positions: list[str] = Field(default_factory=list, description="Defensive position per batter")
    pitcher: str = Field(description="Starting pitcher id")

    @field_validator("positions", mode="before")
    @classmethod
    def _normalize_positions(cls, v: Any) -> Any:
        return [normalize_position(p) for p in (v or [])]

    @model_validator(mode="after")
    def _check_shape(self) -> StartingLineup:
        if len(self.batters) != 9 or not all(self.batters):
            raise ValueError(f"starting lineup for {self.team_id} must list 9 batters")
        if len(set(self.batters)) != 9:
            raise ValueError(f"starting lineup for {self.team_id} repeats a batter")
        if self.positions and len(self.positions) != 9:
            raise ValueError(f"starting lineup for {self.team_id} must list 9 positions")
        if not self.pitcher:
            raise ValueError(f"starting lineup for {self.team_id} has no pitcher")
        return self


# ---------------------------------------------------------------------------
# Score
# ---------------------------------------------------------------------------

class ScoreResult(BaseModel):
    """Run totals immediately before and after one play."""
    home_before: int = Field(default=0, ge=0)
    visitor_before: int = Field(default=0, ge=0)
    home_after: int = Field(default=0, ge=0)
    visitor_after: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Substitution preview
# ---------------------------------------------------------------------------

class PlayerChange(BaseModel):
    player_id: str
    player_name: str = ""
    team_id: str
    position: Optional[str] = None


class Substitution(BaseModel):
    kind: SubstitutionType
    player_in: PlayerChange
    player_out: PlayerChange
    description: str


class SubstitutionSummary(BaseModel):
    has_pitching_change: bool = False
    has_pinch_hitter: bool = False
    has_pinch_runner: bool = False
    substitutions: list[Substitution] = Field(default_factory=list)

    @classmethod
    def from_substitutions(cls, substitutions: list[Substitution]) -> SubstitutionSummary:
        kinds = {s.kind for s in substitutions}
        return cls(
            has_pitching_change=SubstitutionType.PITCHING_CHANGE in kinds,
            has_pinch_hitter=SubstitutionType.PINCH_HITTER in kinds,
            has_pinch_runner=SubstitutionType.PINCH_RUNNER in kinds,
            substitutions=list(substitutions),
        )


# ---------------------------------------------------------------------------
# Visible state
# ---------------------------------------------------------------------------

class TeamInfo(BaseModel):
    team_id: str
    display_name: str = ""
    short_name: str = ""


class GameSituation(BaseModel):
    inning: int = Field(ge=1)
    half: Half
    outs: int = Field(ge=0, le=2)
    on_first: str = ""
    on_second: str = ""
    on_third: str = ""
    log: list[str] = Field(default_factory=list)


class TeamState(BaseModel):
    team_id: str
    display_name: str = ""
    short_name: str = ""
    current_batter: Optional[str] = None
    current_pitcher: Optional[str] = None
    next_batter: Optional[str] = None
    next_pitcher: Optional[str] = None
    runs: int = Field(default=0, ge=0)


class VisibleState(BaseModel):
    """The externally consumed game state for one play index."""
    game_id: str
    session_id: str
    current_play: int = Field(ge=0)
    game: GameSituation
    home: TeamState
    visitors: TeamState
    play_description: Optional[str] = None
    event_string: Optional[str] = None
