# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Translate Retrosheet event codes into short play descriptions.

    >>> translate_event("S7/L7")
    'Single to left field'
    >>> translate_event("43/G4")
    'Groundout to second baseman, throw to first baseman'

Event format reference: https://www.retrosheet.org/eventfile.htm

Only the batter's primary outcome is described; runner advances after the
``.`` are parsed but not narrated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

FIELDER_NAMES: dict[int, str] = {
    1: "pitcher",
    2: "catcher",
    3: "first baseman",
    4: "second baseman",
    5: "third baseman",
    6: "shortstop",
    7: "left fielder",
    8: "center fielder",
    9: "right fielder",
}

EVENT_LABELS: dict[str, str] = {
    "S": "Single",
    "D": "Double",
    "T": "Triple",
    "HR": "Home run",
    "DGR": "Ground rule double",
    "K": "Struck out",
    "G": "Groundout",
    "F": "Flyout",
    "L": "Lineout",
    "P": "Popup",
    "W": "Walk",
    "IW": "Intentional walk",
    "HP": "Hit by pitch",
    "E": "Error by",
    "FC": "Reached on a fielder's choice",
    "SH": "Sacrifice bunt",
    "SF": "Sacrifice fly",
    "WP": "Wild pitch",
    "PB": "Passed ball",
    "BK": "Balk",
    "NP": "No play",
    "DI": "Defensive indifference",
    "OA": "Runner advanced",
}

HITS = frozenset({"S", "D", "T", "HR", "DGR"})
OUTFIELD_DIRECTIONS = {7: "left", 8: "center", 9: "right"}
BASE_NAMES = {"1": "first base", "2": "second base", "3": "third base", "H": "home"}

_ADVANCE_RE = re.compile(r"^([B123])-([123H])(?:\(([0-9E]+)\))?")


@dataclass
class ParsedEvent:
    """Components of one event code."""
    raw: str
    kind: str = ""
    fielders: list[int] = field(default_factory=list)
    zone: str = ""
    direction: str = ""
    trajectory: str = ""
    is_out: bool = False
    outs_recorded: int = 0
    is_error: bool = False
    base: str = ""
    advances: list[tuple[str, str, bool]] = field(default_factory=list)
    rbi: int = 0

    @property
    def fielder_only(self) -> bool:
        """True for plays written as bare fielder digits, e.g. ``8`` or ``643``."""
        return self.raw.split("/")[0].split(".")[0].isdigit()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _digits(text: str) -> list[int]:
    return [int(c) for c in text if c.isdigit() and c != "0"]


def _locate(event: ParsedEvent, code: str) -> None:
    if code.startswith("78"):
        event.zone, event.direction = "outfield", "left-center"
        return
    if code.startswith("89"):
        event.zone, event.direction = "outfield", "right-center"
        return
    if code.startswith("56"):
        event.zone, event.direction = "infield", "left side"
        return
    if code[:1].isdigit():
        position = int(code[0])
        if position in OUTFIELD_DIRECTIONS:
            event.zone, event.direction = "outfield", OUTFIELD_DIRECTIONS[position]
        elif position:
            event.zone = "infield"
        if position and position not in event.fielders:
            event.fielders.append(position)


def _parse_primary(event: ParsedEvent, primary: str) -> None:
    for prefix in ("SB", "CS", "POCS", "PO"):
        if primary.startswith(prefix) and primary[len(prefix):len(prefix) + 1] in "123H":
            event.kind = prefix
            event.base = primary[len(prefix):len(prefix) + 1]
            event.is_out = prefix != "SB"
            return

    for prefix in ("SH", "SF"):
        if primary.startswith(prefix):
            event.kind = prefix
            event.is_out, event.outs_recorded = True, 1
            event.fielders = _digits(primary[2:])
            return

    if primary in ("DI", "OA"):
        event.kind = primary
        return

    for prefix in ("DGR", "HR", "S", "D", "T"):
        if primary.startswith(prefix):
            event.kind = prefix
            rest = primary[len(prefix):]
            if rest:
                _locate(event, rest)
            return

    if primary.startswith("K"):
        event.kind, event.is_out, event.outs_recorded = "K", True, 1
    elif primary in ("W", "IW", "HP", "WP", "PB", "BK", "NP"):
        event.kind = primary
    elif primary.startswith("I") and primary[1:2] in ("", "W"):
        event.kind = "IW"
    elif re.match(r"^E\d", primary):
        event.kind, event.is_error = "E", True
        event.fielders = [int(primary[1])]
    elif primary.startswith("FC"):
        event.kind = "FC"
        event.fielders = _digits(primary[2:3])
    elif re.match(r"^[GFLP]\d+$", primary):
        event.kind = primary[0]
        event.fielders = _digits(primary[1:])
        event.is_out = True
        event.outs_recorded = 2 if primary[0] == "G" and len(event.fielders) >= 2 else 1
    else:
        fielders = _digits(re.sub(r"\(.*?\)", "", primary))
        if fielders and re.match(r"^[1-9(]", primary):
            event.fielders = fielders
            event.is_out = True
            if len(fielders) == 1:
                event.kind = "F" if fielders[0] in OUTFIELD_DIRECTIONS else "G"
                event.outs_recorded = 1
            else:
                event.kind = "G"
                event.outs_recorded = {2: 1, 3: 2}.get(len(fielders), 3)


_TRAJECTORIES = {"F": "fly ball", "L": "line drive", "G": "ground ball", "P": "popup"}


def _parse_modifiers(event: ParsedEvent, modifiers: list[str]) -> None:
    single_fielder = event.fielder_only and len(event.fielders) == 1
    for modifier in modifiers:
        if not modifier:
            continue
        head = modifier[0]
        if head in _TRAJECTORIES and (len(modifier) == 1 or modifier[1].isdigit()):
            event.trajectory = _TRAJECTORIES[head]
            _locate(event, modifier[1:])
            if single_fielder:
                event.kind = head
                event.is_out, event.outs_recorded = True, 1
        elif modifier in ("GDP", "LDP", "FDP"):
            event.outs_recorded = 2
        elif modifier in ("GTP", "LTP"):
            event.outs_recorded = 3


def parse_event(event_string: str | None) -> ParsedEvent:
    """Split an event code into its primary outcome, modifiers and advances."""
    event = ParsedEvent(raw=(event_string or "").strip())
    if not event.raw:
        return event

    main, _, advances = event.raw.partition(".")
    primary, *modifiers = main.split("/")
    primary = primary.strip()

    rbi = re.search(r"\+(\d+)", primary)
    if rbi:
        event.rbi = int(rbi.group(1))
        primary = primary[:rbi.start()]

    _parse_primary(event, primary)
    _parse_modifiers(event, [m.strip() for m in modifiers])

    for part in advances.split(";"):
        match = _ADVANCE_RE.match(part.strip())
        if match:
            thrown_out = bool(match.group(3)) and "E" not in match.group(3)
            event.advances.append((match.group(1), match.group(2), thrown_out))
    return event


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------

def _fielder(position: int) -> str:
    return FIELDER_NAMES.get(position, "fielder")


def _headline(event: ParsedEvent) -> str:
    if event.kind in ("SB", "CS", "POCS"):
        label = {"SB": "Stole", "CS": "Caught stealing", "POCS": "Picked off and caught stealing"}
        return f"{label[event.kind]} {BASE_NAMES.get(event.base, 'base')}"
    if event.kind == "PO":
        return f"Picked off {BASE_NAMES.get(event.base, 'base')}"

    if event.is_out and event.kind not in ("K", "SH", "SF") and event.outs_recorded >= 2:
        chain = "-".join(str(p) for p in event.fielders)
        play = "triple play" if event.outs_recorded >= 3 else "double play"
        return f"Grounded into a {chain} {play}" if chain else f"Hit into a {play}"

    if event.kind == "G" and event.fielder_only and len(event.fielders) >= 2:
        return (f"Groundout to {_fielder(event.fielders[0])}, "
                f"throw to {_fielder(event.fielders[-1])}")

    return EVENT_LABELS.get(event.kind, "")


def _where(event: ParsedEvent) -> str:
    if event.kind in HITS:
        if event.zone == "outfield" and event.direction:
            return f"to {event.direction} field"
        if event.zone == "infield" and event.direction == "left side":
            return "to the left side of the infield"
        if event.fielders:
            return f"to {_fielder(event.fielders[0])}"
        return ""

    if event.is_error and event.fielders:
        return _fielder(event.fielders[0])
    if event.kind == "FC" and event.fielders:
        return "to " + ", ".join(_fielder(p) for p in event.fielders)
    if event.is_out and event.outs_recorded < 2 and event.fielders:
        if event.fielder_only and len(event.fielders) >= 2:
            return ""
        if event.kind not in ("K", "CS", "PO", "POCS"):
            return f"to {_fielder(event.fielders[0])}"
    return ""


def translate_event(event_string: str | None) -> str:
    """Describe an event code in plain words.

    Returns an empty string for a missing or blank code and
    the raw code itself for a code that cannot be parsed.
    """
    event = parse_event(event_string)
    if not event.raw:
        return ""
    text = _headline(event)
    if not text:
        return event.raw
    where = _where(event)
    if where:
        text = f"{text} {where}"
    if event.rbi:
        text += f", {event.rbi} RBI"
    return text
