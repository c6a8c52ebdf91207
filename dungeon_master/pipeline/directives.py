"""Control directive parsing for game-master output.

Directive grammar (must match the system prompt exactly):

  [[ROLL: 1d20+3]]
  [[ROLL_GROUP: Arin=1d20+2, Goblin=1d20+1]]
  [[UPDATE_STATS: {"hp": -5, "mp": 0, "ac": 15}]]   hp/mp are deltas, ac absolute
  [[coordinates[x: 3, y: -2]]]                       keyword case-insensitive
  [[ADD_COMPANION: {"name": "Kaelen", "class": "Ranger", "description": "..."}]]
  [[REMOVE_COMPANION: "Kaelen"]]

Only the earliest ROLL / ROLL_GROUP is acted upon; it is located separately
from the other kinds because it also drives truncation. Malformed JSON bodies
are logged and ignored.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

_ROLL_RE = re.compile(r"\[\[\s*(ROLL_GROUP|ROLL)\s*:\s*(.*?)\s*\]\]")
_STATS_RE = re.compile(r"\[\[\s*UPDATE_STATS\s*:\s*(\{.*?\})\s*\]\]", re.DOTALL)
_COORDS_RE = re.compile(
    r"\[\[\s*coordinates\s*\[\s*x\s*:\s*(-?\d+)\s*,\s*y\s*:\s*(-?\d+)\s*\]\s*\]\]",
    re.IGNORECASE,
)
_ADD_COMPANION_RE = re.compile(r"\[\[\s*ADD_COMPANION\s*:\s*(\{.*?\})\s*\]\]", re.DOTALL)
_REMOVE_COMPANION_RE = re.compile(r"\[\[\s*REMOVE_COMPANION\s*:\s*\"?([^\"\]]+?)\"?\s*\]\]")

_ANY_DIRECTIVE_RE = re.compile(r"\[\[.*?\]\]", re.DOTALL)
_UNCLOSED_DIRECTIVE_RE = re.compile(r"\[\[[^\]]*$")


# ---------------------------------------------------------------------------
# Directive types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Roll:
    expression: str


@dataclass(frozen=True)
class RollGroup:
    entries: list[tuple[str, str]]  # (participant, expression)


@dataclass(frozen=True)
class UpdateStats:
    hp: int | None = None
    mp: int | None = None
    ac: int | None = None


@dataclass(frozen=True)
class Coordinates:
    x: int
    y: int


@dataclass(frozen=True)
class AddCompanion:
    record: dict


@dataclass(frozen=True)
class RemoveCompanion:
    name: str


@dataclass(frozen=True)
class RollMatch:
    directive: Roll | RollGroup
    start: int
    end: int  # index just past the closing "]]"


@dataclass
class ParsedDirectives:
    roll: RollMatch | None = None
    coordinates: Coordinates | None = None
    stats: UpdateStats | None = None
    add_companions: list[AddCompanion] = field(default_factory=list)
    remove_companions: list[RemoveCompanion] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _parse_group(body: str) -> RollGroup:
    entries: list[tuple[str, str]] = []
    for part in body.split(","):
        name, sep, expression = part.partition("=")
        if not sep or not name.strip() or not expression.strip():
            continue
        entries.append((name.strip(), expression.strip()))
    return RollGroup(entries=entries)


def find_first_roll(text: str) -> RollMatch | None:
    """Locate the earliest ROLL or ROLL_GROUP directive."""
    match = _ROLL_RE.search(text)
    if not match:
        return None
    kind, body = match.group(1), match.group(2)
    directive = _parse_group(body) if kind == "ROLL_GROUP" else Roll(expression=body)
    return RollMatch(directive=directive, start=match.start(), end=match.end())


def find_coordinates(text: str) -> Coordinates | None:
    match = _COORDS_RE.search(text)
    if not match:
        return None
    return Coordinates(x=int(match.group(1)), y=int(match.group(2)))


def _as_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _load_object(body: str, kind: str) -> dict | None:
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring %s directive with invalid JSON: %s", kind, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s directive: expected a JSON object", kind)
        return None
    return data


def find_stats(text: str) -> UpdateStats | None:
    """Merge every UPDATE_STATS tag: hp/mp deltas add up, the last ac wins."""
    hp = mp = ac = None
    found = False
    for match in _STATS_RE.finditer(text):
        data = _load_object(match.group(1), "UPDATE_STATS")
        if data is None:
            continue
        found = True
        delta_hp = _as_int(data.get("hp"))
        delta_mp = _as_int(data.get("mp"))
        new_ac = _as_int(data.get("ac"))
        if delta_hp is not None:
            hp = (hp or 0) + delta_hp
        if delta_mp is not None:
            mp = (mp or 0) + delta_mp
        if new_ac is not None:
            ac = new_ac
    if not found:
        return None
    return UpdateStats(hp=hp, mp=mp, ac=ac)


def find_companion_changes(text: str) -> tuple[list[AddCompanion], list[RemoveCompanion]]:
    adds: list[AddCompanion] = []
    for match in _ADD_COMPANION_RE.finditer(text):
        data = _load_object(match.group(1), "ADD_COMPANION")
        if data is None:
            continue
        if not str(data.get("name", "")).strip():
            logger.warning("Ignoring ADD_COMPANION directive without a name")
            continue
        adds.append(AddCompanion(record=data))
    removes = [
        RemoveCompanion(name=m.group(1).strip())
        for m in _REMOVE_COMPANION_RE.finditer(text)
    ]
    return adds, removes


def parse_directives(text: str) -> ParsedDirectives:
    """Extract every directive kind from already-sanitized text."""
    adds, removes = find_companion_changes(text)
    return ParsedDirectives(
        roll=find_first_roll(text),
        coordinates=find_coordinates(text),
        stats=find_stats(text),
        add_companions=adds,
        remove_companions=removes,
    )


def strip_directives(text: str) -> str:
    """Remove all [[...]] markup, known or not, for storage in history."""
    cleaned = _COORDS_RE.sub("", text)
    cleaned = _ANY_DIRECTIVE_RE.sub("", cleaned)
    cleaned = _UNCLOSED_DIRECTIVE_RE.sub("", cleaned)
    cleaned = re.sub(r"[ \t]{2,}", " ", cleaned)
    cleaned = re.sub(r"[ \t]+\n", "\n", cleaned)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()
