"""Best-effort stat extraction from narrative text.

Secondary path only: used when a step carried no UPDATE_STATS directive but
the model wrote something like "HP: 12/20" or "PV : 7" in prose. Values are
absolute, not deltas.

Acceptance rules:
  "label: value/max"  applied only when max equals the character's known max
  "label: value"      applied when 0 <= value <= max, else clamped to max
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from dungeon_master.models import Character

_LABELS = {
    "hp": r"HP|PV|Hit Points|Points de vie",
    "mp": r"MP|PM|Mana|Points de magie",
    "ac": r"AC|CA|Armor Class|Classe d'armure",
}


def _pattern(labels: str) -> re.Pattern:
    return re.compile(
        rf"(?<![\w])(?:{labels})\s*:\s*(-?\d+)(?:\s*/\s*(\d+))?",
        re.IGNORECASE,
    )


_PATTERNS = {stat: _pattern(labels) for stat, labels in _LABELS.items()}


@dataclass(frozen=True)
class ExtractedStats:
    hp: int | None = None
    mp: int | None = None
    ac: int | None = None

    def is_empty(self) -> bool:
        return self.hp is None and self.mp is None and self.ac is None


class StatExtractor(Protocol):
    def extract(self, text: str, character: Character) -> ExtractedStats: ...


def _pool_value(match: re.Match | None, known_max: int | None) -> int | None:
    if match is None or known_max is None:
        return None
    value = int(match.group(1))
    stated_max = match.group(2)
    if stated_max is not None:
        if int(stated_max) != known_max:
            return None
        return max(0, min(value, known_max))
    if value < 0:
        return None
    return min(value, known_max)


class RegexStatExtractor:
    """Reads the last "label: value[/max]" mention of each stat."""

    def extract(self, text: str, character: Character) -> ExtractedStats:
        def last(stat: str) -> re.Match | None:
            matches = list(_PATTERNS[stat].finditer(text))
            return matches[-1] if matches else None

        ac_match = last("ac")
        ac = int(ac_match.group(1)) if ac_match and int(ac_match.group(1)) > 0 else None
        return ExtractedStats(
            hp=_pool_value(last("hp"), character.max_hp),
            mp=_pool_value(last("mp"), character.max_mp),
            ac=ac,
        )
