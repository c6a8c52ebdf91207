"""Dice notation parsing and rolling.

Notation: ``<count>d<sides>`` with an optional signed modifier, e.g. "2d6+3",
"1d20-1", "1d8". The modifier is applied once to the sum, never per die.
At most MAX_DICE dice of at most MAX_SIDES sides are accepted.
Anything else ("d20", "2d", "banana") fails to parse and the caller decides
how to degrade.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field

_DICE_RE = re.compile(r"^(\d+)\s*[dD]\s*(\d+)(?:\s*([+-])\s*(\d+))?$")

MAX_DICE = 100
MAX_SIDES = 1000


@dataclass(frozen=True)
class DiceSpec:
    count: int
    sides: int
    modifier: int = 0

    @property
    def expression(self) -> str:
        """Normalized notation: "1d20+3", "2d6", "1d8-1"."""
        text = f"{self.count}d{self.sides}"
        if self.modifier > 0:
            text += f"+{self.modifier}"
        elif self.modifier < 0:
            text += f"-{-self.modifier}"
        return text


@dataclass
class RollResult:
    expression: str
    rolls: list[int] = field(default_factory=list)
    modifier: int = 0
    total: int = 0
    label: str = ""  # participant name for group rolls

    def to_dict(self) -> dict:
        data = {
            "expression": self.expression,
            "rolls": list(self.rolls),
            "modifier": self.modifier,
            "total": self.total,
        }
        if self.label:
            data["label"] = self.label
        return data


def parse_dice(expression: str) -> DiceSpec | None:
    """Parse dice notation. Returns None when the text is not valid notation."""
    if not expression:
        return None
    match = _DICE_RE.match(expression.strip())
    if not match:
        return None
    count, sides = int(match.group(1)), int(match.group(2))
    if not 1 <= count <= MAX_DICE or not 1 <= sides <= MAX_SIDES:
        return None
    modifier = int(match.group(4)) if match.group(4) else 0
    if match.group(3) == "-":
        modifier = -modifier
    return DiceSpec(count=count, sides=sides, modifier=modifier)


def roll_dice(spec: DiceSpec, rng: random.Random | None = None, label: str = "") -> RollResult:
    """Roll ``spec.count`` dice of ``spec.sides`` sides and apply the modifier once."""
    source = rng or random
    rolls = [source.randint(1, spec.sides) for _ in range(spec.count)]
    return RollResult(
        expression=spec.expression,
        rolls=rolls,
        modifier=spec.modifier,
        total=sum(rolls) + spec.modifier,
        label=label,
    )


def roll(expression: str, rng: random.Random | None = None) -> RollResult | None:
    spec = parse_dice(expression)
    if spec is None:
        return None
    return roll_dice(spec, rng)
