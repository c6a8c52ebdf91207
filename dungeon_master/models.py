"""Core domain models.

Sessions, characters, map nodes and companions are pydantic models so that
the in-memory store, the save files and the HTTP layer all validate and
serialise through the same types. Always dump with ``by_alias=True`` — the
wire format uses ``class`` for the character/companion class.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]

ABILITIES = ("str", "dex", "con", "int", "wis", "cha")


def default_stats() -> dict[str, int]:
    return {ability: 10 for ability in ABILITIES}


def ability_modifier(score: int) -> int:
    """floor((score - 10) / 2), e.g. 10 → 0, 15 → 2, 8 → -1."""
    return (score - 10) // 2


class ChatMessage(BaseModel):
    """One entry in a session's append-only history."""

    role: Role
    content: str


class Spell(BaseModel):
    name: str
    cost: str = ""
    effect: str = ""
    hit: str = ""  # to-hit bonus or save DC descriptor


class Character(BaseModel):
    """The player character. HP/MP/AC change only through directives."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    gender: str = ""
    race: str = "Human"
    char_class: str = Field("Fighter", alias="class")
    level: int = 1
    stats: dict[str, int] = Field(default_factory=default_stats)
    hp: int | None = None
    max_hp: int | None = Field(None, alias="maxHp")
    mp: int | None = None
    max_mp: int | None = Field(None, alias="maxMp")
    ac: int | None = None
    spells: list[Spell] = Field(default_factory=list)

    def modifier(self, ability: str) -> int:
        return ability_modifier(self.stats.get(ability, 10))


class MapNode(BaseModel):
    """A discovered location. Unique per (x, y)."""

    name: str
    type: str = "area"
    x: int
    y: int
    status: str = "visited"  # "visited" | "poi" | free-form
    description: str = ""


class Position(BaseModel):
    x: int = 0
    y: int = 0


class Companion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    char_class: str = Field("", alias="class")
    description: str = ""


class Session(BaseModel):
    """The full mutable state of one player's ongoing game."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    character: Character
    model: str
    language: Literal["en", "fr"] = "en"
    history: list[ChatMessage] = Field(default_factory=list)
    map_data: list[MapNode] = Field(default_factory=list, alias="mapData")
    current_position: Position = Field(default_factory=Position, alias="currentPosition")
    companions: list[Companion] = Field(default_factory=list)
    last_saved: str | None = Field(None, alias="lastSaved")
    pending_steps: int = Field(0, alias="pendingSteps")  # automatic continuations since last action

    # ------------------------------------------------------------------
    # Map
    # ------------------------------------------------------------------

    def node_at(self, x: int, y: int) -> MapNode | None:
        for node in self.map_data:
            if node.x == x and node.y == y:
                return node
        return None

    def add_map_node(self, node: MapNode) -> bool:
        """Append node unless its coordinate is taken. Returns True if added."""
        if self.node_at(node.x, node.y) is not None:
            return False
        self.map_data.append(node)
        return True

    # ------------------------------------------------------------------
    # Companions
    # ------------------------------------------------------------------

    def add_companion(self, companion: Companion) -> bool:
        wanted = companion.name.strip().lower()
        if any(c.name.strip().lower() == wanted for c in self.companions):
            return False
        self.companions.append(companion)
        return True

    def remove_companion(self, name: str) -> bool:
        wanted = name.strip().lower()
        kept = [c for c in self.companions if c.name.strip().lower() != wanted]
        removed = len(kept) != len(self.companions)
        self.companions = kept
        return removed
