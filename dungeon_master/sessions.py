"""In-memory session repository.

One store per process, created by the app factory and handed to the routes
through a FastAPI dependency. Sessions never share mutable state: create()
and restore() both build fresh pydantic objects, and serialize() returns a
plain dict copy.

Each session id also gets an asyncio.Lock; routes hold it for a whole request
so that only one mutation per session is in flight at a time.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from dungeon_master.i18n import t
from dungeon_master.models import Character, MapNode, Position, Session

logger = logging.getLogger(__name__)

HIT_DIE = {
    "barbarian": 12,
    "fighter": 10, "paladin": 10, "ranger": 10,
    "bard": 8, "cleric": 8, "druid": 8, "monk": 8, "rogue": 8, "warlock": 8,
    "sorcerer": 6, "wizard": 6,
}
DEFAULT_HIT_DIE = 8

# (base mana, casting ability); classes not listed have no mana.
MANA = {
    "wizard": (10, "int"),
    "sorcerer": (10, "cha"),
    "warlock": (8, "cha"),
    "cleric": (8, "wis"),
    "druid": (8, "wis"),
    "bard": (8, "cha"),
    "paladin": (4, "cha"),
    "ranger": (4, "wis"),
}


class SessionNotFound(KeyError):
    """Raised when no session exists for the requested id."""


def init_character(character: Character) -> Character:
    """Fill in derived defaults: level, max/current HP and MP, AC."""
    char = character.model_copy(deep=True)
    cls = char.char_class.strip().lower()
    if not char.level or char.level < 1:
        char.level = 1
    if char.max_hp is None:
        char.max_hp = max(1, HIT_DIE.get(cls, DEFAULT_HIT_DIE) + char.modifier("con"))
    if char.max_mp is None:
        base, ability = MANA.get(cls, (0, "int"))
        char.max_mp = max(0, base + char.modifier(ability)) if base else 0
    if char.hp is None:
        char.hp = char.max_hp
    if char.mp is None:
        char.mp = char.max_mp
    if char.ac is None:
        char.ac = 10 + char.modifier("dex")
    return char


class SessionStore:
    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._last_id = 0

    def _new_id(self) -> str:
        # Milliseconds from the monotonic clock, bumped if two sessions land in the same ms.
        candidate = time.monotonic_ns() // 1_000_000
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def create(self, character: Character, model: str, language: str = "en") -> Session:
        session_id = self._new_id()
        session = Session(
            id=session_id,
            character=init_character(character),
            model=model,
            language=language if language in ("en", "fr") else "en",
            current_position=Position(x=0, y=0),
        )
        session.add_map_node(MapNode(
            name=t("map.start", session.language),
            type="start",
            x=0,
            y=0,
            status="visited",
        ))
        self._sessions[session_id] = session
        logger.info("session %s created for %s (model=%s)", session_id, session.character.name, model)
        return session

    def get(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def list_ids(self) -> list[str]:
        return list(self._sessions)

    def delete(self, session_id: str) -> bool:
        self._locks.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def switch_model(self, session_id: str, model: str) -> Session:
        session = self.get(session_id)
        session.model = model
        logger.info("session %s switched to model %s", session_id, model)
        return session

    def serialize(self, session_id: str) -> dict[str, Any]:
        return self.get(session_id).model_dump(by_alias=True, mode="json")

    def restore(self, record: dict[str, Any]) -> Session:
        """Validate a saved record and key it under its own id, replacing any live copy."""
        session = Session.model_validate(record)
        self._sessions[session.id] = session
        if session.id.isdigit():
            self._last_id = max(self._last_id, int(session.id))
        logger.info("session %s restored", session.id)
        return session

    def lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock
