"""Apply parsed directives to session state.

All functions mutate the session (or character) in place and log what
changed. HP and MP are clamped to [0, max]; AC is overwritten as-is.
"""

from __future__ import annotations

import logging
import random

from dungeon_master import dice
from dungeon_master.dice import RollResult
from dungeon_master.i18n import t
from dungeon_master.models import Character, Companion, MapNode, Session

from .directives import (
    AddCompanion,
    Coordinates,
    RemoveCompanion,
    Roll,
    RollGroup,
    UpdateStats,
)
from .fallback import ExtractedStats

logger = logging.getLogger(__name__)

_NODE_DESCRIPTION_LIMIT = 200


def _clamp(value: int, upper: int | None) -> int:
    value = max(0, value)
    return value if upper is None else min(value, upper)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

def apply_stats(character: Character, update: UpdateStats) -> None:
    """hp/mp are deltas clamped to [0, max]; ac replaces the current value."""
    if update.hp is not None:
        character.hp = _clamp((character.hp or 0) + update.hp, character.max_hp)
    if update.mp is not None:
        character.mp = _clamp((character.mp or 0) + update.mp, character.max_mp)
    if update.ac is not None:
        character.ac = update.ac
    logger.info(
        "stats updated for %s: hp=%s/%s mp=%s/%s ac=%s",
        character.name, character.hp, character.max_hp,
        character.mp, character.max_mp, character.ac,
    )


def apply_extracted_stats(character: Character, extracted: ExtractedStats) -> None:
    """Absolute values from the fallback extractor, already range-checked."""
    if extracted.is_empty():
        return
    if extracted.hp is not None:
        character.hp = extracted.hp
    if extracted.mp is not None:
        character.mp = extracted.mp
    if extracted.ac is not None:
        character.ac = extracted.ac
    logger.info("stats read from narrative for %s: %s", character.name, extracted)


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------

def apply_coordinates(session: Session, coords: Coordinates, narrative: str = "") -> bool:
    """Move the party and record the location. Returns True if a node was added."""
    session.current_position.x = coords.x
    session.current_position.y = coords.y
    description = narrative.strip()
    if len(description) > _NODE_DESCRIPTION_LIMIT:
        description = description[:_NODE_DESCRIPTION_LIMIT].rstrip() + "…"
    added = session.add_map_node(MapNode(
        name=t("map.discovered", session.language),
        type="area",
        x=coords.x,
        y=coords.y,
        status="visited",
        description=description,
    ))
    logger.debug("position (%d, %d), new node=%s", coords.x, coords.y, added)
    return added


# ---------------------------------------------------------------------------
# Companions
# ---------------------------------------------------------------------------

def apply_companions(
    session: Session,
    adds: list[AddCompanion],
    removes: list[RemoveCompanion],
) -> None:
    for add in adds:
        record = add.record
        companion = Companion(
            name=str(record.get("name", "")).strip(),
            char_class=str(record.get("class", "")),
            description=str(record.get("description", "")),
        )
        if session.add_companion(companion):
            logger.info("companion joined: %s", companion.name)
    for remove in removes:
        if session.remove_companion(remove.name):
            logger.info("companion left: %s", remove.name)


# ---------------------------------------------------------------------------
# Rolls
# ---------------------------------------------------------------------------

def execute_roll(
    directive: Roll | RollGroup, rng: random.Random | None = None
) -> list[RollResult] | None:
    """Roll a directive. Returns None if nothing in it could be parsed.

    Group results are sorted by total, highest first (initiative order).
    Unparseable entries of a group are skipped.
    """
    if isinstance(directive, Roll):
        spec = dice.parse_dice(directive.expression)
        if spec is None:
            logger.warning("Unparseable roll expression %r", directive.expression)
            return None
        return [dice.roll_dice(spec, rng)]

    results: list[RollResult] = []
    for label, expression in directive.entries:
        spec = dice.parse_dice(expression)
        if spec is None:
            logger.warning("Skipping group roll %s=%r", label, expression)
            continue
        results.append(dice.roll_dice(spec, rng, label=label))
    if not results:
        return None
    results.sort(key=lambda r: r.total, reverse=True)
    return results


def roll_summary(results: list[RollResult], lang: str, group: bool) -> str:
    """Localized system message reporting roll results to the model."""
    def dice_text(r: RollResult) -> str:
        return ", ".join(str(v) for v in r.rolls)

    if not group:
        r = results[0]
        return t("roll.single", lang, expression=r.expression, total=r.total, dice=dice_text(r))
    lines = [t("roll.group_header", lang)]
    lines.extend(
        t("roll.group_line", lang, label=r.label, expression=r.expression,
          total=r.total, dice=dice_text(r))
        for r in results
    )
    lines.append(t("roll.group_footer", lang))
    return "\n".join(lines)
