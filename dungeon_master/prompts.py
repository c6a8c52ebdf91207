"""Prompt text for the game master.

  system prompt — written once at session start as the first history entry;
                  describes the role, the directive protocol and the sheet.
  stats block   — rebuilt every step from authoritative state and injected
                  into the transient context only.
"""

from dungeon_master.i18n import t
from dungeon_master.models import ABILITIES, Character, Session

PROTOCOL = """**DICE ROLLING**
Never ask the player to roll dice. You decide when a roll is needed (combat, ability checks, saving throws).
To roll, output [[ROLL: XdY+Z]] (for example [[ROLL: 1d20+3]] or [[ROLL: 2d6]]) and STOP your reply immediately.
For initiative or simultaneous rolls use [[ROLL_GROUP: name=1d20+2, name=1d20+1]].
The system rolls and gives you the result in the next message. Never guess or narrate a result yourself.

**STATE DIRECTIVES**
- HP/MP changes and armor class: [[UPDATE_STATS: {"hp": -5, "mp": -2, "ac": 15}]] (hp and mp are changes, ac is the new value).
- Map position, at the end of EVERY reply: [[coordinates[x: 0, y: 0]]] (x grows east, y grows north).
- A companion joins: [[ADD_COMPANION: {"name": "Name", "class": "Class", "description": "Short description"}]]
- A companion leaves: [[REMOVE_COMPANION: "Name"]]

**General Rules:**
1. Describe outcomes based on 5th Edition rules.
2. Keep descriptions vivid but concise.
3. Do not act for the player.
4. Never write lines for the player, the system or yourself as a speaker label."""


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def _abilities_line(char: Character, with_modifiers: bool) -> str:
    parts = []
    for ability in ABILITIES:
        score = char.stats.get(ability, 10)
        if with_modifiers:
            parts.append(f"{ability.upper()} {score} ({_signed(char.modifier(ability))})")
        else:
            parts.append(f"{ability.upper()}: {score}")
    return ", ".join(parts)


def render_system_prompt(session: Session) -> str:
    char = session.character
    lines = [
        "You are the Dungeon Master (DM) for a Dungeons and Dragons game.",
        "You describe the world, non-player characters (NPCs) and events. "
        "The player tells you their actions.",
        t("intro.language", session.language),
        "",
        PROTOCOL,
        "",
        "Current Player Character:",
        f"Name: {char.name}, Gender: {char.gender or '-'}, Race: {char.race}, "
        f"Class: {char.char_class}, Level: {char.level}.",
        f"Stats: {_abilities_line(char, with_modifiers=False)}.",
        f"HP: {char.hp}/{char.max_hp}, MP: {char.mp}/{char.max_mp}, AC: {char.ac}.",
    ]
    if char.spells:
        lines.append("Spells:")
        lines.extend(
            f"- {s.name} (cost: {s.cost or '-'}; effect: {s.effect or '-'}; hit/DC: {s.hit or '-'})"
            for s in char.spells
        )
    return "\n".join(lines)


def render_stats_block(session: Session) -> str:
    char = session.character
    return (
        f"{t('stats.header', session.language)}\n"
        f"{char.name} — level {char.level} {char.char_class}\n"
        f"HP: {char.hp}/{char.max_hp} | MP: {char.mp}/{char.max_mp} | AC: {char.ac}\n"
        f"{_abilities_line(char, with_modifiers=True)}"
    )
