"""Per-step LLM context assembly.

Order: full history, rules excerpt (if any topic matched), character stats
block, then reminders (combat, companions, coordinates). Everything after the
history is transient — it is sent to the model but never written to history.
"""

from dungeon_master.i18n import t
from dungeon_master.models import ChatMessage, Session
from dungeon_master.prompts import render_stats_block
from dungeon_master.rules import Rulebook

RULES_WINDOW = 3     # player/narrator messages scanned for rule topics
COMBAT_WINDOW = 6    # player/narrator messages scanned for combat keywords


def _system(content: str) -> dict:
    return {"role": "system", "content": content}


def recent_texts(history: list[ChatMessage], window: int) -> list[str]:
    """Contents of the last `window` player/narrator messages (system ones skipped)."""
    spoken = [m.content for m in history if m.role != "system"]
    return spoken[-window:]


def combat_active(history: list[ChatMessage], rulebook: Rulebook) -> bool:
    return rulebook.combat_active(recent_texts(history, COMBAT_WINDOW))


def build_context(
    session: Session,
    history: list[ChatMessage],
    rulebook: Rulebook,
) -> list[dict]:
    """Build the message list for one model call.

    `history` is the working history for this step (the session's history
    plus the pending player action, if any).
    """
    lang = session.language
    messages = [m.model_dump() for m in history]

    excerpt = rulebook.excerpt(recent_texts(history, RULES_WINDOW))
    if excerpt:
        messages.append(_system(excerpt))

    messages.append(_system(render_stats_block(session)))

    if combat_active(history, rulebook):
        messages.append(_system(t("reminder.combat", lang)))
    if session.companions:
        names = ", ".join(c.name for c in session.companions)
        messages.append(_system(t("reminder.companions", lang, names=names)))
    messages.append(_system(t("reminder.coordinates", lang)))
    return messages
