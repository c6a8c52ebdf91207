"""Tests for pipeline.context — transient context assembly."""

from dungeon_master.models import ChatMessage, Companion
from dungeon_master.pipeline.context import build_context, combat_active, recent_texts


def _msg(role: str, content: str) -> ChatMessage:
    return ChatMessage(role=role, content=content)


def test_recent_texts_skips_system_messages() -> None:
    history = [
        _msg("system", "Fight fight fight"),
        _msg("assistant", "one"),
        _msg("user", "two"),
        _msg("system", "Roll result"),
        _msg("assistant", "three"),
    ]
    assert recent_texts(history, 2) == ["two", "three"]


def test_combat_active_ignores_old_messages(rulebook) -> None:
    history = [_msg("user", "I attack the goblin")] + [
        _msg("assistant", "The road is calm.") for _ in range(6)
    ]
    assert not combat_active(history, rulebook)
    assert combat_active(history + [_msg("user", "Ambush!")], rulebook)


def test_build_context_order(session, rulebook) -> None:
    working = session.history + [_msg("user", "I look for a spell book")]
    messages = build_context(session, working, rulebook)

    assert messages[: len(working)] == [m.model_dump() for m in working]
    extra = [m["content"] for m in messages[len(working):]]
    assert extra[0].startswith("Spellcasting:")
    assert extra[1].startswith("Character status")
    assert "Arin" in extra[1]
    assert extra[-1].startswith("Reminder: end your reply")
    assert all(m["role"] == "system" for m in messages[len(working):])


def test_build_context_does_not_touch_history(session, rulebook) -> None:
    before = list(session.history)
    build_context(session, session.history, rulebook)
    assert session.history == before


def test_build_context_combat_and_companions(session, rulebook) -> None:
    session.companions.append(Companion(name="Kaelen", char_class="Ranger"))
    working = session.history + [_msg("user", "I draw my sword")]
    extra = [m["content"] for m in build_context(session, working, rulebook)[len(working):]]
    assert any(c.startswith("Reminder: combat is ongoing") for c in extra)
    assert any("Kaelen" in c for c in extra)


def test_build_context_no_rules_or_combat_when_quiet(session, rulebook) -> None:
    working = session.history + [_msg("user", "I admire the view")]
    extra = [m["content"] for m in build_context(session, working, rulebook)[len(working):]]
    assert len(extra) == 2
    assert extra[0].startswith("Character status")


def test_build_context_french(session, rulebook) -> None:
    session.language = "fr"
    extra = build_context(session, session.history, rulebook)[len(session.history):]
    assert extra[-1]["content"].startswith("Rappel :")
