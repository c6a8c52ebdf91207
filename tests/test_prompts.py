"""Tests for dungeon_master.prompts — system prompt and stats block text."""

from dungeon_master.models import Spell
from dungeon_master.prompts import render_stats_block, render_system_prompt


def test_system_prompt_describes_character_and_protocol(session) -> None:
    prompt = render_system_prompt(session)
    assert "Name: Arin" in prompt
    assert "Class: Fighter, Level: 1" in prompt
    assert "STR: 10, DEX: 10" in prompt
    assert "HP: 10/10, MP: 0/0, AC: 10" in prompt
    assert "[[UPDATE_STATS:" in prompt
    assert "[[coordinates[x: 0, y: 0]]]" in prompt
    assert "Write all narration in English." in prompt
    assert "Spells:" not in prompt


def test_system_prompt_lists_spells(session) -> None:
    session.character.spells.append(Spell(name="Firebolt", cost="2 MP", effect="1d10 fire", hit="+5"))
    prompt = render_system_prompt(session)
    assert "- Firebolt (cost: 2 MP; effect: 1d10 fire; hit/DC: +5)" in prompt


def test_system_prompt_french_language_line(session) -> None:
    session.language = "fr"
    assert "Rédigez toute la narration en français." in render_system_prompt(session)


def test_stats_block_tracks_current_values(session) -> None:
    session.character.hp = 4
    session.character.stats["dex"] = 15
    session.character.stats["str"] = 8
    block = render_stats_block(session)
    assert block.startswith("Character status")
    assert "HP: 4/10 | MP: 0/0 | AC: 10" in block
    assert "STR 8 (-1)" in block
    assert "DEX 15 (+2)" in block
