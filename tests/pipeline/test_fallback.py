"""Tests for pipeline.fallback — stat extraction from prose."""

import pytest

from dungeon_master.models import Character
from dungeon_master.pipeline.fallback import ExtractedStats, RegexStatExtractor


@pytest.fixture
def hero() -> Character:
    return Character(name="Arin", hp=15, max_hp=20, mp=4, max_mp=10, ac=14)


@pytest.fixture
def extractor() -> RegexStatExtractor:
    return RegexStatExtractor()


def test_value_over_matching_max(extractor, hero) -> None:
    assert extractor.extract("You bleed. HP: 12/20", hero).hp == 12


def test_value_over_wrong_max_ignored(extractor, hero) -> None:
    assert extractor.extract("HP: 12/30", hero).hp is None


def test_single_value_clamped_to_max(extractor, hero) -> None:
    assert extractor.extract("HP: 25", hero).hp == 20
    assert extractor.extract("Mana: 7", hero).mp == 7


def test_negative_single_value_ignored(extractor, hero) -> None:
    assert extractor.extract("HP: -3", hero).hp is None


def test_last_mention_wins(extractor, hero) -> None:
    assert extractor.extract("HP: 18/20 ... then HP: 9/20", hero).hp == 9


def test_french_labels(extractor, hero) -> None:
    result = extractor.extract("PV : 7/20, PM : 3, CA : 16", hero)
    assert result == ExtractedStats(hp=7, mp=3, ac=16)


def test_ac_must_be_positive(extractor, hero) -> None:
    assert extractor.extract("AC: 0", hero).ac is None
    assert extractor.extract("Armor Class: 17", hero).ac == 17


def test_unknown_max_skips_pool(extractor) -> None:
    assert extractor.extract("HP: 5", Character(name="X")).hp is None


def test_nothing_found(extractor, hero) -> None:
    result = extractor.extract("The wind howls through the trees.", hero)
    assert result.is_empty()


def test_label_inside_word_ignored(extractor, hero) -> None:
    assert extractor.extract("The champ: 5 coins", hero).is_empty()
