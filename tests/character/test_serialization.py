"""
Tests for reading and writing character records.
"""

import json

import pytest
from character.character_serialization import (
    character_from_dict,
    character_to_dict,
    load_character,
    load_characters,
    save_character,
)
from core.constants import CharacterType, StatType


@pytest.fixture
def record():
    return {
        "id": "bell",
        "name": "Bell",
        "char_type": "hero",
        "race": "dwarf",
        "class": "hero",
        "level": 3,
        "stats": {"constitution": 7, "strength": 6},
        "max_health": 100,
        "max_mana": 20,
        "gold": 42,
        "rations": 2,
        "materials": {"health_potion": 1},
        "abilities": ["firebolt"],
    }


def test_missing_stats_are_backfilled(record):
    """Stats absent from the record read as the neutral value."""
    character = character_from_dict(record)
    assert character.stats.get(StatType.CONSTITUTION) == 7
    assert character.stats.get(StatType.DEXTERITY) == 5
    assert character.stats.get(StatType.WILLPOWER) == 5


def test_invalid_stat_is_replaced(record):
    record["stats"]["dexterity"] = "quick"
    character = character_from_dict(record)
    assert character.stats.get(StatType.DEXTERITY) == 5


def test_current_resources_default_to_maximum(record):
    """Without current values the character starts full, bonuses included."""
    character = character_from_dict(record)
    assert character.max_health > 100
    assert character.health == character.max_health
    assert character.mana == character.max_mana


def test_partial_current_resources(record):
    record["health"] = 30
    character = character_from_dict(record)
    assert character.health == 30


def test_round_trip_keeps_base_caps(record):
    """Saved records hold base caps so loading does not stack bonuses."""
    character = character_from_dict(record)
    data = character_to_dict(character)
    assert data["max_health"] == 100
    assert data["max_mana"] == 20

    reloaded = character_from_dict(data)
    assert reloaded.max_health == character.max_health
    assert reloaded.health == character.health
    assert reloaded.char_type == CharacterType.HERO
    assert reloaded.inventory.materials == {"health_potion": 1}
    assert reloaded.abilities == ["firebolt"]


def test_record_without_name_is_rejected(record):
    del record["name"]
    with pytest.raises(ValueError):
        character_from_dict(record)


def test_unknown_type_is_rejected(record):
    record["char_type"] = "villager"
    with pytest.raises(ValueError):
        character_from_dict(record)


def test_load_missing_file_returns_none(tmp_path):
    assert load_character(tmp_path / "nobody.json") is None


def test_load_invalid_json_returns_none(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json")
    assert load_character(path) is None


def test_save_and_load_directory(tmp_path, record):
    """Every valid record of a directory is loaded, keyed by id."""
    save_character(character_from_dict(record), tmp_path / "bell.json")
    (tmp_path / "lili.json").write_text(
        json.dumps({"id": "lili", "name": "Lili", "char_type": "underling", "class": "healer"})
    )
    (tmp_path / "broken.json").write_text("[]")

    characters = load_characters(tmp_path)
    assert sorted(characters) == ["bell", "lili"]
    assert characters["lili"].char_type == CharacterType.UNDERLING
    assert characters["bell"].inventory.gold == 42


def test_load_missing_directory(tmp_path):
    assert load_characters(tmp_path / "missing") == {}
