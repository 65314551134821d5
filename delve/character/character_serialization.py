"""
Character serialization and deserialization functions.

This module provides functions to serialize and deserialize Character instances
to and from dictionaries and JSON files. Records hold base resource caps; the
stat-derived bonuses are recomputed when a character is loaded.
"""

import json
from pathlib import Path
from typing import Any

from core.constants import NEUTRAL_STAT, CharacterType, StatType
from core.logging import log_error, log_warning
from core.utils import safe_floor

from .character_inventory import Equipment
from .character_stats import RESOURCES
from .main import Character
from .stat_deriver import apply_stat_bonuses

# Base caps used when a record has none.
DEFAULT_MAX = {"health": 100, "mana": 0, "stamina": 0}


def _read_stats(data: dict[str, Any], name: str) -> dict[StatType, float]:
    """
    Reads the six attributes of a record, using the neutral value for any
    missing or non-numeric entry.
    """
    raw = data.get("stats") or {}
    stats: dict[StatType, float] = {}
    for stat in StatType:
        value = raw.get(stat.value, raw.get(stat.name))
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            if value is not None:
                log_warning(
                    f"Invalid {stat.value} for {name}, using {NEUTRAL_STAT}",
                    {"value": value},
                )
            value = NEUTRAL_STAT
        stats[stat] = value
    return stats


def character_from_dict(data: dict[str, Any]) -> Character:
    """
    Creates a Character instance from a dictionary of data.

    Missing stats are backfilled with the neutral value, missing base caps
    with safe defaults, and missing current resources with their maximum.

    Args:
        data (dict[str, Any]):
            The dictionary containing character data.

    Returns:
        Character:
            The created Character instance.

    Raises:
        ValueError: If the record is not an object, has no name or has an
            unknown character type.

    """
    if not isinstance(data, dict):
        raise ValueError(f"Character record must be an object, got {type(data).__name__}")
    name = data.get("name")
    if not name:
        raise ValueError(f"Character record without a name: {data}")
    try:
        char_type = CharacterType(data.get("char_type", CharacterType.HERO.value))
    except ValueError as e:
        raise ValueError(f"Character '{name}' has an unknown type: {e}") from e

    character = Character(
        name=name,
        char_type=char_type,
        race=data.get("race"),
        char_class=data.get("class"),
        level=data.get("level", 1),
        stats=_read_stats(data, name),
        max_health=max(1, safe_floor(data.get("max_health", DEFAULT_MAX["health"]), 1)),
        max_mana=safe_floor(data.get("max_mana", DEFAULT_MAX["mana"])),
        max_stamina=safe_floor(data.get("max_stamina", DEFAULT_MAX["stamina"])),
        attack=safe_floor(data.get("attack", 0)),
        defense=safe_floor(data.get("defense", 0)),
        char_id=data.get("id"),
        subspecies=data.get("subspecies"),
        abilities=data.get("abilities", []),
        gold=safe_floor(data.get("gold", 0)),
        rations=safe_floor(data.get("rations", 0)),
        fame=safe_floor(data.get("fame", 0)),
        materials=data.get("materials"),
        equipment=[Equipment.model_validate(item) for item in data.get("equipment", [])],
    )

    # Caps first, then the current values, which may be partial.
    apply_stat_bonuses(character)
    for resource in RESOURCES:
        maximum = character.stats.get_max(resource)
        character.stats.set_resource(resource, safe_floor(data.get(resource, maximum)))

    return character


def character_to_dict(character: Character) -> dict[str, Any]:
    """
    Serializes the persistent identity of a character. Battle-scoped state,
    such as statuses or consumed racial abilities, is not written.

    Args:
        character (Character):
            The character to serialize.

    Returns:
        dict[str, Any]:
            A JSON compatible record.

    """
    stats = character.stats
    data: dict[str, Any] = {
        "id": character.char_id,
        "name": character.name,
        "char_type": character.char_type.value,
        "race": character.race.name,
        "class": character.char_class.name,
        "level": character.level,
        "stats": {stat.value: stats.get(stat) for stat in StatType},
        "attack": character.attack,
        "defense": character.defense,
        "abilities": list(character.abilities),
        "gold": character.inventory.gold,
        "rations": character.inventory.rations,
        "fame": character.fame,
        "materials": dict(character.inventory.materials),
        "equipment": [item.model_dump(mode="json") for item in character.inventory.equipment],
    }
    if character.subspecies:
        data["subspecies"] = character.subspecies
    for resource in RESOURCES:
        data[f"max_{resource}"] = stats.get_max(resource) - stats.applied_bonuses[resource]
        data[resource] = stats.get_resource(resource)
    return data


def load_character(file_path: Path) -> Character | None:
    """
    Loads a character from a JSON file.

    Args:
        file_path (Path): The path to the JSON file containing character data.

    Returns:
        Character | None: A Character instance if the file is valid, None otherwise.

    """
    try:
        with open(file_path) as f:
            return character_from_dict(json.load(f))
    except (FileNotFoundError, json.JSONDecodeError, ValueError) as e:
        log_error(
            f"Failed to load character from {file_path}: {e}",
            {
                "file_path": str(file_path),
                "error": str(e),
                "context": "character_file_loading",
            },
        )
        return None


def load_characters(directory: Path) -> dict[str, Character]:
    """
    Loads every character record found in a directory.

    Args:
        directory (Path):
            The directory holding one JSON file per character.

    Returns:
        dict[str, Character]: A dictionary mapping character ids to Character instances.

    """
    characters: dict[str, Character] = {}
    if not Path(directory).is_dir():
        log_error(
            f"Character directory {directory} does not exist.",
            {"directory": str(directory), "context": "character_file_loading"},
        )
        return characters
    for file_path in sorted(Path(directory).glob("*.json")):
        character = load_character(file_path)
        if character is not None:
            characters[character.char_id] = character
    return characters


def save_character(character: Character, file_path: Path) -> None:
    """Writes a character record to a JSON file."""
    with open(file_path, "w") as f:
        json.dump(character_to_dict(character), f, indent=4)
