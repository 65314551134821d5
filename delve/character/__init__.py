"""
Character system module for the combat engine.

This module handles the combatants of a battle: their classes and species,
stats and resource pools, status effects, inventory, the derived combat
values, and serialization functionality.
"""

from .character_class import CharacterClass, get_character_class
from .character_effects import CharacterEffects
from .character_inventory import CharacterInventory, Equipment
from .character_race import CharacterRace, get_character_race
from .character_serialization import (
    character_from_dict,
    character_to_dict,
    load_character,
    load_characters,
    save_character,
)
from .character_stats import CharacterStats
from .main import Character

__all__ = [
    # Import from character_class.py
    "CharacterClass",
    "get_character_class",
    # Import from character_effects.py
    "CharacterEffects",
    # Import from character_inventory.py
    "CharacterInventory",
    "Equipment",
    # Import from character_race.py
    "CharacterRace",
    "get_character_race",
    # Import from character_serialization.py
    "character_from_dict",
    "character_to_dict",
    "load_character",
    "load_characters",
    "save_character",
    # Import from character_stats.py
    "CharacterStats",
    # Import from main.py
    "Character",
]
