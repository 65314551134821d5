"""
Encounter generation module for the combat engine.

Rolls the enemies met at a given dungeon depth: one to three monsters of
random types, each with type-specific stat adjustments and the abilities its
type knows.
"""

import random

from abilities.catalog import MONSTER_LOADOUTS
from character.main import Character
from character.stat_deriver import apply_stat_bonuses
from core.constants import CharacterType, StatType

ENEMY_TYPES = ("Goblin", "Orc", "Skeleton", "Wolf", "Spider")

# Stat adjustments applied on top of the neutral baseline, per enemy type.
ENEMY_STAT_MODIFIERS: dict[str, dict[StatType, int]] = {
    "Goblin": {
        StatType.DEXTERITY: 2,
        StatType.INTELLIGENCE: 1,
        StatType.SIZE: -1,
        StatType.STRENGTH: -1,
    },
    "Orc": {
        StatType.STRENGTH: 3,
        StatType.CONSTITUTION: 2,
        StatType.SIZE: 1,
        StatType.INTELLIGENCE: -2,
        StatType.DEXTERITY: -1,
    },
    "Skeleton": {
        StatType.CONSTITUTION: 3,
        StatType.WILLPOWER: 2,
        StatType.DEXTERITY: 1,
        StatType.INTELLIGENCE: -2,
        StatType.STRENGTH: -1,
    },
    "Wolf": {
        StatType.DEXTERITY: 3,
        StatType.STRENGTH: 2,
        StatType.CONSTITUTION: 1,
        StatType.INTELLIGENCE: 1,
        StatType.SIZE: -1,
    },
    "Spider": {
        StatType.DEXTERITY: 4,
        StatType.CONSTITUTION: 1,
        StatType.INTELLIGENCE: 2,
        StatType.SIZE: -2,
        StatType.STRENGTH: -2,
        StatType.WILLPOWER: -1,
    },
}


def enemy_stats(enemy_type: str) -> dict[StatType, int]:
    """Returns the six attributes of an enemy type, each at least 1."""
    modifiers = ENEMY_STAT_MODIFIERS.get(enemy_type, {})
    return {stat: max(1, 5 + modifiers.get(stat, 0)) for stat in StatType}


def create_enemy(
    enemy_type: str,
    depth: int,
    rng: random.Random,
    name: str | None = None,
    char_id: str | None = None,
) -> Character:
    """
    Creates one enemy of a type for a dungeon depth, at full health.

    Args:
        enemy_type (str): One of the known enemy types.
        depth (int): The dungeon level.
        rng (random.Random): The random source.
        name (str | None): Display name, the type when None.
        char_id (str | None): Unique id, derived from the name when None.

    Returns:
        Character: The enemy.

    """
    enemy = Character(
        name=name or enemy_type,
        char_type=CharacterType.ENEMY,
        char_id=char_id,
        level=depth + rng.randint(0, 1),
        stats=enemy_stats(enemy_type),
        max_health=50 + depth * 10,
        attack=10 + depth * 2,
        abilities=list(MONSTER_LOADOUTS.get(enemy_type, [])),
    )
    apply_stat_bonuses(enemy)
    for resource in ("health", "mana", "stamina"):
        enemy.stats.set_resource(resource, enemy.stats.get_max(resource))
    return enemy


def generate_enemies(depth: int, rng: random.Random) -> list[Character]:
    """
    Rolls the enemies of a new encounter. Repeated types get numbered names.

    Args:
        depth (int): The dungeon level.
        rng (random.Random): The random source.

    Returns:
        list[Character]: One to three enemies.

    """
    counts: dict[str, int] = {}
    enemies = []
    for index in range(rng.randint(1, 3)):
        enemy_type = rng.choice(ENEMY_TYPES)
        counts[enemy_type] = counts.get(enemy_type, 0) + 1
        name = enemy_type if counts[enemy_type] == 1 else f"{enemy_type} {counts[enemy_type]}"
        enemies.append(
            create_enemy(
                enemy_type,
                depth,
                rng,
                name=name,
                char_id=f"{enemy_type.lower()}_{depth}_{index}",
            )
        )
    return enemies
