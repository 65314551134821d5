"""
Stat derivation module for the combat engine.

Converts a character's six base attributes, level and class into derived
resources: health, mana and stamina bonuses, defense, attack bonuses per
weapon type and the critical-hit roll. Every function here is a pure read of
character state, except `apply_stat_bonuses`, which writes the recomputed
caps back while preserving the current resource percentages.
"""

import math
import random
from typing import Any

from core.constants import CharacterType, StatType, WeaponType
from core.logging import log_debug
from core.utils import safe_floor
from pydantic import BaseModel, Field

# Lowest value each derived cap may reach.
RESOURCE_FLOORS = {"health": 10, "mana": 1, "stamina": 1}

CRITICAL_CHANCE_CAP = 30.0
CRITICAL_MULTIPLIER_CAP = 3.0

# Stat scaling each non-melee weapon family.
WEAPON_STATS = {
    WeaponType.RANGED: StatType.DEXTERITY,
    WeaponType.ARCANE: StatType.INTELLIGENCE,
    WeaponType.DIVINE: StatType.WILLPOWER,
}


def get_stat(character: Any, stat: StatType) -> float:
    """
    Returns a base attribute of a character, defaulting to the neutral value.

    Args:
        character (Any): The character.
        stat (StatType): The attribute.

    Returns:
        float: The attribute value.

    """
    return character.stats.get(stat)


def level_bonus(character: Any, resource: str) -> int:
    """Returns the per-class level stipend for a resource."""
    return character.char_class.level_bonus(resource, character.level)


# ============================================================================
# RESOURCE BONUSES
# ============================================================================


def health_bonus(character: Any) -> float:
    """Constitution and level contribution to max health."""
    con = get_stat(character, StatType.CONSTITUTION)
    return (con - 5) * 7 + level_bonus(character, "health")


def size_health_bonus(character: Any) -> float:
    """Size contribution to max health."""
    return (get_stat(character, StatType.SIZE) - 5) * 7


def mana_bonus(character: Any) -> float:
    """Intelligence, willpower and level contribution to max mana."""
    intelligence = get_stat(character, StatType.INTELLIGENCE)
    willpower = get_stat(character, StatType.WILLPOWER)
    return max(0.0, (intelligence + willpower - 10) * 2.5) + level_bonus(character, "mana")


def stamina_bonus(character: Any) -> float:
    """Strength, dexterity, constitution and level contribution to max stamina."""
    total = (
        get_stat(character, StatType.STRENGTH)
        + get_stat(character, StatType.DEXTERITY)
        + get_stat(character, StatType.CONSTITUTION)
    )
    return max(0.0, (total - 15) * 2.5) + level_bonus(character, "stamina")


def defense_bonus(character: Any) -> float:
    """Dexterity and size contribution to defense."""
    dex = get_stat(character, StatType.DEXTERITY)
    size = get_stat(character, StatType.SIZE)
    return (dex - 5) * 0.75 + (5 - size) * 0.75


def size_attack_bonus(character: Any) -> float:
    return (get_stat(character, StatType.SIZE) - 5) * 1


def attack_bonus(character: Any, weapon_type: WeaponType = WeaponType.MELEE) -> float:
    """
    Returns the stat-derived attack bonus for a weapon family.

    Melee scales with strength plus a size term and may be negative; the
    other families scale with their own stat and are floored at zero.

    Args:
        character (Any): The attacker.
        weapon_type (WeaponType): The weapon family.

    Returns:
        float: The attack bonus.

    """
    if weapon_type == WeaponType.MELEE:
        strength = get_stat(character, StatType.STRENGTH)
        return (strength - 5) * 1.5 + size_attack_bonus(character)
    stat = WEAPON_STATS.get(weapon_type)
    if stat is None:
        return 0.0
    return max(0.0, (get_stat(character, stat) - 5) * 1.5)


# ============================================================================
# CRITICAL HITS
# ============================================================================


class CriticalResult(BaseModel):
    """Outcome of a critical-hit roll."""

    is_critical: bool = Field(False, description="Whether the roll was critical.")
    multiplier: float = Field(1.0, description="Damage multiplier to apply.")


def critical_chance(character: Any) -> float:
    """Critical chance in percent, capped at 30."""
    return min(CRITICAL_CHANCE_CAP, get_stat(character, StatType.DEXTERITY) * 2.5)


def critical_multiplier(character: Any) -> float:
    """Damage multiplier of a critical hit, capped at 3.0."""
    dex = get_stat(character, StatType.DEXTERITY)
    return min(CRITICAL_MULTIPLIER_CAP, 1.5 + max(0.0, dex - 5) * 0.1)


def critical_hit(character: Any, rng: random.Random | None = None) -> CriticalResult:
    """
    Rolls for a critical hit.

    Args:
        character (Any): The attacker.
        rng (random.Random | None): The random source.

    Returns:
        CriticalResult: The roll outcome.

    """
    rng = rng or random.Random()
    if rng.random() * 100 < critical_chance(character):
        return CriticalResult(is_critical=True, multiplier=critical_multiplier(character))
    return CriticalResult()


# ============================================================================
# AGGREGATE VIEW
# ============================================================================


class DerivedStats(BaseModel):
    """Snapshot of every stat derived from a character."""

    max_health: int = Field(description="Max health after bonuses.")
    max_mana: int = Field(description="Max mana after bonuses.")
    max_stamina: int = Field(description="Max stamina after bonuses.")
    defense: float = Field(description="Defense bonus from dexterity and size.")
    attack_bonuses: dict[WeaponType, float] = Field(
        description="Attack bonus per weapon family."
    )
    critical_chance: float = Field(description="Critical chance in percent.")
    critical_multiplier: float = Field(description="Critical damage multiplier.")

    def attack_bonus(self, weapon_type: WeaponType = WeaponType.MELEE) -> float:
        return self.attack_bonuses.get(weapon_type, 0.0)

    def critical(self, rng: random.Random | None = None) -> CriticalResult:
        """Rolls for a critical hit with the snapshot's chance and multiplier."""
        rng = rng or random.Random()
        if rng.random() * 100 < self.critical_chance:
            return CriticalResult(is_critical=True, multiplier=self.critical_multiplier)
        return CriticalResult()


def resource_bonuses(character: Any) -> dict[str, float]:
    """Returns the bonus each resource cap should carry."""
    return {
        "health": health_bonus(character) + size_health_bonus(character),
        "mana": mana_bonus(character),
        "stamina": stamina_bonus(character),
    }


def _recomputed_max(character: Any, resource: str, bonus: float) -> tuple[int, int]:
    """Returns the base cap without the applied bonus and the new cap."""
    stats = character.stats
    base = stats.get_max(resource) - stats.applied_bonuses.get(resource, 0)
    new_max = safe_floor(base + bonus, RESOURCE_FLOORS[resource])
    return base, new_max


def derive_stats(character: Any) -> DerivedStats:
    """
    Computes every derived stat of a character without modifying it.

    Args:
        character (Any): The character.

    Returns:
        DerivedStats: The derived values.

    """
    caps = {
        resource: _recomputed_max(character, resource, bonus)[1]
        for resource, bonus in resource_bonuses(character).items()
    }
    return DerivedStats(
        max_health=caps["health"],
        max_mana=caps["mana"],
        max_stamina=caps["stamina"],
        defense=defense_bonus(character),
        attack_bonuses={wt: attack_bonus(character, wt) for wt in WeaponType},
        critical_chance=critical_chance(character),
        critical_multiplier=critical_multiplier(character),
    )


def apply_stat_bonuses(character: Any) -> DerivedStats:
    """
    Writes the stat-derived bonuses into the character's resource caps.

    The bonus applied last time is subtracted before the new one is added, so
    repeated calls never compound. Current resources keep their percentage of
    the cap rather than their absolute amount.

    Args:
        character (Any): The character to update.

    Returns:
        DerivedStats: The derived values after the update.

    """
    stats = character.stats
    for resource, bonus in resource_bonuses(character).items():
        fraction = stats.percentage(resource)
        was_positive = stats.get_resource(resource) > 0
        base, new_max = _recomputed_max(character, resource, bonus)
        stats.set_max(resource, new_max)
        current = math.floor(new_max * fraction)
        if was_positive:
            current = max(1, current)
        stats.set_resource(resource, current)
        stats.applied_bonuses[resource] = new_max - base
        log_debug(
            f"{character.name} {resource} cap recomputed",
            {"base": base, "max": new_max, "current": stats.get_resource(resource)},
        )
    return derive_stats(character)


def effective_defense(character: Any) -> int:
    """
    Defense subtracted from incoming ability damage: the baseline, equipped
    gear and active defense statuses, never below zero.

    Args:
        character (Any): The defender.

    Returns:
        int: The defense value.

    """
    total = (
        character.defense
        + character.inventory.equipped_defense()
        + character.effects.defense_modifier()
    )
    return safe_floor(total, 0)


def attack_power(character: Any, base: float, per_level: float) -> int:
    """
    Flat attack of a character before variance and critical hits: a base
    scaled by level, equipped gear, the stat bonus of the wielded weapon
    family and active attack statuses.

    Args:
        character (Any): The attacker.
        base (float): Flat base of the attack.
        per_level (float): Attack gained per character level.

    Returns:
        int: The attack value, never below zero.

    """
    total = (
        base
        + character.level * per_level
        + character.inventory.equipped_attack()
        + attack_bonus(character, character.weapon_type)
        + character.effects.attack_modifier()
    )
    return safe_floor(total, 0)


def base_attack(character: Any, rules: Any) -> int:
    """
    Attack of a character before variance, using the base and per-level
    growth the rules assign to its role. Enemies and summons attack with
    their own baseline.
    """
    if character.char_type == CharacterType.HERO:
        return attack_power(character, rules.hero_base_attack, rules.hero_attack_per_level)
    if character.char_type == CharacterType.UNDERLING:
        return attack_power(
            character, rules.underling_base_attack, rules.underling_attack_per_level
        )
    return attack_power(character, character.attack, 0)
