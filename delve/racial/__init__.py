"""
Racial ability module for the combat engine.

Species-specific special actions with battle-scoped cooldowns.
"""

from .racial_abilities import (
    RACIAL_ABILITIES,
    RACIAL_HANDLERS,
    RacialAbility,
    apply_passive_racials,
    get_racial_ability,
    knockdown_chance,
    reset_battle_cooldowns,
    trigger_revival,
    use_racial_ability,
)

__all__ = [
    "RACIAL_ABILITIES",
    "RACIAL_HANDLERS",
    "RacialAbility",
    "apply_passive_racials",
    "get_racial_ability",
    "knockdown_chance",
    "reset_battle_cooldowns",
    "trigger_revival",
    "use_racial_ability",
]
