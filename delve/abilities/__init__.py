"""
Ability system module for the combat engine.

This module holds the ability templates, the generic effect resolver, the
special-kind handlers and the static catalog of class, monster and item
abilities.
"""

from .ability import (
    Ability,
    AbilityCosts,
    SpecialEffect,
    SummonTemplate,
    Targeting,
    UsageRestrictions,
)
from .catalog import (
    COMMON_ABILITIES,
    MONSTER_ABILITIES,
    MONSTER_LOADOUTS,
    UNDERLING_ABILITIES,
    get_abilities_for_class,
    get_ability,
)
from .effect_resolver import EFFECT_HANDLERS, EffectSpec, apply_effect, compute_value
from .results import AbilityResult, EffectResult, UsabilityCheck
from .special_handlers import SPECIAL_HANDLERS, resolve_special, summon_creature

__all__ = [
    # Import from ability.py
    "Ability",
    "AbilityCosts",
    "SpecialEffect",
    "SummonTemplate",
    "Targeting",
    "UsageRestrictions",
    # Import from catalog.py
    "COMMON_ABILITIES",
    "MONSTER_ABILITIES",
    "MONSTER_LOADOUTS",
    "UNDERLING_ABILITIES",
    "get_abilities_for_class",
    "get_ability",
    # Import from effect_resolver.py
    "EFFECT_HANDLERS",
    "EffectSpec",
    "apply_effect",
    "compute_value",
    # Import from results.py
    "AbilityResult",
    "EffectResult",
    "UsabilityCheck",
    # Import from special_handlers.py
    "SPECIAL_HANDLERS",
    "resolve_special",
    "summon_creature",
]
