"""
Core system module for the combat engine.

This module contains the fundamental components shared by the engine: game
constants and enumerations, logging and error handling, the tunable combat
rules, and console utilities.
"""

from .constants import (
    AftermathChoice,
    CharacterType,
    CombatOutcome,
    CombatState,
    DamageType,
    EffectType,
    Faction,
    PlayerActionType,
    RacialEffect,
    SpecialKind,
    StatType,
    TargetType,
    TargetValidity,
    WeaponType,
    default_faction,
)
from .error_handling import ERROR_HANDLER, ErrorHandler, ErrorSeverity
from .logging import setup_logging
from .rules import DEFAULT_RULES, CombatRules

__all__ = [
    # Import from constants.py
    "AftermathChoice",
    "CharacterType",
    "CombatOutcome",
    "CombatState",
    "DamageType",
    "EffectType",
    "Faction",
    "PlayerActionType",
    "RacialEffect",
    "SpecialKind",
    "StatType",
    "TargetType",
    "TargetValidity",
    "WeaponType",
    "default_faction",
    # Import from error_handling.py
    "ERROR_HANDLER",
    "ErrorHandler",
    "ErrorSeverity",
    # Import from logging.py
    "setup_logging",
    # Import from rules.py
    "DEFAULT_RULES",
    "CombatRules",
]
