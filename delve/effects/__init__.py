"""
Status effect module for the combat engine.

This module contains the timed conditions attached to characters: stat
modifiers, damage and healing over time, incapacitating statuses and plain
markers such as taunt or sanctuary.
"""

from .status_effect import (
    DAMAGE_OVER_TIME_STATUSES,
    HEALING_OVER_TIME_STATUSES,
    StatusEffect,
    StatusKind,
    StatusTick,
    classify_status,
)

__all__ = [
    "DAMAGE_OVER_TIME_STATUSES",
    "HEALING_OVER_TIME_STATUSES",
    "StatusEffect",
    "StatusKind",
    "StatusTick",
    "classify_status",
]
