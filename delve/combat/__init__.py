"""
Combat system module for the combat engine.

This module handles the turn-based resolution of encounters: the combat
session, the round orchestrator, the party and enemy decision making,
rewards, encounter generation and the aftermath of a battle.
"""

from .aftermath import (
    AftermathReport,
    apply_defeat_penalty,
    choose_aftermath,
    descend,
    exit_dungeon,
    rest,
)
from .combat_manager import PlayerAction, RoundOutcome, resolve_round
from .encounter import create_enemy, generate_enemies
from .events import CombatEvent, EventKind
from .party_ai import PartyDecision, choose_enemy_target, choose_party_action
from .rewards import Reward, check_level_up, hero_kill_reward, underling_kill_reward
from .session import CombatSession, mitigate_damage

__all__ = [
    # Import from aftermath.py
    "AftermathReport",
    "apply_defeat_penalty",
    "choose_aftermath",
    "descend",
    "exit_dungeon",
    "rest",
    # Import from combat_manager.py
    "PlayerAction",
    "RoundOutcome",
    "resolve_round",
    # Import from encounter.py
    "create_enemy",
    "generate_enemies",
    # Import from events.py
    "CombatEvent",
    "EventKind",
    # Import from party_ai.py
    "PartyDecision",
    "choose_enemy_target",
    "choose_party_action",
    # Import from rewards.py
    "Reward",
    "check_level_up",
    "hero_kill_reward",
    "underling_kill_reward",
    # Import from session.py
    "CombatSession",
    "mitigate_damage",
]
