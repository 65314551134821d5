"""
Event module for the combat engine.

Every noteworthy thing that happens while a round resolves is recorded as a
CombatEvent. The engine never prints; callers decide how to present events.
"""

from enum import Enum

from pydantic import BaseModel, Field


class EventKind(Enum):
    """Enumeration of combat event kinds."""

    ROUND_START = "round_start"  # A new round begins
    ATTACK = "attack"  # A plain weapon attack landed
    ABILITY = "ability"  # An ability or item was used
    RACIAL = "racial"  # A racial ability was used or triggered
    DEFEND = "defend"  # The hero raised their guard
    TAUNT = "taunt"  # A warrior forced enemies to target them
    HEAL = "heal"  # A party member was healed
    SPREAD = "spread"  # A spreading effect hit other enemies
    SKIP = "skip"  # A character could not act
    KILL = "kill"  # An enemy was defeated
    FALL = "fall"  # A party member fell
    REWARD = "reward"  # Gold and experience were granted
    LEVEL_UP = "level_up"  # The hero gained a level
    STATUS = "status"  # A status ticked or expired
    SUMMON = "summon"  # A summoned ally arrived or vanished
    FLEE = "flee"  # The party tried to flee
    VICTORY = "victory"  # Every enemy is defeated
    DEFEAT = "defeat"  # Every party member fell
    FAILURE = "failure"  # An action failed or was refused


class CombatEvent(BaseModel):
    """One entry of the round log."""

    kind: EventKind = Field(
        description="The kind of event.",
    )
    actor: str | None = Field(
        None,
        description="Name of the character causing the event.",
    )
    target: str | None = Field(
        None,
        description="Name of the character affected by the event.",
    )
    amount: int = Field(
        0,
        description="Damage, healing, gold or experience involved.",
    )
    critical: bool = Field(
        False,
        description="Whether the event was a critical hit.",
    )
    message: str = Field(
        "",
        description="Human readable description.",
    )

    def __str__(self) -> str:
        return self.message or f"{self.kind.value}: {self.actor} -> {self.target}"
