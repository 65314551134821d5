"""
Aftermath module for the combat engine.

What happens to the party once a battle is over: resting on a ration,
descending to the next level, leaving the dungeon, or recovering from a
defeat.
"""

import math
import random
from typing import Any

from core.constants import AftermathChoice
from core.logging import log_info
from core.rules import DEFAULT_RULES, CombatRules
from pydantic import BaseModel, Field

from .encounter import generate_enemies


class AftermathReport(BaseModel):
    """Summary of an aftermath step."""

    choice: AftermathChoice | None = Field(
        None, description="The choice taken, None for a defeat."
    )
    success: bool = Field(True, description="False when the choice was refused.")
    message: str = Field("", description="Human readable description.")
    dungeon_level: int = Field(description="Dungeon level after the step.")
    enemies: list[Any] = Field(
        default_factory=list, description="Enemies of a new encounter, if any."
    )


def _restore_living(party: list[Any], fraction: float) -> None:
    for member in party:
        if member.is_alive:
            member.restore_fraction(fraction)


def rest(
    hero: Any,
    underlings: list[Any],
    rules: CombatRules = DEFAULT_RULES,
    dungeon_level: int = 0,
) -> AftermathReport:
    """
    Spends a ration to restore part of the living party's health and mana.

    Args:
        hero (Any): The hero, who carries the rations.
        underlings (list[Any]): The hero's underlings.
        rules (CombatRules): The fraction restored.
        dungeon_level (int): The level the party rests on.

    Returns:
        AftermathReport: The outcome, refused without a ration.

    """
    if hero.inventory.rations <= 0:
        return AftermathReport(
            choice=AftermathChoice.REST,
            success=False,
            message="No rations left to rest",
            dungeon_level=dungeon_level,
        )
    hero.inventory.rations -= 1
    _restore_living([hero, *underlings], rules.rest_fraction)
    log_info(f"{hero.name} rests", {"rations": hero.inventory.rations})
    return AftermathReport(
        choice=AftermathChoice.REST,
        message=f"The party rests and recovers ({hero.inventory.rations} rations left)",
        dungeon_level=dungeon_level,
    )


def descend(dungeon_level: int, rng: random.Random) -> AftermathReport:
    """Goes one level deeper and rolls the next encounter."""
    depth = dungeon_level + 1
    return AftermathReport(
        choice=AftermathChoice.DESCEND,
        message=f"The party descends to level {depth}",
        dungeon_level=depth,
        enemies=generate_enemies(depth, rng),
    )


def exit_dungeon(hero: Any, underlings: list[Any], rules: CombatRules = DEFAULT_RULES) -> AftermathReport:
    """Leaves the dungeon, the living party recovering a little on the way."""
    _restore_living([hero, *underlings], rules.exit_fraction)
    return AftermathReport(
        choice=AftermathChoice.EXIT,
        message="The party leaves the dungeon",
        dungeon_level=0,
    )


def apply_defeat_penalty(
    hero: Any,
    underlings: list[Any],
    rules: CombatRules = DEFAULT_RULES,
) -> AftermathReport:
    """
    A defeated party loses part of its gold and is brought back to safety,
    everyone revived at a fraction of max health.
    """
    lost = math.floor(hero.inventory.gold * rules.defeat_gold_penalty)
    hero.inventory.spend_gold(lost)
    for member in [hero, *underlings]:
        member.effects.clear()
        member.revive(math.floor(member.max_health * rules.defeat_revive_fraction))
    log_info(f"{hero.name}'s party was defeated", {"gold_lost": lost})
    return AftermathReport(
        message=f"The party was carried to safety. Lost {lost} gold.",
        dungeon_level=0,
    )


def choose_aftermath(session: Any, choice: AftermathChoice | str) -> AftermathReport:
    """
    Applies the player's choice after a victory.

    Args:
        session (Any): The finished combat session.
        choice (AftermathChoice | str): Rest, descend or exit.

    Returns:
        AftermathReport: The outcome of the choice.

    """
    choice = AftermathChoice(choice)
    if choice == AftermathChoice.REST:
        return rest(session.hero, session.underlings, session.rules, session.dungeon_level)
    if choice == AftermathChoice.DESCEND:
        return descend(session.dungeon_level, session.rng)
    return exit_dungeon(session.hero, session.underlings, session.rules)
