"""
Rewards module for the combat engine.

Grants gold and experience for defeated enemies, scaled by dungeon depth,
and levels the hero up once enough fame has been gathered.
"""

import math
import random
from typing import Any

from character.stat_deriver import apply_stat_bonuses
from core.logging import log_info
from pydantic import BaseModel, Field


class Reward(BaseModel):
    """Gold and experience granted for one kill."""

    gold: int = Field(ge=0, description="Gold granted.")
    experience: int = Field(ge=0, description="Experience granted as fame.")


def underling_kill_reward(depth: int, rng: random.Random) -> Reward:
    """Reward for an enemy defeated by an underling, summon or effect."""
    gold = rng.randint(5, 14) + depth * rng.randint(2, 4)
    experience = rng.randint(10, 24) + depth * rng.randint(3, 7)
    return Reward(gold=gold, experience=experience)


def hero_kill_reward(depth: int, rng: random.Random, multiplier: float = 1.5) -> Reward:
    """Reward for an enemy defeated by the hero's own action."""
    gold = rng.randint(10, 24) + depth * rng.randint(3, 6)
    experience = rng.randint(15, 34) + depth * rng.randint(4, 9)
    return Reward(
        gold=math.floor(gold * multiplier),
        experience=math.floor(experience * multiplier),
    )


def grant_reward(hero: Any, reward: Reward) -> None:
    hero.inventory.add_gold(reward.gold)
    hero.fame += reward.experience


def check_level_up(hero: Any, fame_per_level: int = 100) -> bool:
    """
    Levels the hero up when its fame reaches the requirement of its level.
    The spent fame is removed and the stat bonuses are recomputed.

    Args:
        hero (Any): The hero.
        fame_per_level (int): Fame required per current level.

    Returns:
        bool: True if the hero gained a level.

    """
    required = hero.level * fame_per_level
    if hero.fame < required:
        return False
    hero.level += 1
    hero.fame -= required
    apply_stat_bonuses(hero)
    log_info(f"{hero.name} reached level {hero.level}", {"fame": hero.fame})
    return True
