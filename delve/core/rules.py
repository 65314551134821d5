"""
Combat rules module for the combat engine.

Groups the tunable design parameters of a battle in a single pydantic model.
The defaults are the numbers the game ships with; a session may be built with
a custom instance to rebalance encounters.
"""

from typing import Any

from pydantic import BaseModel, Field


class CombatRules(BaseModel):
    """Numeric design parameters of a battle."""

    # === Player phase ===

    hero_base_attack: int = Field(15, description="Flat base of the hero's attack.")
    hero_attack_per_level: int = Field(3, description="Hero attack gained per level.")
    hero_variance: tuple[float, float] = Field(
        (0.7, 1.0), description="Random scaling applied to the hero's attack."
    )
    flee_chance: float = Field(0.7, description="Probability that fleeing succeeds.")

    # === Party phase ===

    underling_base_attack: int = Field(8, description="Flat base of an underling attack.")
    underling_attack_per_level: int = Field(2, description="Underling attack per level.")
    underling_variance: tuple[float, float] = Field(
        (0.7, 1.0), description="Random scaling applied to underling attacks."
    )
    wounded_threshold: float = Field(
        0.5, description="Health fraction under which an ally counts as wounded."
    )
    taunt_mana_cost: int = Field(8, description="Mana spent by a warrior to taunt.")
    taunt_damage_reduction: float = Field(
        0.25, description="Damage reduction enjoyed by the taunt holder."
    )
    heal_mana_cost: int = Field(10, description="Mana spent by a healer to heal.")
    heal_fraction: float = Field(
        0.25, description="Fraction of the ally's max health restored by a heal."
    )
    aoe_mana_cost: int = Field(15, description="Mana spent by a mage on an AoE spell.")
    aoe_min_enemies: int = Field(3, description="Enemies required before a mage casts AoE.")
    aoe_base_damage: int = Field(6, description="Flat base of the mage AoE damage.")
    aoe_damage_per_level: float = Field(1.5, description="AoE damage per mage level.")
    aoe_variance: tuple[float, float] = Field(
        (0.8, 1.0), description="Random scaling applied per enemy hit by the AoE."
    )

    # === Enemy phase ===

    enemy_variance: tuple[float, float] = Field(
        (0.6, 1.0), description="Random scaling applied to enemy attacks."
    )
    defend_multiplier: float = Field(
        0.5, description="Damage multiplier applied to a defending character."
    )
    defense_mitigation_per_point: float = Field(
        0.05, description="Damage reduction per point of defense bonus."
    )
    minimum_damage_taken: float = Field(
        0.1, description="Lowest damage multiplier defense mitigation may reach."
    )
    monster_ability_chance: float = Field(
        0.3, description="Chance an enemy uses one of its abilities instead of attacking."
    )

    # === Rewards ===

    hero_reward_multiplier: float = Field(
        1.5, description="Multiplier applied to rewards for kills by the hero."
    )
    fame_per_level: int = Field(100, description="Fame required per hero level.")

    # === Aftermath ===

    rest_fraction: float = Field(0.25, description="Fraction restored by resting.")
    exit_fraction: float = Field(0.15, description="Fraction restored when leaving.")
    defeat_gold_penalty: float = Field(0.2, description="Fraction of gold lost on defeat.")
    defeat_revive_fraction: float = Field(
        0.2, description="Fraction of max health everyone is revived at after defeat."
    )

    def model_post_init(self, _: Any) -> None:
        for name in ("hero_variance", "underling_variance", "aoe_variance", "enemy_variance"):
            low, high = getattr(self, name)
            if not 0 <= low <= high:
                raise ValueError(f"{name} must satisfy 0 <= low <= high, got {low}, {high}")
        if not 0.0 <= self.flee_chance <= 1.0:
            raise ValueError("flee_chance must be between 0 and 1.")
        if not 0.0 <= self.monster_ability_chance <= 1.0:
            raise ValueError("monster_ability_chance must be between 0 and 1.")


DEFAULT_RULES = CombatRules()
