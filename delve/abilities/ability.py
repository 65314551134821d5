"""
Ability module for the combat engine.

Defines the immutable Ability template (targeting rules, costs, effect list,
usage restrictions and an optional special kind) and the three operations the
rest of the engine calls on it: checking usability, selecting legal targets,
and using it.
"""

import random
from typing import Any, Literal

from core.constants import (
    Faction,
    SpecialKind,
    StatType,
    TargetType,
    TargetValidity,
    default_faction,
)
from core.logging import log_debug
from pydantic import BaseModel, ConfigDict, Field

from .effect_resolver import EffectSpec, apply_effect
from .results import AbilityResult, EffectResult, UsabilityCheck


class Targeting(BaseModel):
    """Who an ability may be used on."""

    model_config = ConfigDict(frozen=True)

    type: TargetType = Field(
        TargetType.SINGLE,
        description="How many targets the ability affects.",
    )
    validity: TargetValidity = Field(
        TargetValidity.ENEMIES,
        description="Which combatants are legal targets.",
    )
    count: int | Literal["all"] = Field(
        1,
        description="Maximum number of targets, or 'all'.",
    )
    range: str = Field(
        "melee",
        description="Reach of the ability, informative only.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.count != "all" and self.count < 1:
            raise ValueError(f"Target count must be at least 1, got {self.count}.")


class AbilityCosts(BaseModel):
    """Resources spent when using an ability."""

    model_config = ConfigDict(frozen=True)

    mana: int = Field(0, ge=0, description="Mana spent.")
    health: int = Field(0, ge=0, description="Health spent, never below 1.")
    stamina: int = Field(0, ge=0, description="Stamina spent.")
    gold: int = Field(0, ge=0, description="Gold spent.")
    materials: dict[str, int] = Field(
        default_factory=dict,
        description="Materials consumed by name.",
    )
    cooldown: int = Field(0, ge=0, description="Rounds before the ability is usable again.")


class UsageRestrictions(BaseModel):
    """Who may use an ability, and when."""

    model_config = ConfigDict(frozen=True)

    level: int = Field(1, ge=1, description="Minimum caster level.")
    required_class: str | None = Field(None, description="Class the caster must have.")
    in_combat: bool = Field(True, description="Usable during a battle.")
    out_of_combat: bool = Field(True, description="Usable outside a battle.")


class SummonTemplate(BaseModel):
    """The creature a summoning ability brings into the battle."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Name of the summoned creature.")
    max_health: int = Field(ge=1, description="Max health of the creature.")
    attack: int = Field(0, ge=0, description="Attack baseline of the creature.")
    defense: int = Field(0, ge=0, description="Defense baseline of the creature.")
    duration: int = Field(ge=1, description="Rounds before the creature vanishes.")


class SpecialEffect(BaseModel):
    """
    Parameters of an ability whose behaviour is not expressible as generic
    effects. The behaviour itself lives in the resolver, selected by kind.
    """

    model_config = ConfigDict(frozen=True)

    kind: SpecialKind | str = Field(description="Which special behaviour to run.")
    base_value: float = Field(0, description="Flat part of the special's value.")
    scaling: dict[StatType, float] = Field(
        default_factory=dict,
        description="Caster stat multipliers added to the value.",
    )
    variance: float = Field(0, ge=0, description="Uniform random variance.")
    duration: int = Field(1, ge=1, description="Duration of any status applied.")
    ratio: float = Field(0.5, description="Fraction used by revival specials.")
    summon: SummonTemplate | None = Field(None, description="Creature to summon.")

    def model_post_init(self, _: Any) -> None:
        if self.special_kind == SpecialKind.SUMMON and self.summon is None:
            raise ValueError("A summon special needs a summon template.")

    @property
    def special_kind(self) -> SpecialKind | None:
        """The kind as a member of the closed enumeration, if known."""
        try:
            return SpecialKind(self.kind)
        except ValueError:
            return None


class Ability(BaseModel):
    """
    An immutable ability template. Using an ability mutates the caster and
    targets, never the template.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier of the ability.")
    name: str = Field(description="Display name of the ability.")
    description: str = Field("", description="Short description.")
    icon: str = Field("", description="Display icon.")
    category: Literal["skill", "spell", "monster", "item", "racial"] = Field(
        "skill",
        description="Where the ability comes from.",
    )
    targeting: Targeting = Field(default_factory=Targeting)
    costs: AbilityCosts = Field(default_factory=AbilityCosts)
    effects: tuple[EffectSpec, ...] = Field(
        default_factory=tuple,
        description="Effects applied to each target in declaration order.",
    )
    usage: UsageRestrictions = Field(default_factory=UsageRestrictions)
    special: SpecialEffect | None = Field(
        None,
        description="Non-generic behaviour replacing the effect list.",
    )

    def model_post_init(self, _: Any) -> None:
        if not self.effects and self.special is None:
            raise ValueError(f"Ability '{self.id}' has neither effects nor a special.")

    @property
    def colored_name(self) -> str:
        return f"[bold yellow]{self.name}[/]"

    # === Usability ===

    def can_use(self, caster: Any, session: Any = None) -> UsabilityCheck:
        """
        Checks whether the caster may use the ability now. Requirements are
        checked in a fixed order and the first failure is reported.

        Args:
            caster (Any):
                The character wanting to use the ability.
            session (Any):
                The current combat session, None outside of battle.

        Returns:
            UsabilityCheck:
                Whether the ability is allowed, with the failing reason.

        """
        usage = self.usage
        if caster.level < usage.level:
            return UsabilityCheck.refuse(f"Requires level {usage.level}")
        if usage.required_class and not _has_class(caster, usage.required_class):
            return UsabilityCheck.refuse(f"Requires {usage.required_class} class")

        in_combat = bool(session is not None and session.in_combat)
        if in_combat and not usage.in_combat:
            return UsabilityCheck.refuse("Cannot be used in combat")
        if not in_combat and not usage.out_of_combat:
            return UsabilityCheck.refuse("Can only be used in combat")

        costs = self.costs
        if caster.mana < costs.mana:
            return UsabilityCheck.refuse(f"Requires {costs.mana} mana")
        if costs.health and caster.health <= costs.health:
            return UsabilityCheck.refuse(f"Requires {costs.health} health")
        if caster.stamina < costs.stamina:
            return UsabilityCheck.refuse(f"Requires {costs.stamina} stamina")
        if caster.inventory.gold < costs.gold:
            return UsabilityCheck.refuse(f"Requires {costs.gold} gold")
        for material, amount in costs.materials.items():
            if caster.inventory.material_count(material) < amount:
                return UsabilityCheck.refuse(f"Requires {amount} {material}")

        if costs.cooldown > 0 and session is not None:
            last_used = session.last_used(caster, self.id)
            if last_used is not None:
                elapsed = session.round - last_used
                if elapsed < costs.cooldown:
                    return UsabilityCheck.refuse(
                        f"Cooldown: {costs.cooldown - elapsed} turns"
                    )
        return UsabilityCheck.ok()

    # === Targeting ===

    def get_valid_targets(
        self,
        caster: Any,
        combatants: list[Any],
        session: Any = None,
    ) -> list[Any]:
        """
        Returns the living combatants the ability may target, truncated to the
        ability's target count.

        Args:
            caster (Any):
                The character using the ability.
            combatants (list[Any]):
                Everyone taking part in the battle.
            session (Any):
                The combat session whose faction map decides allegiance.

        Returns:
            list[Any]:
                The legal targets, in combatant order.

        """

        def faction(character: Any) -> Faction:
            if session is not None:
                return session.faction_of(character)
            return default_faction(character.char_type)

        caster_faction = faction(caster)
        validity = self.targeting.validity
        if validity == TargetValidity.SELF:
            targets = [caster]
        elif validity == TargetValidity.ALLIES:
            targets = [
                c
                for c in combatants
                if c != caster and faction(c) == caster_faction and c.health > 0
            ]
        elif validity == TargetValidity.ALLIES_AND_SELF:
            targets = [
                c for c in combatants if faction(c) == caster_faction and c.health > 0
            ]
        elif validity == TargetValidity.ENEMIES:
            targets = [
                c for c in combatants if faction(c) != caster_faction and c.health > 0
            ]
        else:
            targets = [c for c in combatants if c.health > 0]

        if self.targeting.count == "all":
            return targets
        return targets[: self.targeting.count]

    # === Use ===

    def use(self, caster: Any, targets: list[Any], session: Any = None) -> AbilityResult:
        """
        Uses the ability: re-checks usability, pays the costs, then either
        runs the special behaviour or applies every effect to every target.

        Args:
            caster (Any):
                The character using the ability.
            targets (list[Any]):
                The chosen targets.
            session (Any):
                The current combat session, None outside of battle.

        Returns:
            AbilityResult:
                What happened. A refusal leaves every character untouched.

        """
        check = self.can_use(caster, session)
        if not check.allowed:
            return AbilityResult(success=False, message=check.reason or "Cannot use")

        self._pay_costs(caster)
        rng: random.Random = session.rng if session is not None else random.Random()

        if self.special is not None:
            from .special_handlers import resolve_special

            result = resolve_special(self, caster, targets, session, rng)
        else:
            results: list[EffectResult] = []
            for target in targets:
                for effect in self.effects:
                    results.append(apply_effect(effect, caster, target, rng, session))
            result = AbilityResult(
                success=True,
                message=f"{caster.name} used {self.name}!",
                results=results,
            )

        if self.costs.cooldown > 0 and session is not None:
            session.record_use(caster, self.id)
        log_debug(result.message, {"ability": self.id, "success": result.success})
        return result

    def _pay_costs(self, caster: Any) -> None:
        costs = self.costs
        stats = caster.stats
        if costs.mana:
            stats.adjust_mana(-costs.mana)
        if costs.health:
            stats.adjust_resource("health", -costs.health, floor=1)
        if costs.stamina:
            stats.adjust_stamina(-costs.stamina)
        if costs.gold:
            caster.inventory.spend_gold(costs.gold)
        for material, amount in costs.materials.items():
            caster.inventory.spend_material(material, amount)


def _has_class(caster: Any, required_class: str) -> bool:
    required = required_class.lower()
    char_class = caster.char_class
    return char_class.name == required or char_class.ability_tree == required
