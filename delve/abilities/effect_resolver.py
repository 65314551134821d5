"""
Effect resolution module for the combat engine.

Applies the generic effect descriptors carried by abilities. Each effect type
is handled by one pure function registered in a table keyed by EffectType;
a type missing from the table is reported as a failed, no-op application.
"""

import math
import random
from typing import Any, Callable

from catchery import log_warning
from character.stat_deriver import effective_defense, get_stat
from core.constants import EffectType, StatType
from core.logging import log_debug
from effects.status_effect import StatusKind
from pydantic import BaseModel, Field

from .results import EffectResult

DEFAULT_MODIFIER_DURATION = 3
DEFAULT_RESISTANCE_DURATION = 5
DEFAULT_DOT_DURATION = 3
DEFAULT_STUN_DURATION = 1
DEFAULT_PARALYZE_DURATION = 2
DEFAULT_HEAL_RATIO = 0.5

MODIFIER_STATUSES = {
    EffectType.BUFF_ATTACK: ("attack_buff", "attack increased"),
    EffectType.BUFF_DEFENSE: ("defense_buff", "defense increased"),
    EffectType.DEBUFF_ATTACK: ("attack_debuff", "attack decreased"),
    EffectType.DEBUFF_DEFENSE: ("defense_debuff", "defense decreased"),
}


class EffectSpec(BaseModel):
    """
    A typed effect descriptor inside an ability.
    """

    type: EffectType | str = Field(
        description="The effect type.",
    )
    base_value: float = Field(
        0,
        description="Flat part of the effect value.",
    )
    scaling: dict[StatType, float] = Field(
        default_factory=dict,
        description="Caster stat multipliers added to the value.",
    )
    variance: float = Field(
        0,
        description="Uniform random variance in [-variance, +variance].",
    )
    duration: int | None = Field(
        None,
        description="Duration of the resulting status, type default when None.",
    )
    status: str | None = Field(
        None,
        description="Sub-type of a damage-over-time status (poison, burn...).",
    )
    damage_type: str | None = Field(
        None,
        description="Damage family a resistance applies to.",
    )
    heal_ratio: float = Field(
        DEFAULT_HEAL_RATIO,
        description="Fraction of vampiric damage returned to the caster.",
    )
    spread_chance: float = Field(
        0,
        description="Probability that a spread effect propagates.",
    )
    spread_effect: "EffectSpec | None" = Field(
        None,
        description="Effect propagated to other enemies by a spread effect.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.duration is not None and self.duration <= 0:
            raise ValueError("Effect duration must be a positive integer.")
        if self.variance < 0:
            raise ValueError("Effect variance cannot be negative.")
        if not 0 <= self.spread_chance <= 1:
            raise ValueError("Spread chance must be between 0 and 1.")
        if self.effect_type == EffectType.RESISTANCE and not self.damage_type:
            raise ValueError("A resistance effect needs a damage type.")

    @property
    def effect_type(self) -> EffectType | None:
        """The effect type as a member of the closed enumeration, if known."""
        try:
            return EffectType(self.type)
        except ValueError:
            return None


EffectSpec.model_rebuild()


def compute_value(
    base_value: float,
    scaling: dict[StatType, float],
    variance: float,
    caster: Any,
    rng: random.Random,
) -> int:
    """
    Computes base + sum(stat * multiplier) + uniform variance, floored.

    Args:
        base_value (float): Flat part of the value.
        scaling (dict[StatType, float]): Caster stat multipliers.
        variance (float): Maximum random deviation.
        caster (Any): The character whose stats scale the value.
        rng (random.Random): The random source.

    Returns:
        int: The value.

    """
    value = base_value
    for stat, multiplier in scaling.items():
        value += get_stat(caster, stat) * multiplier
    if variance:
        value += rng.random() * variance * 2 - variance
    return math.floor(value)


def compute_effect_value(effect: EffectSpec, caster: Any, rng: random.Random) -> int:
    """Computes the value of an effect descriptor for a caster."""
    return compute_value(effect.base_value, effect.scaling, effect.variance, caster, rng)


# ============================================================================
# EFFECT HANDLERS
# ============================================================================

EffectHandler = Callable[[EffectSpec, Any, Any, random.Random, Any], EffectResult]


def _apply_heal(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    amount = max(0, compute_effect_value(effect, caster, rng))
    healed = target.heal(amount)
    return EffectResult(
        type=EffectType.HEAL.value,
        target=target.name,
        value=healed,
        message=f"{target.name} healed for {healed} HP",
    )


def _damage_after_defense(effect: EffectSpec, caster: Any, target: Any, rng: random.Random) -> int:
    value = compute_effect_value(effect, caster, rng)
    return max(1, value - effective_defense(target))


def _strike(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> int:
    """Deals effect damage, mitigated by the session when there is one."""
    damage = _damage_after_defense(effect, caster, target, rng)
    if session is not None:
        damage = session.incoming_damage(caster, target, damage)
    return target.take_damage(damage)


def _apply_damage(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    damage = _strike(effect, caster, target, rng, session)
    return EffectResult(
        type=EffectType.DAMAGE.value,
        target=target.name,
        value=damage,
        message=f"{target.name} takes {damage} damage",
    )


def _apply_modifier(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    effect_type = EffectType(effect.type)
    status_type, verb = MODIFIER_STATUSES[effect_type]
    value = compute_effect_value(effect, caster, rng)
    target.effects.apply_status(
        status_type,
        value,
        effect.duration or DEFAULT_MODIFIER_DURATION,
        kind=StatusKind.MODIFIER,
        source_id=caster.char_id,
    )
    return EffectResult(
        type=effect_type.value,
        target=target.name,
        value=value,
        message=f"{target.name} {verb} by {value}",
    )


def _apply_resistance(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    amount = int(effect.base_value)
    target.effects.apply_status(
        f"{effect.damage_type}_resistance",
        amount,
        effect.duration or DEFAULT_RESISTANCE_DURATION,
        kind=StatusKind.MODIFIER,
        source_id=caster.char_id,
    )
    return EffectResult(
        type=EffectType.RESISTANCE.value,
        target=target.name,
        value=amount,
        message=f"{target.name} gains {effect.damage_type} resistance",
    )


def _apply_stun(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    target.effects.apply_status(
        "stunned",
        1,
        effect.duration or DEFAULT_STUN_DURATION,
        kind=StatusKind.INCAPACITATING,
        source_id=caster.char_id,
    )
    return EffectResult(
        type=EffectType.STUN.value,
        target=target.name,
        value=1,
        message=f"{target.name} is stunned",
    )


def _apply_paralyze(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    target.effects.apply_status(
        "paralyzed",
        1,
        effect.duration or DEFAULT_PARALYZE_DURATION,
        kind=StatusKind.INCAPACITATING,
        source_id=caster.char_id,
    )
    return EffectResult(
        type=EffectType.PARALYZE.value,
        target=target.name,
        value=1,
        message=f"{target.name} is paralyzed",
    )


def _apply_dot(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    status_type = effect.status or "poison"
    per_turn = max(0, compute_effect_value(effect, caster, rng))
    target.effects.apply_status(
        status_type,
        per_turn,
        effect.duration or DEFAULT_DOT_DURATION,
        kind=StatusKind.DAMAGE_OVER_TIME,
        source_id=caster.char_id,
    )
    return EffectResult(
        type=EffectType.DOT.value,
        target=target.name,
        value=per_turn,
        message=f"{target.name} is afflicted with {status_type}",
    )


def _apply_vampiric(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    damage = _strike(effect, caster, target, rng, session)
    healed = caster.heal(math.floor(damage * effect.heal_ratio))
    return EffectResult(
        type=EffectType.VAMPIRIC.value,
        target=target.name,
        value=damage,
        message=f"{caster.name} drains {damage} HP from {target.name} and heals {healed}",
    )


def _apply_spread(effect: EffectSpec, caster: Any, target: Any, rng: random.Random, session: Any) -> EffectResult:
    damage = _strike(effect, caster, target, rng, session)
    spreads = bool(effect.spread_effect) and rng.random() < effect.spread_chance
    message = f"{target.name} takes {damage} damage"
    if spreads:
        message += ", and the effect spreads!"
    return EffectResult(
        type=EffectType.SPREAD.value,
        target=target.name,
        value=damage,
        message=message,
        spread=spreads,
        spread_effect=effect.spread_effect if spreads else None,
    )


EFFECT_HANDLERS: dict[EffectType, EffectHandler] = {
    EffectType.HEAL: _apply_heal,
    EffectType.DAMAGE: _apply_damage,
    EffectType.BUFF_ATTACK: _apply_modifier,
    EffectType.BUFF_DEFENSE: _apply_modifier,
    EffectType.DEBUFF_ATTACK: _apply_modifier,
    EffectType.DEBUFF_DEFENSE: _apply_modifier,
    EffectType.RESISTANCE: _apply_resistance,
    EffectType.STUN: _apply_stun,
    EffectType.PARALYZE: _apply_paralyze,
    EffectType.DOT: _apply_dot,
    EffectType.VAMPIRIC: _apply_vampiric,
    EffectType.SPREAD: _apply_spread,
}


def apply_effect(
    effect: EffectSpec,
    caster: Any,
    target: Any,
    rng: random.Random | None = None,
    session: Any = None,
) -> EffectResult:
    """
    Applies one effect descriptor from a caster to a target.

    Args:
        effect (EffectSpec): The effect to apply.
        caster (Any): The character using the ability.
        target (Any): The character receiving the effect.
        rng (random.Random | None): The random source.
        session (Any): The combat session, which mitigates damage dealt to
            the party. None outside of battle.

    Returns:
        EffectResult: The outcome of the application.

    """
    rng = rng or random.Random()
    effect_type = effect.effect_type
    handler = EFFECT_HANDLERS.get(effect_type) if effect_type else None
    if handler is None:
        log_warning(
            f"Unknown effect type: {effect.type}",
            {"caster": caster.name, "target": target.name},
        )
        return EffectResult(
            type=str(effect.type),
            target=target.name,
            success=False,
            message=f"Unknown effect type: {effect.type}",
        )
    result = handler(effect, caster, target, rng, session)
    log_debug(result.message, {"caster": caster.name, "effect": result.type})
    return result
