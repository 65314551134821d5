"""
Special ability handlers for the combat engine.

Some abilities cannot be described as a list of generic effects: summoning an
ally, forcing enemies to attack the caster, curing a poison, bringing a fallen
ally back. Ability data only names the kind of special behaviour and its
parameters; each kind is implemented here as one case of a closed dispatch.
"""

import math
import random
from typing import Any, Callable

from catchery import log_warning
from character.main import Character
from core.constants import POISON_STATUSES, CharacterType, SpecialKind
from effects.status_effect import StatusKind

from .effect_resolver import compute_value
from .results import AbilityResult, EffectResult

SpecialHandler = Callable[[Any, Any, list[Any], Any, random.Random], AbilityResult]


def _special_value(ability: Any, caster: Any, rng: random.Random) -> int:
    special = ability.special
    return compute_value(special.base_value, special.scaling, special.variance, caster, rng)


def _mark_targets(
    ability: Any,
    caster: Any,
    targets: list[Any],
    status_type: str,
    verb: str,
) -> list[EffectResult]:
    duration = ability.special.duration
    results = []
    for target in targets:
        target.effects.apply_status(
            status_type,
            1,
            duration,
            kind=StatusKind.MARKER,
            source_id=caster.char_id,
        )
        results.append(
            EffectResult(
                type=str(ability.special.kind),
                target=target.name,
                value=duration,
                message=f"{target.name} {verb} for {duration} turns",
            )
        )
    return results


def summon_creature(template: Any, caster: Any, session: Any) -> Character:
    """
    Creates the creature described by a summon template and adds it to the
    caster's side of the battle.

    Args:
        template (Any): The SummonTemplate.
        caster (Any): The summoner, owner of the creature.
        session (Any): The combat session.

    Returns:
        Character: The summoned creature.

    """
    summon = Character(
        name=template.name,
        char_type=CharacterType.SUMMON,
        char_id=session.next_summon_id(caster, template.name),
        level=caster.level,
        max_health=template.max_health,
        attack=template.attack,
        defense=template.defense,
    )
    session.add_summon(summon, owner=caster, duration=template.duration)
    return summon


def _no_target(ability: Any, caster: Any) -> AbilityResult:
    return AbilityResult(
        success=False,
        message=f"{caster.name} has no target for {ability.name}",
    )


# ============================================================================
# HANDLERS
# ============================================================================


def _summon(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    template = ability.special.summon
    if session is None:
        return AbilityResult(
            success=False,
            message=f"{template.name} can only be summoned during a battle",
        )
    summon = summon_creature(template, caster, session)
    return AbilityResult(
        success=True,
        message=f"{caster.name} summons {template.name}!",
        results=[
            EffectResult(
                type=SpecialKind.SUMMON.value,
                target=summon.name,
                value=template.duration,
                message=f"{summon.name} joins the battle for {template.duration} turns",
            )
        ],
    )


def _taunt(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    if not targets:
        return _no_target(ability, caster)
    results = _mark_targets(ability, caster, targets, "taunted", f"must attack {caster.name}")
    return AbilityResult(
        success=True,
        message=f"{caster.name} taunts the enemies!",
        results=results,
    )


def _berserker_rage(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    duration = ability.special.duration
    attack_bonus = max(1, _special_value(ability, caster, rng))
    defense_penalty = math.floor(caster.defense / 2)
    caster.effects.apply_status("attack_buff", attack_bonus, duration, kind=StatusKind.MODIFIER)
    if defense_penalty:
        caster.effects.apply_status(
            "defense_debuff", defense_penalty, duration, kind=StatusKind.MODIFIER
        )
    caster.effects.apply_status("berserker_rage", 1, duration, kind=StatusKind.MARKER)
    return AbilityResult(
        success=True,
        message=f"{caster.name} enters a berserker rage!",
        results=[
            EffectResult(
                type=SpecialKind.BERSERKER_RAGE.value,
                target=caster.name,
                value=attack_bonus,
                message=f"Attack +{attack_bonus}, defense -{defense_penalty} for {duration} turns",
            )
        ],
    )


def _cure_poison(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    if not targets:
        return _no_target(ability, caster)
    target = targets[0]
    cured = [name for name in POISON_STATUSES if target.effects.remove_status(name)]
    if cured:
        return AbilityResult(
            success=True,
            message=f"{caster.name} cures {target.name} of poison!",
            results=[
                EffectResult(
                    type=SpecialKind.CURE_POISON.value,
                    target=target.name,
                    value=len(cured),
                    message=f"{target.name} is cleansed of {', '.join(cured)}",
                )
            ],
        )
    return AbilityResult(
        success=True,
        message=f"{caster.name} blesses {target.name} with purification",
        results=[
            EffectResult(
                type=SpecialKind.CURE_POISON.value,
                target=target.name,
                value=0,
                message=f"{target.name} was not poisoned",
            )
        ],
    )


def _sanctuary(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    if not targets:
        return _no_target(ability, caster)
    results = _mark_targets(ability, caster, targets[:1], "sanctuary", "is protected by sanctuary")
    return AbilityResult(
        success=True,
        message=f"{caster.name} grants sanctuary to {targets[0].name}!",
        results=results,
    )


def _haste(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    if not targets:
        return _no_target(ability, caster)
    results = _mark_targets(ability, caster, targets, "hasted", "gains double attacks")
    names = ", ".join(target.name for target in targets)
    return AbilityResult(
        success=True,
        message=f"{caster.name} casts haste on {names}!",
        results=results,
    )


def _polymorph(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    if not targets:
        return _no_target(ability, caster)
    target = targets[0]
    results = _mark_targets(ability, caster, [target], "polymorphed", "is helpless")
    return AbilityResult(
        success=True,
        message=f"{caster.name} polymorphs {target.name} into a sheep!",
        results=results,
    )


def _resurrection(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    if not targets:
        return _no_target(ability, caster)
    target = targets[0]
    if target.health > 0:
        return AbilityResult(
            success=False,
            message=f"{target.name} is not fallen and cannot be resurrected",
        )
    target.revive(math.floor(target.max_health * ability.special.ratio))
    return AbilityResult(
        success=True,
        message=f"{caster.name} resurrects {target.name}!",
        results=[
            EffectResult(
                type=SpecialKind.RESURRECTION.value,
                target=target.name,
                value=target.health,
                message=f"{target.name} rises with {target.health} HP!",
            )
        ],
    )


def _spirit_arrow(ability: Any, caster: Any, targets: list[Any], session: Any, rng: random.Random) -> AbilityResult:
    if not targets:
        return _no_target(ability, caster)
    target = targets[0]
    damage = target.take_damage(max(0, _special_value(ability, caster, rng)))
    return AbilityResult(
        success=True,
        message=(
            f"{caster.name}'s spirit arrow pierces {target.name} "
            f"for {damage} damage (ignores armor)!"
        ),
        results=[
            EffectResult(
                type=SpecialKind.SPIRIT_ARROW.value,
                target=target.name,
                value=damage,
                message=f"{target.name} takes {damage} damage",
            )
        ],
    )


SPECIAL_HANDLERS: dict[SpecialKind, SpecialHandler] = {
    SpecialKind.SUMMON: _summon,
    SpecialKind.TAUNT: _taunt,
    SpecialKind.BERSERKER_RAGE: _berserker_rage,
    SpecialKind.CURE_POISON: _cure_poison,
    SpecialKind.SANCTUARY: _sanctuary,
    SpecialKind.HASTE: _haste,
    SpecialKind.POLYMORPH: _polymorph,
    SpecialKind.RESURRECTION: _resurrection,
    SpecialKind.SPIRIT_ARROW: _spirit_arrow,
}


def resolve_special(
    ability: Any,
    caster: Any,
    targets: list[Any],
    session: Any,
    rng: random.Random,
) -> AbilityResult:
    """
    Runs the special behaviour of an ability.

    Args:
        ability (Any): The ability being used.
        caster (Any): The character using it.
        targets (list[Any]): The chosen targets.
        session (Any): The combat session, None outside of battle.
        rng (random.Random): The random source.

    Returns:
        AbilityResult: The outcome. An unknown kind is a failed no-op.

    """
    kind = ability.special.special_kind
    handler = SPECIAL_HANDLERS.get(kind) if kind else None
    if handler is None:
        log_warning(
            f"Unknown special ability kind: {ability.special.kind}",
            {"ability": ability.id, "caster": caster.name},
        )
        return AbilityResult(
            success=False,
            message=f"Unknown special ability kind: {ability.special.kind}",
        )
    return handler(ability, caster, targets, session, rng)
