"""
Racial ability module for the combat engine.

Every species (and some subspecies) owns at most one racial ability. The
ability data names an effect tag; the behaviour of each tag is one entry of a
dispatch table. Active racial abilities can be used once per battle, the
use being recorded in the session's consumed-abilities set and cleared when
the battle ends.
"""

import math
from typing import Any, Callable

from abilities.ability import SummonTemplate
from abilities.results import AbilityResult, EffectResult
from abilities.special_handlers import summon_creature
from catchery import log_warning
from character.stat_deriver import base_attack, effective_defense, get_stat
from core.constants import RacialEffect, StatType
from core.logging import log_debug
from effects.status_effect import StatusKind
from pydantic import BaseModel, ConfigDict, Field

KNOCKDOWN_MIN_CHANCE = 0.1
KNOCKDOWN_MAX_CHANCE = 0.9
KNOCKDOWN_CHANCE_PER_SIZE = 0.1


class RacialAbility(BaseModel):
    """The racial ability granted by a species or subspecies."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier of the racial ability.")
    name: str = Field(description="Display name.")
    description: str = Field("", description="Short description.")
    effect: RacialEffect | str = Field(description="Which racial behaviour to run.")
    value: float = Field(0, description="Magnitude, meaning depends on the effect.")
    duration: int = Field(1, ge=1, description="Duration of any status applied.")
    passive: bool = Field(False, description="Triggered by the engine, never used directly.")
    once_per_battle: bool = Field(True, description="Consumed until the battle ends.")
    element: str | None = Field(None, description="Element of a breath attack.")
    summon: SummonTemplate | None = Field(None, description="Creature summoned.")

    @property
    def racial_effect(self) -> RacialEffect | None:
        """The effect as a member of the closed enumeration, if known."""
        try:
            return RacialEffect(self.effect)
        except ValueError:
            return None


def _breath(ability_id: str, name: str, element: str) -> RacialAbility:
    return RacialAbility(
        id=ability_id,
        name=name,
        description=f"Exhale {element} on every enemy",
        effect=RacialEffect.ELEMENTAL_BREATH,
        value=10,
        duration=2,
        element=element,
    )


RACIAL_ABILITIES: dict[str, RacialAbility] = {
    ability.id: ability
    for ability in (
        RacialAbility(
            id="stonework",
            name="Stonework",
            description="Harden your skin like stone",
            effect=RacialEffect.STONEWORK,
            value=5,
            duration=3,
        ),
        RacialAbility(
            id="meditation",
            name="Meditation",
            description="Restore mana and stamina",
            effect=RacialEffect.MEDITATION,
            value=0.3,
        ),
        RacialAbility(
            id="fey_companion",
            name="Fey Companion",
            description="Call a spirit ally",
            effect=RacialEffect.SUMMON,
            summon=SummonTemplate(
                name="Fey Spirit", max_health=20, attack=6, defense=2, duration=3
            ),
        ),
        RacialAbility(
            id="ferocity",
            name="Ferocity",
            description="Refuse to fall once per life",
            effect=RacialEffect.REVIVAL,
            value=0.1,
            passive=True,
        ),
        RacialAbility(
            id="gore",
            name="Gore",
            description="A charging horn strike",
            effect=RacialEffect.HEAVY_STRIKE,
            value=2.0,
        ),
        RacialAbility(
            id="earthshaker",
            name="Earthshaker",
            description="Knock down enemies smaller than you",
            effect=RacialEffect.KNOCKDOWN,
            value=0.5,
            duration=1,
        ),
        RacialAbility(
            id="troll_regeneration",
            name="Regeneration",
            description="Regenerate health every round",
            effect=RacialEffect.REGENERATION,
            value=0.1,
            passive=True,
            once_per_battle=False,
        ),
        _breath("fire_breath", "Fire Breath", "fire"),
        _breath("lightning_breath", "Lightning Breath", "lightning"),
        _breath("poison_breath", "Poison Breath", "poison"),
        _breath("frost_breath", "Frost Breath", "cold"),
    )
}

# Statuses left behind by breath attacks, as (status, per-turn damage).
BREATH_AFTERMATH: dict[str, tuple[str, int]] = {
    "fire": ("burn", 3),
}


def get_racial_ability(character: Any) -> RacialAbility | None:
    """Returns the racial ability of a character, if its species has one."""
    ability_id = character.racial_ability_id
    if ability_id is None:
        return None
    return RACIAL_ABILITIES.get(ability_id)


# ============================================================================
# HANDLERS
# ============================================================================

RacialHandler = Callable[[RacialAbility, Any, Any, list[Any]], AbilityResult]


def _stonework(ability: RacialAbility, character: Any, session: Any, targets: list[Any]) -> AbilityResult:
    value = int(ability.value)
    character.effects.apply_status(
        "defense_buff", value, ability.duration, kind=StatusKind.MODIFIER
    )
    return AbilityResult(
        success=True,
        message=f"{character.name}'s skin hardens like stone!",
        results=[
            EffectResult(
                type=RacialEffect.STONEWORK.value,
                target=character.name,
                value=value,
                message=f"Defense +{value} for {ability.duration} turns",
            )
        ],
    )


def _meditation(ability: RacialAbility, character: Any, session: Any, targets: list[Any]) -> AbilityResult:
    mana = character.stats.adjust_mana(math.floor(character.max_mana * ability.value))
    stamina = character.stats.adjust_stamina(
        math.floor(character.max_stamina * ability.value)
    )
    return AbilityResult(
        success=True,
        message=f"{character.name} meditates and recovers {mana} mana and {stamina} stamina",
        results=[
            EffectResult(
                type=RacialEffect.MEDITATION.value,
                target=character.name,
                value=mana + stamina,
            )
        ],
    )


def _summon(ability: RacialAbility, character: Any, session: Any, targets: list[Any]) -> AbilityResult:
    if ability.summon is None:
        return AbilityResult(success=False, message=f"{ability.name} has nothing to summon")
    summon = summon_creature(ability.summon, character, session)
    return AbilityResult(
        success=True,
        message=f"{character.name} calls upon a {summon.name}!",
        results=[
            EffectResult(
                type=RacialEffect.SUMMON.value,
                target=summon.name,
                value=ability.summon.duration,
            )
        ],
    )


def _heavy_strike(ability: RacialAbility, character: Any, session: Any, targets: list[Any]) -> AbilityResult:
    candidates = [t for t in targets if t.is_alive] or session.living_enemies()
    if not candidates:
        return AbilityResult(success=False, message=f"{character.name} has no target")
    target = candidates[0]
    power = math.floor(base_attack(character, session.rules) * ability.value)
    damage = target.take_damage(max(1, power - effective_defense(target)))
    return AbilityResult(
        success=True,
        message=f"{character.name} gores {target.name} for {damage} damage!",
        results=[
            EffectResult(
                type=RacialEffect.HEAVY_STRIKE.value,
                target=target.name,
                value=damage,
            )
        ],
    )


def knockdown_chance(character: Any, target: Any, base_chance: float) -> float:
    """
    Chance that a knockdown topples a target: bigger casters topple smaller
    targets more easily.
    """
    size_difference = get_stat(character, StatType.SIZE) - get_stat(target, StatType.SIZE)
    chance = base_chance + size_difference * KNOCKDOWN_CHANCE_PER_SIZE
    return min(KNOCKDOWN_MAX_CHANCE, max(KNOCKDOWN_MIN_CHANCE, chance))


def _knockdown(ability: RacialAbility, character: Any, session: Any, targets: list[Any]) -> AbilityResult:
    results = []
    for enemy in session.living_enemies():
        if session.rng.random() < knockdown_chance(character, enemy, ability.value):
            enemy.effects.apply_status(
                "stunned", 1, ability.duration, kind=StatusKind.INCAPACITATING,
                source_id=character.char_id,
            )
            results.append(
                EffectResult(
                    type=RacialEffect.KNOCKDOWN.value,
                    target=enemy.name,
                    value=1,
                    message=f"{enemy.name} is knocked down",
                )
            )
        else:
            results.append(
                EffectResult(
                    type=RacialEffect.KNOCKDOWN.value,
                    target=enemy.name,
                    success=False,
                    message=f"{enemy.name} keeps its footing",
                )
            )
    return AbilityResult(
        success=True,
        message=f"{character.name} shakes the earth!",
        results=results,
    )


def _regeneration(ability: RacialAbility, character: Any, session: Any, targets: list[Any]) -> AbilityResult:
    if not character.is_alive:
        return AbilityResult(success=False, message=f"{character.name} cannot regenerate")
    healed = character.heal(math.floor(character.max_health * ability.value))
    return AbilityResult(
        success=healed > 0,
        message=f"{character.name} regenerates {healed} HP",
        results=[
            EffectResult(
                type=RacialEffect.REGENERATION.value,
                target=character.name,
                value=healed,
            )
        ],
    )


def _elemental_breath(ability: RacialAbility, character: Any, session: Any, targets: list[Any]) -> AbilityResult:
    raw = math.floor(ability.value + get_stat(character, StatType.CONSTITUTION) * 1.5)
    aftermath = BREATH_AFTERMATH.get(ability.element or "")
    results = []
    for enemy in session.living_enemies():
        damage = enemy.take_damage(max(1, raw - effective_defense(enemy)))
        if aftermath and enemy.is_alive:
            status, per_turn = aftermath
            enemy.effects.apply_status(
                status, per_turn, ability.duration, kind=StatusKind.DAMAGE_OVER_TIME,
                source_id=character.char_id,
            )
        results.append(
            EffectResult(
                type=RacialEffect.ELEMENTAL_BREATH.value,
                target=enemy.name,
                value=damage,
                message=f"{enemy.name} takes {damage} {ability.element} damage",
            )
        )
    return AbilityResult(
        success=True,
        message=f"{character.name} breathes {ability.element}!",
        results=results,
    )


def _revival(ability: RacialAbility, character: Any, session: Any, targets: list[Any]) -> AbilityResult:
    if character.is_alive:
        return AbilityResult(success=False, message=f"{character.name} is still standing")
    character.revive(max(1, math.floor(character.max_health * ability.value)))
    return AbilityResult(
        success=True,
        message=f"{character.name}'s ferocity keeps them fighting with {character.health} HP!",
        results=[
            EffectResult(
                type=RacialEffect.REVIVAL.value,
                target=character.name,
                value=character.health,
            )
        ],
    )


RACIAL_HANDLERS: dict[RacialEffect, RacialHandler] = {
    RacialEffect.STONEWORK: _stonework,
    RacialEffect.MEDITATION: _meditation,
    RacialEffect.SUMMON: _summon,
    RacialEffect.REVIVAL: _revival,
    RacialEffect.HEAVY_STRIKE: _heavy_strike,
    RacialEffect.KNOCKDOWN: _knockdown,
    RacialEffect.REGENERATION: _regeneration,
    RacialEffect.ELEMENTAL_BREATH: _elemental_breath,
}


def _dispatch(
    ability: RacialAbility,
    character: Any,
    session: Any,
    targets: list[Any],
) -> AbilityResult:
    effect = ability.racial_effect
    handler = RACIAL_HANDLERS.get(effect) if effect else None
    if handler is None:
        log_warning(
            f"Unknown racial effect: {ability.effect}",
            {"ability": ability.id, "character": character.name},
        )
        return AbilityResult(
            success=False,
            message=f"Unknown racial effect: {ability.effect}",
        )
    result = handler(ability, character, session, targets)
    log_debug(result.message, {"racial": ability.id, "success": result.success})
    return result


# ============================================================================
# ENTRY POINTS
# ============================================================================


def use_racial_ability(
    character: Any,
    session: Any,
    targets: list[Any] | None = None,
) -> AbilityResult:
    """
    Uses the active racial ability of a character.

    Args:
        character (Any):
            The character using its racial ability.
        session (Any):
            The combat session, owner of the consumed-abilities set.
        targets (list[Any] | None):
            Chosen targets, for abilities that strike a single enemy.

    Returns:
        AbilityResult:
            The outcome. Refusals leave the battle untouched.

    """
    ability_id = character.racial_ability_id
    if ability_id is None:
        return AbilityResult(success=False, message=f"{character.name} has no racial ability")
    ability = RACIAL_ABILITIES.get(ability_id)
    if ability is None:
        log_warning(
            f"Unknown racial ability: {ability_id}",
            {"character": character.name, "race": character.race.name},
        )
        return AbilityResult(success=False, message=f"Unknown racial ability: {ability_id}")
    if ability.passive:
        return AbilityResult(success=False, message=f"{ability.name} is a passive ability")
    if ability.once_per_battle and session.is_consumed(character, ability.id):
        return AbilityResult(
            success=False,
            message=f"{ability.name} has already been used this battle",
        )
    result = _dispatch(ability, character, session, list(targets or []))
    if result.success and ability.once_per_battle:
        session.consume(character, ability.id)
    return result


def trigger_revival(character: Any, session: Any) -> AbilityResult | None:
    """
    Gives a fallen character with an on-death racial ability its one chance
    to get back up.

    Returns:
        AbilityResult | None: The revival outcome, None when nothing triggers.

    """
    ability = get_racial_ability(character)
    if ability is None or ability.racial_effect != RacialEffect.REVIVAL:
        return None
    if character.is_alive or session.is_consumed(character, ability.id):
        return None
    result = _dispatch(ability, character, session, [])
    if result.success:
        session.consume(character, ability.id)
    return result


def apply_passive_racials(character: Any, session: Any) -> AbilityResult | None:
    """Runs the end-of-round passive racial ability of a character, if any."""
    ability = get_racial_ability(character)
    if ability is None or ability.racial_effect != RacialEffect.REGENERATION:
        return None
    if not character.is_alive or character.health >= character.max_health:
        return None
    return _dispatch(ability, character, session, [])


def reset_battle_cooldowns(session: Any, character: Any = None) -> None:
    """
    Marks racial abilities as unused again. Called when a battle ends.

    Args:
        session (Any): The combat session.
        character (Any): Only reset this character, every character when None.

    """
    session.reset_consumed(character)
