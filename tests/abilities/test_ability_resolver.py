"""
Tests for using abilities: usability checks, targeting, generic effects and
special behaviours.
"""

import random

import pytest
from abilities.ability import (
    Ability,
    AbilityCosts,
    SpecialEffect,
    SummonTemplate,
    Targeting,
    UsageRestrictions,
)
from abilities.catalog import get_ability
from abilities.effect_resolver import EffectSpec, apply_effect
from character.main import Character
from combat.session import CombatSession
from core.constants import (
    CharacterType,
    EffectType,
    Faction,
    SpecialKind,
    StatType,
    TargetType,
    TargetValidity,
)
from pydantic import ValidationError


class _FixedRandom(random.Random):
    """A random source whose `random()` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def hero():
    return Character(
        name="Bell",
        char_type=CharacterType.HERO,
        char_class="hero",
        stats={"willpower": 6},
        max_health=100,
        max_mana=50,
        max_stamina=20,
    )


@pytest.fixture
def ally():
    return Character(
        name="Welf",
        char_type=CharacterType.UNDERLING,
        char_class="warrior",
        level=2,
        max_health=100,
        max_mana=20,
        max_stamina=20,
    )


@pytest.fixture
def goblins():
    return [
        Character(name=f"Goblin {i}", char_type=CharacterType.ENEMY, max_health=40)
        for i in range(1, 4)
    ]


@pytest.fixture
def session(hero, ally, goblins):
    return CombatSession(hero, [ally], goblins, rng=random.Random(3))


def _ability(*effects, **kwargs) -> Ability:
    return Ability(id=kwargs.pop("id", "test"), name="Test", effects=effects, **kwargs)


# ============================================================================
# USABILITY
# ============================================================================


def test_can_use_reports_level_before_class(hero, session):
    """
    Test that the level requirement is checked before the class requirement.
    """
    taunt = get_ability("taunt")
    check = taunt.can_use(hero, session)
    assert not check.allowed
    assert check.reason == "Requires level 2"
    hero.level = 2
    assert taunt.can_use(hero, session).reason == "Requires warrior class"


def test_can_use_combat_permission(hero, session):
    """
    Test the combat and out-of-combat permissions.
    """
    calm = _ability(
        EffectSpec(type=EffectType.HEAL, base_value=5),
        usage=UsageRestrictions(in_combat=False),
    )
    assert calm.can_use(hero, session).reason == "Cannot be used in combat"
    assert calm.can_use(hero, None).allowed
    fierce = _ability(
        EffectSpec(type=EffectType.HEAL, base_value=5),
        usage=UsageRestrictions(out_of_combat=False),
    )
    assert fierce.can_use(hero, None).reason == "Can only be used in combat"


def test_refused_use_does_not_mutate(hero, goblins, session):
    """
    Test that a refused ability leaves caster and targets untouched.
    """
    hero.stats.set_resource("mana", 2)
    firebolt = get_ability("firebolt")
    result = firebolt.use(hero, [goblins[0]], session)
    assert not result.success
    assert result.message == "Requires 4 mana"
    assert hero.mana == 2
    assert goblins[0].health == 40


def test_health_cost_requires_spare_health(hero, session):
    """
    Test that a health cost can never be paid with the last hit points.
    """
    blood = _ability(
        EffectSpec(type=EffectType.BUFF_ATTACK, base_value=2, duration=2),
        costs=AbilityCosts(health=10),
        targeting=Targeting(type=TargetType.SELF, validity=TargetValidity.SELF),
    )
    hero.stats.set_resource("health", 10)
    assert blood.can_use(hero, session).reason == "Requires 10 health"
    hero.stats.set_resource("health", 11)
    assert blood.use(hero, [hero], session).success
    assert hero.health == 1


def test_material_cost_is_consumed(hero, session):
    """
    Test that an item ability needs and spends its material.
    """
    potion = get_ability("health_potion")
    assert potion.can_use(hero, session).reason == "Requires 1 health_potion"
    hero.inventory.add_material("health_potion", 1)
    hero.stats.set_resource("health", 20)
    result = potion.use(hero, [hero], session)
    assert result.success
    assert hero.health > 20
    assert hero.inventory.material_count("health_potion") == 0


def test_cooldown_counts_session_rounds(goblins, session):
    """
    Test that a cooldown blocks the ability until enough rounds have passed.
    """
    spider = goblins[0]
    web = get_ability("spider_web")
    assert web.use(spider, [session.hero], session).success
    session.round = 2
    assert web.can_use(spider, session).reason == "Cooldown: 1 turns"
    session.round = 3
    assert web.can_use(spider, session).allowed


# ============================================================================
# TARGETING
# ============================================================================


def test_valid_targets_by_validity(hero, ally, goblins, session):
    """
    Test the faction filters and the target count.
    """
    combatants = session.combatants()
    goblins[1].stats.set_resource("health", 0)

    single = _ability(EffectSpec(type=EffectType.DAMAGE, base_value=1))
    assert single.get_valid_targets(hero, combatants, session) == [goblins[0]]

    every = _ability(
        EffectSpec(type=EffectType.DAMAGE, base_value=1),
        targeting=Targeting(type=TargetType.ALL, validity=TargetValidity.ENEMIES, count="all"),
    )
    assert every.get_valid_targets(hero, combatants, session) == [goblins[0], goblins[2]]

    allies = _ability(
        EffectSpec(type=EffectType.HEAL, base_value=1),
        targeting=Targeting(type=TargetType.ALL, validity=TargetValidity.ALLIES, count="all"),
    )
    assert allies.get_valid_targets(hero, combatants, session) == [ally]

    party = _ability(
        EffectSpec(type=EffectType.HEAL, base_value=1),
        targeting=Targeting(
            type=TargetType.ALL, validity=TargetValidity.ALLIES_AND_SELF, count="all"
        ),
    )
    assert party.get_valid_targets(hero, combatants, session) == [hero, ally]


def test_valid_targets_without_session_use_default_factions(hero, goblins):
    """
    Test that heroes and underlings side with the player by default.
    """
    single = _ability(EffectSpec(type=EffectType.DAMAGE, base_value=1))
    assert single.get_valid_targets(goblins[0], [hero, *goblins]) == [hero]


# ============================================================================
# GENERIC EFFECTS
# ============================================================================


def test_heal_scales_with_stats(hero, ally, session):
    """
    Test that the basic heal adds willpower and intelligence scaling.
    """
    ally.stats.set_resource("health", 10)
    result = get_ability("basic_heal").use(hero, [ally], session)
    # 20 + 6 * 2 + 5 * 1, with up to 5 variance either way.
    assert result.success
    assert 32 <= result.results[0].value <= 42
    assert ally.health == 10 + result.results[0].value


def test_heal_clamped_at_max(hero, ally):
    """
    Test that healing never goes past max health.
    """
    ally.stats.set_resource("health", 95)
    result = apply_effect(EffectSpec(type=EffectType.HEAL, base_value=50), hero, ally)
    assert result.value == 5
    assert ally.health == 100


def test_damage_reduced_by_defense_to_minimum_one(hero, goblins):
    """
    Test that damage is reduced by flat defense but always deals 1.
    """
    goblins[0].defense = 10
    result = apply_effect(EffectSpec(type=EffectType.DAMAGE, base_value=5), hero, goblins[0])
    assert result.value == 1
    assert goblins[0].health == 39


def test_modifiers_become_statuses(hero, goblins):
    """
    Test that buffs and debuffs become timed statuses on the target.
    """
    apply_effect(
        EffectSpec(type=EffectType.DEBUFF_DEFENSE, base_value=3, duration=5), hero, goblins[0]
    )
    status = goblins[0].effects.get_status("defense_debuff")
    assert status is not None
    assert status.value == 3
    assert status.duration == 5
    assert status.source_id == hero.char_id


def test_resistance_default_duration(hero):
    """
    Test that a resistance records a typed status with the default duration.
    """
    apply_effect(
        EffectSpec(type=EffectType.RESISTANCE, damage_type="fire", base_value=4), hero, hero
    )
    status = hero.effects.get_status("fire_resistance")
    assert status is not None
    assert status.duration == 5


def test_stun_and_dot(hero, goblins, session):
    """
    Test that a stun incapacitates and a poison is attached with its damage.
    """
    apply_effect(EffectSpec(type=EffectType.STUN, duration=1), hero, goblins[0])
    assert goblins[0].effects.is_incapacitated()
    get_ability("poison").use(hero, [goblins[1]], session)
    poison = goblins[1].effects.get_status("poison")
    assert poison is not None
    assert poison.value == 5
    assert poison.duration == 4


def test_vampiric_heals_caster(hero, goblins):
    """
    Test that a vampiric effect heals the caster by a share of the damage.
    """
    hero.stats.set_resource("health", 50)
    bite = EffectSpec(
        type=EffectType.VAMPIRIC,
        base_value=12,
        heal_ratio=0.6,
        scaling={StatType.STRENGTH: 1.5},
    )
    result = apply_effect(bite, hero, goblins[0])
    # 12 + 5 * 1.5 = 19.5, floored.
    assert result.value == 19
    assert goblins[0].health == 21
    assert hero.health == 50 + 11


def test_spread_flag_follows_chance(hero, goblins):
    """
    Test that a spread effect reports whether it propagates.
    """
    spread = EffectSpec(
        type=EffectType.SPREAD,
        base_value=10,
        spread_chance=0.5,
        spread_effect=EffectSpec(type=EffectType.DAMAGE, base_value=4),
    )
    hit = apply_effect(spread, hero, goblins[0], _FixedRandom(0.1))
    assert hit.spread
    assert hit.spread_effect.base_value == 4
    miss = apply_effect(spread, hero, goblins[1], _FixedRandom(0.9))
    assert not miss.spread
    assert miss.spread_effect is None


def test_unknown_effect_type_is_a_failed_noop(hero, goblins):
    """
    Test that an unknown effect type fails without touching the target.
    """
    result = apply_effect(EffectSpec(type="teleport", base_value=10), hero, goblins[0])
    assert not result.success
    assert goblins[0].health == 40


def test_ability_template_is_immutable():
    """
    Test that abilities cannot be changed after creation.
    """
    firebolt = get_ability("firebolt")
    with pytest.raises(ValidationError):
        firebolt.name = "Icebolt"


def test_ability_requires_effects_or_special():
    """
    Test that an ability that does nothing is rejected.
    """
    with pytest.raises(ValueError):
        Ability(id="empty", name="Empty")


def test_target_count_must_be_positive():
    """
    Test that a targeting rule needs room for at least one target.
    """
    with pytest.raises(ValueError):
        Targeting(type=TargetType.MULTIPLE, count=0)
    with pytest.raises(ValueError):
        Targeting(type=TargetType.MULTIPLE, count=-2)
    assert Targeting(count="all").count == "all"


# ============================================================================
# SPECIAL BEHAVIOURS
# ============================================================================


def test_taunt_marks_targets(ally, goblins, session):
    """
    Test that a taunt marks enemies with the taunter as source.
    """
    result = get_ability("taunt").use(ally, goblins[:2], session)
    assert result.success
    for goblin in goblins[:2]:
        status = goblin.effects.get_status("taunted")
        assert status is not None
        assert status.source_id == ally.char_id
    assert not goblins[2].effects.has_status("taunted")


def test_cure_poison(hero, session):
    """
    Test that curing removes poison statuses and succeeds without one.
    """
    priest = Character(
        name="Naaza",
        char_type=CharacterType.UNDERLING,
        char_class="priest",
        level=3,
        max_mana=50,
    )
    hero.effects.apply_status("poison", 3, 3)
    cure = get_ability("cure_poison")
    result = cure.use(priest, [hero], session)
    assert result.success
    assert not hero.effects.has_status("poison")
    again = cure.use(priest, [hero], session)
    assert again.success
    assert again.results[0].value == 0


def test_resurrection_only_for_fallen(hero, ally):
    """
    Test that resurrection refuses a living target and revives a fallen one.
    """
    resurrection = get_ability("resurrection")
    healer = Character(
        name="Lili",
        char_type=CharacterType.UNDERLING,
        char_class="healer",
        level=10,
        max_mana=100,
    )
    session = CombatSession(hero, [healer, ally], [])
    refused = resurrection.use(healer, [ally], session)
    assert not refused.success
    ally.fall()
    revived = resurrection.use(healer, [ally], session)
    assert revived.success
    assert ally.health == 50


def test_berserker_rage(ally, session):
    """
    Test that berserker rage raises attack and halves defense.
    """
    ally.level = 10
    ally.defense = 6
    ally.stats.set_max("stamina", 20)
    ally.stats.set_resource("stamina", 20)
    result = get_ability("berserker_rage").use(ally, [ally], session)
    assert result.success
    # 10 + 5 * 1.5 = 17.5, floored.
    assert ally.effects.status_value("attack_buff") == 17
    assert ally.effects.status_value("defense_debuff") == 3
    assert ally.effects.has_status("berserker_rage")


def test_summon_joins_caster_side(hero, session):
    """
    Test that a summoned creature fights for its summoner.
    """
    call = Ability(
        id="call_test",
        name="Call",
        targeting=Targeting(type=TargetType.SELF, validity=TargetValidity.SELF),
        special=SpecialEffect(
            kind=SpecialKind.SUMMON,
            summon=SummonTemplate(name="Wisp", max_health=10, attack=3, duration=2),
        ),
    )
    result = call.use(hero, [hero], session)
    assert result.success
    assert len(session.summons) == 1
    wisp = next(iter(session.summons.values()))
    assert wisp.char_type == CharacterType.SUMMON
    assert session.faction_of(wisp) == Faction.PLAYER
    assert wisp in session.living_party()


def test_summon_outside_battle_fails(hero):
    """
    Test that summoning needs a battle to join.
    """
    call = Ability(
        id="call_test",
        name="Call",
        special=SpecialEffect(
            kind=SpecialKind.SUMMON,
            summon=SummonTemplate(name="Wisp", max_health=10, duration=2),
        ),
    )
    assert not call.use(hero, [hero], None).success


def test_spirit_arrow_ignores_defense(hero, goblins, session):
    """
    Test that a spirit arrow is not reduced by defense.
    """
    arrow = Ability(
        id="arrow_test",
        name="Arrow",
        special=SpecialEffect(kind=SpecialKind.SPIRIT_ARROW, base_value=15),
    )
    goblins[0].defense = 50
    result = arrow.use(hero, [goblins[0]], session)
    assert result.results[0].value == 15
    assert goblins[0].health == 25


def test_unknown_special_kind_is_a_failed_noop(hero, goblins, session):
    """
    Test that an unknown special kind fails without any change.
    """
    odd = Ability(id="odd", name="Odd", special=SpecialEffect(kind="dance"))
    result = odd.use(hero, goblins, session)
    assert not result.success
    assert all(goblin.health == 40 for goblin in goblins)
