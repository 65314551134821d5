"""
Tests for round resolution: phase order, kill credit, taunt, flight, defeat
and the end-of-round upkeep.
"""

import json
import random

import pytest
from character.main import Character
from combat.combat_manager import PlayerAction, resolve_round
from combat.events import EventKind
from combat.session import CombatSession, mitigate_damage
from core.constants import (
    CharacterType,
    CombatOutcome,
    CombatState,
    PlayerActionType,
    StatType,
)
from core.content import ContentRepository
from core.rules import CombatRules


class _FixedRandom(random.Random):
    """A random source whose `random()` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


QUIET_RULES = CombatRules(monster_ability_chance=0.0)

ATTACK = PlayerAction(type=PlayerActionType.ATTACK)
DEFEND = PlayerAction(type=PlayerActionType.DEFEND)
FLEE = PlayerAction(type=PlayerActionType.FLEE)


def _hero(**kwargs):
    kwargs.setdefault("max_health", 100)
    return Character(name="Bell", char_type=CharacterType.HERO, char_class="hero", **kwargs)


def _enemy(name, health=100, attack=0, **kwargs):
    return Character(
        name=name,
        char_type=CharacterType.ENEMY,
        max_health=health,
        attack=attack,
        **kwargs,
    )


def _events(outcome, kind):
    return [event for event in outcome.events if event.kind == kind]


@pytest.fixture
def hero():
    return _hero(gold=100)


# ============================================================================
# VICTORY AND KILL CREDIT
# ============================================================================


def test_victory_ends_round_without_counterattack(hero):
    """Killing the last enemy in the player phase ends the battle at once."""
    goblin = _enemy("Goblin", health=1, attack=50)
    session = CombatSession(hero, [], [goblin], rules=QUIET_RULES, rng=random.Random(1))
    outcome = resolve_round(session, ATTACK)

    assert outcome.outcome == CombatOutcome.VICTORY
    assert outcome.state == CombatState.RESOLUTION
    assert not session.in_combat
    assert hero.health == 100
    assert not [e for e in _events(outcome, EventKind.ATTACK) if e.actor == "Goblin"]
    assert len(_events(outcome, EventKind.KILL)) == 1
    # Hero kills pay at least the floor of the multiplied minimum.
    assert hero.inventory.gold >= 100 + 19


def test_hero_attack_damage(hero):
    """A level 1 hero with neutral strength hits for 12 to 18 before critical hits."""
    goblin = _enemy("Goblin", health=1000)
    session = CombatSession(hero, [], [goblin], rules=QUIET_RULES, rng=_FixedRandom(0.5))
    outcome = resolve_round(session, ATTACK)

    # 18 scaled by 0.85, and 50 is above the 12.5% critical chance.
    [attack] = [e for e in _events(outcome, EventKind.ATTACK) if e.actor == "Bell"]
    assert (attack.amount, attack.critical) == (15, False)
    assert goblin.health == 985

    # The lowest roll is 12, and it is also a critical hit for 1.5 times that.
    goblin = _enemy("Goblin", health=1000)
    session = CombatSession(_hero(), [], [goblin], rules=QUIET_RULES, rng=_FixedRandom(0.0))
    outcome = resolve_round(session, ATTACK)
    [attack] = [e for e in _events(outcome, EventKind.ATTACK) if e.actor == "Bell"]
    assert (attack.amount, attack.critical) == (18, True)


def test_hero_attack_damage_range():
    rng = random.Random(21)
    for _ in range(40):
        goblin = _enemy("Goblin", health=1000)
        session = CombatSession(_hero(), [], [goblin], rules=QUIET_RULES, rng=rng)
        outcome = resolve_round(session, ATTACK)
        [attack] = [e for e in _events(outcome, EventKind.ATTACK) if e.actor == "Bell"]
        if attack.critical:
            assert 18 <= attack.amount <= 27
        else:
            assert 12 <= attack.amount <= 18


def test_kill_is_credited_once(hero):
    """An enemy defeated by the hero is not credited again later in the round."""
    weak = _enemy("Goblin", health=1)
    tough = _enemy("Orc", health=1000)
    warrior = Character(
        name="Welf",
        char_type=CharacterType.UNDERLING,
        char_class="warrior",
        max_health=100,
    )
    session = CombatSession(hero, [warrior], [weak, tough], rules=QUIET_RULES, rng=random.Random(2))
    outcome = resolve_round(session, PlayerAction(type=PlayerActionType.ATTACK, target_id="goblin"))

    kills = _events(outcome, EventKind.KILL)
    assert [event.target for event in kills] == ["Goblin"]
    assert len(_events(outcome, EventKind.REWARD)) == 1
    assert session.enemies == [tough]
    # The warrior moved on to the next standing enemy.
    warrior_attacks = [e for e in _events(outcome, EventKind.ATTACK) if e.actor == "Welf"]
    assert warrior_attacks and warrior_attacks[0].target == "Orc"


def test_kills_by_several_underlings_each_credited_once(hero):
    """Three underlings each fell a different enemy in the same round."""
    kobolds = [_enemy(f"Kobold {i}", health=1) for i in range(1, 4)]
    underlings = [
        Character(
            name=f"Squire {i}",
            char_type=CharacterType.UNDERLING,
            char_class="warrior",
            max_health=50,
        )
        for i in range(1, 4)
    ]
    session = CombatSession(hero, underlings, kobolds, rules=QUIET_RULES, rng=random.Random(3))
    outcome = resolve_round(session, DEFEND)

    assert outcome.outcome == CombatOutcome.VICTORY
    assert sorted(event.target for event in _events(outcome, EventKind.KILL)) == [
        "Kobold 1",
        "Kobold 2",
        "Kobold 3",
    ]
    assert len(_events(outcome, EventKind.REWARD)) == 3
    assert session.enemies == []


def test_same_named_enemies_are_told_apart(hero):
    """Enemies sharing a name get distinct ids, so each kill is credited."""
    goblins = [_enemy("Goblin", health=1) for _ in range(3)]
    underlings = [
        Character(
            name=f"Squire {i}",
            char_type=CharacterType.UNDERLING,
            char_class="warrior",
            max_health=50,
        )
        for i in range(1, 4)
    ]
    session = CombatSession(hero, underlings, goblins, rules=QUIET_RULES, rng=random.Random(3))
    assert [goblin.char_id for goblin in goblins] == ["goblin", "goblin_2", "goblin_3"]

    outcome = resolve_round(session, DEFEND)
    assert outcome.outcome == CombatOutcome.VICTORY
    assert len(_events(outcome, EventKind.KILL)) == 3
    assert len(_events(outcome, EventKind.REWARD)) == 3
    assert all(goblin.health == 0 for goblin in goblins)


def test_status_damage_kill_counts_as_victory(hero):
    """Damage over time at the end of the round can win the battle."""
    goblin = _enemy("Goblin", health=3)
    goblin.effects.apply_status("poison", 5, 3)
    session = CombatSession(hero, [], [goblin], rules=QUIET_RULES, rng=random.Random(4))
    outcome = resolve_round(session, DEFEND)

    assert outcome.outcome == CombatOutcome.VICTORY
    assert len(_events(outcome, EventKind.KILL)) == 1


def test_resolved_battle_refuses_more_rounds(hero):
    """Once the battle is over further rounds change nothing."""
    goblin = _enemy("Goblin", health=1)
    session = CombatSession(hero, [], [goblin], rules=QUIET_RULES, rng=random.Random(1))
    resolve_round(session, ATTACK)
    gold = hero.inventory.gold

    outcome = resolve_round(session, ATTACK)
    assert outcome.outcome == CombatOutcome.VICTORY
    assert [event.kind for event in outcome.events] == [EventKind.FAILURE]
    assert hero.inventory.gold == gold


# ============================================================================
# REFUSED ACTIONS
# ============================================================================


def test_refused_ability_aborts_round(hero):
    """A refused action leaves the battle untouched so the player can choose again."""
    hero.abilities = ["firebolt"]
    goblin = _enemy("Goblin", attack=50)
    session = CombatSession(hero, [], [goblin], rules=QUIET_RULES, rng=random.Random(5))
    outcome = resolve_round(
        session, PlayerAction(type=PlayerActionType.USE_ABILITY, ability_id="firebolt")
    )

    assert outcome.state == CombatState.PLAYER_TURN
    assert outcome.outcome == CombatOutcome.ONGOING
    assert session.round == 1
    assert hero.health == 100
    assert goblin.health == 100
    assert _events(outcome, EventKind.FAILURE)


def test_unknown_ability_is_refused(hero):
    """Abilities the hero does not know cannot be used."""
    goblin = _enemy("Goblin")
    session = CombatSession(hero, [], [goblin], rules=QUIET_RULES, rng=random.Random(5))
    outcome = resolve_round(
        session, {"type": "use_ability", "ability_id": "meteor_swarm"}
    )
    assert outcome.state == CombatState.PLAYER_TURN
    assert "does not know" in _events(outcome, EventKind.FAILURE)[0].message


# ============================================================================
# FLIGHT AND DEFEAT
# ============================================================================


def test_successful_flight_ends_battle(hero):
    """A successful flight ends the battle before any enemy acts."""
    goblin = _enemy("Goblin", attack=50)
    rules = CombatRules(flee_chance=1.0, monster_ability_chance=0.0)
    session = CombatSession(hero, [], [goblin], rules=rules, rng=random.Random(6))
    outcome = resolve_round(session, FLEE)

    assert outcome.outcome == CombatOutcome.FLED
    assert hero.health == 100
    assert not _events(outcome, EventKind.ATTACK)


def test_failed_flight_skips_party_phase(hero):
    """After a failed flight only the enemies act."""
    goblin = _enemy("Goblin", attack=5)
    warrior = Character(
        name="Welf",
        char_type=CharacterType.UNDERLING,
        char_class="warrior",
        max_health=100,
    )
    rules = CombatRules(flee_chance=0.0, monster_ability_chance=0.0)
    session = CombatSession(hero, [warrior], [goblin], rules=rules, rng=random.Random(6))
    outcome = resolve_round(session, FLEE)

    assert outcome.outcome == CombatOutcome.ONGOING
    attackers = {event.actor for event in _events(outcome, EventKind.ATTACK)}
    assert attackers == {"Goblin"}
    assert goblin.health == 100
    assert session.round == 2


def test_defeat_applies_penalty():
    """A wiped party loses a fifth of its gold and is revived at a fifth of its health."""
    hero = _hero(gold=100)
    hero.take_damage(99)
    ogre = _enemy("Ogre", health=1000, attack=500)
    session = CombatSession(hero, [], [ogre], rules=QUIET_RULES, rng=random.Random(7))
    outcome = resolve_round(session, DEFEND)

    assert outcome.outcome == CombatOutcome.DEFEAT
    assert outcome.state == CombatState.RESOLUTION
    assert _events(outcome, EventKind.FALL)
    assert hero.inventory.gold == 80
    assert hero.health == 20


# ============================================================================
# TAUNT AND MITIGATION
# ============================================================================


def test_taunt_clears_when_holder_falls():
    """Enemies attack the taunt holder; once it falls the others pick new targets."""
    hero = _hero()
    hero.take_damage(60)
    warrior = Character(
        name="Welf",
        char_type=CharacterType.UNDERLING,
        char_class="warrior",
        max_health=10,
        max_mana=20,
    )
    brute = _enemy("Brute", health=1000, attack=1000)
    imp = _enemy("Imp", health=1000, attack=5)
    session = CombatSession(hero, [warrior], [brute, imp], rules=QUIET_RULES, rng=random.Random(8))
    outcome = resolve_round(session, DEFEND)

    assert warrior.mana == 12
    assert not warrior.is_alive
    attacks = {event.actor: event.target for event in _events(outcome, EventKind.ATTACK)}
    assert attacks["Brute"] == "Welf"
    assert attacks["Imp"] == "Bell"
    assert any("falls" in event.message for event in _events(outcome, EventKind.TAUNT))
    assert session.taunt_holder is None
    assert outcome.outcome == CombatOutcome.ONGOING


def test_mitigation_order(hero):
    """Defend halves, defense scales, the taunt holder takes a quarter less."""
    hero.stats.set(StatType.DEXTERITY, 9)
    session = CombatSession(hero, [], [_enemy("Goblin")])
    session.defending.add(hero.char_id)
    session.taunt_holder = hero

    # 100 -> 50 defending -> 42 with a defense bonus of 3 -> 31 for the holder.
    assert mitigate_damage(session, hero, 100) == 31


def test_mitigation_floor(hero):
    """Huge defense still lets a tenth of the damage through."""
    hero.stats.set(StatType.DEXTERITY, 50)
    session = CombatSession(hero, [], [_enemy("Goblin")])
    assert mitigate_damage(session, hero, 100) == 10


def test_polymorphed_enemy_deals_one_damage(hero):
    """A polymorphed enemy cannot use abilities and hits for 1."""
    brute = _enemy("Brute", health=1000, attack=1000)
    brute.effects.apply_status("polymorphed", 0, 2)
    session = CombatSession(hero, [], [brute], rules=QUIET_RULES, rng=random.Random(9))
    resolve_round(session, DEFEND)
    assert hero.health == 99


# ============================================================================
# ABILITIES IN THE ROUND
# ============================================================================


def test_spread_reaches_other_enemies():
    """A spreading ability applies its secondary effect to every other enemy."""
    archer = Character(
        name="Bell",
        char_type=CharacterType.HERO,
        char_class="archer",
        level=7,
        max_health=100,
        max_stamina=20,
        abilities=["explosive_shot"],
    )
    wolves = [_enemy(f"Wolf {i}") for i in range(1, 4)]
    session = CombatSession(archer, [], wolves, rules=QUIET_RULES, rng=_FixedRandom(0.5))
    outcome = resolve_round(
        session, PlayerAction(type=PlayerActionType.USE_ABILITY, ability_id="explosive_shot")
    )

    assert [wolf.health for wolf in wolves] == [78, 94, 94]
    assert {event.target for event in _events(outcome, EventKind.SPREAD)} == {"Wolf 2", "Wolf 3"}
    assert archer.stamina == 14


def test_loaded_ability_is_usable_in_battle(tmp_path):
    """Abilities loaded from JSON files can be used like catalog ones."""
    record = {
        "id": "ember_test",
        "name": "Ember",
        "category": "spell",
        "effects": [{"type": "damage", "base_value": 7}],
    }
    (tmp_path / "embers.json").write_text(json.dumps([record]))
    ContentRepository().reload(tmp_path)

    hero = _hero(abilities=["ember_test"])
    goblin = _enemy("Goblin")
    session = CombatSession(hero, [], [goblin], rules=QUIET_RULES, rng=random.Random(12))
    resolve_round(session, PlayerAction(type=PlayerActionType.USE_ABILITY, ability_id="ember_test"))

    assert goblin.health == 93


def test_enemy_ability_applies_status(hero):
    """Monster abilities go through the same resolver as the party's."""
    goblin = _enemy("Goblin", health=1000, abilities=["goblin_stab"])
    rules = CombatRules(monster_ability_chance=1.0)
    session = CombatSession(hero, [], [goblin], rules=rules, rng=random.Random(10))
    resolve_round(session, ATTACK)

    # 8 from the stab, 2 from the first bleed tick.
    assert hero.health == 90
    assert hero.effects.get_status("bleed").remaining == 2


def test_defend_halves_enemy_ability_damage(hero):
    """Ability damage from enemies obeys the same defend rule as plain attacks."""
    goblin = _enemy("Goblin", health=1000, abilities=["goblin_stab"])
    rules = CombatRules(monster_ability_chance=1.0)
    session = CombatSession(hero, [], [goblin], rules=rules, rng=random.Random(10))
    outcome = resolve_round(session, DEFEND)

    # 4 from the halved stab, 2 from the bleed.
    assert hero.health == 94
    assert any(event.message == "  Bell takes 4 damage" for event in outcome.events)


def test_enemy_area_ability_hits_taunt_holder():
    """A multi-target enemy ability strikes the taunt holder first."""
    hero = _hero()
    hero.take_damage(60)
    mage = Character(
        name="Riveria",
        char_type=CharacterType.UNDERLING,
        char_class="mage",
        max_health=100,
        max_mana=30,
    )
    warrior = Character(
        name="Welf",
        char_type=CharacterType.UNDERLING,
        char_class="warrior",
        max_health=100,
        max_mana=20,
    )
    orc = _enemy("Orc", health=1000, abilities=["orc_cleave"])
    rules = CombatRules(monster_ability_chance=1.0)
    session = CombatSession(hero, [mage, warrior], [orc], rules=rules, rng=random.Random(13))
    outcome = resolve_round(session, DEFEND)

    assert _events(outcome, EventKind.TAUNT)
    assert warrior.health < 100
    assert hero.health < 40
    assert mage.health == 100


def test_enemy_stun_costs_the_next_turn(hero):
    """A stun cast during the enemy phase still stops the victim's next action."""
    spider = _enemy("Spider", health=10000, abilities=["spider_web"])
    rules = CombatRules(monster_ability_chance=1.0)
    session = CombatSession(hero, [], [spider], rules=rules, rng=random.Random(14))

    resolve_round(session, DEFEND)
    assert hero.effects.is_incapacitated()

    outcome = resolve_round(session, ATTACK)
    assert [event.actor for event in _events(outcome, EventKind.SKIP)] == ["Bell"]
    assert spider.health == 10000
    assert not hero.effects.is_incapacitated()

    resolve_round(session, ATTACK)
    assert spider.health < 10000


def test_incapacitated_hero_skips_turn(hero):
    """A stunned hero loses the action but the round goes on."""
    hero.effects.apply_status("stunned", 0, 1)
    goblin = _enemy("Goblin", attack=5)
    session = CombatSession(hero, [], [goblin], rules=QUIET_RULES, rng=random.Random(11))
    outcome = resolve_round(session, ATTACK)

    assert _events(outcome, EventKind.SKIP)
    assert goblin.health == 100
    assert session.round == 2
    assert not hero.effects.is_incapacitated()


# ============================================================================
# SUMMONS
# ============================================================================


def test_summons_expire_and_leave_party(hero):
    """Summons count down each round and are removed when their time runs out."""
    session = CombatSession(hero, [], [_enemy("Goblin")])
    sprite = Character(name="Sprite", char_type=CharacterType.SUMMON, max_health=20)
    session.add_summon(sprite, hero, 2)

    assert sprite in session.party
    assert session.expire_summons() == []
    assert session.expire_summons() == [sprite]
    assert sprite not in session.party


def test_finish_dismisses_summons(hero):
    """Ending the battle dismisses summons and clears party statuses."""
    session = CombatSession(hero, [], [_enemy("Goblin")])
    session.add_summon(
        Character(name="Sprite", char_type=CharacterType.SUMMON, max_health=20), hero, 5
    )
    hero.effects.apply_status("poison", 2, 3)
    session.finish(CombatOutcome.VICTORY)

    assert session.summons == {}
    assert not hero.effects.active_effects
    assert not session.in_combat
