"""
Tests for the decisions of underlings and enemies.
"""

import random

import pytest
from character.main import Character
from combat.party_ai import choose_enemy_target, choose_monster_ability, choose_party_action
from combat.session import CombatSession
from core.constants import CharacterType
from core.rules import CombatRules


def _underling(name, char_class, mana=30):
    return Character(
        name=name,
        char_type=CharacterType.UNDERLING,
        char_class=char_class,
        max_health=100,
        max_mana=mana,
    )


@pytest.fixture
def hero():
    return Character(name="Bell", char_type=CharacterType.HERO, char_class="hero", max_health=100)


@pytest.fixture
def enemies():
    return [
        Character(name=f"Kobold {i}", char_type=CharacterType.ENEMY, max_health=30)
        for i in range(1, 4)
    ]


def test_warrior_taunts_when_an_ally_is_wounded(hero, enemies):
    warrior = _underling("Welf", "warrior")
    session = CombatSession(hero, [warrior], enemies)
    assert choose_party_action(warrior, session).action == "attack"

    hero.take_damage(60)
    decision = choose_party_action(warrior, session)
    assert decision.action == "taunt"
    assert decision.target == warrior


def test_warrior_without_mana_attacks(hero, enemies):
    warrior = _underling("Welf", "warrior", mana=5)
    hero.take_damage(60)
    session = CombatSession(hero, [warrior], enemies)
    assert choose_party_action(warrior, session).action == "attack"


def test_healer_mends_most_wounded(hero, enemies):
    """The healer picks the ally with the lowest health ratio."""
    healer = _underling("Lili", "healer")
    warrior = _underling("Welf", "warrior")
    hero.take_damage(55)
    warrior.take_damage(80)
    session = CombatSession(hero, [healer, warrior], enemies)

    decision = choose_party_action(healer, session)
    assert decision.action == "heal"
    assert decision.target == warrior


def test_priest_acts_as_healer(hero, enemies):
    priest = _underling("Aiz", "priest")
    hero.take_damage(70)
    session = CombatSession(hero, [priest], enemies)
    assert choose_party_action(priest, session).action == "heal"


def test_mage_casts_aoe_on_crowded_field(hero, enemies):
    mage = _underling("Riveria", "mage")
    session = CombatSession(hero, [mage], enemies)
    assert choose_party_action(mage, session).action == "aoe"

    session.enemies = enemies[:2]
    assert choose_party_action(mage, session).action == "attack"


def test_idle_without_standing_enemies(hero, enemies):
    warrior = _underling("Welf", "warrior")
    session = CombatSession(hero, [warrior], enemies)
    session.defeated_this_round.update(enemy.char_id for enemy in enemies)
    assert choose_party_action(warrior, session).action == "idle"


def test_enemy_targets_taunt_holder(hero, enemies):
    warrior = _underling("Welf", "warrior")
    session = CombatSession(hero, [warrior], enemies, rng=random.Random(1))
    session.taunt_holder = warrior
    assert all(choose_enemy_target(enemy, session) == warrior for enemy in enemies)


def test_taunted_enemy_attacks_taunter(hero, enemies):
    warrior = _underling("Welf", "warrior")
    session = CombatSession(hero, [warrior], enemies, rng=random.Random(1))
    enemies[0].effects.apply_status("taunted", 0, 2, source_id=warrior.char_id)
    assert choose_enemy_target(enemies[0], session) == warrior


def test_enemy_avoids_sanctuary(hero, enemies):
    """Characters under sanctuary are skipped while anyone else can be hit."""
    healer = _underling("Lili", "healer")
    hero.effects.apply_status("sanctuary", 0, 2)
    session = CombatSession(hero, [healer], enemies, rng=random.Random(2))
    assert {choose_enemy_target(enemies[0], session) for _ in range(20)} == {healer}

    healer.take_damage(500)
    assert choose_enemy_target(enemies[0], session) == hero


def test_no_target_when_party_is_down(hero, enemies):
    session = CombatSession(hero, [], enemies)
    hero.take_damage(500)
    assert choose_enemy_target(enemies[0], session) is None


def test_monster_ability_roll(hero):
    goblin = Character(
        name="Goblin",
        char_type=CharacterType.ENEMY,
        max_health=30,
        abilities=["goblin_stab"],
    )
    always = CombatSession(hero, [], [goblin], rules=CombatRules(monster_ability_chance=1.0))
    never = CombatSession(hero, [], [goblin], rules=CombatRules(monster_ability_chance=0.0))

    assert choose_monster_ability(goblin, always).id == "goblin_stab"
    assert choose_monster_ability(goblin, never) is None
