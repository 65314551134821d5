"""
Tests for racial abilities: active uses, once-per-battle consumption and the
passive abilities triggered by the engine.
"""

import random

import pytest
from character.character_race import CharacterRace
from character.main import Character
from combat.session import CombatSession
from core.constants import CharacterType, StatType
from racial.racial_abilities import (
    RACIAL_ABILITIES,
    RacialAbility,
    apply_passive_racials,
    get_racial_ability,
    knockdown_chance,
    reset_battle_cooldowns,
    trigger_revival,
    use_racial_ability,
)


class _FixedRandom(random.Random):
    """A random source whose `random()` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def _hero(race: str, subspecies: str | None = None, **kwargs) -> Character:
    return Character(
        name="Hero",
        char_type=CharacterType.HERO,
        race=race,
        subspecies=subspecies,
        char_class="hero",
        max_health=100,
        **kwargs,
    )


@pytest.fixture
def enemies():
    return [
        Character(name=f"Kobold {i}", char_type=CharacterType.ENEMY, max_health=100)
        for i in range(1, 3)
    ]


def _session(hero: Character, enemies: list[Character], rng: random.Random | None = None) -> CombatSession:
    return CombatSession(hero, [], enemies, rng=rng or random.Random(1))


def test_subspecies_selects_breath():
    """
    Test that a dragonkin subspecies picks its own breath.
    """
    assert get_racial_ability(_hero("dragonkin", "blue")).id == "lightning_breath"
    assert get_racial_ability(_hero("dragonkin")).id == "fire_breath"
    assert get_racial_ability(_hero("human")) is None


def test_species_without_racial_is_refused(enemies):
    """
    Test that a human has nothing to use.
    """
    hero = _hero("human")
    result = use_racial_ability(hero, _session(hero, enemies))
    assert not result.success
    assert "no racial ability" in result.message


def test_unknown_racial_ability_is_refused(enemies):
    """
    Test that a race naming a missing racial ability is refused.
    """
    hero = _hero(CharacterRace(name="oddling", racial_ability="juggling"))
    result = use_racial_ability(hero, _session(hero, enemies))
    assert not result.success
    assert "Unknown racial ability" in result.message


def test_once_per_battle(enemies):
    """
    Test that an active racial ability is consumed until the battle resets.
    """
    hero = _hero("dwarf")
    session = _session(hero, enemies)
    assert use_racial_ability(hero, session).success
    assert hero.effects.status_value("defense_buff") == 5
    second = use_racial_ability(hero, session)
    assert not second.success
    assert "already been used" in second.message
    reset_battle_cooldowns(session)
    assert use_racial_ability(hero, session).success


def test_reset_single_character(enemies):
    """
    Test that resetting one character leaves the others consumed.
    """
    hero = _hero("dwarf")
    ally = Character(
        name="Ally", char_type=CharacterType.UNDERLING, race="dwarf", max_health=50
    )
    session = CombatSession(hero, [ally], enemies)
    use_racial_ability(hero, session)
    use_racial_ability(ally, session)
    reset_battle_cooldowns(session, hero)
    assert use_racial_ability(hero, session).success
    assert not use_racial_ability(ally, session).success


def test_passive_ability_cannot_be_used(enemies):
    """
    Test that a passive racial ability is not usable on demand.
    """
    hero = _hero("half-orc")
    result = use_racial_ability(hero, _session(hero, enemies))
    assert not result.success
    assert "passive" in result.message


def test_meditation_restores_resources(enemies):
    """
    Test that meditation restores a share of mana and stamina.
    """
    hero = _hero("elf", max_mana=50, max_stamina=20)
    hero.stats.set_resource("mana", 0)
    hero.stats.set_resource("stamina", 0)
    assert use_racial_ability(hero, _session(hero, enemies)).success
    assert hero.mana == 15
    assert hero.stamina == 6


def test_fey_companion_summons(enemies):
    """
    Test that a gnome summons a fey spirit on its side.
    """
    hero = _hero("gnome")
    session = _session(hero, enemies)
    assert use_racial_ability(hero, session).success
    spirits = [s for s in session.summons.values() if s.name == "Fey Spirit"]
    assert len(spirits) == 1
    assert spirits[0].max_health == 20


def test_gore_strikes_chosen_target(enemies):
    """
    Test that a minotaur's gore hits the chosen enemy for double attack.
    """
    hero = _hero("minotaur")
    session = _session(hero, enemies)
    result = use_racial_ability(hero, session, [enemies[1]])
    # (15 + 1 * 3) * 2.0 against no defense.
    assert result.results[0].value == 36
    assert enemies[1].health == 64
    assert enemies[0].health == 100


def test_knockdown_chance_clamped():
    """
    Test that the knockdown chance follows the size difference within bounds.
    """
    giant = _hero("giant", stats={"size": 8})
    small = Character(name="Imp", char_type=CharacterType.ENEMY, stats={"size": 1})
    normal = Character(name="Orc", char_type=CharacterType.ENEMY)
    huge = Character(name="Titan", char_type=CharacterType.ENEMY, stats={"size": 20})
    assert knockdown_chance(giant, normal, 0.5) == pytest.approx(0.8)
    assert knockdown_chance(giant, small, 0.5) == pytest.approx(0.9)
    assert knockdown_chance(giant, huge, 0.5) == pytest.approx(0.1)


def test_earthshaker_stuns_enemies(enemies):
    """
    Test that a successful knockdown stuns every enemy.
    """
    hero = _hero("giant")
    session = _session(hero, enemies, _FixedRandom(0.0))
    assert use_racial_ability(hero, session).success
    assert all(enemy.effects.is_incapacitated() for enemy in enemies)


def test_fire_breath_burns(enemies):
    """
    Test that fire breath damages every enemy and leaves a burn.
    """
    hero = _hero("dragonkin", "red")
    session = _session(hero, enemies)
    result = use_racial_ability(hero, session)
    # 10 + 5 * 1.5, floored.
    assert [r.value for r in result.results] == [17, 17]
    assert all(enemy.effects.has_status("burn") for enemy in enemies)


def test_lightning_breath_leaves_no_status(enemies):
    """
    Test that only fire breath leaves a lingering status.
    """
    hero = _hero("dragonkin", "blue")
    hero.stats.set(StatType.CONSTITUTION, 7)
    result = use_racial_ability(hero, _session(hero, enemies))
    assert [r.value for r in result.results] == [20, 20]
    assert not any(enemy.effects.active_effects for enemy in enemies)


def test_ferocity_revives_once(enemies):
    """
    Test that a half-orc gets back up once per battle.
    """
    hero = _hero("half-orc")
    session = _session(hero, enemies)
    hero.take_damage(500)
    result = trigger_revival(hero, session)
    assert result is not None and result.success
    assert hero.health == 10
    hero.take_damage(500)
    assert trigger_revival(hero, session) is None
    assert hero.health == 0


def test_revival_ignored_for_other_races(enemies):
    """
    Test that only on-death racial abilities trigger a revival.
    """
    hero = _hero("dwarf")
    hero.take_damage(500)
    assert trigger_revival(hero, _session(hero, enemies)) is None


def test_troll_regeneration_is_not_consumed(enemies):
    """
    Test that regeneration heals every round and stops at full health.
    """
    hero = _hero("troll")
    session = _session(hero, enemies)
    hero.stats.set_resource("health", 50)
    assert apply_passive_racials(hero, session).success
    assert apply_passive_racials(hero, session).success
    assert hero.health == 70
    hero.stats.set_resource("health", 100)
    assert apply_passive_racials(hero, session) is None


def test_unknown_racial_effect_is_a_failed_noop(enemies, monkeypatch):
    """
    Test that an effect tag missing from the dispatch table does nothing.
    """
    monkeypatch.setitem(
        RACIAL_ABILITIES,
        "stonework",
        RacialAbility(id="stonework", name="Stonework", effect="singing"),
    )
    hero = _hero("dwarf")
    session = _session(hero, enemies)
    result = use_racial_ability(hero, session)
    assert not result.success
    assert not hero.effects.active_effects
    assert not session.is_consumed(hero, "stonework")
