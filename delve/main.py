"""
Main entry point for the dungeon combat engine.

This script builds a small party, rolls an encounter on the first dungeon
level and plays it out round by round, printing every event through the
shared rich console. The hero follows a simple scripted policy: heal when
hurt, use the first affordable ability, otherwise attack.
"""

import argparse
import logging
import random

from abilities.catalog import get_ability, get_abilities_for_class
from character import Character
from character.stat_deriver import apply_stat_bonuses
from combat import CombatSession, PlayerAction, choose_aftermath, generate_enemies, resolve_round
from core.constants import (
    AftermathChoice,
    CharacterType,
    CombatOutcome,
    CombatState,
    PlayerActionType,
)
from core.logging import setup_logging
from core.sheets import print_ability_sheet, print_character_sheet, print_round_events
from core.utils import cprint, crule


def build_party() -> tuple[Character, list[Character]]:
    """Creates the hero and two underlings at full strength."""
    hero = Character(
        name="Bell",
        char_type=CharacterType.HERO,
        race="dwarf",
        char_class="hero",
        level=2,
        stats={"strength": 7, "constitution": 7, "dexterity": 6},
        max_health=100,
        max_mana=30,
        max_stamina=30,
        gold=50,
        rations=2,
        materials={"health_potion": 2},
        abilities=["firebolt", "basic_heal"],
    )
    warrior = Character(
        name="Welf",
        char_type=CharacterType.UNDERLING,
        race="half-orc",
        char_class="warrior",
        level=2,
        stats={"strength": 8, "constitution": 7},
        max_health=90,
        max_mana=20,
        abilities=[ability.id for ability in get_abilities_for_class("warrior", 2)],
    )
    healer = Character(
        name="Lili",
        char_type=CharacterType.UNDERLING,
        race="elf",
        char_class="healer",
        level=2,
        stats={"willpower": 8, "intelligence": 6},
        max_health=70,
        max_mana=40,
        abilities=[ability.id for ability in get_abilities_for_class("healer", 2)],
    )
    for member in (hero, warrior, healer):
        apply_stat_bonuses(member)
        member.stats.clamp_all()
    return hero, [warrior, healer]


def choose_hero_action(session: CombatSession) -> PlayerAction:
    """Picks the hero's action for the round."""
    hero = session.hero
    if hero.health < hero.max_health * 0.4:
        heal = get_ability("basic_heal")
        if heal is not None and heal.can_use(hero, session).allowed:
            return PlayerAction(
                type=PlayerActionType.USE_ABILITY,
                ability_id=heal.id,
                target_id=hero.char_id,
            )
    for ability_id in hero.abilities:
        ability = get_ability(ability_id)
        if ability is None or ability.id == "basic_heal":
            continue
        if ability.can_use(hero, session).allowed:
            return PlayerAction(type=PlayerActionType.USE_ABILITY, ability_id=ability.id)
    return PlayerAction(type=PlayerActionType.ATTACK)


def run_demo(seed: int, max_rounds: int) -> None:
    """Plays one encounter to the end, or until the round limit."""
    rng = random.Random(seed)
    hero, underlings = build_party()
    enemies = generate_enemies(1, rng)
    session = CombatSession(hero, underlings, enemies, rng=rng, dungeon_level=1)

    crule(":crossed_swords:  Party", style="bold green")
    for member in session.party:
        print_character_sheet(member)
    for ability_id in hero.abilities:
        ability = get_ability(ability_id)
        if ability is not None:
            print_ability_sheet(ability)
    crule(":crossed_swords:  Enemies", style="bold red")
    for enemy in enemies:
        print_character_sheet(enemy)

    crule(":crossed_swords:  Combat Started", style="bold green")
    while session.state != CombatState.RESOLUTION and session.round <= max_rounds:
        crule(f"Round {session.round}", style="bold blue", characters="-")
        outcome = resolve_round(session, choose_hero_action(session))
        print_round_events(outcome.events)

    crule(f":crossed_swords:  Combat Finished: {session.outcome.value}", style="bold green")
    print_character_sheet(hero)
    if session.outcome == CombatOutcome.VICTORY:
        report = choose_aftermath(session, AftermathChoice.REST)
        cprint(report.message, style="bold blue")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Play a scripted dungeon encounter.")
    parser.add_argument("--seed", type=int, default=7, help="Random seed of the encounter.")
    parser.add_argument("--rounds", type=int, default=30, help="Maximum number of rounds.")
    parser.add_argument("--debug", action="store_true", help="Show engine debug logs.")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.debug else logging.INFO)
    try:
        run_demo(args.seed, args.rounds)
    except KeyboardInterrupt:
        cprint("")
        crule(":crossed_swords:  Combat Interrupted", style="bold red")
