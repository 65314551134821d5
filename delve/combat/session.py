"""
Combat session module for the combat engine.

A CombatSession is the explicit context of one encounter: who fights on each
side, the round counter, per-round flags such as defending and taunt, the
cooldown ledger and the consumed-abilities set. It is created when the
encounter starts and discarded when it resolves.
"""

import math
import random
from types import MappingProxyType
from typing import Any, Mapping

from character.main import Character
from character.stat_deriver import defense_bonus
from core.constants import CombatOutcome, CombatState, Faction, default_faction
from core.logging import log_debug, log_warning
from core.rules import DEFAULT_RULES, CombatRules

from .events import CombatEvent, EventKind


class CombatSession:
    """
    Shared state of an encounter, passed to every ability and orchestrator
    call.

    Attributes:
        hero (Character):
            The player's character.
        underlings (list[Character]):
            The hero's recruited party members.
        enemies (list[Character]):
            Enemies still on the field, in encounter order.
        rules (CombatRules):
            Numeric design parameters of the battle.
        rng (random.Random):
            The random source used by every roll of the battle.
        dungeon_level (int):
            The depth at which the battle takes place.
        round (int):
            The current round, starting at 1.
        state (CombatState):
            The phase the battle is in.
        outcome (CombatOutcome):
            How the battle ended, ONGOING while it lasts.
        defending (set[str]):
            Ids of the characters defending this round.
        taunt_holder (Character | None):
            The warrior all enemies must attack this round.
        defeated_this_round (set[str]):
            Ids of the enemies already defeated during this round.
        fallen (set[str]):
            Ids of the party members who have fallen and not been revived.
        events (list[CombatEvent]):
            Events of the round being resolved.

    """

    def __init__(
        self,
        hero: Character,
        underlings: list[Character] | None = None,
        enemies: list[Character] | None = None,
        rules: CombatRules | None = None,
        rng: random.Random | None = None,
        dungeon_level: int = 1,
        in_combat: bool = True,
    ) -> None:
        self.hero = hero
        self.underlings = list(underlings or [])
        self.enemies = list(enemies or [])
        self.rules = rules or DEFAULT_RULES
        self.rng = rng or random.Random()
        self.dungeon_level = dungeon_level
        self.in_combat = in_combat
        self._ensure_unique_ids()

        self.round = 1
        self.state = CombatState.SETUP
        self.outcome = CombatOutcome.ONGOING
        self.defending: set[str] = set()
        self.taunt_holder: Character | None = None
        self.defeated_this_round: set[str] = set()
        self.fallen: set[str] = set()
        self.events: list[CombatEvent] = []

        self.summons: dict[str, Character] = {}
        self._summon_turns: dict[str, int] = {}
        self._summon_counter = 0
        self._cooldowns: dict[tuple[str, str], int] = {}
        self._consumed: set[tuple[str, str]] = set()
        self._factions: Mapping[str, Faction] = MappingProxyType(self._resolve_factions())

    # ============================================================================
    # FACTIONS
    # ============================================================================

    def _ensure_unique_ids(self) -> None:
        """
        Gives every combatant a distinct id. A repeated id gets a numeric
        suffix, the way encounters number their enemies.
        """
        seen: set[str] = set()
        for character in [self.hero, *self.underlings, *self.enemies]:
            base = character.char_id
            index = 2
            while character.char_id in seen:
                character.char_id = f"{base}_{index}"
                index += 1
            if character.char_id != base:
                log_warning(
                    f"Duplicate combatant id '{base}', renamed to '{character.char_id}'",
                    {"name": character.name},
                )
            seen.add(character.char_id)

    def _resolve_factions(self) -> dict[str, Faction]:
        factions = {member.char_id: Faction.PLAYER for member in self.party}
        for enemy in self.enemies:
            factions[enemy.char_id] = Faction.ENEMY
        return factions

    def faction_of(self, character: Any) -> Faction:
        """
        Returns the side a combatant fights on. Characters unknown to the
        session get the default faction of their type.
        """
        faction = self._factions.get(character.char_id)
        if faction is None:
            return default_faction(character.char_type)
        return faction

    # ============================================================================
    # PARTICIPANTS
    # ============================================================================

    @property
    def party(self) -> list[Character]:
        """The hero, the underlings and the active summons, in party order."""
        return [self.hero, *self.underlings, *self.summons.values()]

    def living_party(self) -> list[Character]:
        return [member for member in self.party if member.is_alive]

    def party_defeated(self) -> bool:
        """True when the hero and every underling are down."""
        return all(not member.is_alive for member in [self.hero, *self.underlings])

    def living_enemies(self) -> list[Character]:
        return [enemy for enemy in self.enemies if enemy.is_alive]

    def combatants(self) -> list[Character]:
        """Everyone taking part in the battle."""
        return [*self.party, *self.enemies]

    def find(self, char_id: str | None) -> Character | None:
        """Returns the combatant with the given id, if any."""
        if char_id is None:
            return None
        for character in self.combatants():
            if character.char_id == char_id:
                return character
        return None

    def is_defending(self, character: Character) -> bool:
        return character.char_id in self.defending

    def incoming_damage(self, source: Any, target: Any, damage: int) -> int:
        """
        Damage a blow deals once the defend and taunt rules are applied.
        Only blows from the enemy side landing on the party are mitigated.
        """
        if self.faction_of(source) == Faction.ENEMY and self.faction_of(target) == Faction.PLAYER:
            return mitigate_damage(self, target, damage)
        return damage

    # ============================================================================
    # SUMMONS
    # ============================================================================

    def next_summon_id(self, caster: Any, name: str) -> str:
        self._summon_counter += 1
        slug = name.lower().replace(" ", "_")
        return f"{caster.char_id}_{slug}_{self._summon_counter}"

    def add_summon(self, summon: Character, owner: Any, duration: int) -> None:
        """
        Adds a summoned creature to its owner's side for a number of rounds.

        The faction lookup is replaced by a new frozen mapping that also
        covers the creature.
        """
        self.summons[summon.char_id] = summon
        self._summon_turns[summon.char_id] = duration
        factions = dict(self._factions)
        factions[summon.char_id] = self.faction_of(owner)
        self._factions = MappingProxyType(factions)
        log_debug(
            f"{summon.name} summoned by {owner.name}",
            {"summon": summon.char_id, "duration": duration},
        )

    def expire_summons(self) -> list[Character]:
        """
        Counts down summon durations, removing the creatures whose time ran
        out or who were defeated.

        Returns:
            list[Character]: The creatures that left the battle.

        """
        expired = []
        for char_id in list(self.summons):
            self._summon_turns[char_id] -= 1
            summon = self.summons[char_id]
            if self._summon_turns[char_id] <= 0 or not summon.is_alive:
                expired.append(self.summons.pop(char_id))
                del self._summon_turns[char_id]
        return expired

    # ============================================================================
    # COOLDOWNS AND CONSUMED ABILITIES
    # ============================================================================

    def last_used(self, character: Any, ability_id: str) -> int | None:
        """Round in which a character last used an ability, None if never."""
        return self._cooldowns.get((character.char_id, ability_id))

    def record_use(self, character: Any, ability_id: str) -> None:
        self._cooldowns[(character.char_id, ability_id)] = self.round

    def is_consumed(self, character: Any, ability_id: str) -> bool:
        return (character.char_id, ability_id) in self._consumed

    def consume(self, character: Any, ability_id: str) -> None:
        self._consumed.add((character.char_id, ability_id))

    def reset_consumed(self, character: Any = None) -> None:
        """Clears consumed abilities of one character, or of everyone."""
        if character is None:
            self._consumed.clear()
            return
        self._consumed = {
            entry for entry in self._consumed if entry[0] != character.char_id
        }

    # ============================================================================
    # ROUND BOOKKEEPING
    # ============================================================================

    def start_round(self) -> None:
        """Clears the per-round flags, the turn markers and the round log."""
        self.defending.clear()
        self.defeated_this_round.clear()
        self.events = []
        self.state = CombatState.PLAYER_TURN
        for character in self.combatants():
            character.effects.start_round()
        self.record(EventKind.ROUND_START, message=f"Round {self.round} begins")

    def record(
        self,
        kind: EventKind,
        actor: Any = None,
        target: Any = None,
        amount: int = 0,
        message: str = "",
        critical: bool = False,
    ) -> CombatEvent:
        """Appends an event to the round log and returns it."""
        event = CombatEvent(
            kind=kind,
            actor=actor.name if actor is not None else None,
            target=target.name if target is not None else None,
            amount=amount,
            critical=critical,
            message=message,
        )
        self.events.append(event)
        log_debug(event.message, {"kind": kind.value, "round": self.round})
        return event

    def finish(self, outcome: CombatOutcome) -> None:
        """
        Ends the battle: clears battle-scoped state, dismisses summons and
        removes lingering statuses from the party.
        """
        self.outcome = outcome
        self.state = CombatState.RESOLUTION
        self.in_combat = False
        self.taunt_holder = None
        self.defending.clear()
        self.summons.clear()
        self._summon_turns.clear()
        self._cooldowns.clear()
        for member in [self.hero, *self.underlings]:
            member.effects.clear()
        log_debug(f"Battle ends: {outcome.value}", {"round": self.round})


def mitigate_damage(session: CombatSession, target: Character, damage: int) -> int:
    """
    Reduces the damage of an enemy blow: halved against a defending
    character, scaled by the target's defense bonus, and reduced further
    against the taunt holder.

    Args:
        session (CombatSession): The combat session.
        target (Character): The party member being struck.
        damage (int): The rolled damage.

    Returns:
        int: The damage to apply.

    """
    rules = session.rules
    if session.is_defending(target):
        damage = math.floor(damage * rules.defend_multiplier)
    bonus = defense_bonus(target)
    if bonus != 0:
        multiplier = max(rules.minimum_damage_taken, 1 - bonus * rules.defense_mitigation_per_point)
        damage = math.floor(damage * multiplier)
    if session.taunt_holder is not None and session.taunt_holder == target:
        damage = math.floor(damage * (1 - rules.taunt_damage_reduction))
    return damage
