"""
Combat turn orchestration module for the combat engine.

`resolve_round` drives one full round of an encounter: the player's action,
the actions of every underling and summon by role priority, the purge of
defeated enemies and their rewards, the enemy counter-attack, and the
end-of-round upkeep of statuses, passive abilities and summons. It decides
the transitions to victory, defeat or a successful flight.
"""

import math
from typing import Any

from abilities.ability import Ability
from abilities.effect_resolver import apply_effect
from abilities.results import AbilityResult
from character.main import Character
from character.stat_deriver import attack_bonus, base_attack, critical_hit
from core.constants import (
    CombatOutcome,
    CombatState,
    PlayerActionType,
    SpecialKind,
    TargetType,
    TargetValidity,
    WeaponType,
)
from core.content import ContentRepository
from core.error_handling import ERROR_HANDLER, ErrorSeverity
from core.logging import log_info
from core.utils import scale_roll
from pydantic import BaseModel, Field
from racial.racial_abilities import (
    apply_passive_racials,
    reset_battle_cooldowns,
    trigger_revival,
    use_racial_ability,
)

from .aftermath import apply_defeat_penalty
from .events import CombatEvent, EventKind
from .party_ai import (
    choose_enemy_target,
    choose_monster_ability,
    choose_party_action,
    first_standing_enemy,
)
from .rewards import (
    check_level_up,
    grant_reward,
    hero_kill_reward,
    underling_kill_reward,
)
from .session import CombatSession, mitigate_damage


class PlayerAction(BaseModel):
    """The action the player chose for the hero this round."""

    type: PlayerActionType = Field(
        description="What the hero does.",
    )
    target_id: str | None = Field(
        None,
        description="Id of the chosen target, the first legal one when None.",
    )
    ability_id: str | None = Field(
        None,
        description="Ability to use, for use_ability actions.",
    )
    item_id: str | None = Field(
        None,
        description="Item ability to use, for use_item actions.",
    )


class RoundOutcome(BaseModel):
    """What resolving a round produced."""

    state: CombatState = Field(description="The phase the battle is left in.")
    outcome: CombatOutcome = Field(description="How the battle stands.")
    round: int = Field(description="The round that was resolved.")
    events: list[CombatEvent] = Field(
        default_factory=list,
        description="Everything that happened, in order.",
    )


# ============================================================================
# SHARED HELPERS
# ============================================================================


def _roll_attack(attacker: Character, session: CombatSession, variance: tuple[float, float]) -> tuple[int, bool]:
    """Rolls a plain attack: base attack, random scaling, critical multiplier."""
    power = base_attack(attacker, session.rules)
    damage = math.floor(power * scale_roll(session.rng, *variance))
    critical = critical_hit(attacker, session.rng)
    return math.floor(damage * critical.multiplier), critical.is_critical


def _credit_kills(session: CombatSession, by_hero: bool) -> None:
    """
    Grants the reward of every enemy that fell since the last check. An enemy
    is credited once, when it first enters the defeated-this-round set.
    """
    rules = session.rules
    for enemy in session.enemies:
        if enemy.is_alive or enemy.char_id in session.defeated_this_round:
            continue
        session.defeated_this_round.add(enemy.char_id)
        session.record(EventKind.KILL, target=enemy, message=f"{enemy.name} is defeated!")
        if by_hero:
            reward = hero_kill_reward(
                session.dungeon_level, session.rng, rules.hero_reward_multiplier
            )
        else:
            reward = underling_kill_reward(session.dungeon_level, session.rng)
        grant_reward(session.hero, reward)
        session.record(
            EventKind.REWARD,
            actor=session.hero,
            amount=reward.gold,
            message=f"Gained {reward.gold} gold and {reward.experience} experience",
        )
        if check_level_up(session.hero, rules.fame_per_level):
            session.record(
                EventKind.LEVEL_UP,
                actor=session.hero,
                amount=session.hero.level,
                message=f"{session.hero.name} is now level {session.hero.level}!",
            )


def _purge_enemies(session: CombatSession) -> None:
    """Credits any uncredited kill, then removes defeated enemies."""
    _credit_kills(session, by_hero=False)
    session.enemies = [enemy for enemy in session.enemies if enemy.is_alive]


def _check_falls(session: CombatSession) -> None:
    """
    Handles party members that dropped to zero health: on-death racial
    abilities get their chance, everyone else falls. A fallen taunt holder
    releases the taunt at once.
    """
    for member in session.party:
        if member.is_alive:
            session.fallen.discard(member.char_id)
            continue
        if member.char_id in session.fallen:
            continue
        revival = trigger_revival(member, session)
        if revival is not None and revival.success:
            session.record(
                EventKind.RACIAL,
                actor=member,
                amount=member.health,
                message=revival.message,
            )
            continue
        member.fall()
        session.fallen.add(member.char_id)
        session.record(EventKind.FALL, target=member, message=f"{member.name} has fallen!")
        if session.taunt_holder is not None and session.taunt_holder == member:
            session.taunt_holder = None
            session.record(
                EventKind.TAUNT,
                actor=member,
                message=f"The taunt ends as {member.name} falls",
            )


def _resolve_targets(
    ability: Ability,
    caster: Character,
    session: CombatSession,
    target_id: str | None,
) -> list[Character]:
    """
    Targets of an ability: the legal combatants, with the chosen one first.
    A fallen ally may only be chosen by a resurrection.
    """
    chosen = session.find(target_id)
    special = ability.special
    if (
        chosen is not None
        and not chosen.is_alive
        and session.faction_of(chosen) == session.faction_of(caster)
        and special is not None
        and special.special_kind == SpecialKind.RESURRECTION
    ):
        return [chosen]
    combatants = session.combatants()
    if chosen is not None:
        combatants = [chosen] + [c for c in combatants if c != chosen]
    return ability.get_valid_targets(caster, combatants, session)


def _propagate_spread(
    session: CombatSession,
    caster: Character,
    result: AbilityResult,
    targets: list[Character],
) -> None:
    """Applies flagged spread effects to every other living enemy."""
    struck = {target.char_id for target in targets}
    for spread in result.spread_results:
        for enemy in session.living_enemies():
            if enemy.char_id in struck or session.faction_of(enemy) == session.faction_of(caster):
                continue
            applied = apply_effect(spread.spread_effect, caster, enemy, session.rng, session)
            session.record(
                EventKind.SPREAD,
                actor=caster,
                target=enemy,
                amount=applied.value,
                message=f"The effect spreads to {enemy.name}: {applied.message}",
            )


def _record_ability(session: CombatSession, caster: Character, result: AbilityResult) -> None:
    kind = EventKind.ABILITY if result.success else EventKind.FAILURE
    session.record(
        kind,
        actor=caster,
        amount=sum(r.value for r in result.results if r.success),
        message=result.message,
    )
    for entry in result.results:
        if entry.message:
            session.record(kind, actor=caster, amount=entry.value, message=f"  {entry.message}")


# ============================================================================
# PLAYER PHASE
# ============================================================================


def _hero_attack(session: CombatSession, action: PlayerAction) -> bool:
    hero = session.hero
    chosen = session.find(action.target_id)
    target = chosen if chosen in session.living_enemies() else None
    target = target or first_standing_enemy(session)
    swings = 2 if hero.effects.has_status("hasted") else 1
    for _ in range(swings):
        if target is None or not target.is_alive:
            target = first_standing_enemy(session)
        if target is None:
            break
        damage, critical = _roll_attack(hero, session, session.rules.hero_variance)
        dealt = target.take_damage(damage)
        crit_text = " CRITICAL HIT!" if critical else ""
        session.record(
            EventKind.ATTACK,
            actor=hero,
            target=target,
            amount=dealt,
            critical=critical,
            message=f"{hero.name} attacks {target.name} for {dealt} damage!{crit_text}",
        )
    return True


def _hero_defend(session: CombatSession, action: PlayerAction) -> bool:
    hero = session.hero
    session.defending.add(hero.char_id)
    session.record(EventKind.DEFEND, actor=hero, message=f"{hero.name} raises their guard")
    return True


def _use_ability(session: CombatSession, caster: Character, ability: Ability, target_id: str | None) -> bool:
    check = ability.can_use(caster, session)
    if not check.allowed:
        session.record(
            EventKind.FAILURE,
            actor=caster,
            message=f"{caster.name} cannot use {ability.name}: {check.reason}",
        )
        return False
    targets = _resolve_targets(ability, caster, session, target_id)
    result = ability.use(caster, targets, session)
    _record_ability(session, caster, result)
    if result.success:
        _propagate_spread(session, caster, result, targets)
    return True


def _hero_use_ability(session: CombatSession, action: PlayerAction) -> bool:
    hero = session.hero
    ability = ContentRepository().get_ability(action.ability_id or "")
    if ability is None or ability.id not in hero.abilities:
        session.record(
            EventKind.FAILURE,
            actor=hero,
            message=f"{hero.name} does not know the ability '{action.ability_id}'",
        )
        return False
    return _use_ability(session, hero, ability, action.target_id)


def _hero_use_item(session: CombatSession, action: PlayerAction) -> bool:
    hero = session.hero
    ability = ContentRepository().get_ability(action.item_id or "")
    if ability is None or ability.category != "item":
        session.record(
            EventKind.FAILURE,
            actor=hero,
            message=f"'{action.item_id}' is not a usable item",
        )
        return False
    return _use_ability(session, hero, ability, action.target_id)


def _hero_racial(session: CombatSession, action: PlayerAction) -> bool:
    hero = session.hero
    chosen = session.find(action.target_id)
    result = use_racial_ability(hero, session, [chosen] if chosen is not None else None)
    if not result.success:
        session.record(EventKind.FAILURE, actor=hero, message=result.message)
        return False
    session.record(EventKind.RACIAL, actor=hero, message=result.message)
    for entry in result.results:
        if entry.message:
            session.record(EventKind.RACIAL, actor=hero, amount=entry.value, message=f"  {entry.message}")
    return True


PLAYER_ACTIONS = {
    PlayerActionType.ATTACK: _hero_attack,
    PlayerActionType.DEFEND: _hero_defend,
    PlayerActionType.USE_ABILITY: _hero_use_ability,
    PlayerActionType.USE_ITEM: _hero_use_item,
    PlayerActionType.RACIAL: _hero_racial,
}


def _attempt_flee(session: CombatSession) -> bool:
    if session.rng.random() < session.rules.flee_chance:
        session.record(EventKind.FLEE, actor=session.hero, message="The party flees from combat!")
        return True
    session.record(
        EventKind.FLEE,
        actor=session.hero,
        message="The party fails to flee! The enemies attack!",
    )
    for member in session.party:
        member.effects.end_turn()
    return False


def _player_phase(session: CombatSession, action: PlayerAction) -> bool:
    """
    Resolves the hero's action.

    Returns:
        bool: False when the action was refused and the round must not go on.

    """
    hero = session.hero
    if not hero.is_alive:
        session.record(EventKind.SKIP, actor=hero, message=f"{hero.name} is down")
        hero.effects.end_turn()
        return True
    if hero.effects.is_incapacitated():
        session.record(EventKind.SKIP, actor=hero, message=f"{hero.name} cannot act")
        hero.effects.end_turn()
        return True
    handler = PLAYER_ACTIONS.get(action.type)
    if handler is None:
        session.record(
            EventKind.FAILURE,
            actor=hero,
            message=f"Unknown player action: {action.type}",
        )
        return False
    acted = ERROR_HANDLER.safe_execute(
        lambda: handler(session, action),
        True,
        "Player action failed",
        ErrorSeverity.HIGH,
        {"action": action.type.value, "round": session.round},
    )
    hero.effects.end_turn()
    _credit_kills(session, by_hero=True)
    return acted


# ============================================================================
# PARTY PHASE
# ============================================================================


def _party_member_turn(session: CombatSession, member: Character) -> None:
    rules = session.rules
    decision = choose_party_action(member, session)

    if decision.action == "taunt":
        member.stats.adjust_mana(-rules.taunt_mana_cost)
        session.taunt_holder = member
        session.record(
            EventKind.TAUNT,
            actor=member,
            message=f"{member.name} uses Protective Taunt! Enemies must attack them this round",
        )
        return

    if decision.action == "heal" and decision.target is not None:
        member.stats.adjust_mana(-rules.heal_mana_cost)
        target = decision.target
        healed = target.heal(math.floor(target.max_health * rules.heal_fraction))
        session.record(
            EventKind.HEAL,
            actor=member,
            target=target,
            amount=healed,
            message=f"{member.name} heals {target.name} for {healed} HP",
        )
        return

    if decision.action == "aoe":
        member.stats.adjust_mana(-rules.aoe_mana_cost)
        base = math.floor(
            rules.aoe_base_damage
            + member.level * rules.aoe_damage_per_level
            + attack_bonus(member, WeaponType.ARCANE)
        )
        session.record(EventKind.ABILITY, actor=member, message=f"{member.name} casts Arcane Blast!")
        for enemy in session.living_enemies():
            if enemy.char_id in session.defeated_this_round:
                continue
            dealt = enemy.take_damage(math.floor(base * scale_roll(session.rng, *rules.aoe_variance)))
            session.record(
                EventKind.ATTACK,
                actor=member,
                target=enemy,
                amount=dealt,
                message=f"  {enemy.name} takes {dealt} arcane damage",
            )
        _credit_kills(session, by_hero=False)
        return

    if decision.action == "attack":
        swings = 2 if member.effects.has_status("hasted") else 1
        for _ in range(swings):
            target = first_standing_enemy(session)
            if target is None:
                break
            damage, critical = _roll_attack(member, session, rules.underling_variance)
            dealt = target.take_damage(damage)
            crit_text = " CRITICAL HIT!" if critical else ""
            session.record(
                EventKind.ATTACK,
                actor=member,
                target=target,
                amount=dealt,
                critical=critical,
                message=f"{member.name} attacks {target.name} for {dealt} damage!{crit_text}",
            )
            _credit_kills(session, by_hero=False)


def _party_phase(session: CombatSession) -> None:
    session.state = CombatState.PARTY_TURN
    for member in [*session.underlings, *session.summons.values()]:
        if not member.is_alive:
            continue
        if first_standing_enemy(session) is None:
            break
        if member.effects.is_incapacitated():
            session.record(EventKind.SKIP, actor=member, message=f"{member.name} cannot act")
            member.effects.end_turn()
            continue
        ERROR_HANDLER.safe_execute(
            lambda: _party_member_turn(session, member),
            None,
            "Party member action failed",
            ErrorSeverity.HIGH,
            {"member": member.name, "round": session.round},
        )
        member.effects.end_turn()


# ============================================================================
# ENEMY PHASE
# ============================================================================


def _enemy_ability_turn(session: CombatSession, enemy: Character, ability: Ability) -> None:
    targeting = ability.targeting
    if targeting.validity == TargetValidity.ENEMIES and targeting.type == TargetType.SINGLE:
        target = choose_enemy_target(enemy, session)
        targets = [target] if target is not None else []
    else:
        combatants = session.combatants()
        holder = session.taunt_holder
        if holder is not None and holder.is_alive:
            combatants = [holder] + [c for c in combatants if c != holder]
        targets = ability.get_valid_targets(enemy, combatants, session)
    result = ability.use(enemy, targets, session)
    _record_ability(session, enemy, result)


def _enemy_turn(session: CombatSession, enemy: Character) -> None:
    polymorphed = enemy.effects.has_status("polymorphed")
    if not polymorphed:
        ability = choose_monster_ability(enemy, session)
        if ability is not None:
            _enemy_ability_turn(session, enemy, ability)
            _check_falls(session)
            return

    target = choose_enemy_target(enemy, session)
    if target is None:
        return
    if polymorphed:
        damage, critical = 1, False
    else:
        damage, critical = _roll_attack(enemy, session, session.rules.enemy_variance)
        damage = mitigate_damage(session, target, damage)
    dealt = target.take_damage(damage)
    crit_text = " CRITICAL HIT!" if critical else ""
    session.record(
        EventKind.ATTACK,
        actor=enemy,
        target=target,
        amount=dealt,
        critical=critical,
        message=f"{enemy.name} attacks {target.name} for {dealt} damage!{crit_text}",
    )
    _check_falls(session)


def _enemy_phase(session: CombatSession) -> None:
    session.state = CombatState.ENEMY_TURN
    for enemy in list(session.enemies):
        if not enemy.is_alive:
            continue
        if session.party_defeated():
            break
        if enemy.effects.is_incapacitated():
            session.record(EventKind.SKIP, actor=enemy, message=f"{enemy.name} cannot act")
            enemy.effects.end_turn()
            continue
        ERROR_HANDLER.safe_execute(
            lambda: _enemy_turn(session, enemy),
            None,
            "Enemy action failed",
            ErrorSeverity.HIGH,
            {"enemy": enemy.name, "round": session.round},
        )
        enemy.effects.end_turn()
    if session.taunt_holder is not None:
        session.record(
            EventKind.TAUNT,
            actor=session.taunt_holder,
            message=f"{session.taunt_holder.name}'s taunt ends",
        )
        session.taunt_holder = None


# ============================================================================
# END OF ROUND
# ============================================================================


def _end_of_round(session: CombatSession) -> None:
    session.state = CombatState.RESOLUTION
    for character in session.combatants():
        for tick in character.effects.tick():
            if tick.amount:
                session.record(
                    EventKind.STATUS,
                    target=character,
                    amount=tick.amount,
                    message=f"{character.name} is affected by {tick.status_type} ({tick.amount:+d} HP)",
                )
            if tick.expired:
                session.record(
                    EventKind.STATUS,
                    target=character,
                    message=f"{tick.status_type} wears off {character.name}",
                )
    for member in session.party:
        passive = apply_passive_racials(member, session)
        if passive is not None and passive.success:
            session.record(EventKind.RACIAL, actor=member, message=passive.message)
    for summon in session.expire_summons():
        session.record(EventKind.SUMMON, actor=summon, message=f"{summon.name} vanishes")
    _check_falls(session)
    _purge_enemies(session)


def _finish(session: CombatSession, outcome: CombatOutcome) -> None:
    if outcome == CombatOutcome.VICTORY:
        session.record(EventKind.VICTORY, message="All enemies defeated!")
    elif outcome == CombatOutcome.DEFEAT:
        session.record(EventKind.DEFEAT, message="Your party has been defeated!")
    session.finish(outcome)
    reset_battle_cooldowns(session)
    if outcome == CombatOutcome.DEFEAT:
        report = apply_defeat_penalty(session.hero, session.underlings, session.rules)
        session.record(EventKind.DEFEAT, actor=session.hero, message=report.message)
    log_info(f"Battle finished: {outcome.value}", {"round": session.round})


def _outcome(session: CombatSession, round_number: int) -> RoundOutcome:
    return RoundOutcome(
        state=session.state,
        outcome=session.outcome,
        round=round_number,
        events=list(session.events),
    )


# ============================================================================
# ENTRY POINT
# ============================================================================


def resolve_round(session: CombatSession, action: PlayerAction | dict[str, Any]) -> RoundOutcome:
    """
    Resolves one full round of combat.

    The player's action comes first. A refused action (unknown ability,
    missing resources, cooldown) ends the call without any further change,
    so the player may choose again. A failed flight skips the party phase and
    leaves only the enemy retaliation.

    Args:
        session (CombatSession):
            The encounter being fought.
        action (PlayerAction | dict[str, Any]):
            The player's choice for the hero.

    Returns:
        RoundOutcome:
            The state the battle is left in and the events of the round.

    """
    if not isinstance(action, PlayerAction):
        action = PlayerAction.model_validate(action)
    round_number = session.round

    if session.outcome != CombatOutcome.ONGOING:
        session.events = []
        session.record(EventKind.FAILURE, message="The battle is already over")
        return _outcome(session, round_number)

    session.start_round()

    if action.type == PlayerActionType.FLEE:
        if session.hero.is_alive and _attempt_flee(session):
            _finish(session, CombatOutcome.FLED)
            return _outcome(session, round_number)
    else:
        if not _player_phase(session, action):
            return _outcome(session, round_number)
        _party_phase(session)
        _purge_enemies(session)
        if not session.enemies:
            _finish(session, CombatOutcome.VICTORY)
            return _outcome(session, round_number)

    _enemy_phase(session)
    if session.party_defeated():
        _finish(session, CombatOutcome.DEFEAT)
        return _outcome(session, round_number)

    _end_of_round(session)
    if not session.enemies:
        _finish(session, CombatOutcome.VICTORY)
    elif session.party_defeated():
        _finish(session, CombatOutcome.DEFEAT)
    else:
        session.round += 1
        session.state = CombatState.PLAYER_TURN
    return _outcome(session, round_number)
