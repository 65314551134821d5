"""
Decision making for the characters the player does not control.

Underlings act by role: a warrior protects wounded allies by taunting, a
healer mends the most wounded ally, a mage blasts crowded fields. When no
priority applies they attack. Enemies pick whom to strike and occasionally
use one of their monster abilities.
"""

from typing import Any, Literal

from abilities.ability import Ability
from character.main import Character
from core.content import ContentRepository
from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Support Functions
# =============================================================================


class PartyDecision(BaseModel):
    """What an underling or summon decided to do this round."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    action: Literal["taunt", "heal", "aoe", "attack", "idle"] = Field(
        description="The chosen action.",
    )
    target: Character | None = Field(
        None,
        description="The character the action is aimed at, if any.",
    )


def _hp_ratio(character: Character) -> float:
    """
    Helper function to calculate the health ratio.

    Args:
        character (Character):
            The character whose health ratio to calculate.

    Returns:
        float:
            Current health over max health, 1.0 for an empty cap.

    """
    return character.health / character.max_health if character.max_health > 0 else 1.0


def wounded_members(session: Any) -> list[Character]:
    """Living hero and underlings whose health is under the wounded threshold."""
    threshold = session.rules.wounded_threshold
    return [
        member
        for member in [session.hero, *session.underlings]
        if member.is_alive and _hp_ratio(member) < threshold
    ]


def first_standing_enemy(session: Any) -> Character | None:
    """The first enemy still alive and not already defeated this round."""
    for enemy in session.enemies:
        if enemy.is_alive and enemy.char_id not in session.defeated_this_round:
            return enemy
    return None


# =============================================================================
# Party decisions
# =============================================================================


def choose_party_action(member: Character, session: Any) -> PartyDecision:
    """
    Picks the action of an underling or summon. Role priorities override the
    plain attack when affordable and triggered.

    Args:
        member (Character):
            The acting party member.
        session (Any):
            The combat session.

    Returns:
        PartyDecision:
            The chosen action and its target.

    """
    rules = session.rules
    role = member.char_class.role

    if role == "tank" and member.mana >= rules.taunt_mana_cost:
        if wounded_members(session):
            return PartyDecision(action="taunt", target=member)

    if role == "support" and member.mana >= rules.heal_mana_cost:
        wounded = wounded_members(session)
        if wounded:
            return PartyDecision(action="heal", target=min(wounded, key=_hp_ratio))

    if role == "magic" and member.mana >= rules.aoe_mana_cost:
        standing = [
            enemy
            for enemy in session.living_enemies()
            if enemy.char_id not in session.defeated_this_round
        ]
        if len(standing) >= rules.aoe_min_enemies:
            return PartyDecision(action="aoe")

    target = first_standing_enemy(session)
    if target is None:
        return PartyDecision(action="idle")
    return PartyDecision(action="attack", target=target)


# =============================================================================
# Enemy decisions
# =============================================================================


def choose_enemy_target(enemy: Character, session: Any) -> Character | None:
    """
    Picks whom an enemy strikes: the taunt holder if one stands, then the
    character that taunted this enemy, else a random party member, avoiding
    those under sanctuary while anyone else is available.

    Args:
        enemy (Character):
            The attacking enemy.
        session (Any):
            The combat session.

    Returns:
        Character | None:
            The target, None when the whole party is down.

    """
    holder = session.taunt_holder
    if holder is not None and holder.is_alive:
        return holder

    taunt = enemy.effects.get_status("taunted")
    if taunt is not None:
        taunter = session.find(taunt.source_id)
        if taunter is not None and taunter.is_alive:
            return taunter

    living = session.living_party()
    if not living:
        return None
    exposed = [member for member in living if not member.effects.has_status("sanctuary")]
    return session.rng.choice(exposed or living)


def choose_monster_ability(enemy: Character, session: Any) -> Ability | None:
    """
    Rolls whether an enemy uses one of its abilities this round, and which.

    Returns:
        Ability | None: A usable ability, None to attack normally.

    """
    if not enemy.abilities:
        return None
    if session.rng.random() >= session.rules.monster_ability_chance:
        return None
    usable = []
    for ability_id in enemy.abilities:
        ability = ContentRepository().get_ability(ability_id)
        if ability is not None and ability.can_use(enemy, session).allowed:
            usable.append(ability)
    if not usable:
        return None
    return session.rng.choice(usable)
