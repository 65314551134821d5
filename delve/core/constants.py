"""
Constants and enumerations for the combat engine.

Defines the closed enumerations used throughout the engine: character types
and factions, base stats, weapon types, ability targeting, effect types,
special ability kinds, racial effect tags, player actions and round phases.
"""

from enum import Enum
from typing import Any

# Neutral value used for any missing or invalid base stat.
NEUTRAL_STAT = 5

# Statuses that prevent a character from acting this round.
INCAPACITATING_STATUSES = ("stunned", "paralyzed")

# Damage-over-time families removed by cure effects.
POISON_STATUSES = ("poison", "venom", "toxin")


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").lower().capitalize()


class CharacterType(NiceEnum):
    """Defines the type of character taking part in a battle."""

    HERO = "hero"
    UNDERLING = "underling"
    ENEMY = "enemy"
    SUMMON = "summon"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this character type."""
        return {
            CharacterType.HERO: "👤",
            CharacterType.UNDERLING: "🤝",
            CharacterType.ENEMY: "👹",
            CharacterType.SUMMON: "✨",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this character type."""
        return {
            CharacterType.HERO: "bold blue",
            CharacterType.UNDERLING: "bold green",
            CharacterType.ENEMY: "bold red",
            CharacterType.SUMMON: "bold cyan",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies character type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class Faction(NiceEnum):
    """Targeting groups: who fights whom."""

    PLAYER = "player"
    ENEMY = "enemy"


def default_faction(char_type: CharacterType) -> Faction:
    """Determines the faction a character type belongs to by default.

    Args:
        char_type (CharacterType): The character type.

    Returns:
        Faction: PLAYER for the hero and underlings, ENEMY otherwise.

    """
    if char_type in (CharacterType.HERO, CharacterType.UNDERLING):
        return Faction.PLAYER
    return Faction.ENEMY


class StatType(NiceEnum):
    """The six base attributes of a character."""

    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WILLPOWER = "willpower"
    SIZE = "size"

    @property
    def short_name(self) -> str:
        """Returns the three-letter abbreviation of the stat."""
        return self.name[:3]


class WeaponType(NiceEnum):
    """Defines which stat scales a character's attacks."""

    MELEE = "melee"
    RANGED = "ranged"
    ARCANE = "arcane"
    DIVINE = "divine"


class TargetType(NiceEnum):
    """How many targets an ability affects."""

    SELF = "self"
    SINGLE = "single"
    MULTIPLE = "multiple"
    ALL = "all"


class TargetValidity(NiceEnum):
    """Which combatants are legal targets for an ability."""

    SELF = "self"
    ALLIES = "allies"
    ALLIES_AND_SELF = "allies_and_self"
    ENEMIES = "enemies"
    ANY = "any"


class EffectType(NiceEnum):
    """Generic effect descriptors an ability may carry."""

    HEAL = "heal"
    DAMAGE = "damage"
    BUFF_ATTACK = "buff_attack"
    BUFF_DEFENSE = "buff_defense"
    DEBUFF_ATTACK = "debuff_attack"
    DEBUFF_DEFENSE = "debuff_defense"
    RESISTANCE = "resistance"
    STUN = "stun"
    PARALYZE = "paralyze"
    DOT = "dot"
    VAMPIRIC = "vampiric"
    SPREAD = "spread"

    @property
    def color(self) -> str:
        """Returns the color string associated with this effect type."""
        if self in (EffectType.HEAL, EffectType.VAMPIRIC):
            return "bold green"
        if self in (EffectType.DAMAGE, EffectType.DOT, EffectType.SPREAD):
            return "bold red"
        if self in (EffectType.STUN, EffectType.PARALYZE):
            return "bold magenta"
        return "bold yellow"

    def colorize(self, message: str) -> str:
        """Applies effect type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class SpecialKind(NiceEnum):
    """Abilities whose behaviour is not expressible as generic effects."""

    SUMMON = "summon"
    TAUNT = "taunt"
    BERSERKER_RAGE = "berserker_rage"
    CURE_POISON = "cure_poison"
    SANCTUARY = "sanctuary"
    HASTE = "haste"
    POLYMORPH = "polymorph"
    RESURRECTION = "resurrection"
    SPIRIT_ARROW = "spirit_arrow"


class RacialEffect(NiceEnum):
    """Effect tags of the racial abilities."""

    STONEWORK = "stonework"
    MEDITATION = "meditation"
    SUMMON = "summon"
    REVIVAL = "revival"
    HEAVY_STRIKE = "heavy_strike"
    KNOCKDOWN = "knockdown"
    REGENERATION = "regeneration"
    ELEMENTAL_BREATH = "elemental_breath"


class DamageType(NiceEnum):
    """Damage families used for resistances and breath weapons."""

    PHYSICAL = "physical"
    FIRE = "fire"
    COLD = "cold"
    LIGHTNING = "lightning"
    POISON = "poison"
    HOLY = "holy"
    SHADOW = "shadow"


class PlayerActionType(NiceEnum):
    """Actions the player may choose for the hero each round."""

    ATTACK = "attack"
    DEFEND = "defend"
    USE_ITEM = "use_item"
    USE_ABILITY = "use_ability"
    RACIAL = "racial"
    FLEE = "flee"


class CombatState(NiceEnum):
    """States of the round state machine."""

    SETUP = "setup"
    PLAYER_TURN = "player_turn"
    PARTY_TURN = "party_turn"
    ENEMY_TURN = "enemy_turn"
    RESOLUTION = "resolution"


class CombatOutcome(NiceEnum):
    """How a battle ended, if it has."""

    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"

    @property
    def color(self) -> str:
        """Returns the color string associated with this outcome."""
        return {
            CombatOutcome.ONGOING: "white",
            CombatOutcome.VICTORY: "bold green",
            CombatOutcome.DEFEAT: "bold red",
            CombatOutcome.FLED: "bold yellow",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies outcome color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class AftermathChoice(NiceEnum):
    """Options offered to the party after a victory."""

    EXIT = "exit"
    DESCEND = "descend"
    REST = "rest"


def adapt_keys_to_enum(enum_class: Any, data: dict[Any, Any]) -> dict[Any, Any]:
    """
    Converts the string keys of a dictionary to enum members, skipping keys
    that do not name a member.

    Args:
        enum_class (Any):
            The enumeration class to convert keys to.
        data (dict[Any, Any]):
            The dictionary whose keys should be converted.

    Returns:
        dict[Any, Any]:
            A new dictionary keyed by enum members.

    """
    adapted: dict[Any, Any] = {}
    for key, value in data.items():
        if isinstance(key, enum_class):
            adapted[key] = value
            continue
        try:
            adapted[enum_class(str(key).lower())] = value
        except ValueError:
            continue
    return adapted
