"""
Character management module for the combat engine.

Defines the Character class shared by the hero, underlings, enemies and
summons: identity, level, class and species, attack and defense baselines,
and the stats, effects and inventory management modules.
"""

from typing import Any

from core.constants import CharacterType, WeaponType
from core.error_handling import ensure_int_in_range
from core.logging import log_debug

from .character_class import CharacterClass, get_character_class
from .character_effects import CharacterEffects
from .character_inventory import CharacterInventory, Equipment
from .character_race import CharacterRace, get_character_race
from .character_stats import CharacterStats


class Character:
    """
    Represents a combatant: its identity, level, class, species, baselines
    and the modules that track its resources, statuses and belongings.

    Attributes:
        char_id (str):
            Unique identity of the character.
        name (str):
            The display name of the character.
        char_type (CharacterType):
            Hero, underling, enemy or summon.
        race (CharacterRace):
            The species of the character.
        subspecies (str | None):
            The subspecies, which may change the racial ability.
        char_class (CharacterClass):
            The class of the character.
        level (int):
            The character level.
        attack (int):
            Attack baseline, used by enemies and summons.
        defense (int):
            Defense baseline subtracted from incoming ability damage.
        abilities (list[str]):
            Ids of the catalog abilities the character may use.
        fame (int):
            Experience currency of the hero.

    """

    # === Static properties ===

    char_id: str
    name: str
    char_type: CharacterType
    race: CharacterRace
    subspecies: str | None
    char_class: CharacterClass
    level: int
    attack: int
    defense: int
    abilities: list[str]
    fame: int

    # === Management Modules ===

    stats: CharacterStats
    effects: CharacterEffects
    inventory: CharacterInventory

    def __init__(
        self,
        name: str,
        char_type: CharacterType,
        race: CharacterRace | str | None = None,
        char_class: CharacterClass | str | None = None,
        level: int = 1,
        stats: dict[Any, Any] | None = None,
        max_health: int = 100,
        max_mana: int = 0,
        max_stamina: int = 0,
        attack: int = 0,
        defense: int = 0,
        char_id: str | None = None,
        subspecies: str | None = None,
        abilities: list[str] | None = None,
        gold: int = 0,
        rations: int = 0,
        fame: int = 0,
        materials: dict[str, int] | None = None,
        equipment: list[Equipment] | None = None,
    ) -> None:
        self.char_id = char_id or name.lower().replace(" ", "_")
        self.name = name
        self.char_type = char_type
        self.race = race if isinstance(race, CharacterRace) else get_character_race(race)
        self.subspecies = subspecies
        self.char_class = (
            char_class
            if isinstance(char_class, CharacterClass)
            else get_character_class(char_class)
        )
        self.level = ensure_int_in_range(level, "level", 1, context={"character": name})
        self.attack = attack
        self.defense = defense
        self.abilities = list(abilities or [])
        self.fame = fame

        # Initialize modules.
        self.stats = CharacterStats(
            owner=self,
            stats=stats,
            max_health=max_health,
            max_mana=max_mana,
            max_stamina=max_stamina,
        )
        self.effects = CharacterEffects(owner=self)
        self.inventory = CharacterInventory(
            owner=self,
            gold=gold,
            rations=rations,
            materials=materials,
            equipment=equipment,
        )

    # ============================================================================
    # DELEGATED RESOURCE PROPERTIES
    # ============================================================================

    @property
    def colored_name(self) -> str:
        """
        Returns the character's name with color coding based on its type.
        """
        return self.char_type.colorize(self.name)

    @property
    def health(self) -> int:
        return self.stats.health

    @property
    def max_health(self) -> int:
        return self.stats.max_health

    @property
    def mana(self) -> int:
        return self.stats.mana

    @property
    def max_mana(self) -> int:
        return self.stats.max_mana

    @property
    def stamina(self) -> int:
        return self.stats.stamina

    @property
    def max_stamina(self) -> int:
        return self.stats.max_stamina

    @property
    def is_alive(self) -> bool:
        return self.stats.health > 0

    @property
    def weapon_type(self) -> WeaponType:
        """The weapon family of the equipped weapon, else the class default."""
        return self.inventory.weapon_type() or self.char_class.weapon_type

    @property
    def racial_ability_id(self) -> str | None:
        return self.race.get_racial_ability_id(self.subspecies)

    # ============================================================================
    # HEALTH MANAGEMENT
    # ============================================================================

    def take_damage(self, amount: int) -> int:
        """
        Applies damage, never bringing health below zero.

        Args:
            amount (int): The damage to apply.

        Returns:
            int: The damage actually taken.

        """
        taken = -self.stats.adjust_health(-max(0, int(amount)))
        log_debug(
            f"{self.name} takes {taken} damage",
            {"health": self.health, "max_health": self.max_health},
        )
        return taken

    def heal(self, amount: int) -> int:
        """
        Restores health, never beyond the maximum.

        Args:
            amount (int): The healing to apply.

        Returns:
            int: The health actually restored.

        """
        return self.stats.adjust_health(max(0, int(amount)))

    def fall(self) -> None:
        """Mark the character as fallen, with zero health."""
        self.stats.set_resource("health", 0)

    def revive(self, health: int) -> None:
        """Bring the character back with the given health, at least 1."""
        self.stats.set_resource("health", health, floor=1)

    def restore_fraction(self, fraction: float) -> tuple[int, int]:
        """
        Restores a fraction of max health and max mana.

        Args:
            fraction (float): Fraction of each cap to restore.

        Returns:
            tuple[int, int]: Health and mana actually restored.

        """
        health = self.stats.adjust_health(int(self.max_health * fraction))
        mana = self.stats.adjust_mana(int(self.max_mana * fraction))
        return health, mana

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Character):
            return False
        return self.char_id == other.char_id

    def __hash__(self) -> int:
        return hash(self.char_id)

    def __repr__(self) -> str:
        return (
            f"Character({self.char_id!r}, {self.char_type.value}, "
            f"{self.health}/{self.max_health})"
        )
