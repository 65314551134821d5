"""
Character class module for the combat engine.

A class decides the per-level resource stipends used by the stat deriver, the
stat that scales its attacks, and the role an underling plays in the party
phase.
"""

from typing import Literal

from core.constants import WeaponType
from pydantic import BaseModel, Field

PartyRole = Literal["leader", "tank", "support", "magic", "ranged", "none"]


class CharacterClass(BaseModel):
    """
    Represents a character class with its level stipends and combat role.
    """

    name: str = Field(
        description="The name of the character class.",
    )
    health_per_level: int = Field(
        10,
        description="Max health granted per character level.",
    )
    mana_per_level: int = Field(
        10,
        description="Max mana granted per character level.",
    )
    stamina_per_level: int = Field(
        10,
        description="Max stamina granted per character level.",
    )
    weapon_type: WeaponType = Field(
        WeaponType.MELEE,
        description="The stat family that scales this class's attacks.",
    )
    role: PartyRole = Field(
        "none",
        description="Behaviour of the class when acting as an underling.",
    )
    ability_tree: str | None = Field(
        None,
        description="Name of the ability tree this class learns from.",
    )

    def level_bonus(self, resource: str, level: int) -> int:
        """
        Returns the stipend granted for a resource at the given level.

        Args:
            resource (str): One of "health", "mana" or "stamina".
            level (int): The character level.

        Returns:
            int: The stipend.

        """
        per_level = {
            "health": self.health_per_level,
            "mana": self.mana_per_level,
            "stamina": self.stamina_per_level,
        }.get(resource, 0)
        return per_level * max(0, level)

    def __hash__(self) -> int:
        return hash(self.name)


CLASSES: dict[str, CharacterClass] = {
    cls.name: cls
    for cls in (
        CharacterClass(
            name="hero",
            health_per_level=10,
            mana_per_level=10,
            stamina_per_level=10,
            role="leader",
        ),
        CharacterClass(
            name="warrior",
            health_per_level=14,
            mana_per_level=1,
            stamina_per_level=11,
            role="tank",
            ability_tree="warrior",
        ),
        CharacterClass(
            name="healer",
            health_per_level=8,
            mana_per_level=12,
            stamina_per_level=6,
            weapon_type=WeaponType.DIVINE,
            role="support",
            ability_tree="healer",
        ),
        CharacterClass(
            name="priest",
            health_per_level=8,
            mana_per_level=12,
            stamina_per_level=6,
            weapon_type=WeaponType.DIVINE,
            role="support",
            ability_tree="healer",
        ),
        CharacterClass(
            name="archer",
            health_per_level=9,
            mana_per_level=8,
            stamina_per_level=9,
            weapon_type=WeaponType.RANGED,
            role="ranged",
            ability_tree="archer",
        ),
        CharacterClass(
            name="skirmisher",
            health_per_level=9,
            mana_per_level=8,
            stamina_per_level=9,
            weapon_type=WeaponType.RANGED,
            role="ranged",
            ability_tree="archer",
        ),
        CharacterClass(
            name="mage",
            health_per_level=5,
            mana_per_level=15,
            stamina_per_level=6,
            weapon_type=WeaponType.ARCANE,
            role="magic",
            ability_tree="mage",
        ),
    )
}

# Used for monsters and anything without a known class.
DEFAULT_CLASS = CharacterClass(name="monster")


def get_character_class(name: str | None) -> CharacterClass:
    """
    Looks up a class by name, falling back to the default stipends.

    Args:
        name (str | None): The class name, case insensitive.

    Returns:
        CharacterClass: The class definition.

    """
    if not name:
        return DEFAULT_CLASS
    return CLASSES.get(name.lower(), DEFAULT_CLASS)
