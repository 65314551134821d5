"""
Character inventory module for the combat engine.

Provides the equipment add-ons the orchestrator reads when computing attacks
and defense, plus the gold, rations and crafting materials that ability and
item costs are paid with.
"""

from typing import Any

from core.constants import WeaponType
from core.logging import log_debug
from pydantic import BaseModel, Field


class Equipment(BaseModel):
    """A piece of gear contributing flat attack or defense."""

    name: str = Field(description="The name of the item.")
    attack: int = Field(0, description="Flat attack add-on while equipped.")
    defense: int = Field(0, description="Flat defense add-on while equipped.")
    weapon_type: WeaponType | None = Field(
        None,
        description="Weapon family if the item is a weapon.",
    )
    equipped: bool = Field(True, description="Whether the item is worn.")


class CharacterInventory:
    """
    Manages gold, rations, materials and equipment of a character.

    Attributes:
        _owner (Any):
            The Character instance this inventory belongs to.
        gold (int):
            Gold carried.
        rations (int):
            Rations available for resting.
        materials (dict[str, int]):
            Crafting materials and consumables by name.
        equipment (list[Equipment]):
            Gear owned by the character.

    """

    def __init__(
        self,
        owner: Any,
        gold: int = 0,
        rations: int = 0,
        materials: dict[str, int] | None = None,
        equipment: list[Equipment] | None = None,
    ) -> None:
        self._owner = owner
        self.gold = max(0, gold)
        self.rations = max(0, rations)
        self.materials: dict[str, int] = dict(materials or {})
        self.equipment: list[Equipment] = list(equipment or [])

    # === Equipment ===

    @property
    def equipped(self) -> list[Equipment]:
        return [item for item in self.equipment if item.equipped]

    def equipped_attack(self) -> int:
        """Returns the summed attack add-on of equipped items."""
        return sum(item.attack for item in self.equipped)

    def equipped_defense(self) -> int:
        """Returns the summed defense add-on of equipped items."""
        return sum(item.defense for item in self.equipped)

    def weapon_type(self) -> WeaponType | None:
        """Returns the weapon family of the first equipped weapon, if any."""
        for item in self.equipped:
            if item.weapon_type is not None:
                return item.weapon_type
        return None

    def equip(self, item: Equipment) -> None:
        """Add an item and wear it."""
        item.equipped = True
        if item not in self.equipment:
            self.equipment.append(item)
        log_debug(f"{self._owner.name} equips {item.name}")

    # === Materials ===

    def material_count(self, name: str) -> int:
        return self.materials.get(name, 0)

    def add_material(self, name: str, amount: int = 1) -> None:
        self.materials[name] = self.material_count(name) + amount

    def spend_material(self, name: str, amount: int) -> int:
        """
        Removes up to `amount` of a material, never going below zero.

        Args:
            name (str): The material.
            amount (int): How many to remove.

        Returns:
            int: How many were actually removed.

        """
        available = self.material_count(name)
        spent = min(available, max(0, amount))
        remaining = available - spent
        if remaining:
            self.materials[name] = remaining
        else:
            self.materials.pop(name, None)
        return spent

    # === Currency ===

    def spend_gold(self, amount: int) -> int:
        spent = min(self.gold, max(0, amount))
        self.gold -= spent
        return spent

    def add_gold(self, amount: int) -> None:
        self.gold = max(0, self.gold + amount)
