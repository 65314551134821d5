"""
Character stats module for the combat engine.

Holds a character's six base attributes and its health, mana and stamina
pools. Every mutation goes through the adjust helpers, which keep each pool
between zero and its maximum.
"""

from typing import Any

from core.constants import NEUTRAL_STAT, StatType, adapt_keys_to_enum
from core.error_handling import ensure_non_negative_int, ensure_stat_value

RESOURCES = ("health", "mana", "stamina")


class CharacterStats:
    """
    Handles base attributes and resource pools of a Character.

    Attributes:
        owner (Any):
            The Character instance that owns this CharacterStats.
        statistics (dict[StatType, float]):
            The character's base attributes.
        health, mana, stamina (int):
            Current resource values.
        max_health, max_mana, max_stamina (int):
            Resource caps.
        applied_bonuses (dict[str, int]):
            The stat-derived bonus last added to each resource cap, so it can
            be undone before recomputation.

    """

    def __init__(
        self,
        owner: Any,
        stats: dict[Any, Any] | None = None,
        max_health: int = 100,
        max_mana: int = 0,
        max_stamina: int = 0,
    ) -> None:
        """
        Initializes the CharacterStats with full resource pools.

        Args:
            owner (Any):
                The Character instance that owns this CharacterStats.
            stats (dict[Any, Any] | None):
                Base attributes keyed by StatType or stat name.
            max_health (int):
                Starting max health.
            max_mana (int):
                Starting max mana.
            max_stamina (int):
                Starting max stamina.

        """
        self.owner: Any = owner
        self.statistics: dict[StatType, float] = {
            stat: NEUTRAL_STAT for stat in StatType
        }
        self.statistics.update(adapt_keys_to_enum(StatType, stats or {}))
        self.max_health: int = max(1, ensure_non_negative_int(max_health, "max_health", 100))
        self.max_mana: int = ensure_non_negative_int(max_mana, "max_mana")
        self.max_stamina: int = ensure_non_negative_int(max_stamina, "max_stamina")
        self.health: int = self.max_health
        self.mana: int = self.max_mana
        self.stamina: int = self.max_stamina
        self.applied_bonuses: dict[str, int] = {name: 0 for name in RESOURCES}

    # ============================================================================
    # BASE ATTRIBUTES
    # ============================================================================

    def get(self, stat: StatType) -> float:
        """
        Returns a base attribute, using the neutral value when it is missing
        or invalid.

        Args:
            stat (StatType): The attribute.

        Returns:
            float: The attribute value, at least 1.

        """
        return ensure_stat_value(
            self.statistics.get(stat),
            stat.value,
            {"character": self.owner.name},
        )

    def set(self, stat: StatType, value: float) -> None:
        self.statistics[stat] = max(1, value)

    # ============================================================================
    # RESOURCE POOLS
    # ============================================================================

    def get_resource(self, resource: str) -> int:
        return getattr(self, resource)

    def get_max(self, resource: str) -> int:
        return getattr(self, f"max_{resource}")

    def set_max(self, resource: str, value: int) -> None:
        setattr(self, f"max_{resource}", value)

    def set_resource(self, resource: str, value: int, floor: int = 0) -> int:
        """
        Sets a resource, clamping it to [floor, max].

        Args:
            resource (str): One of "health", "mana" or "stamina".
            value (int): The requested value.
            floor (int): The lowest value allowed.

        Returns:
            int: The value actually stored.

        """
        maximum = self.get_max(resource)
        clamped = max(min(floor, maximum), min(int(value), maximum))
        setattr(self, resource, clamped)
        return clamped

    def adjust_resource(self, resource: str, amount: int, floor: int = 0) -> int:
        """
        Adds an amount to a resource, clamping it to [floor, max].

        Args:
            resource (str): One of "health", "mana" or "stamina".
            amount (int): The change, negative to spend or damage.
            floor (int): The lowest value allowed.

        Returns:
            int: The actual change applied.

        """
        before = self.get_resource(resource)
        after = self.set_resource(resource, before + int(amount), floor)
        return after - before

    def adjust_health(self, amount: int) -> int:
        return self.adjust_resource("health", amount)

    def adjust_mana(self, amount: int) -> int:
        return self.adjust_resource("mana", amount)

    def adjust_stamina(self, amount: int) -> int:
        return self.adjust_resource("stamina", amount)

    def percentage(self, resource: str) -> float:
        """Returns the fraction of the pool currently filled."""
        maximum = self.get_max(resource)
        if maximum <= 0:
            return 1.0
        return self.get_resource(resource) / maximum

    def clamp_all(self) -> None:
        """Bring every pool back between zero and its maximum."""
        for resource in RESOURCES:
            self.set_resource(resource, self.get_resource(resource))
