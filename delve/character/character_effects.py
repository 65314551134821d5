"""
Character effects module for the combat engine.

Tracks the status effects attached to a character: application with
replace-not-stack semantics, lookups used by the turn loop, and the
end-of-round tick that applies recurring damage or healing and counts the
durations down.
"""

from typing import Any

from core.constants import INCAPACITATING_STATUSES
from core.logging import log_debug
from effects.status_effect import StatusEffect, StatusKind, StatusTick, classify_status


class CharacterEffects:
    """
    Manages the active status effects of a character.

    Attributes:
        _owner (Any):
            The character that owns this effects module.
        active_effects (list[StatusEffect]):
            The statuses currently attached, at most one per type.
        turn_taken (bool):
            Whether the owner already had its turn this round.

    """

    _owner: Any
    active_effects: list[StatusEffect]
    turn_taken: bool

    def __init__(self, owner: Any) -> None:
        """
        Initialize the CharacterEffects module.

        Args:
            owner (Any):
                The character that owns this effects module.

        """
        self._owner = owner
        self.active_effects = []
        self.turn_taken = False

    # === Effect Management ===

    def apply_status(
        self,
        status_type: str,
        value: float,
        duration: int,
        kind: StatusKind | None = None,
        source_id: str | None = None,
    ) -> StatusEffect:
        """
        Attach a status, replacing any existing status of the same type and
        restarting the timer at the new duration. A non-recurring status gained
        after the owner's turn is left alone by the next tick, so it is still
        active on the owner's following turn.

        Args:
            status_type (str):
                The status tag.
            value (float):
                The magnitude of the status.
            duration (int):
                Duration in rounds.
            kind (StatusKind | None):
                Tick behaviour, guessed from the name when omitted.
            source_id (str | None):
                Id of the character applying the status.

        Returns:
            StatusEffect:
                The attached status.

        """
        self.remove_status(status_type)
        kind = kind or classify_status(status_type)
        status = StatusEffect(
            status_type=status_type,
            value=value,
            duration=duration,
            kind=kind,
            source_id=source_id,
            fresh=self.turn_taken and not kind.is_recurring,
        )
        self.active_effects.append(status)
        log_debug(
            f"{self._owner.name} gains {status_type}",
            {"value": value, "duration": duration},
        )
        return status

    def remove_status(self, status_type: str) -> bool:
        """
        Remove a status by type.

        Args:
            status_type (str):
                The status tag.

        Returns:
            bool:
                True if a status was removed, False otherwise.

        """
        before = len(self.active_effects)
        self.active_effects = [
            se for se in self.active_effects if se.status_type != status_type
        ]
        return len(self.active_effects) != before

    def get_status(self, status_type: str) -> StatusEffect | None:
        """Returns the active status of the given type, if any."""
        for status in self.active_effects:
            if status.status_type == status_type:
                return status
        return None

    def has_status(self, status_type: str) -> bool:
        return self.get_status(status_type) is not None

    def status_value(self, status_type: str) -> float:
        """Returns the magnitude of a status, or 0 when it is not active."""
        status = self.get_status(status_type)
        return status.value if status else 0

    def clear(self) -> None:
        """Drop every active status."""
        self.active_effects.clear()

    # === Queries used by the turn loop ===

    def is_incapacitated(self) -> bool:
        """Check if a status prevents the character from acting."""
        return any(self.has_status(name) for name in INCAPACITATING_STATUSES)

    def attack_modifier(self) -> float:
        return self.status_value("attack_buff") - self.status_value("attack_debuff")

    def defense_modifier(self) -> float:
        return self.status_value("defense_buff") - self.status_value("defense_debuff")

    # === Turn Updates ===

    def start_round(self) -> None:
        self.turn_taken = False

    def end_turn(self) -> None:
        """Mark the owner's turn of this round as spent."""
        self.turn_taken = True

    def tick(self) -> list[StatusTick]:
        """
        Apply every status's recurring behaviour, then count its duration
        down, dropping the statuses that run out. Fresh statuses are skipped
        once.

        Returns:
            list[StatusTick]:
                One entry per ticked status.

        """
        ticks: list[StatusTick] = []
        for status in list(self.active_effects):
            if status.fresh:
                status.fresh = False
                continue
            amount = 0
            delta = status.recurring_amount()
            if delta and self._owner.is_alive:
                amount = self._owner.stats.adjust_health(delta)
            status.remaining -= 1
            ticks.append(
                StatusTick(
                    status_type=status.status_type,
                    amount=amount,
                    expired=status.is_expired,
                )
            )
        self.active_effects = [se for se in self.active_effects if not se.is_expired]
        return ticks
