"""
Status effect module for the combat engine.

Defines the timed conditions attached to characters (buffs, debuffs,
resistances, incapacitations, damage and healing over time) and how each kind
behaves when the tracker ticks it at the end of a round.
"""

from enum import Enum
from typing import Any

from core.constants import INCAPACITATING_STATUSES, POISON_STATUSES
from pydantic import BaseModel, Field

# Status names treated as damage over time when no kind is given.
DAMAGE_OVER_TIME_STATUSES = POISON_STATUSES + ("burn", "bleed", "acid", "frostbite")

# Status names treated as healing over time when no kind is given.
HEALING_OVER_TIME_STATUSES = ("regeneration",)


class StatusKind(Enum):
    """How a status behaves when ticked."""

    MODIFIER = "modifier"
    DAMAGE_OVER_TIME = "damage_over_time"
    HEALING_OVER_TIME = "healing_over_time"
    INCAPACITATING = "incapacitating"
    MARKER = "marker"

    @property
    def color(self) -> str:
        """Returns the color string associated with this status kind."""
        return {
            StatusKind.MODIFIER: "bold yellow",
            StatusKind.DAMAGE_OVER_TIME: "bold magenta",
            StatusKind.HEALING_OVER_TIME: "bold green",
            StatusKind.INCAPACITATING: "bold red",
            StatusKind.MARKER: "bold cyan",
        }.get(self, "dim white")

    @property
    def is_recurring(self) -> bool:
        """Whether the status changes health every tick."""
        return self in (StatusKind.DAMAGE_OVER_TIME, StatusKind.HEALING_OVER_TIME)

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this status kind."""
        return {
            StatusKind.MODIFIER: "🛡️",
            StatusKind.DAMAGE_OVER_TIME: "❣️",
            StatusKind.HEALING_OVER_TIME: "💚",
            StatusKind.INCAPACITATING: "😵",
            StatusKind.MARKER: "🔖",
        }.get(self, "❔")


def classify_status(status_type: str) -> StatusKind:
    """
    Guesses the kind of a status from its name.

    Args:
        status_type (str): The status name.

    Returns:
        StatusKind: The kind the tracker should use.

    """
    if status_type in INCAPACITATING_STATUSES:
        return StatusKind.INCAPACITATING
    if status_type in DAMAGE_OVER_TIME_STATUSES:
        return StatusKind.DAMAGE_OVER_TIME
    if status_type in HEALING_OVER_TIME_STATUSES:
        return StatusKind.HEALING_OVER_TIME
    return StatusKind.MODIFIER


class StatusEffect(BaseModel):
    """
    A timed condition attached to a character.
    """

    status_type: str = Field(
        description="The tag of the status, unique per character.",
    )
    value: float = Field(
        0,
        description="Magnitude of the status (modifier amount or damage per turn).",
    )
    duration: int = Field(
        description="Total duration of the status in rounds.",
    )
    remaining: int = Field(
        -1,
        description="Rounds left before the status expires.",
    )
    kind: StatusKind = Field(
        StatusKind.MODIFIER,
        description="How the status behaves when ticked.",
    )
    source_id: str | None = Field(
        None,
        description="Id of the character that applied the status.",
    )
    fresh: bool = Field(
        False,
        description="Gained after the holder acted this round; the next tick leaves it alone.",
    )

    def model_post_init(self, _: Any) -> None:
        if not self.status_type:
            raise ValueError("A status effect must have a type.")
        if self.duration <= 0:
            raise ValueError(
                f"Duration must be a positive integer for {self.status_type}."
            )
        if self.remaining < 0:
            self.remaining = self.duration

    @property
    def display_name(self) -> str:
        return self.status_type.replace("_", " ").capitalize()

    @property
    def colored_name(self) -> str:
        """Returns the status name with color formatting applied."""
        return f"[{self.kind.color}]{self.display_name}[/]"

    @property
    def is_expired(self) -> bool:
        return self.remaining <= 0

    def recurring_amount(self) -> int:
        """
        Health change this status causes each tick: negative for damage over
        time, positive for healing over time, zero otherwise.
        """
        if self.kind == StatusKind.DAMAGE_OVER_TIME:
            return -int(self.value)
        if self.kind == StatusKind.HEALING_OVER_TIME:
            return int(self.value)
        return 0


class StatusTick(BaseModel):
    """Outcome of ticking one status on one character."""

    status_type: str = Field(description="The ticked status.")
    amount: int = Field(0, description="Actual health change caused by the tick.")
    expired: bool = Field(False, description="Whether the status ran out.")
