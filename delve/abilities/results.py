"""
Result models returned by the ability resolver.

Refusals are values, not exceptions: every check and application returns one
of these models so callers can report the outcome without catching anything.
"""

from typing import Any

from pydantic import BaseModel, Field


class UsabilityCheck(BaseModel):
    """Whether a caster may use an ability right now, and why not."""

    allowed: bool = Field(description="True when the ability may be used.")
    reason: str | None = Field(None, description="The first failing requirement.")

    @classmethod
    def ok(cls) -> "UsabilityCheck":
        return cls(allowed=True)

    @classmethod
    def refuse(cls, reason: str) -> "UsabilityCheck":
        return cls(allowed=False, reason=reason)


class EffectResult(BaseModel):
    """Outcome of applying one effect to one target."""

    type: str = Field(description="The effect type that was applied.")
    target: str = Field(description="Name of the affected character.")
    success: bool = Field(True, description="False when nothing was applied.")
    value: int = Field(0, description="The amount dealt, healed or granted.")
    message: str = Field("", description="Human readable description.")
    spread: bool = Field(
        False, description="Whether a secondary application should propagate."
    )
    spread_effect: Any = Field(
        None, description="The effect to propagate when spread is set."
    )


class AbilityResult(BaseModel):
    """Outcome of using an ability."""

    success: bool = Field(description="False when the ability was refused or failed.")
    message: str = Field(description="Summary of what happened.")
    results: list[EffectResult] = Field(
        default_factory=list,
        description="One entry per effect application.",
    )

    @property
    def spread_results(self) -> list[EffectResult]:
        return [result for result in self.results if result.spread]
