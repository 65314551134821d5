"""
Utilities module for the combat engine.

Provides console printing with rich formatting, the singleton metaclass used
by the content registry, and small numeric helpers shared by the engine.
"""

from __future__ import annotations

import math
import random
from typing import Any, Generic

from rich.console import Console
from rich.rule import Rule
from typing_extensions import TypeVar

# Initialize the rich console.
_console = Console(markup=True, width=120, force_terminal=True, force_jupyter=False)


def cprint(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output.

    Args:
        *args: Arguments to pass to the console print function.
        **kwargs: Keyword arguments to pass to the console print function.

    """
    _console.print(*args, **kwargs)


def crule(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output with a rule.

    Args:
        *args: Arguments to pass to the Rule constructor.
        **kwargs: Keyword arguments to pass to the Rule constructor.

    """
    _console.print(Rule(*args, **kwargs))


# ---- Singleton Metaclass ----


_T = TypeVar("_T")


class Singleton(type, Generic[_T]):
    """Metaclass that returns the same instance every time."""

    _instances: dict[Singleton[_T], _T] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> _T:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---- Numeric helpers ----


def scale_roll(rng: random.Random, low: float, high: float) -> float:
    """
    Draws a uniform multiplier in [low, high].

    Args:
        rng (random.Random): The random source.
        low (float): Lower bound.
        high (float): Upper bound.

    Returns:
        float: The multiplier.

    """
    return low + rng.random() * (high - low)


def safe_floor(value: Any, floor: int = 0) -> int:
    """
    Floors a number to an int, returning the floor value for anything that
    is not a finite number.

    Args:
        value (Any): The value to floor.
        floor (int): The minimum result and the fallback.

    Returns:
        int: The floored value.

    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return floor
    if not math.isfinite(value):
        return floor
    return max(floor, math.floor(value))


def make_bar(current: int, maximum: int, length: int = 10, color: str = "white") -> str:
    """
    Creates a visual progress bar representation.

    Args:
        current (int): The current value.
        maximum (int): The maximum value.
        length (int): The length of the bar in characters. Defaults to 10.
        color (str): The color for the filled portion. Defaults to "white".

    Returns:
        str: A formatted progress bar string.

    """
    filled = int((current / maximum) * length) if maximum > 0 else 0
    empty = length - filled
    bar = f"[{color}]" + "▮" * filled
    if empty > 0:
        bar += "[dim white]" + "▯" * empty + "[/]"
    bar += "[/]"
    return bar
