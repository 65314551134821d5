"""
Console sheets for characters, abilities and combat rounds.

Everything here only formats and prints through the shared rich console; no
engine decision depends on it.
"""

from typing import Any

from rich.padding import Padding

from core.constants import EffectType, StatType
from core.utils import cprint, make_bar


def effect_to_string(effect: Any) -> str:
    """
    Converts an effect definition to a formatted string representation.

    Args:
        effect (Any): The effect definition to format.

    Returns:
        str: The effect type, its base value and scaling, and any duration.

    """
    kind = effect.effect_type.value if effect.effect_type else str(effect.type)
    text = f"[blue]{kind}[/] [green]{effect.base_value:g}[/]"
    if effect.scaling:
        scaling = ", ".join(
            f"{StatType(stat).short_name} x{factor:g}" for stat, factor in effect.scaling.items()
        )
        text += f" ({scaling})"
    if effect.variance:
        text += f" ±{effect.variance:g}"
    if effect.duration:
        text += f", {effect.duration} rounds"
    if effect.effect_type == EffectType.VAMPIRIC:
        text += f", heals {effect.heal_ratio:.0%}"
    return text


def print_ability_sheet(ability: Any, padding: int = 2) -> None:
    """
    Prints the details of an ability in a formatted way.

    Args:
        ability (Any): The ability to display.
        padding (int): Left padding for the output. Defaults to 2.

    """
    sheet: str = f"{ability.colored_name}, {ability.category}, "
    targeting = ability.targeting
    sheet += f"{targeting.type.value} ({targeting.validity.value}, {targeting.count})"
    costs = ability.costs
    spent = [
        f"{amount} {name}"
        for name, amount in (
            ("mana", costs.mana),
            ("health", costs.health),
            ("stamina", costs.stamina),
            ("gold", costs.gold),
        )
        if amount
    ]
    spent += [f"{amount} {name}" for name, amount in costs.materials.items()]
    if spent:
        sheet += f", costs {', '.join(spent)}"
    if costs.cooldown:
        sheet += f", cooldown: {costs.cooldown}"
    cprint(Padding(sheet, (0, padding)))
    padding += 2

    if ability.description:
        cprint(Padding(f'[italic]"{ability.description}"[/]', (0, padding)))
    for effect in ability.effects:
        cprint(Padding(effect_to_string(effect), (0, padding)))
    if ability.special is not None:
        cprint(Padding(f"Special: [magenta]{ability.special.kind}[/]", (0, padding)))


def print_character_sheet(char: Any) -> None:
    """
    Prints the details of a character in a formatted way.

    Args:
        char (Any): The character to display.

    """
    # Header with basic character info
    cprint(
        f"{char.char_type.emoji} [{char.char_type.color}]{char.name}[/], "
        f"[blue]{char.race.name}[/], [green]{char.char_class.name} {char.level}[/]"
    )

    # Resource pools
    cprint(
        f"  HP: {make_bar(char.health, char.max_health, color='green')} "
        f"[green]{char.health}/{char.max_health}[/]"
    )
    if char.max_mana > 0:
        cprint(
            f"  Mana: {make_bar(char.mana, char.max_mana, color='blue')} "
            f"[blue]{char.mana}/{char.max_mana}[/]"
        )
    if char.max_stamina > 0:
        cprint(f"  Stamina: [yellow]{char.stamina}/{char.max_stamina}[/]")

    # Base attributes
    stat_display = [
        f"{stat.short_name}: {char.stats.get(stat):g}" for stat in StatType
    ]
    cprint(f"  {', '.join(stat_display)}")

    if char.attack or char.defense:
        cprint(f"  Attack: [red]{char.attack}[/], Defense: [yellow]{char.defense}[/]")

    if char.racial_ability_id:
        cprint(f"  Racial: [magenta]{char.racial_ability_id}[/]")

    if char.effects.active_effects:
        statuses = ", ".join(
            f"{status.colored_name} ({status.remaining})" for status in char.effects.active_effects
        )
        cprint(f"  Statuses: {statuses}")

    if char.inventory.equipped:
        cprint("  [blue]Equipment[/]:")
        for item in char.inventory.equipped:
            cprint(Padding(f"{item.name} (+{item.attack} atk, +{item.defense} def)", (0, 4)))


def print_round_events(events: list[Any]) -> None:
    """Prints the events of a resolved round, one per line."""
    for event in events:
        marker = " [bold yellow](critical)[/]" if event.critical else ""
        cprint(f"  {event}{marker}")
