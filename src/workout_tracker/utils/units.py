"""Weight unit conversion and display formatting.

Weights are stored in kilograms. Everything here is a pure function; callers
pass the user's unit explicitly.
"""

import math
from typing import Optional, Union

from ..models.enums import WeightUnit

KG_TO_LB = 2.20462

UnitLike = Union[WeightUnit, str]


def _unit(value: UnitLike) -> WeightUnit:
    if isinstance(value, WeightUnit):
        return value
    normalized = str(value).strip().lower()
    if normalized in ("lbs", "pounds", "pound"):
        return WeightUnit.POUNDS
    if normalized in ("kgs", "kilograms", "kilogram"):
        return WeightUnit.KILOGRAMS
    return WeightUnit(normalized)


def convert(value: float, from_unit: UnitLike, to_unit: UnitLike) -> float:
    """Convert a weight between units. No rounding is applied.

    Args:
        value: Weight expressed in ``from_unit``
        from_unit: Source unit
        to_unit: Target unit

    Returns:
        The weight expressed in ``to_unit``
    """
    source, target = _unit(from_unit), _unit(to_unit)
    if source == target:
        return value
    if source == WeightUnit.KILOGRAMS:
        return value * KG_TO_LB
    return value / KG_TO_LB


def to_storage(value: float, unit: UnitLike) -> float:
    """Convert a weight entered in ``unit`` to kilograms."""
    return convert(value, unit, WeightUnit.KILOGRAMS)


def from_storage(value_kg: float, unit: UnitLike) -> float:
    """Convert a stored kilogram weight to ``unit``."""
    return convert(value_kg, WeightUnit.KILOGRAMS, unit)


def _format_number(value: float, decimal_separator: str = ".") -> str:
    rounded = round(value, 2)
    if rounded.is_integer():
        text = f"{rounded:.0f}"
    else:
        text = f"{rounded:.2f}".rstrip("0")
    if text == "-0":
        text = "0"
    return text.replace(".", decimal_separator)


def format_weight(
    value: float,
    unit: Optional[UnitLike] = None,
    decimal_separator: str = ".",
) -> str:
    """Format a weight for display.

    Integral values show no decimals; others show one or two.

    Args:
        value: Weight already expressed in the display unit
        unit: If given, appended as a suffix ("82.5 kg")
        decimal_separator: "." or ","

    Returns:
        Formatted weight string
    """
    text = _format_number(value, decimal_separator)
    if unit is not None:
        return f"{text} {_unit(unit).value}"
    return text


def format_for_input(value: float) -> str:
    """Format a weight for an input field: empty for zero, "." separator."""
    if value == 0:
        return ""
    return _format_number(value)


def parse_weight(text: str) -> Optional[float]:
    """Parse user-entered weight text, accepting "." or "," as separator.

    Returns:
        The parsed value, or None if the text is not a finite number
    """
    if text is None:
        return None
    normalized = text.strip().replace(",", ".")
    if not normalized:
        return None
    try:
        value = float(normalized)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value
