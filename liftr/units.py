"""
Weight unit helpers.

Rounding always takes an explicit increment. Conversions are display
helpers only; stored weights stay in whatever unit the plan was built in.
"""

import math

from liftr.errors import InvalidInput
from liftr.schemas import UnitSystem

LBS_PER_KG = 2.20462

DEFAULT_ROUNDING_INCREMENTS = {
    UnitSystem.IMPERIAL: 5.0,
    UnitSystem.METRIC: 2.5,
}


def to_kg(pounds: float) -> float:
    return pounds / LBS_PER_KG


def to_lbs(kilograms: float) -> float:
    return kilograms * LBS_PER_KG


def default_rounding_increment(unit_system: UnitSystem) -> float:
    """Rounding increment used when the caller does not configure one."""
    return DEFAULT_ROUNDING_INCREMENTS[UnitSystem(unit_system)]


def round_to_increment(value: float, increment: float) -> float:
    """
    Round a weight to the nearest multiple of ``increment``.

    Halves round up (202.5 -> 205 with a 5 increment), matching how loads
    are rounded on the gym floor rather than Python's banker's rounding.

    Args:
        value: Weight to round
        increment: Positive rounding unit (e.g. 5.0 lbs, 2.5 kg)

    Returns:
        Rounded weight

    Raises:
        InvalidInput: If increment is not positive
    """
    if increment <= 0:
        raise InvalidInput(f"Rounding increment must be positive, got {increment}")
    steps = math.floor(value / increment + 0.5)
    # Re-round to drop float noise like 182.49999999999997
    return round(steps * increment, 6)


def format_weight(value: float, unit_system: UnitSystem = UnitSystem.IMPERIAL) -> str:
    """Format a pound value for display in the requested unit system."""
    if UnitSystem(unit_system) == UnitSystem.METRIC:
        return f"{to_kg(value):.1f} kg"
    return f"{value:.1f} lbs"
