"""
Unit/increment table lookups.

Everything here is keyed by weight unit; no function converts between
kilograms and pounds.
"""

from __future__ import annotations

import math

from .config import (
    DEFAULT_STARTING_WEIGHTS,
    FIVE_RM_ROUNDING,
    T2_RESET_INCREMENT,
    UNIT_CONFIG,
)
from .models import UserSettings


def round_half_up(x: float) -> int:
    """Round to the nearest whole number, halves away from -inf (0.5 → 1)."""
    return math.floor(x + 0.5)


def round_to_increment(x: float, increment: float) -> float:
    """Round *x* to the nearest multiple of *increment* (half up)."""
    if increment <= 0:
        return float(x)
    return round_half_up(x / increment) * increment


def format_weight(weight: float, unit: str) -> str:
    """Format a weight for display: 100.0 → '100 kg', 2.5 → '2.5 kg'."""
    return f"{weight:g} {unit}"


def get_increment(tier: str, is_lower: bool, unit: str) -> float:
    """
    Return the success increment for a T1/T2 lift.

    Args:
        tier: "T1" or "T2"
        is_lower: True for lower-body lifts (squat, deadlift)
        unit: "kg" or "lbs"

    Returns:
        Weight to add after a successful session
    """
    config = UNIT_CONFIG[unit]
    if tier == "T1":
        return config.increment_t1_lower if is_lower else config.increment_t1_upper
    return config.increment_t2_lower if is_lower else config.increment_t2_upper


def get_reset_increment(unit: str) -> float:
    """T2 stage-3 reset increment (10 kg / 20 lb)."""
    return T2_RESET_INCREMENT[unit]


def get_rounding_increment(unit: str) -> float:
    """Rounding step for 5RM math (2.5 kg / 5 lb)."""
    return FIVE_RM_ROUNDING[unit]


def default_plate_inventory(unit: str) -> dict[float, int]:
    """One pair of every standard plate for the unit."""
    return {plate: 2 for plate in UNIT_CONFIG[unit].plates}


def default_starting_weights(unit: str) -> dict[str, float]:
    """Conservative setup weights keyed by lift / T3 id."""
    return dict(DEFAULT_STARTING_WEIGHTS[unit])


def default_settings(unit: str = "kg") -> UserSettings:
    """Fresh settings for a unit: standard bar, one pair of each plate."""
    config = UNIT_CONFIG[unit]
    return UserSettings(
        bar_weight=config.bar_weight,
        plate_inventory=default_plate_inventory(unit),
        weight_unit=unit,  # type: ignore[arg-type]
        dumbbell_handle_weight=config.dumbbell_handle_weight,
    )
