"""
Plate-loading solver.

Greedy largest-first fill of one bar side against a limited plate
inventory.  Inventory counts are totals across both sides, so a size with
count N contributes N // 2 plates per side.

Infeasibility is reported as data (``achievable=False`` plus an optional
``suggested_weight``), never as an exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import (
    DEFAULT_SMALLEST_PLATE,
    PLATE_TOLERANCE,
    SUGGESTION_MAX_STEP,
    SUGGESTION_SEARCH_RANGE,
)


@dataclass
class PlateResult:
    """
    Result of a loading solve.

    ``total_weight`` is bar + 2 × per-side sum even when the target was not
    reached, so callers can show the closest loading below the target.
    """

    per_side: list[float] = field(default_factory=list)  # Largest first
    total_weight: float = 0.0
    achievable: bool = False
    suggested_weight: float | None = None


def available_plates(inventory: dict[float, int], descending: bool = True) -> list[float]:
    """Plate sizes with a positive count, sorted."""
    return sorted((p for p, qty in inventory.items() if qty > 0), reverse=descending)


def _fill(
    per_side_target: float,
    plates: list[float],
    inventory: dict[float, int],
) -> tuple[list[float], float]:
    """Greedy fill in the given plate order; return (used plates, remainder)."""
    used: list[float] = []
    remaining = per_side_target
    for plate in plates:
        max_per_side = inventory.get(plate, 0) // 2
        count = 0
        while remaining >= plate - PLATE_TOLERANCE and count < max_per_side:
            used.append(plate)
            remaining -= plate
            count += 1
    return used, remaining


def _solve(
    target_weight: float,
    bar_weight: float,
    inventory: dict[float, int],
    plates: list[float],
) -> PlateResult:
    per_side_target = (target_weight - bar_weight) / 2

    if per_side_target < -PLATE_TOLERANCE:
        return PlateResult(per_side=[], total_weight=bar_weight, achievable=False)
    if abs(per_side_target) <= PLATE_TOLERANCE:
        return PlateResult(per_side=[], total_weight=bar_weight, achievable=True)
    if not plates:
        return PlateResult(per_side=[], total_weight=bar_weight, achievable=False)

    used, remaining = _fill(per_side_target, plates, inventory)
    return PlateResult(
        per_side=used,
        total_weight=bar_weight + sum(used) * 2,
        achievable=abs(remaining) < PLATE_TOLERANCE,
    )


def suggest_nearest_weight(
    target_weight: float,
    bar_weight: float,
    inventory: dict[float, int],
) -> float | None:
    """
    Return the smallest achievable weight above *target_weight*.

    Steps upward by min(smallest plate, 0.5), rounding each candidate to
    two decimals, for at most SUGGESTION_SEARCH_RANGE.  None when the
    inventory is empty or nothing in range can be loaded.
    """
    plates = available_plates(inventory)
    if not plates:
        return None

    step = min(plates[-1], SUGGESTION_MAX_STEP)
    n_steps = int(SUGGESTION_SEARCH_RANGE / step)
    for i in range(1, n_steps + 1):
        candidate = round(target_weight + i * step, 2)
        if _solve(candidate, bar_weight, inventory, plates).achievable:
            return candidate
    return None


def solve_loading(
    target_weight: float,
    bar_weight: float,
    inventory: dict[float, int],
) -> PlateResult:
    """
    Compute the per-side plates for a target bar weight.

    Args:
        target_weight: Total weight wanted on the bar
        bar_weight: Weight of the empty bar
        inventory: plate size → total count owned

    Returns:
        PlateResult; when not achievable ``suggested_weight`` holds the next
        loadable weight above the target (if any)
    """
    plates = available_plates(inventory)
    result = _solve(target_weight, bar_weight, inventory, plates)

    if not result.achievable and target_weight > bar_weight:
        result.suggested_weight = suggest_nearest_weight(target_weight, bar_weight, inventory)

    return result


def solve_dumbbell_loading(
    target_weight: float,
    handle_weight: float,
    inventory: dict[float, int],
) -> PlateResult:
    """Same solve for a single dumbbell, with the handle as the bar."""
    return solve_loading(target_weight, handle_weight, inventory)


def format_plates(plates: list[float]) -> str:
    """
    Render a per-side list as grouped text.

    [20, 20, 10] → "2×20 + 10";  [] → "Empty bar"
    """
    if not plates:
        return "Empty bar"

    counts: dict[float, int] = {}
    for plate in plates:
        counts[plate] = counts.get(plate, 0) + 1

    parts = [f"{count}×{plate:g}" if count > 1 else f"{plate:g}" for plate, count in counts.items()]
    return " + ".join(parts)


def smallest_plate(inventory: dict[float, int]) -> float:
    """Smallest plate with a positive count; DEFAULT_SMALLEST_PLATE if none."""
    plates = available_plates(inventory, descending=False)
    return plates[0] if plates else DEFAULT_SMALLEST_PLATE
