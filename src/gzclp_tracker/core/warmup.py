"""
Warmup ramp generator.

Two empty-bar sets, then checkpoints at ~45% and ~65% of the work weight
and a final ~85% set.  Only big plates are used, and the heaviest set is
filled smallest-first (e.g. 5+10 instead of 15) so every lighter set is a
subset of it: each step adds plates instead of swapping them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import (
    PLATE_TOLERANCE,
    WARMUP_BAR_REPS,
    WARMUP_BAR_SETS,
    WARMUP_CHECKPOINTS,
    WARMUP_PLATES,
    WARMUP_TOP_FRACTION,
    WARMUP_TOP_LABEL,
    WARMUP_TOP_REPS,
)
from .plates import available_plates
from .units import round_half_up


@dataclass
class WarmupSet:
    weight: float
    reps: int
    per_side_plates: list[float] = field(default_factory=list)
    label: str = "Bar"
    completed: bool = False


def warmup_inventory(inventory: dict[float, int], unit: str) -> dict[float, int]:
    """Restrict an inventory to the unit's big warmup plates."""
    return {
        plate: inventory[plate]
        for plate in WARMUP_PLATES[unit]
        if inventory.get(plate, 0) > 0
    }


def _smallest_first_plates(
    target_weight: float,
    bar_weight: float,
    inventory: dict[float, int],
) -> list[float]:
    """Per-side plates filled smallest-first; returned largest-first."""
    per_side_target = (target_weight - bar_weight) / 2
    if per_side_target <= 0:
        return []

    used: list[float] = []
    remaining = per_side_target
    for plate in available_plates(inventory, descending=False):
        max_per_side = inventory.get(plate, 0) // 2
        count = 0
        while remaining >= plate - PLATE_TOLERANCE and count < max_per_side:
            used.append(plate)
            remaining -= plate
            count += 1

    return sorted(used, reverse=True)


def best_subset(plates: list[float], per_side_target: float) -> list[float]:
    """
    Largest-first subset of *plates* (a multiset) not exceeding the target.
    """
    if per_side_target <= 0:
        return []

    available: dict[float, int] = {}
    for p in plates:
        available[p] = available.get(p, 0) + 1

    result: list[float] = []
    remaining = per_side_target
    for plate in sorted(available, reverse=True):
        count = 0
        while remaining >= plate and count < available[plate]:
            result.append(plate)
            remaining -= plate
            count += 1
    return result


def build_warmup(
    work_weight: float,
    bar_weight: float,
    inventory: dict[float, int],
    unit: str,
) -> list[WarmupSet]:
    """
    Build the warmup ramp for a work weight.

    Args:
        work_weight: The first work set's bar weight
        bar_weight: Empty bar weight
        inventory: Full plate inventory (filtered to big plates here)
        unit: "kg" or "lbs"

    Returns:
        Ordered warmup sets; always starts with the two bar sets
    """
    sets = [
        WarmupSet(weight=bar_weight, reps=WARMUP_BAR_REPS, per_side_plates=[], label="Bar")
        for _ in range(WARMUP_BAR_SETS)
    ]

    heaviest_target = round_half_up(work_weight * WARMUP_TOP_FRACTION)
    if heaviest_target <= bar_weight:
        return sets

    top_plates = _smallest_first_plates(heaviest_target, bar_weight, warmup_inventory(inventory, unit))
    if not top_plates:
        return sets

    for fraction, reps, label in WARMUP_CHECKPOINTS:
        target = round_half_up(work_weight * fraction)
        if target <= bar_weight:
            continue
        subset = best_subset(top_plates, (target - bar_weight) / 2)
        if not subset:
            continue
        sets.append(
            WarmupSet(
                weight=bar_weight + sum(subset) * 2,
                reps=reps,
                per_side_plates=subset,
                label=label,
            )
        )

    sets.append(
        WarmupSet(
            weight=bar_weight + sum(top_plates) * 2,
            reps=WARMUP_TOP_REPS,
            per_side_plates=top_plates,
            label=WARMUP_TOP_LABEL,
        )
    )
    return sets


def warmup_volume(sets: list[WarmupSet]) -> float:
    """Sum of weight × reps over a warmup ramp."""
    return sum(s.weight * s.reps for s in sets)
