"""Summary statistics for a finished workout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from .exercises import get_lift_substitution
from .models import LiftSubstitution, Workout
from .units import round_half_up
from .warmup import build_warmup, warmup_volume


@dataclass
class HeaviestLift:
    name: str = ""
    weight: float = 0.0


@dataclass
class WorkoutStats:
    working_volume: float = 0.0
    warmup_volume: float = 0.0
    total_volume: float = 0.0
    total_sets: int = 0
    total_reps: int = 0
    completed_sets: int = 0
    success_rate: int = 0  # whole percent of sets completed with reps > 0
    heaviest_lift: HeaviestLift = field(default_factory=HeaviestLift)


def calculate_workout_stats(
    workout: Workout,
    bar_weight: float,
    inventory: dict[float, int],
    unit: str,
    lift_substitutions: list[LiftSubstitution] | None = None,
    name_fn: Callable[[str, str], str] | None = None,
) -> WorkoutStats:
    """
    Volume, set/rep counts, success rate and heaviest lift.

    Warmup volume is estimated from the warmup ramp of each T1 exercise
    (forced-T3 substitutes do not warm up).  Failed sets (reps 0) count
    towards total sets only.
    """
    stats = WorkoutStats()

    for exercise in workout.exercises:
        name = name_fn(exercise.lift_id, exercise.tier) if name_fn else exercise.lift_id

        if exercise.tier == "T1":
            sub = get_lift_substitution(exercise.lift_id, lift_substitutions)
            if not (sub and sub.force_t3_progression):
                stats.warmup_volume += warmup_volume(
                    build_warmup(exercise.weight, bar_weight, inventory, unit)
                )

        for s in exercise.sets:
            stats.total_sets += 1
            if s.completed and s.reps > 0:
                stats.completed_sets += 1
                stats.total_reps += s.reps
                stats.working_volume += exercise.weight * s.reps

        if exercise.weight > stats.heaviest_lift.weight:
            stats.heaviest_lift = HeaviestLift(name=name, weight=exercise.weight)

    stats.total_volume = stats.working_volume + stats.warmup_volume
    if stats.total_sets > 0:
        stats.success_rate = round_half_up(stats.completed_sets / stats.total_sets * 100)
    return stats
