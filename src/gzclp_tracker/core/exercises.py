"""
Exercise resolution.

A logical lift id resolves in two stages: the fixed base catalog
(main lifts, built-in T3 exercises) is overridden by an optional
substitution record pointing into the user's exercise library.  All
lookups fall back to the raw id instead of failing.
"""

from __future__ import annotations

from typing import Literal

from .catalog import DUMBBELL_EXERCISES, LIFTS, T3_EXERCISES, WORKOUTS
from .config import AMRAP_PROGRESSION_REPS, T1_STAGES, T2_STAGES, T3_CONFIG, StageConfig
from .models import (
    AdditionalT3Assignment,
    ExerciseDefinition,
    ExerciseLog,
    LiftSubstitution,
    SetLog,
)

LiftStatus = Literal["success", "fail", "neutral"]


def get_lift_substitution(
    lift_id: str,
    substitutions: list[LiftSubstitution] | None,
) -> LiftSubstitution | None:
    """Return the substitution for a lift id, or None."""
    if not substitutions:
        return None
    return next((s for s in substitutions if s.original_lift_id == lift_id), None)


def find_library_exercise(
    exercise_id: str,
    library: list[ExerciseDefinition] | None,
) -> ExerciseDefinition | None:
    if not library:
        return None
    return next((e for e in library if e.id == exercise_id), None)


def uses_t3_progression(
    lift_id: str,
    tier: str,
    substitutions: list[LiftSubstitution] | None = None,
) -> bool:
    """True for T3 exercises and for lifts under a forced-T3 substitution."""
    if tier == "T3":
        return True
    sub = get_lift_substitution(lift_id, substitutions)
    return bool(sub and sub.force_t3_progression)


def get_exercise_name(
    lift_id: str,
    tier: str,
    substitutions: list[LiftSubstitution] | None = None,
    library: list[ExerciseDefinition] | None = None,
) -> str:
    """
    Resolve a display name.

    Order: substitution (library entry, else raw substitute id); for T3 the
    library, then the built-in T3 table; for T1/T2 the built-in lift table.
    Falls back to the raw lift id.
    """
    sub = get_lift_substitution(lift_id, substitutions)
    if sub is not None:
        entry = find_library_exercise(sub.substitute_id, library)
        return entry.name if entry else sub.substitute_id

    if tier == "T3":
        entry = find_library_exercise(lift_id, library)
        if entry:
            return entry.name
        t3 = T3_EXERCISES.get(lift_id)
        return t3.name if t3 else lift_id

    lift = LIFTS.get(lift_id)
    return lift.name if lift else lift_id


def is_dumbbell_exercise(
    lift_id: str,
    substitutions: list[LiftSubstitution] | None = None,
    library: list[ExerciseDefinition] | None = None,
) -> bool:
    """Dumbbell classification, same resolution chain as the name."""
    sub = get_lift_substitution(lift_id, substitutions)
    if sub is not None:
        entry = find_library_exercise(sub.substitute_id, library)
        return entry.is_dumbbell if entry else False

    entry = find_library_exercise(lift_id, library)
    if entry:
        return entry.is_dumbbell
    return lift_id in DUMBBELL_EXERCISES


def get_stage_config(tier: str, stage: int) -> StageConfig:
    """Set/rep prescription for a tier and stage (T3 has a single rung)."""
    if tier == "T1":
        return T1_STAGES[stage]
    if tier == "T2":
        return T2_STAGES[stage]
    return T3_CONFIG


def get_effective_stage_config(
    tier: str,
    stage: int,
    lift_id: str,
    substitutions: list[LiftSubstitution] | None = None,
) -> StageConfig:
    """Stage config, with forced-T3 substitutes trained 3×15+."""
    if uses_t3_progression(lift_id, tier, substitutions):
        return T3_CONFIG
    return get_stage_config(tier, stage)


def get_t3_ids_for_workout(
    workout_type: str,
    additional_t3s: list[AdditionalT3Assignment] | None = None,
) -> list[str]:
    """Template T3 followed by any additional T3s for the workout, no repeats."""
    ids: list[str] = []
    template = WORKOUTS.get(workout_type)
    if template is not None:
        ids.append(template.t3)
    for assignment in additional_t3s or []:
        if assignment.workout_type != workout_type:
            continue
        for ex_id in assignment.exercise_ids:
            if ex_id not in ids:
                ids.append(ex_id)
    return ids


def create_set_logs(n_sets: int, has_amrap: bool) -> list[SetLog]:
    """Fresh set logs; only the last set can be the AMRAP set."""
    return [
        SetLog(set_number=i + 1, reps=0, completed=False, is_amrap=has_amrap and i == n_sets - 1)
        for i in range(n_sets)
    ]


def get_stage_from_config(exercise: ExerciseLog) -> int:
    """Infer the stage from a log's prescription; 1 when unrecognised."""
    if exercise.tier in ("T1", "T2"):
        stages = T1_STAGES if exercise.tier == "T1" else T2_STAGES
        for stage, config in stages.items():
            if config.sets == exercise.target_sets and config.reps == exercise.target_reps:
                return stage
    return 1


def get_lift_status(exercise: ExerciseLog) -> LiftStatus:
    """T3: success on a 25+ AMRAP, else neutral.  T1/T2: success or fail."""
    if exercise.tier == "T3":
        amrap = exercise.amrap_set
        reps = amrap.reps if amrap else 0
        return "success" if reps >= AMRAP_PROGRESSION_REPS else "neutral"
    total = sum(s.reps for s in exercise.sets)
    return "success" if total >= exercise.target_sets * exercise.target_reps else "fail"


def get_t3_labels(count: int) -> list[str]:
    """["T3"] for a single accessory, ["T3.1", "T3.2", …] otherwise."""
    if count <= 1:
        return ["T3"]
    return [f"T3.{i + 1}" for i in range(count)]
