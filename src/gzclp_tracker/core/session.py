"""
Workout session: build a workout from program state, record sets, finish.

Every function returns a new Workout; inputs are never mutated.
``complete_workout`` runs progression first and medal detection second,
so detection sees both the old and the new program state.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime

from .catalog import WORKOUTS
from .config import DEFAULT_T3_WEIGHT, T3_CONFIG
from .exercises import (
    create_set_logs,
    get_effective_stage_config,
    get_lift_substitution,
    get_t3_ids_for_workout,
)
from .medals import detect_medals
from .models import ExerciseLog, Medal, ProgramState, UserSettings, Workout
from .plates import smallest_plate
from .progression import apply_workout

logger = logging.getLogger(__name__)


@dataclass
class WorkoutOutcome:
    workout: Workout
    new_state: ProgramState
    messages: dict[str, str] = field(default_factory=dict)
    medals: list[Medal] = field(default_factory=list)


def _main_lift_log(
    lift_id: str,
    tier: str,
    program_state: ProgramState,
    settings: UserSettings,
) -> ExerciseLog | None:
    state = program_state.lift_state(lift_id, tier)
    if state is None:
        return None

    weight = state.weight
    sub = get_lift_substitution(lift_id, settings.lift_substitutions)
    if sub is not None and sub.force_t3_progression:
        other = program_state.lift_state(lift_id, "T2" if tier == "T1" else "T1")
        if other is not None:
            weight = max(weight, other.weight)

    config = get_effective_stage_config(tier, state.stage, lift_id, settings.lift_substitutions)
    return ExerciseLog(
        lift_id=lift_id,
        tier=tier,  # type: ignore[arg-type]
        weight=weight,
        target_sets=config.sets,
        target_reps=config.reps,
        sets=create_set_logs(config.sets, config.has_amrap),
        original_weight=weight,
    )


def _t3_log(exercise_id: str, program_state: ProgramState) -> ExerciseLog:
    return ExerciseLog(
        lift_id=exercise_id,
        tier="T3",
        weight=program_state.t3.get(exercise_id, DEFAULT_T3_WEIGHT),
        target_sets=T3_CONFIG.sets,
        target_reps=T3_CONFIG.reps,
        sets=create_set_logs(T3_CONFIG.sets, T3_CONFIG.has_amrap),
    )


def start_workout(
    program_state: ProgramState,
    settings: UserSettings,
    workout_id: str | None = None,
    date: str | None = None,
) -> Workout:
    """
    Create the next workout in the rotation.

    Args:
        program_state: Current program state
        settings: User settings (substitutions, additional T3s)
        workout_id: Explicit id (random uuid4 when omitted)
        date: ISO 8601 timestamp (now when omitted)

    Returns:
        Workout with T1, T2 and every T3 for ``next_workout_type``

    Raises:
        ValueError: If ``next_workout_type`` is not a known template
    """
    workout_type = program_state.next_workout_type
    template = WORKOUTS.get(workout_type)
    if template is None:
        raise ValueError(f"Unknown workout type: {workout_type}")

    exercises: list[ExerciseLog] = []
    for lift_id, tier in ((template.t1, "T1"), (template.t2, "T2")):
        log = _main_lift_log(lift_id, tier, program_state, settings)
        if log is not None:
            exercises.append(log)

    for exercise_id in get_t3_ids_for_workout(workout_type, settings.additional_t3s):
        exercises.append(_t3_log(exercise_id, program_state))

    return Workout(
        id=workout_id or str(uuid.uuid4()),
        date=date or datetime.now().isoformat(timespec="seconds"),
        type=workout_type,
        exercises=exercises,
    )


def _exercise_at(workout: Workout, exercise_index: int) -> ExerciseLog:
    if not 0 <= exercise_index < len(workout.exercises):
        raise IndexError(f"No exercise at index {exercise_index}")
    return workout.exercises[exercise_index]


def _update_set(workout: Workout, exercise_index: int, set_index: int, reps: int) -> Workout:
    exercise = _exercise_at(workout, exercise_index)
    if not 0 <= set_index < len(exercise.sets):
        raise IndexError(f"No set at index {set_index}")

    sets = list(exercise.sets)
    sets[set_index] = replace(sets[set_index], reps=reps, completed=True)
    exercises = list(workout.exercises)
    exercises[exercise_index] = replace(exercise, sets=sets)
    return replace(workout, exercises=exercises)


def complete_set(workout: Workout, exercise_index: int, set_index: int, reps: int) -> Workout:
    """Record reps for one set."""
    if reps < 0:
        raise ValueError("reps must be non-negative")
    return _update_set(workout, exercise_index, set_index, reps)


def fail_set(workout: Workout, exercise_index: int, set_index: int) -> Workout:
    """Mark one set as attempted with zero reps."""
    return _update_set(workout, exercise_index, set_index, 0)


def fail_remaining_sets(workout: Workout, exercise_index: int) -> Workout:
    """Mark every not-yet-attempted set of an exercise as failed."""
    exercise = _exercise_at(workout, exercise_index)
    sets = [s if s.completed else replace(s, reps=0, completed=True) for s in exercise.sets]
    exercises = list(workout.exercises)
    exercises[exercise_index] = replace(exercise, sets=sets)
    return replace(workout, exercises=exercises)


def update_exercise_weight(workout: Workout, exercise_index: int, weight: float) -> Workout:
    """
    Change the working weight of one exercise.

    For T1/T2 this makes it a trial weight: ``original_weight`` keeps the
    programmed value so a failure does not change the program state.
    """
    if weight <= 0:
        raise ValueError("weight must be positive")
    exercise = _exercise_at(workout, exercise_index)
    exercises = list(workout.exercises)
    exercises[exercise_index] = replace(exercise, weight=weight)
    return replace(workout, exercises=exercises)


def add_t3_exercise(workout: Workout, exercise_id: str, program_state: ProgramState) -> Workout:
    """Append a T3 exercise unless the workout already has it."""
    if any(e.tier == "T3" and e.lift_id == exercise_id for e in workout.exercises):
        return workout
    return replace(workout, exercises=[*workout.exercises, _t3_log(exercise_id, program_state)])


def is_workout_complete(workout: Workout) -> bool:
    """True when every set of every exercise has been attempted."""
    return all(s.completed for e in workout.exercises for s in e.sets)


def finish_workout(workout: Workout, notes: str | None = None) -> Workout:
    """Mark the workout completed, failing any sets that were never logged."""
    finished = workout
    for i in range(len(workout.exercises)):
        finished = fail_remaining_sets(finished, i)
    return replace(finished, completed=True, notes=notes if notes is not None else workout.notes)


def complete_workout(
    workout: Workout,
    program_state: ProgramState,
    history: list[Workout],
    settings: UserSettings,
) -> WorkoutOutcome:
    """
    Finish a workout, progress the program and award medals.

    Args:
        workout: The workout being finished (need not be marked completed)
        program_state: Program state before this workout
        history: Earlier completed workouts (not including this one)
        settings: User settings

    Returns:
        WorkoutOutcome with the finished workout (medals attached), the new
        program state and per-lift progression messages
    """
    finished = workout if workout.completed else finish_workout(workout)

    progression = apply_workout(program_state, finished, settings)
    medals = detect_medals(
        finished,
        history,
        old_state=program_state,
        new_state=progression.new_state,
        unit=settings.weight_unit,
        lift_substitutions=settings.lift_substitutions,
        smallest_plate=smallest_plate(settings.plate_inventory),
    )
    logger.info(
        "Completed workout %s (%s): %d medal(s), next %s",
        finished.id,
        finished.type,
        len(medals),
        progression.new_state.next_workout_type,
    )
    return WorkoutOutcome(
        workout=replace(finished, medals=medals),
        new_state=progression.new_state,
        messages=progression.messages,
        medals=medals,
    )
