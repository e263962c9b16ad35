"""
GZCLP progression engine.

Per (lift, tier) state machines:

  T1  5×3 → 6×2 → 10×1 → pending 5RM test
      success: +increment, stage unchanged
  T2  3×10 → 3×8 → 3×6 → reset to 3×10 at last stage-1 weight + 10 kg / 20 lb
      success: +increment, stage-1 weight remembered as the reset anchor
  T3  3×15+: +smallest plate when the AMRAP set reaches 25 reps

A lift under a forced-T3 substitution follows the T3 rule in its T1/T2
slot.  Failing with a trial weight (logged weight ≠ programmed weight)
leaves the state untouched.

Every function returns new objects; nothing here mutates its inputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .catalog import LIFTS, WORKOUT_ORDER
from .config import (
    AMRAP_PROGRESSION_REPS,
    EPLEY_DIVISOR,
    FIVE_RM_FRACTION_OF_1RM,
    T1_RESET_FRACTION,
    T2_START_FRACTION,
)
from .exercises import get_lift_substitution, get_stage_config
from .models import ExerciseLog, LiftState, ProgramState, UserSettings, Workout
from .plates import smallest_plate
from .units import (
    format_weight,
    get_increment,
    get_reset_increment,
    get_rounding_increment,
    round_half_up,
    round_to_increment,
)

logger = logging.getLogger(__name__)


@dataclass
class ProgressionResult:
    new_state: LiftState
    message: str


@dataclass
class T3ProgressionResult:
    new_weight: float
    increased: bool


@dataclass
class WorkoutProgression:
    """Program state after a workout plus one message per progressed lift."""

    new_state: ProgramState
    messages: dict[str, str] = field(default_factory=dict)  # "lift:tier" → message


# ---------------------------------------------------------------------------
# Rep accounting
# ---------------------------------------------------------------------------

def total_reps(exercise: ExerciseLog) -> int:
    """Sum of reps over all sets."""
    return sum(s.reps for s in exercise.sets)


def target_total_reps(exercise: ExerciseLog) -> int:
    return exercise.target_sets * exercise.target_reps


def did_hit_rep_target(exercise: ExerciseLog) -> bool:
    """Success predicate shared by the engine and the medal detector."""
    return total_reps(exercise) >= target_total_reps(exercise)


def amrap_reps(exercise: ExerciseLog) -> int | None:
    """Reps of the AMRAP set, or None when the exercise has none."""
    amrap = exercise.amrap_set
    return amrap.reps if amrap else None


def lift_increment(lift_id: str, tier: str, unit: str) -> float:
    """
    Success increment for a T1/T2 lift.

    Unknown lift ids are treated as upper-body lifts.
    """
    lift = LIFTS.get(lift_id)
    is_lower = lift.is_lower if lift else False
    return get_increment(tier, is_lower, unit)


# ---------------------------------------------------------------------------
# Tier state machines
# ---------------------------------------------------------------------------

def _trial_failed(state: LiftState, exercise: ExerciseLog, unit: str) -> ProgressionResult:
    return ProgressionResult(
        new_state=replace(state),
        message=(
            f"Trial at {format_weight(exercise.weight, unit)} failed, "
            f"staying at {format_weight(state.weight, unit)}"
        ),
    )


def _awaiting_5rm(state: LiftState) -> ProgressionResult:
    return ProgressionResult(new_state=replace(state), message="Test 5RM first")


def calculate_t1_progression(
    current_state: LiftState,
    exercise: ExerciseLog,
    increment: float,
    unit: str,
) -> ProgressionResult:
    """
    Next T1 state after a completed exercise.

    A lift awaiting a 5RM test is held as is until ``apply_t1_reset``.

    Args:
        current_state: Programmed state before the workout
        exercise: Completed log for this lift
        increment: Weight added on success
        unit: "kg" or "lbs" (messages and nothing else)

    Returns:
        ProgressionResult with the new state and a short message
    """
    if current_state.pending_5rm_test:
        return _awaiting_5rm(current_state)

    if did_hit_rep_target(exercise):
        new_weight = exercise.weight + increment
        return ProgressionResult(
            new_state=replace(current_state, weight=new_weight),
            message=f"+{format_weight(increment, unit)} → {format_weight(new_weight, unit)}",
        )

    if exercise.is_trial:
        return _trial_failed(current_state, exercise, unit)

    stage = current_state.stage
    weight = current_state.weight

    if stage in (1, 2):
        next_stage = stage + 1
        config = get_stage_config("T1", next_stage)
        return ProgressionResult(
            new_state=replace(current_state, stage=next_stage),
            message=f"Moving to {config.sets}×{config.reps} at {format_weight(weight, unit)}",
        )

    # Stage 3 failure: hold weight until a new 5RM is supplied
    best_reps = max((s.reps for s in exercise.sets if s.completed), default=0)
    return ProgressionResult(
        new_state=replace(
            current_state,
            pending_5rm_test=True,
            best_set_reps=best_reps,
            best_set_weight=weight,
        ),
        message="New cycle: test 5RM first",
    )


def calculate_t2_progression(
    current_state: LiftState,
    exercise: ExerciseLog,
    increment: float,
    unit: str,
) -> ProgressionResult:
    """Next T2 state after a completed exercise."""
    stage = current_state.stage
    weight = current_state.weight

    if did_hit_rep_target(exercise):
        new_weight = exercise.weight + increment
        anchor = exercise.weight if stage == 1 else current_state.last_stage1_weight
        return ProgressionResult(
            new_state=replace(current_state, weight=new_weight, last_stage1_weight=anchor),
            message=f"+{format_weight(increment, unit)} → {format_weight(new_weight, unit)}",
        )

    if exercise.is_trial:
        return _trial_failed(current_state, exercise, unit)

    if stage == 1:
        config = get_stage_config("T2", 2)
        return ProgressionResult(
            new_state=replace(current_state, stage=2, last_stage1_weight=weight),
            message=f"Moving to {config.sets}×{config.reps} at {format_weight(weight, unit)}",
        )

    if stage == 2:
        config = get_stage_config("T2", 3)
        return ProgressionResult(
            new_state=replace(current_state, stage=3),
            message=f"Moving to {config.sets}×{config.reps} at {format_weight(weight, unit)}",
        )

    base = current_state.last_stage1_weight if current_state.last_stage1_weight is not None else weight
    reset_weight = base + get_reset_increment(unit)
    config = get_stage_config("T2", 1)
    return ProgressionResult(
        new_state=replace(current_state, stage=1, weight=reset_weight, last_stage1_weight=None),
        message=f"Reset to {config.sets}×{config.reps} at {format_weight(reset_weight, unit)}",
    )


def should_increase_t3_weight(amrap: int) -> bool:
    return amrap >= AMRAP_PROGRESSION_REPS


def calculate_t3_progression(
    current_weight: float,
    amrap: int,
    increment: float,
) -> T3ProgressionResult:
    """T3 rule: +increment iff the AMRAP set reached 25 reps."""
    if should_increase_t3_weight(amrap):
        return T3ProgressionResult(new_weight=current_weight + increment, increased=True)
    return T3ProgressionResult(new_weight=current_weight, increased=False)


# ---------------------------------------------------------------------------
# 5RM re-test
# ---------------------------------------------------------------------------

def estimate_5rm(weight: float, reps: int, unit: str) -> float:
    """
    Estimate a 5-rep max from one set.

    Epley 1RM = weight × (1 + reps/30); 5RM ≈ 87% of 1RM, rounded to
    2.5 kg / 5 lb.

        estimate_5rm(100, 5, "kg") → 116.67 × 0.87 = 101.5 → 102.5
    """
    one_rm = weight * (1 + reps / EPLEY_DIVISOR)
    return round_to_increment(one_rm * FIVE_RM_FRACTION_OF_1RM, get_rounding_increment(unit))


def apply_t1_reset(current_state: LiftState, new_5rm: float, unit: str) -> LiftState:
    """
    Start a new T1 cycle from a tested or estimated 5RM.

    Weight becomes 85% of the 5RM rounded to 2.5 kg / 5 lb (at least one
    rounding step), stage 1, and the pending-test fields are cleared.
    """
    step = get_rounding_increment(unit)
    reset_weight = max(round_to_increment(new_5rm * T1_RESET_FRACTION, step), step)
    return replace(
        current_state,
        stage=1,
        weight=reset_weight,
        pending_5rm_test=False,
        best_set_reps=None,
        best_set_weight=None,
    )


# ---------------------------------------------------------------------------
# Program state
# ---------------------------------------------------------------------------

def create_initial_lift_state(lift_id: str, tier: str, starting_weight: float) -> LiftState:
    return LiftState(lift_id=lift_id, tier=tier, weight=starting_weight, stage=1)  # type: ignore[arg-type]


def create_initial_program_state(starting_weights: dict[str, float]) -> ProgramState:
    """
    Fresh program state.

    Args:
        starting_weights: T1 weight per main lift id, plus weights for any
            T3 exercise ids.  T2 starts at 60% of T1, rounded.

    Raises:
        ValueError: If a main lift has no starting weight
    """
    missing = [lift_id for lift_id in LIFTS if lift_id not in starting_weights]
    if missing:
        raise ValueError(f"Missing starting weights for: {', '.join(missing)}")

    t1 = {lift_id: create_initial_lift_state(lift_id, "T1", starting_weights[lift_id]) for lift_id in LIFTS}
    t2 = {
        lift_id: create_initial_lift_state(
            lift_id, "T2", max(round_half_up(starting_weights[lift_id] * T2_START_FRACTION), 1)
        )
        for lift_id in LIFTS
    }
    t3 = {ex_id: float(w) for ex_id, w in starting_weights.items() if ex_id not in LIFTS}
    return ProgramState(t1=t1, t2=t2, t3=t3, next_workout_type=WORKOUT_ORDER[0], workout_count=0)


def next_workout_type(current: str) -> str:
    """Rotation A1 → A2 → B1 → B2 → A1.  Unknown types restart the rotation."""
    if current not in WORKOUT_ORDER:
        return WORKOUT_ORDER[0]
    return WORKOUT_ORDER[(WORKOUT_ORDER.index(current) + 1) % len(WORKOUT_ORDER)]


def _progress_lift(
    state: LiftState,
    exercise: ExerciseLog,
    settings: UserSettings,
    plate: float,
) -> ProgressionResult:
    if state.pending_5rm_test:
        return _awaiting_5rm(state)

    unit = settings.weight_unit
    sub = get_lift_substitution(exercise.lift_id, settings.lift_substitutions)

    if sub is not None and sub.force_t3_progression:
        reps = amrap_reps(exercise)
        if reps is None:
            return ProgressionResult(new_state=replace(state), message="No AMRAP set logged")
        t3 = calculate_t3_progression(exercise.weight, reps, plate)
        if not t3.increased:
            return ProgressionResult(
                new_state=replace(state),
                message=f"Staying at {format_weight(state.weight, unit)}",
            )
        return ProgressionResult(
            new_state=replace(state, weight=t3.new_weight),
            message=f"+{format_weight(plate, unit)} → {format_weight(t3.new_weight, unit)}",
        )

    increment = lift_increment(exercise.lift_id, exercise.tier, unit)
    if exercise.tier == "T1":
        return calculate_t1_progression(state, exercise, increment, unit)
    return calculate_t2_progression(state, exercise, increment, unit)


def apply_workout(
    program_state: ProgramState,
    workout: Workout,
    settings: UserSettings,
) -> WorkoutProgression:
    """
    Run every exercise of a completed workout through its state machine.

    T1/T2 exercises whose lift has no state are skipped.  T3 exercises
    progress from the logged weight by the smallest owned plate.  The
    rotation advances and ``workout_count`` goes up by one.

    Args:
        program_state: State before the workout (not mutated)
        workout: Completed Workout
        settings: User settings (unit, substitutions, inventory)

    Returns:
        WorkoutProgression
    """
    t1 = dict(program_state.t1)
    t2 = dict(program_state.t2)
    t3 = dict(program_state.t3)
    messages: dict[str, str] = {}
    plate = smallest_plate(settings.plate_inventory)
    unit = settings.weight_unit

    for exercise in workout.exercises:
        key = f"{exercise.lift_id}:{exercise.tier}"

        if exercise.tier in ("T1", "T2"):
            states = t1 if exercise.tier == "T1" else t2
            state = states.get(exercise.lift_id)
            if state is None:
                continue
            result = _progress_lift(state, exercise, settings, plate)
            states[exercise.lift_id] = result.new_state
            messages[key] = result.message
            logger.debug("%s: %s", key, result.message)
            continue

        reps = amrap_reps(exercise)
        if reps is None:
            continue
        current = t3.get(exercise.lift_id, exercise.weight)
        result_t3 = calculate_t3_progression(exercise.weight, reps, plate)
        if result_t3.increased:
            t3[exercise.lift_id] = result_t3.new_weight
            messages[key] = f"+{format_weight(plate, unit)} → {format_weight(result_t3.new_weight, unit)}"
        else:
            t3[exercise.lift_id] = current
            messages[key] = f"Staying at {format_weight(current, unit)}"
        logger.debug("%s: %s", key, messages[key])

    new_state = ProgramState(
        t1=t1,
        t2=t2,
        t3=t3,
        next_workout_type=next_workout_type(workout.type),
        workout_count=program_state.workout_count + 1,
    )
    return WorkoutProgression(new_state=new_state, messages=messages)
