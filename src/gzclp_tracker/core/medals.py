"""
Milestone (medal) detection.

Independent predicates applied once per exercise of a just-finished
workout, plus a streak check and a before/after program-state check.
History is indexed once per pass by "{lift_id}:{tier}" so a T1 PR never
counts against T2 for the same lift.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .config import AMRAP_PROGRESSION_REPS, DEFAULT_SMALLEST_PLATE, STREAK_MILESTONES
from .exercises import uses_t3_progression
from .models import ExerciseLog, LiftSubstitution, Medal, ProgramState, Workout
from .progression import amrap_reps, did_hit_rep_target, lift_increment, total_reps


@dataclass
class HistoryRecord:
    max_weight: float = 0.0
    max_volume: float = 0.0


def history_key(lift_id: str, tier: str) -> str:
    return f"{lift_id}:{tier}"


def build_history_map(workouts: list[Workout]) -> dict[str, HistoryRecord]:
    """
    Best weight and best volume per (lift, tier) over past workouts.

    Exercises with zero total reps were not attempted and are skipped.
    """
    history: dict[str, HistoryRecord] = {}
    for workout in workouts:
        for ex in workout.exercises:
            reps = total_reps(ex)
            if reps == 0:
                continue
            record = history.setdefault(history_key(ex.lift_id, ex.tier), HistoryRecord())
            record.max_weight = max(record.max_weight, ex.weight)
            record.max_volume = max(record.max_volume, ex.weight * reps)
    return history


def detect_weight_pr(exercise: ExerciseLog, history: dict[str, HistoryRecord]) -> Medal | None:
    """
    Weight PR: logged weight strictly above the best for this (lift, tier).

    A best of 0 means no history, so ``previous_value`` is left out.
    """
    if total_reps(exercise) == 0:
        return None

    prev = history.get(history_key(exercise.lift_id, exercise.tier))
    prev_max = prev.max_weight if prev else 0.0
    if exercise.weight > prev_max:
        return Medal(
            type="weight-pr",
            lift_id=exercise.lift_id,
            tier=exercise.tier,
            value=exercise.weight,
            previous_value=prev_max or None,
        )
    return None


def detect_volume_pr(exercise: ExerciseLog, history: dict[str, HistoryRecord]) -> Medal | None:
    """Volume PR: weight × total reps strictly above the best for this (lift, tier)."""
    reps = total_reps(exercise)
    if reps == 0:
        return None

    prev = history.get(history_key(exercise.lift_id, exercise.tier))
    prev_max = prev.max_volume if prev else 0.0
    volume = exercise.weight * reps
    if volume > prev_max:
        return Medal(
            type="volume-pr",
            lift_id=exercise.lift_id,
            tier=exercise.tier,
            value=volume,
            previous_value=prev_max or None,
        )
    return None


def detect_amrap_record(
    exercise: ExerciseLog,
    lift_substitutions: list[LiftSubstitution] | None = None,
) -> Medal | None:
    """Any 25+ rep AMRAP on a T3 (or forced-T3 substitute) is a medal."""
    if not uses_t3_progression(exercise.lift_id, exercise.tier, lift_substitutions):
        return None
    reps = amrap_reps(exercise)
    if reps is None or reps < AMRAP_PROGRESSION_REPS:
        return None
    return Medal(type="amrap-record", lift_id=exercise.lift_id, tier=exercise.tier, value=reps)


def detect_stage_clear_medal(
    exercise: ExerciseLog,
    program_state: ProgramState,
    unit: str,
    lift_substitutions: list[LiftSubstitution] | None = None,
    smallest_plate: float | None = None,
) -> Medal | None:
    """
    Stage clear: the exercise earned its programmed weight increase.

    Standard T1/T2: rep target hit; value = logged weight + tier increment.
    Forced-T3 substitutes: rep target hit and AMRAP ≥ 25; value = logged
    weight + smallest plate.  T3: AMRAP ≥ 25; value = logged weight +
    smallest plate.  Every value starts from the logged weight, as the
    progression engine does.
    """
    plate = smallest_plate if smallest_plate is not None else DEFAULT_SMALLEST_PLATE
    tier = exercise.tier
    reps = amrap_reps(exercise)

    if tier == "T3":
        if reps is None or reps < AMRAP_PROGRESSION_REPS:
            return None
        return Medal(
            type="stage-clear",
            lift_id=exercise.lift_id,
            tier=tier,
            value=exercise.weight + plate,
            previous_value=exercise.weight,
        )

    if not did_hit_rep_target(exercise):
        return None

    state = program_state.lift_state(exercise.lift_id, tier)
    if state is not None and state.pending_5rm_test:
        return None

    if uses_t3_progression(exercise.lift_id, tier, lift_substitutions):
        if reps is None or reps < AMRAP_PROGRESSION_REPS:
            return None
        if state is None:
            return None
        return Medal(
            type="stage-clear",
            lift_id=exercise.lift_id,
            tier=tier,
            value=exercise.weight + plate,
            previous_value=exercise.weight,
        )

    increment = lift_increment(exercise.lift_id, tier, unit)
    return Medal(
        type="stage-clear",
        lift_id=exercise.lift_id,
        tier=tier,
        value=exercise.weight + increment,
        previous_value=exercise.weight,
    )


def detect_streak_medal(workout_count: int) -> Medal | None:
    """Medal when the workout count is exactly a streak milestone."""
    if workout_count in STREAK_MILESTONES:
        return Medal(type="streak", value=workout_count)
    return None


def _programmed_weight(state: ProgramState, lift_id: str, tier: str) -> float | None:
    if tier == "T3":
        return state.t3.get(lift_id)
    lift_state = state.lift_state(lift_id, tier)
    return lift_state.weight if lift_state else None


def _weight_rose(old_state: ProgramState, new_state: ProgramState, lift_id: str, tier: str) -> bool:
    after = _programmed_weight(new_state, lift_id, tier)
    if after is None:
        return False
    before = _programmed_weight(old_state, lift_id, tier)
    return before is None or after > before


def detect_medals(
    completed_workout: Workout,
    historical_workouts: list[Workout],
    old_state: ProgramState,
    new_state: ProgramState | None = None,
    unit: str = "kg",
    lift_substitutions: list[LiftSubstitution] | None = None,
    smallest_plate: float | None = None,
) -> list[Medal]:
    """
    All medals earned by a just-finished workout.

    Must run with the program state from before the workout was applied;
    when the post-workout state is given too, stage-clear medals are only
    kept for lifts whose programmed weight actually went up, and report
    that new programmed weight.

    Args:
        completed_workout: The finished workout
        historical_workouts: Every earlier workout (not including this one)
        old_state: Program state before progression
        new_state: Program state after progression, if already computed
        unit: "kg" or "lbs"
        lift_substitutions: User substitutions (forced-T3 handling)
        smallest_plate: Smallest owned plate (T3-style increments)

    Returns:
        Medals in detection order: per exercise weight PR, volume PR,
        AMRAP record, stage clear; then streak
    """
    history = build_history_map(historical_workouts)
    medals: list[Medal] = []

    for ex in completed_workout.exercises:
        if total_reps(ex) == 0:
            continue

        for medal in (
            detect_weight_pr(ex, history),
            detect_volume_pr(ex, history),
            detect_amrap_record(ex, lift_substitutions),
        ):
            if medal is not None:
                medals.append(medal)

        stage_clear = detect_stage_clear_medal(ex, old_state, unit, lift_substitutions, smallest_plate)
        if stage_clear is not None and new_state is not None:
            if not _weight_rose(old_state, new_state, ex.lift_id, ex.tier):
                stage_clear = None
            else:
                stage_clear = replace(stage_clear, value=_programmed_weight(new_state, ex.lift_id, ex.tier))
        if stage_clear is not None:
            medals.append(stage_clear)

    streak = detect_streak_medal(len(historical_workouts) + 1)
    if streak is not None:
        medals.append(streak)

    return medals
