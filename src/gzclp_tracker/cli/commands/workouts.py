"""Workout commands: next, log, history, stats."""

from dataclasses import replace
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.catalog import LIFTS
from ...core.exercises import get_exercise_name
from ...core.models import Workout
from ...core.projections import summarize_lift
from ...core.session import complete_set, complete_workout, start_workout, update_exercise_weight
from ...core.workout_stats import calculate_workout_stats
from ...io.serializers import ValidationError, parse_reps_string, validate_date
from .. import views
from ..app import DataDirOption, app, get_store, load_program


def _fill_sets(workout: Workout, index: int, reps_str: str) -> Workout:
    """Record comma-separated reps into exercise *index*; unlisted sets stay open."""
    reps = parse_reps_string(reps_str)
    exercise = workout.exercises[index]
    if len(reps) > len(exercise.sets):
        raise ValidationError(
            f"{exercise.lift_id} {exercise.tier} has {len(exercise.sets)} sets, got {len(reps)} values"
        )
    for set_index, n in enumerate(reps):
        workout = complete_set(workout, index, set_index, n)
    return workout


@app.command("next")
def next_workout(data_dir: DataDirOption = None) -> None:
    """
    Show the next workout with weights, sets and rest times.
    """
    store = get_store(data_dir)
    state, settings = load_program(store)

    workout = start_workout(state, settings)
    views.print_workout_plan(workout, settings)

    for ex in workout.exercises:
        lift_state = state.lift_state(ex.lift_id, ex.tier)
        if lift_state is not None and lift_state.pending_5rm_test:
            views.print_warning(
                f"{ex.lift_id}: 5RM test pending (run: gzclp reset-5rm {ex.lift_id})"
            )


@app.command("log")
def log_workout(
    t1: Annotated[
        Optional[str],
        typer.Option("--t1", help="T1 reps per set, e.g. 3,3,3,3,5"),
    ] = None,
    t2: Annotated[
        Optional[str],
        typer.Option("--t2", help="T2 reps per set, e.g. 10,10,10"),
    ] = None,
    t3: Annotated[
        Optional[list[str]],
        typer.Option("--t3", help="T3 reps per set, repeat once per T3 in workout order"),
    ] = None,
    t1_weight: Annotated[
        Optional[float],
        typer.Option("--t1-weight", help="Trial weight used for T1"),
    ] = None,
    t2_weight: Annotated[
        Optional[float],
        typer.Option("--t2-weight", help="Trial weight used for T2"),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Workout date (YYYY-MM-DD, default: now)"),
    ] = None,
    notes: Annotated[Optional[str], typer.Option("--notes", help="Free-text notes")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log the next workout and progress the program.

    Sets not given are recorded as failed.  Example:

      gzclp log --t1 3,3,3,3,6 --t2 10,10,10 --t3 15,15,25
    """
    store = get_store(data_dir)
    state, settings = load_program(store)

    try:
        if date is not None:
            validate_date(date)
        past = [w for w in store.load_workouts() if w.completed]

        workout = start_workout(
            state,
            settings,
            date=date or datetime.now().isoformat(timespec="seconds"),
        )
        workout = replace(workout, notes=notes)

        t3_values = list(t3 or [])
        t3_count = sum(1 for e in workout.exercises if e.tier == "T3")
        if len(t3_values) > t3_count:
            raise ValidationError(f"Workout {workout.type} has {t3_count} T3 exercise(s), got {len(t3_values)}")

        for index, ex in enumerate(workout.exercises):
            if ex.tier == "T1":
                if t1_weight is not None:
                    workout = update_exercise_weight(workout, index, t1_weight)
                if t1:
                    workout = _fill_sets(workout, index, t1)
            elif ex.tier == "T2":
                if t2_weight is not None:
                    workout = update_exercise_weight(workout, index, t2_weight)
                if t2:
                    workout = _fill_sets(workout, index, t2)
            elif t3_values:
                workout = _fill_sets(workout, index, t3_values.pop(0))

        outcome = complete_workout(workout, state, past, settings)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_workout(outcome.workout)
    store.save_program_state(outcome.new_state)

    views.print_success(f"Logged workout {outcome.workout.type} ({outcome.workout.date[:10]})")
    views.print_outcome(outcome.messages, outcome.medals, settings)
    views.console.print()

    summary = calculate_workout_stats(
        outcome.workout,
        settings.bar_weight,
        settings.plate_inventory,
        settings.weight_unit,
        settings.lift_substitutions,
        name_fn=lambda lift_id, tier: get_exercise_name(
            lift_id, tier, settings.lift_substitutions, settings.exercise_library
        ),
    )
    views.print_workout_stats(summary, settings.weight_unit)
    views.print_info(f"Next workout: {outcome.new_state.next_workout_type}")


@app.command()
def history(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Show only the last N workouts"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Display workout history.
    """
    store = get_store(data_dir)
    _, settings = load_program(store)

    try:
        workouts = store.load_workouts()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if limit is not None and limit > 0:
        workouts = workouts[-limit:]
    views.print_history(workouts, settings)


@app.command()
def stats(data_dir: DataDirOption = None) -> None:
    """
    Show stats for the last workout and T1 progress per lift.
    """
    store = get_store(data_dir)
    _, settings = load_program(store)
    unit = settings.weight_unit

    try:
        workouts = [w for w in store.load_workouts() if w.completed]
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not workouts:
        views.print_info("No workouts recorded yet.")
        return

    last = calculate_workout_stats(
        workouts[-1],
        settings.bar_weight,
        settings.plate_inventory,
        unit,
        settings.lift_substitutions,
        name_fn=lambda lift_id, tier: get_exercise_name(
            lift_id, tier, settings.lift_substitutions, settings.exercise_library
        ),
    )
    views.print_workout_stats(last, unit)
    views.console.print()
    views.console.print(views.format_progress_table([summarize_lift(workouts, lift_id) for lift_id in LIFTS], unit))
