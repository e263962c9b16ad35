"""Program commands: init, status, set-weight, estimate-5rm, reset-5rm, substitute, add-t3."""

from dataclasses import replace
from typing import Annotated, Optional

import typer

from ...core.catalog import LIFTS, WORKOUT_ORDER
from ...core.models import AdditionalT3Assignment, ExerciseDefinition, LiftSubstitution
from ...core.progression import apply_t1_reset, create_initial_program_state, estimate_5rm
from ...core.units import default_settings, default_starting_weights, format_weight
from .. import views
from ..app import DataDirOption, app, get_store, load_program, load_settings


@app.command()
def init(
    unit: Annotated[
        str,
        typer.Option("--unit", "-u", help="Weight unit: kg or lbs"),
    ] = "kg",
    squat: Annotated[Optional[float], typer.Option("--squat", help="Squat T1 starting weight")] = None,
    bench: Annotated[Optional[float], typer.Option("--bench", help="Bench T1 starting weight")] = None,
    deadlift: Annotated[Optional[float], typer.Option("--deadlift", help="Deadlift T1 starting weight")] = None,
    ohp: Annotated[Optional[float], typer.Option("--ohp", help="Overhead press T1 starting weight")] = None,
    bar_weight: Annotated[
        Optional[float],
        typer.Option("--bar-weight", help="Barbell weight (default: 20 kg / 45 lbs)"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing program without asking"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Initialize settings and a fresh program.

    T2 weights start at 60% of T1.  Omitted lifts use unit defaults.
    """
    if unit not in ("kg", "lbs"):
        views.print_error("Unit must be kg or lbs")
        raise typer.Exit(1)

    store = get_store(data_dir)
    if store.exists() and not force:
        views.print_warning(f"A program already exists in {store.root}")
        if not views.confirm_action("Start over and delete its workout history?"):
            views.print_info("Cancelled.")
            raise typer.Exit(1)

    weights = default_starting_weights(unit)
    for lift_id, value in (("squat", squat), ("bench", bench), ("deadlift", deadlift), ("ohp", ohp)):
        if value is not None:
            weights[lift_id] = value

    try:
        settings = default_settings(unit)
        if bar_weight is not None:
            settings = replace(settings, bar_weight=bar_weight)
        state = create_initial_program_state(weights)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.reset()
    store.save_settings(settings)
    store.save_program_state(state)

    views.print_success(f"Program initialized in {store.root}")
    views.print_status(state, settings)


@app.command()
def status(data_dir: DataDirOption = None) -> None:
    """
    Show programmed weights, stages and the next workout.
    """
    store = get_store(data_dir)
    state, settings = load_program(store)
    views.print_status(state, settings)

    for lift_id, lift_state in state.t1.items():
        if lift_state.pending_5rm_test:
            views.print_warning(f"{lift_id}: 5RM test pending (run: gzclp reset-5rm {lift_id})")


@app.command("set-weight")
def set_weight(
    lift_id: Annotated[str, typer.Argument(help="Lift or T3 exercise id")],
    tier: Annotated[str, typer.Argument(help="T1, T2 or T3")],
    weight: Annotated[float, typer.Argument(help="New programmed weight")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Override the programmed weight of a lift.
    """
    if weight <= 0:
        views.print_error("Weight must be positive")
        raise typer.Exit(1)

    store = get_store(data_dir)
    state, settings = load_program(store)
    tier = tier.upper()

    if tier == "T3":
        state = replace(state, t3={**state.t3, lift_id: weight})
    elif tier in ("T1", "T2"):
        current = state.lift_state(lift_id, tier)
        if current is None:
            views.print_error(f"No {tier} state for {lift_id}")
            raise typer.Exit(1)
        states = state.t1 if tier == "T1" else state.t2
        updated = {**states, lift_id: replace(current, weight=weight)}
        state = replace(state, t1=updated) if tier == "T1" else replace(state, t2=updated)
    else:
        views.print_error("Tier must be T1, T2 or T3")
        raise typer.Exit(1)

    store.save_program_state(state)
    views.print_success(f"{lift_id} {tier} set to {format_weight(weight, settings.weight_unit)}")


@app.command("estimate-5rm")
def estimate_five_rm(
    weight: Annotated[float, typer.Argument(help="Weight lifted")],
    reps: Annotated[int, typer.Argument(help="Reps completed")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Estimate a 5RM from one set (Epley, 87% of 1RM).
    """
    if weight <= 0 or reps < 1:
        views.print_error("Weight must be positive and reps at least 1")
        raise typer.Exit(1)

    unit = load_settings(get_store(data_dir)).weight_unit

    five_rm = estimate_5rm(weight, reps, unit)
    views.console.print(f"Estimated 5RM: [bold]{format_weight(five_rm, unit)}[/bold]")


@app.command("reset-5rm")
def reset_five_rm(
    lift_id: Annotated[str, typer.Argument(help="Main lift id (squat, bench, deadlift, ohp)")],
    five_rm: Annotated[
        Optional[float],
        typer.Option("--five-rm", help="Tested 5RM (default: estimate from the failed stage-3 attempt)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Start a new T1 cycle at 85% of a tested or estimated 5RM.
    """
    store = get_store(data_dir)
    state, settings = load_program(store)
    unit = settings.weight_unit

    current = state.t1.get(lift_id)
    if current is None:
        views.print_error(f"Unknown lift: {lift_id}")
        raise typer.Exit(1)

    if five_rm is None:
        if current.best_set_weight is None or not current.best_set_reps:
            views.print_error("No failed stage-3 attempt to estimate from; pass --five-rm")
            raise typer.Exit(1)
        five_rm = estimate_5rm(current.best_set_weight, current.best_set_reps, unit)
        views.print_info(f"Estimated 5RM: {format_weight(five_rm, unit)}")
    elif five_rm <= 0:
        views.print_error("5RM must be positive")
        raise typer.Exit(1)

    new_state = apply_t1_reset(current, five_rm, unit)
    store.save_program_state(replace(state, t1={**state.t1, lift_id: new_state}))
    views.print_success(f"{lift_id} T1 reset to 5×3 at {format_weight(new_state.weight, unit)}")


@app.command()
def substitute(
    lift_id: Annotated[str, typer.Argument(help="Main lift id to replace")],
    substitute_id: Annotated[Optional[str], typer.Argument(help="Substitute exercise id")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Display name of the substitute")] = None,
    force_t3: Annotated[
        bool,
        typer.Option("--force-t3", help="Train it 3×15+ with T3 progression"),
    ] = False,
    dumbbell: Annotated[bool, typer.Option("--dumbbell", help="Substitute is a dumbbell exercise")] = False,
    remove: Annotated[bool, typer.Option("--remove", help="Remove the substitution")] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Replace a main lift with an exercise from your library.
    """
    if lift_id not in LIFTS:
        views.print_error(f"Unknown lift: {lift_id}. Choose from {', '.join(LIFTS)}")
        raise typer.Exit(1)

    store = get_store(data_dir)
    settings = load_settings(store)
    substitutions = [s for s in settings.lift_substitutions if s.original_lift_id != lift_id]

    if remove:
        store.update_settings(lift_substitutions=substitutions)
        views.print_success(f"Removed substitution for {lift_id}")
        return

    if substitute_id is None:
        views.print_error("Give a substitute id, or --remove")
        raise typer.Exit(1)

    library = list(settings.exercise_library)
    if not any(e.id == substitute_id for e in library):
        library.append(ExerciseDefinition(id=substitute_id, name=name or substitute_id, is_dumbbell=dumbbell))

    substitutions.append(
        LiftSubstitution(original_lift_id=lift_id, substitute_id=substitute_id, force_t3_progression=force_t3)
    )
    store.update_settings(exercise_library=library, lift_substitutions=substitutions)
    mode = " (T3 progression)" if force_t3 else ""
    views.print_success(f"{lift_id} → {name or substitute_id}{mode}")


@app.command("add-t3")
def add_t3(
    workout_type: Annotated[str, typer.Argument(help="Workout type (A1, A2, B1, B2)")],
    exercise_id: Annotated[str, typer.Argument(help="T3 exercise id")],
    name: Annotated[Optional[str], typer.Option("--name", help="Display name")] = None,
    dumbbell: Annotated[bool, typer.Option("--dumbbell", help="Dumbbell exercise")] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add an extra T3 exercise to a workout type.
    """
    workout_type = workout_type.upper()
    if workout_type not in WORKOUT_ORDER:
        views.print_error(f"Workout type must be one of {', '.join(WORKOUT_ORDER)}")
        raise typer.Exit(1)

    store = get_store(data_dir)
    settings = load_settings(store)

    library = list(settings.exercise_library)
    if not any(e.id == exercise_id for e in library):
        library.append(ExerciseDefinition(id=exercise_id, name=name or exercise_id, is_dumbbell=dumbbell))

    assignments = list(settings.additional_t3s)
    existing = next((a for a in assignments if a.workout_type == workout_type), None)
    if existing is None:
        assignments.append(AdditionalT3Assignment(workout_type=workout_type, exercise_ids=[exercise_id]))
    elif exercise_id not in existing.exercise_ids:
        index = assignments.index(existing)
        assignments[index] = replace(existing, exercise_ids=[*existing.exercise_ids, exercise_id])

    store.update_settings(exercise_library=library, additional_t3s=assignments)
    views.print_success(f"Added {name or exercise_id} to {workout_type}")
