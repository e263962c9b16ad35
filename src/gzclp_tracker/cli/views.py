"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of program state and workouts.
"""

from rich.console import Console
from rich.table import Table

from ..core.catalog import LIFTS
from ..core.exercises import get_exercise_name, get_stage_config, get_t3_labels, is_dumbbell_exercise
from ..core.models import ExerciseLog, Medal, ProgramState, UserSettings, Workout
from ..core.plates import PlateResult, format_plates, solve_dumbbell_loading, solve_loading
from ..core.projections import LiftProgression
from ..core.units import format_weight
from ..core.warmup import WarmupSet
from ..core.workout_stats import WorkoutStats

console = Console()

MEDAL_LABELS = {
    "weight-pr": "Weight PR",
    "volume-pr": "Volume PR",
    "amrap-record": "AMRAP record",
    "stage-clear": "Stage clear",
    "streak": "Streak",
}


def _names(settings: UserSettings):
    def name_fn(lift_id: str, tier: str) -> str:
        return get_exercise_name(lift_id, tier, settings.lift_substitutions, settings.exercise_library)

    return name_fn


def format_program_table(state: ProgramState, settings: UserSettings) -> Table:
    """
    Create a Rich table with the programmed T1/T2 state of every lift.

    Args:
        state: Program state
        settings: User settings (unit and exercise names)

    Returns:
        Rich Table object
    """
    unit = settings.weight_unit
    name = _names(settings)
    table = Table(title="Program")

    table.add_column("Lift", style="cyan")
    table.add_column("T1", justify="right", style="bold")
    table.add_column("T1 stage", justify="center")
    table.add_column("T2", justify="right", style="bold")
    table.add_column("T2 stage", justify="center")

    for lift_id in LIFTS:
        t1 = state.t1.get(lift_id)
        t2 = state.t2.get(lift_id)
        t1_stage = "-"
        if t1 is not None:
            cfg = get_stage_config("T1", t1.stage)
            t1_stage = "5RM test" if t1.pending_5rm_test else f"{cfg.sets}×{cfg.reps}+"
        t2_stage = "-"
        if t2 is not None:
            cfg = get_stage_config("T2", t2.stage)
            t2_stage = f"{cfg.sets}×{cfg.reps}"
        table.add_row(
            name(lift_id, "T1"),
            format_weight(t1.weight, unit) if t1 else "-",
            t1_stage,
            format_weight(t2.weight, unit) if t2 else "-",
            t2_stage,
        )
    return table


def print_status(state: ProgramState, settings: UserSettings) -> None:
    """Print program table, T3 weights and the next workout."""
    unit = settings.weight_unit
    console.print(format_program_table(state, settings))

    if state.t3:
        name = _names(settings)
        t3 = ", ".join(f"{name(ex_id, 'T3')} {format_weight(w, unit)}" for ex_id, w in state.t3.items())
        console.print(f"[bold]T3:[/bold] {t3}")

    console.print(f"Workouts completed: {state.workout_count}")
    console.print(f"Next workout: [bold magenta]{state.next_workout_type}[/bold magenta]")


def exercise_loading(ex: ExerciseLog, settings: UserSettings) -> PlateResult | None:
    """
    Plates for one exercise, on a dumbbell handle or the bar.

    None for T3 machine and cable work, which is not plate loaded.
    """
    if is_dumbbell_exercise(ex.lift_id, settings.lift_substitutions, settings.exercise_library):
        return solve_dumbbell_loading(ex.weight, settings.dumbbell_handle_weight, settings.plate_inventory)
    if ex.tier == "T3":
        return None
    return solve_loading(ex.weight, settings.bar_weight, settings.plate_inventory)


def print_workout_plan(workout: Workout, settings: UserSettings) -> None:
    """Print the exercises of a not-yet-logged workout."""
    unit = settings.weight_unit
    name = _names(settings)
    table = Table(title=f"Workout {workout.type}")
    table.add_column("Tier", style="magenta")
    table.add_column("Exercise", style="cyan")
    table.add_column("Sets×Reps", justify="center")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Plates / side", style="dim")
    table.add_column("Rest", justify="right", style="dim")

    t3_count = sum(1 for e in workout.exercises if e.tier == "T3")
    t3_labels = iter(get_t3_labels(t3_count))
    for ex in workout.exercises:
        label = next(t3_labels) if ex.tier == "T3" else ex.tier
        amrap = "+" if ex.amrap_set is not None else ""
        loading = exercise_loading(ex, settings)
        plates = format_plates(loading.per_side) if loading and loading.achievable else "-"
        table.add_row(
            label,
            name(ex.lift_id, ex.tier),
            f"{ex.target_sets}×{ex.target_reps}{amrap}",
            format_weight(ex.weight, unit),
            plates,
            f"{settings.rest_timers.for_tier(ex.tier)}s",
        )
    console.print(table)


def format_history_table(workouts: list[Workout], settings: UserSettings) -> Table:
    """
    Create a Rich table displaying workout history.

    Args:
        workouts: Workouts to display
        settings: User settings

    Returns:
        Rich Table object
    """
    unit = settings.weight_unit
    name = _names(settings)
    table = Table(title="Workout History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Exercises")
    table.add_column("Medals", justify="right")

    for i, workout in enumerate(workouts, 1):
        parts = []
        for ex in workout.exercises:
            reps = "/".join(str(s.reps) for s in ex.sets)
            parts.append(f"{name(ex.lift_id, ex.tier)} {format_weight(ex.weight, unit)} [{reps}]")
        table.add_row(
            str(i),
            workout.date[:10],
            workout.type,
            "\n".join(parts),
            str(len(workout.medals)) if workout.medals else "-",
        )
    return table


def print_history(workouts: list[Workout], settings: UserSettings) -> None:
    if not workouts:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return
    console.print(format_history_table(workouts, settings))


def format_medal(medal: Medal, settings: UserSettings) -> str:
    label = MEDAL_LABELS.get(medal.type, medal.type)
    if medal.type == "streak":
        return f"{label}: {medal.value:g} workouts"
    name = get_exercise_name(
        medal.lift_id or "", medal.tier or "T1", settings.lift_substitutions, settings.exercise_library
    )
    if medal.type == "amrap-record":
        value = f"{medal.value:g} reps"
    else:
        value = format_weight(medal.value, settings.weight_unit)
    return f"{label}: {name} {medal.tier} {value}"


def print_outcome(messages: dict[str, str], medals: list[Medal], settings: UserSettings) -> None:
    """Print per-lift progression messages and earned medals."""
    name = _names(settings)
    for key, message in messages.items():
        lift_id, tier = key.split(":", 1)
        console.print(f"  [cyan]{name(lift_id, tier)}[/cyan] {tier}: {message}")
    if medals:
        console.print()
        for medal in medals:
            console.print(f"  [bold yellow]★[/bold yellow] {format_medal(medal, settings)}")


def print_workout_stats(stats: WorkoutStats, unit: str) -> None:
    lines = [
        "Workout stats",
        f"- Working volume: {format_weight(round(stats.working_volume, 2), unit)}",
        f"- Warmup volume:  {format_weight(round(stats.warmup_volume, 2), unit)}",
        f"- Total volume:   {format_weight(round(stats.total_volume, 2), unit)}",
        f"- Sets: {stats.completed_sets}/{stats.total_sets} ({stats.success_rate}%)",
        f"- Reps: {stats.total_reps}",
    ]
    if stats.heaviest_lift.weight > 0:
        lines.append(f"- Heaviest: {stats.heaviest_lift.name} {format_weight(stats.heaviest_lift.weight, unit)}")
    console.print("\n".join(lines))


def format_progress_table(summaries: list[LiftProgression], unit: str) -> Table:
    table = Table(title="T1 Progress")
    table.add_column("Lift", style="cyan")
    table.add_column("Start", justify="right")
    table.add_column("Current", justify="right", style="bold")
    table.add_column("Gain", justify="right", style="green")
    table.add_column("3 months", justify="right")
    table.add_column("Projected (8 wk)", justify="right", style="magenta")

    for s in summaries:
        if not s.data_points:
            table.add_row(s.lift_name, "-", "-", "-", "-", "-")
            continue
        table.add_row(
            s.lift_name,
            format_weight(s.start_weight, unit),
            format_weight(s.current_weight, unit),
            f"{s.total_gain:+g} ({s.percent_gain:.0f}%)",
            f"{s.recent_gain:+g}",
            format_weight(s.projected_weight, unit),
        )
    return table


def print_plates(result: PlateResult, unit: str, per_side_label: str = "Per side") -> None:
    if result.achievable:
        console.print(f"{per_side_label}: [bold]{format_plates(result.per_side)}[/bold]")
        console.print(f"Total: {format_weight(result.total_weight, unit)}")
        return
    print_warning(f"Not loadable with your plates (closest: {format_weight(result.total_weight, unit)})")
    if result.per_side:
        console.print(f"{per_side_label}: {format_plates(result.per_side)}")
    if result.suggested_weight is not None:
        print_info(f"Nearest loadable weight: {format_weight(result.suggested_weight, unit)}")


def print_warmup(sets: list[WarmupSet], unit: str) -> None:
    table = Table(title="Warmup")
    table.add_column("Set", justify="right", style="dim", width=3)
    table.add_column("Label", style="magenta")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Reps", justify="right")
    table.add_column("Plates / side")

    for i, s in enumerate(sets, 1):
        table.add_row(str(i), s.label, format_weight(s.weight, unit), str(s.reps), format_plates(s.per_side_plates))
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
