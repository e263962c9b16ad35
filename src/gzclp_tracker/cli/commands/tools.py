"""Loading tools: plates, warmup."""

from typing import Annotated

import typer

from ...core.plates import solve_dumbbell_loading, solve_loading
from ...core.warmup import build_warmup
from .. import views
from ..app import DataDirOption, app, get_store, load_settings


@app.command()
def plates(
    weight: Annotated[float, typer.Argument(help="Target total weight")],
    dumbbell: Annotated[
        bool,
        typer.Option("--dumbbell", help="Load a single dumbbell handle instead of the bar"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the plates to load for a weight, using your plate inventory.
    """
    settings = load_settings(get_store(data_dir))
    unit = settings.weight_unit

    if dumbbell:
        result = solve_dumbbell_loading(weight, settings.dumbbell_handle_weight, settings.plate_inventory)
    else:
        result = solve_loading(weight, settings.bar_weight, settings.plate_inventory)
    views.print_plates(result, unit)


@app.command()
def warmup(
    weight: Annotated[float, typer.Argument(help="Working weight")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Show a warmup ramp to a working weight.
    """
    settings = load_settings(get_store(data_dir))
    if weight <= settings.bar_weight:
        views.print_info("Working weight is at or below the bar: no warmup needed.")
        return

    sets = build_warmup(weight, settings.bar_weight, settings.plate_inventory, settings.weight_unit)
    views.print_warmup(sets, settings.weight_unit)
