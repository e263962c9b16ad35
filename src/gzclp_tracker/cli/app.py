"""Shared Typer app object, shared option types, and store utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.models import ProgramState, UserSettings
from ..io.document_store import TrackerStore, get_default_data_dir
from ..io.serializers import ValidationError
from . import views

# Shared --data-dir option type used by every command that touches the store
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", help="Data directory (default: ~/.gzclp-tracker)"),
]

app = typer.Typer(
    name="gzclp",
    help="GZCLP linear progression tracker: weights, stages, plates and warmups.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    GZCLP progression tracker.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def get_store(data_dir: Path | None) -> TrackerStore:
    """Get tracker store from path or default location."""
    return TrackerStore(data_dir if data_dir is not None else get_default_data_dir())


def load_program(store: TrackerStore) -> tuple[ProgramState, UserSettings]:
    """Load program state and settings, or exit with an error message."""
    try:
        state = store.load_program_state()
        settings = store.load_settings()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if state is None:
        views.print_error(f"No program found in {store.root}")
        views.print_info("Run 'gzclp init' first.")
        raise typer.Exit(1)
    return state, settings


def load_settings(store: TrackerStore) -> UserSettings:
    """Load settings, or exit with an error message."""
    try:
        return store.load_settings()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
