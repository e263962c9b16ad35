"""
CLI entry point using Typer.

Provides commands for running a GZCLP program:
- init: Initialize settings and program state
- status / next: Show programmed weights and the next workout
- log: Log a workout and progress the program
- history / stats: Display past workouts and progress
- plates / warmup: Plate loading and warmup ramps
- estimate-5rm / reset-5rm: T1 cycle restarts
- set-weight / substitute / add-t3: Program adjustments
"""

from .app import app
from .commands import program, tools, workouts  # noqa: F401  (registers commands)

__all__ = ["app"]


if __name__ == "__main__":
    app()
