"""
YAML → built-in lift catalog.

Loads the fixed base catalog (main lifts, built-in T3 exercises, dumbbell
ids, workout templates and rotation order) from the bundled
``catalog.yaml`` and deep-merges an optional user override from
``~/.gzclp-tracker/catalog.yaml``.

If the bundled file is missing or invalid a RuntimeError is raised: the
engine cannot run without its lift table.  A broken user override only
produces a warning and is ignored.

Usage:
    from gzclp_tracker.core.catalog import LIFTS, WORKOUTS, WORKOUT_ORDER
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class Lift:
    """One of the four main barbell lifts."""

    id: str
    name: str
    short_name: str
    is_lower: bool  # squat/deadlift → True, bench/ohp → False


@dataclass(frozen=True)
class T3Exercise:
    """A built-in accessory exercise."""

    id: str
    name: str


@dataclass(frozen=True)
class WorkoutTemplate:
    """Which lifts fill the T1/T2/T3 slots of one rotating workout."""

    t1: str
    t2: str
    t3: str


@dataclass(frozen=True)
class Catalog:
    lifts: dict[str, Lift]
    t3_exercises: dict[str, T3Exercise]
    dumbbell_exercises: frozenset[str]
    workouts: dict[str, WorkoutTemplate]
    workout_order: tuple[str, ...]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_text(text: str) -> dict[str, Any]:
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_user_catalog_path() -> Path | None:
    """Return ~/.gzclp-tracker/catalog.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".gzclp-tracker" / "catalog.yaml"
    return p if p.exists() else None


def catalog_from_dict(d: dict) -> Catalog:
    """Convert a raw catalog dict (from YAML) to a Catalog.

    Raises ValueError if a section is missing or a workout references an
    unknown lift.
    """
    missing = {"lifts", "t3_exercises", "workouts", "workout_order"} - set(d)
    if missing:
        raise ValueError(f"catalog missing sections: {sorted(missing)}")

    lifts = {
        lift_id: Lift(
            id=lift_id,
            name=str(entry["name"]),
            short_name=str(entry.get("short_name", entry["name"])),
            is_lower=bool(entry.get("is_lower", False)),
        )
        for lift_id, entry in d["lifts"].items()
    }
    t3_exercises = {
        ex_id: T3Exercise(id=ex_id, name=str(entry["name"]))
        for ex_id, entry in d["t3_exercises"].items()
    }
    workouts: dict[str, WorkoutTemplate] = {}
    for wtype, slots in d["workouts"].items():
        for slot in ("t1", "t2"):
            if slots[slot] not in lifts:
                raise ValueError(f"workout {wtype} {slot} lift {slots[slot]!r} is not a main lift")
        workouts[str(wtype)] = WorkoutTemplate(
            t1=str(slots["t1"]), t2=str(slots["t2"]), t3=str(slots["t3"])
        )

    order = tuple(str(w) for w in d["workout_order"])
    unknown = [w for w in order if w not in workouts]
    if unknown:
        raise ValueError(f"workout_order references unknown workouts: {unknown}")

    return Catalog(
        lifts=lifts,
        t3_exercises=t3_exercises,
        dumbbell_exercises=frozenset(str(x) for x in d.get("dumbbell_exercises", [])),
        workouts=workouts,
        workout_order=order,
    )


def load_catalog() -> Catalog:
    """
    Load the bundled catalog, merged with the user override when present.

    Returns:
        Catalog

    Raises:
        RuntimeError: If the bundled catalog cannot be read or is invalid
    """
    try:
        text = importlib.resources.files("gzclp_tracker").joinpath("catalog.yaml").read_text(
            encoding="utf-8"
        )
        raw = _load_yaml_text(text)
        base = catalog_from_dict(raw)
    except (OSError, yaml.YAMLError, ValueError, KeyError) as exc:
        raise RuntimeError(f"gzclp-tracker: bundled catalog.yaml is unusable ({exc})") from exc

    user_path = get_user_catalog_path()
    if user_path is None:
        return base

    try:
        user_raw = _load_yaml_text(user_path.read_text(encoding="utf-8"))
        return catalog_from_dict(_deep_merge(raw, user_raw))
    except (OSError, yaml.YAMLError, ValueError, KeyError) as exc:
        warnings.warn(
            f"gzclp-tracker: ignoring {user_path} ({exc})",
            stacklevel=2,
        )
        return base


CATALOG: Catalog = load_catalog()

LIFTS: dict[str, Lift] = CATALOG.lifts
T3_EXERCISES: dict[str, T3Exercise] = CATALOG.t3_exercises
DUMBBELL_EXERCISES: frozenset[str] = CATALOG.dumbbell_exercises
WORKOUTS: dict[str, WorkoutTemplate] = CATALOG.workouts
WORKOUT_ORDER: tuple[str, ...] = CATALOG.workout_order
