"""
JSON serialization for tracker data models.

Handles conversion between dataclasses and JSON-compatible dicts, plus the
one-way migration of legacy settings documents.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.config import SETTINGS_SCHEMA_VERSION
from ..core.models import (
    MEDAL_TYPES,
    TIERS,
    WEIGHT_UNITS,
    AdditionalT3Assignment,
    ExerciseDefinition,
    ExerciseLog,
    LiftState,
    LiftSubstitution,
    Medal,
    ProgramState,
    RestTimers,
    SetLog,
    Tier,
    UserSettings,
    WeightUnit,
    Workout,
)

LEGACY_SETTINGS_KEYS = ("custom_exercises", "t3_library", "workout_t3s", "bar_weight_lbs")


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate an ISO 8601 date or timestamp.

    Args:
        date_str: "YYYY-MM-DD" or "YYYY-MM-DDTHH:MM[:SS]" string

    Returns:
        The string unchanged

    Raises:
        ValidationError: If the format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}", date_str):
        raise ValidationError(f"Invalid date format: {date_str!r}. Expected ISO 8601")

    try:
        datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_tier(tier: str) -> Tier:
    if tier not in TIERS:
        raise ValidationError(f"Invalid tier: {tier}. Must be one of {TIERS}")
    return tier  # type: ignore


def validate_unit(unit: str) -> WeightUnit:
    if unit not in WEIGHT_UNITS:
        raise ValidationError(f"Invalid weight_unit: {unit}. Must be one of {WEIGHT_UNITS}")
    return unit  # type: ignore


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def _require(data: dict[str, Any], key: str, what: str) -> Any:
    if key not in data:
        raise ValidationError(f"{what}: missing field '{key}'")
    return data[key]


# ---------------------------------------------------------------------------
# Program state
# ---------------------------------------------------------------------------

def lift_state_to_dict(state: LiftState) -> dict[str, Any]:
    d: dict[str, Any] = {
        "lift_id": state.lift_id,
        "tier": state.tier,
        "weight": state.weight,
        "stage": state.stage,
    }
    if state.last_stage1_weight is not None:
        d["last_stage1_weight"] = state.last_stage1_weight
    if state.pending_5rm_test:
        d["pending_5rm_test"] = True
        d["best_set_reps"] = state.best_set_reps
        d["best_set_weight"] = state.best_set_weight
    return d


def dict_to_lift_state(data: dict[str, Any]) -> LiftState:
    """
    Convert dict to LiftState.

    Raises:
        ValidationError: If data is invalid
    """
    lift_id = _require(data, "lift_id", "LiftState")
    tier = validate_tier(_require(data, "tier", "LiftState"))
    weight = validate_positive(float(_require(data, "weight", "LiftState")), "weight")
    stage = int(data.get("stage", 1))
    if stage not in (1, 2, 3):
        raise ValidationError(f"stage must be 1, 2 or 3, got {stage}")

    pending = bool(data.get("pending_5rm_test", False))
    if pending and tier != "T1":
        raise ValidationError(f"pending_5rm_test set on {tier} lift {lift_id}")

    last = data.get("last_stage1_weight")
    best_reps = data.get("best_set_reps")
    best_weight = data.get("best_set_weight")
    return LiftState(
        lift_id=lift_id,
        tier=tier,
        weight=weight,
        stage=stage,
        last_stage1_weight=float(last) if last is not None else None,
        pending_5rm_test=pending,
        best_set_reps=int(best_reps) if best_reps is not None else None,
        best_set_weight=float(best_weight) if best_weight is not None else None,
    )


def program_state_to_dict(state: ProgramState) -> dict[str, Any]:
    """T3 records are stored weight-only as ``{"weight": w}``."""
    return {
        "t1": {lift_id: lift_state_to_dict(s) for lift_id, s in state.t1.items()},
        "t2": {lift_id: lift_state_to_dict(s) for lift_id, s in state.t2.items()},
        "t3": {ex_id: {"weight": w} for ex_id, w in state.t3.items()},
        "next_workout_type": state.next_workout_type,
        "workout_count": state.workout_count,
    }


def dict_to_program_state(data: dict[str, Any]) -> ProgramState:
    """
    Convert dict to ProgramState.

    Raises:
        ValidationError: If data is invalid
    """
    t3: dict[str, float] = {}
    for ex_id, record in data.get("t3", {}).items():
        weight = record.get("weight") if isinstance(record, dict) else record
        if weight is None:
            raise ValidationError(f"T3 record for {ex_id} has no weight")
        t3[ex_id] = float(validate_non_negative(float(weight), f"t3 weight for {ex_id}"))

    return ProgramState(
        t1={k: dict_to_lift_state(v) for k, v in data.get("t1", {}).items()},
        t2={k: dict_to_lift_state(v) for k, v in data.get("t2", {}).items()},
        t3=t3,
        next_workout_type=str(data.get("next_workout_type", "A1")),
        workout_count=int(validate_non_negative(int(data.get("workout_count", 0)), "workout_count")),
    )


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------

def set_log_to_dict(s: SetLog) -> dict[str, Any]:
    return {
        "set_number": s.set_number,
        "reps": s.reps,
        "completed": s.completed,
        "is_amrap": s.is_amrap,
    }


def dict_to_set_log(data: dict[str, Any]) -> SetLog:
    set_number = int(_require(data, "set_number", "SetLog"))
    if set_number < 1:
        raise ValidationError(f"set_number must be >= 1, got {set_number}")
    return SetLog(
        set_number=set_number,
        reps=int(validate_non_negative(int(data.get("reps", 0)), "reps")),
        completed=bool(data.get("completed", False)),
        is_amrap=bool(data.get("is_amrap", False)),
    )


def exercise_log_to_dict(ex: ExerciseLog) -> dict[str, Any]:
    d: dict[str, Any] = {
        "lift_id": ex.lift_id,
        "tier": ex.tier,
        "weight": ex.weight,
        "target_sets": ex.target_sets,
        "target_reps": ex.target_reps,
        "sets": [set_log_to_dict(s) for s in ex.sets],
    }
    if ex.original_weight is not None:
        d["original_weight"] = ex.original_weight
    return d


def dict_to_exercise_log(data: dict[str, Any]) -> ExerciseLog:
    original = data.get("original_weight")
    return ExerciseLog(
        lift_id=_require(data, "lift_id", "ExerciseLog"),
        tier=validate_tier(_require(data, "tier", "ExerciseLog")),
        weight=float(validate_non_negative(float(_require(data, "weight", "ExerciseLog")), "weight")),
        target_sets=int(validate_non_negative(int(data.get("target_sets", 0)), "target_sets")),
        target_reps=int(validate_non_negative(int(data.get("target_reps", 0)), "target_reps")),
        sets=[dict_to_set_log(s) for s in data.get("sets", [])],
        original_weight=float(original) if original is not None else None,
    )


def medal_to_dict(medal: Medal) -> dict[str, Any]:
    d: dict[str, Any] = {"type": medal.type, "value": medal.value}
    if medal.lift_id is not None:
        d["lift_id"] = medal.lift_id
    if medal.tier is not None:
        d["tier"] = medal.tier
    if medal.previous_value is not None:
        d["previous_value"] = medal.previous_value
    return d


def dict_to_medal(data: dict[str, Any]) -> Medal:
    medal_type = _require(data, "type", "Medal")
    if medal_type not in MEDAL_TYPES:
        raise ValidationError(f"Invalid medal type: {medal_type}")
    tier = data.get("tier")
    prev = data.get("previous_value")
    return Medal(
        type=medal_type,
        value=float(_require(data, "value", "Medal")),
        lift_id=data.get("lift_id"),
        tier=validate_tier(tier) if tier is not None else None,
        previous_value=float(prev) if prev is not None else None,
    )


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    """
    Convert Workout to JSON-compatible dict.

    Args:
        workout: Workout to convert

    Returns:
        Dict representation (``notes`` and ``medals`` omitted when empty)
    """
    d: dict[str, Any] = {
        "id": workout.id,
        "date": workout.date,
        "type": workout.type,
        "completed": workout.completed,
        "exercises": [exercise_log_to_dict(e) for e in workout.exercises],
    }
    if workout.notes:
        d["notes"] = workout.notes
    if workout.medals:
        d["medals"] = [medal_to_dict(m) for m in workout.medals]
    return d


def dict_to_workout(data: dict[str, Any]) -> Workout:
    """
    Convert dict to Workout.

    Raises:
        ValidationError: If data is invalid
    """
    return Workout(
        id=str(_require(data, "id", "Workout")),
        date=validate_date(_require(data, "date", "Workout")),
        type=str(_require(data, "type", "Workout")),
        exercises=[dict_to_exercise_log(e) for e in data.get("exercises", [])],
        completed=bool(data.get("completed", False)),
        notes=data.get("notes"),
        medals=[dict_to_medal(m) for m in data.get("medals", [])],
    )


def workout_to_json_line(workout: Workout) -> str:
    return json.dumps(workout_to_dict(workout), separators=(",", ":"))


def json_line_to_workout(line: str) -> Workout:
    """
    Parse one JSONL line into a Workout.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return dict_to_workout(data)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def plate_key(plate: float) -> str:
    """Plate sizes become string keys only in JSON: 1.25 → "1.25", 20.0 → "20"."""
    return f"{plate:g}"


def inventory_to_dict(inventory: dict[float, int]) -> dict[str, int]:
    return {plate_key(p): n for p, n in sorted(inventory.items(), reverse=True)}


def dict_to_inventory(data: dict[str, Any]) -> dict[float, int]:
    inventory: dict[float, int] = {}
    for key, count in data.items():
        try:
            plate = float(key)
        except ValueError as e:
            raise ValidationError(f"Invalid plate size: {key!r}") from e
        validate_positive(plate, "plate size")
        inventory[plate] = int(validate_non_negative(int(count), f"count of {key} plates"))
    return inventory


def user_settings_to_dict(settings: UserSettings) -> dict[str, Any]:
    """
    Convert UserSettings to JSON-compatible dict.

    Args:
        settings: UserSettings to convert

    Returns:
        Dict representation
    """
    return {
        "schema_version": settings.schema_version,
        "weight_unit": settings.weight_unit,
        "bar_weight": settings.bar_weight,
        "dumbbell_handle_weight": settings.dumbbell_handle_weight,
        "plate_inventory": inventory_to_dict(settings.plate_inventory),
        "rest_timers": {
            "t1_seconds": settings.rest_timers.t1_seconds,
            "t2_seconds": settings.rest_timers.t2_seconds,
            "t3_seconds": settings.rest_timers.t3_seconds,
        },
        "exercise_library": [
            {"id": e.id, "name": e.name, "is_dumbbell": e.is_dumbbell}
            for e in settings.exercise_library
        ],
        "lift_substitutions": [
            {
                "original_lift_id": s.original_lift_id,
                "substitute_id": s.substitute_id,
                "force_t3_progression": s.force_t3_progression,
            }
            for s in settings.lift_substitutions
        ],
        "additional_t3s": [
            {"workout_type": a.workout_type, "exercise_ids": list(a.exercise_ids)}
            for a in settings.additional_t3s
        ],
    }


def dict_to_user_settings(data: dict[str, Any]) -> UserSettings:
    """
    Convert a (current-shape) settings dict to UserSettings.

    Legacy documents must go through ``migrate_settings_document`` first.

    Raises:
        ValidationError: If data is invalid
    """
    unit = validate_unit(data.get("weight_unit", "kg"))
    timers = data.get("rest_timers", {})
    defaults = RestTimers()

    return UserSettings(
        bar_weight=float(validate_non_negative(float(_require(data, "bar_weight", "UserSettings")), "bar_weight")),
        plate_inventory=dict_to_inventory(data.get("plate_inventory", {})),
        weight_unit=unit,
        dumbbell_handle_weight=float(
            validate_non_negative(float(data.get("dumbbell_handle_weight", 0.0)), "dumbbell_handle_weight")
        ),
        rest_timers=RestTimers(
            t1_seconds=int(timers.get("t1_seconds", defaults.t1_seconds)),
            t2_seconds=int(timers.get("t2_seconds", defaults.t2_seconds)),
            t3_seconds=int(timers.get("t3_seconds", defaults.t3_seconds)),
        ),
        exercise_library=[
            ExerciseDefinition(
                id=_require(e, "id", "ExerciseDefinition"),
                name=e.get("name", e["id"]),
                is_dumbbell=bool(e.get("is_dumbbell", False)),
            )
            for e in data.get("exercise_library", [])
        ],
        lift_substitutions=[
            LiftSubstitution(
                original_lift_id=_require(s, "original_lift_id", "LiftSubstitution"),
                substitute_id=_require(s, "substitute_id", "LiftSubstitution"),
                force_t3_progression=bool(s.get("force_t3_progression", False)),
            )
            for s in data.get("lift_substitutions", [])
        ],
        additional_t3s=[
            AdditionalT3Assignment(
                workout_type=_require(a, "workout_type", "AdditionalT3Assignment"),
                exercise_ids=list(a.get("exercise_ids", [])),
            )
            for a in data.get("additional_t3s", [])
        ],
        schema_version=int(data.get("schema_version", SETTINGS_SCHEMA_VERSION)),
    )


def is_legacy_settings(doc: dict[str, Any]) -> bool:
    """A document is legacy if it predates schema 2 or carries any legacy key."""
    if int(doc.get("schema_version", 1)) < SETTINGS_SCHEMA_VERSION:
        return True
    return any(key in doc for key in LEGACY_SETTINGS_KEYS)


def migrate_settings_document(doc: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    """
    Fold a legacy settings document into the current shape.

    Legacy fields:
      - ``custom_exercises``: [{id, name, replaces_id, force_t3_progression,
        is_dumbbell}] → library entries, plus a substitution for each entry
        with a ``replaces_id``
      - ``t3_library``: [{id, name, is_dumbbell}] → library entries
      - ``workout_t3s``: {workout_type: [ids]} → additional T3 assignments
      - ``bar_weight_lbs`` → ``bar_weight`` (when no ``bar_weight`` is set)

    Library entries are de-duplicated by id; existing current-shape data
    wins over legacy data.  Migrating a migrated document is a no-op.

    Args:
        doc: Settings document as loaded from disk

    Returns:
        Tuple (document, migrated); the input is not modified
    """
    if not is_legacy_settings(doc):
        return doc, False

    out = {k: v for k, v in doc.items() if k not in LEGACY_SETTINGS_KEYS}

    library: list[dict[str, Any]] = [dict(e) for e in doc.get("exercise_library", [])]
    seen = {e["id"] for e in library}
    substitutions: list[dict[str, Any]] = [dict(s) for s in doc.get("lift_substitutions", [])]
    replaced = {s["original_lift_id"] for s in substitutions}

    def add_entry(entry: dict[str, Any]) -> None:
        if "id" not in entry:
            raise ValidationError(f"Legacy exercise entry without id: {entry!r}")
        if entry["id"] in seen:
            return
        seen.add(entry["id"])
        library.append(
            {
                "id": entry["id"],
                "name": entry.get("name", entry["id"]),
                "is_dumbbell": bool(entry.get("is_dumbbell", False)),
            }
        )

    for custom in doc.get("custom_exercises", []):
        add_entry(custom)
        original = custom.get("replaces_id")
        if original and original not in replaced:
            replaced.add(original)
            substitutions.append(
                {
                    "original_lift_id": original,
                    "substitute_id": custom["id"],
                    "force_t3_progression": bool(custom.get("force_t3_progression", False)),
                }
            )

    for entry in doc.get("t3_library", []):
        add_entry(entry)

    assignments: list[dict[str, Any]] = [dict(a) for a in doc.get("additional_t3s", [])]
    assigned = {a["workout_type"] for a in assignments}
    legacy_t3s = doc.get("workout_t3s", {})
    if isinstance(legacy_t3s, list):
        legacy_t3s = {a["workout_type"]: a.get("exercise_ids", []) for a in legacy_t3s}
    for workout_type, ids in legacy_t3s.items():
        if workout_type in assigned or not ids:
            continue
        assignments.append({"workout_type": workout_type, "exercise_ids": list(ids)})

    if "bar_weight" not in out and "bar_weight_lbs" in doc:
        out["bar_weight"] = doc["bar_weight_lbs"]

    out["exercise_library"] = library
    out["lift_substitutions"] = substitutions
    out["additional_t3s"] = assignments
    out["schema_version"] = SETTINGS_SCHEMA_VERSION
    return out, True


def parse_reps_string(reps_str: str) -> list[int]:
    """
    Parse a comma-separated reps string.

    Examples:
        "3,3,3,3,5"  → [3, 3, 3, 3, 5]
        "10, 10, 0"  → [10, 10, 0]   (0 marks a failed set)

    Args:
        reps_str: Reps per set, in set order

    Returns:
        List of rep counts

    Raises:
        ValidationError: If format is invalid
    """
    if not reps_str or not reps_str.strip():
        raise ValidationError("Reps string cannot be empty")

    reps: list[int] = []
    for part in (p.strip() for p in reps_str.split(",")):
        if not re.fullmatch(r"\d+", part):
            raise ValidationError(
                f"Invalid reps value: '{part}'. Use comma-separated whole numbers, e.g. 3,3,3,3,5"
            )
        reps.append(int(part))
    return reps
