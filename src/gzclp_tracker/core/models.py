"""
Data models for gzclp-tracker.

All core dataclasses representing program state, workouts, medals and
user settings.  Lift ids are plain strings: the four main lifts come from
the built-in catalog, T3 and substitute ids come from the user's
exercise library.
"""

from dataclasses import dataclass, field
from typing import Literal

from .config import (
    DEFAULT_REST_T1,
    DEFAULT_REST_T2,
    DEFAULT_REST_T3,
    SETTINGS_SCHEMA_VERSION,
    VALID_STAGES,
)

Tier = Literal["T1", "T2", "T3"]
WeightUnit = Literal["lbs", "kg"]
WorkoutType = str  # "A1" | "A2" | "B1" | "B2" (catalog-defined)
MedalType = Literal["weight-pr", "volume-pr", "amrap-record", "stage-clear", "streak"]

TIERS: tuple[str, ...] = ("T1", "T2", "T3")
WEIGHT_UNITS: tuple[str, ...] = ("lbs", "kg")
MEDAL_TYPES: tuple[str, ...] = ("weight-pr", "volume-pr", "amrap-record", "stage-clear", "streak")


@dataclass
class LiftState:
    """
    Programmed state of one (lift, tier) pair.

    ``last_stage1_weight`` is the T2 reset anchor.  ``pending_5rm_test`` is
    set after a T1 stage-3 failure; ``best_set_reps``/``best_set_weight``
    keep the best single set of that attempt for a 5RM estimate.
    """

    lift_id: str
    tier: Tier
    weight: float
    stage: int = 1
    last_stage1_weight: float | None = None
    pending_5rm_test: bool = False
    best_set_reps: int | None = None
    best_set_weight: float | None = None

    def __post_init__(self) -> None:
        """Validate lift state."""
        if self.tier not in TIERS:
            raise ValueError(f"Invalid tier: {self.tier}")
        if self.stage not in VALID_STAGES:
            raise ValueError(f"stage must be 1, 2 or 3, got {self.stage}")
        if self.weight <= 0:
            raise ValueError(f"weight must be positive, got {self.weight}")
        if self.pending_5rm_test and self.tier != "T1":
            raise ValueError("pending_5rm_test is only valid for T1 lifts")


@dataclass
class ProgramState:
    """
    Aggregate program state: T1/T2 lift states per main lift, T3 weights
    per exercise id, the next workout in the rotation and the number of
    finished workouts.
    """

    t1: dict[str, LiftState]
    t2: dict[str, LiftState]
    t3: dict[str, float] = field(default_factory=dict)
    next_workout_type: WorkoutType = "A1"
    workout_count: int = 0

    def __post_init__(self) -> None:
        if self.workout_count < 0:
            raise ValueError("workout_count must be non-negative")

    def lift_state(self, lift_id: str, tier: str) -> LiftState | None:
        """Return the T1/T2 state for a lift, or None."""
        if tier == "T1":
            return self.t1.get(lift_id)
        if tier == "T2":
            return self.t2.get(lift_id)
        return None


@dataclass
class SetLog:
    """
    One set of an exercise.

    ``completed and reps == 0`` is a failed set, distinct from a set that
    has not been attempted yet (``completed`` False).
    """

    set_number: int
    reps: int = 0
    completed: bool = False
    is_amrap: bool = False

    def __post_init__(self) -> None:
        if self.set_number < 1:
            raise ValueError("set_number must be >= 1")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")

    @property
    def failed(self) -> bool:
        return self.completed and self.reps == 0


@dataclass
class ExerciseLog:
    """
    One lift's performance within a workout.

    ``original_weight`` is the programmed weight captured when the workout
    started; a differing ``weight`` means the user tried a trial weight.
    """

    lift_id: str
    tier: Tier
    weight: float
    target_sets: int
    target_reps: int
    sets: list[SetLog] = field(default_factory=list)
    original_weight: float | None = None

    def __post_init__(self) -> None:
        if self.tier not in TIERS:
            raise ValueError(f"Invalid tier: {self.tier}")
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.target_sets < 0 or self.target_reps < 0:
            raise ValueError("target_sets and target_reps must be non-negative")

    @property
    def is_trial(self) -> bool:
        """True when the logged weight differs from the programmed one."""
        return self.original_weight is not None and self.weight != self.original_weight

    @property
    def amrap_set(self) -> SetLog | None:
        return next((s for s in self.sets if s.is_amrap), None)


@dataclass
class Medal:
    """An achievement computed when a workout is finished."""

    type: MedalType
    value: float
    lift_id: str | None = None
    tier: Tier | None = None
    previous_value: float | None = None

    def __post_init__(self) -> None:
        if self.type not in MEDAL_TYPES:
            raise ValueError(f"Invalid medal type: {self.type}")


@dataclass
class Workout:
    """A training session: started from program state, finalized once."""

    id: str
    date: str  # ISO 8601
    type: WorkoutType
    exercises: list[ExerciseLog] = field(default_factory=list)
    completed: bool = False
    notes: str | None = None
    medals: list[Medal] = field(default_factory=list)


@dataclass
class ExerciseDefinition:
    """A custom or accessory exercise in the user's library."""

    id: str
    name: str
    is_dumbbell: bool = False


@dataclass
class LiftSubstitution:
    """
    Replace a default lift with one from the exercise library.

    With ``force_t3_progression`` the lift is trained 3×15+ and progresses
    like a T3 instead of climbing the stage ladder.
    """

    original_lift_id: str
    substitute_id: str
    force_t3_progression: bool = False


@dataclass
class AdditionalT3Assignment:
    """Extra T3 exercises for one workout type, on top of the template T3."""

    workout_type: WorkoutType
    exercise_ids: list[str] = field(default_factory=list)


@dataclass
class RestTimers:
    t1_seconds: int = DEFAULT_REST_T1
    t2_seconds: int = DEFAULT_REST_T2
    t3_seconds: int = DEFAULT_REST_T3

    def for_tier(self, tier: str) -> int:
        """Return the rest duration for a tier."""
        if tier == "T1":
            return self.t1_seconds
        if tier == "T2":
            return self.t2_seconds
        return self.t3_seconds


@dataclass
class UserSettings:
    """
    Long-lived user configuration.

    ``plate_inventory`` maps plate size to the total number owned (both
    sides), so ``count // 2`` plates of a size are available per side.
    """

    bar_weight: float
    plate_inventory: dict[float, int]
    weight_unit: WeightUnit = "kg"
    dumbbell_handle_weight: float = 2.5
    rest_timers: RestTimers = field(default_factory=RestTimers)
    exercise_library: list[ExerciseDefinition] = field(default_factory=list)
    lift_substitutions: list[LiftSubstitution] = field(default_factory=list)
    additional_t3s: list[AdditionalT3Assignment] = field(default_factory=list)
    schema_version: int = SETTINGS_SCHEMA_VERSION

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.weight_unit not in WEIGHT_UNITS:
            raise ValueError(f"Invalid weight_unit: {self.weight_unit}")
        if self.bar_weight < 0:
            raise ValueError("bar_weight must be non-negative")
        if self.dumbbell_handle_weight < 0:
            raise ValueError("dumbbell_handle_weight must be non-negative")
        for plate, count in self.plate_inventory.items():
            if plate <= 0:
                raise ValueError(f"plate size must be positive, got {plate}")
            if count < 0:
                raise ValueError(f"plate count for {plate} must be non-negative")
