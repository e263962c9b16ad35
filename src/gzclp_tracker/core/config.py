"""
Configuration constants for the GZCLP progression engine.

All adjustable parameters are centralized here for easy tuning.
Weights are always in the lift's native unit; nothing here converts
between kilograms and pounds.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# UNIT / INCREMENT TABLE
# =============================================================================


@dataclass(frozen=True)
class UnitConfig:
    """Bar, plate set and per-tier increments for one weight unit."""

    label: str
    bar_weight: float
    plates: tuple[float, ...]  # Largest first
    increment_t1_upper: float
    increment_t1_lower: float
    increment_t2_upper: float
    increment_t2_lower: float
    dumbbell_handle_weight: float


UNIT_CONFIG: Final[dict[str, UnitConfig]] = {
    "lbs": UnitConfig(
        label="lbs",
        bar_weight=45.0,
        plates=(45.0, 35.0, 25.0, 10.0, 5.0, 2.5),
        increment_t1_upper=5.0,
        increment_t1_lower=10.0,
        increment_t2_upper=2.5,
        increment_t2_lower=5.0,
        dumbbell_handle_weight=5.0,
    ),
    "kg": UnitConfig(
        label="kg",
        bar_weight=20.0,
        plates=(20.0, 15.0, 10.0, 5.0, 2.5, 1.25, 0.5),
        increment_t1_upper=2.5,
        increment_t1_lower=5.0,
        increment_t2_upper=1.25,
        increment_t2_lower=2.5,
        dumbbell_handle_weight=2.5,
    ),
}

# T2 stage-3 reset: added to the last stage-1 weight, fixed per unit
T2_RESET_INCREMENT: Final[dict[str, float]] = {"kg": 10.0, "lbs": 20.0}

# Rounding step for 5RM estimates and T1 resets
FIVE_RM_ROUNDING: Final[dict[str, float]] = {"kg": 2.5, "lbs": 5.0}

# =============================================================================
# STAGE LADDERS
# =============================================================================


@dataclass(frozen=True)
class StageConfig:
    """Set/rep prescription for one rung of a tier's ladder."""

    sets: int
    reps: int
    has_amrap: bool = False


T1_STAGES: Final[dict[int, StageConfig]] = {
    1: StageConfig(sets=5, reps=3, has_amrap=True),
    2: StageConfig(sets=6, reps=2, has_amrap=True),
    3: StageConfig(sets=10, reps=1, has_amrap=True),
}

T2_STAGES: Final[dict[int, StageConfig]] = {
    1: StageConfig(sets=3, reps=10),
    2: StageConfig(sets=3, reps=8),
    3: StageConfig(sets=3, reps=6),
}

T3_CONFIG: Final[StageConfig] = StageConfig(sets=3, reps=15, has_amrap=True)

VALID_STAGES: Final[tuple[int, ...]] = (1, 2, 3)

# =============================================================================
# PROGRESSION
# =============================================================================

AMRAP_PROGRESSION_REPS: Final[int] = 25  # T3 AMRAP reps that earn a weight increase

EPLEY_DIVISOR: Final[float] = 30.0  # 1RM = w × (1 + reps / 30)
FIVE_RM_FRACTION_OF_1RM: Final[float] = 0.87
T1_RESET_FRACTION: Final[float] = 0.85  # New T1 stage-1 weight as fraction of 5RM
T2_START_FRACTION: Final[float] = 0.6  # Initial T2 weight as fraction of T1

DEFAULT_T3_WEIGHT: Final[float] = 50.0  # Used when a T3 has no recorded weight
DEFAULT_SMALLEST_PLATE: Final[float] = 2.5

# =============================================================================
# PLATE SOLVER
# =============================================================================

PLATE_TOLERANCE: Final[float] = 0.001
SUGGESTION_MAX_STEP: Final[float] = 0.5  # Upper bound on the search step
SUGGESTION_SEARCH_RANGE: Final[float] = 50.0  # How far above target to search

# =============================================================================
# WARMUP
# =============================================================================

WARMUP_PLATES: Final[dict[str, tuple[float, ...]]] = {
    "kg": (20.0, 15.0, 10.0, 5.0),
    "lbs": (45.0, 25.0, 10.0, 5.0),
}

WARMUP_BAR_SETS: Final[int] = 2
WARMUP_BAR_REPS: Final[int] = 5

# (fraction of work weight, reps, label) for the intermediate checkpoints
WARMUP_CHECKPOINTS: Final[tuple[tuple[float, int, str], ...]] = (
    (0.45, 5, "45%"),
    (0.65, 3, "65%"),
)
WARMUP_TOP_FRACTION: Final[float] = 0.85
WARMUP_TOP_REPS: Final[int] = 2
WARMUP_TOP_LABEL: Final[str] = "85%"

# =============================================================================
# MEDALS
# =============================================================================

STREAK_MILESTONES: Final[tuple[int, ...]] = (5, 10, 25, 50, 100)

# =============================================================================
# REST TIMERS (seconds)
# =============================================================================

DEFAULT_REST_T1: Final[int] = 180
DEFAULT_REST_T2: Final[int] = 120
DEFAULT_REST_T3: Final[int] = 90

# =============================================================================
# PROJECTIONS
# =============================================================================

PROJECTION_WEEKS_AHEAD: Final[int] = 8
RECENT_GAIN_MONTHS: Final[int] = 3

# =============================================================================
# STARTING WEIGHTS (setup defaults)
# =============================================================================

DEFAULT_STARTING_WEIGHTS: Final[dict[str, dict[str, float]]] = {
    "kg": {
        "squat": 60.0,
        "bench": 40.0,
        "deadlift": 60.0,
        "ohp": 30.0,
        "lat-pulldown": 25.0,
        "dumbbell-row": 12.5,
    },
    "lbs": {
        "squat": 135.0,
        "bench": 95.0,
        "deadlift": 135.0,
        "ohp": 65.0,
        "lat-pulldown": 50.0,
        "dumbbell-row": 25.0,
    },
}

# Settings documents at or above this version are in the unified shape
SETTINGS_SCHEMA_VERSION: Final[int] = 2
