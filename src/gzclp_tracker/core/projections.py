"""
T1 progress series and linear projections.

Division edge cases return 0 or the last known weight, never NaN.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .catalog import LIFTS
from .config import PROJECTION_WEEKS_AHEAD, RECENT_GAIN_MONTHS
from .models import Workout
from .units import round_half_up


@dataclass
class LiftDataPoint:
    date: str
    weight: float
    success: bool


@dataclass
class LiftProgression:
    lift_id: str
    lift_name: str
    data_points: list[LiftDataPoint] = field(default_factory=list)
    start_weight: float = 0.0
    current_weight: float = 0.0
    total_gain: float = 0.0
    percent_gain: float = 0.0
    recent_gain: float = 0.0
    projected_weight: float = 0.0


def _parse_date(value: str) -> datetime:
    return datetime.fromisoformat(value[:19]) if "T" in value else datetime.strptime(value[:10], "%Y-%m-%d")


def extract_lift_data(workouts: list[Workout], lift_id: str) -> list[LiftDataPoint]:
    """One point per completed workout that trained *lift_id* as T1."""
    points: list[LiftDataPoint] = []
    for workout in workouts:
        if not workout.completed:
            continue
        ex = next((e for e in workout.exercises if e.lift_id == lift_id and e.tier == "T1"), None)
        if ex is None:
            continue
        reps = sum(s.reps for s in ex.sets if s.completed)
        points.append(
            LiftDataPoint(
                date=workout.date,
                weight=ex.weight,
                success=reps >= ex.target_sets * ex.target_reps,
            )
        )
    return points


def calculate_projection(points: list[LiftDataPoint], weeks_ahead: int = PROJECTION_WEEKS_AHEAD) -> float:
    """
    Project the weight *weeks_ahead* weeks out from the trend between the
    first and last successful sessions.

    Fewer than two successes → last weight (0 with no data).  Both
    successes on the same day → last successful weight.
    """
    successes = [p for p in points if p.success]
    if len(successes) < 2:
        return points[-1].weight if points else 0.0

    first, last = successes[0], successes[-1]
    days = (_parse_date(last.date) - _parse_date(first.date)).total_seconds() / 86400
    if days <= 0:
        return last.weight

    daily_rate = (last.weight - first.weight) / days
    return float(round_half_up(last.weight + daily_rate * weeks_ahead * 7))


def summarize_lift(workouts: list[Workout], lift_id: str, today: date | None = None) -> LiftProgression:
    """Start/current weight, gains and projection for one T1 lift."""
    points = extract_lift_data(workouts, lift_id)
    lift = LIFTS.get(lift_id)
    summary = LiftProgression(
        lift_id=lift_id,
        lift_name=lift.short_name if lift else lift_id,
        data_points=points,
    )
    if not points:
        return summary

    summary.start_weight = points[0].weight
    summary.current_weight = points[-1].weight
    summary.total_gain = summary.current_weight - summary.start_weight
    summary.percent_gain = (
        summary.total_gain / summary.start_weight * 100 if summary.start_weight > 0 else 0.0
    )
    summary.projected_weight = calculate_projection(points)

    today = today or date.today()
    cutoff = (today - timedelta(days=RECENT_GAIN_MONTHS * 30)).isoformat()
    recent = [p for p in points if p.date[:10] >= cutoff]
    baseline = recent[0].weight if recent else summary.current_weight
    summary.recent_gain = summary.current_weight - baseline
    return summary
