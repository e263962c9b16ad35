"""
Unit tests for plate loading and warmup ramps.

Values are hand-computed against the standard kg plate set
(one pair each of 20, 15, 10, 5, 2.5, 1.25).
"""

import pytest

from gzclp_tracker.core.plates import (
    format_plates,
    smallest_plate,
    solve_dumbbell_loading,
    solve_loading,
    suggest_nearest_weight,
)
from gzclp_tracker.core.warmup import best_subset, build_warmup, warmup_inventory, warmup_volume

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _kg_inventory() -> dict[float, int]:
    return {20: 2, 15: 2, 10: 2, 5: 2, 2.5: 2, 1.25: 2}


def _full_kg_inventory() -> dict[float, int]:
    return {20: 2, 15: 2, 10: 2, 5: 2, 2.5: 2, 1.25: 2, 0.5: 2}


# ===========================================================================
# plates.py: solve_loading
# ===========================================================================

class TestSolveLoading:
    """Greedy largest-first fill of one side, counts are pairs."""

    def test_standard_load(self):
        result = solve_loading(77.5, 20, _kg_inventory())
        assert result.per_side == [20, 5, 2.5, 1.25]
        assert result.achievable is True
        assert result.total_weight == pytest.approx(77.5)
        assert result.suggested_weight is None

    def test_unreachable_target_suggests_next_weight(self):
        result = solve_loading(24, 20, _kg_inventory())
        assert result.achievable is False
        assert result.suggested_weight == pytest.approx(25)

    def test_empty_bar(self):
        result = solve_loading(20, 20, _kg_inventory())
        assert result.achievable is True
        assert result.per_side == []
        assert result.total_weight == 20

    def test_below_bar_is_not_achievable_and_has_no_suggestion(self):
        result = solve_loading(15, 20, _kg_inventory())
        assert result.achievable is False
        assert result.total_weight == 20
        assert result.suggested_weight is None

    def test_empty_inventory(self):
        result = solve_loading(60, 20, {})
        assert result.achievable is False
        assert result.per_side == []
        assert result.suggested_weight is None

    def test_count_is_total_across_both_sides(self):
        # One 20 plate cannot be loaded: a single plate has no partner
        result = solve_loading(60, 20, {20: 1})
        assert result.achievable is False
        assert result.per_side == []

    def test_partial_fill_reports_closest_total(self):
        # 200 kg needs 90 per side; the whole set gives 53.75 per side
        result = solve_loading(200, 20, _kg_inventory())
        assert result.achievable is False
        assert result.total_weight == pytest.approx(20 + 2 * 53.75)

    def test_zero_count_plates_are_ignored(self):
        result = solve_loading(60, 20, {20: 2, 15: 0})
        assert result.per_side == [20]

    def test_achievable_totals_round_trip(self):
        inv = _kg_inventory()
        for target in [22.5, 25, 42.5, 60, 77.5, 100, 127.5]:
            result = solve_loading(target, 20, inv)
            if result.achievable:
                assert 2 * sum(result.per_side) + 20 == pytest.approx(target)

    def test_more_small_plates_never_hurt(self):
        base = {20: 2, 10: 2, 5: 2, 2.5: 2}
        richer = {**base, 2.5: 6}
        for target in [25, 45, 50, 65, 75, 95]:
            if solve_loading(target, 20, base).achievable:
                assert solve_loading(target, 20, richer).achievable


class TestSuggestNearestWeight:
    def test_steps_by_half_unit_at_most(self):
        # Smallest plate 0.5 → step 0.5; 21 is 20 + 2×0.5
        assert suggest_nearest_weight(20.5, 20, _full_kg_inventory()) == pytest.approx(21)

    def test_returns_none_without_plates(self):
        assert suggest_nearest_weight(50, 20, {}) is None

    def test_returns_none_when_nothing_in_range(self):
        # Only 20s: everything above 60 is out of reach
        assert suggest_nearest_weight(61, 20, {20: 2}) is None


class TestDumbbellLoading:
    def test_handle_acts_as_bar(self):
        result = solve_dumbbell_loading(12.5, 2.5, _kg_inventory())
        assert result.achievable is True
        assert result.per_side == [5]


class TestPlateHelpers:
    def test_format_groups_repeats(self):
        assert format_plates([20, 20, 10]) == "2×20 + 10"
        assert format_plates([2.5, 1.25]) == "2.5 + 1.25"

    def test_format_empty(self):
        assert format_plates([]) == "Empty bar"

    def test_smallest_plate(self):
        assert smallest_plate(_full_kg_inventory()) == 0.5
        assert smallest_plate({20: 2, 5: 0}) == 20

    def test_smallest_plate_default(self):
        assert smallest_plate({}) == 2.5


# ===========================================================================
# warmup.py
# ===========================================================================

class TestWarmupInventory:
    def test_only_big_plates_kept(self):
        assert warmup_inventory(_full_kg_inventory(), "kg") == {20: 2, 15: 2, 10: 2, 5: 2}

    def test_lbs_plates(self):
        inv = {45: 4, 35: 2, 25: 2, 10: 2, 5: 2, 2.5: 2}
        assert warmup_inventory(inv, "lbs") == {45: 4, 25: 2, 10: 2, 5: 2}


class TestBestSubset:
    def test_largest_first_within_target(self):
        assert best_subset([15, 10, 5], 22.5) == [15, 5]

    def test_nothing_fits(self):
        assert best_subset([15, 10], 4) == []


class TestBuildWarmup:
    """
    100 kg work weight, 20 kg bar, standard plates:
      85 → per side 32.5, smallest first 5+10+15 = 30 → 80 kg
      45 → best subset ≤ 12.5 of [15,10,5] = [10] → 40 kg
      65 → best subset ≤ 22.5 = [15, 5] → 60 kg
    """

    def test_ramp(self):
        sets = build_warmup(100, 20, _full_kg_inventory(), "kg")
        assert [(s.weight, s.reps, s.label) for s in sets] == [
            (20, 5, "Bar"),
            (20, 5, "Bar"),
            (40, 5, "45%"),
            (60, 3, "65%"),
            (80, 2, "85%"),
        ]
        assert sets[-1].per_side_plates == [15, 10, 5]

    def test_every_set_is_a_subset_of_the_top_set(self):
        sets = build_warmup(140, 20, _full_kg_inventory(), "kg")
        top = list(sets[-1].per_side_plates)
        for s in sets[:-1]:
            remaining = list(top)
            for plate in s.per_side_plates:
                remaining.remove(plate)

    def test_ramp_is_non_decreasing(self):
        sets = build_warmup(180, 20, _full_kg_inventory(), "kg")
        weights = [s.weight for s in sets]
        assert weights == sorted(weights)

    def test_light_work_weight_only_bar_sets(self):
        sets = build_warmup(22.5, 20, _full_kg_inventory(), "kg")
        assert [s.label for s in sets] == ["Bar", "Bar"]

    def test_no_big_plates_only_bar_sets(self):
        sets = build_warmup(100, 20, {2.5: 2, 1.25: 2}, "kg")
        assert len(sets) == 2

    def test_volume(self):
        sets = build_warmup(100, 20, _full_kg_inventory(), "kg")
        assert warmup_volume(sets) == pytest.approx(100 + 100 + 200 + 180 + 160)
