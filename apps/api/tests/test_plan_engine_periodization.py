"""
Tests for the Periodization Planner

The 12-week macro-cycle, plan-length bounds and tier-scaled weekly stress.
"""
import pytest

from services.plan_engine.constants import FitnessTier, PhaseFocus
from services.plan_engine.phase_builder import (
    PeriodizationPlanner,
    focus_for_week,
    position_in_block,
    weekly_stress,
)


B = PhaseFocus.BASE
BU = PhaseFocus.BUILD
P = PhaseFocus.PEAK
R = PhaseFocus.RECOVERY
T = PhaseFocus.TAPER


@pytest.fixture
def planner():
    return PeriodizationPlanner()


class TestMacroCycle:
    """Focus by week number"""

    def test_first_cycle(self):
        focuses = [focus_for_week(w) for w in range(1, 13)]
        assert focuses == [B, B, B, R, BU, BU, BU, R, P, P, P, T]

    @pytest.mark.parametrize("week", range(1, 41))
    def test_cycle_repeats(self, week):
        assert focus_for_week(week) == focus_for_week(week + 12)

    def test_position_in_block(self):
        assert position_in_block(1) == 1
        assert position_in_block(3) == 3
        assert position_in_block(4) == 1
        assert position_in_block(6) == 2
        assert position_in_block(11) == 3
        assert position_in_block(18) == 2


class TestPlanLength:
    """4-52 weeks inclusive"""

    @pytest.mark.parametrize("weeks", [4, 8, 12, 13, 24, 52])
    def test_one_phase_per_week(self, planner, weeks):
        phases = planner.build_phases(weeks, FitnessTier.INTERMEDIATE)
        assert len(phases) == weeks
        assert [p.week_number for p in phases] == list(range(1, weeks + 1))

    @pytest.mark.parametrize("weeks", [0, 3, 53, 100])
    def test_out_of_range_rejected(self, planner, weeks):
        with pytest.raises(ValueError):
            planner.build_phases(weeks, FitnessTier.BEGINNER)

    def test_non_integer_rejected(self, planner):
        with pytest.raises(ValueError):
            planner.build_phases(12.0, FitnessTier.BEGINNER)

    def test_deterministic(self, planner):
        assert planner.build_phases(24, "Advanced") == planner.build_phases(24, FitnessTier.ADVANCED)


class TestWeeklyStress:
    """Tier-scaled target stress"""

    def test_beginner_base_weeks(self):
        assert weekly_stress(1, FitnessTier.BEGINNER) == 192.0
        assert weekly_stress(2, FitnessTier.BEGINNER) == 200.0
        assert weekly_stress(3, FitnessTier.BEGINNER) == 208.0

    def test_recovery_and_taper(self):
        assert weekly_stress(4, FitnessTier.BEGINNER) == 120.0
        assert weekly_stress(8, FitnessTier.BEGINNER) == 120.0
        assert weekly_stress(12, FitnessTier.BEGINNER) == 100.0

    def test_build_compounds_on_base(self):
        assert weekly_stress(5, FitnessTier.BEGINNER) == pytest.approx(224.6)
        assert weekly_stress(5, FitnessTier.BEGINNER) < weekly_stress(6, FitnessTier.BEGINNER)
        assert weekly_stress(6, FitnessTier.BEGINNER) < weekly_stress(7, FitnessTier.BEGINNER)

    def test_peak_above_build(self):
        assert weekly_stress(9, FitnessTier.BEGINNER) == pytest.approx(267.3)
        assert weekly_stress(9, FitnessTier.BEGINNER) > weekly_stress(7, FitnessTier.BEGINNER)

    @pytest.mark.parametrize("week", range(1, 13))
    def test_stress_scales_with_tier(self, week):
        values = [
            weekly_stress(week, tier)
            for tier in (FitnessTier.BEGINNER, FitnessTier.INTERMEDIATE,
                         FitnessTier.ADVANCED, FitnessTier.ELITE)
        ]
        assert values == sorted(values)
        assert len(set(values)) == 4

    def test_phase_dict(self, planner):
        first = planner.build_phases(4, FitnessTier.BEGINNER)[0]
        assert first.to_dict() == {
            "week_number": 1,
            "focus": "base",
            "target_training_stress": 192.0,
        }
