"""
Tests for workout templates and the Workout Synthesizer

Template structure and stress, weekday mapping, truncation, long-session
progression, tier substitutions and polarized build weeks.
"""
import pytest
from datetime import date

from services.plan_engine.constants import Equipment, FitnessTier, PhaseFocus, Sport
from services.plan_engine.phase_builder import MesocyclePhase, PeriodizationPlanner
from services.plan_engine.workout_library import (
    SegmentKind,
    TEMPLATES,
    get_template,
    total_duration,
)
from services.plan_engine.workout_synthesizer import (
    POLARIZED_BUILD_SEQUENCE,
    WorkoutSynthesizer,
    day_offset,
    is_polarized_week,
    long_session_minutes,
    normalize_weekdays,
)
from services.plan_engine.zone_model import heart_rate_zones, pace_zones, power_zones


START = date(2024, 1, 1)  # Monday
ALL_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
TWO_DAYS = ["monday", "wednesday"]


def phase(week, tier=FitnessTier.BEGINNER):
    return PeriodizationPlanner().build_phases(max(week, 4), tier)[week - 1]


@pytest.fixture
def synthesizer():
    return WorkoutSynthesizer()


@pytest.fixture
def zones():
    return pace_zones(6.0)


# =============================================================================
# TEMPLATES
# =============================================================================

class TestTemplates:
    """Structure and shape rotation"""

    def test_every_template_has_positive_duration(self):
        for key, template in TEMPLATES.items():
            assert total_duration(template.segments(1)) > 0, key

    def test_endurance_structure(self):
        segments = get_template("endurance").segments(1)
        assert [s.kind for s in segments] == [
            SegmentKind.WARMUP, SegmentKind.STEADY, SegmentKind.COOLDOWN,
        ]
        assert total_duration(segments) == 80

    def test_interval_total_excludes_trailing_rest(self):
        # week 6 -> shape 0: 3 x 10 min, 5 min between
        segments = get_template("threshold").segments(6)
        interval = segments[1]
        assert (interval.repeat, interval.duration_minutes, interval.rest_minutes) == (3, 10, 5)
        assert interval.total_minutes == 40
        assert total_duration(segments) == 65

    def test_consecutive_weeks_rotate_shapes(self):
        template = get_template("sweet_spot")
        shapes = [template.shape_for_week(w) for w in (5, 6, 7)]
        assert shapes[0] != shapes[1]
        assert shapes[1] != shapes[2]

    def test_sport_specific_names(self):
        assert get_template("long").name_for(Sport.RUNNING) == "Long Run"
        assert get_template("long").name_for(Sport.CYCLING) == "Long Ride"

    def test_unknown_template(self):
        with pytest.raises(KeyError):
            get_template("fartlek")


# =============================================================================
# SCHEDULING HELPERS
# =============================================================================

class TestWeekdays:
    """Weekday normalization and calendar mapping"""

    def test_normalize_dedupes_and_lowercases(self):
        assert normalize_weekdays(["Monday", "monday", " FRIDAY "]) == ["monday", "friday"]

    def test_unknown_weekday(self):
        with pytest.raises(ValueError):
            normalize_weekdays(["funday"])

    def test_day_offset(self):
        assert day_offset(START, "monday") == 0
        assert day_offset(START, "sunday") == 6
        # Wednesday start: Monday is the following week
        assert day_offset(date(2024, 1, 3), "monday") == 5


class TestLongSession:
    """90 min + 10 min/week, capped at 210"""

    def test_progression(self):
        assert long_session_minutes(1) == 90
        assert long_session_minutes(5) == 130

    def test_ceiling(self):
        assert long_session_minutes(13) == 210
        assert long_session_minutes(40) == 210


# =============================================================================
# SYNTHESIS
# =============================================================================

class TestSynthesizeWeek:
    """One phase -> dated workouts"""

    def test_never_more_workouts_than_days(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(5), zones, FitnessTier.BEGINNER, ["tuesday", "friday"], START,
        )
        assert len(workouts) == 2
        assert [w.workout_type for w in workouts] == ["endurance", "long"]

    def test_days_mapped_in_calendar_order(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(2), zones, FitnessTier.BEGINNER, ["saturday", "tuesday"], START,
        )
        assert [w.date for w in workouts] == [date(2024, 1, 9), date(2024, 1, 13)]
        assert all(w.week_number == 2 for w in workouts)

    def test_mid_week_start(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER, ["monday", "thursday"], date(2024, 1, 3),
        )
        assert [w.date for w in workouts] == [date(2024, 1, 4), date(2024, 1, 8)]

    def test_no_day_double_booked(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER, ALL_DAYS, START,
        )
        dates = [w.date for w in workouts]
        assert len(dates) == len(set(dates))
        assert dates == sorted(dates)

    def test_base_week_sequence(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER, ALL_DAYS, START,
        )
        assert [w.workout_type for w in workouts] == [
            "endurance", "low_cadence_strength", "high_cadence", "long", "endurance", "recovery",
        ]

    def test_stress_from_duration(self, synthesizer, zones):
        endurance = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER, TWO_DAYS, START,
        )[0]
        assert endurance.duration_minutes == 80
        assert endurance.computed_stress == 80.0
        assert endurance.description.endswith("Estimated stress: 80")

    def test_threshold_stress(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(6), zones, FitnessTier.BEGINNER, ["monday", "wednesday", "friday", "saturday"], START,
        )
        threshold = workouts[2]
        assert threshold.workout_type == "threshold"
        assert threshold.duration_minutes == 65
        assert threshold.computed_stress == pytest.approx(102.9)

    def test_long_session_grows_with_week(self, synthesizer, zones):
        days = ["monday", "tuesday", "wednesday", "thursday"]
        week1 = synthesizer.synthesize_week(phase(1), zones, FitnessTier.BEGINNER, days, START)
        week3 = synthesizer.synthesize_week(phase(3), zones, FitnessTier.BEGINNER, days, START)
        assert week1[3].workout_type == "long"
        assert week1[3].duration_minutes == 90
        assert week1[3].computed_stress == 82.5
        assert week3[3].duration_minutes == 110

    def test_long_session_ceiling(self, synthesizer, zones):
        week = MesocyclePhase(week_number=25, focus=PhaseFocus.BASE, target_training_stress=192.0)
        workouts = synthesizer.synthesize_week(
            week, zones, FitnessTier.BEGINNER, ALL_DAYS, START,
        )
        long_session = [w for w in workouts if w.workout_type == "long"][0]
        assert long_session.duration_minutes == 210

    def test_targets_use_zone_model(self, synthesizer, zones):
        workout = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER, TWO_DAYS, START,
        )[0]
        assert workout.target_zone == "Z2"
        assert workout.target == zones.describe("Z2")
        assert workout.target.endswith("/km")

    def test_to_dict(self, synthesizer, zones):
        data = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER, TWO_DAYS, START,
        )[0].to_dict()
        assert data["date"] == "2024-01-01"
        assert data["workout_type"] == "endurance"
        assert [s["kind"] for s in data["segments"]] == ["warmup", "steady", "cooldown"]


class TestLongSessionPlacement:
    """Long-session day and truncation priority"""

    def test_long_session_on_chosen_day(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER,
            ["monday", "wednesday", "friday", "sunday"], START, long_day="monday",
        )
        assert [(w.workout_type, w.date.strftime("%A")) for w in workouts] == [
            ("long", "Monday"),
            ("endurance", "Wednesday"),
            ("low_cadence_strength", "Friday"),
            ("high_cadence", "Sunday"),
        ]

    def test_long_day_is_case_insensitive(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(5), zones, FitnessTier.BEGINNER, ["tuesday", "thursday"], START, long_day="Tuesday",
        )
        assert workouts[0].workout_type == "long"
        assert workouts[0].date == date(2024, 1, 30)

    def test_three_day_week_keeps_long_session(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER, ["tuesday", "thursday", "saturday"], START,
        )
        assert [w.workout_type for w in workouts] == ["endurance", "low_cadence_strength", "long"]
        assert workouts[2].date == date(2024, 1, 6)

    def test_long_day_outside_training_days_ignored(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(1), zones, FitnessTier.BEGINNER, ["tuesday", "thursday"], START, long_day="sunday",
        )
        assert [w.workout_type for w in workouts] == ["endurance", "long"]

    def test_weeks_without_long_session_unchanged(self, synthesizer, zones):
        workouts = synthesizer.synthesize_week(
            phase(4), zones, FitnessTier.BEGINNER,
            ["tuesday", "thursday", "saturday"], START, long_day="saturday",
        )
        assert [w.workout_type for w in workouts] == ["recovery", "endurance", "recovery"]

    def test_schedule_pairs(self):
        pairs = WorkoutSynthesizer.schedule(
            ["endurance", "sweet_spot", "threshold", "long"], ["tuesday", "saturday"], "tuesday",
        )
        assert pairs == [("long", "tuesday"), ("endurance", "saturday")]

    def test_single_day_week_is_the_long_session(self):
        assert WorkoutSynthesizer.schedule(["endurance", "long"], ["sunday"]) == [("long", "sunday")]


class TestTierVariants:
    """Advanced/Elite substitutions and polarized build weeks"""

    def test_beginner_keeps_vo2max(self, synthesizer):
        sequence = synthesizer.template_sequence(phase(9), FitnessTier.BEGINNER)
        assert "vo2max" in sequence
        assert "over_under" not in sequence

    def test_advanced_swaps_vo2max(self, synthesizer):
        sequence = synthesizer.template_sequence(phase(9, FitnessTier.ADVANCED), FitnessTier.ADVANCED)
        assert "vo2max" not in sequence
        assert "over_under" in sequence

    def test_second_build_week_is_polarized(self, synthesizer):
        week6 = phase(6, FitnessTier.ADVANCED)
        assert is_polarized_week(week6, FitnessTier.ADVANCED)
        assert synthesizer.template_sequence(week6, FitnessTier.ADVANCED) == POLARIZED_BUILD_SEQUENCE

    def test_first_build_week_is_not_polarized(self, synthesizer):
        week5 = phase(5, FitnessTier.ELITE)
        assert not is_polarized_week(week5, FitnessTier.ELITE)
        assert synthesizer.template_sequence(week5, FitnessTier.ELITE) == [
            "endurance", "sweet_spot", "threshold", "long", "over_under", "recovery",
        ]

    def test_beginner_never_polarized(self):
        assert not is_polarized_week(phase(6), FitnessTier.BEGINNER)


class TestCyclingTargets:
    """Equipment decides which zones are rendered"""

    def test_power_meter_gets_watts(self, synthesizer):
        workout = synthesizer.synthesize_week(
            phase(1), power_zones(250), FitnessTier.BEGINNER, TWO_DAYS, START,
            sport=Sport.CYCLING, equipment=Equipment.POWER_METER,
        )[0]
        assert workout.title == "Endurance Ride"
        assert workout.target.endswith("W")

    def test_heart_rate_only_gets_bpm(self, synthesizer):
        workout = synthesizer.synthesize_week(
            phase(1), power_zones(250), FitnessTier.BEGINNER, TWO_DAYS, START,
            sport=Sport.CYCLING, equipment=Equipment.HEART_RATE_ONLY,
            heart_rate_model=heart_rate_zones(190),
        )[0]
        assert workout.target == heart_rate_zones(190).describe("Z2")
        assert workout.target.endswith("bpm")
