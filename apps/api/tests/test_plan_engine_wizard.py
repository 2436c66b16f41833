"""
Tests for the Plan Wizard

Step branching by goal, navigation, per-step validation and the health
declaration gate.
"""
import pytest
from datetime import date

from services.plan_engine.constants import Equipment, FitnessTier, Sport
from services.plan_engine.wizard import (
    ALL_STEPS,
    HealthDeclarationError,
    PlanWizard,
    WizardState,
    WizardStep,
    WizardValidationError,
    collect_errors,
    ensure_can_generate,
    step_errors,
    step_sequence,
)
from tests.plan_engine_helpers import completed_wizard


def state_for(**overrides):
    return WizardState.from_dict(completed_wizard(**overrides))


def health(**answers):
    payload = dict(completed_wizard()["health"])
    payload.update(answers)
    return payload


# =============================================================================
# BRANCHING
# =============================================================================

class TestStepSequence:
    """Active steps depend on the goal"""

    def test_race_goal(self):
        steps = step_sequence(WizardState(goal="5k"))
        assert WizardStep.ESTIMATED_TIMES in steps
        assert WizardStep.FTP_EQUIPMENT not in steps
        assert WizardStep.EVENT_DATE in steps
        assert WizardStep.GOAL_TIME in steps

    def test_cycling_goal(self):
        steps = step_sequence(WizardState(goal="cycling_gran_fondo"))
        assert WizardStep.FTP_EQUIPMENT in steps
        assert WizardStep.ESTIMATED_TIMES not in steps
        assert WizardStep.EVENT_DATE in steps
        assert WizardStep.GOAL_TIME not in steps

    def test_non_race_goal_skips_event_steps(self):
        steps = step_sequence(WizardState(goal="general_fitness"))
        assert WizardStep.EVENT_DATE not in steps
        assert WizardStep.GOAL_TIME not in steps

    def test_improve_times_has_event_date_only(self):
        steps = step_sequence(WizardState(goal="improve_times"))
        assert WizardStep.EVENT_DATE in steps
        assert WizardStep.GOAL_TIME not in steps

    @pytest.mark.parametrize("goal", [None, "5k", "marathon", "weight_loss", "cycling_triathlon"])
    def test_sequence_follows_canonical_order(self, goal):
        steps = step_sequence(WizardState(goal=goal))
        assert steps == sorted(steps, key=ALL_STEPS.index)
        assert steps[0] == WizardStep.GOAL
        assert steps[-2:] == [WizardStep.SUMMARY, WizardStep.HEALTH_DECLARATION]

    def test_sport_from_goal(self):
        assert WizardState(goal="cycling_maintenance").sport == Sport.CYCLING
        assert WizardState(goal="10k").sport == Sport.RUNNING


class TestNavigation:
    """Forward requires the step predicate; back never does"""

    def test_next_blocked_without_goal(self):
        wizard = PlanWizard()
        with pytest.raises(WizardValidationError) as exc:
            wizard.next()
        assert "goal" in exc.value.field_errors
        assert wizard.current_step == WizardStep.GOAL

    def test_next_and_back(self):
        wizard = PlanWizard()
        wizard.update(goal="5k")
        assert wizard.next() == WizardStep.ATHLETE_LEVEL
        assert wizard.position == 1
        assert wizard.back() == WizardStep.GOAL
        assert wizard.back() == WizardStep.GOAL

    def test_branch_change_falls_back_to_earlier_step(self):
        wizard = PlanWizard(WizardState(goal="5k"))
        wizard.current_step = WizardStep.GOAL_TIME
        wizard.update(goal="general_fitness")
        assert wizard.current_step == WizardStep.PLAN_DURATION

    def test_switching_sport_drops_estimated_times(self):
        wizard = PlanWizard(WizardState(goal="5k"))
        wizard.current_step = WizardStep.ESTIMATED_TIMES
        wizard.update(goal="cycling_general_fitness")
        assert wizard.current_step == WizardStep.BIOMETRICS

    def test_unknown_field_rejected(self):
        with pytest.raises(AttributeError):
            PlanWizard().update(favourite_colour="red")

    def test_walk_to_last_step(self):
        wizard = PlanWizard(state_for())
        while not wizard.is_last_step:
            wizard.next()
        assert wizard.current_step == WizardStep.HEALTH_DECLARATION
        assert wizard.can_generate()


# =============================================================================
# VALIDATION
# =============================================================================

class TestStepValidation:
    """Per-step predicates"""

    def test_completed_wizard_has_no_errors(self):
        assert collect_errors(state_for()) == {}

    def test_weight_range(self):
        assert "weight_kg" in step_errors(WizardStep.BIOMETRICS, state_for(weight_kg=20))

    def test_birth_date_in_future(self):
        state = state_for(birth_date="2999-01-01")
        assert "birth_date" in step_errors(WizardStep.BIOMETRICS, state)

    def test_days_must_match_frequency(self):
        state = state_for(available_days=["tuesday", "saturday"])
        assert "available_days" in step_errors(WizardStep.AVAILABLE_DAYS, state)

    def test_days_must_be_distinct(self):
        state = state_for(days_per_week=2, available_days=["tuesday", "tuesday"])
        assert "available_days" in step_errors(WizardStep.AVAILABLE_DAYS, state)

    def test_long_run_day_must_be_available(self):
        state = state_for(long_run_day="monday")
        assert "long_run_day" in step_errors(WizardStep.LONG_RUN_DAY, state)

    @pytest.mark.parametrize("weeks", [3, 53, None])
    def test_plan_duration_bounds(self, weeks):
        state = state_for(plan_duration_weeks=weeks)
        assert "plan_duration_weeks" in step_errors(WizardStep.PLAN_DURATION, state)

    def test_event_after_start(self):
        state = state_for(event_date="2023-12-01")
        assert "event_date" in step_errors(WizardStep.EVENT_DATE, state)

    def test_infeasible_goal_time(self):
        state = state_for(goal_time="12:00")
        assert "goal_time" in collect_errors(state)

    def test_malformed_estimated_time(self):
        state = state_for(estimated_times={"10k": "fifty"})
        assert "estimated_times.10k" in collect_errors(state)

    def test_cycling_requires_equipment(self):
        errors = collect_errors(state_for(goal="cycling_general_fitness", event_date=None))
        assert "equipment" in errors

    def test_cycling_ftp_range(self):
        state = state_for(goal="cycling_general_fitness", equipment="power_meter", ftp_watts=900)
        assert "ftp_watts" in collect_errors(state)

    def test_errors_only_from_active_steps(self):
        """No event date needed for a non-race goal"""
        assert collect_errors(state_for(goal="general_fitness", event_date=None)) == {}


class TestFromDict:
    """JSON-style payloads"""

    def test_parses_dates_and_enums(self):
        state = state_for(goal="cycling_gran_fondo", equipment="heart_rate_only")
        assert state.start_date == date(2024, 1, 1)
        assert state.athlete_level == FitnessTier.BEGINNER
        assert state.equipment == Equipment.HEART_RATE_ONLY
        assert state.health.declaration_accepted

    def test_preferences_drop_inactive_fields(self):
        prefs = state_for(goal="general_fitness").preferences()
        assert prefs["event_date"] is None
        assert prefs["available_days"] == ["tuesday", "thursday", "saturday"]


class TestAdjustedTimes:
    """Pre-filled estimates only count once the athlete edits them"""

    def test_echoed_estimates_are_not_adjustments(self):
        state = state_for(estimated_times={"5k": "30:00", "10k": "1:05:00"})
        state.historical_estimates = {"5k": 1800, "10k": 3600}
        assert state.adjusted_times() == {"10k": "1:05:00"}

    def test_everything_counts_without_history(self):
        state = state_for(estimated_times={"5k": "30:00", "half_marathon": ""})
        assert state.adjusted_times() == {"5k": "30:00"}

    def test_malformed_entry_kept_for_validation(self):
        state = state_for(estimated_times={"5k": "thirty"})
        state.historical_estimates = {"5k": 1800}
        assert state.adjusted_times() == {"5k": "thirty"}
        assert "estimated_times.5k" in collect_errors(state)


# =============================================================================
# HEALTH GATE
# =============================================================================

class TestHealthDeclaration:
    """All seven answered, none yes, declaration accepted"""

    def test_eligible(self):
        state = state_for()
        assert state.health.is_eligible
        ensure_can_generate(state)

    def test_affirmative_answer_blocks(self):
        state = state_for(health=health(question_3_chest_pain_last_3months=True))
        assert state.health.any_affirmative
        with pytest.raises(HealthDeclarationError):
            ensure_can_generate(state)

    def test_unanswered_question_blocks(self):
        state = state_for(health=health(question_6_taking_medication=None))
        assert not state.health.all_answered
        with pytest.raises(HealthDeclarationError):
            ensure_can_generate(state)

    def test_declaration_must_be_accepted(self):
        state = state_for(health=health(declaration_accepted=False))
        with pytest.raises(HealthDeclarationError):
            ensure_can_generate(state)

    def test_field_errors_reported_before_health(self):
        state = state_for(plan_duration_weeks=2, health=health(question_1_heart_problem=True))
        with pytest.raises(WizardValidationError):
            ensure_can_generate(state)

    def test_to_dict_records_eligibility(self):
        data = state_for().health.to_dict()
        assert data["declaration_accepted"] is True
        assert data["is_eligible"] is True
        assert data["question_1_heart_problem"] is False
