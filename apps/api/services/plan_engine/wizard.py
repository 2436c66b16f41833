"""
Plan Wizard

The plan-creation flow as an explicit step graph. The active step
sequence is a pure function of the collected state and is recomputed on
every change:

    goal -> athlete level -> biometrics
         -> estimated times (running) | FTP & equipment (cycling)
         -> weekly frequency -> available days -> long-session day
         -> start date -> plan duration
         -> event date (race and event goals)
         -> goal time (race goals)
         -> summary -> health declaration -> generate

Each step has a pure predicate; moving forward requires it to pass.
Generation additionally requires an eligible health declaration: all
seven questions answered, none answered yes, declaration accepted.

Usage:
    wizard = PlanWizard()
    wizard.update(goal="5k")
    wizard.next()
    ...
    wizard.ensure_can_generate()
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import (
    CYCLING_EVENT_GOALS,
    Equipment,
    FitnessTier,
    GOAL_LABELS,
    HEALTH_QUESTIONS,
    MAX_PLAN_WEEKS,
    MIN_PLAN_WEEKS,
    RACE_GOALS,
    RUNNING_EVENT_GOALS,
    Sport,
    WEEKDAYS,
)
from .formatting import parse_duration_minutes
from .target_time import validate_goal_time


class WizardValidationError(ValueError):
    """Missing or invalid wizard fields, keyed by field name."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.field_errors.items()))


class HealthDeclarationError(Exception):
    """The health declaration does not allow plan generation."""

    def __init__(self, message: str = "Health declaration does not permit plan generation"):
        self.message = message
        super().__init__(message)


class WizardStep(str, Enum):
    GOAL = "goal"
    ATHLETE_LEVEL = "athlete_level"
    BIOMETRICS = "biometrics"
    ESTIMATED_TIMES = "estimated_times"
    FTP_EQUIPMENT = "ftp_equipment"
    WEEKLY_FREQUENCY = "weekly_frequency"
    AVAILABLE_DAYS = "available_days"
    LONG_RUN_DAY = "long_run_day"
    START_DATE = "start_date"
    PLAN_DURATION = "plan_duration"
    EVENT_DATE = "event_date"
    GOAL_TIME = "goal_time"
    SUMMARY = "summary"
    HEALTH_DECLARATION = "health_declaration"


# Canonical order; every active sequence is a subsequence of this
ALL_STEPS: List[WizardStep] = list(WizardStep)


def sport_for_goal(goal: Optional[str]) -> Sport:
    if goal and goal.startswith("cycling_"):
        return Sport.CYCLING
    return Sport.RUNNING


def is_race_goal(goal: Optional[str]) -> bool:
    return goal in RACE_GOALS


def is_event_goal(goal: Optional[str]) -> bool:
    return is_race_goal(goal) or goal in RUNNING_EVENT_GOALS or goal in CYCLING_EVENT_GOALS


@dataclass
class HealthDeclaration:
    answers: Dict[str, Optional[bool]] = field(
        default_factory=lambda: {q: None for q in HEALTH_QUESTIONS}
    )
    declaration_accepted: bool = False

    @property
    def all_answered(self) -> bool:
        return all(self.answers.get(q) is not None for q in HEALTH_QUESTIONS)

    @property
    def any_affirmative(self) -> bool:
        return any(self.answers.get(q) is True for q in HEALTH_QUESTIONS)

    @property
    def is_eligible(self) -> bool:
        return self.all_answered and not self.any_affirmative and self.declaration_accepted

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {q: self.answers.get(q) for q in HEALTH_QUESTIONS}
        data["declaration_accepted"] = self.declaration_accepted
        data["is_eligible"] = self.is_eligible
        return data


@dataclass
class WizardState:
    """Everything the athlete has entered so far."""
    goal: Optional[str] = None
    athlete_level: Optional[FitnessTier] = None
    birth_date: Optional[date] = None
    weight_kg: Optional[float] = None
    gender: Optional[str] = None
    estimated_times: Dict[str, str] = field(default_factory=dict)
    historical_estimates: Dict[str, int] = field(default_factory=dict)
    ftp_watts: Optional[float] = None
    equipment: Optional[Equipment] = None
    days_per_week: Optional[int] = None
    available_days: List[str] = field(default_factory=list)
    long_run_day: Optional[str] = None
    start_date: Optional[date] = None
    plan_duration_weeks: Optional[int] = None
    event_date: Optional[date] = None
    goal_time: Optional[str] = None
    health: HealthDeclaration = field(default_factory=HealthDeclaration)

    @property
    def sport(self) -> Sport:
        return sport_for_goal(self.goal)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WizardState":
        """Build from a JSON-style payload (ISO dates, enum values)."""
        values = dict(data)
        for name in ("birth_date", "start_date", "event_date"):
            if isinstance(values.get(name), str):
                values[name] = date.fromisoformat(values[name])
        if values.get("athlete_level") is not None:
            values["athlete_level"] = FitnessTier.parse(values["athlete_level"])
        if values.get("equipment") is not None:
            values["equipment"] = Equipment(values["equipment"])

        health = dict(values.pop("health", None) or {})
        accepted = bool(health.pop("declaration_accepted", False))
        health.pop("is_eligible", None)
        values["health"] = HealthDeclaration(
            answers={q: health.get(q) for q in HEALTH_QUESTIONS},
            declaration_accepted=accepted,
        )

        known = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in values.items() if k in known})

    def adjusted_times(self) -> Dict[str, str]:
        """
        Estimated times the athlete changed from the historical values.

        Clients pre-fill the estimates from the profile, so an entry equal
        to the historical estimate (to the second) is not an adjustment.
        Unparseable entries are kept for validation to report.
        """
        adjusted = {}
        for race, text in self.estimated_times.items():
            if not text:
                continue
            minutes = parse_duration_minutes(text)
            historical = self.historical_estimates.get(race)
            if minutes is not None and historical and abs(minutes * 60 - historical) < 1:
                continue
            adjusted[race] = text
        return adjusted

    def preferences(self) -> Dict[str, Any]:
        return {
            "days_per_week": self.days_per_week,
            "available_days": list(self.available_days),
            "long_run_day": self.long_run_day,
            "start_date": self.start_date,
            "plan_duration_weeks": self.plan_duration_weeks,
            "event_date": self.event_date if is_event_goal(self.goal) else None,
            "goal_time": self.goal_time if is_race_goal(self.goal) else None,
        }


def step_sequence(state: WizardState) -> List[WizardStep]:
    """Active steps for the current state, in order."""
    steps = [WizardStep.GOAL, WizardStep.ATHLETE_LEVEL, WizardStep.BIOMETRICS]
    if state.sport == Sport.CYCLING:
        steps.append(WizardStep.FTP_EQUIPMENT)
    else:
        steps.append(WizardStep.ESTIMATED_TIMES)
    steps += [
        WizardStep.WEEKLY_FREQUENCY,
        WizardStep.AVAILABLE_DAYS,
        WizardStep.LONG_RUN_DAY,
        WizardStep.START_DATE,
        WizardStep.PLAN_DURATION,
    ]
    if is_event_goal(state.goal):
        steps.append(WizardStep.EVENT_DATE)
    if is_race_goal(state.goal):
        steps.append(WizardStep.GOAL_TIME)
    steps += [WizardStep.SUMMARY, WizardStep.HEALTH_DECLARATION]
    return steps


# =============================================================================
# STEP PREDICATES
# =============================================================================

def step_errors(step: WizardStep, state: WizardState) -> Dict[str, str]:
    """Field errors blocking a step. Empty dict means the step is complete."""
    errors: Dict[str, str] = {}

    if step == WizardStep.GOAL:
        if state.goal not in GOAL_LABELS:
            errors["goal"] = "Choose a training goal"

    elif step == WizardStep.ATHLETE_LEVEL:
        if state.athlete_level is None:
            errors["athlete_level"] = "Confirm your athlete level"

    elif step == WizardStep.BIOMETRICS:
        if state.weight_kg is not None and not 30 <= state.weight_kg <= 250:
            errors["weight_kg"] = "Weight must be between 30 and 250 kg"
        if state.birth_date is not None and state.birth_date >= date.today():
            errors["birth_date"] = "Birth date must be in the past"

    elif step == WizardStep.ESTIMATED_TIMES:
        for race, text in state.adjusted_times().items():
            if parse_duration_minutes(text) is None:
                errors[f"estimated_times.{race}"] = "Use MM:SS or H:MM:SS"

    elif step == WizardStep.FTP_EQUIPMENT:
        if state.equipment is None:
            errors["equipment"] = "Select your equipment"
        if state.ftp_watts is not None and not 50 <= state.ftp_watts <= 600:
            errors["ftp_watts"] = "FTP must be between 50 and 600 W"

    elif step == WizardStep.WEEKLY_FREQUENCY:
        if state.days_per_week is None or not 1 <= state.days_per_week <= 7:
            errors["days_per_week"] = "Choose between 1 and 7 days per week"

    elif step == WizardStep.AVAILABLE_DAYS:
        days = [str(d).lower() for d in state.available_days]
        if not days:
            errors["available_days"] = "Select at least one training day"
        elif any(d not in WEEKDAYS for d in days) or len(set(days)) != len(days):
            errors["available_days"] = "Select distinct weekdays"
        elif state.days_per_week and len(days) != state.days_per_week:
            errors["available_days"] = f"Select exactly {state.days_per_week} days"

    elif step == WizardStep.LONG_RUN_DAY:
        days = [str(d).lower() for d in state.available_days]
        if not state.long_run_day or state.long_run_day.lower() not in days:
            errors["long_run_day"] = "Pick one of your training days"

    elif step == WizardStep.START_DATE:
        if state.start_date is None:
            errors["start_date"] = "Choose a start date"

    elif step == WizardStep.PLAN_DURATION:
        weeks = state.plan_duration_weeks
        if not isinstance(weeks, int) or not MIN_PLAN_WEEKS <= weeks <= MAX_PLAN_WEEKS:
            errors["plan_duration_weeks"] = (
                f"Plan duration must be {MIN_PLAN_WEEKS}-{MAX_PLAN_WEEKS} weeks"
            )

    elif step == WizardStep.EVENT_DATE:
        if state.event_date is None:
            errors["event_date"] = "Choose the event date"
        elif state.start_date and state.event_date <= state.start_date:
            errors["event_date"] = "Event date must be after the start date"

    elif step == WizardStep.GOAL_TIME:
        if state.goal_time:
            assessment = validate_goal_time(
                state.goal, state.goal_time, state.historical_estimates.get(state.goal)
            )
            if not assessment.feasible:
                errors["goal_time"] = assessment.message

    elif step == WizardStep.HEALTH_DECLARATION:
        if not state.health.all_answered:
            errors["health"] = "Answer all health questions"
        elif state.health.any_affirmative:
            errors["health"] = "A medical clearance is required before starting a plan"
        elif not state.health.declaration_accepted:
            errors["declaration_accepted"] = "Accept the health declaration"

    return errors


def can_advance(step: WizardStep, state: WizardState) -> bool:
    return not step_errors(step, state)


def collect_errors(state: WizardState) -> Dict[str, str]:
    """Field errors across every active step except the health declaration."""
    errors: Dict[str, str] = {}
    for step in step_sequence(state):
        if step != WizardStep.HEALTH_DECLARATION:
            errors.update(step_errors(step, state))
    return errors


def ensure_can_generate(state: WizardState) -> None:
    """
    Raises:
        WizardValidationError: any active step is incomplete
        HealthDeclarationError: the health declaration is not eligible
    """
    errors = collect_errors(state)
    if errors:
        raise WizardValidationError(errors)
    health_errors = step_errors(WizardStep.HEALTH_DECLARATION, state)
    if health_errors:
        raise HealthDeclarationError(next(iter(health_errors.values())))


class PlanWizard:
    """Cursor over the active step sequence."""

    def __init__(self, state: Optional[WizardState] = None):
        self.state = state or WizardState()
        self.current_step = WizardStep.GOAL

    @property
    def steps(self) -> List[WizardStep]:
        return step_sequence(self.state)

    @property
    def position(self) -> int:
        return self.steps.index(self.current_step)

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.steps[-1]

    def update(self, **fields) -> List[WizardStep]:
        """Set state fields and recompute the sequence."""
        for name, value in fields.items():
            if not hasattr(self.state, name) or name == "sport":
                raise AttributeError(f"Unknown wizard field: {name}")
            setattr(self.state, name, value)

        steps = self.steps
        if self.current_step not in steps:
            # Branch removed the current step; fall back to the closest earlier one
            rank = ALL_STEPS.index(self.current_step)
            self.current_step = [s for s in steps if ALL_STEPS.index(s) < rank][-1]
        return steps

    def can_advance(self) -> bool:
        return can_advance(self.current_step, self.state)

    def next(self) -> WizardStep:
        errors = step_errors(self.current_step, self.state)
        if errors:
            raise WizardValidationError(errors)
        steps = self.steps
        if self.current_step != steps[-1]:
            self.current_step = steps[steps.index(self.current_step) + 1]
        return self.current_step

    def back(self) -> WizardStep:
        steps = self.steps
        index = steps.index(self.current_step)
        if index > 0:
            self.current_step = steps[index - 1]
        return self.current_step

    def can_generate(self) -> bool:
        try:
            ensure_can_generate(self.state)
        except (WizardValidationError, HealthDeclarationError):
            return False
        return True

    def ensure_can_generate(self) -> None:
        ensure_can_generate(self.state)
