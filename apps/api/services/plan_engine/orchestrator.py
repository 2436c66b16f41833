"""
Plan Orchestrator

Commits a completed wizard as a persisted plan:

1. validate every wizard field (nothing is generated on invalid input)
2. enforce the health-declaration gate
3. refuse when the athlete already has an active plan
4. generate phases and workouts
5. persist plan (pending), preferences, declaration, workouts
6. activate

The store's unique constraint on active plans is the final guard for two
commits racing past step 3; it surfaces as the same ActivePlanConflictError.

Usage:
    orchestrator = PlanOrchestrator(SqlPlanStore(db))
    result = orchestrator.commit(athlete_id, wizard.state, profile)
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from .boundaries import PlanStore
from .generator import GeneratedPlan, PlanGenerator
from .performance_profiler import PerformanceProfile
from .wizard import (
    WizardState,
    WizardValidationError,
    collect_errors,
    ensure_can_generate,
    is_event_goal,
)

logger = logging.getLogger(__name__)


class ActivePlanConflictError(Exception):
    """The athlete already has an active plan."""

    def __init__(self, athlete_id: UUID, active_plan_id: Optional[UUID] = None):
        self.athlete_id = athlete_id
        self.active_plan_id = active_plan_id
        self.message = (
            "You already have an active training plan. "
            "Finish or cancel it before creating a new one."
        )
        super().__init__(self.message)


@dataclass
class CommitResult:
    plan_id: UUID
    workouts_created: int
    plan: GeneratedPlan


class PlanOrchestrator:
    """Wizard state + profile -> persisted, active plan."""

    def __init__(self, store: PlanStore, generator: Optional[PlanGenerator] = None):
        self.store = store
        self.generator = generator or PlanGenerator()

    def preview(self, state: WizardState, profile: PerformanceProfile) -> GeneratedPlan:
        """Generate without persisting. Skips the health gate."""
        errors = collect_errors(state)
        if errors:
            raise WizardValidationError(errors)
        return self._generate(state, profile)

    def commit(
        self,
        athlete_id: UUID,
        state: WizardState,
        profile: PerformanceProfile,
    ) -> CommitResult:
        """
        Raises:
            WizardValidationError: incomplete or invalid wizard fields
            HealthDeclarationError: declaration not eligible
            ActivePlanConflictError: an active plan already exists
        """
        ensure_can_generate(state)

        active_id = self.store.active_plan_id(athlete_id)
        if active_id is not None:
            logger.info(f"Refusing plan for athlete {athlete_id}: plan {active_id} is active")
            raise ActivePlanConflictError(athlete_id, active_id)

        plan = self._generate(state, profile)

        plan_id = self.store.create_plan(athlete_id, plan)

        preferences = state.preferences()
        if plan.target_time is not None:
            preferences["target_time_seconds"] = plan.target_time.seconds
            preferences["target_time_source"] = plan.target_time.source
        self.store.save_preferences(plan_id, athlete_id, preferences)
        self.store.save_health_declaration(athlete_id, plan_id, state.health.to_dict())

        created = self.store.create_workouts(plan_id, athlete_id, plan.workouts)
        self.store.activate_plan(plan_id)

        logger.info(
            f"Committed plan {plan_id} for athlete {athlete_id}: "
            f"{plan.weeks} weeks, {created} workouts"
        )
        return CommitResult(plan_id=plan_id, workouts_created=created, plan=plan)

    def _generate(self, state: WizardState, profile: PerformanceProfile) -> GeneratedPlan:
        return self.generator.generate(
            profile,
            weeks=state.plan_duration_weeks,
            start_date=state.start_date,
            available_days=state.available_days,
            long_day=state.long_run_day,
            goal=state.goal,
            sport=state.sport,
            tier=state.athlete_level,
            equipment=state.equipment,
            ftp_watts=state.ftp_watts,
            weight_kg=state.weight_kg,
            goal_time=state.goal_time,
            adjusted_times=state.adjusted_times(),
            event_date=state.event_date if is_event_goal(state.goal) else None,
        )
