"""
SQLAlchemy plan store.

Writes plans, workouts, preferences and health declarations within the
caller's session. The caller owns the transaction (get_db commits on
success, rolls back on error); this store only flushes.

The partial unique index uq_training_plan_one_active turns a second
active plan for the same athlete into an IntegrityError, which is
reported as ActivePlanConflictError.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import HealthDeclaration, PlannedWorkout as PlannedWorkoutRecord
from models import TrainingPlan, TrainingPlanPreference

from .constants import PlanStatus
from .generator import GeneratedPlan
from .orchestrator import ActivePlanConflictError
from .workout_synthesizer import PlannedWorkout

logger = logging.getLogger(__name__)


class SqlPlanStore:
    """PlanStore over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def get_active_plan(self, athlete_id: UUID) -> Optional[TrainingPlan]:
        return (
            self.db.query(TrainingPlan)
            .filter(
                TrainingPlan.athlete_id == athlete_id,
                TrainingPlan.status == PlanStatus.ACTIVE.value,
            )
            .first()
        )

    def has_active_plan(self, athlete_id: UUID) -> bool:
        return self.get_active_plan(athlete_id) is not None

    def active_plan_id(self, athlete_id: UUID) -> Optional[UUID]:
        plan = self.get_active_plan(athlete_id)
        return plan.id if plan else None

    def create_plan(self, athlete_id: UUID, plan: GeneratedPlan) -> UUID:
        record = TrainingPlan(
            athlete_id=athlete_id,
            name=plan.name,
            status=PlanStatus.PENDING.value,
            sport=plan.sport.value,
            goal=plan.goal,
            fitness_tier=plan.fitness_tier.value,
            plan_start_date=plan.start_date,
            plan_end_date=plan.end_date,
            total_weeks=plan.weeks,
            event_date=plan.event_date,
            goal_time_seconds=plan.target_time.seconds if plan.target_time else None,
            goal_time_source=plan.target_time.source if plan.target_time else None,
            zones=plan.zones.to_dict(),
            phases=[p.to_dict() for p in plan.phases],
        )
        self.db.add(record)
        self.db.flush()
        return record.id

    def create_workouts(
        self,
        plan_id: UUID,
        athlete_id: UUID,
        workouts: List[PlannedWorkout],
    ) -> int:
        plan = self.db.get(TrainingPlan, plan_id)
        phases = {p["week_number"]: p["focus"] for p in (plan.phases or [])} if plan else {}

        records = [
            PlannedWorkoutRecord(
                plan_id=plan_id,
                athlete_id=athlete_id,
                scheduled_date=w.date,
                week_number=w.week_number,
                phase=phases.get(w.week_number, ""),
                workout_type=w.workout_type,
                title=w.title,
                description=w.description,
                duration_minutes=w.duration_minutes,
                target_zone=w.target_zone,
                target=w.target,
                computed_stress=w.computed_stress,
                segments=[s.to_dict() for s in w.segments],
            )
            for w in workouts
        ]
        self.db.add_all(records)
        self.db.flush()
        return len(records)

    def activate_plan(self, plan_id: UUID) -> None:
        self.set_status(plan_id, PlanStatus.ACTIVE)

    def set_status(self, plan_id: UUID, status: PlanStatus) -> None:
        """
        Raises:
            LookupError: unknown plan
            ActivePlanConflictError: activating while another plan is active
        """
        plan = self.db.get(TrainingPlan, plan_id)
        if plan is None:
            raise LookupError(f"Training plan {plan_id} not found")

        athlete_id = plan.athlete_id
        plan.status = PlanStatus(status).value
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_active_plan(athlete_id)
            logger.warning(f"Concurrent active plan for athlete {athlete_id}; rolled back")
            raise ActivePlanConflictError(athlete_id, existing.id if existing else None)

    def save_preferences(self, plan_id: UUID, athlete_id: UUID, preferences: Dict[str, Any]) -> None:
        self.db.add(TrainingPlanPreference(
            plan_id=plan_id,
            athlete_id=athlete_id,
            days_per_week=preferences.get("days_per_week"),
            available_days=list(preferences.get("available_days") or []),
            long_run_day=preferences.get("long_run_day"),
            start_date=preferences.get("start_date"),
            target_time_seconds=preferences.get("target_time_seconds"),
            target_time_source=preferences.get("target_time_source"),
        ))
        self.db.flush()

    def save_health_declaration(
        self,
        athlete_id: UUID,
        plan_id: Optional[UUID],
        answers: Dict[str, Any],
    ) -> None:
        answers = dict(answers)
        accepted = bool(answers.pop("declaration_accepted", False))
        eligible = bool(answers.pop("is_eligible", False))
        self.db.add(HealthDeclaration(
            athlete_id=athlete_id,
            plan_id=plan_id,
            answers=answers,
            declaration_accepted=accepted,
            is_eligible=eligible,
        ))
        self.db.flush()
