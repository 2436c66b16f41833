"""
Plan Generation Tasks

Runs the commit pipeline for one athlete in a worker with its own
session. Generations for different athletes share nothing.
"""

from typing import Dict
from uuid import UUID
from celery import Task
from sqlalchemy.orm import Session
from core.database import get_db_sync
from core.logging import log_fields
from tasks import celery_app
from services.plan_engine import (
    ActivePlanConflictError,
    HealthDeclarationError,
    PlanOrchestrator,
    WizardState,
    WizardValidationError,
)
from services.plan_engine.wiring import build_analysis_service, kind_for_sport
from services.plan_engine.repository import SqlPlanStore
import logging

logger = logging.getLogger(__name__)


@celery_app.task(name="tasks.generate_training_plan", bind=True)
def generate_training_plan_task(self: Task, athlete_id: str, wizard: Dict) -> Dict:
    """
    Generate and commit a plan from a completed wizard payload.

    Returns a status dict; expected refusals (invalid fields, health gate,
    existing active plan) are reported, not retried.
    """
    athlete_uuid = UUID(athlete_id)
    state = WizardState.from_dict(wizard)

    service = build_analysis_service(kind_for_sport(state.sport))
    profile = service.analyze(athlete_uuid)
    state.historical_estimates = dict(profile.race_time_estimates)

    db: Session = get_db_sync()
    try:
        result = PlanOrchestrator(SqlPlanStore(db)).commit(athlete_uuid, state, profile)
        db.commit()
    except WizardValidationError as e:
        db.rollback()
        return {"status": "invalid", "field_errors": e.field_errors}
    except HealthDeclarationError as e:
        db.rollback()
        return {"status": "ineligible", "message": e.message}
    except ActivePlanConflictError as e:
        db.rollback()
        return {
            "status": "conflict",
            "message": e.message,
            "active_plan_id": str(e.active_plan_id) if e.active_plan_id else None,
        }
    except Exception as e:
        db.rollback()
        logger.error(
            f"Plan generation failed for athlete {athlete_id}: {e}",
            exc_info=True,
            extra=log_fields(athlete_id=athlete_id, task_id=self.request.id),
        )
        raise
    finally:
        db.close()

    return {
        "status": "success",
        "athlete_id": athlete_id,
        "plan_id": str(result.plan_id),
        "workouts_created": result.workouts_created,
    }
