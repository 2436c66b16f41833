"""
Plan Engine API Router

Endpoints for:
- Athlete performance profile (race-time estimates, tier, max HR)
- Plan preview (pure generation, nothing persisted)
- Plan commit (completed wizard -> active plan)
"""

from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from core.database import get_db
from core.exceptions import ConflictError, ForbiddenError, ValidationError
from services.plan_engine import (
    ActivePlanConflictError,
    AthleteAnalysisService,
    HealthDeclaration,
    HealthDeclarationError,
    PerformanceProfile,
    PlanOrchestrator,
    WizardState,
    WizardValidationError,
)
from services.plan_engine.constants import ActivityKindFilter, Equipment, FitnessTier
from services.plan_engine.repository import SqlPlanStore
from services.plan_engine.wizard import sport_for_goal
from services.plan_engine.wiring import build_analysis_service, kind_for_sport

router = APIRouter(prefix="/v1/plan-engine", tags=["Plan Engine"])


# ============ Request/Response Models ============

class HealthDeclarationPayload(BaseModel):
    """Seven yes/no answers plus explicit acceptance."""
    question_1_heart_problem: Optional[bool] = None
    question_2_chest_pain_during_activity: Optional[bool] = None
    question_3_chest_pain_last_3months: Optional[bool] = None
    question_4_balance_consciousness_loss: Optional[bool] = None
    question_5_bone_joint_problem: Optional[bool] = None
    question_6_taking_medication: Optional[bool] = None
    question_7_other_impediment: Optional[bool] = None
    declaration_accepted: bool = False


class PlanWizardRequest(BaseModel):
    """Everything the plan wizard collected."""
    goal: Optional[str] = None
    athlete_level: Optional[FitnessTier] = None
    birth_date: Optional[date] = None
    weight_kg: Optional[float] = None
    gender: Optional[str] = None
    estimated_times: Dict[str, str] = Field(default_factory=dict)
    ftp_watts: Optional[float] = None
    equipment: Optional[Equipment] = None
    days_per_week: Optional[int] = None
    available_days: List[str] = Field(default_factory=list)
    long_run_day: Optional[str] = None
    start_date: Optional[date] = None
    plan_duration_weeks: Optional[int] = None
    event_date: Optional[date] = None
    goal_time: Optional[str] = None
    health: HealthDeclarationPayload = Field(default_factory=HealthDeclarationPayload)

    def to_state(self, profile: PerformanceProfile) -> WizardState:
        answers = self.health.model_dump()
        accepted = answers.pop("declaration_accepted")
        return WizardState(
            goal=self.goal,
            athlete_level=self.athlete_level,
            birth_date=self.birth_date,
            weight_kg=self.weight_kg,
            gender=self.gender,
            estimated_times=dict(self.estimated_times),
            historical_estimates=dict(profile.race_time_estimates),
            ftp_watts=self.ftp_watts,
            equipment=self.equipment,
            days_per_week=self.days_per_week,
            available_days=list(self.available_days),
            long_run_day=self.long_run_day,
            start_date=self.start_date,
            plan_duration_weeks=self.plan_duration_weeks,
            event_date=self.event_date,
            goal_time=self.goal_time,
            health=HealthDeclaration(answers=answers, declaration_accepted=accepted),
        )


class PlanPreviewRequest(PlanWizardRequest):
    athlete_id: Optional[UUID] = None


class PlanCommitResponse(BaseModel):
    plan_id: UUID
    workouts_created: int
    plan: dict


# ============ Dependencies ============

def get_analysis_service(
    kind: ActivityKindFilter = ActivityKindFilter.RUNNING,
) -> AthleteAnalysisService:
    return build_analysis_service(kind)


def _kind_for(request: PlanWizardRequest) -> ActivityKindFilter:
    return kind_for_sport(sport_for_goal(request.goal))


# ============ Endpoints ============

@router.get("/athletes/{athlete_id}/profile")
def get_performance_profile(
    athlete_id: UUID,
    service: AthleteAnalysisService = Depends(get_analysis_service),
):
    """
    Derived performance profile for an athlete.

    Missing history is not an error: estimates come back empty.
    """
    profile = service.analyze(athlete_id)
    data = profile.to_dict()
    data["formatted_estimates"] = profile.formatted_estimates()
    return data


@router.post("/preview")
def preview_plan(
    request: PlanPreviewRequest,
    service: AthleteAnalysisService = Depends(get_analysis_service),
):
    """
    Generate a plan without saving it.

    The health declaration is not required for a preview.
    """
    if request.athlete_id is not None:
        service.kind_filter = _kind_for(request)
        profile = service.analyze(request.athlete_id)
    else:
        profile = PerformanceProfile()

    orchestrator = PlanOrchestrator(store=None)
    try:
        plan = orchestrator.preview(request.to_state(profile), profile)
    except WizardValidationError as e:
        raise ValidationError(e.field_errors)
    except ValueError as e:
        raise ValidationError(str(e))

    result = plan.to_dict()
    result["weekly_summary"] = plan.weekly_summary()
    return result


@router.post(
    "/athletes/{athlete_id}/plans",
    response_model=PlanCommitResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_plan(
    athlete_id: UUID,
    request: PlanWizardRequest,
    db: Session = Depends(get_db),
    service: AthleteAnalysisService = Depends(get_analysis_service),
):
    """
    Commit a completed wizard.

    409 when the athlete already has an active plan, 403 when the health
    declaration does not allow training, 422 on invalid fields.
    """
    service.kind_filter = _kind_for(request)
    profile = service.analyze(athlete_id)

    orchestrator = PlanOrchestrator(SqlPlanStore(db))
    try:
        result = orchestrator.commit(athlete_id, request.to_state(profile), profile)
    except WizardValidationError as e:
        raise ValidationError(e.field_errors)
    except HealthDeclarationError as e:
        raise ForbiddenError(e.message, error_code="HEALTH_DECLARATION_INELIGIBLE")
    except ActivePlanConflictError as e:
        raise ConflictError(
            {
                "message": e.message,
                "active_plan_id": str(e.active_plan_id) if e.active_plan_id else None,
            },
            error_code="ACTIVE_PLAN_EXISTS",
        )

    return PlanCommitResponse(
        plan_id=result.plan_id,
        workouts_created=result.workouts_created,
        plan=result.plan.to_dict(),
    )
