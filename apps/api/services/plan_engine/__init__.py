# Adaptive Plan Engine
#
# History -> profile -> periodized plan:
# - Activity aggregation and sustained-pace anchors
# - Performance profile (race-time estimates, fitness tier, max HR)
# - Zone model (pace / power / heart rate)
# - Periodization (12-week macro-cycle) and workout synthesis
# - Plan wizard and commit orchestration
#
# The SQLAlchemy store lives in .repository and is imported explicitly,
# so the pure engine never pulls in the database layer.

from .activity_aggregator import ActivitySample, AggregatedHistory, aggregate_activities
from .performance_profiler import PerformanceProfile, PerformanceProfiler, AthleteAnalysisService
from .tier_classifier import TierResolver, classify
from .zone_model import ZoneModel, ZoneBand, build_zone_model
from .phase_builder import MesocyclePhase, PeriodizationPlanner
from .workout_library import WorkoutTemplate, Segment, get_template
from .workout_synthesizer import PlannedWorkout, WorkoutSynthesizer
from .generator import GeneratedPlan, PlanGenerator
from .target_time import TargetTime, derive_target_time, validate_goal_time
from .wizard import (
    PlanWizard,
    WizardState,
    WizardStep,
    HealthDeclaration,
    WizardValidationError,
    HealthDeclarationError,
)
from .orchestrator import PlanOrchestrator, ActivePlanConflictError, CommitResult
from .cache import ProfileCacheService
from .constants import FitnessTier, PhaseFocus, Sport, Equipment, PlanStatus

__all__ = [
    # Profile
    'ActivitySample',
    'AggregatedHistory',
    'aggregate_activities',
    'PerformanceProfile',
    'PerformanceProfiler',
    'AthleteAnalysisService',
    'TierResolver',
    'classify',
    'ProfileCacheService',

    # Generation
    'ZoneModel',
    'ZoneBand',
    'build_zone_model',
    'MesocyclePhase',
    'PeriodizationPlanner',
    'WorkoutTemplate',
    'Segment',
    'get_template',
    'PlannedWorkout',
    'WorkoutSynthesizer',
    'GeneratedPlan',
    'PlanGenerator',
    'TargetTime',
    'derive_target_time',
    'validate_goal_time',

    # Wizard and commit
    'PlanWizard',
    'WizardState',
    'WizardStep',
    'HealthDeclaration',
    'WizardValidationError',
    'HealthDeclarationError',
    'PlanOrchestrator',
    'ActivePlanConflictError',
    'CommitResult',

    # Constants
    'FitnessTier',
    'PhaseFocus',
    'Sport',
    'Equipment',
    'PlanStatus',
]
