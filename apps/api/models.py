from sqlalchemy import Column, Integer, Boolean, Float, Date, DateTime, ForeignKey, JSON, Text, Index, UniqueConstraint, Uuid, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import uuid


class TrainingPlan(Base):
    """
    Training plan for an athlete.

    Generated from the athlete's performance profile as a sequence of
    weekly mesocycle phases (base, build, peak, taper, recovery) with
    dated workouts.

    Lifecycle: 'pending' while workouts are written, 'active' once the
    commit completes, then 'completed' or 'cancelled'. At most one
    active plan per athlete (uq_training_plan_one_active).
    """
    __tablename__ = "training_plan"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid(as_uuid=True), nullable=False)  # Index in __table_args__
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Plan metadata
    name = Column(Text, nullable=False)  # e.g., "Half Marathon - 16 weeks"
    status = Column(Text, default="pending", nullable=False)  # 'pending', 'active', 'completed', 'cancelled'
    sport = Column(Text, nullable=False)  # 'running', 'cycling'
    goal = Column(Text, nullable=False)  # e.g., '5k', 'general_fitness', 'cycling_gran_fondo'
    fitness_tier = Column(Text, nullable=False)  # 'Beginner' ... 'Elite'

    # Plan structure
    plan_start_date = Column(Date, nullable=False)
    plan_end_date = Column(Date, nullable=False)
    total_weeks = Column(Integer, nullable=False)
    event_date = Column(Date, nullable=True)

    # Targets at plan creation
    goal_time_seconds = Column(Float, nullable=True)
    goal_time_source = Column(Text, nullable=True)  # 'goal_time', 'adjusted', 'historical'
    zones = Column(JSON, nullable=True)  # Zone model snapshot
    phases = Column(JSON, nullable=True)  # [{"week_number", "focus", "target_training_stress"}, ...]

    workouts = relationship("PlannedWorkout", back_populates="plan", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_training_plan_athlete_id", "athlete_id"),
        Index("ix_training_plan_status", "status"),
        Index(
            "uq_training_plan_one_active",
            "athlete_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )


class PlannedWorkout(Base):
    """
    A single planned workout within a training plan.

    Owned by its plan; deleted with it.
    """
    __tablename__ = "planned_workout"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("training_plan.id", ondelete="CASCADE"), nullable=False)  # Index in __table_args__
    athlete_id = Column(Uuid(as_uuid=True), nullable=False)  # Index in __table_args__

    # Scheduling
    scheduled_date = Column(Date, nullable=False)
    week_number = Column(Integer, nullable=False)  # Week 1, 2, 3... of the plan
    phase = Column(Text, nullable=False)  # 'base', 'build', 'peak', 'taper', 'recovery'

    # Workout definition
    workout_type = Column(Text, nullable=False)  # 'endurance', 'sweet_spot', 'threshold', 'long', ...
    title = Column(Text, nullable=False)  # e.g., "Sweet Spot Intervals"
    description = Column(Text, nullable=True)

    # Targets
    duration_minutes = Column(Float, nullable=False)
    target_zone = Column(Text, nullable=False)  # 'Z1' ... 'Z6'
    target = Column(Text, nullable=True)  # Rendered range, e.g. "4:48-5:14 /km"
    computed_stress = Column(Float, nullable=False)

    # Format: [{"kind": "warmup", "duration_minutes": 15, "zone": "Z1"}, {"kind": "interval", "repeat": 3, ...}]
    segments = Column(JSON, nullable=True)

    completed = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    plan = relationship("TrainingPlan", back_populates="workouts")

    __table_args__ = (
        Index("ix_planned_workout_plan_id", "plan_id"),
        Index("ix_planned_workout_athlete_id", "athlete_id"),
        Index("ix_planned_workout_date", "scheduled_date"),
        UniqueConstraint('plan_id', 'scheduled_date', name='uq_planned_workout_plan_date'),
    )


class TrainingPlanPreference(Base):
    """Schedule preferences captured by the plan wizard."""
    __tablename__ = "training_plan_preference"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("training_plan.id", ondelete="CASCADE"), nullable=False, unique=True)
    athlete_id = Column(Uuid(as_uuid=True), nullable=False)
    days_per_week = Column(Integer, nullable=True)
    available_days = Column(JSON, nullable=False)  # ["tuesday", "thursday", "saturday"]
    long_run_day = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    target_time_seconds = Column(Float, nullable=True)
    target_time_source = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_training_plan_preference_athlete_id", "athlete_id"),
    )


class HealthDeclaration(Base):
    """
    Pre-participation health questionnaire.

    Seven yes/no questions; any 'yes' makes the athlete ineligible for
    plan generation until medically cleared.
    """
    __tablename__ = "health_declaration"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    athlete_id = Column(Uuid(as_uuid=True), nullable=False)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("training_plan.id", ondelete="SET NULL"), nullable=True)
    answers = Column(JSON, nullable=False)  # {"question_1_heart_problem": false, ...}
    declaration_accepted = Column(Boolean, default=False, nullable=False)
    is_eligible = Column(Boolean, default=False, nullable=False)
    declared_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_health_declaration_athlete_id", "athlete_id"),
    )
