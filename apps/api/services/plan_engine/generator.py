"""
Plan Generator

Pure pipeline from a PerformanceProfile to a complete plan:

    profile -> zones -> phases (Planner) -> workouts (Synthesizer)

Nothing here touches storage or the network. The same inputs always give
the same output, so a preview and a committed plan match exactly.

Usage:
    generator = PlanGenerator()
    plan = generator.generate(
        profile,
        weeks=12,
        start_date=date(2024, 1, 1),
        available_days=["tuesday", "thursday", "saturday"],
        goal="5k",
    )
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from .constants import Equipment, FitnessTier, GOAL_LABELS, Sport
from .performance_profiler import PerformanceProfile
from .phase_builder import MesocyclePhase, PeriodizationPlanner
from .target_time import TargetTime, derive_target_time
from .workout_synthesizer import PlannedWorkout, WorkoutSynthesizer
from .zone_model import ZoneModel, build_zone_model, heart_rate_zones

logger = logging.getLogger(__name__)


@dataclass
class GeneratedPlan:
    """A complete plan, ready to preview or persist."""
    name: str
    sport: Sport
    goal: str
    fitness_tier: FitnessTier
    weeks: int
    start_date: date
    end_date: date
    zones: ZoneModel
    heart_rate_zones: ZoneModel
    phases: List[MesocyclePhase] = field(default_factory=list)
    workouts: List[PlannedWorkout] = field(default_factory=list)
    target_time: Optional[TargetTime] = None
    event_date: Optional[date] = None

    def workouts_for_week(self, week_number: int) -> List[PlannedWorkout]:
        return [w for w in self.workouts if w.week_number == week_number]

    def weekly_summary(self) -> List[Dict[str, Any]]:
        """Target vs. scheduled stress per week."""
        summary = []
        for phase in self.phases:
            week = self.workouts_for_week(phase.week_number)
            summary.append({
                "week_number": phase.week_number,
                "focus": phase.focus.value,
                "target_training_stress": phase.target_training_stress,
                "scheduled_stress": round(sum(w.computed_stress for w in week), 1),
                "sessions": len(week),
            })
        return summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "sport": self.sport.value,
            "goal": self.goal,
            "fitness_tier": self.fitness_tier.value,
            "weeks": self.weeks,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "zones": self.zones.to_dict(),
            "heart_rate_zones": self.heart_rate_zones.to_dict(),
            "phases": [p.to_dict() for p in self.phases],
            "workouts": [w.to_dict() for w in self.workouts],
            "target_time_seconds": self.target_time.seconds if self.target_time else None,
            "target_time_source": self.target_time.source if self.target_time else None,
            "event_date": self.event_date.isoformat() if self.event_date else None,
        }


def plan_name(goal: str, weeks: int) -> str:
    return f"{GOAL_LABELS.get(goal, goal.replace('_', ' ').title())} - {weeks} weeks"


class PlanGenerator:
    """Planner + Synthesizer over a profile snapshot."""

    def __init__(
        self,
        planner: Optional[PeriodizationPlanner] = None,
        synthesizer: Optional[WorkoutSynthesizer] = None,
    ):
        self.planner = planner or PeriodizationPlanner()
        self.synthesizer = synthesizer or WorkoutSynthesizer()

    def generate(
        self,
        profile: PerformanceProfile,
        weeks: int,
        start_date: date,
        available_days: Sequence[str],
        goal: str = "general_fitness",
        sport: Sport = Sport.RUNNING,
        tier: Optional[FitnessTier] = None,
        equipment: Optional[Equipment] = None,
        ftp_watts: Optional[float] = None,
        weight_kg: Optional[float] = None,
        goal_time: Optional[str] = None,
        adjusted_times: Optional[Dict[str, str]] = None,
        event_date: Optional[date] = None,
        long_day: Optional[str] = None,
    ) -> GeneratedPlan:
        """
        Args:
            profile: Derived athlete profile
            weeks: 4-52
            start_date: First day of week 1
            available_days: Weekday names
            long_day: Weekday for the long session (one of available_days)
            tier: Athlete-confirmed tier; defaults to the profile tier

        Raises:
            ValueError: weeks out of range, unknown weekday, no days
        """
        if not available_days:
            raise ValueError("At least one training day is required")

        tier = FitnessTier.parse(tier) if tier is not None else profile.fitness_tier
        phases = self.planner.build_phases(weeks, tier)

        zones = build_zone_model(
            sport,
            tier,
            anchor_pace=profile.best_pace or profile.average_pace,
            ftp_watts=ftp_watts,
            weight_kg=weight_kg,
        )
        hr_zones = heart_rate_zones(profile.suggested_max_heart_rate)

        workouts: List[PlannedWorkout] = []
        for phase in phases:
            workouts.extend(self.synthesizer.synthesize_week(
                phase,
                zones,
                tier,
                available_days,
                start_date,
                sport=sport,
                equipment=equipment,
                heart_rate_model=hr_zones,
                long_day=long_day,
            ))

        target = derive_target_time(
            goal,
            tier,
            weeks,
            goal_time=goal_time,
            adjusted_times=adjusted_times,
            historical_estimates=profile.race_time_estimates,
        )

        logger.info(
            f"Generated {weeks}-week {sport.value} plan ({tier.value}, goal={goal}): "
            f"{len(workouts)} workouts"
        )

        return GeneratedPlan(
            name=plan_name(goal, weeks),
            sport=sport,
            goal=goal,
            fitness_tier=tier,
            weeks=weeks,
            start_date=start_date,
            end_date=start_date + timedelta(days=weeks * 7),
            zones=zones,
            heart_rate_zones=hr_zones,
            phases=phases,
            workouts=workouts,
            target_time=target,
            event_date=event_date,
        )
