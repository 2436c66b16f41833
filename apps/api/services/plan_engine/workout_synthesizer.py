"""
Workout Synthesizer

Expands one week's MesocyclePhase into concrete PlannedWorkouts:
- each phase maps to an ordered template sequence
- Advanced/Elite athletes get over/under instead of generic VO2max, and
  every second build week is polarized (mostly easy, a little very hard)
- interval templates rotate shapes by week number
- the long session grows 10 min/week from 90 min up to 210 min
- workouts are laid onto the athlete's weekdays in calendar order; with
  fewer days than templates the week is truncated, never double-booked
- the long session always survives truncation and lands on the athlete's
  long-session day when one is given

Usage:
    synthesizer = WorkoutSynthesizer()
    workouts = synthesizer.synthesize_week(
        phase, zones, FitnessTier.BEGINNER,
        available_days=["tuesday", "thursday", "saturday"],
        start_date=date(2024, 1, 1),
    )
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constants import (
    Equipment,
    FitnessTier,
    LONG_SESSION_CEILING_MINUTES,
    LONG_SESSION_START_MINUTES,
    LONG_SESSION_STEP_MINUTES,
    PhaseFocus,
    Sport,
    WEEKDAYS,
    ZoneKind,
)
from .phase_builder import MesocyclePhase, position_in_block
from .workout_library import (
    Segment,
    SegmentKind,
    WorkoutTemplate,
    get_template,
    total_duration,
)
from .zone_model import ZoneModel, heart_rate_zones

logger = logging.getLogger(__name__)


PHASE_SEQUENCES: Dict[PhaseFocus, List[str]] = {
    PhaseFocus.BASE: [
        "endurance", "low_cadence_strength", "high_cadence", "long", "endurance", "recovery",
    ],
    PhaseFocus.BUILD: [
        "endurance", "sweet_spot", "threshold", "long", "vo2max", "recovery",
    ],
    PhaseFocus.PEAK: [
        "endurance", "threshold", "vo2max", "long", "event_simulation", "sprint",
    ],
    PhaseFocus.RECOVERY: ["recovery", "endurance", "recovery"],
    PhaseFocus.TAPER: ["endurance", "threshold", "recovery", "sprint"],
}

POLARIZED_BUILD_SEQUENCE: List[str] = [
    "endurance", "over_under", "long", "endurance", "sprint", "recovery",
]

HIGH_INTENSITY_SUBSTITUTIONS: Dict[str, str] = {"vo2max": "over_under"}

HIGH_INTENSITY_TIERS = (FitnessTier.ADVANCED, FitnessTier.ELITE)

LONG_TEMPLATE = "long"


@dataclass
class PlannedWorkout:
    """One scheduled session. Owned by the plan that generated it."""
    week_number: int
    date: date
    workout_type: str
    title: str
    description: str
    duration_minutes: float
    target_zone: str
    target: str
    computed_stress: float
    segments: List[Segment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "date": self.date.isoformat(),
            "workout_type": self.workout_type,
            "title": self.title,
            "description": self.description,
            "duration_minutes": self.duration_minutes,
            "target_zone": self.target_zone,
            "target": self.target,
            "computed_stress": self.computed_stress,
            "segments": [s.to_dict() for s in self.segments],
        }


def normalize_weekdays(days: Sequence[str]) -> List[str]:
    """Lower-case, de-duplicate and validate weekday names."""
    result = []
    for day in days:
        name = str(day).strip().lower()
        if name not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day!r}")
        if name not in result:
            result.append(name)
    return result


def day_offset(start_date: date, weekday: str) -> int:
    """Days from start_date to the next occurrence of weekday (0-6)."""
    return (WEEKDAYS.index(weekday) - start_date.weekday()) % 7


def long_session_minutes(week_number: int) -> float:
    minutes = LONG_SESSION_START_MINUTES + LONG_SESSION_STEP_MINUTES * (week_number - 1)
    return min(minutes, LONG_SESSION_CEILING_MINUTES)


def is_polarized_week(phase: MesocyclePhase, tier: FitnessTier) -> bool:
    """Every second build week for Advanced/Elite athletes."""
    return (
        phase.focus == PhaseFocus.BUILD
        and tier in HIGH_INTENSITY_TIERS
        and position_in_block(phase.week_number) % 2 == 0
    )


class WorkoutSynthesizer:
    """Turn weekly phases into dated, zone-targeted workouts."""

    def template_sequence(self, phase: MesocyclePhase, tier: FitnessTier) -> List[str]:
        tier = FitnessTier.parse(tier)
        if is_polarized_week(phase, tier):
            return list(POLARIZED_BUILD_SEQUENCE)
        sequence = list(PHASE_SEQUENCES[phase.focus])
        if tier in HIGH_INTENSITY_TIERS:
            sequence = [HIGH_INTENSITY_SUBSTITUTIONS.get(key, key) for key in sequence]
        return sequence

    def synthesize_week(
        self,
        phase: MesocyclePhase,
        zone_model: ZoneModel,
        tier: FitnessTier,
        available_days: Sequence[str],
        start_date: date,
        sport: Sport = Sport.RUNNING,
        equipment: Optional[Equipment] = None,
        heart_rate_model: Optional[ZoneModel] = None,
        long_day: Optional[str] = None,
    ) -> List[PlannedWorkout]:
        """
        Args:
            phase: The week to fill
            zone_model: Primary zones (pace for running, power for cycling)
            tier: Athlete tier (template substitution, polarized weeks)
            available_days: Weekday names the athlete can train on
            start_date: Plan start; week N starts (N-1) x 7 days later
            sport: Selects sport-specific names
            equipment: Cycling equipment; HR-only setups get HR targets
            heart_rate_model: HR zones used when equipment has no power
            long_day: Weekday for the long session; ignored unless it is
                one of available_days

        Returns:
            At most len(available_days) workouts, in date order
        """
        tier = FitnessTier.parse(tier)
        days = normalize_weekdays(available_days)
        days.sort(key=lambda d: day_offset(start_date, d))

        sequence = self.template_sequence(phase, tier)
        if len(sequence) > len(days):
            logger.info(
                f"Week {phase.week_number}: {len(sequence)} sessions scheduled, "
                f"{len(days)} days available; truncating"
            )
        schedule = self.schedule(sequence, days, long_day)

        zones = self._target_zones(zone_model, sport, equipment, heart_rate_model)
        week_start = start_date + timedelta(days=(phase.week_number - 1) * 7)

        workouts = [
            self._build_workout(
                get_template(key),
                phase.week_number,
                week_start + timedelta(days=day_offset(start_date, day)),
                zones,
                sport,
            )
            for key, day in schedule
        ]
        workouts.sort(key=lambda w: w.date)
        return workouts

    @staticmethod
    def schedule(
        sequence: Sequence[str],
        days: Sequence[str],
        long_day: Optional[str] = None,
    ) -> List[Tuple[str, str]]:
        """
        Pair templates with weekdays (days already in calendar order).

        At most one template per day. The long session is kept when the
        week is truncated; with a long day it goes there and the remaining
        templates fill the other days in order.
        """
        sequence = list(sequence)
        if LONG_TEMPLATE not in sequence or not days:
            return list(zip(sequence, days))

        if long_day is not None:
            long_day = long_day.strip().lower()
            if long_day not in days:
                logger.warning(f"Long-session day {long_day!r} is not a training day; ignored")
                long_day = None

        others = [key for key in sequence if key != LONG_TEMPLATE]
        if long_day is not None:
            other_days = [d for d in days if d != long_day]
            return [(LONG_TEMPLATE, long_day)] + list(zip(others, other_days))

        if len(sequence) <= len(days):
            return list(zip(sequence, days))
        kept = others[:len(days) - 1] + [LONG_TEMPLATE]
        return list(zip(kept, days))

    def _target_zones(
        self,
        zone_model: ZoneModel,
        sport: Sport,
        equipment: Optional[Equipment],
        heart_rate_model: Optional[ZoneModel],
    ) -> ZoneModel:
        if (
            sport == Sport.CYCLING
            and equipment in (Equipment.HEART_RATE_ONLY, Equipment.NONE)
            and zone_model.kind == ZoneKind.POWER
        ):
            return heart_rate_model or heart_rate_zones(None)
        return zone_model

    def _build_workout(
        self,
        template: WorkoutTemplate,
        week_number: int,
        workout_date: date,
        zones: ZoneModel,
        sport: Sport,
    ) -> PlannedWorkout:
        steady = long_session_minutes(week_number) if template.key == LONG_TEMPLATE else None
        segments = template.segments(week_number, steady_minutes=steady)
        duration = total_duration(segments)
        stress = template.stress_per_hour / 60 * duration

        return PlannedWorkout(
            week_number=week_number,
            date=workout_date,
            workout_type=template.key,
            title=template.name_for(sport),
            description=self._describe(template, segments, zones, stress),
            duration_minutes=duration,
            target_zone=template.zone,
            target=zones.describe(template.zone),
            computed_stress=round(stress, 1),
            segments=segments,
        )

    @staticmethod
    def _describe(
        template: WorkoutTemplate,
        segments: List[Segment],
        zones: ZoneModel,
        stress: float,
    ) -> str:
        lines = [template.description, ""]
        for segment in segments:
            target = f"{segment.zone} ({zones.describe(segment.zone)})"
            if segment.kind == SegmentKind.INTERVAL:
                lines.append(
                    f"{segment.repeat} x {segment.duration_minutes:g} min @ {target}, "
                    f"{segment.rest_minutes:g} min easy between"
                )
            else:
                lines.append(
                    f"{segment.kind.value.capitalize()}: "
                    f"{segment.duration_minutes:g} min @ {target}"
                )
        lines.append("")
        lines.append(f"Estimated stress: {round(stress)}")
        return "\n".join(lines)
