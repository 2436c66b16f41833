"""
Workout Library

Named workout templates. Each template knows its structure (warmup /
steady or interval block / cooldown), its main zone and its stress rate
(training stress per hour). Interval templates carry a small set of
shapes and rotate through them by week number so two consecutive weeks
never prescribe the identical session.

Usage:
    template = get_template("sweet_spot")
    segments = template.segments(week_number=3)
    minutes = total_duration(segments)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .constants import Sport


class SegmentKind(str, Enum):
    WARMUP = "warmup"
    STEADY = "steady"
    INTERVAL = "interval"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    duration_minutes: float
    zone: str
    repeat: int = 1
    rest_minutes: float = 0

    @property
    def total_minutes(self) -> float:
        """Intervals count the rests between reps, not after the last one."""
        if self.kind == SegmentKind.INTERVAL:
            return self.duration_minutes * self.repeat + self.rest_minutes * (self.repeat - 1)
        return self.duration_minutes

    def to_dict(self) -> Dict:
        data = {
            "kind": self.kind.value,
            "duration_minutes": self.duration_minutes,
            "zone": self.zone,
        }
        if self.kind == SegmentKind.INTERVAL:
            data["repeat"] = self.repeat
            data["rest_minutes"] = self.rest_minutes
        return data


@dataclass(frozen=True)
class IntervalShape:
    """repeat x duration with rest between reps."""
    repeat: int
    duration_minutes: float
    rest_minutes: float


@dataclass(frozen=True)
class WorkoutTemplate:
    key: str
    names: Tuple[str, str]  # (running, cycling)
    description: str
    zone: str
    stress_per_hour: float
    low_intensity: bool = False
    warmup_minutes: float = 0
    cooldown_minutes: float = 0
    steady_minutes: float = 0
    shapes: Tuple[IntervalShape, ...] = field(default_factory=tuple)

    def name_for(self, sport: Sport) -> str:
        return self.names[1] if sport == Sport.CYCLING else self.names[0]

    def shape_for_week(self, week_number: int) -> Optional[IntervalShape]:
        if not self.shapes:
            return None
        return self.shapes[week_number % len(self.shapes)]

    def segments(
        self,
        week_number: int,
        steady_minutes: Optional[float] = None,
    ) -> List[Segment]:
        """
        Concrete structure for a week.

        Args:
            week_number: Picks the interval shape
            steady_minutes: Overrides the steady block (long sessions)
        """
        result = []
        if self.warmup_minutes:
            result.append(Segment(SegmentKind.WARMUP, self.warmup_minutes, "Z1"))

        shape = self.shape_for_week(week_number)
        if shape is not None:
            result.append(Segment(
                SegmentKind.INTERVAL,
                shape.duration_minutes,
                self.zone,
                repeat=shape.repeat,
                rest_minutes=shape.rest_minutes,
            ))
        else:
            minutes = steady_minutes if steady_minutes is not None else self.steady_minutes
            result.append(Segment(SegmentKind.STEADY, minutes, self.zone))

        if self.cooldown_minutes:
            result.append(Segment(SegmentKind.COOLDOWN, self.cooldown_minutes, "Z1"))
        return result


def total_duration(segments: List[Segment]) -> float:
    return sum(s.total_minutes for s in segments)


# =============================================================================
# TEMPLATES
# =============================================================================

RECOVERY = WorkoutTemplate(
    key="recovery",
    names=("Recovery Run", "Recovery Spin"),
    description="Easy recovery session in Zone 1",
    zone="Z1",
    stress_per_hour=30,
    low_intensity=True,
    steady_minutes=45,
)

ENDURANCE = WorkoutTemplate(
    key="endurance",
    names=("Endurance Run", "Endurance Ride"),
    description="Base aerobic session in Zone 2",
    zone="Z2",
    stress_per_hour=60,
    low_intensity=True,
    warmup_minutes=10,
    cooldown_minutes=10,
    steady_minutes=60,
)

SWEET_SPOT = WorkoutTemplate(
    key="sweet_spot",
    names=("Sweet Spot Intervals", "Sweet Spot Intervals"),
    description="Sustained intervals at the top of Zone 3",
    zone="Z3",
    stress_per_hour=85,
    warmup_minutes=15,
    cooldown_minutes=10,
    shapes=(
        IntervalShape(3, 15, 5),
        IntervalShape(2, 20, 5),
        IntervalShape(4, 12, 4),
    ),
)

THRESHOLD = WorkoutTemplate(
    key="threshold",
    names=("Threshold Intervals", "Threshold Intervals"),
    description="Intervals at threshold in Zone 4",
    zone="Z4",
    stress_per_hour=95,
    warmup_minutes=15,
    cooldown_minutes=10,
    shapes=(
        IntervalShape(3, 10, 5),
        IntervalShape(2, 15, 5),
        IntervalShape(4, 8, 4),
    ),
)

VO2MAX = WorkoutTemplate(
    key="vo2max",
    names=("VO2max Intervals", "VO2max Intervals"),
    description="High intensity intervals in Zone 5",
    zone="Z5",
    stress_per_hour=85,
    warmup_minutes=20,
    cooldown_minutes=15,
    shapes=(
        IntervalShape(6, 3, 3),
        IntervalShape(5, 4, 4),
        IntervalShape(8, 2, 2),
    ),
)

OVER_UNDER = WorkoutTemplate(
    key="over_under",
    names=("Over-Under Intervals", "Over-Under Intervals"),
    description="Alternating just above and below threshold",
    zone="Z4",
    stress_per_hour=100,
    warmup_minutes=15,
    cooldown_minutes=10,
    shapes=(IntervalShape(4, 9, 5),),
)

SPRINT = WorkoutTemplate(
    key="sprint",
    names=("Sprints", "Sprint Intervals"),
    description="Short maximal efforts with full recovery",
    zone="Z6",
    stress_per_hour=75,
    warmup_minutes=15,
    cooldown_minutes=10,
    shapes=(IntervalShape(8, 1, 4),),
)

HIGH_CADENCE = WorkoutTemplate(
    key="high_cadence",
    names=("Cadence Drills", "High Cadence Drills"),
    description="Fast turnover at easy effort",
    zone="Z2",
    stress_per_hour=55,
    low_intensity=True,
    warmup_minutes=10,
    cooldown_minutes=10,
    shapes=(IntervalShape(5, 5, 2),),
)

LOW_CADENCE_STRENGTH = WorkoutTemplate(
    key="low_cadence_strength",
    names=("Hill Strength", "Low Cadence Strength"),
    description="Force work at tempo effort",
    zone="Z3",
    stress_per_hour=70,
    warmup_minutes=10,
    cooldown_minutes=10,
    shapes=(IntervalShape(4, 8, 4),),
)

LONG = WorkoutTemplate(
    key="long",
    names=("Long Run", "Long Ride"),
    description="Progressive long session in Zone 2",
    zone="Z2",
    stress_per_hour=55,
    low_intensity=True,
    steady_minutes=90,
)

EVENT_SIMULATION = WorkoutTemplate(
    key="event_simulation",
    names=("Race Simulation", "Event Simulation"),
    description="Sustained effort at target event intensity",
    zone="Z3",
    stress_per_hour=80,
    warmup_minutes=15,
    cooldown_minutes=10,
    steady_minutes=45,
)


TEMPLATES: Dict[str, WorkoutTemplate] = {
    t.key: t for t in (
        RECOVERY,
        ENDURANCE,
        SWEET_SPOT,
        THRESHOLD,
        VO2MAX,
        OVER_UNDER,
        SPRINT,
        HIGH_CADENCE,
        LOW_CADENCE_STRENGTH,
        LONG,
        EVENT_SIMULATION,
    )
}


def get_template(key: str) -> WorkoutTemplate:
    try:
        return TEMPLATES[key]
    except KeyError:
        raise KeyError(f"Unknown workout template: {key}") from None
