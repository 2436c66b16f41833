"""
Target Time

Race-goal target time, first available of:
1. the athlete's explicit goal time
2. the athlete's adjusted estimate for the race distance
3. the historical estimate, discounted by the improvement factor

Only the historical estimate is discounted. The improvement factor is the
tier ceiling (15/8/5/3 %) scaled linearly by min(weeks / 16, 1).

Usage:
    target = derive_target_time(
        goal="5k", tier=FitnessTier.BEGINNER, weeks=12,
        historical_estimates={"5k": 1800},
    )
    target.seconds  # 1597.5
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .constants import (
    AMBITIOUS_IMPROVEMENT_PCT,
    FitnessTier,
    IMPROVEMENT_CEILING,
    IMPROVEMENT_FULL_EFFECT_WEEKS,
    MAX_IMPROVEMENT_PCT,
    RACE_GOALS,
    WORLD_RECORD_GUARD_MINUTES,
)
from .fallback import Provider, first_available
from .formatting import format_duration, parse_duration_minutes

logger = logging.getLogger(__name__)

SOURCE_GOAL_TIME = "goal_time"
SOURCE_ADJUSTED = "adjusted"
SOURCE_HISTORICAL = "historical"


@dataclass(frozen=True)
class TargetTime:
    seconds: float
    source: str

    @property
    def formatted(self) -> str:
        return format_duration(self.seconds)


def improvement_factor(tier: FitnessTier, weeks: int) -> float:
    tier = FitnessTier.parse(tier)
    return IMPROVEMENT_CEILING[tier] * min(weeks / IMPROVEMENT_FULL_EFFECT_WEEKS, 1.0)


def _parse_seconds(text: Optional[str]) -> Optional[float]:
    minutes = parse_duration_minutes(text)
    if minutes is None or minutes <= 0:
        return None
    return minutes * 60


def derive_target_time(
    goal: str,
    tier: FitnessTier,
    weeks: int,
    goal_time: Optional[str] = None,
    adjusted_times: Optional[Dict[str, str]] = None,
    historical_estimates: Optional[Dict[str, int]] = None,
) -> Optional[TargetTime]:
    """
    Returns None for non-race goals or when no source has a value.
    """
    if goal not in RACE_GOALS:
        return None

    adjusted_times = adjusted_times or {}
    historical_estimates = historical_estimates or {}

    def historical() -> Optional[float]:
        estimate = historical_estimates.get(goal)
        if not estimate:
            return None
        return estimate * (1 - improvement_factor(tier, weeks))

    resolved = first_available([
        Provider(SOURCE_GOAL_TIME, lambda: _parse_seconds(goal_time)),
        Provider(SOURCE_ADJUSTED, lambda: _parse_seconds(adjusted_times.get(goal))),
        Provider(SOURCE_HISTORICAL, historical),
    ])
    if resolved is None:
        logger.info(f"No target time source for goal {goal}")
        return None
    return TargetTime(seconds=round(resolved.value, 1), source=resolved.source)


# =============================================================================
# GOAL-TIME FEASIBILITY
# =============================================================================

@dataclass(frozen=True)
class GoalTimeAssessment:
    feasible: bool
    level: str  # invalid | world_record | unrealistic | ambitious | moderate | conservative
    message: str
    improvement_pct: Optional[float] = None


def validate_goal_time(
    goal: str,
    goal_time: Optional[str],
    historical_seconds: Optional[float] = None,
) -> GoalTimeAssessment:
    """
    Check an explicit goal time against the world-record guard for its
    distance and against the athlete's historical estimate.
    """
    seconds = _parse_seconds(goal_time)
    if seconds is None:
        return GoalTimeAssessment(False, "invalid", "Enter the time as MM:SS or H:MM:SS")

    guard = WORLD_RECORD_GUARD_MINUTES.get(goal)
    if guard is not None and seconds < guard * 60:
        return GoalTimeAssessment(
            False, "world_record",
            f"Goal time is faster than {format_duration(guard * 60)}, beyond world-record pace",
        )

    if not historical_seconds:
        return GoalTimeAssessment(True, "moderate", "No history to compare against")

    pct = round((historical_seconds - seconds) / historical_seconds * 100, 1)
    if pct > MAX_IMPROVEMENT_PCT:
        return GoalTimeAssessment(
            False, "unrealistic",
            f"Goal needs {pct}% improvement; the maximum is {MAX_IMPROVEMENT_PCT}%",
            improvement_pct=pct,
        )
    if pct >= AMBITIOUS_IMPROVEMENT_PCT:
        return GoalTimeAssessment(True, "ambitious", f"Ambitious: {pct}% improvement", pct)
    if pct < 0:
        return GoalTimeAssessment(
            True, "conservative", "Goal is slower than your current estimate", pct
        )
    return GoalTimeAssessment(True, "moderate", f"Achievable: {pct}% improvement", pct)
