"""
Periodization Planner

Assigns one mesocycle phase per plan week using a fixed 12-week macro-cycle:

    weeks 1-3   base
    week  4     recovery
    weeks 5-7   build
    week  8     recovery
    weeks 9-11  peak
    week  12    taper

Longer plans repeat the cycle. Focus depends only on the week number;
target training stress scales with the athlete tier:

    base      grows linearly ~4%/week around the tier base
    build     compounds ~8%/week on top of the base ceiling
    peak      compounds ~2%/week on top of the build ceiling
    recovery  0.6 x tier base
    taper     0.5 x tier base

No randomness: the same (weeks, tier) always yields the same phases.

Usage:
    planner = PeriodizationPlanner()
    phases = planner.build_phases(weeks=12, tier=FitnessTier.BEGINNER)
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from .constants import (
    BASE_WEEKLY_STRESS,
    FitnessTier,
    MACRO_CYCLE,
    MACRO_CYCLE_WEEKS,
    MAX_PLAN_WEEKS,
    MIN_PLAN_WEEKS,
    PhaseFocus,
    STRESS_BASE_STEP,
    STRESS_BUILD_GROWTH,
    STRESS_PEAK_GROWTH,
    STRESS_RECOVERY_FACTOR,
    STRESS_TAPER_FACTOR,
)


@dataclass(frozen=True)
class MesocyclePhase:
    """One plan week."""
    week_number: int  # 1-indexed
    focus: PhaseFocus
    target_training_stress: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "focus": self.focus.value,
            "target_training_stress": self.target_training_stress,
        }


def focus_for_week(week_number: int) -> PhaseFocus:
    """Macro-cycle focus for a 1-indexed week."""
    return MACRO_CYCLE[(week_number - 1) % MACRO_CYCLE_WEEKS]


def position_in_block(week_number: int) -> int:
    """
    1-indexed position of a week inside its run of same-focus weeks
    within the macro-cycle (e.g. week 6 is build week 2).
    """
    index = (week_number - 1) % MACRO_CYCLE_WEEKS
    focus = MACRO_CYCLE[index]
    position = 1
    while index - position >= 0 and MACRO_CYCLE[index - position] == focus:
        position += 1
    return position


def weekly_stress(week_number: int, tier: FitnessTier) -> float:
    """Target training stress for a week, rounded to 0.1."""
    base = BASE_WEEKLY_STRESS[tier]
    focus = focus_for_week(week_number)
    k = position_in_block(week_number)

    base_ceiling = base * (1 + STRESS_BASE_STEP)
    build_ceiling = base_ceiling * (1 + STRESS_BUILD_GROWTH) ** 3

    if focus == PhaseFocus.BASE:
        stress = base * (1 + STRESS_BASE_STEP * (k - 2))
    elif focus == PhaseFocus.BUILD:
        stress = base_ceiling * (1 + STRESS_BUILD_GROWTH) ** k
    elif focus == PhaseFocus.PEAK:
        stress = build_ceiling * (1 + STRESS_PEAK_GROWTH) ** k
    elif focus == PhaseFocus.RECOVERY:
        stress = base * STRESS_RECOVERY_FACTOR
    else:
        stress = base * STRESS_TAPER_FACTOR
    return round(stress, 1)


class PeriodizationPlanner:
    """Build the weekly phase sequence for a plan."""

    def build_phases(self, weeks: int, tier: FitnessTier) -> List[MesocyclePhase]:
        """
        Args:
            weeks: Plan length, 4-52 inclusive
            tier: Athlete fitness tier (scales stress only)

        Returns:
            Exactly `weeks` phases, week_number 1..weeks

        Raises:
            ValueError: weeks outside 4-52
        """
        if not isinstance(weeks, int) or not MIN_PLAN_WEEKS <= weeks <= MAX_PLAN_WEEKS:
            raise ValueError(
                f"Plan duration must be between {MIN_PLAN_WEEKS} and "
                f"{MAX_PLAN_WEEKS} weeks, got {weeks!r}"
            )
        tier = FitnessTier.parse(tier)
        return [
            MesocyclePhase(
                week_number=week,
                focus=focus_for_week(week),
                target_training_stress=weekly_stress(week, tier),
            )
            for week in range(1, weeks + 1)
        ]
