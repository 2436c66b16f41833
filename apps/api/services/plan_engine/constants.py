"""
Constants for the adaptive plan engine.

These are DEFAULTS. Multipliers are tunable; the structural invariants
(12-week macro-cycle, zone ordering, tier ordering) are not.
"""

from enum import Enum
from typing import Dict, List, Tuple


class FitnessTier(str, Enum):
    """Athlete fitness tier, ordered Beginner < Intermediate < Advanced < Elite."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    ELITE = "Elite"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)

    @classmethod
    def parse(cls, value) -> "FitnessTier":
        """Accept enum members and case-insensitive names ("advanced", "ELITE")."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for tier in cls:
            if tier.value.lower() == text:
                return tier
        raise ValueError(f"Unknown fitness tier: {value!r}")


TIER_ORDER: List[FitnessTier] = [
    FitnessTier.BEGINNER,
    FitnessTier.INTERMEDIATE,
    FitnessTier.ADVANCED,
    FitnessTier.ELITE,
]


class PhaseFocus(str, Enum):
    """Mesocycle focus."""
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    TAPER = "taper"
    RECOVERY = "recovery"


class Sport(str, Enum):
    RUNNING = "running"
    CYCLING = "cycling"


class ZoneKind(str, Enum):
    PACE = "pace"
    POWER = "power"
    HEART_RATE = "heart_rate"


class Equipment(str, Enum):
    """What the athlete can measure with. Drives which target is rendered."""
    POWER_METER = "power_meter"
    SMART_TRAINER = "smart_trainer"
    HEART_RATE_ONLY = "heart_rate_only"
    NONE = "none"


class PlanStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ActivityKindFilter(str, Enum):
    """Which raw activity kinds feed the profile."""
    RUNNING = "running"
    CYCLING = "cycling"


# Substrings matched (case-insensitive) against the raw activity kind
ACTIVITY_KIND_MARKERS: Dict[ActivityKindFilter, Tuple[str, ...]] = {
    ActivityKindFilter.RUNNING: ("run",),
    ActivityKindFilter.CYCLING: ("ride", "cycl", "bike"),
}


# ========== Activity aggregation ==========

DEFAULT_LOOKBACK_DAYS = 180

# Plausible running pace window, min/km
MIN_RUNNING_PACE = 2.5
MAX_RUNNING_PACE = 12.0

# Sustained-effort tiers, highest confidence first: (min distance m, min minutes)
SUSTAINED_EFFORT_TIERS: List[Tuple[int, int]] = [
    (5000, 10),
    (3000, 8),
    (1500, 8),
]

WEEKLY_WINDOW_WEEKS = 8

# Minimum distance for the longest-effort fallback anchor (meters)
FALLBACK_ANCHOR_MIN_DISTANCE_M = 4000


# ========== Performance profile ==========

RIEGEL_EXPONENT = 1.06
BASE_DISTANCE_KM = 5.0

RACE_DISTANCES_KM: Dict[str, float] = {
    "5k": 5.0,
    "10k": 10.0,
    "half_marathon": 21.097,
    "marathon": 42.195,
}

# Tier decision tree thresholds (any one is sufficient)
ELITE_WEEKLY_KM = 70
ELITE_FIVE_K_SECONDS = 18 * 60
ADVANCED_WEEKLY_KM = 40
ADVANCED_WEEKLY_FREQUENCY = 4
ADVANCED_FIVE_K_SECONDS = 22 * 60
INTERMEDIATE_WEEKLY_KM = 15
INTERMEDIATE_WEEKLY_FREQUENCY = 3

# Tanaka: 208 - 0.7 * age
TANAKA_INTERCEPT = 208
TANAKA_SLOPE = 0.7


# ========== Zones ==========

# Pace zones as multipliers of the anchor pace (5K-equivalent pace).
# Larger multiplier = slower. Bands touch but do not overlap.
PACE_ZONE_MULTIPLIERS: List[Tuple[str, str, float, float]] = [
    ("Z1", "Recovery", 1.50, 1.35),
    ("Z2", "Endurance", 1.35, 1.20),
    ("Z3", "Tempo", 1.20, 1.10),
    ("Z4", "Threshold", 1.10, 1.03),
    ("Z5", "VO2max", 1.03, 0.97),
    ("Z6", "Anaerobic", 0.97, 0.85),
]

# Power zones as fractions of FTP
POWER_ZONE_MULTIPLIERS: List[Tuple[str, str, float, float]] = [
    ("Z1", "Active Recovery", 0.00, 0.55),
    ("Z2", "Endurance", 0.56, 0.75),
    ("Z3", "Tempo", 0.76, 0.90),
    ("Z4", "Threshold", 0.91, 1.05),
    ("Z5", "VO2max", 1.06, 1.20),
    ("Z6", "Anaerobic", 1.21, 1.50),
]

# Heart-rate zones as fractions of max HR
HEART_RATE_ZONE_MULTIPLIERS: List[Tuple[str, str, float, float]] = [
    ("Z1", "Recovery", 0.50, 0.60),
    ("Z2", "Endurance", 0.60, 0.70),
    ("Z3", "Tempo", 0.70, 0.80),
    ("Z4", "Threshold", 0.80, 0.90),
    ("Z5", "VO2max", 0.90, 1.00),
]

# Tier-default 5K-equivalent pace (min/km) when history gives no anchor
DEFAULT_ANCHOR_PACE: Dict[FitnessTier, float] = {
    FitnessTier.BEGINNER: 7.0,
    FitnessTier.INTERMEDIATE: 6.0,
    FitnessTier.ADVANCED: 5.0,
    FitnessTier.ELITE: 4.0,
}

# FTP estimation from body weight
FTP_WATTS_PER_KG: Dict[FitnessTier, float] = {
    FitnessTier.BEGINNER: 2.0,
    FitnessTier.INTERMEDIATE: 2.8,
    FitnessTier.ADVANCED: 3.5,
    FitnessTier.ELITE: 4.2,
}
DEFAULT_WEIGHT_KG = 75.0

DEFAULT_MAX_HEART_RATE = 185


# ========== Periodization ==========

MACRO_CYCLE_WEEKS = 12
MIN_PLAN_WEEKS = 4
MAX_PLAN_WEEKS = 52

# Week within the macro-cycle (1..12) -> focus
MACRO_CYCLE: List[PhaseFocus] = [
    PhaseFocus.BASE, PhaseFocus.BASE, PhaseFocus.BASE,
    PhaseFocus.RECOVERY,
    PhaseFocus.BUILD, PhaseFocus.BUILD, PhaseFocus.BUILD,
    PhaseFocus.RECOVERY,
    PhaseFocus.PEAK, PhaseFocus.PEAK, PhaseFocus.PEAK,
    PhaseFocus.TAPER,
]

# Weekly training-stress base by tier
BASE_WEEKLY_STRESS: Dict[FitnessTier, int] = {
    FitnessTier.BEGINNER: 200,
    FitnessTier.INTERMEDIATE: 350,
    FitnessTier.ADVANCED: 500,
    FitnessTier.ELITE: 650,
}

STRESS_BASE_STEP = 0.04       # linear per base week, centred on week 2
STRESS_BUILD_GROWTH = 0.08    # compounding per build week
STRESS_PEAK_GROWTH = 0.02     # compounding per peak week
STRESS_RECOVERY_FACTOR = 0.6
STRESS_TAPER_FACTOR = 0.5


# ========== Workout synthesis ==========

LONG_SESSION_START_MINUTES = 90
LONG_SESSION_STEP_MINUTES = 10
LONG_SESSION_CEILING_MINUTES = 210

WEEKDAYS: List[str] = [
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
]


# ========== Goals ==========

RACE_GOALS = ("5k", "10k", "half_marathon", "marathon")
RUNNING_EVENT_GOALS = ("improve_times",)
CYCLING_EVENT_GOALS = ("cycling_gran_fondo", "cycling_triathlon")

GOAL_LABELS: Dict[str, str] = {
    "general_fitness": "General Fitness",
    "weight_loss": "Weight Loss",
    "5k": "First 5K",
    "10k": "10K Race",
    "half_marathon": "Half Marathon",
    "marathon": "Marathon",
    "improve_times": "Improve Current Times",
    "return_running": "Return to Running",
    "maintenance": "Maintenance",
    "cycling_general_fitness": "Cycling General Fitness",
    "cycling_weight_loss": "Cycling Weight Loss",
    "cycling_gran_fondo": "Gran Fondo / 100km",
    "cycling_improve_power": "Improve Power and Average Speed",
    "cycling_return": "Return to Cycling",
    "cycling_triathlon": "Triathlon / Duathlon",
    "cycling_maintenance": "Cycling Maintenance",
}

# Target-time improvement ceiling by tier; scaled by min(weeks / 16, 1)
IMPROVEMENT_CEILING: Dict[FitnessTier, float] = {
    FitnessTier.BEGINNER: 0.15,
    FitnessTier.INTERMEDIATE: 0.08,
    FitnessTier.ADVANCED: 0.05,
    FitnessTier.ELITE: 0.03,
}
IMPROVEMENT_FULL_EFFECT_WEEKS = 16

# Goal-time feasibility: world-record guard in minutes, by race goal
WORLD_RECORD_GUARD_MINUTES: Dict[str, float] = {
    "5k": 13,
    "10k": 27,
    "half_marathon": 58,
    "marathon": 122,
}
AMBITIOUS_IMPROVEMENT_PCT = 12
MAX_IMPROVEMENT_PCT = 20

HEALTH_QUESTIONS: List[str] = [
    "question_1_heart_problem",
    "question_2_chest_pain_during_activity",
    "question_3_chest_pain_last_3months",
    "question_4_balance_consciousness_loss",
    "question_5_bone_joint_problem",
    "question_6_taking_medication",
    "question_7_other_impediment",
]
