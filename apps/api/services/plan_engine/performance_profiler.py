"""
Performance Profiler

Turns aggregated history into a PerformanceProfile:
- race-time estimates (Riegel power law from a 5K-equivalent anchor)
- weekly load statistics
- fitness tier (remote service first, local decision tree as fallback)
- suggested max heart rate (Tanaka, floored at the observed peak)

No data is not an error: estimates come back empty and the tier falls
through to Beginner-level thresholds.

Race-time estimates and pace only describe running. Cycling profiles carry
no pace, no estimates, and are tiered on weekly frequency alone.

Usage:
    profiler = PerformanceProfiler(TierResolver(remote))
    profile = profiler.build_profile(history, biometrics, athlete_id=athlete_id)

    service = AthleteAnalysisService(history_provider, profile_store, profiler)
    profile = service.analyze(athlete_id)
"""

import logging
import statistics
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from .activity_aggregator import AggregatedHistory, aggregate_activities
from .boundaries import Biometrics, HistoryProvider, ProfileStore
from .cache import ProfileCacheService
from .constants import (
    ActivityKindFilter,
    BASE_DISTANCE_KM,
    DEFAULT_LOOKBACK_DAYS,
    FALLBACK_ANCHOR_MIN_DISTANCE_M,
    FitnessTier,
    RACE_DISTANCES_KM,
    RIEGEL_EXPONENT,
    TANAKA_INTERCEPT,
    TANAKA_SLOPE,
)
from .formatting import format_duration
from .tier_classifier import TierResolver

logger = logging.getLogger(__name__)


@dataclass
class PerformanceProfile:
    """Derived athlete profile. Recomputed per request; only ever cached."""
    sustained_best_pace: Optional[float] = None
    best_pace: Optional[float] = None
    average_pace: Optional[float] = None
    avg_heart_rate: Optional[int] = None
    observed_max_heart_rate: Optional[int] = None
    weekly_frequency: float = 0.0
    weekly_distance_km: float = 0.0
    recent_weeks_sampled: int = 0
    race_time_estimates: Dict[str, int] = field(default_factory=dict)
    fitness_tier: FitnessTier = FitnessTier.BEGINNER
    tier_source: str = "local"
    suggested_max_heart_rate: Optional[int] = None

    @property
    def five_k_seconds(self) -> Optional[int]:
        return self.race_time_estimates.get("5k")

    @property
    def has_pace_anchor(self) -> bool:
        return self.best_pace is not None or self.average_pace is not None

    def formatted_estimates(self) -> Dict[str, str]:
        return {k: format_duration(v) for k, v in self.race_time_estimates.items()}

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["fitness_tier"] = self.fitness_tier.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PerformanceProfile":
        values = dict(data)
        values["fitness_tier"] = FitnessTier.parse(values.get("fitness_tier", "Beginner"))
        values["race_time_estimates"] = {
            k: int(v) for k, v in (values.get("race_time_estimates") or {}).items()
        }
        known = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in values.items() if k in known})


# =============================================================================
# RACE-TIME EXTRAPOLATION
# =============================================================================

def riegel(
    base_seconds: float,
    base_km: float,
    target_km: float,
    exponent: float = RIEGEL_EXPONENT,
) -> float:
    """T2 = T1 * (D2 / D1) ** exponent"""
    return base_seconds * (target_km / base_km) ** exponent


def estimate_race_times(base_five_k_seconds: Optional[float]) -> Dict[str, int]:
    """
    Estimates for 5K, 10K, half and marathon from a 5K-equivalent time.

    Returns {} without an anchor; never a zero-filled estimate.
    """
    if not base_five_k_seconds or base_five_k_seconds <= 0:
        return {}
    return {
        name: int(round(riegel(base_five_k_seconds, BASE_DISTANCE_KM, km)))
        for name, km in RACE_DISTANCES_KM.items()
    }


def _median_of_fastest(paces: List[float], count: int = 3) -> Optional[float]:
    fastest = sorted(paces)[:count]
    if not fastest:
        return None
    return fastest[(len(fastest) - 1) // 2]


def base_five_k_seconds(
    best_pace: Optional[float],
    average_pace: Optional[float],
    history: AggregatedHistory,
) -> Optional[float]:
    """
    5K-equivalent anchor time.

    Priority: best pace x 5 km, average pace x 5 km, then the longest effort
    of at least 4 km scaled to 5 km with the same power law.
    """
    pace = best_pace if best_pace is not None else average_pace
    if pace and pace > 0:
        return pace * BASE_DISTANCE_KM * 60

    efforts = [
        s for s in history.samples
        if s.distance_meters >= FALLBACK_ANCHOR_MIN_DISTANCE_M and s.duration_minutes > 0
    ]
    if not efforts:
        return None
    longest = max(efforts, key=lambda s: (s.distance_meters, -s.duration_minutes))
    return riegel(longest.duration_minutes * 60, longest.distance_km, BASE_DISTANCE_KM)


# =============================================================================
# HEART RATE
# =============================================================================

def suggest_max_heart_rate(
    age: Optional[int],
    observed_max: Optional[int],
) -> Optional[int]:
    """
    Tanaka estimate (208 - 0.7 x age), never below the observed peak.

    Without an age only the observed peak is returned (or None).
    """
    estimate = round(TANAKA_INTERCEPT - TANAKA_SLOPE * age) if age is not None else None
    if observed_max:
        return max(estimate, observed_max) if estimate is not None else observed_max
    return estimate


# =============================================================================
# PROFILER
# =============================================================================

class PerformanceProfiler:
    """Build PerformanceProfiles from aggregated history."""

    def __init__(self, tier_resolver: Optional[TierResolver] = None):
        self.tier_resolver = tier_resolver or TierResolver()

    def build_profile(
        self,
        history: AggregatedHistory,
        biometrics: Optional[Biometrics] = None,
        athlete_id: Optional[UUID] = None,
        today: Optional[date] = None,
        kind_filter: ActivityKindFilter = ActivityKindFilter.RUNNING,
    ) -> PerformanceProfile:
        today = today or date.today()
        biometrics = biometrics or Biometrics()
        running = ActivityKindFilter(kind_filter) == ActivityKindFilter.RUNNING

        paces = [
            s.pace_min_per_km for s in history.samples
            if running and s.pace_min_per_km is not None
        ]
        average_pace = statistics.fmean(paces) if paces else None
        sustained = history.sustained_best_pace if running else None
        best_pace = sustained
        if best_pace is None:
            best_pace = _median_of_fastest(paces)

        hr_values = [s.avg_heart_rate for s in history.samples if s.avg_heart_rate]
        avg_hr = int(round(statistics.fmean(hr_values))) if hr_values else None
        max_values = [s.max_heart_rate for s in history.samples if s.max_heart_rate]
        observed_max = max(max_values) if max_values else None

        weeks = history.recent_weeks
        if weeks:
            weekly_frequency = round(sum(w.sessions for w in weeks) / len(weeks), 2)
            weekly_distance_km = round(
                sum(w.distance_meters for w in weeks) / len(weeks) / 1000, 1
            )
        else:
            weekly_frequency = 0.0
            weekly_distance_km = 0.0

        anchor = base_five_k_seconds(best_pace, average_pace, history) if running else None
        estimates = estimate_race_times(anchor)

        tier, source = self.tier_resolver.resolve(
            athlete_id,
            # distance thresholds are running kilometres
            weekly_distance_km=weekly_distance_km if running else None,
            weekly_frequency=weekly_frequency,
            five_k_seconds=anchor,
        )

        suggested = suggest_max_heart_rate(biometrics.age_on(today), observed_max)

        if history.is_empty:
            logger.info(f"No qualifying history for athlete {athlete_id}; profile is partial")

        return PerformanceProfile(
            sustained_best_pace=sustained,
            best_pace=best_pace,
            average_pace=round(average_pace, 4) if average_pace is not None else None,
            avg_heart_rate=avg_hr,
            observed_max_heart_rate=observed_max,
            weekly_frequency=weekly_frequency,
            weekly_distance_km=weekly_distance_km,
            recent_weeks_sampled=len(weeks),
            race_time_estimates=estimates,
            fitness_tier=tier,
            tier_source=source,
            suggested_max_heart_rate=suggested,
        )


class AthleteAnalysisService:
    """
    Fetch → aggregate → profile for one athlete, with an optional cache.
    """

    def __init__(
        self,
        history_provider: HistoryProvider,
        profile_store: ProfileStore,
        profiler: Optional[PerformanceProfiler] = None,
        cache: Optional[ProfileCacheService] = None,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        kind_filter: ActivityKindFilter = ActivityKindFilter.RUNNING,
    ):
        self.history_provider = history_provider
        self.profile_store = profile_store
        self.profiler = profiler or PerformanceProfiler()
        self.cache = cache
        self.lookback_days = lookback_days
        self.kind_filter = kind_filter

    def analyze(
        self,
        athlete_id: UUID,
        today: Optional[date] = None,
        use_cache: bool = True,
    ) -> PerformanceProfile:
        today = today or date.today()

        if self.cache and use_cache:
            cached = self.cache.get_profile(athlete_id, self.kind_filter.value, today)
            if cached is not None:
                return PerformanceProfile.from_dict(cached)

        since = today - timedelta(days=self.lookback_days)
        raw = self.history_provider.fetch_activities(athlete_id, since)
        history = aggregate_activities(
            raw,
            kind_filter=self.kind_filter,
            as_of=today,
            lookback_days=self.lookback_days,
        )
        biometrics = self.profile_store.get_biometrics(athlete_id)
        profile = self.profiler.build_profile(
            history, biometrics, athlete_id=athlete_id, today=today, kind_filter=self.kind_filter,
        )

        logger.info(
            f"Profiled athlete {athlete_id}: {len(history.samples)} samples, "
            f"tier={profile.fitness_tier.value} ({profile.tier_source})"
        )

        if self.cache:
            self.cache.set_profile(athlete_id, self.kind_filter.value, today, profile.to_dict())

        return profile
