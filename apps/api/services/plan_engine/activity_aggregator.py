"""
Activity Aggregator

Turns a window of raw historical activities into a clean, uniform sample
set plus the two summaries the profiler needs:

- the sustained-effort anchor pace (best pace from the highest-confidence
  distance/time tier that has data)
- weekly volume for the most recent populated ISO weeks

Pure transformation. Empty or fully implausible history yields an empty
AggregatedHistory, never an exception.

Usage:
    history = aggregate_activities(samples, as_of=date(2024, 1, 1))
    history.sustained_best_pace   # min/km or None
    history.recent_weeks          # most recent first, at most 8
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .constants import (
    ACTIVITY_KIND_MARKERS,
    ActivityKindFilter,
    DEFAULT_LOOKBACK_DAYS,
    MAX_RUNNING_PACE,
    MIN_RUNNING_PACE,
    SUSTAINED_EFFORT_TIERS,
    WEEKLY_WINDOW_WEEKS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivitySample:
    """One historical activity. Immutable; the engine never rewrites history."""
    date: date
    distance_meters: float
    duration_minutes: float
    pace_min_per_km: Optional[float] = None
    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    activity_kind: str = "run"

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ActivitySample":
        """
        Build a sample from a provider row.

        Accepts both the engine's field names and the activity-feed names
        (activity_date, total_distance_meters, total_time_minutes,
        average_heart_rate, activity_type).
        """
        raw_date = record.get("date") or record.get("activity_date")
        if isinstance(raw_date, datetime):
            raw_date = raw_date.date()
        elif isinstance(raw_date, str):
            raw_date = date.fromisoformat(raw_date[:10])

        return cls(
            date=raw_date,
            distance_meters=_to_float(
                record.get("distance_meters", record.get("total_distance_meters"))
            ) or 0.0,
            duration_minutes=_to_float(
                record.get("duration_minutes", record.get("total_time_minutes"))
            ) or 0.0,
            pace_min_per_km=_to_float(record.get("pace_min_per_km")),
            avg_heart_rate=_to_int(
                record.get("avg_heart_rate", record.get("average_heart_rate"))
            ),
            max_heart_rate=_to_int(record.get("max_heart_rate")),
            activity_kind=str(
                record.get("activity_kind") or record.get("activity_type") or ""
            ),
        )

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0


@dataclass(frozen=True)
class WeeklyVolume:
    """Sessions and distance inside one ISO calendar week."""
    iso_year: int
    iso_week: int
    sessions: int
    distance_meters: float

    @property
    def key(self) -> str:
        return f"{self.iso_year}-W{self.iso_week:02d}"


@dataclass
class AggregatedHistory:
    """Cleaned samples plus the summaries derived from them."""
    samples: List[ActivitySample] = field(default_factory=list)
    sustained_best_pace: Optional[float] = None
    # Index into SUSTAINED_EFFORT_TIERS that produced the anchor (0 = best)
    anchor_tier: Optional[int] = None
    recent_weeks: List[WeeklyVolume] = field(default_factory=list)
    discarded: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.samples


def _to_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        result = float(value)
    except (TypeError, ValueError):
        return None
    if result != result:  # NaN
        return None
    return result


def _to_int(value: Any) -> Optional[int]:
    result = _to_float(value)
    if result is None or result <= 0:
        return None
    return int(round(result))


def matches_kind(activity_kind: str, kind_filter: ActivityKindFilter) -> bool:
    """Case-insensitive substring match against the filter's markers."""
    kind = (activity_kind or "").lower()
    return any(marker in kind for marker in ACTIVITY_KIND_MARKERS[kind_filter])


def is_plausible_running_pace(pace: Optional[float]) -> bool:
    return pace is not None and MIN_RUNNING_PACE <= pace <= MAX_RUNNING_PACE


def _normalize(
    sample: ActivitySample,
    kind_filter: ActivityKindFilter,
) -> Optional[ActivitySample]:
    """Return a cleaned copy of the sample, or None when it must be discarded."""
    if sample.distance_meters is None or sample.distance_meters <= 0:
        return None
    if sample.duration_minutes is None or sample.duration_minutes <= 0:
        return None

    pace = sample.pace_min_per_km
    if pace is None or pace <= 0:
        pace = sample.duration_minutes / (sample.distance_meters / 1000.0)

    if kind_filter == ActivityKindFilter.RUNNING and not is_plausible_running_pace(pace):
        return None

    return ActivitySample(
        date=sample.date,
        distance_meters=float(sample.distance_meters),
        duration_minutes=float(sample.duration_minutes),
        pace_min_per_km=round(pace, 4),
        avg_heart_rate=sample.avg_heart_rate if sample.avg_heart_rate and sample.avg_heart_rate > 0 else None,
        max_heart_rate=sample.max_heart_rate if sample.max_heart_rate and sample.max_heart_rate > 0 else None,
        activity_kind=sample.activity_kind,
    )


def select_sustained_pace(
    samples: Iterable[ActivitySample],
) -> Tuple[Optional[float], Optional[int]]:
    """
    Best (lowest) pace from the highest-confidence effort tier with data.

    Returns (pace, tier_index) or (None, None).
    """
    samples = list(samples)
    for index, (min_distance, min_minutes) in enumerate(SUSTAINED_EFFORT_TIERS):
        candidates = [
            s.pace_min_per_km
            for s in samples
            if s.distance_meters >= min_distance
            and s.duration_minutes >= min_minutes
            and s.pace_min_per_km is not None
        ]
        if candidates:
            return min(candidates), index
    return None, None


def group_by_iso_week(
    samples: Iterable[ActivitySample],
    max_weeks: int = WEEKLY_WINDOW_WEEKS,
) -> List[WeeklyVolume]:
    """Group samples into ISO weeks; keep the most recent populated weeks."""
    buckets: Dict[Tuple[int, int], List[float]] = {}
    for sample in samples:
        iso = sample.date.isocalendar()
        key = (iso[0], iso[1])
        buckets.setdefault(key, []).append(sample.distance_meters)

    weeks = [
        WeeklyVolume(
            iso_year=year,
            iso_week=week,
            sessions=len(distances),
            distance_meters=sum(distances),
        )
        for (year, week), distances in buckets.items()
    ]
    weeks.sort(key=lambda w: (w.iso_year, w.iso_week), reverse=True)
    return weeks[:max_weeks]


def aggregate_activities(
    activities: Iterable[ActivitySample],
    kind_filter: ActivityKindFilter = ActivityKindFilter.RUNNING,
    as_of: Optional[date] = None,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> AggregatedHistory:
    """
    Filter and normalize raw activities into an AggregatedHistory.

    Args:
        activities: Raw samples from the history provider
        kind_filter: Which activity kinds to keep
        as_of: Reference date for the lookback window (defaults to today)
        lookback_days: Window length in days

    Returns:
        AggregatedHistory (empty when nothing qualifies)
    """
    as_of = as_of or date.today()
    since = as_of - timedelta(days=lookback_days)

    kept: List[ActivitySample] = []
    discarded = 0
    for sample in activities:
        if sample.date is None or not (since <= sample.date <= as_of):
            continue
        if not matches_kind(sample.activity_kind, kind_filter):
            continue
        cleaned = _normalize(sample, kind_filter)
        if cleaned is None:
            discarded += 1
            continue
        kept.append(cleaned)

    # Most recent first, stable for equal dates
    kept.sort(key=lambda s: s.date, reverse=True)

    if discarded:
        logger.debug(f"Discarded {discarded} implausible activities")

    if not kept:
        return AggregatedHistory(discarded=discarded)

    pace, tier_index = select_sustained_pace(kept)

    return AggregatedHistory(
        samples=kept,
        sustained_best_pace=pace,
        anchor_tier=tier_index,
        recent_weeks=group_by_iso_week(kept),
        discarded=discarded,
    )
