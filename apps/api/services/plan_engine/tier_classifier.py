"""
Fitness Tier Classification

Local decision tree over weekly distance, weekly frequency and 5K-equivalent
time. Thresholds are disjunctive: meeting any one of a tier's thresholds is
enough to reach it.

A remote classification service takes precedence when it answers; the local
tree is the fallback, so callers always get a tier.

Usage:
    tier = classify(weekly_distance_km=42, weekly_frequency=3, five_k_seconds=1500)

    resolver = TierResolver(remote_service)
    tier, source = resolver.resolve(athlete_id, weekly_distance_km=..., ...)
"""

import logging
from typing import Optional, Tuple

from .boundaries import ClassificationService
from .constants import (
    ADVANCED_FIVE_K_SECONDS,
    ADVANCED_WEEKLY_FREQUENCY,
    ADVANCED_WEEKLY_KM,
    ELITE_FIVE_K_SECONDS,
    ELITE_WEEKLY_KM,
    FitnessTier,
    INTERMEDIATE_WEEKLY_FREQUENCY,
    INTERMEDIATE_WEEKLY_KM,
)
from .fallback import Provider, first_available

logger = logging.getLogger(__name__)

SOURCE_REMOTE = "remote"
SOURCE_LOCAL = "local"


def classify(
    weekly_distance_km: Optional[float],
    weekly_frequency: Optional[float],
    five_k_seconds: Optional[float],
) -> FitnessTier:
    """
    Deterministic tier decision tree.

    Missing inputs never qualify for a threshold.
    """
    distance = weekly_distance_km or 0
    frequency = weekly_frequency or 0
    five_k = five_k_seconds if five_k_seconds else float("inf")

    if distance >= ELITE_WEEKLY_KM or five_k < ELITE_FIVE_K_SECONDS:
        return FitnessTier.ELITE
    # Frequency alone can reach Advanced regardless of volume or pace.
    if (
        distance >= ADVANCED_WEEKLY_KM
        or frequency >= ADVANCED_WEEKLY_FREQUENCY
        or five_k < ADVANCED_FIVE_K_SECONDS
    ):
        return FitnessTier.ADVANCED
    if distance >= INTERMEDIATE_WEEKLY_KM or frequency >= INTERMEDIATE_WEEKLY_FREQUENCY:
        return FitnessTier.INTERMEDIATE
    return FitnessTier.BEGINNER


class TierResolver:
    """
    Remote-first tier resolution with the local tree as fallback.
    """

    def __init__(
        self,
        remote: Optional[ClassificationService] = None,
        lookback_days: int = 56,
    ):
        self.remote = remote
        self.lookback_days = lookback_days

    def resolve(
        self,
        athlete_id,
        weekly_distance_km: Optional[float],
        weekly_frequency: Optional[float],
        five_k_seconds: Optional[float],
    ) -> Tuple[FitnessTier, str]:
        """Return (tier, source) where source is "remote" or "local"."""
        providers = []
        if self.remote is not None and athlete_id is not None:
            providers.append(Provider(SOURCE_REMOTE, lambda: self._ask_remote(athlete_id)))
        providers.append(Provider(
            SOURCE_LOCAL,
            lambda: classify(weekly_distance_km, weekly_frequency, five_k_seconds),
        ))

        resolved = first_available(providers)
        return resolved.value, resolved.source

    def _ask_remote(self, athlete_id) -> Optional[FitnessTier]:
        try:
            answer = self.remote.classify(athlete_id, self.lookback_days)
        except Exception as e:
            # Remote failures are always recovered locally.
            logger.warning(f"Remote tier classification failed for {athlete_id}: {e}")
            return None

        if answer is None:
            logger.info(f"Remote tier classification unavailable for {athlete_id}")
            return None
        try:
            return FitnessTier.parse(answer)
        except ValueError:
            logger.warning(f"Remote classifier returned unknown tier {answer!r}")
            return None
