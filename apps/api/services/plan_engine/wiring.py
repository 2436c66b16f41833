"""
Service wiring from settings.

Shared by the API dependency and the Celery worker so both profile
athletes through the same remote services, timeouts and cache.
"""

from typing import Optional

from core.cache import get_redis_client
from core.config import settings

from .boundaries import RemoteClassificationService, RemoteHistoryProvider, RemoteProfileStore
from .cache import ProfileCacheService
from .constants import ActivityKindFilter, Sport
from .performance_profiler import AthleteAnalysisService, PerformanceProfiler
from .tier_classifier import TierResolver

_profile_cache: Optional[ProfileCacheService] = None


def get_profile_cache() -> ProfileCacheService:
    global _profile_cache
    if _profile_cache is None:
        _profile_cache = ProfileCacheService(get_redis_client(), ttl=settings.CACHE_TTL_PROFILE)
    return _profile_cache


def kind_for_sport(sport: Sport) -> ActivityKindFilter:
    return ActivityKindFilter.CYCLING if sport == Sport.CYCLING else ActivityKindFilter.RUNNING


def build_analysis_service(
    kind: ActivityKindFilter = ActivityKindFilter.RUNNING,
) -> AthleteAnalysisService:
    """Profile pipeline wired to the configured remote services."""
    timeout = settings.EXTERNAL_API_TIMEOUT
    classifier = None
    if settings.PLAN_CLASSIFIER_URL:
        classifier = RemoteClassificationService(settings.PLAN_CLASSIFIER_URL, timeout=timeout)
    return AthleteAnalysisService(
        history_provider=RemoteHistoryProvider(settings.PLAN_HISTORY_URL, timeout=timeout),
        profile_store=RemoteProfileStore(settings.PLAN_PROFILE_URL, timeout=timeout),
        profiler=PerformanceProfiler(
            TierResolver(classifier, lookback_days=settings.PLAN_CLASSIFIER_LOOKBACK_DAYS)
        ),
        cache=get_profile_cache(),
        lookback_days=settings.PLAN_HISTORY_LOOKBACK_DAYS,
        kind_filter=kind,
    )
