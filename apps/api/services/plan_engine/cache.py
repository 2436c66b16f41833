"""
Profile Cache Service

Caches derived PerformanceProfiles. The profile is always recomputable from
history, so every cache failure is a miss, never an error.

Layers:
1. Redis (shared across workers) when a client is supplied
2. Local in-process dict with expiry otherwise

Usage:
    cache = ProfileCacheService(get_redis_client())

    profile = cache.get_profile(athlete_id, "running", today)
    cache.set_profile(athlete_id, "running", today, profile.to_dict())
"""

import json
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

logger = logging.getLogger(__name__)


class ProfileCacheService:
    """Two-layer cache for athlete performance profiles."""

    TTL_PROFILE = 900  # 15 minutes

    def __init__(self, redis=None, ttl: Optional[int] = None):
        """
        Args:
            redis: Redis client (optional, uses in-memory if not provided)
            ttl: Override for TTL_PROFILE in seconds
        """
        self.redis = redis
        self.ttl = ttl or self.TTL_PROFILE
        self._local_cache: Dict[str, Any] = {}
        self._local_expiry: Dict[str, datetime] = {}

    @staticmethod
    def _profile_key(athlete_id: UUID, kind: str, as_of: date) -> str:
        return f"profile:{athlete_id}:{kind}:{as_of.isoformat()}"

    def get_profile(self, athlete_id: UUID, kind: str, as_of: date) -> Optional[dict]:
        return self._get(self._profile_key(athlete_id, kind, as_of))

    def set_profile(self, athlete_id: UUID, kind: str, as_of: date, profile: dict):
        self._set(self._profile_key(athlete_id, kind, as_of), profile, self.ttl)

    def invalidate_athlete(self, athlete_id: UUID):
        """Drop every cached profile for an athlete (e.g. after new activities)."""
        prefix = f"profile:{athlete_id}:"
        if self.redis:
            try:
                cursor = 0
                while True:
                    cursor, keys = self.redis.scan(cursor, match=f"{prefix}*", count=100)
                    if keys:
                        self.redis.delete(*keys)
                    if cursor == 0:
                        break
            except Exception as e:
                logger.warning(f"Cache invalidation error for {athlete_id}: {e}")
        else:
            for key in [k for k in self._local_cache if k.startswith(prefix)]:
                self._local_cache.pop(key, None)
                self._local_expiry.pop(key, None)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        if self.redis:
            return {"type": "redis", "keys": self.redis.dbsize()}
        return {"type": "local", "keys": len(self._local_cache)}

    # ========== Internal Methods ==========

    def _get(self, key: str) -> Optional[Any]:
        if self.redis:
            try:
                value = self.redis.get(key)
                if value:
                    return json.loads(value)
            except Exception as e:
                logger.warning(f"Cache get error for {key}: {e}")
            return None

        if key in self._local_cache:
            expiry = self._local_expiry.get(key)
            if expiry is None or expiry > datetime.now(timezone.utc):
                return self._local_cache[key]
            del self._local_cache[key]
            del self._local_expiry[key]
        return None

    def _set(self, key: str, value: Any, ttl: Optional[int]):
        if self.redis:
            try:
                serialized = json.dumps(value, default=str)
                if ttl:
                    self.redis.setex(key, ttl, serialized)
                else:
                    self.redis.set(key, serialized)
            except Exception as e:
                logger.warning(f"Cache set error for {key}: {e}")
            return

        now = datetime.now(timezone.utc)
        self._prune_expired(now)
        self._local_cache[key] = value
        self._local_expiry[key] = now + timedelta(seconds=ttl) if ttl else None

    def _prune_expired(self, now: datetime):
        """Drop expired local entries (per-day keys are never read again)."""
        expired = [k for k, expiry in self._local_expiry.items() if expiry is not None and expiry <= now]
        for key in expired:
            self._local_cache.pop(key, None)
            del self._local_expiry[key]
