"""
Boundary contracts with the collaborators the engine does not own.

- History provider: raw activities for a window
- Classification service: optional remote fitness tier
- Profile store: biometrics (birth date, weight)
- Plan store: persistence of plans, workouts, preferences, declarations

The remote implementations below talk HTTP with a bounded timeout and never
block plan generation: a failed history or profile fetch degrades to "no
data", a failed classification to "unavailable".
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
from uuid import UUID

import requests

from .activity_aggregator import ActivitySample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Biometrics:
    birth_date: Optional[date] = None
    weight_kg: Optional[float] = None
    gender: Optional[str] = None

    def age_on(self, today: date) -> Optional[int]:
        if not self.birth_date:
            return None
        years = today.year - self.birth_date.year
        if (today.month, today.day) < (self.birth_date.month, self.birth_date.day):
            years -= 1
        return years


@runtime_checkable
class HistoryProvider(Protocol):
    def fetch_activities(self, athlete_id: UUID, since_date: date) -> List[ActivitySample]:
        ...


@runtime_checkable
class ClassificationService(Protocol):
    def classify(self, athlete_id: UUID, lookback_days: int) -> Optional[str]:
        """Return a tier name, or None when the service has no answer."""
        ...


@runtime_checkable
class ProfileStore(Protocol):
    def get_biometrics(self, athlete_id: UUID) -> Biometrics:
        ...


@runtime_checkable
class PlanStore(Protocol):
    def has_active_plan(self, athlete_id: UUID) -> bool:
        ...

    def active_plan_id(self, athlete_id: UUID) -> Optional[UUID]:
        ...

    def create_plan(self, athlete_id: UUID, plan: Any) -> UUID:
        """Insert a pending plan and return its id."""
        ...

    def create_workouts(self, plan_id: UUID, athlete_id: UUID, workouts: List[Any]) -> int:
        ...

    def activate_plan(self, plan_id: UUID) -> None:
        ...

    def save_preferences(self, plan_id: UUID, athlete_id: UUID, preferences: Dict[str, Any]) -> None:
        ...

    def save_health_declaration(
        self, athlete_id: UUID, plan_id: Optional[UUID], answers: Dict[str, Any]
    ) -> None:
        ...


class _RemoteClient:
    """Minimal JSON-over-HTTP client with a hard timeout."""

    def __init__(self, base_url: Optional[str], timeout: float = 5.0, session=None):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        if not self.base_url:
            return None
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Remote call failed ({url}): {e}")
            return None


class RemoteHistoryProvider(_RemoteClient):
    """Fetch activities from the ingestion service."""

    def fetch_activities(self, athlete_id: UUID, since_date: date) -> List[ActivitySample]:
        payload = self._get_json(
            f"/athletes/{athlete_id}/activities",
            params={"since": since_date.isoformat()},
        )
        if not payload:
            return []
        rows = payload.get("activities", []) if isinstance(payload, dict) else payload

        samples = []
        for row in rows:
            try:
                samples.append(ActivitySample.from_record(row))
            except (TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed activity row: {e}")
        return samples


class RemoteProfileStore(_RemoteClient):
    """Fetch biometrics from the profile service."""

    def get_biometrics(self, athlete_id: UUID) -> Biometrics:
        payload = self._get_json(f"/athletes/{athlete_id}/biometrics")
        if not isinstance(payload, dict):
            return Biometrics()

        birth_date = payload.get("birth_date")
        try:
            birth_date = date.fromisoformat(birth_date[:10]) if birth_date else None
        except (TypeError, ValueError):
            birth_date = None

        weight = payload.get("weight_kg")
        try:
            weight = float(weight) if weight is not None else None
        except (TypeError, ValueError):
            weight = None

        return Biometrics(birth_date=birth_date, weight_kg=weight, gender=payload.get("gender"))


class RemoteClassificationService(_RemoteClient):
    """Ask the level-classification service for an athlete's tier."""

    def classify(self, athlete_id: UUID, lookback_days: int) -> Optional[str]:
        if not self.base_url:
            return None
        try:
            response = self.session.post(
                f"{self.base_url}/compute-athlete-level",
                json={"user_id": str(athlete_id), "lookback_days": lookback_days},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Classification service unavailable: {e}")
            return None

        if isinstance(payload, dict):
            return payload.get("level")
        return None
