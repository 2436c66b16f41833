"""
Plan engine test helpers

In-memory doubles for the engine's boundary contracts plus builders for
activity history and wizard payloads.
"""
from uuid import uuid4
from datetime import timedelta

from services.plan_engine.activity_aggregator import ActivitySample
from services.plan_engine.boundaries import Biometrics


# ============ Boundary fakes ============

class InMemoryHistoryProvider:
    def __init__(self, activities=None):
        self.activities = activities or {}
        self.calls = []

    def fetch_activities(self, athlete_id, since_date):
        self.calls.append((athlete_id, since_date))
        return list(self.activities.get(athlete_id, []))


class InMemoryProfileStore:
    def __init__(self, biometrics=None):
        self.biometrics = biometrics or {}

    def get_biometrics(self, athlete_id):
        return self.biometrics.get(athlete_id, Biometrics())


class StubClassifier:
    """Remote classifier double: returns `answer` or raises `error`."""

    def __init__(self, answer=None, error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    def classify(self, athlete_id, lookback_days):
        self.calls.append((athlete_id, lookback_days))
        if self.error is not None:
            raise self.error
        return self.answer


class InMemoryPlanStore:
    """PlanStore double that enforces one active plan per athlete."""

    def __init__(self):
        self.plans = {}
        self.workouts = {}
        self.preferences = {}
        self.declarations = []

    def active_plan_id(self, athlete_id):
        for plan_id, p in self.plans.items():
            if p["athlete_id"] == athlete_id and p["status"] == "active":
                return plan_id
        return None

    def has_active_plan(self, athlete_id):
        return self.active_plan_id(athlete_id) is not None

    def create_plan(self, athlete_id, plan):
        plan_id = uuid4()
        self.plans[plan_id] = {"athlete_id": athlete_id, "status": "pending", "plan": plan}
        return plan_id

    def create_workouts(self, plan_id, athlete_id, workouts):
        self.workouts[plan_id] = list(workouts)
        return len(workouts)

    def activate_plan(self, plan_id):
        self.plans[plan_id]["status"] = "active"

    def save_preferences(self, plan_id, athlete_id, preferences):
        self.preferences[plan_id] = dict(preferences)

    def save_health_declaration(self, athlete_id, plan_id, answers):
        self.declarations.append((athlete_id, plan_id, dict(answers)))


# ============ Builders ============

def make_runs(as_of, weeks=6, per_week=3, distance_m=5000, pace=6.0, kind="run"):
    """Evenly spaced runs at a fixed pace, most recent `weeks` weeks."""
    runs = []
    for week in range(weeks):
        for i in range(per_week):
            day = as_of - timedelta(days=week * 7 + i * 2 + 1)
            runs.append(ActivitySample(
                date=day,
                distance_meters=distance_m,
                duration_minutes=pace * distance_m / 1000,
                avg_heart_rate=150,
                max_heart_rate=178,
                activity_kind=kind,
            ))
    return runs


def completed_wizard(**overrides):
    """A wizard payload that passes every step."""
    payload = {
        "goal": "5k",
        "athlete_level": "Beginner",
        "weight_kg": 70,
        "days_per_week": 3,
        "available_days": ["tuesday", "thursday", "saturday"],
        "long_run_day": "saturday",
        "start_date": "2024-01-01",
        "plan_duration_weeks": 12,
        "event_date": "2024-03-24",
        "health": {
            "question_1_heart_problem": False,
            "question_2_chest_pain_during_activity": False,
            "question_3_chest_pain_last_3months": False,
            "question_4_balance_consciousness_loss": False,
            "question_5_bone_joint_problem": False,
            "question_6_taking_medication": False,
            "question_7_other_impediment": False,
            "declaration_accepted": True,
        },
    }
    payload.update(overrides)
    return payload


