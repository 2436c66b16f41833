"""
Pytest configuration and fixtures

Every test gets its own in-memory SQLite database built from the models'
metadata, so nothing leaks between tests. The partial unique index on
active plans is created on SQLite as well.

Boundary collaborators (history, biometrics, remote classifier) are
in-memory fakes; no test touches the network.
"""
import pytest
import sys
import os
from uuid import uuid4
from datetime import date

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FORMAT", "text")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base
import models  # noqa: F401  registers tables
from services.plan_engine.boundaries import Biometrics
from services.plan_engine.performance_profiler import AthleteAnalysisService, PerformanceProfiler
from services.plan_engine.tier_classifier import TierResolver
from tests.plan_engine_helpers import InMemoryHistoryProvider, InMemoryProfileStore, make_runs


# ============ Fixtures ============

@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def athlete_id():
    return uuid4()


@pytest.fixture
def as_of():
    return date(2024, 1, 1)


@pytest.fixture
def history_provider(athlete_id, as_of):
    return InMemoryHistoryProvider({athlete_id: make_runs(as_of)})


@pytest.fixture
def profile_store(athlete_id):
    return InMemoryProfileStore({athlete_id: Biometrics(birth_date=date(1990, 6, 15), weight_kg=70)})


@pytest.fixture
def analysis_service(history_provider, profile_store):
    return AthleteAnalysisService(
        history_provider=history_provider,
        profile_store=profile_store,
        profiler=PerformanceProfiler(TierResolver()),
    )


@pytest.fixture
def client(db_session, analysis_service):
    """TestClient with the database and profile pipeline overridden."""
    from fastapi.testclient import TestClient
    from main import app
    from core.database import get_db
    from routers.training_plans import get_analysis_service

    def override_get_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_analysis_service] = lambda: analysis_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
