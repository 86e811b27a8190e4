import os

# The application module builds its default engine at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "false"

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from optima.database import Base, create_db_engine, create_session_factory
from optima.models import ProjectStatus
from optima.scheduling import ProjectSnapshot
from optima.services.scheduling_service import SchedulingService, get_scheduling_service


class FrozenClock:
    """Deterministic stand-in for utcnow()."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def memory_db():
    """Create in-memory SQLite database for testing"""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(memory_db):
    return create_session_factory(memory_db)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 6, 23, 12, 0))


@pytest.fixture
def service(session_factory, clock):
    return SchedulingService(session_factory, batch_limit=5, default_strategy="greedy", clock=clock)


@pytest.fixture
def client(service):
    from optima.main import app

    app.dependency_overrides[get_scheduling_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_project():
    """Build a detached PENDING project snapshot."""
    def _make(id, deadline, revenue, title=None, created_at=None):
        return ProjectSnapshot(
            id=id,
            title=title or f"P{id}",
            deadline=deadline,
            expected_revenue=Decimal(str(revenue)),
            status=ProjectStatus.PENDING,
            created_at=created_at,
        )
    return _make
