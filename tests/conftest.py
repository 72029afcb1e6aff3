"""Shared fixtures: in-memory database, seeded reference data, API client."""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from resourcepulse.database import Base, get_db
from resourcepulse.models import (
    Project,
    Resource,
    Scenario,
    ScenarioAllocation,
    ScenarioType,
    Skill,
)


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session bound to the test database."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    """Live reference data: two resources, two projects, three skills."""
    alice = Resource(id=1, name="Alice", role="Developer",
                     hourly_rate=Decimal("50.00"), billable_rate=Decimal("100.00"))
    bob = Resource(id=2, name="Bob", role="Designer",
                   hourly_rate=Decimal("40.00"), billable_rate=Decimal("80.00"))
    apollo = Project(id=10, name="Apollo",
                     start_date=date(2024, 1, 1), end_date=date(2024, 6, 30))
    zeus = Project(id=11, name="Zeus",
                   start_date=date(2024, 2, 1), end_date=date(2024, 12, 31))
    db.add_all([
        alice, bob, apollo, zeus,
        Skill(id=1, name="Python", category="Engineering"),
        Skill(id=2, name="React", category="Engineering"),
        Skill(id=3, name="Figma", category="Design"),
    ])
    db.commit()
    return {"alice": alice, "bob": bob, "apollo": apollo, "zeus": zeus}


@pytest.fixture
def make_scenario(db):
    """Factory for what-if scenarios."""
    def _make(name="Plan A", **kwargs):
        scenario = Scenario(
            name=name,
            scenario_type=kwargs.pop("scenario_type", ScenarioType.WHATIF),
            start_date=kwargs.pop("start_date", date(2024, 1, 1)),
            end_date=kwargs.pop("end_date", date(2024, 12, 31)),
            **kwargs,
        )
        db.add(scenario)
        db.commit()
        db.refresh(scenario)
        return scenario
    return _make


@pytest.fixture
def add_allocation(db):
    """Factory for scenario allocations."""
    def _add(scenario_id, resource_id=1, project_id=10, utilization=60,
             start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), **kwargs):
        allocation = ScenarioAllocation(
            scenario_id=scenario_id,
            resource_id=resource_id,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
            utilization=utilization,
            **kwargs,
        )
        db.add(allocation)
        db.commit()
        db.refresh(allocation)
        return allocation
    return _add


@pytest.fixture
def client(db, seed):
    """API client sharing the test session."""
    from resourcepulse.api.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
