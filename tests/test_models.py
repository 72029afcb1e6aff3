"""Tests for database models, helpers and configuration."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import text

from resourcepulse.config import Config
from resourcepulse.database import has_table
from resourcepulse.engine.errors import ScenarioValidationError
from resourcepulse.models import (
    ChangeType,
    Scenario,
    ScenarioAllocation,
    ScenarioTimelineChange,
    ScenarioType,
)
from resourcepulse.models.scenario_changes import (
    clone_scenario_allocations,
    normalize_roles,
    to_decimal,
    upsert_resource_change,
    upsert_scenario_allocation,
)


class TestScenario:
    """Tests for Scenario model."""

    def test_flags(self):
        scenario = Scenario(name="Plan", scenario_type=ScenarioType.WHATIF,
                            start_date=date(2024, 1, 1), end_date=date(2024, 12, 31))

        assert scenario.is_whatif
        assert not scenario.has_metrics

        scenario.metrics_data = {"utilization": {"overall": 0}}
        assert scenario.has_metrics

    def test_defaults_after_insert(self, db, seed, make_scenario):
        scenario = make_scenario()

        assert scenario.is_active is True
        assert scenario.created_at is not None


class TestScenarioTimelineChange:
    """Tests for ScenarioTimelineChange model."""

    def test_shift_days(self):
        change = ScenarioTimelineChange(
            project_id=10,
            original_start_date=date(2024, 1, 1),
            original_end_date=date(2024, 6, 30),
            new_start_date=date(2023, 12, 25),
            new_end_date=date(2024, 7, 10),
        )

        assert change.start_shift_days == -7
        assert change.end_shift_days == 10

    def test_shift_unknown_without_original(self):
        change = ScenarioTimelineChange(project_id=10, new_start_date=date(2024, 1, 1),
                                        new_end_date=date(2024, 2, 1))

        assert change.start_shift_days is None


class TestHelpers:
    """Tests for model helper functions."""

    def test_to_decimal(self):
        assert to_decimal(None) is None
        assert to_decimal(0) is None
        assert to_decimal(12.5) == Decimal("12.5")

    def test_normalize_roles(self):
        assert normalize_roles(None) is None
        assert normalize_roles('["Lead", "QA"]') == ["Lead", "QA"]
        assert normalize_roles("Lead") == ["Lead"]
        assert normalize_roles([]) is None

    def test_clone_does_not_commit(self, db, seed, make_scenario, add_allocation):
        base = make_scenario("Base")
        add_allocation(base.id, resource_id=1, utilization=50)
        add_allocation(base.id, resource_id=2, project_id=11, utilization=70)
        child = make_scenario("Child")

        copied = clone_scenario_allocations(db, base.id, child.id)
        db.flush()

        assert copied == 2
        assert db.query(ScenarioAllocation).filter(ScenarioAllocation.scenario_id == child.id).count() == 2

        db.rollback()
        assert db.query(ScenarioAllocation).filter(ScenarioAllocation.scenario_id == child.id).count() == 0

    def test_missing_json_values_are_sql_null(self, db, seed, make_scenario):
        """Absent skills and roles are stored as NULL, not the JSON literal null."""
        scenario = make_scenario()
        upsert_scenario_allocation(db, scenario.id, resource_id=1, project_id=10,
                                   start_date=date(2024, 1, 1), end_date=date(2024, 1, 31),
                                   utilization=50)
        upsert_resource_change(db, scenario.id, ChangeType.REMOVE, resource_id=2)

        nulls = db.execute(text(
            "SELECT COUNT(*) FROM scenario_allocations "
            "WHERE skills_required IS NULL AND roles_required IS NULL"
        )).scalar()
        change_nulls = db.execute(text(
            "SELECT COUNT(*) FROM scenario_resource_changes WHERE skills IS NULL"
        )).scalar()
        metrics_nulls = db.execute(text(
            "SELECT COUNT(*) FROM scenarios WHERE metrics_data IS NULL"
        )).scalar()

        assert nulls == 1
        assert change_nulls == 1
        assert metrics_nulls == 1

    def test_move_onto_taken_triple_rejected(self, db, seed, make_scenario, add_allocation):
        scenario = make_scenario()
        on_apollo = add_allocation(scenario.id, project_id=10)
        on_zeus = add_allocation(scenario.id, project_id=11)

        with pytest.raises(ScenarioValidationError) as exc_info:
            upsert_scenario_allocation(db, scenario.id, resource_id=1, project_id=11,
                                       start_date=date(2024, 1, 1), end_date=date(2024, 1, 31),
                                       utilization=50, allocation_id=on_apollo.id)

        assert exc_info.value.details == {"allocationId": on_zeus.id}

    def test_new_resource_proposals_are_always_inserted(self, db, seed, make_scenario):
        scenario = make_scenario()

        first = upsert_resource_change(db, scenario.id, ChangeType.ADD,
                                       resource_name="Carol", resource_role="QA")
        second = upsert_resource_change(db, scenario.id, ChangeType.ADD,
                                        resource_name="Dan", resource_role="QA")

        assert first.id != second.id
        assert first.resource_id is None


class TestDatabase:
    """Tests for database helpers."""

    def test_has_table(self, db):
        assert has_table(db, "scenarios")
        assert has_table(db, "scenario_allocations")
        assert not has_table(db, "no_such_table")


class TestConfig:
    """Tests for configuration."""

    def test_database_url_wins(self, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", "sqlite:///local.db")

        assert Config.get_database_url() == "sqlite:///local.db"

    def test_postgres_url_from_parts(self, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", None)
        monkeypatch.setattr(Config, "POSTGRES_USER", "pulse")
        monkeypatch.setattr(Config, "POSTGRES_PASSWORD", "secret")
        monkeypatch.setattr(Config, "POSTGRES_HOST", "db")
        monkeypatch.setattr(Config, "POSTGRES_PORT", "5433")
        monkeypatch.setattr(Config, "POSTGRES_DATABASE", "pulse")

        assert Config.get_database_url() == "postgresql://pulse:secret@db:5433/pulse"

    def test_cors_origins(self, monkeypatch):
        monkeypatch.setattr(Config, "CORS_ORIGINS", "http://a.test, http://b.test,")

        assert Config.get_cors_origins() == ["http://a.test", "http://b.test"]
