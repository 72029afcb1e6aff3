"""Tests for scenario metrics calculation."""

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from resourcepulse.engine import NotFoundError
from resourcepulse.engine.metrics import (
    AllocationInput,
    ResourceChangeInput,
    TimelineChangeInput,
    allocation_hours,
    build_metrics_document,
    calculate_costs,
    calculate_scenario_metrics,
    calculate_skills_coverage,
    calculate_utilization,
    margin_percentage,
    round_half_up,
    summarize_timeline,
    workdays_between,
)
from resourcepulse.engine.skills import SkillInfo


SKILLS = [
    SkillInfo(id=1, name="Python", category="Engineering"),
    SkillInfo(id=2, name="React", category="Engineering"),
    SkillInfo(id=3, name="Figma", category="Design"),
]


def make_alloc(**kwargs):
    defaults = dict(
        resource_id=1,
        project_id=10,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        utilization=60,
    )
    defaults.update(kwargs)
    return AllocationInput(**defaults)


class TestWorkdays:
    """Tests for the five-day-week approximation."""

    def test_thirty_day_month(self):
        """30 days -> round(30 * 5 / 7) = 21 workdays."""
        assert workdays_between(date(2024, 1, 1), date(2024, 1, 31)) == 21

    def test_full_week(self):
        assert workdays_between(date(2024, 1, 1), date(2024, 1, 8)) == 5

    def test_minimum_one_workday(self):
        """Same-day and one-day spans still count one workday."""
        assert workdays_between(date(2024, 1, 1), date(2024, 1, 1)) == 1
        assert workdays_between(date(2024, 1, 1), date(2024, 1, 2)) == 1

    def test_round_half_up(self):
        assert round_half_up(Decimal("2.5")) == 3
        assert round_half_up(Decimal("2.49")) == 2
        assert round_half_up(110) == 110

    def test_negative_halves_round_toward_positive(self):
        """Same as JavaScript Math.round: -12.5 -> -12, not -13."""
        assert round_half_up(Decimal("-12.5")) == -12
        assert round_half_up(Decimal("-12.51")) == -13
        assert round_half_up(Decimal("-0.5")) == 0


class TestHours:
    """Tests for allocation hours."""

    def test_hours_from_utilization(self):
        """21 workdays x 8h x 60%."""
        assert allocation_hours(make_alloc()) == Decimal("100.8")

    def test_total_hours_override(self):
        assert allocation_hours(make_alloc(total_hours=40)) == Decimal("40")


class TestUtilization:
    """Tests for utilization aggregation."""

    def test_single_resource_sums_allocations(self):
        """One resource at 60% + 50% reports 110% overall."""
        result = calculate_utilization([
            make_alloc(project_id=10, utilization=60),
            make_alloc(project_id=11, utilization=50),
        ])

        assert result["overall"] == 110
        assert result["resourceCount"] == 1
        assert result["byResource"]["1"]["totalUtilization"] == 110
        assert len(result["byResource"]["1"]["allocations"]) == 2

    def test_overall_is_average_across_resources(self):
        result = calculate_utilization([
            make_alloc(resource_id=1, utilization=60),
            make_alloc(resource_id=2, utilization=25),
        ])

        # (60 + 25) / 2 = 42.5 -> 43
        assert result["overall"] == 43
        assert result["resourceCount"] == 2

    def test_over_allocation_is_reported_not_rejected(self):
        result = calculate_utilization([
            make_alloc(project_id=10, utilization=80),
            make_alloc(project_id=11, utilization=70),
        ])

        assert result["byResource"]["1"]["totalUtilization"] == 150

    def test_no_allocations(self):
        result = calculate_utilization([])

        assert result == {"byResource": {}, "overall": 0, "resourceCount": 0}


class TestCosts:
    """Tests for cost, billable and margin."""

    def test_allocation_rate_overrides_resource_default(self):
        alloc = make_alloc(hourly_rate=Decimal("50"), resource_hourly_rate=Decimal("30"),
                           resource_billable_rate=Decimal("100"))
        result = calculate_costs([alloc])

        assert result["totalCost"] == pytest.approx(5040.0)
        assert result["totalBillable"] == pytest.approx(10080.0)
        assert result["margin"] == 100

    def test_missing_rates_default_to_zero(self):
        result = calculate_costs([make_alloc()])

        assert result["totalCost"] == 0
        assert result["totalBillable"] == 0

    def test_margin_zero_when_cost_is_zero(self):
        """Billable without cost never divides by zero."""
        result = calculate_costs([make_alloc(billable_rate=Decimal("100"))])

        assert result["totalCost"] == 0
        assert result["totalBillable"] > 0
        assert result["margin"] == 0
        assert margin_percentage(Decimal("0"), Decimal("0")) == 0

    def test_negative_margin(self):
        assert margin_percentage(Decimal("100"), Decimal("50")) == -50

    def test_negative_half_margin(self):
        """(7 - 8) / 8 = -12.5%."""
        assert margin_percentage(Decimal("8"), Decimal("7")) == -12

    def test_by_project(self):
        result = calculate_costs([
            make_alloc(project_id=10, project_name="Apollo", total_hours=10,
                       hourly_rate=Decimal("10"), billable_rate=Decimal("15")),
            make_alloc(project_id=11, project_name="Zeus", total_hours=10,
                       hourly_rate=Decimal("20"), billable_rate=Decimal("20")),
        ])

        assert result["byProject"]["10"]["totalCost"] == 100.0
        assert result["byProject"]["10"]["margin"] == 50
        assert result["byProject"]["11"]["margin"] == 0
        assert result["byProject"]["11"]["projectName"] == "Zeus"
        assert result["totalCost"] == 300.0
        # (350 - 300) / 300 = 16.67%
        assert result["margin"] == 17


class TestSkillsCoverage:
    """Tests for skills coverage."""

    def test_full_coverage_when_nothing_required(self):
        result = calculate_skills_coverage([make_alloc()], [], SKILLS)

        assert result["coveragePercentage"] == 100
        assert result["covered"] == []
        assert result["missing"] == []

    def test_allocated_resource_covers_required_skills(self):
        alloc = make_alloc(skills_required=[{"name": "python"}, {"id": 2}])
        result = calculate_skills_coverage([alloc], [], SKILLS)

        assert result["coveragePercentage"] == 100
        assert [s["name"] for s in result["covered"]] == ["Python", "React"]

    def test_removed_resource_leaves_skills_missing(self):
        alloc = make_alloc(skills_required=[{"id": 1}, {"id": 2}])
        changes = [
            ResourceChangeInput(change_type="REMOVE", resource_id=1),
            ResourceChangeInput(change_type="ADD", skills=[{"name": "Python"}]),
        ]
        result = calculate_skills_coverage([alloc], changes, SKILLS)

        assert result["coveragePercentage"] == 50
        assert [s["id"] for s in result["covered"]] == [1]
        assert [s["id"] for s in result["missing"]] == [2]

    def test_unknown_skills_are_ignored(self):
        alloc = make_alloc(skills_required=[{"name": "COBOL"}, {"id": 99}])
        result = calculate_skills_coverage([alloc], [], SKILLS)

        assert result["coveragePercentage"] == 100
        assert result["missing"] == []


class TestTimelineSummary:
    """Tests for the timeline section."""

    def test_shift_days(self):
        result = summarize_timeline([
            TimelineChangeInput(
                project_id=10,
                project_name="Apollo",
                original_start_date=date(2024, 1, 1),
                original_end_date=date(2024, 6, 30),
                new_start_date=date(2024, 2, 1),
                new_end_date=date(2024, 6, 20),
            )
        ])

        assert result["changedProjects"] == 1
        assert result["changes"][0]["startShiftDays"] == 31
        assert result["changes"][0]["endShiftDays"] == -10


class TestMetricsDocument:
    """Tests for the assembled document."""

    def test_document_sections(self):
        document = build_metrics_document(
            [make_alloc()], [], SKILLS, calculated_at=datetime(2024, 3, 1, 12, 0),
        )

        assert set(document) == {"utilization", "costs", "skillsCoverage", "timeline", "calculatedAt"}
        assert document["calculatedAt"] == "2024-03-01T12:00:00"
        assert document["timeline"] == {"changedProjects": 0, "changes": []}


class TestCalculateScenarioMetrics:
    """Tests for calculating and persisting metrics from the database."""

    def test_end_to_end_example(self, db, seed, make_scenario, add_allocation):
        """Resource 1 at 60% on project 10 and 50% on project 11."""
        scenario = make_scenario()
        add_allocation(scenario.id, resource_id=1, project_id=10, utilization=60,
                       hourly_rate=Decimal("50"))
        add_allocation(scenario.id, resource_id=1, project_id=11, utilization=50)

        document = calculate_scenario_metrics(db, scenario.id)

        assert document["utilization"]["overall"] == 110
        assert document["utilization"]["byResource"]["1"]["totalUtilization"] == 110
        assert document["utilization"]["byResource"]["1"]["resourceName"] == "Alice"
        # 100.8h x 50 + 84h x 50 (resource default)
        assert document["costs"]["totalCost"] == pytest.approx(9240.0)
        assert document["costs"]["totalBillable"] == pytest.approx(18480.0)
        assert document["costs"]["margin"] == 100

    def test_document_is_persisted(self, db, seed, make_scenario, add_allocation):
        scenario = make_scenario()
        add_allocation(scenario.id)

        document = calculate_scenario_metrics(db, scenario.id)
        db.refresh(scenario)

        assert scenario.has_metrics
        assert scenario.metrics_data == document

    def test_recalculation_is_idempotent(self, db, seed, make_scenario, add_allocation):
        """Two runs differ only in the timestamp."""
        scenario = make_scenario()
        add_allocation(scenario.id, skills_required=[{"name": "Python"}])
        add_allocation(scenario.id, resource_id=2, project_id=11, utilization=40)

        first = calculate_scenario_metrics(db, scenario.id)
        second = calculate_scenario_metrics(db, scenario.id)
        first.pop("calculatedAt")
        second.pop("calculatedAt")

        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)

    def test_removed_resource_skills_missing(self, db, seed, make_scenario, add_allocation):
        from resourcepulse.models import ChangeType, ScenarioResourceChange

        scenario = make_scenario()
        add_allocation(scenario.id, skills_required=[{"id": 3}])
        db.add(ScenarioResourceChange(scenario_id=scenario.id, resource_id=1,
                                      change_type=ChangeType.REMOVE))
        db.commit()

        document = calculate_scenario_metrics(db, scenario.id)

        assert document["skillsCoverage"]["coveragePercentage"] == 0
        assert document["skillsCoverage"]["missing"][0]["name"] == "Figma"

    def test_unknown_scenario(self, db, seed):
        with pytest.raises(NotFoundError):
            calculate_scenario_metrics(db, 999)
