"""Scenario metrics calculation.

Aggregates a scenario's hypothetical allocations and changes into a metrics
document:
- Utilization by resource and overall average
- Cost, billable and margin, globally and per project
- Skills coverage (required skills vs skills available in the scenario)
- Timeline shifts of projects with proposed date changes

The document is recomputed from scratch on every call and written back to
the scenario's metrics_data column.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from resourcepulse.engine.errors import NotFoundError
from resourcepulse.engine.skills import SkillInfo, parse_skill_refs, resolve_skill_ids

logger = logging.getLogger(__name__)

HOURS_PER_WORKDAY = Decimal("8")
WORKDAYS_PER_WEEK = Decimal("5")
DAYS_PER_WEEK = Decimal("7")


@dataclass
class AllocationInput:
    """A scenario allocation joined with its resource defaults and project."""
    resource_id: int
    project_id: int
    start_date: date
    end_date: date
    utilization: int
    resource_name: Optional[str] = None
    project_name: Optional[str] = None
    hourly_rate: Optional[Decimal] = None
    billable_rate: Optional[Decimal] = None
    resource_hourly_rate: Optional[Decimal] = None
    resource_billable_rate: Optional[Decimal] = None
    total_hours: Optional[int] = None
    skills_required: Any = None

    @property
    def effective_hourly_rate(self) -> Decimal:
        """Allocation override, else resource default, else 0."""
        return Decimal(str(self.hourly_rate or self.resource_hourly_rate or 0))

    @property
    def effective_billable_rate(self) -> Decimal:
        """Allocation override, else resource default, else 0."""
        return Decimal(str(self.billable_rate or self.resource_billable_rate or 0))


@dataclass
class ResourceChangeInput:
    """A proposed resource change as seen by the calculator."""
    change_type: str
    resource_id: Optional[int] = None
    skills: Any = None


@dataclass
class TimelineChangeInput:
    """A proposed project date change."""
    project_id: int
    new_start_date: date
    new_end_date: date
    project_name: Optional[str] = None
    original_start_date: Optional[date] = None
    original_end_date: Optional[date] = None


@dataclass
class CostAccumulator:
    """Running cost/billable totals."""
    total_cost: Decimal = Decimal("0")
    total_billable: Decimal = Decimal("0")

    def add(self, cost: Decimal, billable: Decimal):
        self.total_cost += cost
        self.total_billable += billable

    @property
    def margin(self) -> int:
        return margin_percentage(self.total_cost, self.total_billable)


def round_half_up(value) -> int:
    """Round to the nearest integer, halves toward positive infinity (-12.5 -> -12)."""
    return int((Decimal(str(value)) + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def workdays_between(start_date: date, end_date: date) -> int:
    """Approximate workdays in a date span using a five-day week (minimum 1)."""
    duration_days = Decimal((end_date - start_date).days)
    return max(1, round_half_up(duration_days * WORKDAYS_PER_WEEK / DAYS_PER_WEEK))


def allocation_hours(allocation: AllocationInput) -> Decimal:
    """Hours for an allocation: explicit total, else workdays x 8 x utilization."""
    if allocation.total_hours:
        return Decimal(allocation.total_hours)
    workdays = workdays_between(allocation.start_date, allocation.end_date)
    return Decimal(workdays) * HOURS_PER_WORKDAY * Decimal(allocation.utilization) / Decimal("100")


def margin_percentage(total_cost: Decimal, total_billable: Decimal) -> int:
    """(billable - cost) / cost as a rounded percentage; 0 when there is no cost."""
    if total_cost <= 0:
        return 0
    return round_half_up((total_billable - total_cost) / total_cost * 100)


def _money(value: Decimal) -> float:
    return float(value)


def calculate_utilization(allocations: List[AllocationInput]) -> Dict[str, Any]:
    """Sum utilization per resource and average it across resources.

    Over-allocation (more than 100% for a resource) is reported as is.
    """
    by_resource: Dict[str, Dict[str, Any]] = {}

    for alloc in allocations:
        key = str(alloc.resource_id)
        if key not in by_resource:
            by_resource[key] = {
                "resourceId": alloc.resource_id,
                "resourceName": alloc.resource_name,
                "totalUtilization": 0,
                "allocations": [],
            }
        entry = by_resource[key]
        entry["totalUtilization"] += alloc.utilization
        entry["allocations"].append({
            "projectId": alloc.project_id,
            "projectName": alloc.project_name,
            "utilization": alloc.utilization,
        })

    resource_count = len(by_resource)
    overall = 0
    if resource_count:
        total = sum(r["totalUtilization"] for r in by_resource.values())
        overall = round_half_up(Decimal(total) / Decimal(resource_count))

    return {
        "byResource": by_resource,
        "overall": overall,
        "resourceCount": resource_count,
    }


def calculate_costs(allocations: List[AllocationInput]) -> Dict[str, Any]:
    """Compute cost, billable and margin globally and per project."""
    totals = CostAccumulator()
    projects: Dict[str, CostAccumulator] = {}
    project_names: Dict[str, Optional[str]] = {}

    for alloc in allocations:
        hours = allocation_hours(alloc)
        cost = alloc.effective_hourly_rate * hours
        billable = alloc.effective_billable_rate * hours

        key = str(alloc.project_id)
        if key not in projects:
            projects[key] = CostAccumulator()
            project_names[key] = alloc.project_name
        projects[key].add(cost, billable)
        totals.add(cost, billable)

    by_project = {
        key: {
            "projectId": int(key),
            "projectName": project_names[key],
            "totalCost": _money(acc.total_cost),
            "totalBillable": _money(acc.total_billable),
            "margin": acc.margin,
        }
        for key, acc in projects.items()
    }

    return {
        "totalCost": _money(totals.total_cost),
        "totalBillable": _money(totals.total_billable),
        "margin": totals.margin,
        "byProject": by_project,
    }


def calculate_skills_coverage(
    allocations: List[AllocationInput],
    resource_changes: List[ResourceChangeInput],
    skills: List[SkillInfo],
) -> Dict[str, Any]:
    """Compare skills required by allocations with skills available in the scenario.

    Any allocated resource that is not being removed is treated as covering
    every required skill; proposed new resources (ADD) contribute the skills
    they list.
    """
    required = set()
    for alloc in allocations:
        required |= resolve_skill_ids(parse_skill_refs(alloc.skills_required), skills)

    removed_ids = {
        rc.resource_id for rc in resource_changes
        if rc.change_type == "REMOVE" and rc.resource_id is not None
    }

    available = set()
    if any(alloc.resource_id not in removed_ids for alloc in allocations):
        available |= required

    for rc in resource_changes:
        if rc.change_type == "ADD":
            available |= resolve_skill_ids(parse_skill_refs(rc.skills), skills)

    skills_by_id = {s.id: s for s in skills}
    covered = [skills_by_id[sid].to_dict() for sid in sorted(required) if sid in available]
    missing = [skills_by_id[sid].to_dict() for sid in sorted(required) if sid not in available]

    if required:
        coverage = round_half_up(Decimal(len(covered)) / Decimal(len(required)) * 100)
    else:
        coverage = 100  # nothing required

    return {
        "covered": covered,
        "missing": missing,
        "coveragePercentage": coverage,
    }


def summarize_timeline(timeline_changes: List[TimelineChangeInput]) -> Dict[str, Any]:
    """Summarize proposed project date shifts."""
    changes = []
    for tc in timeline_changes:
        start_shift = (
            (tc.new_start_date - tc.original_start_date).days
            if tc.original_start_date else None
        )
        end_shift = (
            (tc.new_end_date - tc.original_end_date).days
            if tc.original_end_date else None
        )
        changes.append({
            "projectId": tc.project_id,
            "projectName": tc.project_name,
            "startShiftDays": start_shift,
            "endShiftDays": end_shift,
        })
    return {"changedProjects": len(changes), "changes": changes}


def build_metrics_document(
    allocations: List[AllocationInput],
    resource_changes: List[ResourceChangeInput],
    skills: List[SkillInfo],
    timeline_changes: Optional[List[TimelineChangeInput]] = None,
    calculated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build the full metrics document from scenario rows and reference data."""
    return {
        "utilization": calculate_utilization(allocations),
        "costs": calculate_costs(allocations),
        "skillsCoverage": calculate_skills_coverage(allocations, resource_changes, skills),
        "timeline": summarize_timeline(timeline_changes or []),
        "calculatedAt": (calculated_at or datetime.utcnow()).isoformat(),
    }


# =============================================================================
# Database loading
# =============================================================================

def load_allocation_inputs(db: Session, scenario_id: int) -> List[AllocationInput]:
    """Load scenario allocations joined with resource defaults and project names."""
    from resourcepulse.models import ScenarioAllocation, Resource, Project

    rows = (
        db.query(ScenarioAllocation, Resource, Project)
        .join(Resource, ScenarioAllocation.resource_id == Resource.id)
        .join(Project, ScenarioAllocation.project_id == Project.id)
        .filter(ScenarioAllocation.scenario_id == scenario_id)
        .order_by(ScenarioAllocation.id)
        .all()
    )

    return [
        AllocationInput(
            resource_id=alloc.resource_id,
            resource_name=resource.name,
            resource_hourly_rate=resource.hourly_rate,
            resource_billable_rate=resource.billable_rate,
            project_id=alloc.project_id,
            project_name=project.name,
            start_date=alloc.start_date,
            end_date=alloc.end_date,
            utilization=alloc.utilization,
            hourly_rate=alloc.hourly_rate,
            billable_rate=alloc.billable_rate,
            total_hours=alloc.total_hours,
            skills_required=alloc.skills_required,
        )
        for alloc, resource, project in rows
    ]


def load_timeline_inputs(db: Session, scenario_id: int) -> List[TimelineChangeInput]:
    from resourcepulse.models import ScenarioTimelineChange

    changes = db.query(ScenarioTimelineChange).filter(
        ScenarioTimelineChange.scenario_id == scenario_id
    ).order_by(ScenarioTimelineChange.id).all()

    return [
        TimelineChangeInput(
            project_id=tc.project_id,
            project_name=tc.project_name,
            original_start_date=tc.original_start_date,
            original_end_date=tc.original_end_date,
            new_start_date=tc.new_start_date,
            new_end_date=tc.new_end_date,
        )
        for tc in changes
    ]


def load_resource_change_inputs(db: Session, scenario_id: int) -> List[ResourceChangeInput]:
    from resourcepulse.models import ScenarioResourceChange

    changes = db.query(ScenarioResourceChange).filter(
        ScenarioResourceChange.scenario_id == scenario_id
    ).order_by(ScenarioResourceChange.id).all()

    return [
        ResourceChangeInput(
            change_type=rc.change_type.value,
            resource_id=rc.resource_id,
            skills=rc.skills,
        )
        for rc in changes
    ]


def load_skills(db: Session) -> List[SkillInfo]:
    from resourcepulse.models import Skill

    return [
        SkillInfo(id=s.id, name=s.name, category=s.category)
        for s in db.query(Skill).order_by(Skill.id).all()
    ]


def calculate_scenario_metrics(db: Session, scenario_id: int) -> Dict[str, Any]:
    """Recalculate and persist the metrics document for a scenario.

    Raises:
        NotFoundError: if the scenario does not exist.
    """
    from resourcepulse.models import Scenario

    scenario = db.query(Scenario).filter(Scenario.id == scenario_id).first()
    if not scenario:
        raise NotFoundError("Scenario not found")

    allocations = load_allocation_inputs(db, scenario_id)
    document = build_metrics_document(
        allocations=allocations,
        resource_changes=load_resource_change_inputs(db, scenario_id),
        skills=load_skills(db),
        timeline_changes=load_timeline_inputs(db, scenario_id),
    )

    scenario.metrics_data = document
    scenario.updated_at = datetime.utcnow()
    db.commit()

    logger.info(
        f"Calculated metrics for scenario {scenario_id}: {len(allocations)} allocations, "
        f"overall utilization {document['utilization']['overall']}%, "
        f"margin {document['costs']['margin']}%"
    )
    return document
