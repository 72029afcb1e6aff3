"""API routes for what-if scenario analysis.

Provides hypothetical capacity planning on top of live data:
- Create/clone scenarios and record allocations, timeline and resource changes
- Calculate a scenario's utilization, cost and skills-coverage metrics
- Compare metrics of several scenarios side by side
- Promote a scenario's changes into the live tables
"""

from datetime import datetime
from typing import Any, Dict, List
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from resourcepulse.database import get_db, has_table
from resourcepulse.engine import (
    NotFoundError,
    ScenarioValidationError,
    calculate_scenario_metrics,
    compare_scenarios as run_comparison,
    get_saved_comparison,
    list_saved_comparisons,
    promote_scenario as run_promotion,
)
from resourcepulse.models import (
    ChangeType,
    Project,
    Resource,
    Scenario,
    ScenarioAllocation,
    ScenarioResourceChange,
    ScenarioTimelineChange,
    ScenarioType,
)
from resourcepulse.models.scenario_changes import (
    clone_scenario_allocations,
    upsert_resource_change,
    upsert_scenario_allocation,
    upsert_timeline_change,
)
from resourcepulse.api.schemas import (
    AllocationData,
    AllocationResponse,
    CompareScenariosRequest,
    CreateScenarioRequest,
    PromotionResponse,
    ResourceChangeResponse,
    ScenarioDetail,
    ScenarioResourceRequest,
    ScenarioSummary,
    TimelineChangeRequest,
    TimelineChangeResponse,
    UpdateScenarioRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/whatif", tags=["What-If Analysis"])


# =============================================================================
# Response builders
# =============================================================================

def _float(value):
    return float(value) if value is not None else None


def scenario_summary(scenario: Scenario) -> ScenarioSummary:
    return ScenarioSummary(
        id=scenario.id,
        name=scenario.name,
        description=scenario.description,
        type=scenario.scenario_type.value,
        base_scenario_id=scenario.base_scenario_id,
        start_date=scenario.start_date,
        end_date=scenario.end_date,
        is_active=scenario.is_active,
        created_at=scenario.created_at,
    )


def allocation_response(alloc: ScenarioAllocation) -> AllocationResponse:
    return AllocationResponse(
        id=alloc.id,
        resource_id=alloc.resource_id,
        resource_name=alloc.resource_name,
        project_id=alloc.project_id,
        project_name=alloc.project_name,
        start_date=alloc.start_date,
        end_date=alloc.end_date,
        utilization=alloc.utilization,
        billable_rate=_float(alloc.billable_rate),
        hourly_rate=_float(alloc.hourly_rate),
        total_hours=alloc.total_hours,
        skills_required=alloc.skills_required,
        roles_required=alloc.roles_required,
        notes=alloc.notes,
    )


def timeline_change_response(change: ScenarioTimelineChange) -> TimelineChangeResponse:
    return TimelineChangeResponse(
        id=change.id,
        project_id=change.project_id,
        project_name=change.project_name,
        original_start_date=change.original_start_date,
        original_end_date=change.original_end_date,
        new_start_date=change.new_start_date,
        new_end_date=change.new_end_date,
        notes=change.notes,
    )


def resource_change_response(change: ScenarioResourceChange) -> ResourceChangeResponse:
    return ResourceChangeResponse(
        id=change.id,
        resource_id=change.resource_id,
        resource_name=change.resource_name,
        resource_role=change.resource_role,
        skills=change.skills,
        hourly_rate=_float(change.hourly_rate),
        billable_rate=_float(change.billable_rate),
        change_type=change.change_type.value,
        notes=change.notes,
    )


def get_whatif_scenario(db: Session, scenario_id: int) -> Scenario:
    """Load a what-if scenario or raise NotFoundError."""
    scenario = db.query(Scenario).filter(
        Scenario.id == scenario_id,
        Scenario.scenario_type == ScenarioType.WHATIF,
    ).first()
    if not scenario:
        raise NotFoundError("What-if scenario not found")
    return scenario


# =============================================================================
# Scenario Endpoints
# =============================================================================

@router.post("/scenarios", response_model=ScenarioSummary, status_code=status.HTTP_201_CREATED)
def create_scenario(request: CreateScenarioRequest, db: Session = Depends(get_db)):
    """Create a what-if scenario, optionally cloning a base scenario's allocations."""
    if request.end_date < request.start_date:
        raise ScenarioValidationError("End date must be on or after start date")

    if request.base_scenario_id is not None:
        base = db.query(Scenario).filter(Scenario.id == request.base_scenario_id).first()
        if not base:
            raise NotFoundError("Base scenario not found")

    try:
        scenario = Scenario(
            name=request.name,
            description=request.description,
            scenario_type=ScenarioType.WHATIF,
            base_scenario_id=request.base_scenario_id,
            start_date=request.start_date,
            end_date=request.end_date,
        )
        db.add(scenario)
        db.flush()

        cloned = 0
        if request.clone_from_base_scenario and request.base_scenario_id:
            cloned = clone_scenario_allocations(db, request.base_scenario_id, scenario.id)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(scenario)
    logger.info(f"Created what-if scenario {scenario.id} '{scenario.name}' ({cloned} allocations cloned)")
    return scenario_summary(scenario)


@router.get("/scenarios", response_model=List[ScenarioSummary])
def list_scenarios(db: Session = Depends(get_db)):
    """List all what-if scenarios, newest first."""
    scenarios = db.query(Scenario).filter(
        Scenario.scenario_type == ScenarioType.WHATIF
    ).order_by(Scenario.created_at.desc(), Scenario.id.desc()).all()
    return [scenario_summary(s) for s in scenarios]


@router.get("/scenarios/{scenario_id}", response_model=ScenarioDetail)
def get_scenario(scenario_id: int, db: Session = Depends(get_db)):
    """Get a scenario with its allocations, timeline changes and resource changes.

    Sub-lists backed by tables missing from the database are returned empty.
    """
    scenario = get_whatif_scenario(db, scenario_id)

    allocations = []
    if has_table(db, ScenarioAllocation.__tablename__):
        allocations = [allocation_response(a) for a in scenario.allocations]

    timeline_changes = []
    if has_table(db, ScenarioTimelineChange.__tablename__):
        timeline_changes = [timeline_change_response(c) for c in scenario.timeline_changes]

    resource_changes = []
    if has_table(db, ScenarioResourceChange.__tablename__):
        resource_changes = [resource_change_response(c) for c in scenario.resource_changes]

    summary = scenario_summary(scenario)
    return ScenarioDetail(
        **summary.model_dump(),
        metrics_data=scenario.metrics_data,
        comparison_data=scenario.comparison_data,
        allocations=allocations,
        timeline_changes=timeline_changes,
        resource_changes=resource_changes,
    )


@router.put("/scenarios/{scenario_id}", response_model=ScenarioSummary)
def update_scenario(scenario_id: int, request: UpdateScenarioRequest, db: Session = Depends(get_db)):
    """Update a scenario's name, description or date range."""
    scenario = get_whatif_scenario(db, scenario_id)

    start_date = request.start_date or scenario.start_date
    end_date = request.end_date or scenario.end_date
    if end_date < start_date:
        raise ScenarioValidationError("End date must be on or after start date")

    if request.name is not None:
        scenario.name = request.name
    if request.description is not None:
        scenario.description = request.description
    scenario.start_date = start_date
    scenario.end_date = end_date
    scenario.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(scenario)

    return scenario_summary(scenario)


@router.delete("/scenarios/{scenario_id}")
def delete_scenario(scenario_id: int, db: Session = Depends(get_db)):
    """Soft-delete a scenario (marks as inactive)."""
    scenario = get_whatif_scenario(db, scenario_id)
    scenario.is_active = False
    scenario.updated_at = datetime.utcnow()
    db.commit()

    return {"status": "deleted", "scenarioId": scenario_id}


# =============================================================================
# Scenario Change Endpoints
# =============================================================================

@router.post(
    "/scenarios/{scenario_id}/projects/{project_id}/timeline",
    response_model=TimelineChangeResponse,
)
def update_project_timeline(
    scenario_id: int,
    project_id: int,
    request: TimelineChangeRequest,
    db: Session = Depends(get_db),
):
    """Record new start/end dates for a project within a scenario."""
    get_whatif_scenario(db, scenario_id)

    if request.new_end_date < request.new_start_date:
        raise ScenarioValidationError("New end date must be on or after new start date")

    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFoundError("Project not found")

    change = upsert_timeline_change(
        db,
        scenario_id=scenario_id,
        project=project,
        new_start_date=request.new_start_date,
        new_end_date=request.new_end_date,
        notes=request.notes,
    )
    return timeline_change_response(change)


@router.delete("/scenarios/{scenario_id}/timeline-changes/{change_id}")
def delete_timeline_change(scenario_id: int, change_id: int, db: Session = Depends(get_db)):
    """Remove a timeline change from a scenario."""
    change = db.query(ScenarioTimelineChange).filter(
        ScenarioTimelineChange.scenario_id == scenario_id,
        ScenarioTimelineChange.id == change_id,
    ).first()
    if not change:
        raise NotFoundError("Timeline change not found")

    db.delete(change)
    db.commit()
    return {"status": "deleted", "changeId": change_id}


def validate_allocation_data(resource_id: int, data: AllocationData):
    """Input checks for the allocation path of the resources endpoint."""
    if not resource_id:
        raise ScenarioValidationError("Resource ID is required")
    if not data.project_id:
        raise ScenarioValidationError("Project ID is required")
    if not data.start_date or not data.end_date:
        raise ScenarioValidationError("Start and end dates are required")
    if data.end_date < data.start_date:
        raise ScenarioValidationError("End date must be on or after start date")
    if not data.utilization or data.utilization < 1 or data.utilization > 100:
        raise ScenarioValidationError("Valid utilization percentage (1-100) is required")


def validate_resource_change(request: ScenarioResourceRequest) -> ChangeType:
    """Input checks for the resource-change path; returns the parsed change type."""
    valid_types = [t.value for t in ChangeType]
    if not request.change_type or request.change_type not in valid_types:
        raise ScenarioValidationError(
            "Valid change type is required",
            details={"allowed": valid_types},
        )

    change_type = ChangeType(request.change_type)
    if change_type == ChangeType.ADD and (not request.resource_name or not request.resource_role):
        raise ScenarioValidationError("Resource name and role are required for new resources")
    if change_type in (ChangeType.REMOVE, ChangeType.MODIFY) and not request.resource_id:
        raise ScenarioValidationError("Resource ID is required for existing resources")
    return change_type


@router.post("/scenarios/{scenario_id}/resources")
def update_scenario_resource(
    scenario_id: int,
    request: ScenarioResourceRequest,
    db: Session = Depends(get_db),
):
    """Add or modify a resource in a scenario.

    With ``resourceId`` and ``allocationData`` this upserts an allocation;
    otherwise it upserts a resource change (ADD / REMOVE / MODIFY).
    """
    get_whatif_scenario(db, scenario_id)

    if request.resource_id and request.allocation_data:
        data = request.allocation_data
        validate_allocation_data(request.resource_id, data)

        if not db.query(Resource).filter(Resource.id == request.resource_id).first():
            raise NotFoundError("Resource not found")
        if not db.query(Project).filter(Project.id == data.project_id).first():
            raise NotFoundError("Project not found")

        allocation = upsert_scenario_allocation(
            db,
            scenario_id=scenario_id,
            resource_id=request.resource_id,
            project_id=data.project_id,
            start_date=data.start_date,
            end_date=data.end_date,
            utilization=data.utilization,
            allocation_id=data.id,
            notes=data.notes,
            billable_rate=data.billable_rate,
            hourly_rate=data.hourly_rate,
            total_hours=data.total_hours,
            skills_required=data.skills_required,
            roles_required=data.roles_required,
        )
        return allocation_response(allocation)

    change_type = validate_resource_change(request)
    if request.resource_id and not db.query(Resource).filter(Resource.id == request.resource_id).first():
        raise NotFoundError("Resource not found")

    change = upsert_resource_change(
        db,
        scenario_id=scenario_id,
        change_type=change_type,
        resource_id=request.resource_id,
        resource_name=request.resource_name,
        resource_role=request.resource_role,
        skills=request.skills,
        hourly_rate=request.hourly_rate,
        billable_rate=request.billable_rate,
        notes=request.notes,
    )
    return resource_change_response(change)


@router.delete("/scenarios/{scenario_id}/allocations/{allocation_id}")
def delete_scenario_allocation(scenario_id: int, allocation_id: int, db: Session = Depends(get_db)):
    """Remove an allocation from a scenario."""
    allocation = db.query(ScenarioAllocation).filter(
        ScenarioAllocation.scenario_id == scenario_id,
        ScenarioAllocation.id == allocation_id,
    ).first()
    if not allocation:
        raise NotFoundError("Scenario allocation not found")

    db.delete(allocation)
    db.commit()
    return {"status": "deleted", "allocationId": allocation_id}


@router.delete("/scenarios/{scenario_id}/resource-changes/{change_id}")
def delete_resource_change(scenario_id: int, change_id: int, db: Session = Depends(get_db)):
    """Remove a resource change from a scenario."""
    change = db.query(ScenarioResourceChange).filter(
        ScenarioResourceChange.scenario_id == scenario_id,
        ScenarioResourceChange.id == change_id,
    ).first()
    if not change:
        raise NotFoundError("Resource change not found")

    db.delete(change)
    db.commit()
    return {"status": "deleted", "changeId": change_id}


# =============================================================================
# Metrics, Comparison and Promotion
# =============================================================================

@router.post("/scenarios/{scenario_id}/calculate-metrics")
def calculate_metrics(scenario_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Recalculate and store the scenario's metrics document."""
    return calculate_scenario_metrics(db, scenario_id)


@router.post("/compare")
def compare_scenarios(request: CompareScenariosRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Compare precomputed metrics of two or more scenarios.

    The comparison is saved when a name is given.
    """
    return run_comparison(
        db,
        scenario_ids=request.scenario_ids,
        metrics=request.metrics,
        name=request.name,
        description=request.description,
    )


@router.get("/comparisons")
def list_comparisons(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    """List saved comparisons, newest first."""
    return list_saved_comparisons(db)


@router.get("/comparisons/{comparison_id}")
def get_comparison(comparison_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Get a saved comparison."""
    return get_saved_comparison(db, comparison_id)


@router.post("/scenarios/{scenario_id}/promote", response_model=PromotionResponse)
def promote_scenario(scenario_id: int, db: Session = Depends(get_db)):
    """Apply the scenario's changes to the live tables and deactivate it."""
    result = run_promotion(db, scenario_id)
    return PromotionResponse(message="Scenario promoted successfully", **result.to_dict())
