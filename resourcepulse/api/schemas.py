"""
Pydantic schemas for the what-if scenario API.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Requests
# =============================================================================

class CreateScenarioRequest(CamelModel):
    """Request to create a what-if scenario."""
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    base_scenario_id: Optional[int] = None
    start_date: date
    end_date: date
    clone_from_base_scenario: bool = False


class UpdateScenarioRequest(CamelModel):
    """Partial update of a scenario's descriptive fields."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TimelineChangeRequest(CamelModel):
    """Proposed new dates for a project."""
    new_start_date: date
    new_end_date: date
    notes: Optional[str] = None


class AllocationData(CamelModel):
    """Allocation fields of a scenario resource request.

    Fields are optional here so the route can report which one is missing.
    """
    id: Optional[int] = None
    project_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    utilization: Optional[int] = None
    notes: Optional[str] = None
    billable_rate: Optional[float] = None
    hourly_rate: Optional[float] = None
    total_hours: Optional[int] = None
    skills_required: Optional[Any] = None
    roles_required: Optional[Any] = None


class ScenarioResourceRequest(CamelModel):
    """Dual-purpose body: an allocation upsert when resource_id and
    allocation_data are both present, otherwise a resource change."""
    resource_id: Optional[int] = None
    allocation_data: Optional[AllocationData] = None

    resource_name: Optional[str] = None
    resource_role: Optional[str] = None
    skills: Optional[Any] = None
    hourly_rate: Optional[float] = None
    billable_rate: Optional[float] = None
    change_type: Optional[str] = None
    notes: Optional[str] = None


class CompareScenariosRequest(CamelModel):
    """Request to compare precomputed metrics of several scenarios."""
    scenario_ids: List[int] = []
    name: Optional[str] = None
    description: Optional[str] = None
    metrics: List[str] = []


# =============================================================================
# Responses
# =============================================================================

class ScenarioSummary(CamelModel):
    """Scenario as listed."""
    id: int
    name: str
    description: Optional[str] = None
    type: str
    base_scenario_id: Optional[int] = None
    start_date: date
    end_date: date
    is_active: bool
    created_at: Optional[datetime] = None


class AllocationResponse(CamelModel):
    """Scenario allocation with resource and project names."""
    id: int
    resource_id: int
    resource_name: Optional[str] = None
    project_id: int
    project_name: Optional[str] = None
    start_date: date
    end_date: date
    utilization: int
    billable_rate: Optional[float] = None
    hourly_rate: Optional[float] = None
    total_hours: Optional[int] = None
    skills_required: Optional[List[Dict[str, Any]]] = None
    roles_required: Optional[List[Any]] = None
    notes: Optional[str] = None


class TimelineChangeResponse(CamelModel):
    """Scenario timeline change."""
    id: int
    project_id: int
    project_name: Optional[str] = None
    original_start_date: Optional[date] = None
    original_end_date: Optional[date] = None
    new_start_date: date
    new_end_date: date
    notes: Optional[str] = None


class ResourceChangeResponse(CamelModel):
    """Scenario resource change."""
    id: int
    resource_id: Optional[int] = None
    resource_name: Optional[str] = None
    resource_role: Optional[str] = None
    skills: Optional[List[Dict[str, Any]]] = None
    hourly_rate: Optional[float] = None
    billable_rate: Optional[float] = None
    change_type: str
    notes: Optional[str] = None


class ScenarioDetail(ScenarioSummary):
    """Scenario with metrics and every recorded change."""
    metrics_data: Optional[Dict[str, Any]] = None
    comparison_data: Optional[Dict[str, Any]] = None
    allocations: List[AllocationResponse] = []
    timeline_changes: List[TimelineChangeResponse] = []
    resource_changes: List[ResourceChangeResponse] = []


class PromotionResponse(CamelModel):
    """Outcome of promoting a scenario."""
    message: str
    scenario_id: int
    projects_updated: int = 0
    resources_created: int = 0
    resources_modified: int = 0
    allocations_created: int = 0
    allocations_updated: int = 0
    allocations_skipped: int = 0


class ErrorResponse(BaseModel):
    """Error envelope for every failed request."""
    message: str
    error: Any = None
