"""Scenario change models - the hypothetical rows a what-if scenario records.

- ScenarioAllocation: resource-to-project allocation inside a scenario
- ScenarioTimelineChange: proposed new start/end dates for a live project
- ScenarioResourceChange: proposed ADD / REMOVE / MODIFY of a resource

Helper functions below implement the upsert paths used by the API.
"""

import json
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import (
    Column, Integer, String, Numeric, ForeignKey, DateTime, Date, Text, JSON,
    Enum as SQLEnum, UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship, Session

from resourcepulse.database import Base


class ChangeType(str, Enum):
    """Kinds of proposed resource changes."""
    ADD = "ADD"
    REMOVE = "REMOVE"
    MODIFY = "MODIFY"


class ScenarioAllocation(Base):
    """Hypothetical allocation of a live resource to a live project."""

    __tablename__ = "scenario_allocations"

    id = Column(Integer, primary_key=True, index=True)
    scenario_id = Column(Integer, ForeignKey("scenarios.id"), nullable=False, index=True)
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    utilization = Column(Integer, nullable=False)  # percent, 1-100

    # Optional overrides of the resource defaults
    billable_rate = Column(Numeric(10, 2), nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    total_hours = Column(Integer, nullable=True)

    # Skill references (JSON: [{"id": 3}, {"name": "Python"}])
    skills_required = Column(JSON(none_as_null=True), nullable=True)
    # Role names or ids (JSON list)
    roles_required = Column(JSON(none_as_null=True), nullable=True)

    notes = Column(Text, nullable=True)

    # Audit fields
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    scenario = relationship("Scenario", back_populates="allocations")
    resource = relationship("Resource")
    project = relationship("Project")

    __table_args__ = (
        UniqueConstraint('scenario_id', 'resource_id', 'project_id', name='uq_scenario_allocation_triple'),
    )

    def __repr__(self):
        return (
            f"<ScenarioAllocation(scenario_id={self.scenario_id}, resource_id={self.resource_id}, "
            f"project_id={self.project_id}, utilization={self.utilization})>"
        )

    @property
    def resource_name(self) -> Optional[str]:
        return self.resource.name if self.resource else None

    @property
    def project_name(self) -> Optional[str]:
        return self.project.name if self.project else None


class ScenarioTimelineChange(Base):
    """Proposed shift of a live project's dates."""

    __tablename__ = "scenario_timeline_changes"

    id = Column(Integer, primary_key=True, index=True)
    scenario_id = Column(Integer, ForeignKey("scenarios.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)

    # Captured from the live project when the change is first recorded
    original_start_date = Column(Date, nullable=True)
    original_end_date = Column(Date, nullable=True)

    new_start_date = Column(Date, nullable=False)
    new_end_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)

    # Audit fields
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    scenario = relationship("Scenario", back_populates="timeline_changes")
    project = relationship("Project")

    __table_args__ = (
        UniqueConstraint('scenario_id', 'project_id', name='uq_scenario_timeline_project'),
    )

    def __repr__(self):
        return (
            f"<ScenarioTimelineChange(scenario_id={self.scenario_id}, project_id={self.project_id}, "
            f"{self.new_start_date}..{self.new_end_date})>"
        )

    @property
    def project_name(self) -> Optional[str]:
        return self.project.name if self.project else None

    @property
    def start_shift_days(self) -> Optional[int]:
        """Days the start date moves (positive = later)."""
        if self.original_start_date is None:
            return None
        return (self.new_start_date - self.original_start_date).days

    @property
    def end_shift_days(self) -> Optional[int]:
        """Days the end date moves (positive = later)."""
        if self.original_end_date is None:
            return None
        return (self.new_end_date - self.original_end_date).days


class ScenarioResourceChange(Base):
    """Proposed change to the resource pool.

    A NULL resource_id with change_type ADD proposes a brand new resource.
    """

    __tablename__ = "scenario_resource_changes"

    id = Column(Integer, primary_key=True, index=True)
    scenario_id = Column(Integer, ForeignKey("scenarios.id"), nullable=False, index=True)
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=True)

    change_type = Column(SQLEnum(ChangeType), nullable=False)

    resource_name = Column(String(200), nullable=True)
    resource_role = Column(String(100), nullable=True)
    # Skill references (JSON: [{"id": 3}, {"name": "Python"}])
    skills = Column(JSON(none_as_null=True), nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    billable_rate = Column(Numeric(10, 2), nullable=True)
    notes = Column(Text, nullable=True)

    # Audit fields
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    scenario = relationship("Scenario", back_populates="resource_changes")
    resource = relationship("Resource")

    __table_args__ = (
        Index('ix_scenario_resource_change_resource', 'scenario_id', 'resource_id'),
    )

    def __repr__(self):
        return (
            f"<ScenarioResourceChange(scenario_id={self.scenario_id}, resource_id={self.resource_id}, "
            f"change_type={self.change_type.value})>"
        )


# =============================================================================
# Helper Functions
# =============================================================================

def to_decimal(value) -> Optional[Decimal]:
    """Convert an incoming rate to Decimal, treating None/0 as not supplied."""
    if value is None or value == 0:
        return None
    return Decimal(str(value))


def normalize_roles(raw: Any) -> Optional[List[Any]]:
    """Normalize required roles into a JSON list (or None)."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = [raw]
    if not isinstance(raw, list):
        raw = [raw]
    return raw or None


def get_scenario_allocation(
    db: Session,
    scenario_id: int,
    resource_id: int,
    project_id: int,
) -> Optional[ScenarioAllocation]:
    """Find the allocation row for a (scenario, resource, project) triple."""
    return db.query(ScenarioAllocation).filter(
        ScenarioAllocation.scenario_id == scenario_id,
        ScenarioAllocation.resource_id == resource_id,
        ScenarioAllocation.project_id == project_id,
    ).first()


def upsert_scenario_allocation(
    db: Session,
    scenario_id: int,
    resource_id: int,
    project_id: int,
    start_date: date,
    end_date: date,
    utilization: int,
    allocation_id: int = None,
    notes: str = None,
    billable_rate=None,
    hourly_rate=None,
    total_hours: int = None,
    skills_required=None,
    roles_required=None,
) -> ScenarioAllocation:
    """Insert or update a scenario allocation.

    The update target is the row with ``allocation_id`` when it exists in
    this scenario, else the row for the (scenario, resource, project) triple.
    Updating by id may move the row to another resource or project only if
    no other row of the scenario holds that triple.

    Returns:
        The created or updated ScenarioAllocation record.

    Raises:
        ScenarioValidationError: the move would duplicate another row's triple.
    """
    from resourcepulse.engine.errors import ScenarioValidationError
    from resourcepulse.engine.skills import normalize_skill_refs

    existing = None
    if allocation_id:
        existing = db.query(ScenarioAllocation).filter(
            ScenarioAllocation.scenario_id == scenario_id,
            ScenarioAllocation.id == allocation_id,
        ).first()

    if existing is None:
        existing = get_scenario_allocation(db, scenario_id, resource_id, project_id)
    elif (existing.resource_id, existing.project_id) != (resource_id, project_id):
        occupant = get_scenario_allocation(db, scenario_id, resource_id, project_id)
        if occupant is not None:
            raise ScenarioValidationError(
                "Another allocation in this scenario already covers this resource and project",
                details={"allocationId": occupant.id},
            )

    if existing:
        existing.resource_id = resource_id
        existing.project_id = project_id
        existing.start_date = start_date
        existing.end_date = end_date
        existing.utilization = utilization
        existing.notes = notes
        existing.billable_rate = to_decimal(billable_rate)
        existing.hourly_rate = to_decimal(hourly_rate)
        existing.total_hours = total_hours or None
        existing.skills_required = normalize_skill_refs(skills_required)
        existing.roles_required = normalize_roles(roles_required)
        existing.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(existing)
        return existing

    allocation = ScenarioAllocation(
        scenario_id=scenario_id,
        resource_id=resource_id,
        project_id=project_id,
        start_date=start_date,
        end_date=end_date,
        utilization=utilization,
        notes=notes,
        billable_rate=to_decimal(billable_rate),
        hourly_rate=to_decimal(hourly_rate),
        total_hours=total_hours or None,
        skills_required=normalize_skill_refs(skills_required),
        roles_required=normalize_roles(roles_required),
    )
    db.add(allocation)
    db.commit()
    db.refresh(allocation)
    return allocation


def upsert_timeline_change(
    db: Session,
    scenario_id: int,
    project,
    new_start_date: date,
    new_end_date: date,
    notes: str = None,
) -> ScenarioTimelineChange:
    """Insert or update the timeline change for a (scenario, project) pair.

    Original dates are captured from the live project on first insert. The
    scenario's allocations on that project are clamped into the new window.
    """
    existing = db.query(ScenarioTimelineChange).filter(
        ScenarioTimelineChange.scenario_id == scenario_id,
        ScenarioTimelineChange.project_id == project.id,
    ).first()

    if existing:
        existing.new_start_date = new_start_date
        existing.new_end_date = new_end_date
        existing.notes = notes
        existing.updated_at = datetime.utcnow()
        change = existing
    else:
        change = ScenarioTimelineChange(
            scenario_id=scenario_id,
            project_id=project.id,
            original_start_date=project.start_date,
            original_end_date=project.end_date,
            new_start_date=new_start_date,
            new_end_date=new_end_date,
            notes=notes,
        )
        db.add(change)

    allocations = db.query(ScenarioAllocation).filter(
        ScenarioAllocation.scenario_id == scenario_id,
        ScenarioAllocation.project_id == project.id,
    ).all()
    for allocation in allocations:
        if allocation.start_date < new_start_date:
            allocation.start_date = new_start_date
        if allocation.end_date > new_end_date:
            allocation.end_date = new_end_date
        allocation.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(change)
    return change


def upsert_resource_change(
    db: Session,
    scenario_id: int,
    change_type: ChangeType,
    resource_id: int = None,
    resource_name: str = None,
    resource_role: str = None,
    skills=None,
    hourly_rate=None,
    billable_rate=None,
    notes: str = None,
) -> ScenarioResourceChange:
    """Insert or update a resource change.

    Changes for an existing resource are keyed by (scenario, resource_id);
    proposals for brand new resources (no resource_id) are always inserted.
    A REMOVE also drops the scenario's allocations for that resource.
    """
    from resourcepulse.engine.skills import normalize_skill_refs

    existing = None
    if resource_id:
        existing = db.query(ScenarioResourceChange).filter(
            ScenarioResourceChange.scenario_id == scenario_id,
            ScenarioResourceChange.resource_id == resource_id,
        ).first()

    if existing:
        change = existing
        change.updated_at = datetime.utcnow()
    else:
        change = ScenarioResourceChange(scenario_id=scenario_id, resource_id=resource_id or None)
        db.add(change)

    change.change_type = change_type
    change.resource_name = resource_name or None
    change.resource_role = resource_role or None
    change.skills = normalize_skill_refs(skills)
    change.hourly_rate = to_decimal(hourly_rate)
    change.billable_rate = to_decimal(billable_rate)
    change.notes = notes or None

    if change_type == ChangeType.REMOVE and resource_id:
        db.query(ScenarioAllocation).filter(
            ScenarioAllocation.scenario_id == scenario_id,
            ScenarioAllocation.resource_id == resource_id,
        ).delete(synchronize_session=False)

    db.commit()
    db.refresh(change)
    return change


def clone_scenario_allocations(db: Session, base_scenario_id: int, new_scenario_id: int) -> int:
    """Copy every allocation of the base scenario onto the new scenario.

    Does not commit; the caller owns the transaction.

    Returns:
        Number of allocations copied.
    """
    base_allocations = db.query(ScenarioAllocation).filter(
        ScenarioAllocation.scenario_id == base_scenario_id
    ).all()

    for alloc in base_allocations:
        db.add(ScenarioAllocation(
            scenario_id=new_scenario_id,
            resource_id=alloc.resource_id,
            project_id=alloc.project_id,
            start_date=alloc.start_date,
            end_date=alloc.end_date,
            utilization=alloc.utilization,
            notes=alloc.notes,
            billable_rate=alloc.billable_rate,
            hourly_rate=alloc.hourly_rate,
            total_hours=alloc.total_hours,
            skills_required=alloc.skills_required,
            roles_required=alloc.roles_required,
        ))
    return len(base_allocations)
