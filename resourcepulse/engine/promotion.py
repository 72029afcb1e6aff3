"""Scenario promotion - applies a what-if scenario to the live tables.

This is the only place live projects, resources and allocations are written
from a scenario. Everything happens in one transaction:

1. Claim the scenario (active -> inactive) with a conditional update
2. Overwrite project dates from timeline changes
3. Apply resource changes (ADD creates, MODIFY merges rates, REMOVE excludes)
4. Upsert live allocations for every non-removed scenario allocation
5. Commit, or roll back everything on any error
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Any, Set
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from resourcepulse.engine.errors import NotFoundError, PromotionConflictError
from resourcepulse.models import (
    Allocation,
    ChangeType,
    Project,
    Resource,
    Scenario,
    ScenarioAllocation,
    ScenarioResourceChange,
    ScenarioTimelineChange,
    ScenarioType,
)

logger = logging.getLogger(__name__)


@dataclass
class PromotionResult:
    """Counts of live rows touched by a promotion."""
    scenario_id: int
    projects_updated: int = 0
    resources_created: int = 0
    resources_modified: int = 0
    allocations_created: int = 0
    allocations_updated: int = 0
    allocations_skipped: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _claim_scenario(db: Session, scenario_id: int):
    """Flip is_active to false, only if it is still true.

    Of two concurrent promotions exactly one sees a row affected.
    """
    result = db.execute(
        update(Scenario)
        .where(Scenario.id == scenario_id, Scenario.is_active.is_(True))
        .values(is_active=False, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise PromotionConflictError(
            "Scenario has already been promoted or is inactive",
            details={"scenarioId": scenario_id},
        )


def _apply_timeline_changes(db: Session, scenario_id: int, result: PromotionResult):
    changes = db.query(ScenarioTimelineChange).filter(
        ScenarioTimelineChange.scenario_id == scenario_id
    ).order_by(ScenarioTimelineChange.id).all()

    for change in changes:
        project = db.query(Project).filter(Project.id == change.project_id).first()
        if not project:
            raise NotFoundError(f"Project {change.project_id} not found")
        project.start_date = change.new_start_date
        project.end_date = change.new_end_date
        project.updated_at = datetime.utcnow()
        result.projects_updated += 1


def _apply_resource_changes(db: Session, scenario_id: int, result: PromotionResult) -> Set[int]:
    """Apply ADD/MODIFY changes and return ids of resources marked REMOVE.

    REMOVE never deletes the live resource. Skills on new resources are not
    propagated to the live schema.
    """
    changes = db.query(ScenarioResourceChange).filter(
        ScenarioResourceChange.scenario_id == scenario_id
    ).order_by(ScenarioResourceChange.id).all()

    removed_ids = set()
    for change in changes:
        if change.change_type == ChangeType.ADD and not change.resource_id:
            db.add(Resource(
                name=change.resource_name,
                role=change.resource_role,
                hourly_rate=change.hourly_rate,
                billable_rate=change.billable_rate,
            ))
            result.resources_created += 1
        elif change.change_type == ChangeType.MODIFY and change.resource_id:
            resource = db.query(Resource).filter(Resource.id == change.resource_id).first()
            if not resource:
                raise NotFoundError(f"Resource {change.resource_id} not found")
            if change.hourly_rate is not None:
                resource.hourly_rate = change.hourly_rate
            if change.billable_rate is not None:
                resource.billable_rate = change.billable_rate
            resource.updated_at = datetime.utcnow()
            result.resources_modified += 1
        elif change.change_type == ChangeType.REMOVE and change.resource_id:
            removed_ids.add(change.resource_id)

    db.flush()
    return removed_ids


def _upsert_live_allocation(db: Session, allocation: ScenarioAllocation) -> bool:
    """Write one scenario allocation to the live table.

    Returns:
        True if a new live row was created, False if an existing one was updated.
    """
    existing = db.query(Allocation).filter(
        Allocation.resource_id == allocation.resource_id,
        Allocation.project_id == allocation.project_id,
    ).first()

    target = existing or Allocation(
        resource_id=allocation.resource_id,
        project_id=allocation.project_id,
    )
    target.start_date = allocation.start_date
    target.end_date = allocation.end_date
    target.utilization = allocation.utilization
    target.notes = allocation.notes
    target.billable_rate = allocation.billable_rate
    target.hourly_rate = allocation.hourly_rate
    target.total_hours = allocation.total_hours

    if existing:
        target.updated_at = datetime.utcnow()
        db.flush()
        return False

    db.add(target)
    db.flush()
    return True


def _apply_allocations(db: Session, scenario_id: int, removed_ids: Set[int], result: PromotionResult):
    allocations = db.query(ScenarioAllocation).filter(
        ScenarioAllocation.scenario_id == scenario_id
    ).order_by(ScenarioAllocation.id).all()

    for allocation in allocations:
        if allocation.resource_id in removed_ids:
            logger.warning(
                f"Skipping allocation of removed resource {allocation.resource_id} "
                f"to project {allocation.project_id} in scenario {scenario_id}"
            )
            result.allocations_skipped += 1
            continue

        if _upsert_live_allocation(db, allocation):
            result.allocations_created += 1
        else:
            result.allocations_updated += 1


def promote_scenario(db: Session, scenario_id: int) -> PromotionResult:
    """Apply every recorded change of a what-if scenario to the live tables.

    All-or-nothing: any error rolls back every write of this call and is
    re-raised.

    Raises:
        NotFoundError: the scenario does not exist or is not a what-if scenario.
        PromotionConflictError: the scenario is already inactive.
    """
    result = PromotionResult(scenario_id=scenario_id)

    try:
        scenario = db.query(Scenario).filter(
            Scenario.id == scenario_id,
            Scenario.scenario_type == ScenarioType.WHATIF,
        ).first()
        if not scenario:
            raise NotFoundError("What-if scenario not found")

        _claim_scenario(db, scenario_id)
        _apply_timeline_changes(db, scenario_id, result)
        removed_ids = _apply_resource_changes(db, scenario_id, result)
        _apply_allocations(db, scenario_id, removed_ids, result)

        db.commit()
    except (NotFoundError, PromotionConflictError):
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Promotion of scenario {scenario_id} failed, rolled back: {e}")
        raise

    logger.info(
        f"Promoted scenario {scenario_id}: {result.projects_updated} projects, "
        f"{result.resources_created} new resources, {result.resources_modified} modified resources, "
        f"{result.allocations_created} created / {result.allocations_updated} updated / "
        f"{result.allocations_skipped} skipped allocations"
    )
    return result
