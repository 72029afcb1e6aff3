"""Side-by-side comparison of scenario metrics.

Comparisons read the metrics documents already stored on each scenario;
they never recalculate. A comparison given a name is persisted.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from resourcepulse.engine.errors import NotFoundError, ScenarioValidationError

logger = logging.getLogger(__name__)

SUPPORTED_METRICS = ("utilization", "costs", "skills")
TEMPORARY_COMPARISON_NAME = "Temporary Comparison"


def _utilization_entry(scenario, metrics: Dict[str, Any]) -> Dict[str, Any]:
    utilization = metrics.get("utilization", {})
    return {
        "scenarioId": scenario.id,
        "scenarioName": scenario.name,
        "overall": utilization.get("overall", 0),
        "byResource": utilization.get("byResource", {}),
    }


def _costs_entry(scenario, metrics: Dict[str, Any]) -> Dict[str, Any]:
    costs = metrics.get("costs", {})
    return {
        "scenarioId": scenario.id,
        "scenarioName": scenario.name,
        "totalCost": costs.get("totalCost", 0),
        "totalBillable": costs.get("totalBillable", 0),
        "margin": costs.get("margin", 0),
        "byProject": costs.get("byProject", {}),
    }


def _skills_entry(scenario, metrics: Dict[str, Any]) -> Dict[str, Any]:
    coverage = metrics.get("skillsCoverage", {})
    return {
        "scenarioId": scenario.id,
        "scenarioName": scenario.name,
        "coveragePercentage": coverage.get("coveragePercentage", 0),
        "covered": len(coverage.get("covered", [])),
        "missing": len(coverage.get("missing", [])),
    }


METRIC_BUILDERS = {
    "utilization": _utilization_entry,
    "costs": _costs_entry,
    "skills": _skills_entry,
}


def validate_comparison_request(scenario_ids: Optional[List[int]], metrics: Optional[List[str]]):
    """Reject requests that cannot produce a comparison.

    Raises:
        ScenarioValidationError: fewer than two scenarios, no metrics, or an
            unsupported metric name.
    """
    if not scenario_ids or len(scenario_ids) < 2:
        raise ScenarioValidationError("At least two scenario IDs are required")
    if len(set(scenario_ids)) != len(scenario_ids):
        raise ScenarioValidationError("Scenario IDs must be distinct")
    if not metrics:
        raise ScenarioValidationError("At least one metric is required for comparison")

    unknown = [m for m in metrics if m not in SUPPORTED_METRICS]
    if unknown:
        raise ScenarioValidationError(
            f"Unsupported metrics: {', '.join(unknown)}",
            details={"supported": list(SUPPORTED_METRICS)},
        )


def build_comparisons(scenarios: list, metrics: List[str]) -> Dict[str, List[Dict[str, Any]]]:
    """Assemble one parallel list per requested metric, one entry per scenario."""
    comparisons = {}
    for metric in SUPPORTED_METRICS:
        if metric in metrics:
            builder = METRIC_BUILDERS[metric]
            comparisons[metric] = [builder(s, s.metrics_data or {}) for s in scenarios]
    return comparisons


def compare_scenarios(
    db: Session,
    scenario_ids: List[int],
    metrics: List[str],
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Compare precomputed metrics of two or more scenarios.

    Nothing is written unless every check passes and a name is given.

    Raises:
        ScenarioValidationError: invalid request, unknown scenario ids, or
            scenarios without a metrics document.
    """
    from resourcepulse.models import Scenario, ScenarioComparison

    validate_comparison_request(scenario_ids, metrics)

    rows = db.query(Scenario).filter(Scenario.id.in_(scenario_ids)).all()
    by_id = {s.id: s for s in rows}
    missing_ids = [sid for sid in scenario_ids if sid not in by_id]
    if missing_ids:
        raise ScenarioValidationError(
            "One or more scenarios not found",
            details={"missingScenarioIds": missing_ids},
        )

    scenarios = [by_id[sid] for sid in scenario_ids]

    without_metrics = [s for s in scenarios if not s.has_metrics]
    if without_metrics:
        raise ScenarioValidationError(
            "Some scenarios do not have metrics calculated",
            details={"scenariosWithoutMetrics": [{"id": s.id, "name": s.name} for s in without_metrics]},
        )

    start_date = min(s.start_date for s in scenarios)
    end_date = max(s.end_date for s in scenarios)
    comparisons = build_comparisons(scenarios, metrics)

    comparison_id = None
    if name:
        comparison = ScenarioComparison(
            name=name,
            description=description,
            scenario_ids=list(scenario_ids),
            start_date=start_date,
            end_date=end_date,
            metrics=list(metrics),
            comparison_data=comparisons,
        )
        db.add(comparison)
        db.commit()
        db.refresh(comparison)
        comparison_id = comparison.id
        logger.info(f"Saved comparison '{name}' ({comparison_id}) of scenarios {scenario_ids}")

    return {
        "id": comparison_id,
        "name": name or TEMPORARY_COMPARISON_NAME,
        "description": description,
        "scenarios": [{"id": s.id, "name": s.name} for s in scenarios],
        "startDate": start_date.isoformat(),
        "endDate": end_date.isoformat(),
        "metrics": list(metrics),
        "comparisons": comparisons,
    }


def get_saved_comparison(db: Session, comparison_id: int) -> Dict[str, Any]:
    """Load a persisted comparison.

    Raises:
        NotFoundError: if no comparison has this id.
    """
    from resourcepulse.models import ScenarioComparison

    comparison = db.query(ScenarioComparison).filter(ScenarioComparison.id == comparison_id).first()
    if not comparison:
        raise NotFoundError("Comparison not found")
    return comparison_to_dict(comparison)


def list_saved_comparisons(db: Session) -> List[Dict[str, Any]]:
    """All persisted comparisons, newest first."""
    from resourcepulse.models import ScenarioComparison

    rows = db.query(ScenarioComparison).order_by(
        ScenarioComparison.created_at.desc(), ScenarioComparison.id.desc()
    ).all()
    return [comparison_to_dict(c) for c in rows]


def comparison_to_dict(comparison) -> Dict[str, Any]:
    return {
        "id": comparison.id,
        "name": comparison.name,
        "description": comparison.description,
        "scenarioIds": comparison.scenario_ids,
        "startDate": comparison.start_date.isoformat() if comparison.start_date else None,
        "endDate": comparison.end_date.isoformat() if comparison.end_date else None,
        "metrics": comparison.metrics,
        "comparisons": comparison.comparison_data,
        "createdAt": comparison.created_at.isoformat() if comparison.created_at else None,
    }
