"""SQLAlchemy models."""

from .resource import Resource, Skill, Role
from .project import Project, Allocation
from .scenario import Scenario, ScenarioType, ScenarioComparison
from .scenario_changes import (
    ChangeType,
    ScenarioAllocation,
    ScenarioTimelineChange,
    ScenarioResourceChange,
)

__all__ = [
    'Resource',
    'Skill',
    'Role',
    'Project',
    'Allocation',
    'Scenario',
    'ScenarioType',
    'ScenarioComparison',
    'ChangeType',
    'ScenarioAllocation',
    'ScenarioTimelineChange',
    'ScenarioResourceChange',
]
