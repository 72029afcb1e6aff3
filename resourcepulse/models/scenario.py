"""Scenario model - hypothetical capacity plans layered over live data."""

from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Boolean, Enum as SQLEnum, Text, ForeignKey, JSON
)
from sqlalchemy.orm import relationship

from resourcepulse.database import Base


class ScenarioType(str, Enum):
    """Types of capacity scenarios."""
    WHATIF = "WHATIF"
    CAPACITY = "CAPACITY"


class Scenario(Base):
    """Capacity scenario entity.

    A what-if scenario records hypothetical allocations, project timeline
    shifts and resource changes. Its metrics document is recomputed on demand
    and promotion copies the hypothetical changes into the live tables.
    """

    __tablename__ = "scenarios"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    scenario_type = Column(SQLEnum(ScenarioType), nullable=False, default=ScenarioType.WHATIF, index=True)

    # Scenario this one was cloned from
    base_scenario_id = Column(Integer, ForeignKey("scenarios.id"), nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    # Derived snapshots
    metrics_data = Column(JSON(none_as_null=True), nullable=True)
    comparison_data = Column(JSON(none_as_null=True), nullable=True)

    # Flags
    is_active = Column(Boolean, default=True, nullable=False)

    # Audit fields
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    base_scenario = relationship("Scenario", remote_side=[id])
    allocations = relationship(
        "ScenarioAllocation", back_populates="scenario",
        cascade="all, delete-orphan", order_by="ScenarioAllocation.start_date",
    )
    timeline_changes = relationship(
        "ScenarioTimelineChange", back_populates="scenario",
        cascade="all, delete-orphan", order_by="ScenarioTimelineChange.created_at",
    )
    resource_changes = relationship(
        "ScenarioResourceChange", back_populates="scenario",
        cascade="all, delete-orphan", order_by="ScenarioResourceChange.created_at",
    )

    def __repr__(self):
        return f"<Scenario(name='{self.name}', type={self.scenario_type.value})>"

    @property
    def is_whatif(self) -> bool:
        return self.scenario_type == ScenarioType.WHATIF

    @property
    def has_metrics(self) -> bool:
        """Whether a metrics document has been calculated."""
        return bool(self.metrics_data)


class ScenarioComparison(Base):
    """Named, persisted side-by-side comparison of scenario metrics."""

    __tablename__ = "scenario_comparisons"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    # Scenario ids in request order (JSON list)
    scenario_ids = Column(JSON, nullable=False)

    # Date range covering every compared scenario
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # Requested metric names and the assembled comparison
    metrics = Column(JSON, nullable=False)
    comparison_data = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<ScenarioComparison(name='{self.name}', scenarios={self.scenario_ids})>"
