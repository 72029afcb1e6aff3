"""Live project and allocation models."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Numeric, ForeignKey, DateTime, Date, Text, Index
)
from sqlalchemy.orm import relationship

from resourcepulse.database import Base


class Project(Base):
    """A project resources are allocated to."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # Audit fields
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    allocations = relationship("Allocation", back_populates="project")

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}')>"


class Allocation(Base):
    """Live (production) allocation of a resource to a project."""

    __tablename__ = "allocations"

    id = Column(Integer, primary_key=True, index=True)
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    utilization = Column(Integer, nullable=False)  # percent, 1-100

    notes = Column(Text, nullable=True)
    billable_rate = Column(Numeric(10, 2), nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    total_hours = Column(Integer, nullable=True)

    # Audit fields
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    resource = relationship("Resource", back_populates="allocations")
    project = relationship("Project", back_populates="allocations")

    __table_args__ = (
        Index('ix_allocations_resource_project', 'resource_id', 'project_id'),
    )

    def __repr__(self):
        return (
            f"<Allocation(resource_id={self.resource_id}, project_id={self.project_id}, "
            f"utilization={self.utilization})>"
        )
