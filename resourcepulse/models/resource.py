"""Live resource reference models - people, skills and roles.

These tables belong to the production schema. The what-if subsystem reads
them for rates and skill resolution, and promotion writes new/modified
resources back.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime
from sqlalchemy.orm import relationship

from resourcepulse.database import Base


class Resource(Base):
    """A person that can be allocated to projects."""

    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    role = Column(String(100), nullable=True)

    # Default rates, overridable per allocation
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    billable_rate = Column(Numeric(10, 2), nullable=True)

    # Audit fields
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    allocations = relationship("Allocation", back_populates="resource")

    def __repr__(self):
        return f"<Resource(id={self.id}, name='{self.name}', role='{self.role}')>"


class Skill(Base):
    """Skill reference table."""

    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    category = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<Skill(id={self.id}, name='{self.name}')>"


class Role(Base):
    """Role reference table."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)

    def __repr__(self):
        return f"<Role(id={self.id}, name='{self.name}')>"
