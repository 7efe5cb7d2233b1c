"""
Project model.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from tasknest.models.base import Base, TenantBaseModel, enum_type


class ProjectStatus(str, PyEnum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    COMPLETED = "completed"


class Project(Base, TenantBaseModel):
    """A tenant-owned project grouping tasks."""

    __tablename__ = "projects"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        enum_type(ProjectStatus, "project_status"),
        default=ProjectStatus.ACTIVE,
        nullable=False,
    )
    created_by = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    tenant = relationship("Tenant", back_populates="projects")
    creator = relationship("User", foreign_keys=[created_by])
    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Project {self.name}>"
