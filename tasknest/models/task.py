"""
Task model.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from tasknest.models.base import Base, TenantBaseModel, enum_type


class TaskStatus(str, PyEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(Base, TenantBaseModel):
    """A unit of work inside a project.

    ``tenant_id`` duplicates ``project.tenant_id`` so tenant scoping needs no join.
    """

    __tablename__ = "tasks"

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        enum_type(TaskStatus, "task_status"),
        default=TaskStatus.TODO,
        nullable=False,
    )
    priority = Column(
        enum_type(TaskPriority, "task_priority"),
        default=TaskPriority.MEDIUM,
        nullable=False,
    )
    assigned_to = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    due_date = Column(Date, nullable=True)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User", foreign_keys=[assigned_to], lazy="joined")

    def __repr__(self) -> str:
        return f"<Task {self.title} ({self.status.value})>"
