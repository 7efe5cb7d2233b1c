"""
Task schemas.
"""
from datetime import date
from uuid import UUID

from pydantic import Field

from tasknest.models.task import TaskPriority, TaskStatus
from tasknest.schemas.common import BaseSchema, IDSchema, RequestSchema, TimestampSchema


class TaskCreate(RequestSchema):
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: UUID | None = None
    due_date: date | None = None


class TaskUpdate(RequestSchema):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: UUID | None = None
    due_date: date | None = None


class TaskStatusUpdate(RequestSchema):
    status: TaskStatus


class AssigneeSummary(BaseSchema):
    id: UUID
    full_name: str
    email: str


class TaskResponse(IDSchema, TimestampSchema):
    project_id: UUID
    tenant_id: UUID
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    assigned_to: UUID | None = None
    assignee: AssigneeSummary | None = None
    due_date: date | None = None
