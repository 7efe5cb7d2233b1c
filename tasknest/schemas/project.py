"""
Project schemas.
"""
from uuid import UUID

from pydantic import Field

from tasknest.models.project import ProjectStatus
from tasknest.schemas.common import IDSchema, RequestSchema, TimestampSchema


class ProjectCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE


class ProjectUpdate(RequestSchema):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus | None = None


class ProjectResponse(IDSchema, TimestampSchema):
    """Project with its task counters."""

    tenant_id: UUID
    name: str
    description: str | None = None
    status: ProjectStatus
    created_by: UUID | None = None
    task_count: int = 0
    completed_task_count: int = 0
