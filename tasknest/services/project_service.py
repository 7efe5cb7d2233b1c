"""
Project service for business logic.
"""
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.models.project import Project, ProjectStatus
from tasknest.models.task import Task, TaskStatus
from tasknest.schemas.project import ProjectCreate, ProjectResponse
from tasknest.services.updates import apply_changes

PROJECT_UPDATE_COLUMNS = {
    "name": Project.name,
    "description": Project.description,
    "status": Project.status,
}


def task_count_columns():
    """Correlated task counters for a project row."""
    return (
        select(func.count(Task.id))
        .where(Task.project_id == Project.id)
        .correlate(Project)
        .scalar_subquery()
        .label("task_count"),
        select(func.count(Task.id))
        .where(Task.project_id == Project.id, Task.status == TaskStatus.COMPLETED)
        .correlate(Project)
        .scalar_subquery()
        .label("completed_task_count"),
    )


def to_response(project: Project, task_count: int = 0, completed_task_count: int = 0) -> ProjectResponse:
    return ProjectResponse(
        **project.to_dict(),
        task_count=task_count,
        completed_task_count=completed_task_count,
    )


class ProjectService:
    """Service for project operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, project_id: UUID, tenant_id: UUID | None = None) -> Project | None:
        """Get project by ID, optionally filtering by tenant."""
        query = select(Project).where(Project.id == project_id)
        if tenant_id:
            query = query.where(Project.tenant_id == tenant_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_response(self, project: Project) -> ProjectResponse:
        """Serialize a project with fresh task counters."""
        task_count, completed = task_count_columns()
        result = await self.db.execute(
            select(task_count, completed).select_from(Project).where(Project.id == project.id)
        )
        counts = result.one()
        return to_response(project, counts.task_count, counts.completed_task_count)

    async def list_projects(
        self,
        tenant_id: UUID,
        page: int = 1,
        per_page: int = 20,
        status: ProjectStatus | None = None,
        search: str | None = None,
    ) -> tuple[list[ProjectResponse], int]:
        """List a tenant's projects with task counters, newest first."""
        filters = [Project.tenant_id == tenant_id]
        if status:
            filters.append(Project.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            filters.append(
                or_(
                    func.lower(Project.name).like(pattern),
                    func.lower(Project.description).like(pattern),
                )
            )

        total_result = await self.db.execute(select(func.count(Project.id)).where(*filters))
        total = total_result.scalar()

        query = (
            select(Project, *task_count_columns())
            .where(*filters)
            .order_by(Project.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.db.execute(query)
        projects = [
            to_response(project, task_count, completed)
            for project, task_count, completed in result.all()
        ]
        return projects, total

    async def create(self, tenant_id: UUID, created_by: UUID, data: ProjectCreate) -> Project:
        """Create a new project."""
        project = Project(
            tenant_id=tenant_id,
            name=data.name,
            description=data.description,
            status=data.status,
            created_by=created_by,
        )
        self.db.add(project)
        await self.db.flush()
        await self.db.refresh(project)
        return project

    async def update(self, project: Project, changes: dict) -> Project:
        """Apply an allow-listed partial update to a project."""
        apply_changes(project, changes, PROJECT_UPDATE_COLUMNS)
        await self.db.flush()
        await self.db.refresh(project)
        return project

    async def delete(self, project: Project) -> None:
        """Delete a project together with its tasks."""
        await self.db.delete(project)
        await self.db.flush()
