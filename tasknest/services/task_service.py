"""
Task service for business logic.
"""
from uuid import UUID

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from tasknest.core.exceptions import BadRequestError
from tasknest.models.project import Project
from tasknest.models.task import Task, TaskPriority, TaskStatus
from tasknest.models.user import User
from tasknest.schemas.task import TaskCreate
from tasknest.services.updates import apply_changes

TASK_UPDATE_COLUMNS = {
    "title": Task.title,
    "description": Task.description,
    "status": Task.status,
    "priority": Task.priority,
    "assigned_to": Task.assigned_to,
    "due_date": Task.due_date,
}

PRIORITY_RANK = case(
    (Task.priority == TaskPriority.HIGH, 0),
    (Task.priority == TaskPriority.MEDIUM, 1),
    else_=2,
)


class TaskService:
    """Service for task operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, task_id: UUID, tenant_id: UUID | None = None) -> Task | None:
        """Get task (with its assignee) by ID, optionally filtering by tenant."""
        query = (
            select(Task)
            .options(joinedload(Task.assignee))
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        if tenant_id:
            query = query.where(Task.tenant_id == tenant_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def ensure_assignee(self, tenant_id: UUID, user_id: UUID | None) -> None:
        """An assignee must be a user of the task's own tenant."""
        if user_id is None:
            return
        result = await self.db.execute(
            select(User.id).where(User.id == user_id, User.tenant_id == tenant_id)
        )
        if result.scalar_one_or_none() is None:
            raise BadRequestError("Invalid assignee")

    async def list_tasks(
        self,
        project_id: UUID,
        tenant_id: UUID,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        assigned_to: UUID | None = None,
        search: str | None = None,
    ) -> list[Task]:
        """List a project's tasks, highest priority and earliest due date first."""
        query = (
            select(Task)
            .options(joinedload(Task.assignee))
            .where(Task.project_id == project_id, Task.tenant_id == tenant_id)
        )
        if status:
            query = query.where(Task.status == status)
        if priority:
            query = query.where(Task.priority == priority)
        if assigned_to:
            query = query.where(Task.assigned_to == assigned_to)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(Task.title).like(pattern),
                    func.lower(Task.description).like(pattern),
                )
            )

        query = query.order_by(
            PRIORITY_RANK,
            Task.due_date.is_(None),
            Task.due_date.asc(),
            Task.created_at.asc(),
        )
        result = await self.db.execute(query)
        return list(result.scalars().unique().all())

    async def create(self, project: Project, data: TaskCreate) -> Task:
        """Create a task inside ``project``, inheriting its tenant."""
        await self.ensure_assignee(project.tenant_id, data.assigned_to)

        task = Task(
            project_id=project.id,
            tenant_id=project.tenant_id,
            title=data.title,
            description=data.description,
            status=TaskStatus.TODO,
            priority=data.priority,
            assigned_to=data.assigned_to,
            due_date=data.due_date,
        )
        self.db.add(task)
        await self.db.flush()
        return await self.get_by_id(task.id)

    async def update(self, task: Task, changes: dict) -> Task:
        """Apply an allow-listed partial update to a task."""
        if changes.get("assigned_to") is not None:
            await self.ensure_assignee(task.tenant_id, changes["assigned_to"])
        apply_changes(task, changes, TASK_UPDATE_COLUMNS)
        await self.db.flush()
        return await self.get_by_id(task.id)

    async def set_status(self, task: Task, status: TaskStatus) -> Task:
        """Set a task's status; repeating the same status is a no-op."""
        return await self.update(task, {"status": status})

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.flush()
