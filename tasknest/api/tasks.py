"""
Task endpoints, nested under projects for creation and listing.
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.core.deps import Audit, CurrentActor, authorize, client_ip, get_db
from tasknest.core.exceptions import NotFoundError
from tasknest.core.policy import Action, Target
from tasknest.models.task import TaskPriority, TaskStatus
from tasknest.schemas.common import Envelope, MessageResponse
from tasknest.schemas.task import TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from tasknest.services.audit_recorder import AuditAction
from tasknest.services.project_service import ProjectService
from tasknest.services.task_service import TaskService

router = APIRouter(tags=["Tasks"])


@router.post(
    "/projects/{project_id}/tasks",
    response_model=Envelope[TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    project_id: UUID,
    data: TaskCreate,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Create a task in a project."""
    project = await ProjectService(db).get_by_id(project_id, actor.tenant_id)
    if project is None:
        raise NotFoundError("Project")

    authorize(actor, Action.CREATE_TASK, Target.of(tenant_id=project.tenant_id))
    task = await TaskService(db).create(project, data)

    background_tasks.add_task(
        audit.record,
        AuditAction.CREATE_TASK,
        "task",
        task.id,
        tenant_id=task.tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return Envelope(
        message="Task created successfully",
        data=TaskResponse.model_validate(task),
    )


@router.get("/projects/{project_id}/tasks", response_model=Envelope[list[TaskResponse]])
async def list_tasks(
    project_id: UUID,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    assigned_to: UUID | None = None,
    search: str | None = None,
):
    """List a project's tasks, most urgent first."""
    project = await ProjectService(db).get_by_id(project_id, actor.tenant_id)
    if project is None:
        raise NotFoundError("Project")

    authorize(actor, Action.LIST_TASKS, Target.of(tenant_id=project.tenant_id))
    tasks = await TaskService(db).list_tasks(
        project.id,
        project.tenant_id,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
    )
    return Envelope(data=[TaskResponse.model_validate(t) for t in tasks])


@router.patch("/tasks/{task_id}/status", response_model=Envelope[TaskResponse])
async def update_task_status(
    task_id: UUID,
    data: TaskStatusUpdate,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Move a task to another status."""
    service = TaskService(db)
    task = await service.get_by_id(task_id, actor.tenant_id)
    if task is None:
        raise NotFoundError("Task")

    authorize(actor, Action.UPDATE_TASK, Target.of(tenant_id=task.tenant_id, fields={"status"}))
    task = await service.set_status(task, data.status)

    background_tasks.add_task(
        audit.record,
        AuditAction.UPDATE_TASK_STATUS,
        "task",
        task.id,
        tenant_id=task.tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return Envelope(
        message="Task status updated successfully",
        data=TaskResponse.model_validate(task),
    )


@router.put("/tasks/{task_id}", response_model=Envelope[TaskResponse])
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Update a task."""
    service = TaskService(db)
    task = await service.get_by_id(task_id, actor.tenant_id)
    if task is None:
        raise NotFoundError("Task")

    changes = data.changes()
    authorize(actor, Action.UPDATE_TASK, Target.of(tenant_id=task.tenant_id, fields=changes))
    task = await service.update(task, changes)

    background_tasks.add_task(
        audit.record,
        AuditAction.UPDATE_TASK,
        "task",
        task.id,
        tenant_id=task.tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return Envelope(
        message="Task updated successfully",
        data=TaskResponse.model_validate(task),
    )


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: UUID,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Delete a task."""
    service = TaskService(db)
    task = await service.get_by_id(task_id, actor.tenant_id)
    if task is None:
        raise NotFoundError("Task")

    authorize(actor, Action.DELETE_TASK, Target.of(tenant_id=task.tenant_id))
    tenant_id = task.tenant_id
    await service.delete(task)

    background_tasks.add_task(
        audit.record,
        AuditAction.DELETE_TASK,
        "task",
        task_id,
        tenant_id=tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return MessageResponse(message="Task deleted successfully")
