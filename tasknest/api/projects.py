"""
Project management endpoints.
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.core.deps import Audit, CurrentActor, authorize, client_ip, get_db
from tasknest.core.exceptions import BadRequestError, NotFoundError
from tasknest.core.policy import Action, Actor, Target
from tasknest.models.project import ProjectStatus
from tasknest.schemas.common import Envelope, MessageResponse, PaginatedResponse
from tasknest.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from tasknest.services.audit_recorder import AuditAction
from tasknest.services.project_service import ProjectService
from tasknest.services.quota_service import QuotaService, ResourceKind

router = APIRouter(prefix="/projects", tags=["Projects"])


def _require_tenant(actor: Actor) -> UUID:
    if not actor.tenant_id:
        raise BadRequestError("User is not associated with a tenant")
    return actor.tenant_id


@router.post(
    "",
    response_model=Envelope[ProjectResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    data: ProjectCreate,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Create a project in the caller's tenant, within the project limit."""
    tenant_id = _require_tenant(actor)
    authorize(actor, Action.CREATE_PROJECT, Target.of(tenant_id=tenant_id))

    await QuotaService(db).enforce(tenant_id, ResourceKind.PROJECT)

    service = ProjectService(db)
    project = await service.create(tenant_id, actor.user_id, data)

    background_tasks.add_task(
        audit.record,
        AuditAction.CREATE_PROJECT,
        "project",
        project.id,
        tenant_id=tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return Envelope(
        message="Project created successfully",
        data=await service.get_response(project),
    )


@router.get("", response_model=Envelope[PaginatedResponse[ProjectResponse]])
async def list_projects(
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    status: ProjectStatus | None = None,
    search: str | None = None,
):
    """List the caller's tenant projects with task counters."""
    tenant_id = _require_tenant(actor)
    authorize(actor, Action.LIST_PROJECTS, Target.of(tenant_id=tenant_id))

    projects, total = await ProjectService(db).list_projects(
        tenant_id, page, per_page, status, search
    )
    return Envelope(
        data=PaginatedResponse.create(
            items=projects,
            total=total,
            page=page,
            per_page=per_page,
        )
    )


@router.get("/{project_id}", response_model=Envelope[ProjectResponse])
async def get_project(
    project_id: UUID,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a project by ID."""
    service = ProjectService(db)
    project = await service.get_by_id(project_id, actor.tenant_id)
    if project is None:
        raise NotFoundError("Project")

    authorize(actor, Action.VIEW_PROJECT, Target.of(tenant_id=project.tenant_id))
    return Envelope(data=await service.get_response(project))


@router.put("/{project_id}", response_model=Envelope[ProjectResponse])
async def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Update a project. Plain users may only update projects they created."""
    service = ProjectService(db)
    project = await service.get_by_id(project_id, actor.tenant_id)
    if project is None:
        raise NotFoundError("Project")

    changes = data.changes()
    authorize(
        actor,
        Action.UPDATE_PROJECT,
        Target.of(tenant_id=project.tenant_id, owner_id=project.created_by, fields=changes),
    )
    project = await service.update(project, changes)

    background_tasks.add_task(
        audit.record,
        AuditAction.UPDATE_PROJECT,
        "project",
        project.id,
        tenant_id=project.tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return Envelope(
        message="Project updated successfully",
        data=await service.get_response(project),
    )


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: UUID,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Delete a project and all of its tasks."""
    service = ProjectService(db)
    project = await service.get_by_id(project_id, actor.tenant_id)
    if project is None:
        raise NotFoundError("Project")

    authorize(
        actor,
        Action.DELETE_PROJECT,
        Target.of(tenant_id=project.tenant_id, owner_id=project.created_by),
    )
    tenant_id = project.tenant_id
    await service.delete(project)

    background_tasks.add_task(
        audit.record,
        AuditAction.DELETE_PROJECT,
        "project",
        project_id,
        tenant_id=tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return MessageResponse(message="Project deleted successfully")
