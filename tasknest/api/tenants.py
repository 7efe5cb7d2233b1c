"""
Tenant management endpoints.
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.core.deps import Audit, CurrentActor, SuperAdmin, authorize, client_ip, get_db
from tasknest.core.exceptions import NotFoundError
from tasknest.core.policy import Action, Target
from tasknest.models.tenant import TenantStatus
from tasknest.schemas.common import Envelope, MessageResponse, PaginatedResponse
from tasknest.schemas.tenant import TenantDetailResponse, TenantResponse, TenantUpdate
from tasknest.services.audit_recorder import AuditAction
from tasknest.services.tenant_service import TenantService

router = APIRouter(prefix="/tenants", tags=["Tenants"])


def _detail(tenant, stats) -> TenantDetailResponse:
    return TenantDetailResponse(
        **TenantResponse.model_validate(tenant).model_dump(),
        stats=stats,
    )


@router.get("", response_model=Envelope[PaginatedResponse[TenantDetailResponse]])
async def list_tenants(
    actor: SuperAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    status: TenantStatus | None = None,
):
    """List all tenants (super admin only)."""
    authorize(actor, Action.LIST_TENANTS)

    rows, total = await TenantService(db).list_tenants(page, per_page, status)
    return Envelope(
        data=PaginatedResponse.create(
            items=[_detail(tenant, stats) for tenant, stats in rows],
            total=total,
            page=page,
            per_page=per_page,
        )
    )


@router.get("/{tenant_id}", response_model=Envelope[TenantDetailResponse])
async def get_tenant(
    tenant_id: UUID,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a tenant with its usage counters."""
    authorize(actor, Action.VIEW_TENANT, Target.of(tenant_id=tenant_id))

    found = await TenantService(db).get_with_stats(tenant_id)
    if found is None:
        raise NotFoundError("Tenant")

    tenant, stats = found
    return Envelope(data=_detail(tenant, stats))


@router.put("/{tenant_id}", response_model=Envelope[TenantResponse])
async def update_tenant(
    tenant_id: UUID,
    data: TenantUpdate,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Update a tenant. Tenant admins may only rename their own tenant."""
    changes = data.changes()
    authorize(actor, Action.UPDATE_TENANT, Target.of(tenant_id=tenant_id, fields=changes))

    service = TenantService(db)
    tenant = await service.get_by_id(tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant")

    tenant = await service.update(tenant, changes)

    background_tasks.add_task(
        audit.record,
        AuditAction.UPDATE_TENANT,
        "tenant",
        tenant.id,
        tenant_id=tenant.id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return Envelope(
        message="Tenant updated successfully",
        data=TenantResponse.model_validate(tenant),
    )


@router.delete("/{tenant_id}", response_model=MessageResponse)
async def delete_tenant(
    tenant_id: UUID,
    actor: SuperAdmin,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Delete a tenant with all of its users, projects and tasks."""
    authorize(actor, Action.DELETE_TENANT, Target.of(tenant_id=tenant_id))

    service = TenantService(db)
    tenant = await service.get_by_id(tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant")

    await service.delete(tenant)

    background_tasks.add_task(
        audit.record,
        AuditAction.DELETE_TENANT,
        "tenant",
        tenant_id,
        tenant_id=tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return MessageResponse(message="Tenant deleted successfully")
