"""
Tenant user management endpoints.
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.core.deps import Audit, CurrentActor, authorize, client_ip, get_db
from tasknest.core.exceptions import NotFoundError
from tasknest.core.policy import Action, Target
from tasknest.models.user import UserRole
from tasknest.schemas.common import Envelope, MessageResponse, PaginatedResponse
from tasknest.schemas.user import UserCreate, UserResponse, UserUpdate
from tasknest.services.audit_recorder import AuditAction
from tasknest.services.quota_service import QuotaService, ResourceKind
from tasknest.services.tenant_service import TenantService
from tasknest.services.user_service import UserService

router = APIRouter(tags=["Users"])


@router.post(
    "/tenants/{tenant_id}/users",
    response_model=Envelope[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_user(
    tenant_id: UUID,
    data: UserCreate,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Add a user to a tenant, within the tenant's user limit."""
    authorize(actor, Action.CREATE_USER, Target.of(tenant_id=tenant_id))

    await QuotaService(db).enforce(tenant_id, ResourceKind.USER)

    user = await UserService(db).create(
        email=data.email,
        password=data.password,
        full_name=data.full_name,
        tenant_id=tenant_id,
        role=UserRole(data.role),
    )

    background_tasks.add_task(
        audit.record,
        AuditAction.CREATE_USER,
        "user",
        user.id,
        tenant_id=tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return Envelope(
        message="User created successfully",
        data=UserResponse.model_validate(user),
    )


@router.get(
    "/tenants/{tenant_id}/users",
    response_model=Envelope[PaginatedResponse[UserResponse]],
)
async def list_users(
    tenant_id: UUID,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    search: str | None = None,
    role: UserRole | None = None,
):
    """List a tenant's users."""
    authorize(actor, Action.LIST_USERS, Target.of(tenant_id=tenant_id))

    if await TenantService(db).get_by_id(tenant_id) is None:
        raise NotFoundError("Tenant")

    users, total = await UserService(db).list_users(tenant_id, page, per_page, search, role)
    return Envelope(
        data=PaginatedResponse.create(
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=page,
            per_page=per_page,
        )
    )


@router.put("/users/{user_id}", response_model=Envelope[UserResponse])
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Update a user. Plain users may only change their own full name."""
    service = UserService(db)
    user = await service.get_by_id(user_id, actor.tenant_id)
    if user is None:
        raise NotFoundError("User")

    changes = data.changes()
    authorize(
        actor,
        Action.UPDATE_USER,
        Target.of(tenant_id=user.tenant_id, user_id=user.id, fields=changes, role=user.role),
    )

    if changes.get("role") is not None:
        changes["role"] = UserRole(changes["role"])
    user = await service.update(user, changes)

    background_tasks.add_task(
        audit.record,
        AuditAction.UPDATE_USER,
        "user",
        user.id,
        tenant_id=user.tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return Envelope(
        message="User updated successfully",
        data=UserResponse.model_validate(user),
    )


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Delete a user. Nobody can delete their own account."""
    # Self-deletion is refused before the lookup, even for a super admin.
    authorize(actor, Action.DELETE_USER, Target.of(tenant_id=actor.tenant_id, user_id=user_id))

    service = UserService(db)
    user = await service.get_by_id(user_id, actor.tenant_id)
    if user is None:
        raise NotFoundError("User")

    authorize(actor, Action.DELETE_USER, Target.of(tenant_id=user.tenant_id, user_id=user.id))
    tenant_id = user.tenant_id
    await service.delete(user)

    background_tasks.add_task(
        audit.record,
        AuditAction.DELETE_USER,
        "user",
        user_id,
        tenant_id=tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return MessageResponse(message="User deleted successfully")
