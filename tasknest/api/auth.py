"""
Authentication endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.core.deps import Audit, CurrentActor, client_ip, get_db
from tasknest.core.exceptions import NotFoundError
from tasknest.core.security import access_token_lifetime
from tasknest.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    RegisterTenantRequest,
    RegisterTenantResponse,
    TenantSummary,
)
from tasknest.schemas.common import Envelope, MessageResponse
from tasknest.schemas.user import UserResponse
from tasknest.services.audit_recorder import AuditAction
from tasknest.services.auth_service import AuthService
from tasknest.services.tenant_service import TenantService
from tasknest.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register-tenant",
    response_model=Envelope[RegisterTenantResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_tenant(
    data: RegisterTenantRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Register a new tenant together with its first tenant admin."""
    tenant, admin = await TenantService(db).register(data)

    background_tasks.add_task(
        audit.record,
        AuditAction.REGISTER_TENANT,
        "tenant",
        tenant.id,
        tenant_id=tenant.id,
        user_id=admin.id,
        ip=client_ip(request),
    )
    return Envelope(
        message="Tenant registered successfully",
        data=RegisterTenantResponse(
            tenant_id=tenant.id,
            subdomain=tenant.subdomain,
            admin_user=UserResponse.model_validate(admin),
        ),
    )


@router.post("/login", response_model=Envelope[LoginResponse])
async def login(
    data: LoginRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Audit,
):
    """Authenticate and return a 24h access token."""
    service = AuthService(db)
    user = await service.authenticate(data.email, data.password, data.tenant_subdomain)

    background_tasks.add_task(
        audit.record,
        AuditAction.LOGIN,
        "user",
        user.id,
        tenant_id=user.tenant_id,
        user_id=user.id,
        ip=client_ip(request),
    )
    return Envelope(
        message="Login successful",
        data=LoginResponse(
            user=UserResponse.model_validate(user),
            token=service.issue_token(user),
            expires_in=int(access_token_lifetime().total_seconds()),
        ),
    )


@router.get("/me", response_model=Envelope[MeResponse])
async def get_me(
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Current user with their tenant's plan and limits."""
    user = await UserService(db).get_by_id(actor.user_id)
    if user is None:
        raise NotFoundError("User")

    tenant = None
    if user.tenant_id:
        tenant = await TenantService(db).get_by_id(user.tenant_id)

    me = MeResponse(
        **UserResponse.model_validate(user).model_dump(),
        tenant=TenantSummary.model_validate(tenant) if tenant else None,
    )
    return Envelope(data=me)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    actor: CurrentActor,
    request: Request,
    background_tasks: BackgroundTasks,
    audit: Audit,
):
    """Stateless logout: the client discards its token; the event is audited."""
    background_tasks.add_task(
        audit.record,
        AuditAction.LOGOUT,
        "user",
        actor.user_id,
        tenant_id=actor.tenant_id,
        user_id=actor.user_id,
        ip=client_ip(request),
    )
    return MessageResponse(message="Logged out successfully")
