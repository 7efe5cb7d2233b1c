"""
Tenant service for business logic.
"""
import logging
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.config import settings
from tasknest.core.exceptions import ConflictError
from tasknest.models.project import Project
from tasknest.models.task import Task
from tasknest.models.tenant import SubscriptionPlan, Tenant, TenantStatus
from tasknest.models.user import User, UserRole
from tasknest.schemas.auth import RegisterTenantRequest
from tasknest.schemas.tenant import TenantStats
from tasknest.services.updates import apply_changes
from tasknest.services.user_service import UserService

logger = logging.getLogger(__name__)

TENANT_UPDATE_COLUMNS = {
    "name": Tenant.name,
    "status": Tenant.status,
    "subscription_plan": Tenant.subscription_plan,
    "max_users": Tenant.max_users,
    "max_projects": Tenant.max_projects,
}


def stats_columns():
    """Correlated counters of users, projects and tasks per tenant."""
    return (
        select(func.count(User.id))
        .where(User.tenant_id == Tenant.id)
        .correlate(Tenant)
        .scalar_subquery()
        .label("total_users"),
        select(func.count(Project.id))
        .where(Project.tenant_id == Tenant.id)
        .correlate(Tenant)
        .scalar_subquery()
        .label("total_projects"),
        select(func.count(Task.id))
        .where(Task.tenant_id == Tenant.id)
        .correlate(Tenant)
        .scalar_subquery()
        .label("total_tasks"),
    )


class TenantService:
    """Service for tenant operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        """Get tenant by ID."""
        result = await self.db.execute(
            select(Tenant).where(Tenant.id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_by_subdomain(self, subdomain: str, active_only: bool = False) -> Tenant | None:
        """Get tenant by subdomain."""
        query = select(Tenant).where(Tenant.subdomain == subdomain)
        if active_only:
            query = query.where(Tenant.status == TenantStatus.ACTIVE)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_with_stats(self, tenant_id: UUID) -> tuple[Tenant, TenantStats] | None:
        """Get a tenant together with its user/project/task counters."""
        result = await self.db.execute(
            select(Tenant, *stats_columns()).where(Tenant.id == tenant_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        tenant, users, projects, tasks = row
        return tenant, TenantStats(
            total_users=users, total_projects=projects, total_tasks=tasks
        )

    async def list_tenants(
        self,
        page: int = 1,
        per_page: int = 20,
        status: TenantStatus | None = None,
    ) -> tuple[list[tuple[Tenant, TenantStats]], int]:
        """List tenants with pagination, newest first."""
        query = select(Tenant, *stats_columns())
        count_query = select(func.count(Tenant.id))

        if status:
            query = query.where(Tenant.status == status)
            count_query = count_query.where(Tenant.status == status)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar()

        query = query.order_by(Tenant.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)
        result = await self.db.execute(query)

        tenants = [
            (tenant, TenantStats(total_users=u, total_projects=p, total_tasks=t))
            for tenant, u, p, t in result.all()
        ]
        return tenants, total

    async def register(self, data: RegisterTenantRequest) -> tuple[Tenant, User]:
        """Create a tenant and its first tenant admin as one unit.

        Any failure after the tenant insert rolls the whole session back, so
        either both rows exist or neither does.
        """
        if await self.get_by_subdomain(data.subdomain):
            raise ConflictError("Subdomain already taken")

        try:
            tenant = Tenant(
                name=data.tenant_name,
                subdomain=data.subdomain,
                status=TenantStatus.ACTIVE,
                subscription_plan=SubscriptionPlan(settings.DEFAULT_SUBSCRIPTION_PLAN),
                max_users=settings.DEFAULT_MAX_USERS,
                max_projects=settings.DEFAULT_MAX_PROJECTS,
            )
            self.db.add(tenant)
            await self.db.flush()

            admin = await UserService(self.db).create(
                email=data.admin_email,
                password=data.admin_password,
                full_name=data.admin_full_name,
                tenant_id=tenant.id,
                role=UserRole.TENANT_ADMIN,
            )
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Subdomain already taken")
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(tenant)
        logger.info("Registered tenant %s (%s)", tenant.subdomain, tenant.id)
        return tenant, admin

    async def update(self, tenant: Tenant, changes: dict) -> Tenant:
        """Apply an allow-listed partial update to a tenant."""
        apply_changes(tenant, changes, TENANT_UPDATE_COLUMNS)
        await self.db.flush()
        await self.db.refresh(tenant)
        return tenant

    async def delete(self, tenant: Tenant) -> None:
        """Delete a tenant; its users, projects and tasks cascade."""
        await self.db.delete(tenant)
        await self.db.flush()
