"""
Resource quota checks against a tenant's plan limits.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.core.exceptions import NotFoundError, QuotaExceededError
from tasknest.models.project import Project
from tasknest.models.tenant import Tenant
from tasknest.models.user import User

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    USER = "user"
    PROJECT = "project"


@dataclass
class QuotaResult:
    """Result of a quota check."""
    allowed: bool
    kind: ResourceKind
    limit: int
    used: int

    @property
    def remaining(self) -> int:
        return max(self.limit - self.used, 0)


class QuotaService:
    """Compares live resource counts with the tenant's configured maximum.

    The check and the subsequent insert are not atomic; concurrent creations
    may overshoot a limit by one.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def check(self, tenant_id: UUID, kind: ResourceKind) -> QuotaResult:
        tenant = await self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant")

        if kind == ResourceKind.USER:
            limit = tenant.max_users
            count_query = select(func.count(User.id)).where(User.tenant_id == tenant_id)
        else:
            limit = tenant.max_projects
            count_query = select(func.count(Project.id)).where(Project.tenant_id == tenant_id)

        used = (await self.db.execute(count_query)).scalar() or 0
        return QuotaResult(allowed=used < limit, kind=kind, limit=limit, used=used)

    async def enforce(self, tenant_id: UUID, kind: ResourceKind) -> QuotaResult:
        """Raise QuotaExceededError when the tenant is at its limit."""
        result = await self.check(tenant_id, kind)
        if not result.allowed:
            logger.info(
                "Quota reached for tenant %s: %s %d/%d",
                tenant_id,
                kind.value,
                result.used,
                result.limit,
            )
            raise QuotaExceededError(f"{kind.value}s", result.limit)
        return result
