"""
Tenant schemas.
"""
from pydantic import Field

from tasknest.models.tenant import SubscriptionPlan, TenantStatus
from tasknest.schemas.common import BaseSchema, IDSchema, RequestSchema, TimestampSchema


class TenantUpdate(RequestSchema):
    """Update tenant request. Tenant admins may only send ``name``."""

    name: str | None = Field(default=None, min_length=2, max_length=255)
    status: TenantStatus | None = None
    subscription_plan: SubscriptionPlan | None = None
    max_users: int | None = Field(default=None, ge=1)
    max_projects: int | None = Field(default=None, ge=1)


class TenantStats(BaseSchema):
    total_users: int = 0
    total_projects: int = 0
    total_tasks: int = 0


class TenantResponse(IDSchema, TimestampSchema):
    """Tenant response."""

    name: str
    subdomain: str
    status: TenantStatus
    subscription_plan: SubscriptionPlan
    max_users: int
    max_projects: int


class TenantDetailResponse(TenantResponse):
    stats: TenantStats
