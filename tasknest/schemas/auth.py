"""
Authentication schemas.
"""
import re
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from tasknest.models.tenant import SubscriptionPlan
from tasknest.schemas.common import BaseSchema, RequestSchema
from tasknest.schemas.user import UserResponse

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


class RegisterTenantRequest(RequestSchema):
    """Tenant registration: the tenant plus its first admin."""

    tenant_name: str = Field(min_length=2, max_length=255)
    subdomain: str = Field(min_length=2, max_length=63)
    admin_email: EmailStr
    admin_password: str = Field(min_length=8, max_length=128)
    admin_full_name: str = Field(min_length=2, max_length=255)

    @field_validator("subdomain", mode="before")
    @classmethod
    def normalize_subdomain(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if not SUBDOMAIN_PATTERN.match(value):
                raise ValueError(
                    "Subdomain may contain only lowercase letters, digits and hyphens"
                )
        return value


class LoginRequest(RequestSchema):
    """Login request schema. Without a subdomain the login targets the super admin."""

    email: EmailStr
    password: str = Field(min_length=1)
    tenant_subdomain: str | None = None

    @field_validator("tenant_subdomain", mode="before")
    @classmethod
    def blank_subdomain_is_none(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value


class RegisterTenantResponse(BaseSchema):
    tenant_id: UUID
    subdomain: str
    admin_user: UserResponse


class LoginResponse(BaseSchema):
    user: UserResponse
    token: str
    token_type: str = "bearer"
    expires_in: int


class TenantSummary(BaseSchema):
    id: UUID
    name: str
    subdomain: str
    subscription_plan: SubscriptionPlan
    max_users: int
    max_projects: int


class MeResponse(UserResponse):
    """Current user, joined with their tenant (None for the super admin)."""

    tenant: TenantSummary | None = None

