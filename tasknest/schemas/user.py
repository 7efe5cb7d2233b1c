"""
User management schemas.
"""
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field

from tasknest.models.user import UserRole
from tasknest.schemas.common import IDSchema, RequestSchema, TimestampSchema

# Roles a tenant member can be given; super_admin is never assignable.
AssignableRole = Literal["user", "tenant_admin"]


class UserCreate(RequestSchema):
    """Add a user to a tenant."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=2, max_length=255)
    role: AssignableRole = "user"


class UserUpdate(RequestSchema):
    """Partial user update. Which keys a caller may send depends on their role."""

    full_name: str | None = Field(default=None, min_length=2, max_length=255)
    role: AssignableRole | None = None
    is_active: bool | None = None


class UserResponse(IDSchema, TimestampSchema):
    """User response schema."""

    email: str
    full_name: str
    role: UserRole
    is_active: bool
    tenant_id: UUID | None = None
