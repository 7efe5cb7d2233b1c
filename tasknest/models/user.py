"""
User model with role-based access control.
"""
from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from tasknest.models.base import Base, BaseModel, enum_type


class UserRole(str, PyEnum):
    SUPER_ADMIN = "super_admin"
    TENANT_ADMIN = "tenant_admin"
    USER = "user"


class User(Base, BaseModel):
    """User model with authentication and role information."""

    __tablename__ = "users"

    tenant_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=True,  # Nullable for super_admin
        index=True,
    )
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(
        enum_type(UserRole, "user_role"),
        default=UserRole.USER,
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    tenant = relationship("Tenant", back_populates="users")

    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"
