"""
Tenant model for multi-tenancy.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from tasknest.models.base import Base, BaseModel, enum_type


class TenantStatus(str, PyEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class SubscriptionPlan(str, PyEnum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class Tenant(Base, BaseModel):
    """Tenant model representing a customer organization."""

    __tablename__ = "tenants"

    name = Column(String(255), nullable=False)
    subdomain = Column(String(100), unique=True, nullable=False, index=True)
    status = Column(
        enum_type(TenantStatus, "tenant_status"),
        default=TenantStatus.ACTIVE,
        nullable=False,
    )
    subscription_plan = Column(
        enum_type(SubscriptionPlan, "subscription_plan"),
        default=SubscriptionPlan.FREE,
        nullable=False,
    )
    max_users = Column(Integer, nullable=False, default=5)
    max_projects = Column(Integer, nullable=False, default=3)

    # Relationships
    users = relationship(
        "User",
        back_populates="tenant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    projects = relationship(
        "Project",
        back_populates="tenant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.name} ({self.subdomain})>"
