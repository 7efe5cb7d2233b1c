"""
SQLAlchemy models for TaskNest.
"""
from tasknest.models.base import Base, BaseModel, TenantBaseModel
from tasknest.models.tenant import SubscriptionPlan, Tenant, TenantStatus
from tasknest.models.user import User, UserRole
from tasknest.models.project import Project, ProjectStatus
from tasknest.models.task import Task, TaskPriority, TaskStatus
from tasknest.models.audit_log import AuditLog

__all__ = [
    "Base",
    "BaseModel",
    "TenantBaseModel",
    "SubscriptionPlan",
    "Tenant",
    "TenantStatus",
    "User",
    "UserRole",
    "Project",
    "ProjectStatus",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "AuditLog",
]
