"""
Pydantic schemas for TaskNest.
"""
from tasknest.schemas.common import Envelope, MessageResponse, PaginatedResponse
from tasknest.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    RegisterTenantRequest,
    RegisterTenantResponse,
)
from tasknest.schemas.tenant import TenantDetailResponse, TenantResponse, TenantStats, TenantUpdate
from tasknest.schemas.user import UserCreate, UserResponse, UserUpdate
from tasknest.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from tasknest.schemas.task import TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate

__all__ = [
    "Envelope",
    "MessageResponse",
    "PaginatedResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "RegisterTenantRequest",
    "RegisterTenantResponse",
    "TenantDetailResponse",
    "TenantResponse",
    "TenantStats",
    "TenantUpdate",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectUpdate",
    "TaskCreate",
    "TaskResponse",
    "TaskStatusUpdate",
    "TaskUpdate",
]
