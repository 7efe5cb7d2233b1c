"""
API router aggregating all endpoints.
"""
from fastapi import APIRouter

from tasknest.api.auth import router as auth_router
from tasknest.api.health import router as health_router
from tasknest.api.projects import router as projects_router
from tasknest.api.tasks import router as tasks_router
from tasknest.api.tenants import router as tenants_router
from tasknest.api.users import router as users_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(tenants_router)
api_router.include_router(users_router)
api_router.include_router(projects_router)
api_router.include_router(tasks_router)
