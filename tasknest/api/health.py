"""
Liveness and database connectivity check.
"""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.config import settings
from tasknest.database import get_db, ping

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(db: Annotated[AsyncSession, Depends(get_db)]):
    """Health check endpoint."""
    try:
        await ping(db)
        database = "connected"
    except (SQLAlchemyError, OSError):
        logger.exception("Database health check failed")
        await db.rollback()
        database = "disconnected"

    return {
        "success": True,
        "message": "TaskNest API is running",
        "data": {
            "status": "healthy",
            "version": settings.VERSION,
            "database": database,
        },
    }
