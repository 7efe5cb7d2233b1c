"""
Database connection and session management for TaskNest.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tasknest.config import settings
from tasknest.models.base import Base

DATABASE_URL = settings.async_database_url

engine_options = {"echo": settings.ENVIRONMENT == "development", "pool_pre_ping": True}
if not DATABASE_URL.startswith("sqlite"):
    engine_options.update(pool_size=10, max_overflow=20)

engine = create_async_engine(DATABASE_URL, **engine_options)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

async_session_maker = AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Context manager for database sessions outside of a request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def ping(db: AsyncSession) -> bool:
    """Return True when the database answers a trivial query."""
    await db.execute(text("SELECT 1"))
    return True


async def init_db() -> None:
    """Initialize database tables."""
    from tasknest.models.tenant import Tenant
    from tasknest.models.user import User
    from tasknest.models.project import Project
    from tasknest.models.task import Task
    from tasknest.models.audit_log import AuditLog

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
