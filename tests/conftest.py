"""
Pytest configuration and fixtures for TaskNest tests.
"""
import os
from dataclasses import dataclass
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-tasknest")
os.environ.setdefault("ENVIRONMENT", "test")

from tasknest.core.deps import get_audit_recorder
from tasknest.core.security import create_access_token, pwd_context
from tasknest.database import get_db
from tasknest.models.audit_log import AuditLog
from tasknest.models.base import Base
from tasknest.models.tenant import Tenant
from tasknest.models.user import User, UserRole
from tasknest.schemas.auth import RegisterTenantRequest
from tasknest.services.audit_recorder import AuditRecorder
from tasknest.services.tenant_service import TenantService
from tasknest.services.user_service import UserService

# Use SQLite for testing (in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Cheap hashes keep the suite fast
pwd_context.update(bcrypt__rounds=4)

PASSWORD = "Passw0rd!"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine with foreign keys enforced."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def count_rows(session_factory):
    """Count rows of a model in a fresh session, optionally filtered."""

    async def _count(model, *criteria) -> int:
        async with session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model).where(*criteria))
            return result.scalar()

    return _count


# ============================================================================
# FastAPI App Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def app(session_factory) -> FastAPI:
    """TaskNest app wired to the test database."""
    from tasknest.main import app as main_app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    main_app.dependency_overrides[get_db] = override_get_db
    main_app.dependency_overrides[get_audit_recorder] = lambda: AuditRecorder(session_factory)

    yield main_app

    main_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app: FastAPI) -> TestClient:
    """Create synchronous test client."""
    return TestClient(app)


@pytest_asyncio.fixture(scope="function")
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ============================================================================
# Authentication Fixtures
# ============================================================================

def bearer(user: User) -> dict:
    token = create_access_token(user.id, user.tenant_id, user.role)
    return {"Authorization": f"Bearer {token}"}


@dataclass
class SeededTenant:
    tenant: Tenant
    admin: User
    member: User

    @property
    def admin_headers(self) -> dict:
        return bearer(self.admin)

    @property
    def member_headers(self) -> dict:
        return bearer(self.member)


async def seed_tenant(db: AsyncSession, name: str, subdomain: str) -> SeededTenant:
    tenant, admin = await TenantService(db).register(
        RegisterTenantRequest(
            tenant_name=name,
            subdomain=subdomain,
            admin_email=f"admin@{subdomain}.com",
            admin_password=PASSWORD,
            admin_full_name=f"{name} Admin",
        )
    )
    member = await UserService(db).create(
        email=f"member@{subdomain}.com",
        password=PASSWORD,
        full_name=f"{name} Member",
        tenant_id=tenant.id,
        role=UserRole.USER,
    )
    await db.commit()
    return SeededTenant(tenant=tenant, admin=admin, member=member)


@pytest_asyncio.fixture
async def acme(db_session: AsyncSession) -> SeededTenant:
    """Tenant "acme" with an admin and one plain member."""
    return await seed_tenant(db_session, "Acme", "acme")


@pytest_asyncio.fixture
async def globex(db_session: AsyncSession) -> SeededTenant:
    """A second, unrelated tenant."""
    return await seed_tenant(db_session, "Globex", "globex")


@pytest_asyncio.fixture
async def super_admin(db_session: AsyncSession) -> User:
    user = await UserService(db_session).create(
        email="root@tasknest.io",
        password=PASSWORD,
        full_name="Platform Root",
        tenant_id=None,
        role=UserRole.SUPER_ADMIN,
    )
    await db_session.commit()
    return user


@pytest.fixture
def headers_for():
    """Bearer headers for any user."""
    return bearer


@pytest.fixture
def super_admin_headers(super_admin: User) -> dict:
    return bearer(super_admin)


@pytest.fixture
def audit_count(count_rows):
    """Number of audit rows recorded for an action."""

    async def _count(action: str) -> int:
        return await count_rows(AuditLog, AuditLog.action == action)

    return _count
