"""
User service for business logic.
"""
import logging
from uuid import UUID

from sqlalchemy import select, func, and_, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.core.exceptions import ConflictError
from tasknest.core.security import hash_password
from tasknest.models.project import Project
from tasknest.models.task import Task
from tasknest.models.user import User, UserRole
from tasknest.services.updates import apply_changes

logger = logging.getLogger(__name__)

USER_UPDATE_COLUMNS = {
    "full_name": User.full_name,
    "role": User.role,
    "is_active": User.is_active,
}


class UserService:
    """Service for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: UUID, tenant_id: UUID | None = None) -> User | None:
        """Get user by ID, optionally filtering by tenant."""
        query = select(User).where(User.id == user_id)
        if tenant_id:
            query = query.where(User.tenant_id == tenant_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str, tenant_id: UUID) -> User | None:
        """Get user by email within a tenant."""
        result = await self.db.execute(
            select(User).where(
                func.lower(User.email) == email.lower(),
                User.tenant_id == tenant_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_super_admin_by_email(self, email: str) -> User | None:
        """Get the tenant-less super admin account by email."""
        result = await self.db.execute(
            select(User).where(
                func.lower(User.email) == email.lower(),
                User.role == UserRole.SUPER_ADMIN,
                User.tenant_id.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def super_admin_exists(self) -> bool:
        result = await self.db.execute(
            select(func.count(User.id)).where(User.role == UserRole.SUPER_ADMIN)
        )
        return (result.scalar() or 0) > 0

    async def list_users(
        self,
        tenant_id: UUID,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
        role: UserRole | None = None,
    ) -> tuple[list[User], int]:
        """List a tenant's users with pagination and filters, newest first."""
        filters = [User.tenant_id == tenant_id]
        if search:
            pattern = f"%{search.lower()}%"
            filters.append(
                or_(
                    func.lower(User.email).like(pattern),
                    func.lower(User.full_name).like(pattern),
                )
            )
        if role:
            filters.append(User.role == role)

        count_query = select(func.count(User.id)).where(and_(*filters))
        total_result = await self.db.execute(count_query)
        total = total_result.scalar()

        query = (
            select(User)
            .where(and_(*filters))
            .order_by(User.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.db.execute(query)
        users = result.scalars().all()

        return list(users), total

    async def create(
        self,
        email: str,
        password: str,
        full_name: str,
        tenant_id: UUID | None = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create a new user. Email must be unique within the tenant."""
        if tenant_id is not None and await self.get_by_email(email, tenant_id):
            raise ConflictError("Email already exists in this tenant")

        user = User(
            email=email.lower(),
            password_hash=hash_password(password),
            full_name=full_name,
            tenant_id=tenant_id,
            role=role,
            is_active=True,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            raise ConflictError("Email already exists in this tenant")
        await self.db.refresh(user)
        return user

    async def update(self, user: User, changes: dict) -> User:
        """Apply an allow-listed partial update to a user."""
        apply_changes(user, changes, USER_UPDATE_COLUMNS)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        """Delete a user, unassigning their tasks and un-owning their projects."""
        await self.db.execute(
            update(Task).where(Task.assigned_to == user.id).values(assigned_to=None)
        )
        await self.db.execute(
            update(Project).where(Project.created_by == user.id).values(created_by=None)
        )
        await self.db.delete(user)
        await self.db.flush()
