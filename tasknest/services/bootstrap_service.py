"""
Startup bootstrap of the platform's single super admin account.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.config import settings
from tasknest.models.user import User, UserRole
from tasknest.services.user_service import UserService

logger = logging.getLogger(__name__)


async def ensure_super_admin(db: AsyncSession) -> User | None:
    """Create the super admin from settings unless one already exists.

    Does nothing when SUPER_ADMIN_EMAIL / SUPER_ADMIN_PASSWORD are unset.
    """
    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        return None

    users = UserService(db)
    if await users.super_admin_exists():
        return None

    user = await users.create(
        email=settings.SUPER_ADMIN_EMAIL,
        password=settings.SUPER_ADMIN_PASSWORD,
        full_name=settings.SUPER_ADMIN_FULL_NAME,
        tenant_id=None,
        role=UserRole.SUPER_ADMIN,
    )
    logger.info("Created super admin account %s", user.email)
    return user
