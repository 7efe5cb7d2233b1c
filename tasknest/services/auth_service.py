"""
Login for tenant members and the super admin.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tasknest.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from tasknest.core.security import create_access_token, pwd_context, verify_password
from tasknest.models.user import User
from tasknest.services.tenant_service import TenantService
from tasknest.services.user_service import UserService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Resolves the login scope, checks credentials and issues tokens."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserService(db)
        self.tenants = TenantService(db)

    async def authenticate(
        self,
        email: str,
        password: str,
        tenant_subdomain: str | None = None,
    ) -> User:
        """Return the user owning these credentials.

        Without a subdomain only the super admin can log in. An unknown or
        suspended tenant is reported as such; an unknown email and a wrong
        password produce the same error.
        """
        if tenant_subdomain is None:
            user = await self.users.get_super_admin_by_email(email)
        else:
            tenant = await self.tenants.get_by_subdomain(tenant_subdomain, active_only=True)
            if tenant is None:
                raise NotFoundError("Tenant")
            user = await self.users.get_by_email(email, tenant.id)

        if user is None:
            # Burn the same hashing time as a real check.
            pwd_context.dummy_verify()
            logger.warning("Failed login for unknown account (tenant=%s)", tenant_subdomain)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not verify_password(password, user.password_hash):
            logger.warning("Failed login for user %s: wrong password", user.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not user.is_active:
            raise ForbiddenError("User account is not active")

        logger.info("User %s logged in (tenant=%s)", user.id, user.tenant_id)
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(
            user_id=user.id,
            tenant_id=user.tenant_id,
            role=user.role,
        )
