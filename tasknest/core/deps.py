"""
FastAPI dependencies for authentication, authorization and auditing.
"""
import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tasknest.core.exceptions import ForbiddenError, UnauthorizedError
from tasknest.core.policy import Action, Actor, DenyReason, Target, can_perform
from tasknest.core.security import decode_token
from tasknest.database import async_session_maker, get_db
from tasknest.models.user import UserRole
from tasknest.services.audit_recorder import AuditRecorder

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Actor:
    """Recover the caller's identity from the bearer token.

    Only the signature and expiry are checked; no database lookup is made.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")

    claims = decode_token(credentials.credentials)
    return Actor(
        user_id=claims.user_id,
        tenant_id=claims.tenant_id,
        role=claims.role,
    )


def authorize(actor: Actor | None, action: Action, target: Target | None = None) -> None:
    """Raise the HTTP error matching the policy decision, if it is a denial."""
    decision = can_perform(actor, action, target)
    if decision:
        return

    logger.debug(
        "Denied %s for user=%s role=%s: %s",
        action.value,
        actor.user_id if actor else None,
        actor.role.value if actor else None,
        decision.reason.value,
    )
    if decision.reason == DenyReason.UNAUTHENTICATED:
        raise UnauthorizedError("Authentication required")
    raise ForbiddenError(decision.reason.value)


def require_roles(*roles: UserRole):
    """Dependency factory for role checking."""

    async def role_checker(
        actor: Annotated[Actor, Depends(get_current_actor)],
    ) -> Actor:
        if actor.role not in roles:
            raise ForbiddenError(DenyReason.INSUFFICIENT_ROLE.value)
        return actor

    return role_checker


def get_audit_recorder() -> AuditRecorder:
    """Audit recorder writing through its own short-lived sessions."""
    return AuditRecorder(async_session_maker)


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


# Common dependencies
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
SuperAdmin = Annotated[Actor, Depends(require_roles(UserRole.SUPER_ADMIN))]
Audit = Annotated[AuditRecorder, Depends(get_audit_recorder)]
