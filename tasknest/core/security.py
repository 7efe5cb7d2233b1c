"""
Security utilities for authentication.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from tasknest.config import settings
from tasknest.core.exceptions import UnauthorizedError
from tasknest.models.user import UserRole

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class TokenClaims:
    """Identity recovered from a verified access token."""
    user_id: UUID
    tenant_id: UUID | None
    role: UserRole


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def access_token_lifetime() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def create_access_token(
    user_id: UUID,
    tenant_id: UUID | None,
    role: UserRole,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT carrying the user, tenant and role."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else access_token_lifetime())

    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "tenant_id": str(tenant_id) if tenant_id else None,
        "role": role.value,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_token(token: str) -> TokenClaims:
    """Verify signature and expiry, and return the embedded claims.

    Raises UnauthorizedError for any invalid, malformed or expired token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")

    try:
        tenant_id = payload.get("tenant_id")
        return TokenClaims(
            user_id=UUID(payload["sub"]),
            tenant_id=UUID(tenant_id) if tenant_id else None,
            role=UserRole(payload["role"]),
        )
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired token")
