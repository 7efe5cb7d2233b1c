"""
Unit tests for password hashing and access tokens.
"""
import uuid
from datetime import timedelta

import pytest
from fastapi import status
from jose import jwt

from tasknest.config import settings
from tasknest.core.exceptions import UnauthorizedError
from tasknest.core.security import (
    access_token_lifetime,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from tasknest.models.user import UserRole


class TestPasswordHashing:

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("Passw0rd!")

        assert hashed != "Passw0rd!"
        assert hashed.startswith("$2")

    def test_verify(self):
        hashed = hash_password("Passw0rd!")

        assert verify_password("Passw0rd!", hashed)
        assert not verify_password("passw0rd!", hashed)


class TestAccessToken:

    def test_lifetime_is_one_day(self):
        assert access_token_lifetime() == timedelta(hours=24)

    def test_round_trip_claims(self):
        user_id, tenant_id = uuid.uuid4(), uuid.uuid4()

        claims = decode_token(create_access_token(user_id, tenant_id, UserRole.TENANT_ADMIN))

        assert claims.user_id == user_id
        assert claims.tenant_id == tenant_id
        assert claims.role == UserRole.TENANT_ADMIN

    def test_super_admin_has_no_tenant(self):
        claims = decode_token(create_access_token(uuid.uuid4(), None, UserRole.SUPER_ADMIN))

        assert claims.tenant_id is None

    def test_payload_expires_in_24_hours(self):
        token = create_access_token(uuid.uuid4(), uuid.uuid4(), UserRole.USER)
        payload = jwt.get_unverified_claims(token)

        assert payload["exp"] - payload["iat"] == 24 * 60 * 60

    def test_expired_token_is_rejected(self):
        token = create_access_token(
            uuid.uuid4(), uuid.uuid4(), UserRole.USER, expires_delta=timedelta(seconds=-10)
        )

        with pytest.raises(UnauthorizedError) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    def test_foreign_signature_is_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "tenant_id": None, "role": "super_admin"},
            "not-the-server-secret",
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(UnauthorizedError):
            decode_token(token)

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
    def test_malformed_token_is_rejected(self, token):
        with pytest.raises(UnauthorizedError):
            decode_token(token)

    def test_unknown_role_is_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "tenant_id": None, "role": "owner"},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(UnauthorizedError):
            decode_token(token)
