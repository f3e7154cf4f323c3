"""Tests for platform token verification."""

import uuid

import jwt
import pytest

from conftest import make_token
from loomero.auth.jwt import auth_user_from_claims, verify_token


class TestVerifyToken:
    def test_valid_token(self):
        user_id = uuid.uuid4()
        payload = verify_token(make_token(user_id, "someone@loomero.dev"))
        assert payload["sub"] == str(user_id)
        assert payload["aud"] == "authenticated"

    def test_expired(self):
        token = make_token(uuid.uuid4(), "someone@loomero.dev", expires_in=-10)
        with pytest.raises(jwt.InvalidTokenError, match="Token has expired"):
            verify_token(token)

    def test_wrong_secret(self):
        token = make_token(uuid.uuid4(), "someone@loomero.dev", secret="another-secret-that-is-long-enough-123")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)

    def test_wrong_audience(self):
        token = make_token(uuid.uuid4(), "someone@loomero.dev", audience="service_role")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)


class TestAuthUserFromClaims:
    def test_reads_metadata(self):
        user_id = uuid.uuid4()
        user = auth_user_from_claims({
            "sub": str(user_id),
            "email": " Mixed@Loomero.DEV ",
            "user_metadata": {"name": "Mia Mixed", "avatar_url": "https://img/mia.png", "sub": "g-123"},
        })
        assert user.id == user_id
        assert user.email == "mixed@loomero.dev"
        assert user.full_name == "Mia Mixed"
        assert user.avatar_url == "https://img/mia.png"
        assert user.provider_id == "g-123"

    def test_full_name_preferred_over_name(self):
        user = auth_user_from_claims({
            "sub": str(uuid.uuid4()),
            "email": "x@loomero.dev",
            "user_metadata": {"full_name": "Full", "name": "Short"},
        })
        assert user.full_name == "Full"

    def test_non_uuid_subject(self):
        with pytest.raises(jwt.InvalidTokenError, match="not a valid user id"):
            auth_user_from_claims({"sub": "12345", "email": "x@loomero.dev"})

    def test_missing_email(self):
        with pytest.raises(jwt.InvalidTokenError, match="no email"):
            auth_user_from_claims({"sub": str(uuid.uuid4())})
