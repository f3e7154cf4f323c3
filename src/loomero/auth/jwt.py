"""
Verification of access tokens issued by the managed identity provider.

LoomeroFlow never mints tokens itself. Users sign in with Google through the
platform's auth service, which hands the client an HS256 JWT signed with the
project JWT secret. Every API call carries that token as a bearer credential.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

import jwt

from loomero.config import get_settings


@dataclass(frozen=True)
class AuthUser:
    """The authenticated identity behind a request, independent of onboarding state."""

    id: uuid.UUID
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    provider_id: str | None = None
    claims: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a platform access token.

    Args:
        token: The encoded JWT string.

    Returns:
        Decoded payload dictionary.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or for another audience.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None
    return payload


def auth_user_from_claims(payload: dict[str, Any]) -> AuthUser:
    """
    Build an AuthUser from verified token claims.

    Raises:
        jwt.InvalidTokenError: If the subject is not a UUID or the email claim is missing.
    """
    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError as e:
        msg = "Token subject is not a valid user id"
        raise jwt.InvalidTokenError(msg) from e

    email = payload.get("email")
    if not email:
        msg = "Token has no email claim"
        raise jwt.InvalidTokenError(msg)

    metadata: dict[str, Any] = payload.get("user_metadata") or {}
    return AuthUser(
        id=user_id,
        email=str(email).lower().strip(),
        full_name=metadata.get("full_name") or metadata.get("name"),
        avatar_url=metadata.get("avatar_url"),
        provider_id=metadata.get("provider_id") or metadata.get("sub"),
        claims=payload,
    )
