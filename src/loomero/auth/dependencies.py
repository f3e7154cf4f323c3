"""FastAPI authentication and role dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.auth.jwt import AuthUser, auth_user_from_claims, verify_token
from loomero.auth.service import get_profile_by_id
from loomero.database import get_session
from loomero.db.models import Profile

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> AuthUser:
    """
    Verify the bearer token and return the authenticated identity.

    The caller may not have a profile yet (new, pending or approved users).
    Raises 401 on a missing or invalid token.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Authorization required")
    try:
        payload = verify_token(credentials.credentials)
        return auth_user_from_claims(payload)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e


async def get_current_profile(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Profile:
    """Resolve the caller's profile. Users who have not finished onboarding get 403."""
    profile = await get_profile_by_id(db, user.id)
    if profile is None:
        raise HTTPException(status_code=403, detail="Profile setup required")
    return profile


def require_roles(*roles: str) -> Callable[..., Awaitable[Profile]]:
    """Dependency factory: allow only profiles whose role is in ``roles``."""

    async def _check(profile: Profile = Depends(get_current_profile)) -> Profile:
        if profile.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return profile

    return _check


require_admin = require_roles("admin")
require_staff = require_roles("mentor", "admin")
require_intern = require_roles("intern")
