"""
Onboarding business logic.

A signed-in identity moves through four states, resolved from which tables
hold a row for its email:

    new -> pending (pending_users) -> approved (approved_users) -> complete (profiles)

Completing onboarding means presenting a valid access code, which upserts the
profile with the granted role.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import structlog
from sqlalchemy import func, select

from loomero.access.codes import normalize_access_code
from loomero.db.models import AccessCode, ApprovedUser, PendingUser, Profile, utcnow
from loomero.exceptions import ConflictError, NotFoundError

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from loomero.auth.jwt import AuthUser

logger = structlog.get_logger()

AuthStatus = Literal["new", "pending", "approved", "complete"]


@dataclass
class AuthState:
    status: AuthStatus
    profile: Profile | None = None


# ---------------------------------------------------------------------------
# Profile queries
# ---------------------------------------------------------------------------


async def get_profile_by_id(db: AsyncSession, profile_id: uuid.UUID) -> Profile | None:
    """Fetch a profile by id."""
    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    """Fetch a profile by email (case-insensitive)."""
    result = await db.execute(select(Profile).where(func.lower(Profile.email) == email.lower()))
    return result.scalars().first()


async def _approved_by_email(db: AsyncSession, email: str) -> ApprovedUser | None:
    result = await db.execute(select(ApprovedUser).where(func.lower(ApprovedUser.email) == email.lower()))
    return result.scalar_one_or_none()


async def _pending_by_email(db: AsyncSession, email: str) -> PendingUser | None:
    result = await db.execute(select(PendingUser).where(func.lower(PendingUser.email) == email.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Status gate
# ---------------------------------------------------------------------------


async def resolve_auth_state(db: AsyncSession, email: str) -> AuthState:
    """Resolve the onboarding state for an email. First match wins."""
    profile = await get_profile_by_email(db, email)
    if profile is not None:
        return AuthState(status="complete", profile=profile)
    if await _approved_by_email(db, email) is not None:
        return AuthState(status="approved")
    if await _pending_by_email(db, email) is not None:
        return AuthState(status="pending")
    return AuthState(status="new")


async def request_access(db: AsyncSession, user: AuthUser) -> PendingUser:
    """
    Queue the caller for admin approval.

    Idempotent for users who are already pending.

    Raises:
        ConflictError: If the user is already approved or onboarded.
    """
    state = await resolve_auth_state(db, user.email)
    if state.status in ("approved", "complete"):
        msg = f"Access already granted (status: {state.status})"
        raise ConflictError(msg)

    existing = await _pending_by_email(db, user.email)
    if existing is not None:
        return existing

    pending = PendingUser(
        email=user.email,
        full_name=user.full_name,
        google_id=user.provider_id,
        created_at=utcnow(),
    )
    db.add(pending)
    await db.flush()
    logger.info("access_requested", email=user.email)
    return pending


# ---------------------------------------------------------------------------
# Access code login
# ---------------------------------------------------------------------------


async def verify_user_login(db: AsyncSession, user: AuthUser, code: str) -> Profile:
    """
    Verify an access code for the caller's email and complete onboarding.

    Approved users hold a reusable login code. Admin-issued access codes are
    single-use and are consumed here.

    Raises:
        ValueError: If the code does not match the caller's email.
    """
    code = normalize_access_code(code)
    now = utcnow()

    role: str | None = None
    full_name: str | None = None

    approved = await _approved_by_email(db, user.email)
    if approved is not None and approved.access_code == code:
        role = approved.role
        full_name = approved.full_name
        approved.last_login = now
    else:
        result = await db.execute(
            select(AccessCode)
            .where(func.lower(AccessCode.email) == user.email)
            .where(AccessCode.code == code)
            .where(AccessCode.is_used.is_(False))
            .with_for_update()
        )
        access_code = result.scalars().first()
        if access_code is not None:
            access_code.is_used = True
            access_code.used_at = now
            role = access_code.role

    if role is None:
        logger.info("access_code_rejected", email=user.email)
        msg = "Invalid access code"
        raise ValueError(msg)

    profile = await get_profile_by_id(db, user.id)
    if profile is None:
        profile = Profile(id=user.id, created_at=now)
        db.add(profile)
    profile.email = user.email
    profile.full_name = full_name or user.full_name or profile.full_name
    profile.role = role
    profile.avatar_url = user.avatar_url or profile.avatar_url
    profile.updated_at = now
    await db.flush()

    logger.info("access_code_verified", user_id=str(user.id), role=role)
    return profile


# ---------------------------------------------------------------------------
# Admin bootstrap
# ---------------------------------------------------------------------------


async def bootstrap_admin(db: AsyncSession, user: AuthUser) -> Profile | None:
    """
    Promote the caller to admin if no admin exists yet.

    Returns the promoted profile, or None when an admin already exists.

    Raises:
        NotFoundError: If the caller has no profile.
    """
    result = await db.execute(select(Profile.id).where(Profile.role == "admin").limit(1))
    if result.first() is not None:
        return None

    profile = await get_profile_by_id(db, user.id)
    if profile is None:
        msg = "Profile not found"
        raise NotFoundError(msg)

    profile.role = "admin"
    profile.updated_at = utcnow()
    await db.flush()
    logger.info("admin_bootstrapped", user_id=str(user.id), email=user.email)
    return profile
