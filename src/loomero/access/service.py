"""
Admin onboarding: pending-user approval and access code management.

Approving a pending user moves the row into approved_users together with a
freshly generated login code. Access codes are a second, single-use path an
admin can hand out directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from loomero.access.codes import generate_unique_access_code
from loomero.db.models import AccessCode, ApprovedUser, PendingUser, utcnow
from loomero.exceptions import ConflictError, NotFoundError

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from loomero.db.models import Profile

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Pending users
# ---------------------------------------------------------------------------


async def list_pending_users(db: AsyncSession) -> Sequence[PendingUser]:
    """Pending requests, newest first."""
    result = await db.execute(select(PendingUser).order_by(PendingUser.created_at.desc()))
    return result.scalars().all()


async def approve_pending_user(
    db: AsyncSession,
    admin: Profile,
    email: str,
    role: str,
) -> ApprovedUser:
    """
    Approve a pending user and issue their login code.

    Raises:
        NotFoundError: If no pending request exists for the email.
        ConflictError: If the email is already approved.
    """
    email = email.lower()
    result = await db.execute(select(PendingUser).where(func.lower(PendingUser.email) == email))
    pending = result.scalar_one_or_none()
    if pending is None:
        msg = "Pending user not found"
        raise NotFoundError(msg)

    existing = await db.execute(select(ApprovedUser.id).where(func.lower(ApprovedUser.email) == email))
    if existing.first() is not None:
        msg = "User is already approved"
        raise ConflictError(msg)

    code = await generate_unique_access_code(db)
    approved = ApprovedUser(
        email=pending.email,
        full_name=pending.full_name,
        google_id=pending.google_id,
        role=role,
        access_code=code,
        approved_by=admin.id,
        approved_at=utcnow(),
    )
    db.add(approved)
    await db.delete(pending)
    await db.flush()

    logger.info("user_approved", email=approved.email, role=role, approved_by=str(admin.id))
    return approved


async def reject_pending_user(db: AsyncSession, pending_id: uuid.UUID) -> None:
    """
    Delete a pending request.

    Raises:
        NotFoundError: If the request does not exist.
    """
    pending = await db.get(PendingUser, pending_id)
    if pending is None:
        msg = "Pending user not found"
        raise NotFoundError(msg)
    await db.delete(pending)
    await db.flush()
    logger.info("user_rejected", email=pending.email)


# ---------------------------------------------------------------------------
# Access codes
# ---------------------------------------------------------------------------


async def list_access_codes(db: AsyncSession) -> Sequence[AccessCode]:
    result = await db.execute(select(AccessCode).order_by(AccessCode.created_at.desc()))
    return result.scalars().all()


async def create_access_code(db: AsyncSession, admin: Profile, email: str, role: str) -> AccessCode:
    """Issue a single-use access code for an email."""
    access_code = AccessCode(
        email=email.lower(),
        code=await generate_unique_access_code(db),
        role=role,
        is_used=False,
        created_by=admin.id,
        created_at=utcnow(),
    )
    db.add(access_code)
    await db.flush()
    logger.info("access_code_created", email=access_code.email, role=role, created_by=str(admin.id))
    return access_code


async def _get_access_code(db: AsyncSession, code_id: uuid.UUID) -> AccessCode:
    access_code = await db.get(AccessCode, code_id)
    if access_code is None:
        msg = "Access code not found"
        raise NotFoundError(msg)
    return access_code


async def reset_access_code(db: AsyncSession, code_id: uuid.UUID) -> AccessCode:
    """
    Replace the code value and mark it unused again.

    Raises:
        NotFoundError: If the access code does not exist.
    """
    access_code = await _get_access_code(db, code_id)
    access_code.code = await generate_unique_access_code(db)
    access_code.is_used = False
    access_code.used_at = None
    await db.flush()
    logger.info("access_code_reset", access_code_id=str(code_id))
    return access_code


async def delete_access_code(db: AsyncSession, code_id: uuid.UUID) -> None:
    """
    Remove an access code.

    Raises:
        NotFoundError: If the access code does not exist.
    """
    access_code = await _get_access_code(db, code_id)
    await db.delete(access_code)
    await db.flush()
    logger.info("access_code_deleted", access_code_id=str(code_id))
