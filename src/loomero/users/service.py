"""Profile business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from loomero.db.models import Profile, utcnow

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def update_profile(
    db: AsyncSession,
    profile: Profile,
    full_name: str | None = None,
    avatar_url: str | None = None,
) -> Profile:
    """Update the caller's own name and avatar. Role and email stay untouched."""
    if full_name is not None:
        profile.full_name = full_name.strip()
    if avatar_url is not None:
        profile.avatar_url = avatar_url
    profile.updated_at = utcnow()
    await db.flush()
    logger.info("profile_updated", user_id=str(profile.id))
    return profile


async def list_profiles(db: AsyncSession, role: str | None = None) -> Sequence[Profile]:
    """List profiles, optionally filtered by role, ordered by name."""
    query = select(Profile)
    if role is not None:
        query = query.where(Profile.role == role)
    result = await db.execute(query.order_by(Profile.full_name, Profile.email))
    return result.scalars().all()


async def list_mentors(db: AsyncSession) -> Sequence[Profile]:
    """Every profile that receives submission notifications."""
    return await list_profiles(db, role="mentor")


async def profile_map(db: AsyncSession, ids: set[uuid.UUID]) -> dict[uuid.UUID, Profile]:
    """Load the profiles for a set of ids, keyed by id."""
    if not ids:
        return {}
    result = await db.execute(select(Profile).where(Profile.id.in_(ids)))
    return {p.id: p for p in result.scalars()}
