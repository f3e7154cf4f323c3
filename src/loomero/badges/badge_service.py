"""Badge catalogue and award service with duplicate prevention."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from loomero.db.models import Badge, Profile, UserBadge, utcnow
from loomero.exceptions import ConflictError, NotFoundError

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_badges(db: AsyncSession) -> list[tuple[Badge, int]]:
    """All badges ordered by name, each with how many times it was awarded."""
    counts = (
        select(UserBadge.badge_id, func.count(UserBadge.id).label("total_awarded"))
        .group_by(UserBadge.badge_id)
        .subquery()
    )
    result = await db.execute(
        select(Badge, func.coalesce(counts.c.total_awarded, 0))
        .outerjoin(counts, counts.c.badge_id == Badge.id)
        .order_by(Badge.name)
    )
    return [(row[0], int(row[1])) for row in result.all()]


async def create_badge(
    db: AsyncSession,
    name: str,
    description: str | None = None,
    badge_type: str = "achievement",
    icon_url: str | None = None,
    criteria: str | None = None,
) -> Badge:
    badge = Badge(
        name=name.strip(),
        description=description,
        badge_type=badge_type,
        icon_url=icon_url,
        criteria=criteria,
        created_at=utcnow(),
    )
    db.add(badge)
    await db.flush()
    logger.info("badge_created", badge_id=str(badge.id), name=badge.name)
    return badge


async def has_badge(db: AsyncSession, user_id: uuid.UUID, badge_id: uuid.UUID) -> bool:
    """Check if user already has a specific badge."""
    result = await db.execute(
        select(UserBadge.id).where(
            UserBadge.user_id == user_id,
            UserBadge.badge_id == badge_id,
        )
    )
    return result.first() is not None


async def award_badge(
    db: AsyncSession,
    awarder: Profile,
    user_id: uuid.UUID,
    badge_id: uuid.UUID,
) -> UserBadge:
    """
    Award a badge to a user.

    Raises:
        NotFoundError: If the badge or user does not exist.
        ConflictError: If the user already holds the badge.
    """
    badge = await db.get(Badge, badge_id)
    if badge is None:
        msg = "Badge not found"
        raise NotFoundError(msg)
    if await db.get(Profile, user_id) is None:
        msg = "User not found"
        raise NotFoundError(msg)

    if await has_badge(db, user_id, badge_id):
        msg = "User already has this badge"
        raise ConflictError(msg)

    user_badge = UserBadge(
        user_id=user_id,
        badge_id=badge_id,
        awarded_by=awarder.id,
        awarded_at=utcnow(),
    )
    user_badge.badge = badge
    db.add(user_badge)
    try:
        await db.flush()
    except IntegrityError as e:
        # Race: a concurrent award hit the unique constraint first
        await db.rollback()
        msg = "User already has this badge"
        raise ConflictError(msg) from e

    logger.info("badge_awarded", badge=badge.name, user_id=str(user_id), awarded_by=str(awarder.id))
    return user_badge


async def list_user_badges(db: AsyncSession, user_id: uuid.UUID | None = None) -> Sequence[UserBadge]:
    """Earned badges, newest first. All users when ``user_id`` is None."""
    query = select(UserBadge).options(selectinload(UserBadge.badge))
    if user_id is not None:
        query = query.where(UserBadge.user_id == user_id)
    result = await db.execute(query.order_by(UserBadge.awarded_at.desc()))
    return result.scalars().all()
