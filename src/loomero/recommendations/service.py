"""Mentor recommendations and their LinkedIn-ready template."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from loomero.db.models import Profile, Recommendation, utcnow
from loomero.exceptions import NotFoundError

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

SKILLS = ("problem-solving", "teamwork", "innovation", "dedication", "communication")


def linkedin_template(content: str, intern_name: str | None) -> str:
    name = intern_name or "This intern"
    skills = ", ".join(SKILLS[:3])
    return (
        f"I'm delighted to recommend {name}, who recently completed their internship under my mentorship. \n\n"
        f"{content}\n\n"
        f"{name} consistently demonstrated {skills}, and I have no doubt they will be a valuable asset "
        "to any organization. I highly recommend them for future opportunities.\n\n"
        "#Internship #Mentorship #ProfessionalGrowth #Recommendation"
    )


async def _load(db: AsyncSession, recommendation_id: uuid.UUID) -> Recommendation | None:
    result = await db.execute(
        select(Recommendation)
        .options(selectinload(Recommendation.mentor), selectinload(Recommendation.intern))
        .where(Recommendation.id == recommendation_id)
    )
    return result.scalar_one_or_none()


async def create_recommendation(
    db: AsyncSession,
    mentor: Profile,
    intern_id: uuid.UUID,
    content: str,
) -> Recommendation:
    """
    Save a draft recommendation.

    Raises:
        NotFoundError: If the intern does not exist.
        ValueError: If the content is blank.
    """
    content = content.strip()
    if not content:
        msg = "Recommendation content is required"
        raise ValueError(msg)
    intern = await db.get(Profile, intern_id)
    if intern is None:
        msg = "Intern not found"
        raise NotFoundError(msg)

    now = utcnow()
    recommendation = Recommendation(
        mentor_id=mentor.id,
        intern_id=intern_id,
        content=content,
        linkedin_template=linkedin_template(content, intern.full_name),
        is_draft=True,
        created_at=now,
        updated_at=now,
    )
    recommendation.mentor = mentor
    recommendation.intern = intern
    db.add(recommendation)
    await db.flush()
    logger.info("recommendation_created", recommendation_id=str(recommendation.id), intern_id=str(intern_id))
    return recommendation


async def list_recommendations(
    db: AsyncSession,
    viewer: Profile,
    intern_id: uuid.UUID | None = None,
    mentor_id: uuid.UUID | None = None,
) -> Sequence[Recommendation]:
    """
    Mentors and admins see what they authored; interns see published ones about them.

    Newest first.
    """
    query = select(Recommendation).options(
        selectinload(Recommendation.mentor),
        selectinload(Recommendation.intern),
    )
    if viewer.role == "intern":
        query = query.where(Recommendation.intern_id == viewer.id, Recommendation.is_draft.is_(False))
        if mentor_id is not None:
            query = query.where(Recommendation.mentor_id == mentor_id)
    else:
        query = query.where(Recommendation.mentor_id == viewer.id)
        if intern_id is not None:
            query = query.where(Recommendation.intern_id == intern_id)
    result = await db.execute(query.order_by(Recommendation.created_at.desc()))
    return result.scalars().all()


async def set_draft(db: AsyncSession, mentor: Profile, recommendation_id: uuid.UUID, is_draft: bool) -> Recommendation:
    """
    Publish or unpublish a recommendation.

    Raises:
        NotFoundError: If it does not exist.
        PermissionError: If the caller did not author it.
    """
    recommendation = await _load(db, recommendation_id)
    if recommendation is None:
        msg = "Recommendation not found"
        raise NotFoundError(msg)
    if recommendation.mentor_id != mentor.id:
        msg = "Only the author can change this recommendation"
        raise PermissionError(msg)
    recommendation.is_draft = is_draft
    recommendation.updated_at = utcnow()
    await db.flush()
    logger.info("recommendation_updated", recommendation_id=str(recommendation_id), is_draft=is_draft)
    return recommendation
