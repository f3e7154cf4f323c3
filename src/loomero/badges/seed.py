"""Default badge catalogue, seeded idempotently at startup."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.db.models import Badge, utcnow

logger = structlog.get_logger()

BADGE_SEED_DATA: list[dict[str, str]] = [
    {
        "name": "First Milestone",
        "description": "Completed your first approved milestone",
        "badge_type": "milestone",
        "criteria": "One milestone approved by a mentor",
    },
    {
        "name": "Halfway There",
        "description": "Half of a project's milestones approved",
        "badge_type": "milestone",
        "criteria": "50% of a project's milestones approved",
    },
    {
        "name": "Problem Solver",
        "description": "Cracked a hard technical problem",
        "badge_type": "skill",
        "criteria": "Awarded by a mentor for a notable fix or design",
    },
    {
        "name": "Team Leader",
        "description": "Took the lead and helped others move forward",
        "badge_type": "skill",
        "criteria": "Awarded by a mentor for leadership",
    },
    {
        "name": "Collaboration Champion",
        "description": "Worked across the team to ship together",
        "badge_type": "skill",
        "criteria": "Awarded by a mentor for teamwork",
    },
    {
        "name": "Innovation Star",
        "description": "Brought a fresh idea that changed the project",
        "badge_type": "achievement",
        "criteria": "Awarded by a mentor for an original contribution",
    },
    {
        "name": "Project Complete",
        "description": "Every milestone of a project approved",
        "badge_type": "completion",
        "criteria": "All milestones of a project approved",
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Insert catalogue badges whose names are missing. Returns how many were added."""
    result = await db.execute(select(Badge.name))
    existing = set(result.scalars())

    added = 0
    for entry in BADGE_SEED_DATA:
        if entry["name"] in existing:
            continue
        db.add(Badge(created_at=utcnow(), **entry))
        added += 1

    await db.commit()
    logger.info("badges_seeded", added=added, total=len(BADGE_SEED_DATA))
    return added
