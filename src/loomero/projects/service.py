"""Project and milestone business logic."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from loomero.config import get_settings
from loomero.db.models import Milestone, Progress, Project, utcnow
from loomero.exceptions import NotFoundError

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from loomero.db.models import Profile

logger = structlog.get_logger()

_REQUIRED_PROJECT_FIELDS = ("title", "duration_weeks")


@dataclass
class ProjectView:
    """A project with the per-milestone progress visible to the viewer."""

    project: Project
    milestones: list[Milestone]
    my_status: dict[uuid.UUID, str] = field(default_factory=dict)
    progress_counts: dict[uuid.UUID, tuple[int, int]] | None = None


async def get_project(db: AsyncSession, project_id: uuid.UUID) -> Project:
    """
    Fetch a project.

    Raises:
        NotFoundError: If the project does not exist.
    """
    project = await db.get(Project, project_id)
    if project is None:
        msg = "Project not found"
        raise NotFoundError(msg)
    return project


async def list_projects(db: AsyncSession) -> list[tuple[Project, int]]:
    """All projects, newest first, paired with their milestone count."""
    counts = (
        select(Milestone.project_id, func.count(Milestone.id).label("milestone_count"))
        .group_by(Milestone.project_id)
        .subquery()
    )
    result = await db.execute(
        select(Project, func.coalesce(counts.c.milestone_count, 0))
        .outerjoin(counts, counts.c.project_id == Project.id)
        .order_by(Project.created_at.desc())
    )
    return [(row[0], int(row[1])) for row in result.all()]


async def create_project(
    db: AsyncSession,
    admin: Profile,
    title: str,
    description: str | None = None,
    duration_weeks: int | None = None,
) -> Project:
    project = Project(
        title=title.strip(),
        description=description,
        duration_weeks=duration_weeks or get_settings().default_project_duration_weeks,
        created_by=admin.id,
        created_at=utcnow(),
        updated_at=utcnow(),
    )
    db.add(project)
    await db.flush()
    logger.info("project_created", project_id=str(project.id), created_by=str(admin.id))
    return project


async def update_project(db: AsyncSession, project_id: uuid.UUID, **fields: Any) -> Project:
    """
    Apply the fields the client sent. An explicit None clears a nullable field.

    Raises:
        NotFoundError: If the project does not exist.
        ValueError: If a required field is set to None.
    """
    for name in _REQUIRED_PROJECT_FIELDS:
        if name in fields and fields[name] is None:
            msg = f"{name} cannot be null"
            raise ValueError(msg)
    project = await get_project(db, project_id)
    for name, value in fields.items():
        setattr(project, name, value)
    project.updated_at = utcnow()
    await db.flush()
    logger.info("project_updated", project_id=str(project_id))
    return project


async def delete_project(db: AsyncSession, project_id: uuid.UUID) -> None:
    """Delete a project together with its milestones."""
    project = await get_project(db, project_id)
    await db.execute(delete(Milestone).where(Milestone.project_id == project_id))
    await db.delete(project)
    await db.flush()
    logger.info("project_deleted", project_id=str(project_id))


async def get_project_view(db: AsyncSession, project_id: uuid.UUID, viewer: Profile) -> ProjectView:
    """
    Load a project with its ordered milestones and the viewer's progress data.

    Raises:
        NotFoundError: If the project does not exist.
    """
    result = await db.execute(
        select(Project).options(selectinload(Project.milestones)).where(Project.id == project_id)
    )
    project = result.scalar_one_or_none()
    if project is None:
        msg = "Project not found"
        raise NotFoundError(msg)

    milestones = sorted(project.milestones, key=lambda m: m.order_index)
    view = ProjectView(project=project, milestones=milestones)
    milestone_ids = [m.id for m in milestones]
    if not milestone_ids:
        return view

    if viewer.role == "intern":
        rows = await db.execute(
            select(Progress.milestone_id, Progress.status)
            .where(Progress.intern_id == viewer.id)
            .where(Progress.milestone_id.in_(milestone_ids))
            .order_by(Progress.updated_at)
        )
        view.my_status = {milestone_id: status for milestone_id, status in rows.all()}
    else:
        rows = await db.execute(
            select(Progress.milestone_id, Progress.status).where(Progress.milestone_id.in_(milestone_ids))
        )
        counts: dict[uuid.UUID, tuple[int, int]] = {mid: (0, 0) for mid in milestone_ids}
        for milestone_id, status in rows.all():
            total, completed = counts[milestone_id]
            counts[milestone_id] = (total + 1, completed + (status == "approved"))
        view.progress_counts = counts
    return view


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------


async def add_milestone(
    db: AsyncSession,
    project_id: uuid.UUID,
    title: str,
    description: str | None = None,
    due_date: date | None = None,
) -> Milestone:
    """Append a milestone after the project's current last one."""
    await get_project(db, project_id)
    result = await db.execute(
        select(func.coalesce(func.max(Milestone.order_index), 0)).where(Milestone.project_id == project_id)
    )
    next_index = int(result.scalar_one()) + 1

    milestone = Milestone(
        project_id=project_id,
        title=title.strip(),
        description=description,
        due_date=due_date,
        order_index=next_index,
        created_at=utcnow(),
        updated_at=utcnow(),
    )
    db.add(milestone)
    await db.flush()
    logger.info("milestone_created", milestone_id=str(milestone.id), project_id=str(project_id))
    return milestone


async def get_milestone(db: AsyncSession, milestone_id: uuid.UUID) -> Milestone:
    """
    Fetch a milestone with its project loaded.

    Raises:
        NotFoundError: If the milestone does not exist.
    """
    result = await db.execute(
        select(Milestone).options(selectinload(Milestone.project)).where(Milestone.id == milestone_id)
    )
    milestone = result.scalar_one_or_none()
    if milestone is None:
        msg = "Milestone not found"
        raise NotFoundError(msg)
    return milestone
