"""
Progress business logic.

A progress row tracks one intern against one milestone:

    pending (task assigned) -> in_progress -> submitted -> approved | rejected

Mentor-assigned tasks are progress rows created in ``pending`` with the task
text in ``submission_notes``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from loomero.db.models import Milestone, Profile, Progress, utcnow
from loomero.exceptions import ConflictError, NotFoundError

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

INTERN_SETTABLE_STATUSES = ("pending", "in_progress", "submitted")
REVIEW_OUTCOMES = ("approved", "rejected")


async def _get_milestone(db: AsyncSession, milestone_id: uuid.UUID) -> Milestone:
    result = await db.execute(
        select(Milestone).options(selectinload(Milestone.project)).where(Milestone.id == milestone_id)
    )
    milestone = result.scalar_one_or_none()
    if milestone is None:
        msg = "Milestone not found"
        raise NotFoundError(msg)
    return milestone


async def get_progress(db: AsyncSession, progress_id: uuid.UUID) -> Progress:
    """
    Fetch a progress row with its milestone and project loaded.

    Raises:
        NotFoundError: If the row does not exist.
    """
    result = await db.execute(
        select(Progress)
        .options(selectinload(Progress.milestone).selectinload(Milestone.project))
        .where(Progress.id == progress_id)
    )
    progress = result.scalar_one_or_none()
    if progress is None:
        msg = "Progress not found"
        raise NotFoundError(msg)
    return progress


async def start_progress(db: AsyncSession, intern: Profile, milestone_id: uuid.UUID) -> Progress:
    """
    Begin tracking a milestone.

    Raises:
        NotFoundError: If the milestone does not exist.
        ConflictError: If the intern already has a row for the milestone.
    """
    await _get_milestone(db, milestone_id)
    existing = await db.execute(
        select(Progress.id).where(Progress.intern_id == intern.id, Progress.milestone_id == milestone_id)
    )
    if existing.first() is not None:
        msg = "Progress already started for this milestone"
        raise ConflictError(msg)

    now = utcnow()
    progress = Progress(
        intern_id=intern.id,
        milestone_id=milestone_id,
        status="in_progress",
        created_at=now,
        updated_at=now,
    )
    db.add(progress)
    await db.flush()
    logger.info("progress_started", intern_id=str(intern.id), milestone_id=str(milestone_id))
    return progress


async def update_submission(db: AsyncSession, intern: Profile, progress_id: uuid.UUID, notes: str) -> Progress:
    """
    Save submission notes. Non-blank notes submit the milestone for review;
    blank notes keep it in progress.

    Raises:
        NotFoundError: If the row does not exist.
        PermissionError: If the row belongs to another intern.
        ValueError: If the milestone is already approved.
    """
    progress = await get_progress(db, progress_id)
    if progress.intern_id != intern.id:
        msg = "Not your progress"
        raise PermissionError(msg)
    if progress.status == "approved":
        msg = "Approved progress cannot be changed"
        raise ValueError(msg)

    now = utcnow()
    progress.submission_notes = notes
    if notes.strip():
        progress.status = "submitted"
        progress.submitted_at = now
    else:
        progress.status = "in_progress"
        progress.submitted_at = None
    progress.updated_at = now
    await db.flush()
    logger.info("submission_updated", progress_id=str(progress_id), status=progress.status)
    return progress


async def review_progress(
    db: AsyncSession,
    reviewer: Profile,
    progress_id: uuid.UUID,
    status: str,
    feedback: str,
) -> Progress:
    """
    Approve or reject a submission.

    Raises:
        NotFoundError: If the row does not exist.
        ValueError: If the status is not approved or rejected.
    """
    if status not in REVIEW_OUTCOMES:
        msg = f"Invalid review status: {status}"
        raise ValueError(msg)
    progress = await get_progress(db, progress_id)
    now = utcnow()
    progress.status = status
    progress.mentor_feedback = feedback
    progress.mentor_id = reviewer.id
    progress.reviewed_at = now
    progress.updated_at = now
    await db.flush()
    logger.info("progress_reviewed", progress_id=str(progress_id), status=status, reviewer_id=str(reviewer.id))
    return progress


async def is_certificate_eligible(db: AsyncSession, intern_id: uuid.UUID, project_id: uuid.UUID) -> bool:
    """True when every milestone of the project has approved progress for the intern."""
    total = await db.execute(select(func.count(Milestone.id)).where(Milestone.project_id == project_id))
    total_milestones = int(total.scalar_one())
    if total_milestones == 0:
        return False
    approved = await db.execute(
        select(func.count(func.distinct(Progress.milestone_id)))
        .join(Milestone, Milestone.id == Progress.milestone_id)
        .where(Milestone.project_id == project_id)
        .where(Progress.intern_id == intern_id)
        .where(Progress.status == "approved")
    )
    return int(approved.scalar_one()) >= total_milestones


async def list_milestone_progress(
    db: AsyncSession,
    milestone_id: uuid.UUID,
    intern_id: uuid.UUID | None = None,
) -> Sequence[Progress]:
    """Progress rows for a milestone, optionally restricted to one intern."""
    await _get_milestone(db, milestone_id)
    query = select(Progress).where(Progress.milestone_id == milestone_id)
    if intern_id is not None:
        query = query.where(Progress.intern_id == intern_id)
    result = await db.execute(query.order_by(Progress.created_at))
    return result.scalars().all()


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def format_task_notes(title: str, description: str, due_date: date | None, priority: str) -> str:
    """Render task details into the submission_notes text."""
    due = due_date.isoformat() if due_date else ""
    return f"Task: {title}\n\nDescription: {description}\n\nDue Date: {due}\nPriority: {priority}"


async def create_task(
    db: AsyncSession,
    mentor: Profile,
    title: str,
    description: str,
    milestone_id: uuid.UUID,
    intern_id: uuid.UUID,
    due_date: date | None = None,
    priority: str = "medium",
) -> Progress:
    """
    Assign a task: a pending progress row owned by the intern.

    Raises:
        NotFoundError: If the milestone or intern does not exist.
    """
    milestone = await _get_milestone(db, milestone_id)
    intern = await db.get(Profile, intern_id)
    if intern is None or intern.role != "intern":
        msg = "Intern not found"
        raise NotFoundError(msg)

    now = utcnow()
    task = Progress(
        intern_id=intern_id,
        milestone_id=milestone_id,
        mentor_id=mentor.id,
        status="pending",
        submission_notes=format_task_notes(title.strip(), description, due_date, priority),
        created_at=now,
        updated_at=now,
    )
    task.milestone = milestone
    db.add(task)
    await db.flush()
    logger.info("task_assigned", task_id=str(task.id), intern_id=str(intern_id), mentor_id=str(mentor.id))
    return task


async def list_tasks(db: AsyncSession, viewer: Profile, intern_id: uuid.UUID | None = None) -> Sequence[Progress]:
    """Mentors see tasks they assigned; interns see their own. Newest first."""
    query = select(Progress).options(selectinload(Progress.milestone).selectinload(Milestone.project))
    if viewer.role == "intern":
        query = query.where(Progress.intern_id == viewer.id)
    else:
        query = query.where(Progress.mentor_id == viewer.id)
        if intern_id is not None:
            query = query.where(Progress.intern_id == intern_id)
    result = await db.execute(query.order_by(Progress.created_at.desc()))
    return result.scalars().all()


async def update_task_status(db: AsyncSession, viewer: Profile, task_id: uuid.UUID, status: str) -> Progress:
    """
    Change a task's status.

    Interns may move their own tasks between pending, in_progress and submitted.
    Mentors and admins may set any status.

    Raises:
        NotFoundError: If the task does not exist.
        PermissionError: If the viewer may not change this task or status.
    """
    task = await get_progress(db, task_id)
    if viewer.role == "intern" and (task.intern_id != viewer.id or status not in INTERN_SETTABLE_STATUSES):
        msg = "Not allowed to set this status"
        raise PermissionError(msg)
    now = utcnow()
    task.status = status
    task.updated_at = now
    if viewer.role != "intern" and status in REVIEW_OUTCOMES:
        task.mentor_id = viewer.id
        task.reviewed_at = now
    await db.flush()
    logger.info("task_status_updated", task_id=str(task_id), status=status)
    return task
