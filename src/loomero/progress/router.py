"""Progress router: milestone progress, reviews and task assignment."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.auth.dependencies import get_current_profile, require_intern, require_staff
from loomero.config import get_settings
from loomero.database import get_session
from loomero.db.models import Profile, Progress
from loomero.email.service import notify
from loomero.exceptions import ConflictError, NotFoundError
from loomero.progress.schemas import (
    MilestoneProgressResponse,
    ProgressResponse,
    ReviewRequest,
    ReviewResponse,
    SubmissionRequest,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskStatusRequest,
)
from loomero.progress.service import (
    create_task,
    is_certificate_eligible,
    list_milestone_progress,
    list_tasks,
    review_progress,
    start_progress,
    update_submission,
    update_task_status,
)
from loomero.users.service import list_mentors, profile_map

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Progress"])


def _progress_response(progress: Progress, intern: Profile | None = None) -> ProgressResponse:
    response = ProgressResponse.model_validate(progress)
    if intern is not None:
        response.intern_name = intern.full_name
    return response


def _task_response(task: Progress, people: dict[uuid.UUID, Profile]) -> TaskResponse:
    intern = people.get(task.intern_id)
    mentor = people.get(task.mentor_id) if task.mentor_id else None
    return TaskResponse(
        **ProgressResponse.model_validate(task).model_dump(exclude={"intern_name"}),
        intern_name=intern.full_name if intern else None,
        intern_email=intern.email if intern else None,
        mentor_name=mentor.full_name if mentor else None,
        milestone_title=task.milestone.title,
        project_title=task.milestone.project.title,
    )


# ---------------------------------------------------------------------------
# Milestone progress
# ---------------------------------------------------------------------------


@router.post("/milestones/{milestone_id}/progress/start", response_model=ProgressResponse, status_code=201)
async def start_progress_endpoint(
    milestone_id: uuid.UUID,
    intern: Profile = Depends(require_intern),
    db: AsyncSession = Depends(get_session),
) -> ProgressResponse:
    """Start tracking a milestone."""
    try:
        progress = await start_progress(db, intern, milestone_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    await db.commit()
    return _progress_response(progress)


@router.get("/milestones/{milestone_id}/progress", response_model=MilestoneProgressResponse)
async def get_milestone_progress(
    milestone_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> MilestoneProgressResponse:
    """Interns get their own row (or null); mentors and admins get every row."""
    intern_id = profile.id if profile.role == "intern" else None
    try:
        rows = await list_milestone_progress(db, milestone_id, intern_id=intern_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    if intern_id is not None:
        return MilestoneProgressResponse(progress=_progress_response(rows[-1]) if rows else None)

    interns = await profile_map(db, {row.intern_id for row in rows})
    return MilestoneProgressResponse(entries=[_progress_response(row, interns.get(row.intern_id)) for row in rows])


@router.put("/progress/{progress_id}/submission", response_model=ProgressResponse)
async def update_submission_endpoint(
    progress_id: uuid.UUID,
    body: SubmissionRequest,
    intern: Profile = Depends(require_intern),
    db: AsyncSession = Depends(get_session),
) -> ProgressResponse:
    """Save notes; non-blank notes submit for review and notify mentors."""
    try:
        progress = await update_submission(db, intern, progress_id, body.notes)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()

    if progress.status == "submitted":
        settings = get_settings()
        for mentor in await list_mentors(db):
            await notify(
                mentor.email,
                "milestone_submitted",
                {
                    "recipient_name": mentor.full_name,
                    "milestone_title": progress.milestone.title,
                    "project_title": progress.milestone.project.title,
                    "submission_notes": progress.submission_notes,
                },
                from_address=settings.notifications_from_address,
            )
    return _progress_response(progress)


@router.post("/progress/{progress_id}/review", response_model=ReviewResponse)
async def review_progress_endpoint(
    progress_id: uuid.UUID,
    body: ReviewRequest,
    reviewer: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_session),
) -> ReviewResponse:
    """Approve or reject a submission and email the intern."""
    try:
        progress = await review_progress(db, reviewer, progress_id, body.status, body.feedback)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()

    eligible = await is_certificate_eligible(db, progress.intern_id, progress.milestone.project_id)
    intern = await db.get(Profile, progress.intern_id)
    if intern is not None:
        await notify(
            intern.email,
            f"milestone_{body.status}",
            {
                "recipient_name": intern.full_name,
                "milestone_title": progress.milestone.title,
                "project_title": progress.milestone.project.title,
                "feedback": body.feedback or None,
            },
            from_address=get_settings().notifications_from_address,
        )
    return ReviewResponse(progress=_progress_response(progress, intern), certificate_eligible=eligible)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task_endpoint(
    body: TaskCreateRequest,
    mentor: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_session),
) -> TaskResponse:
    """Assign a task to an intern and email them."""
    try:
        task = await create_task(
            db,
            mentor,
            title=body.title,
            description=body.description,
            milestone_id=body.milestone_id,
            intern_id=body.intern_id,
            due_date=body.due_date,
            priority=body.priority,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    await db.commit()

    people = await profile_map(db, {task.intern_id, mentor.id})
    intern = people[task.intern_id]
    await notify(
        intern.email,
        "task_assigned",
        {
            "recipient_name": intern.full_name,
            "task_title": body.title,
            "task_description": body.description,
            "mentor_name": mentor.full_name,
            "due_date": body.due_date.isoformat() if body.due_date else None,
            "priority": body.priority,
        },
        from_address=get_settings().notifications_from_address,
    )
    return _task_response(task, people)


@router.get("/tasks", response_model=TaskListResponse)
async def list_tasks_endpoint(
    intern_id: uuid.UUID | None = Query(None),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> TaskListResponse:
    """Mentors see tasks they assigned; interns see their own."""
    tasks = await list_tasks(db, profile, intern_id=intern_id)
    ids = {t.intern_id for t in tasks} | {t.mentor_id for t in tasks if t.mentor_id}
    people = await profile_map(db, ids)
    return TaskListResponse(tasks=[_task_response(t, people) for t in tasks], total=len(tasks))


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task_endpoint(
    task_id: uuid.UUID,
    body: TaskStatusRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> TaskResponse:
    try:
        task = await update_task_status(db, profile, task_id, body.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    await db.commit()
    ids = {task.intern_id} | ({task.mentor_id} if task.mentor_id else set())
    return _task_response(task, await profile_map(db, ids))
