"""Projects router: /api/v1/projects and /api/v1/milestones endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.auth.dependencies import get_current_profile, require_admin
from loomero.database import get_session
from loomero.db.models import Profile, Project
from loomero.exceptions import NotFoundError
from loomero.projects.schemas import (
    MilestoneCreateRequest,
    MilestoneDetailResponse,
    MilestoneResponse,
    ProjectCreateRequest,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectMilestoneItem,
    ProjectResponse,
    ProjectUpdateRequest,
)
from loomero.projects.service import (
    add_milestone,
    create_project,
    delete_project,
    get_milestone,
    get_project_view,
    list_projects,
    update_project,
)

router = APIRouter(prefix="/api/v1", tags=["Projects"])


def _project_response(project: Project, milestone_count: int = 0) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        title=project.title,
        description=project.description,
        duration_weeks=project.duration_weeks,
        created_by=project.created_by,
        created_at=project.created_at,
        updated_at=project.updated_at,
        milestone_count=milestone_count,
    )


@router.get("/projects", response_model=ProjectListResponse)
async def get_projects(
    _profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> ProjectListResponse:
    """List projects, newest first, with milestone counts."""
    rows = await list_projects(db)
    return ProjectListResponse(
        projects=[_project_response(project, count) for project, count in rows],
        total=len(rows),
    )


@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def create_project_endpoint(
    body: ProjectCreateRequest,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> ProjectResponse:
    project = await create_project(db, admin, body.title, body.description, body.duration_weeks)
    await db.commit()
    return _project_response(project)


@router.get("/projects/{project_id}", response_model=ProjectDetailResponse)
async def get_project_endpoint(
    project_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> ProjectDetailResponse:
    """Project with ordered milestones and the caller's view of progress."""
    try:
        view = await get_project_view(db, project_id, profile)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    items = []
    for m in view.milestones:
        item = ProjectMilestoneItem.model_validate(m)
        if profile.role == "intern":
            item.my_status = view.my_status.get(m.id)
        elif view.progress_counts is not None:
            item.progress_count, item.completed_count = view.progress_counts.get(m.id, (0, 0))
        items.append(item)

    base = _project_response(view.project, len(items))
    return ProjectDetailResponse(**base.model_dump(), milestones=items)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
async def update_project_endpoint(
    project_id: uuid.UUID,
    body: ProjectUpdateRequest,
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> ProjectResponse:
    try:
        project = await update_project(db, project_id, **body.model_dump(exclude_unset=True))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return _project_response(project)


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project_endpoint(
    project_id: uuid.UUID,
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Delete a project and its milestones."""
    try:
        await delete_project(db, project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    await db.commit()
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------


@router.post("/projects/{project_id}/milestones", response_model=MilestoneResponse, status_code=201)
async def create_milestone_endpoint(
    project_id: uuid.UUID,
    body: MilestoneCreateRequest,
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> MilestoneResponse:
    """Append a milestone to a project."""
    try:
        milestone = await add_milestone(db, project_id, body.title, body.description, body.due_date)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    await db.commit()
    return MilestoneResponse.model_validate(milestone)


@router.get("/milestones/{milestone_id}", response_model=MilestoneDetailResponse)
async def get_milestone_endpoint(
    milestone_id: uuid.UUID,
    _profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> MilestoneDetailResponse:
    try:
        milestone = await get_milestone(db, milestone_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return MilestoneDetailResponse(
        **MilestoneResponse.model_validate(milestone).model_dump(),
        project_title=milestone.project.title,
    )
