"""Request/response schemas for project and milestone endpoints."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    duration_weeks: int = Field(12, ge=1, le=104)


class ProjectUpdateRequest(BaseModel):
    """Partial project update."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    duration_weeks: int | None = Field(None, ge=1, le=104)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str | None = None
    duration_weeks: int
    created_by: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None
    milestone_count: int = 0


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int


class MilestoneCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    due_date: date | None = None


class MilestoneResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None = None
    due_date: date | None = None
    order_index: int
    created_at: datetime | None = None


class MilestoneDetailResponse(MilestoneResponse):
    """A milestone with its project title."""

    project_title: str


class ProjectMilestoneItem(MilestoneResponse):
    """A milestone inside a project view.

    Interns see their own status; mentors and admins see submission counts.
    """

    my_status: str | None = None
    progress_count: int | None = None
    completed_count: int | None = None


class ProjectDetailResponse(ProjectResponse):
    milestones: list[ProjectMilestoneItem]
