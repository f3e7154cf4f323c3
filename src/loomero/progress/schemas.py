"""Request/response schemas for progress, review and task endpoints."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ProgressStatus = Literal["pending", "in_progress", "submitted", "approved", "rejected"]
Priority = Literal["low", "medium", "high"]


class ProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    intern_id: uuid.UUID
    milestone_id: uuid.UUID
    mentor_id: uuid.UUID | None = None
    status: ProgressStatus
    submission_notes: str | None = None
    mentor_feedback: str | None = None
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    intern_name: str | None = None


class MilestoneProgressResponse(BaseModel):
    """An intern sees ``progress`` (possibly null); staff see ``entries``."""

    progress: ProgressResponse | None = None
    entries: list[ProgressResponse] | None = None


class SubmissionRequest(BaseModel):
    notes: str = Field("", max_length=20_000)


class ReviewRequest(BaseModel):
    status: Literal["approved", "rejected"]
    feedback: str = Field("", max_length=20_000)


class ReviewResponse(BaseModel):
    progress: ProgressResponse
    certificate_eligible: bool


class TaskCreateRequest(BaseModel):
    """Assign a task to an intern against a milestone."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    due_date: date | None = None
    priority: Priority = "medium"
    milestone_id: uuid.UUID
    intern_id: uuid.UUID


class TaskStatusRequest(BaseModel):
    status: ProgressStatus


class TaskResponse(ProgressResponse):
    milestone_title: str | None = None
    project_title: str | None = None
    intern_email: str | None = None
    mentor_name: str | None = None


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    total: int
