"""Request/response schemas for mentor recommendations."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class RecommendationCreateRequest(BaseModel):
    intern_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=10_000)


class RecommendationUpdateRequest(BaseModel):
    is_draft: bool


class RecommendationResponse(BaseModel):
    id: uuid.UUID
    mentor_id: uuid.UUID
    intern_id: uuid.UUID
    content: str | None = None
    linkedin_template: str | None = None
    is_draft: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    mentor_name: str | None = None
    mentor_email: str | None = None
    intern_name: str | None = None
    intern_email: str | None = None


class RecommendationListResponse(BaseModel):
    recommendations: list[RecommendationResponse]
    total: int
