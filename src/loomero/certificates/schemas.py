"""Request/response schemas for certificates and LinkedIn posts."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class CertificateIssueRequest(BaseModel):
    """Issue a certificate. Interns omit ``intern_id``; staff must pass it."""

    project_id: uuid.UUID
    intern_id: uuid.UUID | None = None


class CertificateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    intern_id: uuid.UUID
    project_id: uuid.UUID
    mentor_id: uuid.UUID | None = None
    status: Literal["draft", "approved", "issued"]
    certificate_data: dict[str, Any] | None = None
    issued_at: datetime | None = None
    created_at: datetime | None = None


class CertificateListResponse(BaseModel):
    certificates: list[CertificateResponse]
    total: int


class PostBadge(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    badge_type: str | None = None


class LinkedInPostRequest(BaseModel):
    project_title: str = Field(..., min_length=1, max_length=255)
    badges: list[PostBadge] = Field(default_factory=list)
    certificate_id: str | None = None
    mentor_name: str | None = None


class LinkedInPostResponse(BaseModel):
    post: str
    hashtags: list[str]
