"""Request/response schemas for admin onboarding endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr

from loomero.auth.schemas import Role


class PendingUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str | None = None
    google_id: str | None = None
    created_at: datetime | None = None


class PendingUserListResponse(BaseModel):
    pending_users: list[PendingUserResponse]
    total: int


class ApproveUserRequest(BaseModel):
    """Approve a pending user with a role."""

    email: EmailStr
    role: Role


class ApproveUserResponse(BaseModel):
    access_code: str
    user_name: str
    email_sent: bool


class AccessCodeCreateRequest(BaseModel):
    email: EmailStr
    role: Role


class AccessCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    code: str
    role: Role
    is_used: bool
    used_at: datetime | None = None
    created_by: uuid.UUID | None = None
    created_at: datetime | None = None


class AccessCodeListResponse(BaseModel):
    access_codes: list[AccessCodeResponse]
    total: int
