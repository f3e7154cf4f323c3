"""Request/response schemas for authentication and onboarding endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["admin", "mentor", "intern"]


class ProfileResponse(BaseModel):
    """An onboarded user's profile."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str | None = None
    role: Role
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthStatusResponse(BaseModel):
    """Where the caller stands in onboarding."""

    status: Literal["new", "pending", "approved", "complete"]
    email: str
    profile: ProfileResponse | None = None


class VerifyCodeRequest(BaseModel):
    """Submit an access code to complete onboarding."""

    code: str = Field(..., min_length=4, max_length=16)


class PendingRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str | None = None
    created_at: datetime | None = None


class BootstrapResponse(BaseModel):
    """Result of the first-admin bootstrap."""

    bootstrapped: bool
    message: str
    profile: ProfileResponse | None = None
