"""Request/response schemas for profile endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from loomero.auth.schemas import ProfileResponse


class ProfileUpdateRequest(BaseModel):
    """Update editable profile fields."""

    full_name: str | None = Field(None, min_length=1, max_length=255)
    avatar_url: str | None = Field(None, max_length=2048)


class ProfileListResponse(BaseModel):
    profiles: list[ProfileResponse]
    total: int
