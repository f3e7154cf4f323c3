"""Request/response schemas for badge endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BadgeType = Literal["milestone", "skill", "achievement", "completion"]


class BadgeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: str | None = None
    badge_type: BadgeType = "achievement"
    icon_url: str | None = None
    criteria: str | None = None


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    badge_type: BadgeType
    icon_url: str | None = None
    criteria: str | None = None
    created_at: datetime | None = None
    total_awarded: int = 0


class BadgeListResponse(BaseModel):
    badges: list[BadgeResponse]


class AwardBadgeRequest(BaseModel):
    badge_id: uuid.UUID
    user_id: uuid.UUID


class EarnedBadgeResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    badge: BadgeResponse
    awarded_by: uuid.UUID
    awarded_by_name: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    awarded_at: datetime


class UserBadgesResponse(BaseModel):
    earned: list[EarnedBadgeResponse]
    total: int
