"""Badge endpoints: catalogue, awards and earned badges."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.auth.dependencies import get_current_profile, require_admin, require_staff
from loomero.badges.badge_service import award_badge, create_badge, list_badges, list_user_badges
from loomero.badges.schemas import (
    AwardBadgeRequest,
    BadgeCreateRequest,
    BadgeListResponse,
    BadgeResponse,
    EarnedBadgeResponse,
    UserBadgesResponse,
)
from loomero.database import get_session
from loomero.db.models import Profile, UserBadge
from loomero.exceptions import ConflictError, NotFoundError
from loomero.users.service import profile_map

router = APIRouter(prefix="/api/v1", tags=["Badges"])


async def _earned_response(db: AsyncSession, earned: list[UserBadge]) -> UserBadgesResponse:
    people = await profile_map(db, {ub.user_id for ub in earned} | {ub.awarded_by for ub in earned})
    items = []
    for ub in earned:
        user = people.get(ub.user_id)
        awarder = people.get(ub.awarded_by)
        items.append(EarnedBadgeResponse(
            id=ub.id,
            user_id=ub.user_id,
            badge=BadgeResponse.model_validate(ub.badge),
            awarded_by=ub.awarded_by,
            awarded_by_name=awarder.full_name if awarder else None,
            user_name=user.full_name if user else None,
            user_email=user.email if user else None,
            awarded_at=ub.awarded_at,
        ))
    return UserBadgesResponse(earned=items, total=len(items))


@router.get("/badges", response_model=BadgeListResponse)
async def get_badges(
    _profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> BadgeListResponse:
    """All badges ordered by name with award counts."""
    rows = await list_badges(db)
    items = []
    for badge, total in rows:
        item = BadgeResponse.model_validate(badge)
        item.total_awarded = total
        items.append(item)
    return BadgeListResponse(badges=items)


@router.post("/badges", response_model=BadgeResponse, status_code=201)
async def create_badge_endpoint(
    body: BadgeCreateRequest,
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> BadgeResponse:
    badge = await create_badge(db, **body.model_dump())
    await db.commit()
    return BadgeResponse.model_validate(badge)


@router.post("/badges/award", response_model=EarnedBadgeResponse, status_code=201)
async def award_badge_endpoint(
    body: AwardBadgeRequest,
    awarder: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_session),
) -> EarnedBadgeResponse:
    """Award a badge to a user."""
    try:
        user_badge = await award_badge(db, awarder, body.user_id, body.badge_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    await db.commit()
    response = await _earned_response(db, [user_badge])
    return response.earned[0]


@router.get("/badges/awards", response_model=UserBadgesResponse)
async def list_all_awards(
    _staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_session),
) -> UserBadgesResponse:
    """Every award across all users, newest first."""
    return await _earned_response(db, list(await list_user_badges(db)))


@router.get("/users/me/badges", response_model=UserBadgesResponse)
async def get_my_badges(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> UserBadgesResponse:
    """Get own earned badges."""
    return await _earned_response(db, list(await list_user_badges(db, profile.id)))


@router.get("/users/{user_id}/badges", response_model=UserBadgesResponse)
async def get_user_badges(
    user_id: uuid.UUID,
    _profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> UserBadgesResponse:
    return await _earned_response(db, list(await list_user_badges(db, user_id)))
