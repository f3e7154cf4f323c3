"""Profile router: /api/v1/users endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.auth.dependencies import get_current_profile, require_staff
from loomero.auth.schemas import ProfileResponse, Role
from loomero.database import get_session
from loomero.db.models import Profile
from loomero.users.schemas import ProfileListResponse, ProfileUpdateRequest
from loomero.users.service import list_profiles, update_profile

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(profile: Profile = Depends(get_current_profile)) -> ProfileResponse:
    """Get own profile."""
    return ProfileResponse.model_validate(profile)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Update full_name and avatar_url."""
    profile = await update_profile(db, profile, full_name=body.full_name, avatar_url=body.avatar_url)
    await db.commit()
    return ProfileResponse.model_validate(profile)


@router.get("", response_model=ProfileListResponse)
async def list_users(
    role: Role | None = Query(None),
    _staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_session),
) -> ProfileListResponse:
    """List profiles by role (mentors and admins only)."""
    profiles = await list_profiles(db, role=role)
    return ProfileListResponse(
        profiles=[ProfileResponse.model_validate(p) for p in profiles],
        total=len(profiles),
    )
