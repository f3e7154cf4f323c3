"""Analytics router: staff dashboard metrics and the intern countdown."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.analytics.schemas import AnalyticsResponse, InternshipCountdownResponse
from loomero.analytics.service import get_analytics, get_internship_countdown
from loomero.auth.dependencies import require_intern, require_staff
from loomero.database import get_session
from loomero.db.models import Profile
from loomero.exceptions import NotFoundError

router = APIRouter(prefix="/api/v1", tags=["Analytics"])


@router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(
    days: int = Query(30, ge=1, le=365),
    _staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_session),
) -> AnalyticsResponse:
    """Program metrics for mentors and admins."""
    return AnalyticsResponse(**await get_analytics(db, days=days))


@router.get("/users/me/internship", response_model=InternshipCountdownResponse)
async def internship_countdown(
    intern: Profile = Depends(require_intern),
    db: AsyncSession = Depends(get_session),
) -> InternshipCountdownResponse:
    """Time left in the caller's internship."""
    try:
        data = await get_internship_countdown(db, intern)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return InternshipCountdownResponse(**data)
