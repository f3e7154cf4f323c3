"""Recommendations router: /api/v1/recommendations endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.auth.dependencies import get_current_profile, require_staff
from loomero.database import get_session
from loomero.db.models import Profile, Recommendation
from loomero.exceptions import NotFoundError
from loomero.recommendations.schemas import (
    RecommendationCreateRequest,
    RecommendationListResponse,
    RecommendationResponse,
    RecommendationUpdateRequest,
)
from loomero.recommendations.service import create_recommendation, list_recommendations, set_draft

router = APIRouter(prefix="/api/v1/recommendations", tags=["Recommendations"])


def _response(rec: Recommendation) -> RecommendationResponse:
    return RecommendationResponse(
        id=rec.id,
        mentor_id=rec.mentor_id,
        intern_id=rec.intern_id,
        content=rec.content,
        linkedin_template=rec.linkedin_template,
        is_draft=rec.is_draft,
        created_at=rec.created_at,
        updated_at=rec.updated_at,
        mentor_name=rec.mentor.full_name,
        mentor_email=rec.mentor.email,
        intern_name=rec.intern.full_name,
        intern_email=rec.intern.email,
    )


@router.post("", response_model=RecommendationResponse, status_code=201)
async def create_recommendation_endpoint(
    body: RecommendationCreateRequest,
    mentor: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_session),
) -> RecommendationResponse:
    """Write a recommendation (saved as a draft)."""
    try:
        rec = await create_recommendation(db, mentor, body.intern_id, body.content)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return _response(rec)


@router.get("", response_model=RecommendationListResponse)
async def list_recommendations_endpoint(
    intern_id: uuid.UUID | None = Query(None),
    mentor_id: uuid.UUID | None = Query(None),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> RecommendationListResponse:
    recs = await list_recommendations(db, profile, intern_id=intern_id, mentor_id=mentor_id)
    return RecommendationListResponse(recommendations=[_response(r) for r in recs], total=len(recs))


@router.patch("/{recommendation_id}", response_model=RecommendationResponse)
async def update_recommendation_endpoint(
    recommendation_id: uuid.UUID,
    body: RecommendationUpdateRequest,
    mentor: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_session),
) -> RecommendationResponse:
    """Publish or unpublish."""
    try:
        rec = await set_draft(db, mentor, recommendation_id, body.is_draft)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    await db.commit()
    return _response(rec)
