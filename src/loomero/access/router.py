"""Admin onboarding router: /api/v1/admin/* endpoints."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.access.schemas import (
    AccessCodeCreateRequest,
    AccessCodeListResponse,
    AccessCodeResponse,
    ApproveUserRequest,
    ApproveUserResponse,
    PendingUserListResponse,
    PendingUserResponse,
)
from loomero.access.service import (
    approve_pending_user,
    create_access_code,
    delete_access_code,
    list_access_codes,
    list_pending_users,
    reject_pending_user,
    reset_access_code,
)
from loomero.auth.dependencies import require_admin
from loomero.database import get_session
from loomero.db.models import Profile
from loomero.email.service import notify
from loomero.exceptions import ConflictError, NotFoundError

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


# ---------------------------------------------------------------------------
# Pending users
# ---------------------------------------------------------------------------


@router.get("/pending-users", response_model=PendingUserListResponse)
async def get_pending_users(
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> PendingUserListResponse:
    """List users waiting for approval, newest first."""
    pending = await list_pending_users(db)
    return PendingUserListResponse(
        pending_users=[PendingUserResponse.model_validate(p) for p in pending],
        total=len(pending),
    )


@router.post("/pending-users/approve", response_model=ApproveUserResponse)
async def approve_user(
    body: ApproveUserRequest,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> ApproveUserResponse:
    """Approve a pending user, issue their access code and email it."""
    try:
        approved = await approve_pending_user(db, admin, body.email, body.role)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    await db.commit()

    user_name = approved.full_name or approved.email
    email_sent = await notify(
        approved.email,
        "approval",
        {
            "user_name": user_name,
            "role": approved.role,
            "access_code": approved.access_code,
            "email": approved.email,
        },
    )
    return ApproveUserResponse(access_code=approved.access_code, user_name=user_name, email_sent=email_sent)


@router.delete("/pending-users/{pending_id}", status_code=204)
async def reject_user(
    pending_id: uuid.UUID,
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Reject (delete) a pending request."""
    try:
        await reject_pending_user(db, pending_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    await db.commit()
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Access codes
# ---------------------------------------------------------------------------


@router.get("/access-codes", response_model=AccessCodeListResponse)
async def get_access_codes(
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AccessCodeListResponse:
    codes = await list_access_codes(db)
    return AccessCodeListResponse(
        access_codes=[AccessCodeResponse.model_validate(c) for c in codes],
        total=len(codes),
    )


@router.post("/access-codes", response_model=AccessCodeResponse, status_code=201)
async def create_access_code_endpoint(
    body: AccessCodeCreateRequest,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AccessCodeResponse:
    """Issue a single-use access code for an email."""
    access_code = await create_access_code(db, admin, body.email, body.role)
    await db.commit()
    return AccessCodeResponse.model_validate(access_code)


@router.post("/access-codes/{code_id}/reset", response_model=AccessCodeResponse)
async def reset_access_code_endpoint(
    code_id: uuid.UUID,
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AccessCodeResponse:
    """Regenerate a code and mark it unused."""
    try:
        access_code = await reset_access_code(db, code_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    await db.commit()
    return AccessCodeResponse.model_validate(access_code)


@router.delete("/access-codes/{code_id}", status_code=204)
async def delete_access_code_endpoint(
    code_id: uuid.UUID,
    _admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Response:
    try:
        await delete_access_code(db, code_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    await db.commit()
    return Response(status_code=204)
