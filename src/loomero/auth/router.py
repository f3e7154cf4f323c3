"""Authentication router: all /api/v1/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.auth.dependencies import get_current_user
from loomero.auth.jwt import AuthUser
from loomero.auth.schemas import (
    AuthStatusResponse,
    BootstrapResponse,
    PendingRequestResponse,
    ProfileResponse,
    VerifyCodeRequest,
)
from loomero.auth.service import (
    bootstrap_admin,
    request_access,
    resolve_auth_state,
    verify_user_login,
)
from loomero.database import get_session
from loomero.exceptions import ConflictError, NotFoundError

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AuthStatusResponse:
    """Resolve the caller's onboarding state (new, pending, approved, complete)."""
    state = await resolve_auth_state(db, user.email)
    return AuthStatusResponse(
        status=state.status,
        email=user.email,
        profile=ProfileResponse.model_validate(state.profile) if state.profile else None,
    )


@router.post("/request-access", response_model=PendingRequestResponse)
async def request_access_endpoint(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> PendingRequestResponse:
    """Queue the caller for admin approval."""
    try:
        pending = await request_access(db, user)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    await db.commit()
    return PendingRequestResponse.model_validate(pending)


@router.post("/verify-code", response_model=AuthStatusResponse)
async def verify_code(
    body: VerifyCodeRequest,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AuthStatusResponse:
    """Exchange an access code for a completed profile."""
    try:
        profile = await verify_user_login(db, user, body.code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return AuthStatusResponse(
        status="complete",
        email=user.email,
        profile=ProfileResponse.model_validate(profile),
    )


@router.post("/bootstrap-admin", response_model=BootstrapResponse)
async def bootstrap_admin_endpoint(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BootstrapResponse:
    """Promote the caller to admin when the installation has none."""
    try:
        profile = await bootstrap_admin(db, user)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    if profile is None:
        return BootstrapResponse(bootstrapped=False, message="Admin already exists")

    await db.commit()
    return BootstrapResponse(
        bootstrapped=True,
        message="User promoted to admin successfully",
        profile=ProfileResponse.model_validate(profile),
    )
