"""Certificates router: issuing, listing, HTML download and LinkedIn posts."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.auth.dependencies import get_current_profile
from loomero.certificates.linkedin import generate_post
from loomero.certificates.rendering import certificate_filename, render_certificate_html
from loomero.certificates.schemas import (
    CertificateIssueRequest,
    CertificateListResponse,
    CertificateResponse,
    LinkedInPostRequest,
    LinkedInPostResponse,
)
from loomero.certificates.service import get_certificate, issue_certificate, list_certificates
from loomero.database import get_session
from loomero.db.models import Profile
from loomero.exceptions import NotFoundError

router = APIRouter(prefix="/api/v1", tags=["Certificates"])


@router.post("/certificates", response_model=CertificateResponse, status_code=201)
async def issue_certificate_endpoint(
    body: CertificateIssueRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> CertificateResponse:
    """Issue a completion certificate once all milestones are approved."""
    try:
        certificate = await issue_certificate(db, profile, body.project_id, body.intern_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return CertificateResponse.model_validate(certificate)


@router.get("/certificates", response_model=CertificateListResponse)
async def list_certificates_endpoint(
    intern_id: uuid.UUID | None = Query(None),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> CertificateListResponse:
    certificates = await list_certificates(db, profile, intern_id=intern_id)
    return CertificateListResponse(
        certificates=[CertificateResponse.model_validate(c) for c in certificates],
        total=len(certificates),
    )


@router.get("/certificates/{certificate_id}/html", response_class=HTMLResponse)
async def download_certificate(
    certificate_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> HTMLResponse:
    """Render the certificate as a downloadable HTML page."""
    try:
        certificate = await get_certificate(db, profile, certificate_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    if not certificate.certificate_data:
        raise HTTPException(status_code=400, detail="Certificate has not been issued")

    data = certificate.certificate_data
    filename = certificate_filename(str(data.get("internName", "")), str(data.get("projectTitle", "")))
    return HTMLResponse(
        content=render_certificate_html(data),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/linkedin-post", response_model=LinkedInPostResponse)
async def linkedin_post(
    body: LinkedInPostRequest,
    _profile: Profile = Depends(get_current_profile),
) -> LinkedInPostResponse:
    """Generate a shareable LinkedIn post for a completed project."""
    post, hashtags = generate_post(
        body.project_title,
        [b.name for b in body.badges],
        certificate_id=body.certificate_id,
        mentor_name=body.mentor_name,
    )
    return LinkedInPostResponse(post=post, hashtags=hashtags)
