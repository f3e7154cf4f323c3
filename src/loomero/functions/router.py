"""
Function-style endpoints under /api/v1/functions.

JSON in, JSON out; each requires an authenticated caller. Unlike side-effect
notifications elsewhere, email failures here are reported to the caller.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException

from loomero.auth.dependencies import get_current_user, require_admin
from loomero.auth.jwt import AuthUser
from loomero.auth.router import bootstrap_admin_endpoint
from loomero.auth.schemas import BootstrapResponse
from loomero.config import get_settings
from loomero.db.models import Profile
from loomero.email.service import EmailNotConfiguredError, get_email_service
from loomero.functions.schemas import (
    ApprovalEmailRequest,
    MilestoneNotificationRequest,
    NotificationResponse,
    SentResponse,
)
from loomero.redis_client import get_redis_or_none

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/functions", tags=["Functions"])

router.add_api_route(
    "/bootstrap-admin",
    bootstrap_admin_endpoint,
    methods=["POST"],
    response_model=BootstrapResponse,
)

NOTIFICATION_TEMPLATES = {
    "approved": "milestone_approved",
    "rejected": "milestone_rejected",
    "submitted": "milestone_submitted",
}


@router.post("/send-approval-email", response_model=SentResponse)
async def send_approval_email(
    body: ApprovalEmailRequest,
    _admin: Profile = Depends(require_admin),
) -> SentResponse:
    """Email an approved user their access code and sign-in steps."""
    email_service = get_email_service(get_redis_or_none())
    try:
        sent = await email_service.send_template(
            to=body.email,
            template_name="approval",
            context={
                "user_name": body.user_name,
                "role": body.role,
                "access_code": body.access_code,
                "email": body.email,
            },
        )
    except EmailNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    if not sent:
        raise HTTPException(status_code=500, detail="Failed to send approval email")
    return SentResponse(sent=True, to=body.email)


@router.post("/send-milestone-notification", response_model=NotificationResponse)
async def send_milestone_notification(
    body: MilestoneNotificationRequest,
    user: AuthUser = Depends(get_current_user),
) -> NotificationResponse:
    """Send a milestone approved / needs revision / submitted email."""
    email_service = get_email_service(get_redis_or_none())
    # Provider credentials are checked before the payload
    if not email_service.is_configured:
        logger.error("email_not_configured", provider=get_settings().email_provider)
        raise HTTPException(status_code=500, detail="Email service not configured properly")

    if not (body.recipient_email and body.milestone_title and body.project_title and body.status):
        raise HTTPException(status_code=400, detail="Missing required fields")
    template_name = NOTIFICATION_TEMPLATES.get(body.status)
    if template_name is None:
        raise HTTPException(status_code=400, detail=f"Invalid status: {body.status}")

    context = {
        "recipient_name": body.recipient_name,
        "milestone_title": body.milestone_title,
        "project_title": body.project_title,
    }
    if body.status == "submitted":
        context["submission_notes"] = body.submission_notes
    else:
        context["feedback"] = body.feedback

    try:
        sent = await email_service.send_template(
            to=body.recipient_email,
            template_name=template_name,
            context=context,
            from_address=get_settings().notifications_from_address,
        )
    except EmailNotConfiguredError as e:
        logger.error("email_not_configured", provider=get_settings().email_provider)
        raise HTTPException(status_code=500, detail=str(e)) from e
    if not sent:
        raise HTTPException(status_code=500, detail="Failed to send milestone notification")

    logger.info("milestone_notification_sent", to=body.recipient_email, status=body.status, sender=str(user.id))
    return NotificationResponse(success=True, message="Notification sent successfully")
