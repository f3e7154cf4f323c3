"""Payloads for the function-style endpoints (camelCase on the wire)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from loomero.auth.schemas import Role


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ApprovalEmailRequest(_CamelModel):
    email: EmailStr
    user_name: str = Field(..., alias="userName", min_length=1)
    role: Role
    access_code: str = Field(..., alias="accessCode", min_length=1)


class SentResponse(BaseModel):
    sent: bool
    to: str


class MilestoneNotificationRequest(_CamelModel):
    """All fields optional here; required ones are checked by the handler."""

    recipient_email: str | None = Field(None, alias="recipientEmail")
    recipient_name: str | None = Field(None, alias="recipientName")
    milestone_title: str | None = Field(None, alias="milestoneTitle")
    project_title: str | None = Field(None, alias="projectTitle")
    status: str | None = None
    feedback: str | None = None
    submission_notes: str | None = Field(None, alias="submissionNotes")


class NotificationResponse(BaseModel):
    success: bool
    message: str
