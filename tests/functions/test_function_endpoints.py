"""Tests for the function-style email endpoints."""

from unittest.mock import AsyncMock

from httpx import AsyncClient

from loomero.email.service import EmailNotConfiguredError

NOTIFICATION = {
    "recipientEmail": "intern@loomero.dev",
    "recipientName": "Ivy",
    "milestoneTitle": "Design schema",
    "projectTitle": "Tracker",
    "status": "approved",
    "feedback": "Solid",
}


class TestSendApprovalEmail:
    async def test_sends(self, client: AsyncClient, admin, mock_email_service):
        response = await client.post("/api/v1/functions/send-approval-email", headers=admin.headers, json={
            "email": "new@loomero.dev",
            "userName": "Nina New",
            "role": "intern",
            "accessCode": "123456",
        })
        assert response.status_code == 200
        assert response.json() == {"sent": True, "to": "new@loomero.dev"}
        kwargs = mock_email_service.send_template.await_args.kwargs
        assert kwargs["template_name"] == "approval"
        assert kwargs["context"]["user_name"] == "Nina New"
        assert kwargs["context"]["access_code"] == "123456"

    async def test_admin_only(self, client: AsyncClient, mentor, mock_email_service):
        response = await client.post("/api/v1/functions/send-approval-email", headers=mentor.headers, json={
            "email": "new@loomero.dev",
            "userName": "Nina",
            "role": "intern",
            "accessCode": "123456",
        })
        assert response.status_code == 403

    async def test_failed_send_is_500(self, client: AsyncClient, admin, mock_email_service):
        mock_email_service.send_template = AsyncMock(return_value=False)
        response = await client.post("/api/v1/functions/send-approval-email", headers=admin.headers, json={
            "email": "new@loomero.dev",
            "userName": "Nina",
            "role": "intern",
            "accessCode": "123456",
        })
        assert response.status_code == 500

    async def test_missing_fields(self, client: AsyncClient, admin, mock_email_service):
        response = await client.post("/api/v1/functions/send-approval-email", headers=admin.headers, json={
            "email": "new@loomero.dev",
        })
        assert response.status_code == 422


class TestSendMilestoneNotification:
    async def test_sends_approved(self, client: AsyncClient, identity, mock_email_service):
        caller = identity()
        response = await client.post(
            "/api/v1/functions/send-milestone-notification", headers=caller.headers, json=NOTIFICATION
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Notification sent successfully"}
        kwargs = mock_email_service.send_template.await_args.kwargs
        assert kwargs["template_name"] == "milestone_approved"
        assert kwargs["context"]["feedback"] == "Solid"
        assert kwargs["from_address"] == "notifications@resend.dev"

    async def test_submitted_passes_notes(self, client: AsyncClient, identity, mock_email_service):
        body = {**NOTIFICATION, "status": "submitted", "submissionNotes": "See PR"}
        response = await client.post(
            "/api/v1/functions/send-milestone-notification", headers=identity().headers, json=body
        )
        assert response.status_code == 200
        context = mock_email_service.send_template.await_args.kwargs["context"]
        assert context["submission_notes"] == "See PR"
        assert "feedback" not in context

    async def test_missing_required_fields(self, client: AsyncClient, identity, mock_email_service):
        body = {k: v for k, v in NOTIFICATION.items() if k != "projectTitle"}
        response = await client.post(
            "/api/v1/functions/send-milestone-notification", headers=identity().headers, json=body
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields"

    async def test_invalid_status(self, client: AsyncClient, identity, mock_email_service):
        body = {**NOTIFICATION, "status": "archived"}
        response = await client.post(
            "/api/v1/functions/send-milestone-notification", headers=identity().headers, json=body
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid status: archived"

    async def test_not_configured(self, client: AsyncClient, identity, mock_email_service):
        mock_email_service.send_template = AsyncMock(
            side_effect=EmailNotConfiguredError("Email service not configured properly")
        )
        response = await client.post(
            "/api/v1/functions/send-milestone-notification", headers=identity().headers, json=NOTIFICATION
        )
        assert response.status_code == 500
        assert response.json()["detail"] == "Email service not configured properly"

    async def test_requires_token(self, client: AsyncClient, mock_email_service):
        response = await client.post("/api/v1/functions/send-milestone-notification", json=NOTIFICATION)
        assert response.status_code == 401

    async def test_provider_checked_before_payload(self, client: AsyncClient, identity, mock_email_service):
        mock_email_service.is_configured = False
        body = {k: v for k, v in NOTIFICATION.items() if k != "projectTitle"}
        response = await client.post(
            "/api/v1/functions/send-milestone-notification", headers=identity().headers, json=body
        )
        assert response.status_code == 500
        assert response.json()["detail"] == "Email service not configured properly"
        mock_email_service.send_template.assert_not_awaited()
