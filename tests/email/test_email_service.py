"""Tests for email service and templates."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from loomero.email.service import (
    BaseEmailProvider,
    EmailNotConfiguredError,
    EmailService,
    ResendProvider,
    SMTPProvider,
    notify,
)
from loomero.email.templates import (
    approval_email,
    milestone_approved,
    milestone_rejected,
    milestone_submitted,
    task_assigned,
)


class RecordingProvider(BaseEmailProvider):
    name = "recording"

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.sent: list[dict] = []

    async def send(self, to_email, subject, html_body, text_body, from_address=None):
        self.sent.append({"to": to_email, "subject": subject, "html": html_body, "from": from_address})
        return self.result


class TestEmailTemplates:
    def test_approval_email_returns_tuple(self):
        subject, html, text = approval_email("Tara", "mentor", "482913", "tara@loomero.dev")
        assert "Approved" in subject
        assert "482913" in html
        assert "482913" in text
        assert "Mentor" in text
        assert "tara@loomero.dev" in html

    def test_milestone_approved_with_feedback(self):
        subject, html, text = milestone_approved("Ivy", "Design schema", "Tracker", feedback="Nice work")
        assert subject.endswith("Milestone Approved: Design schema")
        assert "Mentor Feedback" in html
        assert "Nice work" in text

    def test_milestone_approved_without_feedback(self):
        _, html, text = milestone_approved(None, "Design schema", "Tracker")
        assert "Mentor Feedback" not in html
        assert text.startswith("Hi there,")

    def test_milestone_rejected_subject(self):
        subject, _, text = milestone_rejected("Ivy", "Ship endpoints", "Tracker", feedback="Add tests")
        assert "Needs Revision: Ship endpoints" in subject
        assert "resubmit" in text

    def test_milestone_submitted_defaults_to_mentor(self):
        subject, html, text = milestone_submitted(None, "Design schema", "Tracker", submission_notes="Done")
        assert "New Milestone Submission" in subject
        assert "Hi Mentor" in html
        assert "Submission notes:\nDone" in text

    def test_task_assigned_fields(self):
        subject, html, text = task_assigned("Ivy", "Write docs", "Cover the API", "Max", due_date="2026-11-01",
                                            priority="high")
        assert subject.endswith("New Task Assigned: Write docs")
        assert "Priority: High" in text
        assert "Due: 2026-11-01" in text
        assert "Max assigned you" in html

    def test_user_values_are_escaped(self):
        _, html, _ = milestone_rejected("<b>Eve</b>", "<script>x</script>", "P", feedback="<i>no</i>")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;Eve&lt;/b&gt;" in html
        assert "&lt;i&gt;no&lt;/i&gt;" in html


class TestEmailService:
    def test_template_dispatch(self):
        """Verify send_template maps names to correct template functions."""
        from loomero.email.service import _TEMPLATE_REGISTRY

        assert set(_TEMPLATE_REGISTRY) == {
            "approval",
            "milestone_approved",
            "milestone_rejected",
            "milestone_submitted",
            "task_assigned",
        }

    async def test_send_template_renders_and_sends(self):
        provider = RecordingProvider()
        service = EmailService(provider=provider, rate_limit_per_hour=5)
        sent = await service.send_template(
            "ivy@loomero.dev",
            "milestone_approved",
            {"recipient_name": "Ivy", "milestone_title": "M1", "project_title": "P"},
            from_address="notifications@loomero.dev",
        )
        assert sent is True
        assert provider.sent[0]["to"] == "ivy@loomero.dev"
        assert provider.sent[0]["from"] == "notifications@loomero.dev"
        assert "M1" in provider.sent[0]["subject"]

    async def test_unknown_template(self):
        service = EmailService(provider=RecordingProvider(), rate_limit_per_hour=5)
        with pytest.raises(ValueError, match="Unknown template"):
            await service.send_template("x@loomero.dev", "welcome", {})

    async def test_unconfigured_provider_raises(self):
        service = EmailService(provider=ResendProvider(api_key="", from_address="a@b.dev", from_name="LF"))
        assert service.is_configured is False
        with pytest.raises(EmailNotConfiguredError):
            await service.send_email("x@loomero.dev", "s", "<p>h</p>", "t")

    async def test_rate_limit_per_recipient(self):
        redis = MagicMock()
        redis.incr = AsyncMock(side_effect=[1, 2, 3])
        redis.expire = AsyncMock()
        provider = RecordingProvider()
        service = EmailService(provider=provider, redis=redis, rate_limit_per_hour=2)

        results = [await service.send_email("Ivy@Loomero.dev", "s", "h", "t") for _ in range(3)]
        assert results == [True, True, False]
        assert len(provider.sent) == 2
        redis.expire.assert_awaited_once()
        key = redis.incr.await_args_list[0].args[0]
        assert key.startswith("email_rate:")
        assert "ivy" not in key

    async def test_smtp_provider_builds_message(self):
        provider = SMTPProvider("smtp.loomero.dev", 587, "user", "pw", "from@loomero.dev", "LoomeroFlow")
        with patch("aiosmtplib.send", new=AsyncMock()) as mock_send:
            ok = await provider.send("to@loomero.dev", "Subject", "<p>html</p>", "text")
        assert ok is True
        message = mock_send.await_args.args[0]
        assert message["From"] == "LoomeroFlow <from@loomero.dev>"
        assert message["To"] == "to@loomero.dev"
        assert mock_send.await_args.kwargs["hostname"] == "smtp.loomero.dev"

    async def test_smtp_failure_returns_false(self):
        import aiosmtplib

        provider = SMTPProvider("smtp.loomero.dev", 587, "", "", "from@loomero.dev", "LoomeroFlow")
        with patch("aiosmtplib.send", new=AsyncMock(side_effect=aiosmtplib.SMTPException("boom"))):
            assert await provider.send("to@loomero.dev", "s", "h", "t") is False


class TestNotify:
    async def test_swallows_failures(self, monkeypatch):
        service = MagicMock()
        service.send_template = AsyncMock(side_effect=EmailNotConfiguredError("no key"))
        monkeypatch.setattr("loomero.email.service.get_email_service", lambda *a, **kw: service)
        assert await notify("x@loomero.dev", "approval", {}) is False

    async def test_passes_result_through(self, mock_email_service):
        assert await notify("x@loomero.dev", "task_assigned", {"task_title": "t"}) is True
        mock_email_service.send_template.assert_awaited_once_with(
            to="x@loomero.dev",
            template_name="task_assigned",
            context={"task_title": "t"},
            from_address=None,
        )
