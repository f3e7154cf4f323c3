"""
Outbound email for LoomeroFlow notifications.

Two delivery providers, chosen by ``LOOMERO_EMAIL_PROVIDER``:

- ``resend``: the Resend HTTP API (default, needs ``LOOMERO_RESEND_API_KEY``)
- ``smtp``: any SMTP relay through aiosmtplib

``EmailService`` renders the named templates from ``loomero.email.templates``
and caps how many messages one recipient gets per hour when Redis is
available. Routers that send mail as a side effect use ``notify()``, which
never raises.
"""

from __future__ import annotations

import hashlib
import ssl
from abc import ABC, abstractmethod
from collections.abc import Callable
from email.message import EmailMessage
from typing import TYPE_CHECKING, Any

import aiosmtplib
import httpx
import structlog
from redis.exceptions import RedisError

from loomero.config import get_settings
from loomero.email import templates

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = structlog.get_logger()

RESEND_API_URL = "https://api.resend.com/emails"
THROTTLE_WINDOW_SECONDS = 3600

Template = Callable[..., tuple[str, str, str]]

_TEMPLATE_REGISTRY: dict[str, Template] = {
    "approval": templates.approval_email,
    "milestone_approved": templates.milestone_approved,
    "milestone_rejected": templates.milestone_rejected,
    "milestone_submitted": templates.milestone_submitted,
    "task_assigned": templates.task_assigned,
}


class EmailNotConfiguredError(RuntimeError):
    """The selected provider has no API key or host."""


class BaseEmailProvider(ABC):
    name = "base"
    from_address = ""
    from_name = "LoomeroFlow"

    @property
    def is_configured(self) -> bool:
        return True

    def sender(self, from_address: str | None = None) -> str:
        return f"{self.from_name} <{from_address or self.from_address}>"

    @abstractmethod
    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_address: str | None = None,
    ) -> bool:
        """Deliver one message. False means the provider rejected it."""


class SMTPProvider(BaseEmailProvider):
    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        from_name: str,
        use_tls: bool = True,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.from_name = from_name
        self.use_tls = use_tls

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    def build_message(
        self, to_email: str, subject: str, html_body: str, text_body: str, from_address: str | None
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender(from_address)
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")
        return message

    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_address: str | None = None,
    ) -> bool:
        message = self.build_message(to_email, subject, html_body, text_body, from_address)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.use_tls,
                tls_context=ssl.create_default_context() if self.use_tls else None,
            )
        except (aiosmtplib.SMTPException, OSError):
            logger.exception("email_send_failed", to=to_email, provider=self.name)
            return False
        logger.info("email_sent", to=to_email, subject=subject, provider=self.name)
        return True


class ResendProvider(BaseEmailProvider):
    name = "resend"

    def __init__(self, api_key: str, from_address: str, from_name: str) -> None:
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_address: str | None = None,
    ) -> bool:
        payload = {
            "from": self.sender(from_address),
            "to": [to_email],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(
                    RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "email_send_failed",
                to=to_email,
                provider=self.name,
                status=exc.response.status_code,
                body=exc.response.text[:200],
            )
            return False
        except httpx.HTTPError:
            logger.exception("email_send_failed", to=to_email, provider=self.name)
            return False
        logger.info("email_sent", to=to_email, subject=subject, provider=self.name)
        return True


def provider_from_settings() -> BaseEmailProvider:
    settings = get_settings()
    name = settings.email_provider.lower()
    if name == "resend":
        return ResendProvider(settings.resend_api_key, settings.email_from_address, settings.email_from_name)
    if name == "smtp":
        return SMTPProvider(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            from_address=settings.email_from_address,
            from_name=settings.email_from_name,
            use_tls=settings.smtp_use_tls,
        )
    msg = f"Unsupported email provider: {name}"
    raise ValueError(msg)


class EmailService:
    """Template rendering plus a per-recipient hourly cap on top of a provider."""

    def __init__(
        self,
        provider: BaseEmailProvider | None = None,
        redis: Redis | None = None,
        rate_limit_per_hour: int | None = None,
    ) -> None:
        self.provider = provider or provider_from_settings()
        self._redis = redis
        self.rate_limit_max = rate_limit_per_hour or get_settings().email_rate_limit_per_hour

    @property
    def is_configured(self) -> bool:
        return self.provider.is_configured

    async def _under_hourly_cap(self, recipient: str) -> bool:
        if self._redis is None:
            return True
        # Hashed so addresses never appear in Redis keys
        digest = hashlib.sha256(recipient.strip().lower().encode()).hexdigest()
        key = f"email_rate:{digest}"
        count = await self._redis.incr(key)
        if count == 1:
            await self._redis.expire(key, THROTTLE_WINDOW_SECONDS)
        return count <= self.rate_limit_max

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_address: str | None = None,
    ) -> bool:
        """
        Send one message.

        Returns False when the recipient is over the hourly cap or the
        provider fails.

        Raises:
            EmailNotConfiguredError: If the provider has no credentials.
        """
        if not self.is_configured:
            msg = "Email service not configured properly"
            raise EmailNotConfiguredError(msg)
        if not await self._under_hourly_cap(to):
            logger.warning("email_rate_limited", to=to, subject=subject)
            return False
        return await self.provider.send(to, subject, html_body, text_body, from_address)

    async def send_template(
        self,
        to: str,
        template_name: str,
        context: dict[str, Any],
        from_address: str | None = None,
    ) -> bool:
        """Render ``template_name`` with ``context`` and send it to ``to``."""
        template = _TEMPLATE_REGISTRY.get(template_name)
        if template is None:
            msg = f"Unknown template: {template_name}"
            raise ValueError(msg)
        subject, html_body, text_body = template(**context)
        return await self.send_email(to, subject, html_body, text_body, from_address)


_email_service: EmailService | None = None


def get_email_service(redis: Redis | None = None) -> EmailService:
    global _email_service  # noqa: PLW0603
    if _email_service is None:
        _email_service = EmailService(redis=redis)
    return _email_service


def reset_email_service() -> None:
    global _email_service  # noqa: PLW0603
    _email_service = None


async def notify(to: str, template_name: str, context: dict[str, Any], from_address: str | None = None) -> bool:
    """
    Send a templated email after the request's real work is committed.

    Delivery problems are logged and reported as False. The caller's
    response does not depend on them.
    """
    from loomero.redis_client import get_redis_or_none

    try:
        service = get_email_service(get_redis_or_none())
        return await service.send_template(
            to=to, template_name=template_name, context=context, from_address=from_address
        )
    except (EmailNotConfiguredError, ValueError, TypeError, RedisError, httpx.HTTPError, OSError):
        logger.exception("notification_email_failed", to=to, template=template_name)
        return False
