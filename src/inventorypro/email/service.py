"""
Outbound subscription email.

Templates render into an ``OutboundMessage``; a provider (SMTP, Resend or
SES, chosen by ``IPRO_EMAIL_PROVIDER``) delivers it. Delivery never raises:
a provider failure is logged and reported as ``False`` so the calling sweep
still books its reminder.
"""

from __future__ import annotations

import hashlib
import ssl
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from email.message import EmailMessage
from typing import TYPE_CHECKING, Any

import structlog

from inventorypro.config import Settings, get_settings
from inventorypro.email.templates import (
    subscription_expired,
    subscription_reminder,
    subscription_renewed,
)

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = structlog.get_logger()

_TEMPLATE_REGISTRY: dict[str, Callable[..., tuple[str, str, str]]] = {
    "subscription_reminder": subscription_reminder,
    "subscription_expired": subscription_expired,
    "subscription_renewed": subscription_renewed,
}


@dataclass(frozen=True)
class OutboundMessage:
    """A rendered message ready for dispatch."""

    to: str
    subject: str
    html_body: str
    text_body: str
    template: str = ""


class BaseEmailProvider(ABC):
    """Delivers an ``OutboundMessage``; subclasses implement ``_transmit``."""

    name = "base"

    def __init__(self, from_address: str, from_name: str) -> None:
        self.from_address = from_address
        self.from_name = from_name

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_address}>"

    @abstractmethod
    async def _transmit(self, message: OutboundMessage) -> None:
        """Hand the message to the transport. Raises on failure."""

    async def send(self, message: OutboundMessage) -> bool:
        try:
            await self._transmit(message)
        except Exception:
            logger.exception("email_send_failed", to=message.to, template=message.template, provider=self.name)
            return False
        logger.info("email_sent", to=message.to, template=message.template, provider=self.name)
        return True


class SMTPProvider(BaseEmailProvider):
    """aiosmtplib with STARTTLS unless ``use_tls`` is off."""

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
        timeout: float = 30.0,
    ) -> None:
        super().__init__(from_address, from_name)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_mime(self, message: OutboundMessage) -> EmailMessage:
        mime = EmailMessage()
        mime["From"] = self.sender
        mime["To"] = message.to
        mime["Subject"] = message.subject
        if message.template:
            mime["X-InventoryPro-Template"] = message.template
        mime.set_content(message.text_body)
        mime.add_alternative(message.html_body, subtype="html")
        return mime

    async def _transmit(self, message: OutboundMessage) -> None:
        import aiosmtplib

        await aiosmtplib.send(
            self.build_mime(message),
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=self.use_tls,
            tls_context=ssl.create_default_context() if self.use_tls else None,
            timeout=self.timeout,
        )


class ResendProvider(BaseEmailProvider):
    """Resend HTTP API. The template name is sent as a message tag."""

    name = "resend"
    endpoint = "https://api.resend.com/emails"

    def __init__(self, api_key: str, from_address: str, from_name: str, timeout: float = 10.0) -> None:
        super().__init__(from_address, from_name)
        self.api_key = api_key
        self.timeout = timeout

    def build_body(self, message: OutboundMessage) -> dict[str, Any]:
        body: dict[str, Any] = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html_body,
            "text": message.text_body,
        }
        if message.template:
            body["tags"] = [{"name": "template", "value": message.template}]
        return body

    async def _transmit(self, message: OutboundMessage) -> None:
        import httpx

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.endpoint,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=self.build_body(message),
            )
            response.raise_for_status()


class SESProvider(BaseEmailProvider):
    """AWS SES via aioboto3 (``ses`` extra)."""

    name = "ses"

    def __init__(self, region: str, from_address: str, from_name: str) -> None:
        super().__init__(from_address, from_name)
        self.region = region

    async def _transmit(self, message: OutboundMessage) -> None:
        import aioboto3

        utf8 = "UTF-8"
        async with aioboto3.Session().client("ses", region_name=self.region) as ses:
            await ses.send_email(
                Source=self.sender,
                Destination={"ToAddresses": [message.to]},
                Message={
                    "Subject": {"Data": message.subject, "Charset": utf8},
                    "Body": {
                        "Text": {"Data": message.text_body, "Charset": utf8},
                        "Html": {"Data": message.html_body, "Charset": utf8},
                    },
                },
                Tags=[{"Name": "template", "Value": message.template or "none"}],
            )


_PROVIDER_FACTORIES: dict[str, Callable[[Settings], BaseEmailProvider]] = {
    "smtp": lambda s: SMTPProvider(
        s.smtp_host,
        s.smtp_port,
        s.smtp_username,
        s.smtp_password,
        s.email_from_address,
        s.email_from_name,
        use_tls=s.smtp_use_tls,
    ),
    "resend": lambda s: ResendProvider(s.resend_api_key, s.email_from_address, s.email_from_name),
    "ses": lambda s: SESProvider(s.ses_region, s.email_from_address, s.email_from_name),
}


def create_provider(settings: Settings | None = None) -> BaseEmailProvider:
    """Build the configured provider.

    Raises:
        ValueError: If ``email_provider`` names no known provider.
    """
    settings = settings or get_settings()
    factory = _PROVIDER_FACTORIES.get(settings.email_provider.lower())
    if factory is None:
        msg = f"Unsupported email provider: {settings.email_provider}"
        raise ValueError(msg)
    return factory(settings)


class EmailService:
    """
    Renders subscription templates and dispatches them through a provider.

    With Redis attached, each recipient is capped at ``rate_limit_max``
    messages per hour; without Redis, or while Redis is unreachable, there
    is no cap.
    """

    RATE_LIMIT_WINDOW = 3600

    def __init__(
        self,
        provider: BaseEmailProvider | None = None,
        redis: Redis | None = None,
        rate_limit_max: int | None = None,
    ) -> None:
        self.provider = provider or create_provider()
        self._redis = redis
        if rate_limit_max is None:
            rate_limit_max = get_settings().email_rate_limit_per_hour
        self.rate_limit_max = rate_limit_max

    async def _within_rate_limit(self, recipient: str) -> bool:
        if self._redis is None:
            return True
        key = f"ipro:email_rate:{hashlib.sha256(recipient.lower().encode()).hexdigest()}"
        try:
            count = await self._redis.incr(key)
            if count == 1:
                await self._redis.expire(key, self.RATE_LIMIT_WINDOW)
        except Exception:
            # Fail open: an unavailable counter does not block delivery
            logger.warning("email_rate_limit_unavailable", exc_info=True)
            return True
        return count <= self.rate_limit_max

    def render(self, to: str, template_name: str, **context: Any) -> OutboundMessage:
        """
        Render a registered template into an outbound message.

        Raises:
            ValueError: If the template name is unknown.
        """
        template_func = _TEMPLATE_REGISTRY.get(template_name)
        if template_func is None:
            msg = f"Unknown template: {template_name}"
            raise ValueError(msg)
        subject, html_body, text_body = template_func(**context)
        return OutboundMessage(to, subject, html_body, text_body, template=template_name)

    async def dispatch(self, message: OutboundMessage) -> bool:
        """Send a rendered message. False if rate limited or undelivered."""
        if not await self._within_rate_limit(message.to):
            logger.warning("email_rate_limited", to=message.to, template=message.template)
            return False
        return await self.provider.send(message)

    async def send_template(self, to: str, template_name: str, **context: Any) -> bool:
        return await self.dispatch(self.render(to, template_name, **context))


_email_service: EmailService | None = None


def get_email_service(redis: Redis | None = None) -> EmailService:
    """Process-wide service; ``redis`` only matters on first call."""
    global _email_service  # noqa: PLW0603
    if _email_service is None:
        _email_service = EmailService(redis=redis)
    return _email_service


def reset_email_service() -> None:
    global _email_service  # noqa: PLW0603
    _email_service = None
