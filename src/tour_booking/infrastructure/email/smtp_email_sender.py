"""SMTP delivery of account emails through aiosmtplib."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from email.message import EmailMessage

import aiosmtplib

from tour_booking.application.ports.email_sender_port import EmailDeliveryError, EmailSenderPort
from tour_booking.application.ports.user_repository_port import UserRecord
from tour_booking.infrastructure.email.template_renderer import (
    EmailTemplateRenderer,
    RenderedEmail,
    first_name_of,
)

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to the Tour Booking family!"
PASSWORD_RESET_SUBJECT_TEMPLATE = "Reset your password (valid for only {minutes} minutes)"


@dataclass(frozen=True)
class SmtpConfig:
    """Connection and sender settings for one SMTP relay."""

    host: str
    port: int
    from_email: str
    from_name: str
    username: str | None = None
    password: str | None = None
    use_tls: bool = False
    timeout_seconds: float = 10.0


class SmtpEmailSender(EmailSenderPort):
    """Send rendered multipart emails over SMTP."""

    def __init__(
        self,
        *,
        config: SmtpConfig,
        renderer: EmailTemplateRenderer | None = None,
        reset_ttl_minutes: int = 10,
    ) -> None:
        self._config = config
        self._renderer = renderer or EmailTemplateRenderer()
        self._reset_ttl_minutes = reset_ttl_minutes

    async def send_welcome(self, *, user: UserRecord, url: str) -> None:
        rendered = self._renderer.render(
            template="welcome",
            subject=WELCOME_SUBJECT,
            context={"first_name": first_name_of(user.name), "url": url},
        )
        await self._send(to=user.email, rendered=rendered)

    async def send_password_reset(self, *, user: UserRecord, url: str) -> None:
        rendered = self._renderer.render(
            template="password_reset",
            subject=PASSWORD_RESET_SUBJECT_TEMPLATE.format(minutes=self._reset_ttl_minutes),
            context={
                "first_name": first_name_of(user.name),
                "url": url,
                "ttl_minutes": self._reset_ttl_minutes,
            },
        )
        await self._send(to=user.email, rendered=rendered)

    def build_message(self, *, to: str, rendered: RenderedEmail) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = rendered.subject
        message["From"] = f"{self._config.from_name} <{self._config.from_email}>"
        message["To"] = to
        message.set_content(rendered.text_body)
        message.add_alternative(rendered.html_body, subtype="html")
        return message

    async def _send(self, *, to: str, rendered: RenderedEmail) -> None:
        message = self.build_message(to=to, rendered=rendered)
        try:
            await aiosmtplib.send(
                message,
                hostname=self._config.host,
                port=self._config.port,
                username=self._config.username,
                password=self._config.password,
                start_tls=self._config.use_tls,
                timeout=self._config.timeout_seconds,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.warning(
                "smtp_send_failed host=%s subject=%s error=%s",
                self._config.host,
                rendered.subject,
                exc,
            )
            raise EmailDeliveryError(f"smtp delivery failed: {exc}") from exc

        logger.info("smtp_send_ok subject=%s", rendered.subject)
