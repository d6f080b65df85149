"""Select the email sender adapter from runtime settings."""

from __future__ import annotations

from tour_booking.application.ports.email_sender_port import EmailSenderPort
from tour_booking.config.settings import Settings
from tour_booking.infrastructure.email.log_email_sender import LoggingEmailSender
from tour_booking.infrastructure.email.smtp_email_sender import SmtpConfig, SmtpEmailSender


def build_email_sender(settings: Settings) -> EmailSenderPort:
    """Return the SMTP sender when `SMTP_HOST` is set, otherwise the logging sender."""

    if settings.smtp_host is None:
        return LoggingEmailSender()

    return SmtpEmailSender(
        config=SmtpConfig(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_email=settings.email_from,
            from_name=settings.email_from_name,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        ),
        reset_ttl_minutes=settings.password_reset_ttl_minutes,
    )
