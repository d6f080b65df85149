"""Email sender that only logs, used when no SMTP relay is configured."""

from __future__ import annotations

import logging

from tour_booking.application.ports.email_sender_port import EmailSenderPort
from tour_booking.application.ports.user_repository_port import UserRecord

logger = logging.getLogger(__name__)


class LoggingEmailSender(EmailSenderPort):
    """Record outbound account emails in the process log instead of sending them."""

    async def send_welcome(self, *, user: UserRecord, url: str) -> None:
        logger.info("email_logged kind=welcome user_id=%s url=%s", user.user_id, url)

    async def send_password_reset(self, *, user: UserRecord, url: str) -> None:
        # The link carries the plaintext credential; keep it out of INFO logs.
        logger.info("email_logged kind=password_reset user_id=%s", user.user_id)
        logger.debug("email_logged kind=password_reset url=%s", url)
