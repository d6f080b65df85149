"""Port for transactional account emails."""

from __future__ import annotations

from typing import Protocol

from tour_booking.application.ports.user_repository_port import UserRecord


class EmailDeliveryError(RuntimeError):
    """Raised when an email could not be handed to the transport."""


class EmailSenderPort(Protocol):
    """Outbound account email contract."""

    async def send_welcome(self, *, user: UserRecord, url: str) -> None:
        """Send the welcome email pointing at the user's account page."""

    async def send_password_reset(self, *, user: UserRecord, url: str) -> None:
        """Send the password reset link."""
