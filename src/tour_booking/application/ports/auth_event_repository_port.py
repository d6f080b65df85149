"""Port for append-only authentication audit events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Client metadata captured from the HTTP request."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AuthEventCreateInput:
    """Input payload for appending one auth event."""

    user_id: UUID | None
    event_type: str
    ip_address: str | None
    user_agent: str | None
    payload: dict[str, Any] = field(default_factory=dict)


class AuthEventRepositoryPort(Protocol):
    """Auth event persistence contract."""

    async def append_event(self, payload: AuthEventCreateInput) -> int:
        """Append one event and return its id."""
