"""SQLAlchemy adapter for the append-only auth audit trail."""

from __future__ import annotations

import logging

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tour_booking.application.ports.auth_event_repository_port import (
    AuthEventCreateInput,
    AuthEventRepositoryPort,
)
from tour_booking.infrastructure.db.metadata import auth_events

logger = logging.getLogger(__name__)


class SqlAlchemyAuthEventRepository(AuthEventRepositoryPort):
    """Auth event repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append_event(self, payload: AuthEventCreateInput) -> int:
        """Insert one auth event row and return its id."""

        statement = (
            sa.insert(auth_events)
            .values(
                user_id=payload.user_id,
                event_type=payload.event_type,
                ip_address=payload.ip_address,
                user_agent=payload.user_agent,
                payload=dict(payload.payload),
            )
            .returning(auth_events.c.id)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()

        event_id = int(result.scalar_one())
        logger.debug(
            "auth_event_appended id=%s event_type=%s user_id=%s",
            event_id,
            payload.event_type,
            payload.user_id,
        )
        return event_id
