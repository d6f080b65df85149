"""SQLAlchemy metadata definitions for tour booking account tables."""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()
sqlite_bigint = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

users = sa.Table(
    "users",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("email", sa.Text(), nullable=False),
    sa.Column("password_hash", sa.Text(), nullable=False),
    sa.Column("role", sa.Text(), nullable=False, server_default=sa.text("'user'")),
    sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    sa.Column("password_changed_at", sa.DateTime(timezone=True), nullable=True),
    sa.Column("password_reset_token_hash", sa.Text(), nullable=True),
    sa.Column("password_reset_expires_at", sa.DateTime(timezone=True), nullable=True),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.UniqueConstraint("email", name="uq_users_email"),
    sa.CheckConstraint(
        "role IN ('user', 'guide', 'lead-guide', 'admin')",
        name="ck_users_role",
    ),
)
sa.Index("ix_users_password_reset_token_hash", users.c.password_reset_token_hash)

auth_events = sa.Table(
    "auth_events",
    metadata,
    sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column(
        "user_id",
        sa.Uuid(),
        sa.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    ),
    sa.Column("event_type", sa.Text(), nullable=False),
    sa.Column("ip_address", sa.Text(), nullable=True),
    sa.Column("user_agent", sa.Text(), nullable=True),
    sa.Column("payload", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
    sa.Column(
        "occurred_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
)
sa.Index("ix_auth_events_user_id_occurred_at", auth_events.c.user_id, auth_events.c.occurred_at)
sa.Index(
    "ix_auth_events_event_type_occurred_at",
    auth_events.c.event_type,
    auth_events.c.occurred_at,
)
