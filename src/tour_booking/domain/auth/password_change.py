"""Rules relating password changes to previously issued tokens."""

from __future__ import annotations

from datetime import datetime, timedelta

# Stamped slightly in the past so a token issued within the same second as the
# change survives the second-granularity `iat` comparison below.
PASSWORD_CHANGE_STAMP_OFFSET = timedelta(seconds=1)


def password_change_timestamp(*, now: datetime) -> datetime:
    """Return the `password_changed_at` value recorded for a change at `now`."""

    return now - PASSWORD_CHANGE_STAMP_OFFSET


def changed_password_after(
    *,
    password_changed_at: datetime | None,
    token_issued_at: datetime,
) -> bool:
    """Return whether the password changed after the token was issued."""

    if password_changed_at is None:
        return False
    return int(password_changed_at.timestamp()) > int(token_issued_at.timestamp())
