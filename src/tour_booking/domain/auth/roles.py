"""User role enum shared by authorization checks and persistence."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    """Fixed set of account roles."""

    USER = "user"
    GUIDE = "guide"
    LEAD_GUIDE = "lead-guide"
    ADMIN = "admin"
