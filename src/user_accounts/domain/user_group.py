"""Group classification codes for user accounts."""

from __future__ import annotations

from enum import StrEnum


class GroupCode(StrEnum):
    """Closed set of group codes a user can hold."""

    ADMIN = "Admin"
    USER = "User"
