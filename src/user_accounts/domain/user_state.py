"""Lifecycle state codes for user accounts."""

from __future__ import annotations

from enum import StrEnum


class StatusCode(StrEnum):
    """Closed set of lifecycle codes; blocking is one-way."""

    ACTIVE = "Active"
    BLOCKED = "Blocked"
