"""Shared checks for user credential inputs."""

from __future__ import annotations


def normalize_user_login(*, login: str | None) -> str:
    """Normalize one login and reject absent or blank values."""

    if login is None:
        raise ValueError("login is required")
    normalized = login.strip()
    if not normalized:
        raise ValueError("login cannot be blank")
    return normalized


def require_user_password(*, password: str | None) -> str:
    """Return the opaque password unchanged, rejecting absent or blank values."""

    if password is None:
        raise ValueError("password is required")
    if not password.strip():
        raise ValueError("password cannot be blank")
    return password
