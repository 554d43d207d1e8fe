"""Bootstrap helper for creating the initial Admin account at startup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from user_accounts.application.ports.user_repository_port import UserRepositoryPort
from user_accounts.application.services.user_account_service import UserAccountService
from user_accounts.application.services.user_creation_coordinator import UserCreateRequest
from user_accounts.domain.credentials import normalize_user_login, require_user_password
from user_accounts.domain.result import ErrorCause
from user_accounts.domain.user_group import GroupCode

_BOOTSTRAP_GROUP_DESCRIPTION = "initial administrator"

logger = logging.getLogger(__name__)


class AdminBootstrapConfigError(ValueError):
    """Raised when bootstrap-admin environment configuration is invalid."""


@dataclass(frozen=True)
class AdminBootstrapConfig:
    """Runtime configuration for one-time admin bootstrap."""

    login: str
    password: str


class AdminBootstrapOutcome(StrEnum):
    """Outcome states for initial admin bootstrap execution."""

    CREATED = "created"
    SKIPPED_ADMIN_PRESENT = "skipped_admin_present"
    FAILED = "failed"


@dataclass(frozen=True)
class AdminBootstrapResult:
    """Result model for one initial-admin bootstrap attempt."""

    outcome: AdminBootstrapOutcome
    login: str
    cause: ErrorCause | None = None
    message: str | None = None


def resolve_admin_bootstrap_config(
    *,
    login: str | None,
    password: str | None,
    password_file: str | None,
) -> AdminBootstrapConfig | None:
    """Resolve bootstrap-admin config from env values or return None when disabled."""

    any_value_set = any(value is not None for value in (login, password, password_file))
    if login is None:
        if any_value_set:
            raise AdminBootstrapConfigError(
                "BOOTSTRAP_ADMIN_LOGIN is required when bootstrap-admin variables are set"
            )
        return None

    if password is not None and password_file is not None:
        raise AdminBootstrapConfigError(
            "set only one of BOOTSTRAP_ADMIN_PASSWORD or BOOTSTRAP_ADMIN_PASSWORD_FILE"
        )

    resolved_password: str | None = None
    if password_file is not None:
        try:
            resolved_password = Path(password_file).read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise AdminBootstrapConfigError(
                "failed to read BOOTSTRAP_ADMIN_PASSWORD_FILE"
            ) from exc
    elif password is not None:
        resolved_password = password

    if resolved_password is None:
        raise AdminBootstrapConfigError(
            "set BOOTSTRAP_ADMIN_PASSWORD or BOOTSTRAP_ADMIN_PASSWORD_FILE "
            "when BOOTSTRAP_ADMIN_LOGIN is set"
        )

    try:
        normalized_login = normalize_user_login(login=login)
    except ValueError as exc:
        raise AdminBootstrapConfigError("BOOTSTRAP_ADMIN_LOGIN cannot be blank") from exc
    try:
        checked_password = require_user_password(password=resolved_password)
    except ValueError as exc:
        raise AdminBootstrapConfigError("bootstrap admin password cannot be blank") from exc

    return AdminBootstrapConfig(login=normalized_login, password=checked_password)


async def ensure_initial_admin_user(
    *,
    accounts: UserAccountService,
    users: UserRepositoryPort,
    config: AdminBootstrapConfig,
) -> AdminBootstrapResult:
    """Create the configured Admin user when no Admin exists, otherwise skip."""

    if await users.exists_admin_group_user():
        return AdminBootstrapResult(
            outcome=AdminBootstrapOutcome.SKIPPED_ADMIN_PRESENT,
            login=config.login,
        )

    result = await accounts.create_user(
        UserCreateRequest(
            login=config.login,
            password=config.password,
            group_code=GroupCode.ADMIN,
            group_description=_BOOTSTRAP_GROUP_DESCRIPTION,
        )
    )
    if result.succeeded:
        return AdminBootstrapResult(outcome=AdminBootstrapOutcome.CREATED, login=config.login)

    if result.cause is ErrorCause.ADMIN_CONFLICT:
        # Another process created an Admin between the check and the create.
        return AdminBootstrapResult(
            outcome=AdminBootstrapOutcome.SKIPPED_ADMIN_PRESENT,
            login=config.login,
        )

    logger.warning(
        "admin_bootstrap_failed login=%s cause=%s message=%s",
        config.login,
        result.cause,
        result.message,
    )
    return AdminBootstrapResult(
        outcome=AdminBootstrapOutcome.FAILED,
        login=config.login,
        cause=result.cause,
        message=result.message,
    )
