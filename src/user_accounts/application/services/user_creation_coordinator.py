"""Concurrency-safe user creation protocol.

A creation attempt moves through validation, the Admin-uniqueness check,
admission through the `AdmissionRegistry`, a fixed latency window, the
persisted duplicate check and the insert. Only one attempt per login may be
past admission at any time, and the reservation is released on every exit
path once taken.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from user_accounts.application.ports.user_repository_port import (
    UserCreateInput,
    UserRepositoryPort,
    UserStoreError,
)
from user_accounts.application.services.admission_registry import AdmissionRegistry
from user_accounts.domain.credentials import normalize_user_login, require_user_password
from user_accounts.domain.result import ErrorCause, Result
from user_accounts.domain.user_group import GroupCode
from user_accounts.domain.user_state import StatusCode

DEFAULT_CREATE_DELAY_SECONDS = 5.0

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserCreateRequest:
    """Caller-supplied candidate user; `state_code` is overwritten with Active."""

    login: str | None
    password: str | None
    group_code: GroupCode
    group_description: str | None = None
    state_code: StatusCode | None = None
    state_description: str | None = None


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class UserCreationCoordinator:
    """Turn one creation request into a persisted user or a classified failure."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        registry: AdmissionRegistry,
        delay_seconds: float = DEFAULT_CREATE_DELAY_SECONDS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds cannot be negative")
        self._users = users
        self._registry = registry
        self._delay_seconds = delay_seconds
        self._clock = clock

    async def create_user(self, payload: UserCreateRequest | None) -> Result[None]:
        """Run the creation protocol and report its outcome."""

        try:
            create_input = self._normalize(payload)
        except ValueError as exc:
            logger.info("user_create_rejected cause=%s reason=%s", ErrorCause.INVALID_INPUT, exc)
            return Result.failure(ErrorCause.INVALID_INPUT, str(exc))

        login = create_input.login
        if create_input.group_code is GroupCode.ADMIN:
            try:
                admin_exists = await self._users.exists_admin_group_user()
            except UserStoreError as exc:
                return _store_failure(login=login, error=exc)
            if admin_exists:
                return _reject(
                    login=login,
                    cause=ErrorCause.ADMIN_CONFLICT,
                    message="Admin already exists",
                )

        if not self._registry.reserve(login):
            return _reject(
                login=login,
                cause=ErrorCause.LOGIN_CONFLICT_INFLIGHT,
                message=f"creation already in progress for login {login!r}",
            )
        try:
            return await self._create_admitted(create_input)
        finally:
            self._registry.release(login)

    def _normalize(self, payload: UserCreateRequest | None) -> UserCreateInput:
        """Validate the candidate and build the insert payload."""

        if payload is None:
            raise ValueError("user is required")
        login = normalize_user_login(login=payload.login)
        password = require_user_password(password=payload.password)
        if payload.group_code is None:
            raise ValueError("group code is required")
        group_code = GroupCode(payload.group_code)

        return UserCreateInput(
            login=login,
            password=password,
            created_at=self._clock(),
            group_code=group_code,
            group_description=payload.group_description,
            state_code=StatusCode.ACTIVE,
            state_description=payload.state_description,
        )

    async def _create_admitted(self, create_input: UserCreateInput) -> Result[None]:
        """Hold the reservation through the write window, then persist."""

        login = create_input.login
        logger.debug(
            "user_create_admitted login=%s delay_seconds=%s",
            login,
            self._delay_seconds,
        )
        await asyncio.sleep(self._delay_seconds)

        try:
            if await self._users.exists_user_with_login(login=login):
                return _reject(
                    login=login,
                    cause=ErrorCause.LOGIN_CONFLICT_PERSISTED,
                    message=f"user with login {login!r} already exists",
                )
            user_id = await self._users.insert_user(create_input)
        except UserStoreError as exc:
            return _store_failure(login=login, error=exc)

        logger.info(
            "user_created user_id=%s login=%s group=%s",
            user_id,
            login,
            create_input.group_code,
        )
        return Result.success()


def _reject(*, login: str, cause: ErrorCause, message: str) -> Result[None]:
    logger.info("user_create_rejected login=%s cause=%s", login, cause)
    return Result.failure(cause, message)


def _store_failure(*, login: str, error: UserStoreError) -> Result[None]:
    logger.warning("user_create_store_error login=%s error=%s", login, error)
    return Result.failure(ErrorCause.STORE_ERROR, str(error) or "store operation failed")
