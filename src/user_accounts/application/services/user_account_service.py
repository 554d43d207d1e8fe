"""Application service exposing user account operations as `Result` values."""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import replace

from user_accounts.application.ports.user_repository_port import (
    UserQuery,
    UserRecord,
    UserRelation,
    UserRepositoryPort,
    UserStoreError,
)
from user_accounts.application.services.user_creation_coordinator import (
    UserCreateRequest,
    UserCreationCoordinator,
)
from user_accounts.domain.result import ErrorCause, Result
from user_accounts.domain.user_state import StatusCode

DEFAULT_LIST_TAKE = 10

logger = logging.getLogger(__name__)


class UserAccountService:
    """Expose user creation, lookup, listing and deactivation use-cases."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        coordinator: UserCreationCoordinator,
    ) -> None:
        self._users = users
        self._coordinator = coordinator

    async def create_user(self, payload: UserCreateRequest | None) -> Result[None]:
        """Create one user through the admission-gated creation protocol."""

        return await self._coordinator.create_user(payload)

    async def get_user(
        self,
        query: UserQuery,
        *,
        includes: Collection[UserRelation] = (),
        track: bool = False,
    ) -> Result[UserRecord]:
        """Return the first user matching `query`; no match is a success with None.

        Records are detached snapshots, so `track` never changes the outcome.
        """

        logger.debug("user_lookup query=%s includes=%s track=%s", query, sorted(includes), track)
        try:
            users = await self._users.query_users(query=query, skip=0, take=1, includes=includes)
        except UserStoreError as exc:
            return _store_failure(operation="user_lookup", error=exc)
        return Result.success(users[0] if users else None)

    async def list_users(
        self,
        query: UserQuery | None = None,
        *,
        skip: int = 0,
        take: int = DEFAULT_LIST_TAKE,
        includes: Collection[UserRelation] = (),
    ) -> Result[list[UserRecord]]:
        """Return a page of users ordered by id."""

        if skip < 0:
            return Result.failure(ErrorCause.INVALID_INPUT, "skip cannot be negative")
        if take < 0:
            return Result.failure(ErrorCause.INVALID_INPUT, "take cannot be negative")
        if take == 0:
            return Result.success([])

        try:
            users = await self._users.query_users(
                query=query,
                skip=skip,
                take=take,
                includes=includes,
            )
        except UserStoreError as exc:
            return _store_failure(operation="user_list", error=exc)
        return Result.success(users)

    async def deactivate_user(self, user_id: int) -> Result[None]:
        """Transition one user state to Blocked; already-blocked users stay blocked."""

        try:
            state = await self._users.find_user_state(user_id=user_id)
            if state is None:
                logger.info(
                    "user_deactivate_rejected user_id=%s cause=%s",
                    user_id,
                    ErrorCause.NOT_FOUND,
                )
                return Result.failure(ErrorCause.NOT_FOUND, f"user not found: {user_id}")
            await self._users.update_user_state(replace(state, code=StatusCode.BLOCKED))
        except UserStoreError as exc:
            return _store_failure(operation="user_deactivate", error=exc)

        logger.info("user_deactivated user_id=%s previous_state=%s", user_id, state.code)
        return Result.success()


def _store_failure(*, operation: str, error: UserStoreError) -> Result:
    logger.warning("%s_store_error error=%s", operation, error)
    return Result.failure(ErrorCause.STORE_ERROR, str(error) or "store operation failed")
