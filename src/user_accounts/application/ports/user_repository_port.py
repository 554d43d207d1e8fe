"""Port for user persistence used by the account services."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Protocol

from user_accounts.domain.user_group import GroupCode
from user_accounts.domain.user_state import StatusCode


class UserStoreError(RuntimeError):
    """Raised when the backing store fails to complete one operation."""


class UserRelation(StrEnum):
    """Related records that can be loaded together with a user."""

    USER_GROUP = "user_group"
    USER_STATE = "user_state"


@dataclass(frozen=True)
class UserGroupRecord:
    """User group persistence model."""

    id: int
    user_id: int
    code: GroupCode
    description: str | None


@dataclass(frozen=True)
class UserStateRecord:
    """User state persistence model."""

    id: int
    user_id: int
    code: StatusCode
    description: str | None


@dataclass(frozen=True)
class UserRecord:
    """User persistence model; related records are None unless included."""

    id: int
    login: str
    password: str
    created_at: datetime | None
    user_group: UserGroupRecord | None = None
    user_state: UserStateRecord | None = None


@dataclass(frozen=True)
class UserCreateInput:
    """Insert payload for one user with its owned group and state."""

    login: str
    password: str
    created_at: datetime
    group_code: GroupCode
    group_description: str | None
    state_code: StatusCode
    state_description: str | None


@dataclass(frozen=True)
class UserQuery:
    """Filter over user attributes; every field that is set must match."""

    user_id: int | None = None
    login: str | None = None
    group_code: GroupCode | None = None
    state_code: StatusCode | None = None


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def insert_user(self, payload: UserCreateInput) -> int:
        """Insert user, group and state as one unit and return the new user id."""

    async def exists_user_with_login(self, *, login: str) -> bool:
        """Return whether any user already holds `login`."""

    async def exists_admin_group_user(self) -> bool:
        """Return whether any user belongs to the Admin group."""

    async def find_user_state(self, *, user_id: int) -> UserStateRecord | None:
        """Return the state owned by `user_id` or None."""

    async def update_user_state(self, state: UserStateRecord) -> None:
        """Persist code and description of an existing state row."""

    async def query_users(
        self,
        *,
        query: UserQuery | None,
        skip: int,
        take: int,
        includes: Collection[UserRelation] = (),
    ) -> list[UserRecord]:
        """Return users matching `query`, ordered by id, bounded by skip/take."""
