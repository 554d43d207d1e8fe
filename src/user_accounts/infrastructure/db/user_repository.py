"""SQLAlchemy adapter for user, user group and user state persistence."""

from __future__ import annotations

from collections.abc import Collection
from datetime import UTC, datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from user_accounts.application.ports.user_repository_port import (
    UserCreateInput,
    UserGroupRecord,
    UserQuery,
    UserRecord,
    UserRelation,
    UserRepositoryPort,
    UserStateRecord,
    UserStoreError,
)
from user_accounts.domain.user_group import GroupCode
from user_accounts.domain.user_state import StatusCode
from user_accounts.infrastructure.db.metadata import user_groups, user_states, users

# Drivers raise connection failures as OSError before SQLAlchemy can wrap them.
_STORE_ERRORS = (SQLAlchemyError, OSError)


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert_user(self, payload: UserCreateInput) -> int:
        """Insert user with its group and state in one transaction."""

        user_statement = sa.insert(users).values(
            login=payload.login,
            password=payload.password,
            created_date=payload.created_at,
        ).returning(users.c.id)

        # Closing the session rolls back whatever was not committed.
        try:
            async with self._session_factory() as session:
                result = await session.execute(user_statement)
                user_id = int(result.scalar_one())
                await session.execute(
                    sa.insert(user_groups).values(
                        user_id=user_id,
                        code=payload.group_code.value,
                        description=payload.group_description,
                    )
                )
                await session.execute(
                    sa.insert(user_states).values(
                        user_id=user_id,
                        code=payload.state_code.value,
                        description=payload.state_description,
                    )
                )
                await session.commit()
        except _STORE_ERRORS as error:
            raise UserStoreError(f"failed to insert user {payload.login!r}") from error

        return user_id

    async def exists_user_with_login(self, *, login: str) -> bool:
        """Return whether any user already holds `login`."""

        statement = sa.select(sa.literal(True)).where(users.c.login == login).limit(1)
        return await self._exists(statement, action="check login")

    async def exists_admin_group_user(self) -> bool:
        """Return whether any user belongs to the Admin group."""

        statement = sa.select(sa.literal(True)).where(
            user_groups.c.code == GroupCode.ADMIN.value,
        ).limit(1)
        return await self._exists(statement, action="check admin group")

    async def find_user_state(self, *, user_id: int) -> UserStateRecord | None:
        """Return the state owned by `user_id` or None."""

        statement = sa.select(
            user_states.c.id,
            user_states.c.user_id,
            user_states.c.code,
            user_states.c.description,
        ).where(user_states.c.user_id == user_id).limit(1)

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
        except _STORE_ERRORS as error:
            raise UserStoreError(f"failed to load state for user {user_id}") from error

        row = result.mappings().first()
        if row is None:
            return None
        return UserStateRecord(
            id=int(row["id"]),
            user_id=int(row["user_id"]),
            code=StatusCode(cast(str, row["code"])),
            description=cast(str | None, row["description"]),
        )

    async def update_user_state(self, state: UserStateRecord) -> None:
        """Persist code and description of an existing state row."""

        statement = (
            sa.update(user_states)
            .where(user_states.c.id == state.id)
            .values(code=state.code.value, description=state.description)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                await session.commit()
        except _STORE_ERRORS as error:
            raise UserStoreError(f"failed to update state {state.id}") from error

        if int(result.rowcount or 0) == 0:
            raise UserStoreError(f"user state not found: {state.id}")

    async def query_users(
        self,
        *,
        query: UserQuery | None,
        skip: int,
        take: int,
        includes: Collection[UserRelation] = (),
    ) -> list[UserRecord]:
        """Return users matching `query`, ordered by id, bounded by skip/take."""

        included = frozenset(UserRelation(item) for item in includes)
        statement = (
            sa.select(
                users.c.id,
                users.c.login,
                users.c.password,
                users.c.created_date,
                user_groups.c.id.label("group_id"),
                user_groups.c.code.label("group_code"),
                user_groups.c.description.label("group_description"),
                user_states.c.id.label("state_id"),
                user_states.c.code.label("state_code"),
                user_states.c.description.label("state_description"),
            )
            .select_from(
                users.outerjoin(user_groups, user_groups.c.user_id == users.c.id).outerjoin(
                    user_states, user_states.c.user_id == users.c.id
                )
            )
            .where(*_query_filters(query))
            .order_by(users.c.id)
            .offset(skip)
            .limit(take)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
        except _STORE_ERRORS as error:
            raise UserStoreError("failed to query users") from error

        return [_to_user_record(row, included=included) for row in result.mappings().all()]

    async def _exists(self, statement: sa.Select[tuple[bool]], *, action: str) -> bool:
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
        except _STORE_ERRORS as error:
            raise UserStoreError(f"failed to {action}") from error

        return result.scalar_one_or_none() is True


def _query_filters(query: UserQuery | None) -> list[sa.ColumnElement[bool]]:
    if query is None:
        return []

    filters: list[sa.ColumnElement[bool]] = []
    if query.user_id is not None:
        filters.append(users.c.id == query.user_id)
    if query.login is not None:
        filters.append(users.c.login == query.login)
    if query.group_code is not None:
        filters.append(user_groups.c.code == GroupCode(query.group_code).value)
    if query.state_code is not None:
        filters.append(user_states.c.code == StatusCode(query.state_code).value)
    return filters


def _to_user_record(row: sa.RowMapping, *, included: frozenset[UserRelation]) -> UserRecord:
    user_id = int(row["id"])
    user_group = None
    if UserRelation.USER_GROUP in included and row["group_id"] is not None:
        user_group = UserGroupRecord(
            id=int(row["group_id"]),
            user_id=user_id,
            code=GroupCode(cast(str, row["group_code"])),
            description=cast(str | None, row["group_description"]),
        )
    user_state = None
    if UserRelation.USER_STATE in included and row["state_id"] is not None:
        user_state = UserStateRecord(
            id=int(row["state_id"]),
            user_id=user_id,
            code=StatusCode(cast(str, row["state_code"])),
            description=cast(str | None, row["state_description"]),
        )

    return UserRecord(
        id=user_id,
        login=cast(str, row["login"]),
        password=cast(str, row["password"]),
        created_at=_as_utc(cast(datetime | None, row["created_date"])),
        user_group=user_group,
        user_state=user_state,
    )


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo; stored values are always UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
