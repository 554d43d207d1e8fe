from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.config import Config

from alembic import command
from user_accounts.application.ports.user_repository_port import (
    UserCreateInput,
    UserQuery,
    UserRelation,
    UserStateRecord,
    UserStoreError,
)
from user_accounts.domain.user_group import GroupCode
from user_accounts.domain.user_state import StatusCode
from user_accounts.infrastructure.db.session import create_db_engine, create_session_factory
from user_accounts.infrastructure.db.user_repository import SqlAlchemyUserRepository

_CREATED_AT = datetime(2026, 3, 4, 5, 6, 7, tzinfo=UTC)
_ALL_RELATIONS = (UserRelation.USER_GROUP, UserRelation.USER_STATE)


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


def _payload(
    login: str,
    *,
    group_code: GroupCode = GroupCode.USER,
    state_code: StatusCode = StatusCode.ACTIVE,
) -> UserCreateInput:
    return UserCreateInput(
        login=login,
        password=f"{login}-password",
        created_at=_CREATED_AT,
        group_code=group_code,
        group_description=f"{login} group",
        state_code=state_code,
        state_description=f"{login} state",
    )


@pytest.mark.asyncio
async def test_insert_user_persists_user_group_and_state(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "user_repo_insert.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))

    user_id = await repo.insert_user(_payload("alice", group_code=GroupCode.ADMIN))

    users = await repo.query_users(
        query=UserQuery(user_id=user_id),
        skip=0,
        take=10,
        includes=_ALL_RELATIONS,
    )
    assert len(users) == 1
    user = users[0]
    assert user.login == "alice"
    assert user.password == "alice-password"
    assert user.created_at == _CREATED_AT
    assert user.user_group is not None
    assert user.user_group.user_id == user_id
    assert user.user_group.code is GroupCode.ADMIN
    assert user.user_group.description == "alice group"
    assert user.user_state is not None
    assert user.user_state.code is StatusCode.ACTIVE
    assert user.user_state.description == "alice state"

    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        group_code = connection.execute(
            sa.text("SELECT code FROM user_groups WHERE user_id = :user_id"),
            {"user_id": user_id},
        ).scalar_one()
    assert group_code == "Admin"


@pytest.mark.asyncio
async def test_query_users_omits_relations_not_included(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_includes.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))
    await repo.insert_user(_payload("alice"))

    bare = await repo.query_users(query=None, skip=0, take=10)
    with_state = await repo.query_users(
        query=None,
        skip=0,
        take=10,
        includes=[UserRelation.USER_STATE],
    )

    assert bare[0].user_group is None
    assert bare[0].user_state is None
    assert with_state[0].user_group is None
    assert with_state[0].user_state is not None


@pytest.mark.asyncio
async def test_query_users_filters_and_pages_in_id_order(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_paging.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))
    for login in ("a", "b", "c", "d"):
        await repo.insert_user(_payload(login))
    await repo.insert_user(_payload("root", group_code=GroupCode.ADMIN))

    page = await repo.query_users(query=None, skip=1, take=2)
    plain_users = await repo.query_users(
        query=UserQuery(group_code=GroupCode.USER),
        skip=0,
        take=10,
    )
    by_login = await repo.query_users(query=UserQuery(login="c"), skip=0, take=10)
    empty = await repo.query_users(query=UserQuery(login="missing"), skip=0, take=10)

    assert [user.login for user in page] == ["b", "c"]
    assert [user.login for user in plain_users] == ["a", "b", "c", "d"]
    assert [user.login for user in by_login] == ["c"]
    assert empty == []


@pytest.mark.asyncio
async def test_existence_checks(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_exists.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))

    assert await repo.exists_user_with_login(login="alice") is False
    assert await repo.exists_admin_group_user() is False

    await repo.insert_user(_payload("alice"))
    assert await repo.exists_user_with_login(login="alice") is True
    assert await repo.exists_admin_group_user() is False

    await repo.insert_user(_payload("root", group_code=GroupCode.ADMIN))
    assert await repo.exists_admin_group_user() is True


@pytest.mark.asyncio
async def test_store_allows_duplicate_logins(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_duplicates.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))

    await repo.insert_user(_payload("alice"))
    await repo.insert_user(_payload("alice"))

    users = await repo.query_users(query=UserQuery(login="alice"), skip=0, take=10)
    assert len(users) == 2


@pytest.mark.asyncio
async def test_find_and_update_user_state(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_state.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))
    user_id = await repo.insert_user(_payload("alice"))

    state = await repo.find_user_state(user_id=user_id)
    assert state is not None
    assert state.code is StatusCode.ACTIVE

    await repo.update_user_state(
        UserStateRecord(
            id=state.id,
            user_id=user_id,
            code=StatusCode.BLOCKED,
            description=state.description,
        )
    )

    updated = await repo.find_user_state(user_id=user_id)
    assert updated is not None
    assert updated.code is StatusCode.BLOCKED
    assert updated.description == "alice state"
    assert await repo.find_user_state(user_id=user_id + 100) is None


@pytest.mark.asyncio
async def test_update_of_missing_state_raises_store_error(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_repo_missing_state.db")
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))

    with pytest.raises(UserStoreError):
        await repo.update_user_state(
            UserStateRecord(id=42, user_id=42, code=StatusCode.BLOCKED, description=None)
        )


@pytest.mark.asyncio
async def test_database_errors_are_wrapped(tmp_path: Path) -> None:
    async_url = f"sqlite+aiosqlite:///{tmp_path / 'not_migrated.db'}"
    repo = SqlAlchemyUserRepository(create_session_factory(async_url))

    with pytest.raises(UserStoreError) as exc_info:
        await repo.exists_user_with_login(login="alice")
    assert exc_info.value.__cause__ is not None

    with pytest.raises(UserStoreError):
        await repo.insert_user(_payload("alice"))

    with pytest.raises(UserStoreError):
        await repo.query_users(query=None, skip=0, take=10)


@pytest.mark.asyncio
async def test_connection_failures_are_wrapped_as_store_errors() -> None:
    engine = create_db_engine("postgresql+asyncpg://u:p@127.0.0.1:1/db")
    repo = SqlAlchemyUserRepository(create_session_factory(engine))
    state = UserStateRecord(id=1, user_id=1, code=StatusCode.BLOCKED, description=None)

    try:
        with pytest.raises(UserStoreError) as insert_error:
            await repo.insert_user(_payload("alice"))
        with pytest.raises(UserStoreError):
            await repo.exists_user_with_login(login="alice")
        with pytest.raises(UserStoreError):
            await repo.exists_admin_group_user()
        with pytest.raises(UserStoreError):
            await repo.find_user_state(user_id=1)
        with pytest.raises(UserStoreError):
            await repo.update_user_state(state)
        with pytest.raises(UserStoreError):
            await repo.query_users(query=None, skip=0, take=10)
    finally:
        await engine.dispose()

    assert isinstance(insert_error.value.__cause__, OSError)
