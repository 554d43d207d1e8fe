"""Async SQLAlchemy engine and session factory helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_db_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine for the user account store."""

    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def create_session_factory(
    database_url: str | AsyncEngine,
    *,
    echo: bool = False,
) -> async_sessionmaker[AsyncSession]:
    """Create a reusable async session factory from a URL or an existing engine."""

    engine = (
        database_url
        if isinstance(database_url, AsyncEngine)
        else create_db_engine(database_url, echo=echo)
    )
    return async_sessionmaker(engine, expire_on_commit=False)
