"""Alembic environment for the user account schema."""

from __future__ import annotations

import asyncio
import os
from logging.config import fileConfig
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context
from user_accounts.infrastructure.db.metadata import metadata

config = context.config

_INI_DEFAULT_URL = "sqlite:///./user_accounts.db"
_ASYNC_DRIVERS = ("+asyncpg", "+aiosqlite")

# An explicit URL set by the caller wins over DATABASE_URL.
load_dotenv(Path(__file__).resolve().parents[1] / ".env")
_env_url = os.getenv("DATABASE_URL")
if _env_url and config.get_main_option("sqlalchemy.url") == _INI_DEFAULT_URL:
    config.set_main_option("sqlalchemy.url", _env_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _configure_and_run(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def _run_with_async_engine() -> None:
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_configure_and_run)
    finally:
        await engine.dispose()


def _run_with_sync_engine() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        _configure_and_run(connection)


def _run_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _run_offline()
elif any(driver in (config.get_main_option("sqlalchemy.url") or "") for driver in _ASYNC_DRIVERS):
    asyncio.run(_run_with_async_engine())
else:
    _run_with_sync_engine()
