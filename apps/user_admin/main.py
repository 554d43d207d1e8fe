"""user-admin entrypoint: service wiring and startup admin bootstrap."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from user_accounts.application.services.admin_bootstrap import (
    AdminBootstrapResult,
    ensure_initial_admin_user,
    resolve_admin_bootstrap_config,
)
from user_accounts.application.services.admission_registry import AdmissionRegistry
from user_accounts.application.services.user_account_service import UserAccountService
from user_accounts.application.services.user_creation_coordinator import (
    UserCreationCoordinator,
)
from user_accounts.config.settings import Settings, load_settings
from user_accounts.infrastructure.db.session import create_db_engine, create_session_factory
from user_accounts.infrastructure.db.user_repository import SqlAlchemyUserRepository
from user_accounts.infrastructure.logging import configure_logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserAccountRuntime:
    """Wired user account service and the collaborators it owns."""

    accounts: UserAccountService
    users: SqlAlchemyUserRepository
    registry: AdmissionRegistry
    engine: AsyncEngine

    async def close(self) -> None:
        """Dispose the engine and its pooled connections."""

        await self.engine.dispose()


def build_user_account_runtime(
    database_url: str,
    *,
    delay_seconds: float,
    registry: AdmissionRegistry | None = None,
) -> UserAccountRuntime:
    """Build user account service with SQLAlchemy-backed dependencies."""

    engine = create_db_engine(database_url)
    session_factory = create_session_factory(engine)
    users = SqlAlchemyUserRepository(session_factory)
    resolved_registry = registry if registry is not None else AdmissionRegistry()
    coordinator = UserCreationCoordinator(
        users=users,
        registry=resolved_registry,
        delay_seconds=delay_seconds,
    )
    return UserAccountRuntime(
        accounts=UserAccountService(users=users, coordinator=coordinator),
        users=users,
        registry=resolved_registry,
        engine=engine,
    )


async def run_startup(
    *,
    settings: Settings,
    runtime: UserAccountRuntime,
) -> AdminBootstrapResult | None:
    """Run the optional initial-admin bootstrap configured in settings."""

    config = resolve_admin_bootstrap_config(
        login=settings.bootstrap_admin_login,
        password=settings.bootstrap_admin_password,
        password_file=settings.bootstrap_admin_password_file,
    )
    if config is None:
        logger.info("admin_bootstrap_disabled")
        return None

    result = await ensure_initial_admin_user(
        accounts=runtime.accounts,
        users=runtime.users,
        config=config,
    )
    logger.info("admin_bootstrap_result login=%s outcome=%s", result.login, result.outcome.value)
    return result


async def _run_user_admin() -> None:
    settings = load_settings()
    configure_logging(level=settings.log_level)
    logger.info(
        "user_admin_starting user_create_delay_seconds=%s",
        settings.user_create_delay_seconds,
    )

    runtime = build_user_account_runtime(
        settings.database_url,
        delay_seconds=settings.user_create_delay_seconds,
    )
    try:
        await run_startup(settings=settings, runtime=runtime)
    finally:
        await runtime.close()


def main() -> None:
    """Run user account startup tasks."""

    asyncio.run(_run_user_admin())


if __name__ == "__main__":
    main()
