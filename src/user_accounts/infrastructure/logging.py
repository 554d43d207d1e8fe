"""Shared logging configuration for user account processes."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_SQLALCHEMY_LOGGER = "sqlalchemy.engine"


def configure_logging(*, level: str) -> None:
    """Configure process logging with one format and the runtime level.

    SQL statement logging stays at WARNING unless the process runs at DEBUG.
    """

    normalized_level = level.strip().upper() if level.strip() else "INFO"
    resolved_level = getattr(logging, normalized_level, logging.INFO)

    logging.basicConfig(
        level=resolved_level,
        format=_LOG_FORMAT,
    )
    if resolved_level > logging.DEBUG:
        logging.getLogger(_SQLALCHEMY_LOGGER).setLevel(logging.WARNING)
