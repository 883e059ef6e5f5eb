"""Standard library logging setup for the engine process."""

import logging
import sys

from yayonay.config import Settings

_LEVELS = {"production": logging.WARNING, "staging": logging.INFO}

# Drivers and migration tooling are chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncpg", "alembic")


def level_for(settings: Settings) -> int:
    """Root log level for the configured environment."""
    if settings.debug:
        return logging.DEBUG
    return _LEVELS.get(settings.environment, logging.INFO)


def setup_logging(settings: Settings) -> None:
    """Route log records to stdout at the environment's level.

    Args:
        settings: Application settings
    """
    level = level_for(settings)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    logging.getLogger("yayonay").setLevel(level)

    logging.getLogger(__name__).info(
        "Logging ready (environment=%s, level=%s)",
        settings.environment,
        logging.getLevelName(level),
    )
