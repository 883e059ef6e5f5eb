#!/usr/bin/env python3
"""Run document store migrations with Logfire error tracking.

Usage:
    python scripts/run_migrations.py            # upgrade to head
    python scripts/run_migrations.py 3c1f0a7d9e42
"""

import sys
import logfire
from alembic import command
from alembic.config import Config

from yayonay.config import Settings
from yayonay.util.observability import configure_logfire


def main(argv: list[str]) -> int:
    """Upgrade the shared store schema and log any errors to Logfire."""
    settings = Settings()
    target = argv[0] if argv else "head"

    # Configure Logfire
    configure_logfire(settings)

    try:
        logfire.info("Starting store migrations", target=target)

        # migrations/env.py reads the store URL from the settings
        alembic_cfg = Config("alembic.ini")
        command.upgrade(alembic_cfg, target)

        logfire.info("Store migrations completed", target=target)
        return 0

    except Exception as e:
        logfire.error(
            "Store migration failed",
            target=target,
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so deploys stop instead of running on a broken schema
        raise


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
