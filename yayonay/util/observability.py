"""Logfire wiring for the engine.

Domain services open spans around store round trips and emit structured
events for outcomes, e.g.::

    with logfire.span("vote_service.cast_vote", item=item.key):
        logfire.info("Vote committed", item=item.key, version=version)
"""

import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from yayonay.config import ObservabilitySettings, Settings

SERVICE_NAME = "yayonay-engine"
SERVICE_VERSION = "0.1.0"


def should_send(observability: ObservabilitySettings) -> bool:
    """Whether spans leave the process.

    An explicit ``send_to_logfire`` wins; otherwise a configured token turns
    sending on.
    """
    if observability.send_to_logfire is not None:
        return observability.send_to_logfire
    return bool(observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire from ``OBSERVABILITY__*`` settings.

    Args:
        settings: Application settings
    """
    observability = settings.observability
    send = should_send(observability)

    logfire.configure(
        service_name=SERVICE_NAME,
        service_version=SERVICE_VERSION,
        environment=settings.environment,
        send_to_logfire=send,
        token=observability.logfire_token or None,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )
    logfire.info(
        "Logfire configured",
        environment=settings.environment,
        send_to_logfire=send,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace every statement the engine's pool executes.

    Args:
        engine: Async engine backing the SQL document store
    """
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)
