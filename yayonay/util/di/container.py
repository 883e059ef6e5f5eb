"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container

from yayonay.application.engine import EngagementEngine
from yayonay.config import Settings
from yayonay.util.di import PROVIDERS, get_provider
from yayonay.util.logging import setup_logging
from yayonay.util.observability import configure_logfire


def create_container() -> AsyncContainer:
    """Build the production container: SQL stores, session identity, wall clock."""
    return make_async_container(*(get_provider(base)() for base in PROVIDERS))


async def create_engine_from_container(container: AsyncContainer) -> EngagementEngine:
    """Configure logging and observability, then resolve the engine.

    Args:
        container: DI container

    Returns:
        Engine ready for use
    """
    settings = await container.get(Settings)
    setup_logging(settings)
    configure_logfire(settings)
    return await container.get(EngagementEngine)
