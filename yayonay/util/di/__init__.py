"""Dependency injection wiring for the engagement engine."""

from typing import Type

from yayonay.util.di.application import ProdApplicationProvider
from yayonay.util.di.base import Component, ProviderBase
from yayonay.util.di.core import ProdConfigProvider
from yayonay.util.di.domain import ProdDomainProvider
from yayonay.util.di.infrastructure import (
    ClockProvider,
    IdentityComponentProvider,
    PersistenceProvider,
    ProdClockProvider,
    ProdIdentityComponentProvider,
    ProdPersistenceProvider,
)

# Layer providers first, then the swappable infrastructure components
PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    ClockProvider,
    IdentityComponentProvider,
    PersistenceProvider,
]


def is_component(base: Type[ProviderBase]) -> bool:
    """Whether a provider is a swappable infrastructure component."""
    return base.__mock_component__ is not None


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve the provider class to instantiate for an entry of PROVIDERS.

    Layer providers are returned as they are. For a component the subclass
    whose ``__is_mock__`` matches ``use_mock`` is returned; mock subclasses
    only exist once the test package defining them has been imported.

    Raises:
        ValueError: If the component has no implementation of that kind
    """
    if not is_component(base):
        return base

    for impl in base.__subclasses__():
        if impl.__is_mock__ == use_mock:
            return impl

    kind = "mock" if use_mock else "production"
    raise ValueError(f"No {kind} implementation for {base.__mock_component__}")


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "is_component",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "ClockProvider",
    "IdentityComponentProvider",
    "PersistenceProvider",
    "ProdClockProvider",
    "ProdIdentityComponentProvider",
    "ProdPersistenceProvider",
]
