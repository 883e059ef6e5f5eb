"""Swappable infrastructure components.

Each component is a base provider plus its implementations. The production
implementations are imported here so ``get_provider`` can find them among
the base's subclasses; mocks live in ``tests.di``.
"""

from .clock import ClockProvider, ProdClockProvider
from .identity import IdentityComponentProvider, ProdIdentityComponentProvider
from .persistence import PersistenceProvider, ProdPersistenceProvider

__all__ = [
    "ClockProvider",
    "IdentityComponentProvider",
    "PersistenceProvider",
    "ProdClockProvider",
    "ProdIdentityComponentProvider",
    "ProdPersistenceProvider",
]
