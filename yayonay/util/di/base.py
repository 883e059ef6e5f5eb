"""Provider base for the engine's DI container."""

from typing import ClassVar, Literal

from dishka import Provider

# Infrastructure pieces tests can swap for in-memory or fixed versions
Component = Literal["clock", "identity", "persistence"]


class ProviderBase(Provider):
    """Base of every provider in PROVIDERS.

    A provider that declares ``__mock_component__`` is a swappable component:
    its subclasses are the implementations, told apart by ``__is_mock__``.
    ``__depends_on__`` names components that must be real whenever this one
    is real.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
    __depends_on__: ClassVar[set[Component]] = set()
