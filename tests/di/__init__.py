"""Mock providers for testing."""

from .clock import MockClockProvider
from .identity import MockIdentityComponentProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockClockProvider",
    "MockIdentityComponentProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
