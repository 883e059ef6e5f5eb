"""Mock clock providers for testing."""

from datetime import datetime, timezone

from dishka import Scope, provide

from yayonay.util.clock import Clock, FixedClock
from yayonay.util.di.infrastructure.clock import ClockProvider

# Wednesday noon, far from any DST change
TEST_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class MockClockProvider(ClockProvider):
    """Mock clock provider with a clock tests can move."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_fixed_clock(self) -> FixedClock:
        """Provide fixed clock."""
        return FixedClock(TEST_NOW)

    @provide(scope=Scope.APP)
    def get_clock(self, clock: FixedClock) -> Clock:
        """Expose the fixed clock as the engine's clock."""
        return clock
