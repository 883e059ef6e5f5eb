"""Get today's top votes use case."""

from pydantic import BaseModel, Field

from yayonay.application.usecase.base import BaseUseCase
from yayonay.domain.service import StatsService
from yayonay.util.clock import Clock


class GetTodaysTopRequest(BaseModel):
    """Get today's top votes request."""

    limit: int = Field(default=5, ge=1, le=100)


class TodaysTopEntry(BaseModel):
    """One ranked item of the day."""

    item_key: str
    votes: int


class GetTodaysTopUseCase(BaseUseCase):
    """Use case for the items voted on most today."""

    def __init__(self, stats_service: StatsService, clock: Clock) -> None:
        """Initialize get today's top use case.

        Args:
            stats_service: Stats domain service
            clock: Time source (defines "today")
        """
        self.stats_service = stats_service
        self.clock = clock

    async def execute(self, request: GetTodaysTopRequest) -> list[TodaysTopEntry]:
        """Execute get today's top flow."""
        ranked = await self.stats_service.todays_top(self.clock.now(), request.limit)
        return [TodaysTopEntry(item_key=key, votes=votes) for key, votes in ranked]
