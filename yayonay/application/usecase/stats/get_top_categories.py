"""Get top categories use case."""

from pydantic import BaseModel, Field

from yayonay.application.usecase.base import BaseUseCase
from yayonay.domain.model import TopCategory
from yayonay.domain.service import StatsService


class GetTopCategoriesRequest(BaseModel):
    """Get top categories request."""

    limit: int = Field(default=5, ge=1, le=100)


class GetTopCategoriesUseCase(BaseUseCase):
    """Use case for ranking categories by votes."""

    def __init__(self, stats_service: StatsService) -> None:
        """Initialize get top categories use case.

        Args:
            stats_service: Stats domain service
        """
        self.stats_service = stats_service

    async def execute(self, request: GetTopCategoriesRequest) -> list[TopCategory]:
        """Execute get top categories flow."""
        return await self.stats_service.top_categories(request.limit)
