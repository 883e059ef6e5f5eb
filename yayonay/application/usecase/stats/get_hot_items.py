"""Get hot items use case."""

from typing import Optional

from pydantic import BaseModel, Field

from yayonay.application.usecase.base import BaseUseCase
from yayonay.domain.model import HotItem
from yayonay.domain.service import StatsService
from yayonay.domain.value import CategoryId


class GetHotItemsRequest(BaseModel):
    """Get hot items request."""

    category_id: Optional[CategoryId] = None
    limit: int = Field(default=10, ge=1, le=100)


class GetHotItemsUseCase(BaseUseCase):
    """Use case for listing the most voted subcategories."""

    def __init__(self, stats_service: StatsService) -> None:
        """Initialize get hot items use case.

        Args:
            stats_service: Stats domain service
        """
        self.stats_service = stats_service

    async def execute(self, request: GetHotItemsRequest) -> list[HotItem]:
        """Execute get hot items flow."""
        return await self.stats_service.hot_items(request.category_id, request.limit)
