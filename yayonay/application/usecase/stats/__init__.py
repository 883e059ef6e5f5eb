"""Stats use cases."""

from .get_hot_items import GetHotItemsRequest, GetHotItemsUseCase
from .get_todays_top import GetTodaysTopRequest, GetTodaysTopUseCase, TodaysTopEntry
from .get_top_categories import GetTopCategoriesRequest, GetTopCategoriesUseCase

__all__ = [
    "GetHotItemsRequest",
    "GetHotItemsUseCase",
    "GetTodaysTopRequest",
    "GetTodaysTopUseCase",
    "GetTopCategoriesRequest",
    "GetTopCategoriesUseCase",
    "TodaysTopEntry",
]
