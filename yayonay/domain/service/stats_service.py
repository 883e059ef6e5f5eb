"""Engagement statistics service."""

from datetime import datetime
from typing import Optional

import logfire

from yayonay.domain.model.item import ItemAggregateView
from yayonay.domain.model.stats import DailyVoteBucket, HotItem, TopCategory
from yayonay.domain.repository import DocumentStore, Query
from yayonay.domain.value import CategoryId, ItemRef, SubCategoryId

from .base import Service
from .cooldown_policy import CooldownPolicy


def _subcategories_query(category_id: Optional[CategoryId]) -> Query:
    if category_id is None:
        return Query(collection="subcategories", group=True)
    return Query(collection=f"categories/{category_id}/subcategories")


class StatsService(Service):
    """Read-side rankings over the aggregate documents."""

    def __init__(self, document_store: DocumentStore, cooldown_policy: CooldownPolicy) -> None:
        """Initialize stats service.

        Args:
            document_store: Shared document store
            cooldown_policy: Supplies the calendar used for daily buckets
        """
        self.document_store = document_store
        self.cooldown_policy = cooldown_policy

    async def _subcategory_views(
        self, category_id: Optional[CategoryId]
    ) -> list[ItemAggregateView]:
        snapshot = await self.document_store.query(_subcategories_query(category_id))
        views = []
        for doc in snapshot.documents:
            # categories/<c>/subcategories/<s>
            segments = doc.path.split("/")
            item = ItemRef(
                category_id=CategoryId(segments[1]),
                subcategory_id=SubCategoryId(segments[3]),
            )
            views.append(ItemAggregateView.from_document(item, doc.data))
        return views

    async def hot_items(
        self, category_id: Optional[CategoryId] = None, limit: int = 10
    ) -> list[HotItem]:
        """Subcategories with the most votes, optionally within one category."""
        with logfire.span("stats_service.hot_items", category_id=category_id, limit=limit):
            views = await self._subcategory_views(category_id)
            ranked = sorted(
                views,
                key=lambda v: (-(v.yay_count + v.nay_count), v.item.key),
            )
            return [
                HotItem(
                    item=view.item,
                    name=view.name or view.item.key,
                    image_url=view.image_url,
                    yay_count=view.yay_count,
                    nay_count=view.nay_count,
                )
                for view in ranked[:limit]
            ]

    async def top_categories(self, limit: int = 5) -> list[TopCategory]:
        """Categories ranked by the summed votes of their subcategories."""
        with logfire.span("stats_service.top_categories", limit=limit):
            totals: dict[str, int] = {}
            for view in await self._subcategory_views(None):
                category = str(view.item.category_id)
                totals[category] = totals.get(category, 0) + view.yay_count + view.nay_count
            ranked = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
            return [
                TopCategory(category_id=category, total_votes=total)
                for category, total in ranked[:limit]
            ]

    async def daily_bucket(self, now: datetime) -> DailyVoteBucket:
        """Votes counted on the calendar day of ``now``."""
        day = self.cooldown_policy.calendar_day(now).isoformat()
        snapshot = await self.document_store.get(f"dailyVotes/{day}")
        data = snapshot.data or {}
        return DailyVoteBucket(
            day=day,
            total_votes=data.get("totalVotes", 0),
            items=data.get("items", {}),
        )

    async def todays_top(self, now: datetime, limit: int = 5) -> list[tuple[str, int]]:
        """Item keys with the most votes today."""
        with logfire.span("stats_service.todays_top", limit=limit):
            bucket = await self.daily_bucket(now)
            return bucket.top_items(limit)
