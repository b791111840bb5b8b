"""Listing and lookup of stored trends."""
from typing import Optional

from trendbot.core.errors import NotFoundError, ValidationError
from trendbot.core.repositories import TrendStore
from trendbot.core.schemas import Trend, TrendFilter, TrendPage, normalize_category


class TrendQueryService:
    """Applies default filters and pagination over the trend store."""

    def __init__(self, store: TrendStore, default_limit: int = 50, max_limit: int = 100):
        self.store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    def resolve(self, flt: Optional[TrendFilter] = None) -> TrendFilter:
        """Fill defaults: visible trends only, default page size, canonical category."""
        flt = flt or TrendFilter()

        if (
            flt.min_relevance is not None
            and flt.max_relevance is not None
            and flt.min_relevance > flt.max_relevance
        ):
            raise ValidationError("min_relevance cannot be greater than max_relevance")

        category = normalize_category(flt.category) if flt.category else None
        limit = min(flt.limit or self.default_limit, self.max_limit)
        search = flt.search.strip() if flt.search else None

        return flt.model_copy(update={
            "category": category or None,
            "is_hidden": False if flt.is_hidden is None else flt.is_hidden,
            "search": search or None,
            "limit": limit,
        })

    async def list(self, flt: Optional[TrendFilter] = None) -> TrendPage:
        resolved = self.resolve(flt)
        trends, total = await self.store.select_filtered(resolved)
        return TrendPage(trends=trends, total=total, limit=resolved.limit, offset=resolved.offset)

    async def get(self, trend_id: int) -> Trend:
        trend = await self.store.get_by_id(trend_id)
        if trend is None:
            raise NotFoundError(f"Trend {trend_id} not found")
        return trend
