"""Hide/restore state of trends."""
from trendbot.core.errors import NotFoundError
from trendbot.core.logging import get_logger
from trendbot.core.repositories import TrendStore
from trendbot.core.schemas import Trend

logger = get_logger(__name__)


class TrendVisibilityService:
    """Flips the ``is_hidden`` flag; setting the current value is a no-op."""

    def __init__(self, store: TrendStore):
        self.store = store

    async def set_hidden(self, trend_id: int, is_hidden: bool) -> Trend:
        current = await self.store.get_by_id(trend_id)
        if current is None:
            raise NotFoundError(f"Trend {trend_id} not found")

        if current.is_hidden == is_hidden:
            return current

        updated = await self.store.update_by_id(trend_id, {"is_hidden": is_hidden})
        if updated is None:
            raise NotFoundError(f"Trend {trend_id} not found")

        logger.info(f"Trend {trend_id} {'hidden' if is_hidden else 'restored'}")
        return updated

    async def hide(self, trend_id: int) -> Trend:
        return await self.set_hidden(trend_id, True)

    async def restore(self, trend_id: int) -> Trend:
        return await self.set_hidden(trend_id, False)
