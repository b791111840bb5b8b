"""Tests for hiding and restoring trends."""
import pytest

from trendbot.core.errors import NotFoundError
from trendbot.core.repositories import MemoryTrendStore
from trendbot.core.schemas import TrendFilter
from trendbot.trends.ingestion import TrendIngestionService
from trendbot.trends.query import TrendQueryService
from trendbot.trends.visibility import TrendVisibilityService


class CountingStore(MemoryTrendStore):
    """Memory store that records update calls."""

    def __init__(self):
        super().__init__()
        self.updates = []

    async def update_by_id(self, trend_id, values):
        self.updates.append((trend_id, dict(values)))
        return await super().update_by_id(trend_id, values)


@pytest.fixture
def store():
    return CountingStore()


async def create_trend(store, **fields):
    payload = {"title": "Hide Me", "description": "d", "category": "Educational", "relevance_score": 50, **fields}
    result = await TrendIngestionService(store).bulk_create([payload])
    return result.created[0]


class TestSetHidden:

    @pytest.mark.asyncio
    async def test_hide_then_restore(self, store):
        trend = await create_trend(store)
        service = TrendVisibilityService(store)

        hidden = await service.set_hidden(trend.id, True)
        assert hidden.is_hidden is True

        restored = await service.set_hidden(trend.id, False)
        assert restored.is_hidden is False

    @pytest.mark.asyncio
    async def test_only_flag_changes(self, store):
        trend = await create_trend(store)

        hidden = await TrendVisibilityService(store).hide(trend.id)

        assert hidden.model_dump(exclude={"is_hidden"}) == trend.model_dump(exclude={"is_hidden"})
        assert store.updates == [(trend.id, {"is_hidden": True})]

    @pytest.mark.asyncio
    async def test_repeated_hide_is_noop(self, store):
        trend = await create_trend(store)
        service = TrendVisibilityService(store)

        first = await service.hide(trend.id)
        second = await service.hide(trend.id)

        assert first == second
        assert len(store.updates) == 1

    @pytest.mark.asyncio
    async def test_restore_visible_trend_is_noop(self, store):
        trend = await create_trend(store)

        result = await TrendVisibilityService(store).restore(trend.id)

        assert result.is_hidden is False
        assert store.updates == []

    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            await TrendVisibilityService(store).set_hidden(12345, True)


@pytest.mark.asyncio
async def test_hidden_trend_leaves_and_rejoins_default_listing(store):
    trend = await create_trend(store)
    visibility = TrendVisibilityService(store)
    query = TrendQueryService(store)

    await visibility.hide(trend.id)
    assert trend.id not in [t.id for t in (await query.list()).trends]
    assert trend.id in [t.id for t in (await query.list(TrendFilter(is_hidden=True))).trends]

    await visibility.restore(trend.id)
    assert trend.id in [t.id for t in (await query.list()).trends]
    assert trend.id not in [t.id for t in (await query.list(TrendFilter(is_hidden=True))).trends]
