"""Tests for the SQLAlchemy trend store against SQLite."""
import pytest

from trendbot.core.db import build_engine, build_session_factory, create_all
from trendbot.core.repositories import SQLTrendStore
from trendbot.core.settings import Settings
from trendbot.core.schemas import TrendFilter
from trendbot.trends.ingestion import TrendIngestionService
from trendbot.trends.query import TrendQueryService
from trendbot.trends.visibility import TrendVisibilityService


ROWS = [
    {"title": "First", "description": "alpha", "category": "Educational", "relevance_score": 10,
     "content_ideas": ["a"], "hashtags": ["#a"], "keywords": [], "source": "llm", "is_hidden": False},
    {"title": "Second", "description": "beta 100%", "category": "Entertaining", "relevance_score": None,
     "content_ideas": [], "hashtags": [], "keywords": ["k"], "source": "manual", "is_hidden": False},
    {"title": "Third", "description": "gamma", "category": "Educational", "relevance_score": 70,
     "content_ideas": [], "hashtags": [], "keywords": [], "source": "fallback", "is_hidden": True},
]


@pytest.fixture
def sqlite_settings(tmp_path) -> Settings:
    return Settings(store_backend="sql", db_url=f"sqlite+aiosqlite:///{tmp_path / 'trends.db'}")


async def open_store(settings: Settings):
    engine = build_engine(settings)
    await create_all(engine)
    return engine, SQLTrendStore(build_session_factory(engine))


class TestSQLTrendStore:

    @pytest.mark.asyncio
    async def test_insert_many_assigns_ids(self, sqlite_settings):
        engine, store = await open_store(sqlite_settings)
        try:
            created = await store.insert_many(ROWS)

            assert [t.title for t in created] == ["First", "Second", "Third"]
            assert len({t.id for t in created}) == 3
            assert created[0].hashtags == ["#a"]
            assert created[2].is_hidden is True
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_select_filtered(self, sqlite_settings):
        engine, store = await open_store(sqlite_settings)
        try:
            await store.insert_many(ROWS)

            visible, total = await store.select_filtered(TrendFilter(is_hidden=False, limit=10))
            assert total == 2
            assert [t.title for t in visible] == ["Second", "First"]

            educational, total = await store.select_filtered(TrendFilter(category="Educational", limit=1))
            assert total == 2
            assert len(educational) == 1

            searched, _ = await store.select_filtered(TrendFilter(search="100%", limit=10))
            assert [t.title for t in searched] == ["Second"]

            by_score, _ = await store.select_filtered(TrendFilter(sort_by="relevance_score", limit=10))
            assert [t.relevance_score for t in by_score] == [70, 10, None]

            ranged, _ = await store.select_filtered(TrendFilter(min_relevance=5, max_relevance=50, limit=10))
            assert [t.title for t in ranged] == ["First"]
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_get_and_update(self, sqlite_settings):
        engine, store = await open_store(sqlite_settings)
        try:
            created = await store.insert_many(ROWS[:1])
            trend_id = created[0].id

            updated = await store.update_by_id(trend_id, {"is_hidden": True})
            fetched = await store.get_by_id(trend_id)

            assert updated.is_hidden is True
            assert fetched.is_hidden is True
            assert fetched.title == "First"
            assert await store.get_by_id(trend_id + 100) is None
            assert await store.update_by_id(trend_id + 100, {"is_hidden": True}) is None
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_ping(self, sqlite_settings):
        engine, store = await open_store(sqlite_settings)
        try:
            await store.ping()
        finally:
            await engine.dispose()


@pytest.mark.asyncio
async def test_services_over_sql_store(sqlite_settings):
    """Research-to-hide round trip over the relational backend."""
    engine, store = await open_store(sqlite_settings)
    try:
        result = await TrendIngestionService(store).bulk_create([
            {"title": "Prompt Libraries", "category": "educational"},
            {"title": "AI Bloopers", "category": "entertaining"},
        ])
        assert result.count == 2
        target = result.created[0]

        query = TrendQueryService(store)
        page = await query.list(TrendFilter(category="Educational", limit=5))
        assert [t.id for t in page.trends] == [target.id]

        await TrendVisibilityService(store).hide(target.id)
        assert (await query.list(TrendFilter(category="Educational"))).total == 0

        await TrendVisibilityService(store).restore(target.id)
        assert (await query.list(TrendFilter(category="Educational"))).total == 1
    finally:
        await engine.dispose()
