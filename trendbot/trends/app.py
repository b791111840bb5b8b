"""Trending topics service FastAPI application."""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request, status

from trendbot.core.db import build_engine, build_session_factory, create_all
from trendbot.core.logging import get_logger
from trendbot.core.repositories import MemoryTrendStore, SQLTrendStore, TrendStore
from trendbot.core.schemas import (
    BulkCreateRequest,
    ResearchRequest,
    SortField,
    SortOrder,
    TrendFilter,
    VisibilityRequest,
    trend_to_dict,
)
from trendbot.core.settings import Settings, get_settings
from trendbot.research.llm_provider import LLMProvider, LLMProviderFactory
from trendbot.research.researcher import TrendResearcher
from trendbot.services.base import create_app
from .ingestion import TrendIngestionService
from .query import TrendQueryService
from .visibility import TrendVisibilityService

logger = get_logger(__name__)


@dataclass
class TrendServices:
    """Per-application service graph, built once at startup."""
    store: TrendStore
    researcher: TrendResearcher
    ingestion: TrendIngestionService
    query: TrendQueryService
    visibility: TrendVisibilityService


def build_services(settings: Settings, store: TrendStore, provider: LLMProvider) -> TrendServices:
    """Wire the trend services around one store and one provider."""
    return TrendServices(
        store=store,
        researcher=TrendResearcher(provider, timeout=settings.llm_timeout_seconds),
        ingestion=TrendIngestionService(store),
        query=TrendQueryService(
            store,
            default_limit=settings.trends_default_limit,
            max_limit=settings.trends_max_limit,
        ),
        visibility=TrendVisibilityService(store),
    )


def get_services(request: Request) -> TrendServices:
    """Dependency returning the service graph of the running app."""
    return request.app.state.services


router = APIRouter(tags=["trending_topics"])


@router.get("/")
@router.get("", include_in_schema=False)
async def list_trends(
    category: Optional[str] = Query(None, max_length=50),
    is_hidden: Optional[bool] = Query(None, description="Omit to list visible trends only"),
    search: Optional[str] = Query(None, max_length=200),
    min_relevance: Optional[int] = Query(None, ge=0, le=100),
    max_relevance: Optional[int] = Query(None, ge=0, le=100),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    sort_by: SortField = Query("created_at"),
    sort_order: SortOrder = Query("desc"),
    services: TrendServices = Depends(get_services),
):
    """List trends with filtering, search and pagination."""
    page = await services.query.list(TrendFilter(
        category=category,
        is_hidden=is_hidden,
        search=search,
        min_relevance=min_relevance,
        max_relevance=max_relevance,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    ))
    return {
        "trends": [trend_to_dict(trend) for trend in page.trends],
        "total": page.total,
        "limit": page.limit,
        "offset": page.offset,
    }


@router.post("/research")
async def research_trends(request: ResearchRequest, services: TrendServices = Depends(get_services)):
    """
    Research trends for a brand with the configured LLM.

    Always answers 200; a degraded answer is marked by ``source == "fallback"``.
    """
    logger.info(
        "Trend research requested",
        extra={"niche": request.niche, "content_type": request.content_type, "count": request.count}
    )
    result = await services.researcher.research(
        brand_context=request.brand_context,
        niche=request.niche,
        content_type=request.content_type,
        count=request.count,
    )
    return {
        "success": True,
        "trends": [candidate.model_dump(mode="json") for candidate in result.trends],
        "source": result.source.value,
        "message": result.message,
    }


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
async def bulk_create_trends(request: BulkCreateRequest, services: TrendServices = Depends(get_services)):
    """Create many trends at once, typically accepted research results."""
    result = await services.ingestion.bulk_create(request.trends)
    message = (
        f"Created {result.count} of {result.requested} trends"
        if result.partial
        else "Trends created successfully"
    )
    return {
        "success": True,
        "trends": [trend_to_dict(trend) for trend in result.created],
        "count": result.count,
        "message": message,
    }


@router.get("/{trend_id}")
async def get_trend(trend_id: int, services: TrendServices = Depends(get_services)):
    """Get a single trend by id."""
    trend = await services.query.get(trend_id)
    return {"success": True, "trend": trend_to_dict(trend)}


@router.patch("/{trend_id}/hide")
async def set_trend_visibility(
    trend_id: int,
    request: VisibilityRequest,
    services: TrendServices = Depends(get_services),
):
    """Hide (``is_hidden: true``) or restore (``is_hidden: false``) a trend."""
    trend = await services.visibility.set_hidden(trend_id, request.is_hidden)
    return {
        "success": True,
        "trend": trend_to_dict(trend),
        "message": "Trend hidden successfully" if request.is_hidden else "Trend restored successfully",
    }


def create_trends_app(
    settings: Optional[Settings] = None,
    store: Optional[TrendStore] = None,
    provider: Optional[LLMProvider] = None,
) -> FastAPI:
    """
    Build the trends application.

    Args:
        settings: Explicit configuration; defaults to environment settings
        store: Pre-built store; otherwise chosen by ``settings.store_backend``
        provider: Pre-built LLM provider; otherwise chosen by ``settings.llm_provider``
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        active_store = store
        if active_store is None:
            if settings.store_backend == "memory":
                active_store = MemoryTrendStore()
            else:
                engine = build_engine(settings)
                await create_all(engine)
                active_store = SQLTrendStore(build_session_factory(engine))

        active_provider = provider or LLMProviderFactory.create_provider(settings)

        app.state.store = active_store
        app.state.llm_provider = active_provider
        app.state.services = build_services(settings, active_store, active_provider)
        logger.info(
            f"Trends service started with {type(active_store).__name__} "
            f"and {active_provider.provider_name} provider"
        )
        try:
            yield
        finally:
            if provider is None:
                await active_provider.aclose()
            if engine is not None:
                await engine.dispose()
            logger.info("Trends service stopped")

    app = create_app("trends", settings, lifespan=lifespan)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_trends_app()


if __name__ == "__main__":
    settings = get_settings()
    logger.info("Starting trends service via uvicorn")
    uvicorn.run(
        "trendbot.trends.app:app",
        host=settings.service_host,
        port=settings.service_port or 4000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
