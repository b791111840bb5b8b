"""Database engine and session management."""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .settings import Settings

# SQLAlchemy base for models
Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    engine_kwargs = {"echo": settings.debug}
    # SQLite uses a static/null pool that rejects sizing arguments
    if not settings.db_url.startswith("sqlite"):
        engine_kwargs.update(pool_size=10, max_overflow=20, pool_pre_ping=True)
    return create_async_engine(settings.db_url, **engine_kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session maker bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables in the database."""
    # Register models on the metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
