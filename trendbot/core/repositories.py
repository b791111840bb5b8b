"""Repository layer for trend persistence.

``TrendStore`` is the minimal capability set the services depend on:
insert-many, filtered/paginated select, get-by-id and update-by-id.
``SQLTrendStore`` implements it with async SQLAlchemy sessions and
``MemoryTrendStore`` keeps records in process for development and tests.
"""

import asyncio
import itertools
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trendbot.core.errors import StoreError
from trendbot.core.logging import get_logger
from trendbot.core.models import TrendingTopic
from trendbot.core.schemas import Trend, TrendFilter

logger = get_logger(__name__)


class TrendStore(ABC):
    """Abstract trend storage."""

    @abstractmethod
    async def insert_many(self, rows: Sequence[Mapping[str, Any]]) -> List[Trend]:
        """
        Insert a batch of validated rows in one all-or-nothing operation.

        Args:
            rows: Normalized trend fields (no id, no created_at)

        Returns:
            Created trends with assigned ids and timestamps

        Raises:
            StoreError: If the batch could not be written
        """

    @abstractmethod
    async def select_filtered(self, flt: TrendFilter) -> Tuple[List[Trend], int]:
        """
        Select one page of trends.

        Args:
            flt: Resolved filter; ``limit`` must be set

        Returns:
            Tuple of (page, total matches before pagination)
        """

    @abstractmethod
    async def get_by_id(self, trend_id: int) -> Optional[Trend]:
        """Fetch one trend, or None if it does not exist."""

    @abstractmethod
    async def update_by_id(self, trend_id: int, values: Mapping[str, Any]) -> Optional[Trend]:
        """Update fields of one trend; None if it does not exist."""

    async def ping(self) -> None:
        """Raise StoreError if the backend is unreachable."""


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLTrendStore(TrendStore):
    """Trend store backed by a relational database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert_many(self, rows: Sequence[Mapping[str, Any]]) -> List[Trend]:
        created_at = datetime.now(timezone.utc)
        objects = [TrendingTopic(**dict(row), created_at=created_at) for row in rows]

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add_all(objects)
                    await session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Bulk insert of {len(objects)} trends failed: {e}")
            raise StoreError(f"Failed to insert trends: {e}") from e

        logger.debug(f"Inserted {len(objects)} trends")
        return [Trend.model_validate(obj) for obj in objects]

    def _conditions(self, flt: TrendFilter) -> list:
        conditions = []

        if flt.category is not None:
            conditions.append(TrendingTopic.category == flt.category)

        if flt.is_hidden is not None:
            conditions.append(TrendingTopic.is_hidden == flt.is_hidden)

        if flt.search:
            pattern = f"%{_escape_like(flt.search)}%"
            conditions.append(or_(
                TrendingTopic.title.ilike(pattern, escape="\\"),
                TrendingTopic.description.ilike(pattern, escape="\\"),
            ))

        if flt.min_relevance is not None:
            conditions.append(TrendingTopic.relevance_score >= flt.min_relevance)

        if flt.max_relevance is not None:
            conditions.append(TrendingTopic.relevance_score <= flt.max_relevance)

        return conditions

    def _ordering(self, flt: TrendFilter) -> list:
        column = getattr(TrendingTopic, flt.sort_by)
        if flt.sort_order == "asc":
            primary, tie_break = column.asc(), TrendingTopic.id.asc()
        else:
            primary, tie_break = column.desc(), TrendingTopic.id.desc()
        if flt.sort_by == "relevance_score":
            primary = primary.nulls_last()
        return [primary, tie_break]

    async def select_filtered(self, flt: TrendFilter) -> Tuple[List[Trend], int]:
        conditions = self._conditions(flt)

        count_stmt = select(func.count()).select_from(TrendingTopic).where(*conditions)
        page_stmt = (
            select(TrendingTopic)
            .where(*conditions)
            .order_by(*self._ordering(flt))
            .offset(flt.offset)
            .limit(flt.limit)
        )

        try:
            async with self._session_factory() as session:
                total = (await session.execute(count_stmt)).scalar_one()
                result = await session.execute(page_stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Trend query failed: {e}")
            raise StoreError(f"Failed to fetch trends: {e}") from e

        logger.debug(f"Retrieved {len(rows)} of {total} matching trends")
        return [Trend.model_validate(row) for row in rows], total

    async def get_by_id(self, trend_id: int) -> Optional[Trend]:
        try:
            async with self._session_factory() as session:
                row = await session.get(TrendingTopic, trend_id)
        except SQLAlchemyError as e:
            logger.error(f"Fetching trend {trend_id} failed: {e}")
            raise StoreError(f"Failed to fetch trend: {e}") from e

        return Trend.model_validate(row) if row is not None else None

    async def update_by_id(self, trend_id: int, values: Mapping[str, Any]) -> Optional[Trend]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await session.get(TrendingTopic, trend_id, with_for_update=True)
                    if row is None:
                        return None
                    for field, value in values.items():
                        setattr(row, field, value)
        except SQLAlchemyError as e:
            logger.error(f"Updating trend {trend_id} failed: {e}")
            raise StoreError(f"Failed to update trend: {e}") from e

        return Trend.model_validate(row)

    async def ping(self) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreError(f"Database unreachable: {e}") from e


class MemoryTrendStore(TrendStore):
    """Process-local trend store with the same semantics as the SQL store."""

    def __init__(self):
        self._records: Dict[int, Dict[str, Any]] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def insert_many(self, rows: Sequence[Mapping[str, Any]]) -> List[Trend]:
        created_at = datetime.now(timezone.utc)
        async with self._lock:
            staged = []
            for row in rows:
                record = {"is_hidden": False, **dict(row), "created_at": created_at}
                record["id"] = next(self._ids)
                staged.append(record)
            # Validate the whole batch before any record becomes visible
            created = [Trend.model_validate(record) for record in staged]
            for record in staged:
                self._records[record["id"]] = record
        return created

    def _matches(self, record: Dict[str, Any], flt: TrendFilter) -> bool:
        if flt.category is not None and record["category"] != flt.category:
            return False
        if flt.is_hidden is not None and record["is_hidden"] != flt.is_hidden:
            return False
        if flt.search:
            term = flt.search.lower()
            if term not in record["title"].lower() and term not in record.get("description", "").lower():
                return False
        score = record.get("relevance_score")
        if flt.min_relevance is not None and (score is None or score < flt.min_relevance):
            return False
        if flt.max_relevance is not None and (score is None or score > flt.max_relevance):
            return False
        return True

    def _sorted(self, records: List[Dict[str, Any]], flt: TrendFilter) -> List[Dict[str, Any]]:
        reverse = flt.sort_order == "desc"
        # Missing sort values always go last
        present = [r for r in records if r.get(flt.sort_by) is not None]
        missing = [r for r in records if r.get(flt.sort_by) is None]
        present.sort(key=lambda r: (r[flt.sort_by], r["id"]), reverse=reverse)
        missing.sort(key=lambda r: r["id"], reverse=reverse)
        return present + missing

    async def select_filtered(self, flt: TrendFilter) -> Tuple[List[Trend], int]:
        async with self._lock:
            matching = [r for r in self._records.values() if self._matches(r, flt)]
        ordered = self._sorted(matching, flt)
        page = ordered[flt.offset:flt.offset + flt.limit]
        return [Trend.model_validate(r) for r in page], len(matching)

    async def get_by_id(self, trend_id: int) -> Optional[Trend]:
        record = self._records.get(trend_id)
        return Trend.model_validate(record) if record is not None else None

    async def update_by_id(self, trend_id: int, values: Mapping[str, Any]) -> Optional[Trend]:
        async with self._lock:
            record = self._records.get(trend_id)
            if record is None:
                return None
            record.update(values)
            return Trend.model_validate(record)
