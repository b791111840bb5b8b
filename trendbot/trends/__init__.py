"""Trend curation package.

This package contains modules for:
- Bulk ingestion of candidate trends (ingestion.py)
- Filtered listing and lookup (query.py)
- Hide/restore of trends (visibility.py)
- HTTP API (app.py)
"""

from .ingestion import TrendIngestionService
from .query import TrendQueryService
from .visibility import TrendVisibilityService

__all__ = [
    'TrendIngestionService',
    'TrendQueryService',
    'TrendVisibilityService',
]
