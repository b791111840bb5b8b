"""Pydantic models for trends, filters and service envelopes."""
import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, field_validator


class TrendSource(str, Enum):
    """Which generation path produced a trend."""
    LLM = "llm"
    FALLBACK = "fallback"
    MANUAL = "manual"


SortField = Literal["created_at", "relevance_score", "title"]
SortOrder = Literal["asc", "desc"]


def normalize_category(value: str) -> str:
    """Canonical category form: collapsed whitespace, each word capitalized.

    >>> normalize_category("  behind the   SCENES ")
    'Behind The Scenes'
    """
    words = re.split(r"\s+", value.strip())
    return " ".join(word[:1].upper() + word[1:].lower() for word in words if word)


class CandidateTrend(BaseModel):
    """Unvalidated trend proposed by research or submitted for ingestion."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(
        default="",
        max_length=1000,
        validation_alias=AliasChoices("description", "summary"),
    )
    category: str = Field(..., min_length=1, max_length=50)
    relevance_score: Optional[int] = Field(default=None, ge=0, le=100)
    brand_context: Optional[str] = Field(default=None, max_length=500)
    content_ideas: List[str] = Field(default_factory=list, max_length=10)
    hashtags: List[str] = Field(default_factory=list, max_length=20)
    keywords: List[str] = Field(default_factory=list, max_length=10)
    source: TrendSource = TrendSource.MANUAL

    @field_validator("description", mode="before")
    @classmethod
    def none_description_is_empty(cls, v):
        return "" if v is None else v

    @field_validator("relevance_score", mode="before")
    @classmethod
    def round_relevance(cls, v):
        """LLMs like to answer 87.5 where an integer score is expected."""
        if isinstance(v, float):
            return round(v)
        return v

    @field_validator("content_ideas", "hashtags", "keywords", mode="before")
    @classmethod
    def none_list_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("content_ideas", "hashtags", "keywords")
    @classmethod
    def drop_blank_entries(cls, v: List[str]) -> List[str]:
        return [item.strip() for item in v if item and item.strip()]


class Trend(CandidateTrend):
    """A persisted trend record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    is_hidden: bool = False
    created_at: datetime


class TrendFilter(BaseModel):
    """Filters, pagination and ordering for listing trends."""

    category: Optional[str] = None
    is_hidden: Optional[bool] = None
    search: Optional[str] = None
    min_relevance: Optional[int] = Field(default=None, ge=0, le=100)
    max_relevance: Optional[int] = Field(default=None, ge=0, le=100)
    limit: Optional[int] = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)
    sort_by: SortField = "created_at"
    sort_order: SortOrder = "desc"


class TrendPage(BaseModel):
    """One page of trends plus the total number of matches."""
    trends: List[Trend]
    total: int
    limit: int
    offset: int = 0


class ResearchRequest(BaseModel):
    """Inputs for LLM trend research."""

    model_config = ConfigDict(str_strip_whitespace=True)

    brand_context: str = Field(..., min_length=1, max_length=500)
    niche: Optional[str] = None
    content_type: Optional[str] = None
    count: int = Field(default=5, ge=1)


class ResearchResult(BaseModel):
    """Research output: candidates plus where they came from."""
    trends: List[CandidateTrend]
    source: TrendSource
    message: str


class BulkCreateRequest(BaseModel):
    """Raw bulk ingestion payload; items are validated by the ingestion service."""
    trends: List[Any] = Field(default_factory=list)


class BulkCreateResult(BaseModel):
    """Outcome of a bulk insert."""
    count: int
    requested: int
    created: List[Trend]

    @property
    def partial(self) -> bool:
        return self.count < self.requested


class VisibilityRequest(BaseModel):
    """Hide/restore toggle body."""
    is_hidden: StrictBool


def trend_to_dict(trend: Trend) -> Dict[str, Any]:
    """JSON-ready representation of a stored trend."""
    return trend.model_dump(mode="json")
