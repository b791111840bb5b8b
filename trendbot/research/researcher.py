"""
Trend research with graceful degradation.

The researcher asks the configured LLM provider for trend candidates and
parses the answer. Any provider problem (error, timeout, unusable output)
is absorbed once: the caller receives the deterministic fallback set instead.
"""

import asyncio
import json
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from trendbot.core.errors import ProviderError, ValidationError
from trendbot.core.logging import get_logger
from trendbot.core.schemas import CandidateTrend, ResearchResult, TrendSource
from .llm_provider import LLMProvider
from .prompts import build_research_prompt

logger = get_logger(__name__)

LLM_MESSAGE = "Trends generated successfully using AI"
SERVICE_FALLBACK_MESSAGE = "Using fallback trends due to AI service issues"
RESPONSE_FALLBACK_MESSAGE = "Using fallback trends due to AI response issues"

FALLBACK_TRENDS = (
    {
        "title": "Authentic Storytelling",
        "description": "Share genuine stories that connect with your audience on a personal level",
        "category": "Educational",
        "relevance_score": 75,
        "content_ideas": ["Share your brand origin story", "Highlight customer success stories", "Show behind-the-scenes moments"],
        "hashtags": ["#authenticity", "#storytelling", "#brandstory"],
        "keywords": ["authentic content", "brand storytelling", "audience connection"],
    },
    {
        "title": "Interactive Content",
        "description": "Create polls, Q&As, and interactive stories to boost engagement",
        "category": "Entertaining",
        "relevance_score": 80,
        "content_ideas": ["Instagram polls", "Ask-me-anything sessions", "Interactive quizzes"],
        "hashtags": ["#interactive", "#engagement", "#poll"],
        "keywords": ["interactive content", "audience engagement", "social media polls"],
    },
    {
        "title": "Value-First Approach",
        "description": "Focus on providing value before asking for anything in return",
        "category": "Educational",
        "relevance_score": 85,
        "content_ideas": ["Free tips and tutorials", "Industry insights", "Problem-solving content"],
        "hashtags": ["#valuefirst", "#educational", "#tips"],
        "keywords": ["value-driven content", "educational marketing", "helpful content"],
    },
)


class MalformedResponseError(ProviderError):
    """The provider answered, but not with usable trend JSON."""


@dataclass(frozen=True)
class Researched:
    """Provider output parsed successfully."""
    candidates: List[CandidateTrend]


@dataclass(frozen=True)
class Degraded:
    """Provider failed; ``candidates`` is the fallback set."""
    candidates: List[CandidateTrend]
    reason: str
    malformed: bool = field(default=False)


ResearchOutcome = Union[Researched, Degraded]


def _decode_json(text: str) -> Any:
    """Decode the JSON payload of an LLM answer, tolerating fences and chatter."""
    text = text.strip()

    fence = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
    if fence:
        text = fence.group(1).strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    for pattern in (r"\{[\s\S]*\}", r"\[[\s\S]*\]"):
        match = re.search(pattern, text)
        if match:
            try:
                return json.loads(match.group(0))
            except json.JSONDecodeError:
                continue

    raise MalformedResponseError(f"No JSON found in provider output: {text[:200]!r}")


def parse_trend_candidates(text: str, count: int, brand_context: Optional[str] = None) -> List[CandidateTrend]:
    """
    Parse provider text into at most ``count`` candidate trends.

    Accepts ``{"trends": [...]}`` or a bare list. Malformed entries are
    dropped one by one.

    Raises:
        MalformedResponseError: If no entry survives validation
    """
    data = _decode_json(text)
    entries = data.get("trends") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise MalformedResponseError("Provider output has no trends array")

    candidates = []
    for index, entry in enumerate(entries):
        if len(candidates) >= count:
            break
        if not isinstance(entry, dict):
            logger.debug(f"Discarding non-object trend entry #{index}")
            continue
        fields = {**entry, "source": TrendSource.LLM}
        if brand_context and not fields.get("brand_context"):
            fields["brand_context"] = brand_context
        try:
            candidates.append(CandidateTrend.model_validate(fields))
        except PydanticValidationError as e:
            logger.debug(f"Discarding malformed trend entry #{index}: {e.error_count()} errors")

    if not candidates:
        raise MalformedResponseError(f"None of {len(entries)} trend entries were valid")
    return candidates


def fallback_candidates(brand_context: Optional[str], count: int) -> List[CandidateTrend]:
    """The fixed fallback set, truncated to ``count``."""
    return [
        CandidateTrend.model_validate({
            **trend,
            "brand_context": brand_context or "General content creation",
            "source": TrendSource.FALLBACK,
        })
        for trend in FALLBACK_TRENDS[:count]
    ]


class TrendResearcher:
    """Researches trends through an LLM provider, degrading to fallback trends."""

    def __init__(self, provider: LLMProvider, timeout: float = 20.0):
        self.provider = provider
        self.timeout = timeout

    async def research_outcome(
        self,
        brand_context: str,
        niche: Optional[str] = None,
        content_type: Optional[str] = None,
        count: int = 5,
    ) -> ResearchOutcome:
        """Run one research call and return the tagged outcome."""
        if count < 1:
            raise ValidationError("count must be at least 1")

        prompt = build_research_prompt(brand_context, niche, content_type, count)

        try:
            text = await asyncio.wait_for(self.provider.generate_text(prompt), timeout=self.timeout)
            candidates = parse_trend_candidates(text, count, brand_context)
        except MalformedResponseError as e:
            logger.warning(f"{self.provider.provider_name} response unusable, using fallback trends: {e}")
            return Degraded(fallback_candidates(brand_context, count), reason=str(e), malformed=True)
        except ProviderError as e:
            logger.warning(f"{self.provider.provider_name} call failed, using fallback trends: {e}")
            return Degraded(fallback_candidates(brand_context, count), reason=str(e))
        except asyncio.TimeoutError:
            reason = f"{self.provider.provider_name} call exceeded {self.timeout}s"
            logger.warning(f"{reason}, using fallback trends")
            return Degraded(fallback_candidates(brand_context, count), reason=reason)
        except Exception as e:
            # Research must not fail outward on provider problems
            logger.exception(f"Unexpected error from {self.provider.provider_name}: {e}")
            return Degraded(fallback_candidates(brand_context, count), reason=str(e))

        logger.info(f"Researched {len(candidates)} trends via {self.provider.provider_name}")
        return Researched(candidates)

    async def research(
        self,
        brand_context: str,
        niche: Optional[str] = None,
        content_type: Optional[str] = None,
        count: int = 5,
    ) -> ResearchResult:
        """Research trends; always returns a result, never a provider error."""
        outcome = await self.research_outcome(brand_context, niche, content_type, count)

        if isinstance(outcome, Researched):
            return ResearchResult(trends=outcome.candidates, source=TrendSource.LLM, message=LLM_MESSAGE)

        message = RESPONSE_FALLBACK_MESSAGE if outcome.malformed else SERVICE_FALLBACK_MESSAGE
        return ResearchResult(trends=outcome.candidates, source=TrendSource.FALLBACK, message=message)
