"""Shared fixtures for TrendBot tests."""
import asyncio
import json
from typing import Any, Dict, List, Optional

import pytest

from trendbot.core.repositories import MemoryTrendStore
from trendbot.core.settings import Settings
from trendbot.research.llm_provider import LLMProvider


class ScriptedProvider(LLMProvider):
    """LLM provider returning canned text or raising a canned error."""

    def __init__(self, text: str = "", error: Optional[Exception] = None, delay: float = 0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.prompts: List[str] = []

    @property
    def provider_name(self) -> str:
        return "Scripted"

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy", "provider": self.provider_name}

    async def generate_text(self, prompt: str, **kwargs) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.text


def llm_trend(title: str, category: str = "Educational", **extra) -> Dict[str, Any]:
    """One trend entry as an LLM would return it."""
    return {
        "title": title,
        "description": f"{title} explained for busy creators",
        "category": category,
        "relevance_score": 80,
        "content_ideas": ["Short tutorial", "Carousel recap"],
        "hashtags": ["#ai", "#productivity"],
        "keywords": ["ai tools"],
        **extra,
    }


@pytest.fixture
def llm_response_text() -> str:
    """Well-formed provider answer with four trends."""
    return json.dumps({
        "trends": [
            llm_trend("AI Meeting Summaries"),
            llm_trend("Prompt Templates for Teams", category="educational"),
            llm_trend("Automation Horror Stories", category="Entertaining"),
            llm_trend("Focus Mode Rituals", category="Behind-the-Scenes"),
        ]
    })


@pytest.fixture
def scripted_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def memory_store() -> MemoryTrendStore:
    return MemoryTrendStore()


@pytest.fixture
def memory_settings() -> Settings:
    return Settings(
        store_backend="memory",
        llm_provider="nollm",
        google_api_key="",
        llm_timeout_seconds=2.0,
        trends_default_limit=50,
        trends_max_limit=100,
    )


@pytest.fixture
def candidate_payloads() -> List[Dict[str, Any]]:
    """Three valid bulk payload items with mixed category casing."""
    return [
        {"title": "Authentic Storytelling", "description": "Share genuine stories", "category": "educational"},
        {"title": "Interactive Content", "summary": "Polls and Q&As", "category": "  Entertaining "},
        {"title": "Value-First Approach", "description": "Give before you ask", "category": "EDUCATIONAL",
         "relevance_score": 85, "source": "llm"},
    ]
