"""
TrendBot research module

Asks an LLM provider for brand-aware trend candidates and degrades to a fixed
fallback set whenever the provider cannot deliver.

Main Components:
- llm_provider: LLM abstraction (Gemini over HTTP, NoLLM)
- prompts: research prompt template
- researcher: parsing, fallback substitution and the tagged research outcome
"""

from .llm_provider import LLMProvider, GeminiProvider, NoLLMProvider, LLMProviderFactory
from .researcher import (
    TrendResearcher,
    Researched,
    Degraded,
    ResearchOutcome,
    parse_trend_candidates,
    fallback_candidates,
)

__all__ = [
    # LLM Providers
    "LLMProvider",
    "GeminiProvider",
    "NoLLMProvider",
    "LLMProviderFactory",

    # Research
    "TrendResearcher",
    "Researched",
    "Degraded",
    "ResearchOutcome",
    "parse_trend_candidates",
    "fallback_candidates",
]
