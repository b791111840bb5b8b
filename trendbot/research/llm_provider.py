"""
LLM Provider interface and implementations for trend research.

Provides abstraction over text-generation providers. Providers take a prompt
and return raw text, raising ``ProviderError`` on any failure so that callers
can substitute fallback content.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from trendbot.core.errors import ProviderError
from trendbot.core.logging import get_logger
from trendbot.core.settings import Settings

logger = get_logger(__name__)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def generate_text(self, prompt: str, **kwargs) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Complete prompt text
            **kwargs: Provider-specific generation parameters

        Returns:
            Raw text produced by the model

        Raises:
            ProviderError: On network failure, timeout, non-2xx status or empty output
        """

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Check provider health and availability."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identification name."""

    async def aclose(self) -> None:
        """Release network resources."""


class GeminiProvider(LLMProvider):
    """
    Google Gemini provider using the public ``generateContent`` REST endpoint.

    Requests JSON output and concatenates the text parts of the first candidate.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 20.0,
        temperature: float = 0.7,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": "TrendBot/1.0"},
        )
        self.call_count = 0

    @property
    def provider_name(self) -> str:
        return "Gemini"

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def health_check(self) -> Dict[str, Any]:
        return {
            "status": "configured" if self.api_key else "unavailable",
            "provider": self.provider_name,
            "model": self.model,
            "calls_made": self.call_count,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    async def generate_text(self, prompt: str, **kwargs) -> str:
        if not self.api_key:
            raise ProviderError("Gemini API key is not configured")

        self.call_count += 1
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": kwargs.get("temperature", self.temperature),
                "responseMimeType": "application/json",
            },
        }

        try:
            response = await self.client.post(
                self.endpoint,
                params={"key": self.api_key},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise ProviderError(f"Gemini request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Gemini returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Gemini returned invalid JSON: {e}") from e

        text = self._extract_text(data)
        if not text.strip():
            raise ProviderError("Gemini returned an empty response")
        return text

    def _extract_text(self, data: Any) -> str:
        """Join the text parts of the first candidate."""
        try:
            parts: List[Dict[str, Any]] = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            block_reason = (data.get("promptFeedback") or {}).get("blockReason") if isinstance(data, dict) else None
            if block_reason:
                raise ProviderError(f"Gemini blocked the prompt: {block_reason}")
            raise ProviderError("Gemini response has no candidates")
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()


class NoLLMProvider(LLMProvider):
    """
    Provider that always fails.

    Used when no LLM service is configured; research then serves fallback trends.
    """

    @property
    def provider_name(self) -> str:
        return "NoLLM"

    async def health_check(self) -> Dict[str, Any]:
        return {
            "status": "unavailable",
            "provider": self.provider_name,
            "message": "No LLM provider configured",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    async def generate_text(self, prompt: str, **kwargs) -> str:
        raise ProviderError("No LLM provider available for trend research")


class LLMProviderFactory:
    """Factory for creating LLM provider instances."""

    _providers = {
        "gemini": GeminiProvider,
        "nollm": NoLLMProvider
    }

    @classmethod
    def create_provider(cls, settings: Settings) -> LLMProvider:
        """
        Create the provider named by ``settings.llm_provider``.

        Unknown names and a Gemini configuration without an API key
        degrade to ``NoLLMProvider``.
        """
        provider_type = settings.llm_provider.lower()
        if provider_type not in cls._providers:
            logger.warning(f"Unknown provider type: {provider_type}, falling back to nollm")
            provider_type = "nollm"

        if provider_type == "gemini":
            if not settings.google_api_key:
                logger.warning("GOOGLE_API_KEY is not set, trend research will use fallback trends")
                return NoLLMProvider()
            return GeminiProvider(
                api_key=settings.google_api_key,
                model=settings.gemini_model,
                base_url=settings.gemini_base_url,
                timeout=settings.llm_timeout_seconds,
                temperature=settings.llm_temperature,
            )

        return cls._providers[provider_type]()

    @classmethod
    def register_provider(cls, name: str, provider_class):
        """Register a new provider type."""
        cls._providers[name] = provider_class

    @classmethod
    def list_providers(cls) -> List[str]:
        """List available provider types."""
        return list(cls._providers.keys())
