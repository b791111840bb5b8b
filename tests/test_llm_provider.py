"""Tests for LLM providers."""
import json

import httpx
import pytest

from trendbot.core.errors import ProviderError
from trendbot.core.settings import Settings
from trendbot.research.llm_provider import GeminiProvider, LLMProviderFactory, NoLLMProvider


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def make_provider(handler, api_key: str = "test-key") -> GeminiProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiProvider(api_key=api_key, model="gemini-test", client=client)


class TestGeminiProvider:

    @pytest.mark.asyncio
    async def test_returns_candidate_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_body('{"trends": []}'))

        provider = make_provider(handler)
        text = await provider.generate_text("find trends")

        assert text == '{"trends": []}'
        assert "models/gemini-test:generateContent" in seen["url"]
        assert "key=test-key" in seen["url"]
        assert seen["body"]["contents"][0]["parts"][0]["text"] == "find trends"
        assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"
        assert provider.call_count == 1

    @pytest.mark.asyncio
    async def test_joins_multiple_parts(self):
        def handler(request):
            body = {"candidates": [{"content": {"parts": [{"text": '{"tre'}, {"text": 'nds": []}'}]}}]}
            return httpx.Response(200, json=body)

        provider = make_provider(handler)
        assert await provider.generate_text("p") == '{"trends": []}'

    @pytest.mark.asyncio
    async def test_http_error_status_raises_provider_error(self):
        provider = make_provider(lambda request: httpx.Response(503, json={"error": "overloaded"}))

        with pytest.raises(ProviderError, match="HTTP 503"):
            await provider.generate_text("p")

    @pytest.mark.asyncio
    async def test_timeout_raises_provider_error(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        provider = make_provider(handler)
        with pytest.raises(ProviderError, match="timed out"):
            await provider.generate_text("p")

    @pytest.mark.asyncio
    async def test_connection_error_raises_provider_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        provider = make_provider(handler)
        with pytest.raises(ProviderError, match="request failed"):
            await provider.generate_text("p")

    @pytest.mark.asyncio
    async def test_empty_text_raises_provider_error(self):
        provider = make_provider(lambda request: httpx.Response(200, json=gemini_body("   ")))

        with pytest.raises(ProviderError, match="empty"):
            await provider.generate_text("p")

    @pytest.mark.asyncio
    async def test_blocked_prompt_raises_provider_error(self):
        body = {"promptFeedback": {"blockReason": "SAFETY"}}
        provider = make_provider(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ProviderError, match="SAFETY"):
            await provider.generate_text("p")

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_without_network(self):
        def handler(request):
            raise AssertionError("no request expected")

        provider = make_provider(handler, api_key="")
        with pytest.raises(ProviderError, match="API key"):
            await provider.generate_text("p")


@pytest.mark.asyncio
async def test_nollm_provider_always_fails():
    provider = NoLLMProvider()
    with pytest.raises(ProviderError):
        await provider.generate_text("p")
    health = await provider.health_check()
    assert health["status"] == "unavailable"


class TestLLMProviderFactory:

    def test_gemini_with_key(self):
        provider = LLMProviderFactory.create_provider(Settings(llm_provider="gemini", google_api_key="k"))
        assert isinstance(provider, GeminiProvider)
        assert provider.api_key == "k"

    def test_gemini_without_key_degrades_to_nollm(self):
        provider = LLMProviderFactory.create_provider(Settings(llm_provider="gemini", google_api_key=""))
        assert isinstance(provider, NoLLMProvider)

    def test_unknown_provider_degrades_to_nollm(self):
        provider = LLMProviderFactory.create_provider(Settings(llm_provider="mystery"))
        assert isinstance(provider, NoLLMProvider)

    def test_list_providers(self):
        assert {"gemini", "nollm"} <= set(LLMProviderFactory.list_providers())

    def test_registered_provider_is_created(self, monkeypatch):
        monkeypatch.setattr(LLMProviderFactory, "_providers", dict(LLMProviderFactory._providers))
        LLMProviderFactory.register_provider("offline", NoLLMProvider)

        provider = LLMProviderFactory.create_provider(Settings(llm_provider="Offline"))

        assert isinstance(provider, NoLLMProvider)
        assert "offline" in LLMProviderFactory.list_providers()
