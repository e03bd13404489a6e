"""Unit tests for the Hume and OpenAI emotion providers."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from resonance_core.providers.base import (
    ProviderConfigurationError,
    ProviderError,
    ProviderTimeout,
)
from resonance_core.providers.hume import HumeProvider
from resonance_core.providers.openai_fallback import OpenAIFallbackProvider


def hume_with_handler(handler) -> HumeProvider:
    client = httpx.AsyncClient(
        base_url="https://hume.test/v1",
        transport=httpx.MockTransport(handler),
    )
    return HumeProvider(api_key="test-key", base_url="https://hume.test/v1", client=client)


def openai_response(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def openai_client(**create_kwargs) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**create_kwargs)
    client.close = AsyncMock()
    return client


class TestHumeProvider:
    """Tests for HumeProvider."""

    @pytest.mark.asyncio
    async def test_analyze_top_level_scores(self):
        """Test a flat response is returned as the raw reading."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"arousal": 0.7, "valence": 0.8, "confidence": 0.9})

        provider = hume_with_handler(handler)

        result = await provider.analyze("hello")

        assert result == {"arousal": 0.7, "valence": 0.8, "confidence": 0.9}
        assert seen["path"] == "/v1/emotion/analyze"
        assert seen["body"] == {"text": "hello"}
        await provider.close()

    @pytest.mark.asyncio
    async def test_analyze_nested_scores(self):
        """Test readings nested under "scores" are unwrapped."""
        provider = hume_with_handler(
            lambda request: httpx.Response(
                200, json={"id": "abc", "scores": {"arousal": 0.6, "valence": 0.4}}
            )
        )

        result = await provider.analyze("hello")

        assert result == {"arousal": 0.6, "valence": 0.4}

    @pytest.mark.asyncio
    async def test_non_200_is_provider_error(self):
        """Test API errors surface as ProviderError with the status code."""
        provider = hume_with_handler(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(ProviderError) as exc_info:
            await provider.analyze("hello")

        assert exc_info.value.details["status_code"] == 503
        assert exc_info.value.provider == "hume"

    @pytest.mark.asyncio
    async def test_timeout_is_provider_timeout(self):
        """Test transport timeouts surface as ProviderTimeout."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        provider = hume_with_handler(handler)

        with pytest.raises(ProviderTimeout):
            await provider.analyze("hello")

    @pytest.mark.asyncio
    async def test_connection_error_is_provider_error(self):
        """Test transport failures surface as ProviderError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = hume_with_handler(handler)

        with pytest.raises(ProviderError):
            await provider.analyze("hello")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"emotions": []}),
            httpx.Response(200, json=[0.7, 0.8]),
        ],
    )
    async def test_unusable_payload(self, response):
        """Test payloads without a reading are rejected."""
        provider = hume_with_handler(lambda request: response)

        with pytest.raises(ProviderError):
            await provider.analyze("hello")

    @pytest.mark.asyncio
    async def test_initialize_requires_api_key(self, monkeypatch):
        """Test a missing key is reported at initialization."""
        monkeypatch.delenv("HUME_API_KEY", raising=False)
        provider = HumeProvider()

        with pytest.raises(ProviderConfigurationError, match="HUME_API_KEY is missing"):
            await provider.initialize()

        assert await provider.health_check() is False

    @pytest.mark.asyncio
    async def test_api_key_from_environment(self, monkeypatch):
        """Test the key falls back to HUME_API_KEY."""
        monkeypatch.setenv("HUME_API_KEY", "env-key")
        provider = HumeProvider()

        await provider.initialize()

        assert provider.api_key == "env-key"
        assert await provider.health_check() is True
        await provider.close()


class TestOpenAIFallbackProvider:
    """Tests for OpenAIFallbackProvider."""

    def test_parse_response(self):
        """Test a JSON reading is parsed."""
        provider = OpenAIFallbackProvider(api_key="test")

        result = provider.parse_response('{"arousal": 0.7, "valence": 0.8, "confidence": 0.9}')

        assert result == {"arousal": 0.7, "valence": 0.8, "confidence": 0.9}

    @pytest.mark.parametrize("content", ["not json", "", "[1, 2, 3]", '"text"'])
    def test_parse_invalid_response(self, content):
        """Test malformed model output is rejected."""
        provider = OpenAIFallbackProvider(api_key="test")

        with pytest.raises(ProviderError, match="Invalid GPT-4o response format"):
            provider.parse_response(content)

    def test_build_prompt(self):
        """Test the sample text is embedded in the prompt."""
        prompt = OpenAIFallbackProvider(api_key="test").build_prompt("Your bakery")

        assert '"Your bakery"' in prompt
        assert '{"arousal": 0.7, "valence": 0.8, "confidence": 0.9}' in prompt

    @pytest.mark.asyncio
    async def test_analyze(self):
        """Test a completion is requested and parsed."""
        client = openai_client(
            return_value=openai_response('{"arousal": 0.6, "valence": 0.7, "confidence": 0.85}')
        )
        provider = OpenAIFallbackProvider(model="gpt-4o", client=client)

        result = await provider.analyze("hello")

        assert result == {"arousal": 0.6, "valence": 0.7, "confidence": 0.85}
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "hello" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_analyze_timeout(self):
        """Test API timeouts surface as ProviderTimeout."""
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client = openai_client(side_effect=openai.APITimeoutError(request=request))
        provider = OpenAIFallbackProvider(client=client)

        with pytest.raises(ProviderTimeout):
            await provider.analyze("hello")

    @pytest.mark.asyncio
    async def test_analyze_api_error(self):
        """Test API errors surface as ProviderError."""
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client = openai_client(side_effect=openai.APIConnectionError(request=request))
        provider = OpenAIFallbackProvider(client=client)

        with pytest.raises(ProviderError) as exc_info:
            await provider.analyze("hello")

        assert exc_info.value.details["error_type"] == "APIConnectionError"

    @pytest.mark.asyncio
    async def test_analyze_no_choices(self):
        """Test an empty completion is rejected."""
        client = openai_client(return_value=SimpleNamespace(choices=[]))
        provider = OpenAIFallbackProvider(client=client)

        with pytest.raises(ProviderError):
            await provider.analyze("hello")

    @pytest.mark.asyncio
    async def test_initialize_requires_api_key(self, monkeypatch):
        """Test a missing key is reported at initialization."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        provider = OpenAIFallbackProvider()

        with pytest.raises(ProviderConfigurationError):
            await provider.initialize()

    @pytest.mark.asyncio
    async def test_close(self):
        """Test the client is closed and released."""
        client = openai_client()
        provider = OpenAIFallbackProvider(client=client)

        await provider.close()

        client.close.assert_awaited_once()
