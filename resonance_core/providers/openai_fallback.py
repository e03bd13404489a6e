"""
OpenAI Fallback Provider

Secondary emotion-analysis path: asks a GPT-4o class model to rate the
text and return the reading as JSON.
"""

import json
import os
from typing import Any, Dict, Mapping, Optional

import openai
import structlog
from openai import AsyncOpenAI

from resonance_core.providers.base import (
    EmotionProvider,
    EmotionProviderName,
    ProviderConfigurationError,
    ProviderError,
    ProviderTimeout,
    RawEmotionScore,
)

logger = structlog.get_logger(__name__)


ANALYSIS_PROMPT = """
Analyze the emotional tone of the following text: "{text}"
Provide a JSON response with:
- arousal: number (0-1, intensity of emotion)
- valence: number (0-1, positivity of emotion)
- confidence: number (0-1, confidence in analysis)
Example: {{"arousal": 0.7, "valence": 0.8, "confidence": 0.9}}
"""


class OpenAIFallbackProvider(EmotionProvider):
    """GPT-4o emotion analysis used when the primary provider is unusable."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        timeout: float = 5.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = model
        self.timeout = timeout
        self._client = client

    @property
    def provider_name(self) -> str:
        return EmotionProviderName.OPENAI.value

    async def initialize(self) -> None:
        if self._client is None and not self.api_key:
            raise ProviderConfigurationError(
                "OPENAI_API_KEY is missing",
                provider=self.provider_name,
            )
        self._get_client()
        logger.info("openai_fallback_initialized", model=self.model)

    def _get_client(self) -> AsyncOpenAI:
        """Get or create OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ProviderConfigurationError(
                    "OPENAI_API_KEY is missing",
                    provider=self.provider_name,
                )
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def build_prompt(self, text: str) -> str:
        return ANALYSIS_PROMPT.format(text=text)

    async def analyze(self, text: str) -> RawEmotionScore:
        client = self._get_client()

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": self.build_prompt(text)}],
                response_format={"type": "json_object"},
                temperature=0,
            )
        except openai.APITimeoutError as e:
            raise ProviderTimeout(
                f"OpenAI request timed out after {self.timeout}s",
                provider=self.provider_name,
            ) from e
        except openai.OpenAIError as e:
            raise ProviderError(
                f"OpenAI analysis failed: {e}",
                provider=self.provider_name,
                details={"error_type": type(e).__name__},
            ) from e

        if not response.choices:
            raise ProviderError("OpenAI returned no choices", provider=self.provider_name)

        return self.parse_response(response.choices[0].message.content or "")

    def parse_response(self, content: str) -> Dict[str, Any]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ProviderError(
                "Invalid GPT-4o response format",
                provider=self.provider_name,
                details={"content": content[:200]},
            ) from e

        if not isinstance(data, Mapping):
            raise ProviderError(
                "Invalid GPT-4o response format",
                provider=self.provider_name,
                details={"content": content[:200]},
            )
        return dict(data)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
