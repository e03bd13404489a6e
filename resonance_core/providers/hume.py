"""
Hume Emotion Provider

Primary emotion-analysis client, talking to the Hume API over HTTP.
"""

import os
import time
from typing import Any, Dict, Mapping, Optional

import httpx
import structlog

from resonance_core.providers.base import (
    EmotionProvider,
    EmotionProviderName,
    ProviderConfigurationError,
    ProviderError,
    ProviderTimeout,
    RawEmotionScore,
)

logger = structlog.get_logger(__name__)


SCORE_KEYS = ("arousal", "valence", "confidence")


class HumeProvider(EmotionProvider):
    """
    Hume emotion provider.

    Posts ``{"text": ...}`` to ``{base_url}{analyze_path}`` and expects the
    reading either at the top level of the response or under ``"scores"``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.hume.ai/v1",
        analyze_path: str = "/emotion/analyze",
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key or os.getenv("HUME_API_KEY")
        self.base_url = base_url.rstrip("/")
        self.analyze_path = analyze_path
        self.timeout = timeout
        self._client = client

    @property
    def provider_name(self) -> str:
        return EmotionProviderName.HUME.value

    async def initialize(self) -> None:
        if not self.api_key:
            raise ProviderConfigurationError(
                "HUME_API_KEY is missing",
                provider=self.provider_name,
            )
        await self._get_client()
        logger.info("hume_initialized", base_url=self.base_url)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            if not self.api_key:
                raise ProviderConfigurationError(
                    "HUME_API_KEY is missing",
                    provider=self.provider_name,
                )
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "X-Hume-Api-Key": self.api_key,
                    "Content-Type": "application/json",
                },
                timeout=httpx.Timeout(self.timeout),
            )
        return self._client

    async def analyze(self, text: str) -> RawEmotionScore:
        client = await self._get_client()
        start_time = time.monotonic()

        try:
            response = await client.post(self.analyze_path, json={"text": text})
        except httpx.TimeoutException as e:
            raise ProviderTimeout(
                f"Hume request timed out after {self.timeout}s",
                provider=self.provider_name,
                details={"timeout": self.timeout},
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                "Failed to reach Hume API",
                provider=self.provider_name,
                details={"error": str(e)},
            ) from e

        latency_ms = (time.monotonic() - start_time) * 1000

        if response.status_code != 200:
            raise ProviderError(
                f"Hume API error: {response.status_code}",
                provider=self.provider_name,
                details={"status_code": response.status_code, "body": response.text},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                "Hume returned a non-JSON response",
                provider=self.provider_name,
            ) from e

        score = self._parse_response(data)
        logger.debug("hume_analysis_completed", latency_ms=round(latency_ms, 2))
        return score

    def _parse_response(self, data: Any) -> Dict[str, Any]:
        if isinstance(data, Mapping) and isinstance(data.get("scores"), Mapping):
            data = data["scores"]
        if not isinstance(data, Mapping) or not any(k in data for k in SCORE_KEYS):
            raise ProviderError(
                "Hume response has no emotion scores",
                provider=self.provider_name,
            )
        return {k: data[k] for k in SCORE_KEYS if k in data}

    async def health_check(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
