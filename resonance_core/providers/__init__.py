"""
Emotion Providers
=================

Primary (Hume) and fallback (OpenAI) emotion-analysis clients.
"""

from resonance_core.providers.base import (
    EmotionProvider,
    EmotionProviderName,
    ProviderConfigurationError,
    ProviderError,
    ProviderTimeout,
    RawEmotionScore,
)
from resonance_core.providers.hume import HumeProvider
from resonance_core.providers.openai_fallback import OpenAIFallbackProvider

__all__ = [
    "EmotionProvider",
    "EmotionProviderName",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderTimeout",
    "RawEmotionScore",
    "HumeProvider",
    "OpenAIFallbackProvider",
]
