"""
Emotion Provider - Base Types and Interfaces

Contract shared by the primary and fallback emotion-analysis clients.
A provider takes a text sample and returns a raw reading; the scorer is
responsible for mapping that reading onto the canonical scale.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from resonance_core.core.exceptions import ResonanceError


RawEmotionScore = Mapping[str, Any]


class EmotionProviderName(str, Enum):
    """Known emotion providers."""

    HUME = "hume"
    OPENAI = "openai"


# =============================================================================
# Exceptions
# =============================================================================


class ProviderError(ResonanceError):
    """A provider returned an error, an unusable payload, or timed out."""

    code = "provider_error"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.provider = provider

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["provider"] = self.provider
        return data


class ProviderTimeout(ProviderError):
    """A provider call exceeded its time budget."""

    code = "provider_timeout"


class ProviderConfigurationError(ProviderError):
    """A provider is missing credentials or other required settings."""

    code = "provider_configuration_error"


# =============================================================================
# Interface
# =============================================================================


class EmotionProvider(ABC):
    """Abstract interface for emotion-analysis providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider identifier."""
        pass

    @abstractmethod
    async def analyze(self, text: str) -> RawEmotionScore:
        """
        Analyze the emotional signal of ``text``.

        Returns:
            Mapping with ``arousal``, ``valence`` and optionally ``confidence``

        Raises:
            ProviderError: On transport, API or payload errors
        """
        pass

    async def initialize(self) -> None:
        """Validate configuration before first use."""

    async def health_check(self) -> bool:
        """Check if the provider is usable."""
        return True

    async def close(self) -> None:
        """Clean up provider resources."""
