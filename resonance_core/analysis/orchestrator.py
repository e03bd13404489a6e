"""
Emotional Analysis Orchestrator

Main orchestration layer that provides:
- Circuit breaking around the primary provider
- Rate limiting of primary calls
- Score normalization and reliability checks
- Automatic fallback to the secondary provider
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

import structlog

from resonance_core.config import ResonanceSettings, get_settings
from resonance_core.core.exceptions import ResonanceError
from resonance_core.providers.base import (
    EmotionProvider,
    ProviderError,
    ProviderTimeout,
    RawEmotionScore,
)
from resonance_core.providers.hume import HumeProvider
from resonance_core.providers.openai_fallback import OpenAIFallbackProvider
from resonance_core.ratelimit.limiter import (
    FixedWindowLimiter,
    RateLimitConfig,
    RateLimitExceeded,
)
from resonance_core.resilience.circuit import (
    CircuitBreaker,
    CircuitConfig,
    CircuitOpenError,
    CircuitState,
)
from resonance_core.scoring.models import EmotionalScore, ScoreSource
from resonance_core.scoring.scorer import (
    EmotionalScorer,
    ScoreBelowThreshold,
    ScoringThresholds,
)

logger = structlog.get_logger(__name__)


class FallbackExhausted(ResonanceError):
    """The fallback provider failed; no further recovery is attempted."""

    code = "fallback_exhausted"

    def __init__(self, message: str, reason: str):
        super().__init__(message, details={"reason": reason})
        self.reason = reason


@dataclass
class OrchestratorConfig:
    """Configuration for the analysis orchestrator."""

    # Default per-call timeout for each provider
    provider_timeout_seconds: float = 5.0

    def __post_init__(self) -> None:
        if self.provider_timeout_seconds <= 0:
            raise ValueError("provider_timeout_seconds must be positive")


@dataclass(frozen=True)
class AnalysisStatus:
    """Operational view of the primary analysis path."""

    status: str
    circuit_breaker_state: CircuitState
    failure_count: int
    rate_limit_remaining: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "circuit_breaker_state": self.circuit_breaker_state.value,
            "failure_count": self.failure_count,
            "rate_limit_remaining": self.rate_limit_remaining,
        }


class EmotionalAnalysisOrchestrator:
    """
    Resilient emotion analysis.

    Each call makes at most one primary attempt and at most one fallback
    attempt. Rate limiting is a hard stop and is never masked by the
    fallback.
    """

    def __init__(
        self,
        primary: EmotionProvider,
        fallback: EmotionProvider,
        circuit_breaker: Optional[CircuitBreaker] = None,
        rate_limiter: Optional[FixedWindowLimiter] = None,
        scorer: Optional[EmotionalScorer] = None,
        config: Optional[OrchestratorConfig] = None,
    ):
        self.primary = primary
        self.fallback = fallback
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            name=primary.provider_name
        )
        self.rate_limiter = rate_limiter or FixedWindowLimiter()
        self.scorer = scorer or EmotionalScorer()
        self.config = config or OrchestratorConfig()
        self._logger = structlog.get_logger(self.__class__.__name__)

    async def initialize(self) -> None:
        """Validate both providers' configuration."""
        await self.primary.initialize()
        await self.fallback.initialize()

    async def close(self) -> None:
        await asyncio.gather(self.primary.close(), self.fallback.close())

    async def analyze_emotion(
        self,
        text: str,
        comparison_id: str,
        timeout: Optional[float] = None,
    ) -> EmotionalScore:
        """
        Score the emotional signal of ``text``.

        Args:
            text: Text sample to analyze
            comparison_id: Identifier of the comparison the sample belongs to
            timeout: Per-provider-call timeout in seconds

        Returns:
            Normalized score tagged with the provider that produced it

        Raises:
            RateLimitExceeded: Primary call budget exhausted
            FallbackExhausted: Primary path unusable and fallback failed
        """
        timeout = timeout if timeout is not None else self.config.provider_timeout_seconds
        log = self._logger.bind(comparison_id=comparison_id)

        try:
            return await self._analyze_primary(text, timeout, log)
        except CircuitOpenError as e:
            reason = "circuit_open"
            log.info("primary_skipped", reason=reason, retry_after=e.retry_after)
        except ProviderError as e:
            reason = "provider_error"
            log.warning("primary_failed", reason=reason, error=str(e))
        except ScoreBelowThreshold as e:
            reason = "score_below_threshold"
            log.info("primary_unreliable", reason=reason, arousal=e.score.arousal)

        return await self._analyze_fallback(text, timeout, reason, log)

    async def analyze(self, text: str, comparison_id: str) -> Dict[str, Any]:
        """
        Score ``text`` and return the external response shape.

        Errors are reported in the ``error`` field instead of raised.
        """
        try:
            score = await self.analyze_emotion(text, comparison_id)
        except (RateLimitExceeded, FallbackExhausted) as e:
            self._logger.warning(
                "analysis_failed",
                comparison_id=comparison_id,
                code=e.code,
                error=e.message,
            )
            return {
                "arousal": 0.0,
                "valence": 0.0,
                "confidence": 0.0,
                "source": None,
                "error": e.message,
            }
        return score.to_dict()

    def get_status(self) -> AnalysisStatus:
        state = self.circuit_breaker.snapshot()
        return AnalysisStatus(
            status="operational" if state.state == CircuitState.CLOSED else "degraded",
            circuit_breaker_state=state.state,
            failure_count=state.failure_count,
            rate_limit_remaining=self.rate_limiter.remaining,
        )

    async def _analyze_primary(self, text: str, timeout: float, log: Any) -> EmotionalScore:
        if self.circuit_breaker.is_open():
            raise CircuitOpenError(
                message=f"Circuit {self.circuit_breaker.name} is open",
                circuit_name=self.circuit_breaker.name,
                retry_after=self.circuit_breaker.retry_after(),
            )

        self.rate_limiter.consume()

        try:
            raw = await self._call_provider(self.primary, text, timeout)
        except ProviderError:
            self.circuit_breaker.on_failure()
            raise
        self.circuit_breaker.on_success()

        score = self.scorer.normalize_score(raw, source=ScoreSource.PRIMARY)
        self.scorer.ensure_valid(score)

        log.debug("primary_scored", arousal=score.arousal, valence=score.valence)
        return score

    async def _analyze_fallback(
        self,
        text: str,
        timeout: float,
        reason: str,
        log: Any,
    ) -> EmotionalScore:
        try:
            raw = await self._call_provider(self.fallback, text, timeout)
        except ProviderError as e:
            log.error("fallback_failed", reason=reason, error=str(e))
            raise FallbackExhausted(
                f"Fallback provider {self.fallback.provider_name} failed: {e.message}",
                reason=reason,
            ) from e

        score = self.scorer.normalize_score(raw, source=ScoreSource.FALLBACK)
        if not self.scorer.validate_score(score):
            log.error("fallback_unreliable", reason=reason, arousal=score.arousal)
            raise FallbackExhausted(
                f"Fallback provider {self.fallback.provider_name} score below thresholds "
                f"(arousal={score.arousal:.2f})",
                reason=reason,
            )

        log.info("fallback_scored", reason=reason, arousal=score.arousal)
        return score

    async def _call_provider(
        self,
        provider: EmotionProvider,
        text: str,
        timeout: float,
    ) -> RawEmotionScore:
        """Run one provider call; every failure surfaces as ProviderError."""
        name = provider.provider_name
        try:
            raw = await asyncio.wait_for(provider.analyze(text), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeout(
                f"Provider {name} timed out after {timeout:g}s",
                provider=name,
                details={"timeout": timeout},
            ) from e
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(
                f"Provider {name} error: {e}",
                provider=name,
                details={"error_type": type(e).__name__},
            ) from e

        if not isinstance(raw, (Mapping, EmotionalScore)):
            raise ProviderError(
                f"Provider {name} returned {type(raw).__name__}, expected a mapping",
                provider=name,
            )
        return raw


def create_orchestrator(
    settings: Optional[ResonanceSettings] = None,
    primary: Optional[EmotionProvider] = None,
    fallback: Optional[EmotionProvider] = None,
    clock: Optional[Callable[[], float]] = None,
) -> EmotionalAnalysisOrchestrator:
    """
    Create an orchestrator wired from settings.

    Args:
        settings: Engine settings (defaults to the cached environment settings)
        primary: Primary provider (defaults to Hume)
        fallback: Fallback provider (defaults to OpenAI)
        clock: Monotonic clock shared by the breaker and limiter

    Returns:
        Configured EmotionalAnalysisOrchestrator
    """
    settings = settings or get_settings()
    timeout = settings.provider_timeout_seconds

    primary = primary or HumeProvider(
        api_key=settings.hume_api_key,
        base_url=settings.hume_api_endpoint,
        timeout=timeout,
    )
    fallback = fallback or OpenAIFallbackProvider(
        api_key=settings.openai_api_key,
        model=settings.fallback_model,
        timeout=timeout,
    )

    clock_kwargs = {"clock": clock} if clock is not None else {}

    circuit_breaker = CircuitBreaker(
        name=primary.provider_name,
        config=CircuitConfig(
            failure_threshold=settings.failure_threshold,
            reset_timeout_seconds=settings.reset_timeout_seconds,
        ),
        **clock_kwargs,
    )
    rate_limiter = FixedWindowLimiter(
        config=RateLimitConfig(
            max_requests=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
        ),
        **clock_kwargs,
    )
    scorer = EmotionalScorer(
        ScoringThresholds(min_arousal=settings.min_arousal_threshold)
    )

    logger.info(
        "orchestrator_created",
        primary=primary.provider_name,
        fallback=fallback.provider_name,
        failure_threshold=settings.failure_threshold,
        rate_limit_max=settings.rate_limit_max,
    )

    return EmotionalAnalysisOrchestrator(
        primary=primary,
        fallback=fallback,
        circuit_breaker=circuit_breaker,
        rate_limiter=rate_limiter,
        scorer=scorer,
        config=OrchestratorConfig(provider_timeout_seconds=timeout),
    )
