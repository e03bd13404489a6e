"""Shared pytest fixtures for testing."""

from typing import Any, List, Optional
from uuid import uuid4

import pytest

from resonance_core.providers.base import EmotionProvider, RawEmotionScore
from resonance_core.ratelimit.limiter import FixedWindowLimiter, RateLimitConfig
from resonance_core.resilience.circuit import CircuitBreaker, CircuitConfig
from resonance_core.scoring.scorer import EmotionalScorer


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider(EmotionProvider):
    """Provider returning canned readings or raising canned errors."""

    def __init__(
        self,
        name: str = "stub",
        result: Optional[RawEmotionScore] = None,
        error: Optional[BaseException] = None,
    ):
        self._name = name
        self.result = result if result is not None else {
            "arousal": 0.7,
            "valence": 0.8,
            "confidence": 0.9,
        }
        self.error = error
        self.calls: List[str] = []
        self.initialized = False
        self.closed = False

    @property
    def provider_name(self) -> str:
        return self._name

    async def analyze(self, text: str) -> Any:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.result

    async def initialize(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def circuit_breaker(clock: FakeClock) -> CircuitBreaker:
    return CircuitBreaker(
        name="hume",
        config=CircuitConfig(failure_threshold=5, reset_timeout_seconds=1.0),
        clock=clock,
    )


@pytest.fixture
def rate_limiter(clock: FakeClock) -> FixedWindowLimiter:
    return FixedWindowLimiter(
        RateLimitConfig(max_requests=100, window_seconds=60.0),
        clock=clock,
    )


@pytest.fixture
def scorer() -> EmotionalScorer:
    return EmotionalScorer()


@pytest.fixture
def primary() -> StubProvider:
    return StubProvider(name="hume")


@pytest.fixture
def fallback() -> StubProvider:
    return StubProvider(
        name="openai",
        result={"arousal": 0.6, "valence": 0.7, "confidence": 0.85},
    )


@pytest.fixture
def comparison_id() -> str:
    """Generate a test comparison ID."""
    return str(uuid4())


@pytest.fixture
def make_provider():
    """Factory for stub providers."""
    return StubProvider
