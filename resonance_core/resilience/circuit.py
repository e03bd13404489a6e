"""
Circuit Breaker
===============

Consecutive-failure circuit breaker for the primary emotion provider.

Author: Platform Engineering Team
Version: 2.0.0
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

import structlog

from resonance_core.core.exceptions import ResonanceError

logger = structlog.get_logger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states"""

    CLOSED = "CLOSED"  # Normal operation
    OPEN = "OPEN"  # Failing, calls diverted
    HALF_OPEN = "HALF_OPEN"  # Single probe outstanding


class CircuitOpenError(ResonanceError):
    """Raised when circuit is open"""

    code = "circuit_open"

    def __init__(
        self,
        message: str,
        circuit_name: str,
        retry_after: float,
    ):
        super().__init__(
            message,
            details={"circuit_name": circuit_name, "retry_after": retry_after},
        )
        self.circuit_name = circuit_name
        self.retry_after = retry_after


@dataclass
class CircuitConfig:
    """Circuit breaker configuration"""

    failure_threshold: int = 5  # Consecutive failures before opening
    reset_timeout_seconds: float = 1.0  # Time since last failure before a probe

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if self.reset_timeout_seconds <= 0:
            raise ValueError("reset_timeout_seconds must be positive")


@dataclass(frozen=True)
class CircuitBreakerState:
    """Point-in-time view of the breaker"""

    state: CircuitState
    failure_count: int
    last_failure_timestamp: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "failure_count": self.failure_count,
            "last_failure_timestamp": self.last_failure_timestamp,
        }


@dataclass
class CircuitMetrics:
    """Metrics for a circuit breaker"""

    successful_calls: int = 0
    failed_calls: int = 0
    rejected_calls: int = 0
    probes: int = 0
    state_changes: int = 0
    last_failure_time: Optional[datetime] = None
    last_success_time: Optional[datetime] = None
    last_state_change: Optional[datetime] = None
    current_state: CircuitState = CircuitState.CLOSED

    @property
    def total_calls(self) -> int:
        return self.successful_calls + self.failed_calls

    @property
    def failure_rate(self) -> float:
        """Get current failure rate"""
        if self.total_calls == 0:
            return 0.0
        return self.failed_calls / self.total_calls

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "total_calls": self.total_calls,
            "successful_calls": self.successful_calls,
            "failed_calls": self.failed_calls,
            "rejected_calls": self.rejected_calls,
            "probes": self.probes,
            "failure_rate": self.failure_rate,
            "state_changes": self.state_changes,
            "current_state": self.current_state.value,
            "last_failure_time": (
                self.last_failure_time.isoformat()
                if self.last_failure_time
                else None
            ),
            "last_success_time": (
                self.last_success_time.isoformat()
                if self.last_success_time
                else None
            ),
        }


class CircuitBreaker:
    """
    Circuit breaker for the primary provider.

    States:
    - CLOSED: Normal operation, calls pass through
    - OPEN: ``failure_threshold`` consecutive failures seen, calls diverted
    - HALF_OPEN: Reset timeout elapsed, exactly one probe call admitted

    The caller drives the breaker:

        if breaker.is_open():
            return await fallback()
        try:
            result = await primary()
        except ProviderError:
            breaker.on_failure()
            raise
        breaker.on_success()

    A probe that never reports back (cancelled, or stopped by the rate
    limiter) is abandoned after another ``reset_timeout_seconds`` and a new
    probe is admitted.
    """

    def __init__(
        self,
        name: str = "primary",
        config: Optional[CircuitConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.config = config or CircuitConfig()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_at: Optional[float] = None
        self._probe_started_at: Optional[float] = None
        self._metrics = CircuitMetrics()
        self._lock = threading.RLock()
        self._logger = structlog.get_logger(f"circuit.{name}")

    @property
    def state(self) -> CircuitState:
        """Get current state"""
        with self._lock:
            return self._state

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failure_count

    @property
    def last_failure_timestamp(self) -> Optional[float]:
        with self._lock:
            return self._last_failure_at

    @property
    def metrics(self) -> CircuitMetrics:
        """Get metrics"""
        with self._lock:
            self._metrics.current_state = self._state
            return self._metrics

    def snapshot(self) -> CircuitBreakerState:
        with self._lock:
            return CircuitBreakerState(
                state=self._state,
                failure_count=self._failure_count,
                last_failure_timestamp=self._last_failure_at,
            )

    def is_open(self) -> bool:
        """
        Check whether calls must be diverted.

        Returns False exactly once after the reset timeout elapses, moving
        the breaker to HALF_OPEN; that call is the probe.
        """
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return False

            now = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                if (
                    self._probe_started_at is not None
                    and now - self._probe_started_at >= self.config.reset_timeout_seconds
                ):
                    self._logger.warning("circuit_probe_abandoned", circuit=self.name)
                    self._admit_probe(now)
                    return False
                self._metrics.rejected_calls += 1
                return True

            if self._reset_due(now):
                self._transition_to(CircuitState.HALF_OPEN)
                self._admit_probe(now)
                return False

            self._metrics.rejected_calls += 1
            return True

    def should_attempt_reset(self) -> bool:
        """True once the reset timeout has elapsed since the last failure"""
        with self._lock:
            return self._reset_due(self._clock())

    def retry_after(self) -> float:
        """Seconds until a probe may be admitted"""
        with self._lock:
            if self._last_failure_at is None or self._state == CircuitState.CLOSED:
                return 0.0
            elapsed = self._clock() - self._last_failure_at
            return max(0.0, self.config.reset_timeout_seconds - elapsed)

    def on_failure(self) -> None:
        """Record a failed primary call"""
        with self._lock:
            self._last_failure_at = self._clock()
            self._metrics.failed_calls += 1
            self._metrics.last_failure_time = datetime.now(timezone.utc)

            if self._state == CircuitState.HALF_OPEN:
                # Failed probe; timer restarts from this failure
                self._failure_count = max(
                    self._failure_count, self.config.failure_threshold
                )
                self._transition_to(CircuitState.OPEN)
            else:
                self._failure_count = min(
                    self._failure_count + 1, self.config.failure_threshold
                )
                if (
                    self._state == CircuitState.CLOSED
                    and self._failure_count >= self.config.failure_threshold
                ):
                    self._transition_to(CircuitState.OPEN)

            self._logger.warning(
                "circuit_call_failed",
                circuit=self.name,
                failure_count=self._failure_count,
                state=self._state.value,
            )

    def on_success(self) -> None:
        """Record a successful primary call"""
        with self._lock:
            self._failure_count = 0
            self._metrics.successful_calls += 1
            self._metrics.last_success_time = datetime.now(timezone.utc)
            if self._state != CircuitState.CLOSED:
                self._transition_to(CircuitState.CLOSED)

    def reset(self) -> None:
        """Force reset the circuit to closed state"""
        with self._lock:
            self._failure_count = 0
            self._last_failure_at = None
            if self._state != CircuitState.CLOSED:
                self._transition_to(CircuitState.CLOSED)
            self._logger.info("circuit_reset", circuit=self.name)

    def _reset_due(self, now: float) -> bool:
        if self._last_failure_at is None:
            return False
        return now - self._last_failure_at >= self.config.reset_timeout_seconds

    def _admit_probe(self, now: float) -> None:
        self._probe_started_at = now
        self._metrics.probes += 1

    def _transition_to(self, new_state: CircuitState) -> None:
        """Transition to a new state"""
        old_state = self._state
        self._state = new_state
        self._metrics.state_changes += 1
        self._metrics.last_state_change = datetime.now(timezone.utc)

        if new_state != CircuitState.HALF_OPEN:
            self._probe_started_at = None

        self._logger.info(
            "circuit_state_change",
            circuit=self.name,
            old_state=old_state.value,
            new_state=new_state.value,
            failure_count=self._failure_count,
        )
