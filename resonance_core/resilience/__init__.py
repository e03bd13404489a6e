"""
Resilience
==========

Circuit breaking for the primary emotion provider.
"""

from resonance_core.resilience.circuit import (
    CircuitBreaker,
    CircuitBreakerState,
    CircuitConfig,
    CircuitMetrics,
    CircuitOpenError,
    CircuitState,
)

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerState",
    "CircuitConfig",
    "CircuitMetrics",
    "CircuitOpenError",
    "CircuitState",
]
