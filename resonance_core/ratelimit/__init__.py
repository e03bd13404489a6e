"""
Rate Limiter
============

Call budget for the primary emotion provider.
"""

from resonance_core.ratelimit.limiter import (
    FixedWindowLimiter,
    RateLimitConfig,
    RateLimiterState,
    RateLimitExceeded,
    RateLimitResult,
)

__all__ = [
    "FixedWindowLimiter",
    "RateLimitConfig",
    "RateLimiterState",
    "RateLimitExceeded",
    "RateLimitResult",
]
