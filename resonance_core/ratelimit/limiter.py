"""
Rate Limiter
============

Fixed window rate limiter guarding calls to the primary emotion provider.

A window opens on the first call after the previous one expired; within a
window at most ``max_requests`` calls are admitted. Denied calls do not
consume budget.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

import structlog

from resonance_core.core.exceptions import ResonanceError

logger = structlog.get_logger(__name__)


class RateLimitExceeded(ResonanceError):
    """Raised when rate limit is exceeded"""

    code = "rate_limit_exceeded"

    def __init__(
        self,
        message: str,
        limit: int,
        remaining: int,
        reset_at: datetime,
        retry_after: float,
    ):
        super().__init__(
            message,
            details={"limit": limit, "retry_after": retry_after},
        )
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at
        self.retry_after = retry_after


@dataclass
class RateLimitConfig:
    """Configuration for the fixed window limiter"""

    max_requests: int = 100
    window_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")


@dataclass(frozen=True)
class RateLimiterState:
    """Point-in-time view of the limiter window"""

    window_start: Optional[float]
    count: int


@dataclass
class RateLimitResult:
    """Result of an admitted call"""

    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime
    retry_after: float = 0.0

    @property
    def headers(self) -> Dict[str, str]:
        """Get rate limit headers"""
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.remaining)),
            "X-RateLimit-Reset": str(int(self.reset_at.timestamp())),
            "Retry-After": str(int(self.retry_after)) if self.retry_after > 0 else "",
        }


class FixedWindowLimiter:
    """
    Fixed window rate limiter.

    Usage:
        limiter = FixedWindowLimiter(RateLimitConfig(max_requests=100))
        limiter.consume()  # raises RateLimitExceeded once over budget

    The counter lives behind a lock so concurrent callers never lose an
    update. ``consume`` never blocks on I/O.
    """

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._window_start: Optional[float] = None
        self._count = 0
        self._logger = structlog.get_logger(self.__class__.__name__)

    def consume(self, cost: int = 1) -> RateLimitResult:
        """
        Take ``cost`` units from the current window.

        Raises:
            RateLimitExceeded: If the window has no budget left. The counter
                is left untouched.
        """
        if cost < 1:
            raise ValueError("cost must be at least 1")

        with self._lock:
            now = self._clock()
            self._roll_window(now)

            if self._count + cost > self.config.max_requests:
                retry_after = self._seconds_until_reset(now)
                self._logger.warning(
                    "rate_limit_exceeded",
                    limit=self.config.max_requests,
                    count=self._count,
                    retry_after=retry_after,
                )
                raise RateLimitExceeded(
                    message=(
                        f"Rate limit of {self.config.max_requests} requests per "
                        f"{self.config.window_seconds:g}s exceeded"
                    ),
                    limit=self.config.max_requests,
                    remaining=0,
                    reset_at=self._reset_at(retry_after),
                    retry_after=retry_after,
                )

            self._count += cost
            retry_after = self._seconds_until_reset(now)
            return RateLimitResult(
                allowed=True,
                limit=self.config.max_requests,
                remaining=self.config.max_requests - self._count,
                reset_at=self._reset_at(retry_after),
            )

    @property
    def remaining(self) -> int:
        """Calls left in the current window"""
        with self._lock:
            if self._window_expired(self._clock()):
                return self.config.max_requests
            return self.config.max_requests - self._count

    def snapshot(self) -> RateLimiterState:
        with self._lock:
            if self._window_expired(self._clock()):
                return RateLimiterState(window_start=None, count=0)
            return RateLimiterState(window_start=self._window_start, count=self._count)

    def reset(self) -> None:
        """Discard the current window"""
        with self._lock:
            self._window_start = None
            self._count = 0

    def _window_expired(self, now: float) -> bool:
        return (
            self._window_start is None
            or now - self._window_start >= self.config.window_seconds
        )

    def _roll_window(self, now: float) -> None:
        if self._window_expired(now):
            self._window_start = now
            self._count = 0

    def _seconds_until_reset(self, now: float) -> float:
        if self._window_start is None:
            return 0.0
        return max(0.0, self._window_start + self.config.window_seconds - now)

    @staticmethod
    def _reset_at(retry_after: float) -> datetime:
        return datetime.fromtimestamp(time.time() + retry_after, tz=timezone.utc)
