"""Sliding-window rate limiter.

This module provides a thread-safe limiter enforcing two quotas at once: a
rolling 60 second window and a 24 hour counter. The check and the
recording of a permitted call happen in one critical section, so callers
racing for the last slot are serialized.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from fitrec.shared.constants import CatalogConfig
from fitrec.shared.errors import ApplicationError, ErrorCode, ErrorContext
from fitrec.shared.logging import log_operation_success

logger = logging.getLogger(__name__)


class RateLimitDecision(str, Enum):
    """Which quota denied a call."""

    MINUTE = "minute"
    DAY = "day"


@dataclass(frozen=True)
class RateLimiterStatus:
    requests_this_minute: int
    requests_today: int
    minute_limit: int
    daily_limit: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "requests_this_minute": self.requests_this_minute,
            "requests_today": self.requests_today,
            "minute_limit": self.minute_limit,
            "daily_limit": self.daily_limit,
        }


class SlidingWindowRateLimiter:
    """Thread-safe per-minute sliding window plus daily counter.

    Quota is consumed when a call is permitted, before the call runs, and
    is never given back when the call later fails.

    Args:
        per_minute: Maximum calls within any trailing 60 seconds
        per_day: Maximum calls per 24 hour window
        name: Label used in logs
        clock: Time source returning seconds; ``time.monotonic`` by default
    """

    def __init__(
        self,
        per_minute: int = CatalogConfig.RATE_LIMIT_PER_MINUTE,
        per_day: int = CatalogConfig.RATE_LIMIT_PER_DAY,
        name: str = "catalog",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        context = ErrorContext(
            operation="rate_limiter_init",
            additional_data={"per_minute": per_minute, "per_day": per_day, "name": name},
        )

        if per_minute <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Per-minute limit must be positive, got: {per_minute}",
                context=context,
            )
        if per_day <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Daily limit must be positive, got: {per_day}",
                context=context,
            )

        self.per_minute = per_minute
        self.per_day = per_day
        self.name = name
        self._clock = clock
        self._minute_timestamps: deque[float] = deque()
        self._daily_count = 0
        self._daily_window_start = clock()
        self._lock = threading.Lock()

        log_operation_success(
            logger=logger,
            operation="rate_limiter_init",
            duration_ms=0,
            context=context,
        )

    def try_acquire(self) -> RateLimitDecision | None:
        """Record one call if both quotas allow it.

        Returns:
            None when the call is permitted, otherwise the quota that denied it
        """
        with self._lock:
            now = self._clock()
            self._roll_windows(now)

            if len(self._minute_timestamps) >= self.per_minute:
                decision: RateLimitDecision | None = RateLimitDecision.MINUTE
            elif self._daily_count >= self.per_day:
                decision = RateLimitDecision.DAY
            else:
                self._minute_timestamps.append(now)
                self._daily_count += 1
                decision = None

        if decision is not None:
            logger.warning(
                "Rate limit '%s' denied a call (%s quota exhausted)",
                self.name,
                decision.value,
                extra={"operation": "rate_limiter_acquire"},
            )
        return decision

    def status(self) -> RateLimiterStatus:
        with self._lock:
            self._roll_windows(self._clock())
            return RateLimiterStatus(
                requests_this_minute=len(self._minute_timestamps),
                requests_today=self._daily_count,
                minute_limit=self.per_minute,
                daily_limit=self.per_day,
            )

    def reset(self) -> None:
        with self._lock:
            self._minute_timestamps.clear()
            self._daily_count = 0
            self._daily_window_start = self._clock()

    def _roll_windows(self, now: float) -> None:
        # Caller holds the lock
        if now - self._daily_window_start >= CatalogConfig.DAY_WINDOW:
            self._daily_count = 0
            self._daily_window_start = now

        cutoff = now - CatalogConfig.MINUTE_WINDOW
        while self._minute_timestamps and self._minute_timestamps[0] <= cutoff:
            self._minute_timestamps.popleft()


__all__ = ["RateLimitDecision", "RateLimiterStatus", "SlidingWindowRateLimiter"]
