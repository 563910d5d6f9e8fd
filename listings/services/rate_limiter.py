"""
Rate limiter for generative service calls.

Enforces a minimum interval between consecutive calls to the generative
service across the whole process. The limiter is created once per process
(get_rate_limiter) and handed to the optimization engine; tests build their
own instance with a fake clock.

Slots are reserved under a thread lock: each caller takes the later of "now"
and "previous slot + interval", then sleeps outside the lock until its slot.
Concurrent callers (several event loops in different request threads, or the
four calls of one optimization) therefore end up evenly spaced.
"""

import asyncio
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL = 1.0


class GenerationRateLimiter:
    """
    Minimum-interval gate for generative calls.

    Usage:
        limiter = get_rate_limiter()
        await limiter.acquire()
        text = await client.generate(prompt)
    """

    def __init__(
        self,
        min_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Args:
            min_interval: Seconds between calls (default GEMINI_MIN_REQUEST_INTERVAL)
            clock: Monotonic clock, injectable for tests
            sleep: Async sleep, injectable for tests
        """
        if min_interval is None:
            min_interval = getattr(
                settings, "GEMINI_MIN_REQUEST_INTERVAL", DEFAULT_MIN_INTERVAL
            )
        self.min_interval = float(min_interval)
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_slot: Optional[float] = None
        self.request_count = 0
        self.last_request_time: Optional[datetime] = None

    def reserve(self) -> float:
        """
        Reserve the next call slot.

        Returns:
            Seconds the caller must wait before dispatching (0 if none)
        """
        with self._lock:
            now = self._clock()
            if self._next_slot is None or self._next_slot <= now:
                slot = now
            else:
                slot = self._next_slot
            self._next_slot = slot + self.min_interval
            self.request_count += 1
            self.last_request_time = datetime.now(timezone.utc)
            return slot - now

    async def acquire(self) -> None:
        """Wait until this caller may issue its generative call."""
        delay = self.reserve()
        if delay > 0:
            logger.debug(f"Rate limiting: waiting {delay * 1000:.0f}ms")
            await self._sleep(delay)

    def get_usage_stats(self) -> Dict[str, Any]:
        """Calls made so far, time of the last reservation and the interval."""
        return {
            "totalRequests": self.request_count,
            "lastRequestTime": (
                self.last_request_time.isoformat() if self.last_request_time else None
            ),
            "rateLimitInterval": int(self.min_interval * 1000),
        }

    def reset(self) -> None:
        with self._lock:
            self._next_slot = None
            self.request_count = 0
            self.last_request_time = None


_rate_limiter: Optional[GenerationRateLimiter] = None
_rate_limiter_lock = threading.Lock()


def get_rate_limiter() -> GenerationRateLimiter:
    """Return the process-wide rate limiter, creating it on first use."""
    global _rate_limiter
    with _rate_limiter_lock:
        if _rate_limiter is None:
            _rate_limiter = GenerationRateLimiter()
        return _rate_limiter
