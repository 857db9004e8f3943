"""
Rate Limiter

Provides fixed-window request admission control, shared across all API
endpoints and keyed by client identity (typically the network address).

State is process-local and held in memory. A single lock guards the key map,
so concurrent checks for the same key can neither lose updates nor admit
past capacity, and the background sweep never removes an entry while a
request is evaluating it.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict

logger = logging.getLogger("mediphant.rate_limiter")


@dataclass
class RateLimitEntry:
    """Request count for one key within its current window."""
    count: int
    window_reset_at: float


class RateLimiter:
    """
    Fixed-window counting rate limiter.

    Each key gets at most `max_requests` admissions per window of
    `window_seconds`. A window starts on the first request after the
    previous one expired.
    """

    def __init__(
        self,
        window_seconds: float = 60.0,
        max_requests: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Parameters
        ----------
        window_seconds : float
            Window length W.
        max_requests : int
            Capacity C per key per window.
        clock : Callable[[], float]
            Monotonic time source in seconds. Injectable for tests.
        """
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")

        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = Lock()

    def is_allowed(self, key: str) -> bool:
        """
        Record a request for `key` and report whether it is admitted.

        A denied request does not change the stored entry.
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)

            if entry is None or now > entry.window_reset_at:
                self._entries[key] = RateLimitEntry(
                    count=1,
                    window_reset_at=now + self.window_seconds,
                )
                return True

            if entry.count >= self.max_requests:
                return False

            entry.count += 1
            return True

    def remaining(self, key: str) -> int:
        """Admissions left for `key` in its current window."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return self.max_requests
            return max(0, self.max_requests - entry.count)

    def retry_after(self, key: str) -> int:
        """Whole seconds until `key`'s window resets (at least 1)."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return max(1, math.ceil(self.window_seconds))
            return max(1, math.ceil(entry.window_reset_at - self._clock()))

    def sweep(self) -> int:
        """
        Drop expired entries.

        Returns
        -------
        int
            Number of entries removed.
        """
        with self._lock:
            now = self._clock()
            expired = [
                key for key, entry in self._entries.items()
                if now > entry.window_reset_at
            ]
            for key in expired:
                del self._entries[key]
            return len(expired)

    async def run_sweeper(self, interval_seconds: float = 300.0) -> None:
        """
        Sweep expired entries every `interval_seconds` until cancelled.

        Intended to run as a background task for the lifetime of the app.
        """
        logger.info("Rate limit sweeper started (interval=%.0fs)", interval_seconds)
        try:
            while True:
                await asyncio.sleep(interval_seconds)
                removed = self.sweep()
                if removed:
                    logger.debug("Rate limit sweep removed %d entries", removed)
        except asyncio.CancelledError:
            logger.info("Rate limit sweeper stopped")
            raise

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _live_entry(self, key: str):
        entry = self._entries.get(key)
        if entry is None or self._clock() > entry.window_reset_at:
            return None
        return entry
