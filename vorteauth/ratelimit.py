"""In-memory fixed-window limiter for challenge issuance.

Each key may be admitted once per window. The limiter keeps a single map of
key to expiry timestamp guarded by a lock; the expiry check and the write
that follows an admission happen inside the same critical section, so two
requests racing on one key can never both be admitted.

Lapsed entries are not removed on expiry. They are swept when the map is
touched after ``sweep_interval`` seconds, or when it reaches ``capacity``.
Once the map is full of live windows the ones closest to closing are evicted,
so the one-per-window guarantee does not hold for those keys at capacity.
"""

from __future__ import annotations

import heapq
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, NamedTuple, Optional

from .constants import RATE_LIMIT_CAPACITY, RATE_LIMIT_WINDOW_SECONDS, SWEEP_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class RateLimitKey(NamedTuple):
    rp_id: str
    fingerprint: str


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission attempt."""

    admitted: bool
    retry_after: int
    reset: int


class RateLimiter:
    def __init__(
        self,
        window: float = RATE_LIMIT_WINDOW_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
        capacity: int = RATE_LIMIT_CAPACITY,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ) -> None:
        if window <= 0:
            raise ValueError("Rate-limit window must be positive")
        if capacity < 1:
            raise ValueError("Rate-limit capacity must be at least 1")
        self.window = float(window)
        self.capacity = capacity
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._expiry: Dict[RateLimitKey, float] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._expiry)

    def admit(self, key: RateLimitKey, now: Optional[float] = None) -> RateLimitDecision:
        """Admit ``key`` if its window has lapsed, otherwise report the wait."""

        with self._lock:
            if now is None:
                now = self._clock()
            expires_at = self._expiry.get(key)
            if expires_at is not None and expires_at > now:
                retry_after = max(1, math.ceil(expires_at - now))
                return RateLimitDecision(admitted=False, retry_after=retry_after, reset=retry_after)

            self._maybe_sweep(now, key)
            self._expiry[key] = now + self.window
            return RateLimitDecision(admitted=True, retry_after=0, reset=math.ceil(self.window))

    def _maybe_sweep(self, now: float, key: RateLimitKey) -> None:
        full = key not in self._expiry and len(self._expiry) >= self.capacity
        if not full and now - self._last_sweep < self.sweep_interval:
            return
        self._last_sweep = now
        lapsed = [stale for stale, expires_at in self._expiry.items() if expires_at <= now]
        for stale in lapsed:
            del self._expiry[stale]

        overflow = len(self._expiry) - self.capacity + (0 if key in self._expiry else 1)
        if overflow > 0:
            # Still full of live windows: give up the ones closest to closing.
            victims = heapq.nsmallest(overflow, self._expiry.items(), key=lambda item: item[1])
            for victim, _ in victims:
                del self._expiry[victim]
            logger.warning("Rate-limit map at capacity, evicted %d live entries", len(victims))
        elif lapsed:
            logger.debug("Swept %d lapsed rate-limit entries", len(lapsed))


__all__ = ["RateLimitDecision", "RateLimitKey", "RateLimiter"]
