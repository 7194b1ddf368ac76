"""Leading-edge rate limiting for high-frequency pointer events."""

from __future__ import annotations

import time
from typing import Callable, Optional

Clock = Callable[[], float]


class RateLimiter:
    """Accept at most one call per ``interval_s`` seconds.

    Calls arriving inside the window are rejected, not queued. The first call
    is always accepted.

    Args:
        interval_s: Minimum time between two accepted calls.
        clock: Monotonic time source in seconds (injectable for tests).
    """

    def __init__(self, interval_s: float, clock: Optional[Clock] = None) -> None:
        if interval_s < 0:
            raise ValueError("interval_s must be >= 0")
        self.interval_s = float(interval_s)
        self._clock = clock or time.monotonic
        self._last: Optional[float] = None

    @classmethod
    def from_ms(cls, interval_ms: float, clock: Optional[Clock] = None) -> RateLimiter:
        return cls(interval_ms / 1000.0, clock)

    def try_acquire(self) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self.interval_s:
            return False
        self._last = now
        return True

    def reset(self) -> None:
        self._last = None

    @property
    def last_accepted(self) -> Optional[float]:
        return self._last
