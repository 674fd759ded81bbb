"""Minimum-interval throttle for vendor API calls.

Each provider owns one limiter. A call to `wait()` blocks until at least
`interval_ms` has passed since the previous permitted call and then records
the current time. Waiting and recording happen under the same lock, so two
threads sharing a provider cannot both slip through inside one interval.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateLimiter:
    """Thread-safe minimum-interval rate limiter."""

    interval_ms: int
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep
    _last_call: Optional[float] = field(default=None, init=False)
    _lock: Lock = field(default_factory=Lock, init=False)

    @property
    def interval_seconds(self) -> float:
        return max(0, self.interval_ms) / 1000.0

    @property
    def last_call(self) -> Optional[float]:
        """Clock reading of the last permitted call (None before the first)."""
        with self._lock:
            return self._last_call

    def wait(self, provider_id: str = "") -> float:
        """Block until the next call is allowed.

        Args:
            provider_id: Only used for log context

        Returns:
            Seconds slept (0.0 when no wait was needed)
        """
        with self._lock:
            slept = 0.0
            if self._last_call is not None and self.interval_seconds > 0:
                elapsed = self.clock() - self._last_call
                remaining = self.interval_seconds - elapsed
                if remaining > 0:
                    logger.debug(f"Rate limit for {provider_id or 'provider'}: waiting {remaining:.2f}s")
                    self.sleep(remaining)
                    slept = remaining
            self._last_call = self.clock()
            return slept

    def reset(self) -> None:
        with self._lock:
            self._last_call = None
