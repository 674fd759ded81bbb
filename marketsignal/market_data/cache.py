"""Time-boxed in-memory cache for candle series.

Keys are exact-match tuples of (symbol, timeframe, limit, provider). A request
for `limit=100` never reuses an entry stored for `limit=200`.
"""

from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Callable, Optional

from marketsignal.types import CacheEntry, CacheKey, CandleSeries

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 15 * 60
DEFAULT_PROVIDER_KEY = "default"


def make_key(symbol: str, timeframe: str, limit: int, provider: Optional[str]) -> CacheKey:
    return (symbol, str(timeframe), int(limit), provider or DEFAULT_PROVIDER_KEY)


class SeriesCache:
    """TTL cache for CandleSeries, lazily evicted on lookup."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, *, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.fetched_at > self.ttl_seconds

    def get(self, symbol: str, timeframe: str, limit: int, provider: Optional[str] = None) -> Optional[CandleSeries]:
        key = make_key(symbol, timeframe, limit, provider)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            return entry.series

    def set(
        self,
        symbol: str,
        timeframe: str,
        limit: int,
        provider: Optional[str],
        series: CandleSeries,
    ) -> None:
        key = make_key(symbol, timeframe, limit, provider)
        with self._lock:
            self._entries[key] = CacheEntry(key=key, series=series, fetched_at=self._clock())

    def cleanup(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._entries.items() if self._expired(entry, now)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Cache cleanup evicted {len(stale)} entries")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
