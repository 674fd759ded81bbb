"""Abstract provider interface for market data ingestion.

Every vendor adapter turns its native payload into a canonical
`CandleSeries`. Adapters share four responsibilities:

- map the canonical timeframe to the vendor's interval vocabulary
- call the rate limiter before every network request
- sort output chronologically ascending, whatever the vendor order
- keep only the most recent `limit` candles

Adapters never retry. Any failure is raised as `ProviderError` and the
aggregator decides whether to fall back to another provider.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping

import requests

from marketsignal.errors import ProviderError, UnsupportedTimeframeError
from marketsignal.ratelimit import RateLimiter
from marketsignal.types import Candle, CandleSeries, InstrumentMatch, ProviderDescriptor, Timeframe


@dataclass(frozen=True)
class TimeframeSpec:
    """Vendor identifier and duration of one timeframe."""

    api: str  # Vendor-specific identifier (e.g., "5min", "60", "1day")
    delta: timedelta  # Duration of one candle
    step_ms: int  # Duration in milliseconds


# Canonical durations; adapters pair them with their own API identifiers.
TIMEFRAME_DELTAS: dict[str, timedelta] = {
    "1m": timedelta(minutes=1),
    "5m": timedelta(minutes=5),
    "15m": timedelta(minutes=15),
    "30m": timedelta(minutes=30),
    "1h": timedelta(hours=1),
    "4h": timedelta(hours=4),
    "1d": timedelta(days=1),
    "1w": timedelta(weeks=1),
    "1M": timedelta(days=30),
}


def build_timeframes(api_names: Mapping[str, str]) -> dict[str, TimeframeSpec]:
    """Build a timeframe table from canonical key -> vendor identifier."""
    table = {}
    for key, api in api_names.items():
        delta = TIMEFRAME_DELTAS[key]
        table[key] = TimeframeSpec(api=api, delta=delta, step_ms=int(delta.total_seconds() * 1000))
    return table


def parse_datetime_ms(value: str) -> int:
    """Parse a vendor date/datetime string ("2024-01-02" or "2024-01-02 15:30:00") as UTC millis."""
    dt = datetime.fromisoformat(value.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


class MarketDataProvider(ABC):
    """Base class for market data provider variants."""

    BASE_URL: str = ""
    RATE_LIMIT_INTERVAL_MS: int = 0
    DEFAULT_TIMEOUT = 20  # seconds
    _TIMEFRAMES: dict[str, TimeframeSpec] = {}

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "User-Agent": "marketsignal/1.0",
        })
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter(self.RATE_LIMIT_INTERVAL_MS)

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key of this provider (e.g. "coingecko")."""

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def supported_timeframes(self) -> tuple[str, ...]:
        return tuple(self._TIMEFRAMES)

    def descriptor(self, *, is_default: bool = False) -> ProviderDescriptor:
        return ProviderDescriptor(
            name=self.name,
            is_default=is_default,
            rate_limit_interval_ms=self.rate_limiter.interval_ms,
        )

    def get_timeframe_spec(self, timeframe: Timeframe, symbol: str = "") -> TimeframeSpec:
        """Look up the vendor timeframe entry.

        Raises:
            UnsupportedTimeframeError: If the vendor cannot serve the timeframe
        """
        tf_key = str(timeframe)
        if tf_key not in self._TIMEFRAMES:
            raise UnsupportedTimeframeError(self.name, symbol, tf_key, self.supported_timeframes)
        return self._TIMEFRAMES[tf_key]

    @abstractmethod
    def fetch_series(self, symbol: str, timeframe: Timeframe, limit: int) -> CandleSeries:
        """Fetch the most recent `limit` candles, oldest first.

        Raises:
            ProviderError: On any failure
        """

    @abstractmethod
    def search_instruments(self, query: str) -> list[InstrumentMatch]:
        """Search the vendor's instrument catalogue.

        Raises:
            ProviderError: On any failure
        """

    def _get_json(self, path: str, *, params: Mapping[str, Any], symbol: str) -> Any:
        """Perform one rate-limited GET and decode the JSON body."""
        self.rate_limiter.wait(self.name)
        url = f"{self.BASE_URL}{path}"
        try:
            resp = self._session.get(url, params=dict(params), timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProviderError(self.name, symbol, exc) from exc

    def _build_series(
        self,
        *,
        symbol: str,
        timeframe: Timeframe,
        candles: Iterable[Candle],
        limit: int,
    ) -> CandleSeries:
        """Sort ascending, drop duplicate timestamps, keep the newest `limit` candles."""
        by_ts: dict[int, Candle] = {}
        for candle in candles:
            by_ts[candle.timestamp] = candle

        if not by_ts:
            raise ProviderError(self.name, symbol, f"no candles returned for timeframe {timeframe}")

        ordered = [by_ts[ts] for ts in sorted(by_ts)]
        if limit and limit > 0:
            ordered = ordered[-limit:]

        series = CandleSeries(symbol=symbol, timeframe=timeframe, candles=tuple(ordered))
        try:
            series.validate()
        except ValueError as exc:
            raise ProviderError(self.name, symbol, exc) from exc
        return series

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
