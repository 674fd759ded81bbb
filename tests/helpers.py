"""Candle builders, a manual clock and a scriptable provider shared by the tests."""

from __future__ import annotations

from typing import Any, Sequence
from unittest.mock import MagicMock, Mock

from marketsignal.errors import ProviderError
from marketsignal.market_data.base import MarketDataProvider
from marketsignal.ratelimit import RateLimiter
from marketsignal.types import Candle, CandleSeries

DAY_MS = 86_400_000
BASE_TS = 1_704_067_200_000  # 2024-01-01T00:00:00Z


def make_candle(close: float, idx: int = 0, *, spread: float = 1.0, open_: float | None = None) -> Candle:
    """Candle at BASE_TS + idx days with a symmetric high/low spread around open/close."""
    o = close if open_ is None else open_
    return Candle(
        timestamp=BASE_TS + idx * DAY_MS,
        open=o,
        high=max(o, close) + spread,
        low=min(o, close) - spread,
        close=close,
        volume=1000.0,
    )


def make_candles(closes: Sequence[float], *, spread: float = 1.0) -> list[Candle]:
    return [make_candle(c, i, spread=spread) for i, c in enumerate(closes)]


def make_series(closes: Sequence[float], symbol: str = "TEST", timeframe: str = "1d") -> CandleSeries:
    return CandleSeries(symbol=symbol, timeframe=timeframe, candles=tuple(make_candles(closes)))


class ManualClock:
    """Monotonic-style clock advanced by hand; `sleep` advances it too."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedProvider(MarketDataProvider):
    """Provider whose fetch result (or ProviderError) is set by the test."""

    def __init__(self, name: str, *, series: CandleSeries | None = None, fail: bool = False):
        super().__init__(session=MagicMock(), rate_limiter=RateLimiter(0))
        self._name = name
        self.series = series
        self.fail = fail
        self.calls: list[tuple[str, str, int]] = []
        self.search_calls: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    def fetch_series(self, symbol, timeframe, limit):
        self.calls.append((symbol, timeframe, limit))
        if self.fail or self.series is None:
            raise ProviderError(self.name, symbol, "scripted failure")
        return self.series

    def search_instruments(self, query):
        self.search_calls.append(query)
        return [{"symbol": query.upper(), "name": f"{self.name} match"}]


def json_response(payload: Any, status: int = 200) -> Mock:
    """Mock of requests.Response returning `payload` from .json()."""
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp
